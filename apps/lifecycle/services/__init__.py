from .errors import (
    LifecycleError,
    Forbidden,
    NotFound,
    InvalidStateTransition,
    AlreadyInProgress,
    NoEligibleVoters,
    InvalidRequest,
)
from .roles import get_user_role, has_active_representative
from .transitions import (
    get_lifecycle,
    get_lifecycle_state,
    report_death,
    cancel_death_report,
)
from .opening import (
    initiate_consent,
    submit_consent,
    reset_consent,
    get_consent_status,
)
from .deletion import (
    initiate_data_deletion,
    submit_deletion_consent,
    cancel_data_deletion,
    get_deletion_consent_status,
)
from .deceased import sweep_deceased_member, revert_auto_resolved_consent, find_owed_votes
from .connections import get_my_connections, get_action_history

__all__ = [
    'LifecycleError',
    'Forbidden',
    'NotFound',
    'InvalidStateTransition',
    'AlreadyInProgress',
    'NoEligibleVoters',
    'InvalidRequest',
    'get_user_role',
    'has_active_representative',
    'get_lifecycle',
    'get_lifecycle_state',
    'report_death',
    'cancel_death_report',
    'initiate_consent',
    'submit_consent',
    'reset_consent',
    'get_consent_status',
    'initiate_data_deletion',
    'submit_deletion_consent',
    'cancel_data_deletion',
    'get_deletion_consent_status',
    'sweep_deceased_member',
    'revert_auto_resolved_consent',
    'find_owed_votes',
    'get_my_connections',
    'get_action_history',
]
