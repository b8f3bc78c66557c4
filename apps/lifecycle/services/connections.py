"""
Read-only views across families: the caller's connections and a creator's
action history.
"""
from apps.accounts.models import FamilyMember
from ..models import Lifecycle, ConsentDecision, ConsentRecord, DeletionConsentRecord, LifecycleActionLog
from .roles import require_representative


def get_my_connections(user):
    """
    Every creator user is an active family member of.

    Returns:
        list[dict]: creator, role, relationship_label, status,
        deletion_status, has_pending_consent, has_pending_deletion_consent
    """
    memberships = list(FamilyMember.get_memberships_of(user).order_by('created_at'))
    creator_ids = [m.creator_id for m in memberships]

    lifecycles = {
        lifecycle.creator_id: lifecycle
        for lifecycle in Lifecycle.objects.filter(creator_id__in=creator_ids)
    }
    pending_opening = set(
        ConsentRecord.objects.filter(
            family_member__in=memberships,
            decision=ConsentDecision.PENDING,
            lifecycle__status=Lifecycle.STATUS_CONSENT_GATHERING,
        ).values_list('family_member_id', flat=True)
    )
    pending_deletion = set(
        DeletionConsentRecord.objects.filter(
            family_member__in=memberships,
            decision=ConsentDecision.PENDING,
            lifecycle__deletion_status=Lifecycle.DELETION_CONSENT_GATHERING,
        ).values_list('family_member_id', flat=True)
    )

    connections = []
    for membership in memberships:
        lifecycle = lifecycles.get(membership.creator_id)
        connections.append({
            'creator': membership.creator,
            'role': membership.role,
            'relationship_label': membership.relationship_label,
            'status': lifecycle.status if lifecycle else Lifecycle.STATUS_ACTIVE,
            'deletion_status': lifecycle.deletion_status if lifecycle else None,
            'has_pending_consent': membership.pk in pending_opening,
            'has_pending_deletion_consent': membership.pk in pending_deletion,
        })
    return connections


def get_action_history(creator, actor):
    """
    A creator's lifecycle action log, newest first.

    Raises:
        Forbidden: actor is not a representative (and the fallback does not apply)
    """
    require_representative(actor, creator, 'view-history')
    return LifecycleActionLog.objects.filter(creator=creator).select_related('performed_by')
