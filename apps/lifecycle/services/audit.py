"""
Lifecycle audit trail and family notifications.

Both are side effects of a state change and must never undo it, so every
failure is logged and swallowed. Writes run in their own savepoint so a
failed insert cannot poison an enclosing transaction.
"""
import logging
from django.conf import settings
from django.db import transaction

from apps.accounts.models import FamilyMember
from apps.accounts.services import notify_users
from ..models import LifecycleActionLog

logger = logging.getLogger(__name__)


# Action log entries
DEATH_REPORTED = 'death_reported'
DEATH_REPORT_CANCELLED = 'death_report_cancelled'
CONSENT_INITIATED = 'consent_initiated'
CONSENT_SUBMITTED = 'consent_submitted'
CONSENT_RESET = 'consent_reset'
CONSENT_AUTO_RESOLVED = 'consent_auto_resolved'
CONSENT_AUTO_RESOLVE_REVERTED = 'consent_auto_resolve_reverted'
NOTE_OPENED = 'note_opened'
DATA_DELETION_INITIATED = 'data_deletion_initiated'
DELETION_CONSENT_SUBMITTED = 'deletion_consent_submitted'
DELETION_CONSENT_DECLINED = 'deletion_consent_declined'
DELETION_CONSENT_AUTO_RESOLVED = 'deletion_consent_auto_resolved'
DELETION_CONSENT_AUTO_RESOLVE_REVERTED = 'deletion_consent_auto_resolve_reverted'
DATA_DELETION_CANCELLED = 'data_deletion_cancelled'
DATA_DELETION_EXECUTED = 'data_deletion_executed'


def log_action(creator, action, performed_by=None, lifecycle=None, metadata=None):
    """
    Append an entry to the lifecycle action log.

    Returns:
        LifecycleActionLog or None if the write failed
    """
    try:
        with transaction.atomic():
            return LifecycleActionLog.objects.create(
                creator=creator,
                lifecycle=lifecycle,
                action=action,
                performed_by=performed_by,
                metadata=metadata,
            )
    except Exception as e:
        logger.error(f"Failed to log lifecycle action {action} for creator {creator.pk}: {e}")
        return None


def get_creator_name(creator):
    return (
        creator.get_full_name()
        or creator.email
        or getattr(settings, 'LIFECYCLE_FALLBACK_NAME', 'A family member')
    )


def notify_family(creator, notification_type, title, message, recipient_ids=None):
    """
    Notify the creator's active family members.

    recipient_ids overrides the lookup, for callers that captured the
    family before erasing data.
    """
    try:
        if recipient_ids is None:
            recipient_ids = list(
                FamilyMember.get_active_members(creator).values_list('member_id', flat=True)
            )
        return notify_users(recipient_ids, notification_type, title, message, related_creator=creator)
    except Exception as e:
        logger.error(f"Failed to notify family of creator {creator.pk} ({notification_type}): {e}")
        return []


# Notification copy, keyed by notification type. Formatted with the creator's name.
MESSAGES = {
    'death_reported': (
        'A passing has been reported',
        "{name}'s passing has been reported.",
    ),
    'death_report_cancelled': (
        'Report of passing withdrawn',
        "The report of {name}'s passing has been withdrawn.",
    ),
    'consent_requested': (
        'Your consent is requested',
        "Please review whether {name}'s note may be opened to the family.",
    ),
    'note_opened': (
        'The note has been opened',
        "{name}'s note has been opened to the family.",
    ),
    'consent_reset': (
        'Consent gathering was reset',
        "Consent gathering for opening {name}'s note was reset. You will be asked again.",
    ),
    'deletion_consent_requested': (
        'Your consent to delete data is requested',
        "Please review whether {name}'s note data should be permanently deleted.",
    ),
    'deletion_consent_declined': (
        'Data deletion stopped',
        "Deletion of {name}'s data was stopped because a family member declined.",
    ),
    'deletion_consent_cancelled': (
        'Data deletion cancelled',
        "The representative cancelled the deletion of {name}'s data.",
    ),
    'data_deleted': (
        'Note data deleted',
        "{name}'s note data was deleted with everyone's consent.",
    ),
}


def notify_family_of(creator, notification_type, recipient_ids=None):
    """Notify the family using the standard copy for notification_type."""
    title, template = MESSAGES[notification_type]
    message = template.format(name=get_creator_name(creator))
    return notify_family(creator, notification_type, title, message, recipient_ids=recipient_ids)
