"""
Notification dispatch.

Creates in-app notifications and queues the matching emails.
Every failure here is logged and swallowed: callers treat notification
as fire-and-forget.
"""
import logging
from django.conf import settings
from django.db import transaction

from ..models import Notification

logger = logging.getLogger(__name__)


def notify_users(user_ids, notification_type, title, message, related_creator=None):
    """
    Create one notification per recipient.

    Args:
        user_ids: Iterable of recipient user ids
        notification_type: Machine-readable type (e.g. 'death_reported')
        title: Short headline
        message: Body text
        related_creator: Creator the notification is about

    Returns:
        list: Created Notification objects (empty on failure)
    """
    user_ids = list(dict.fromkeys(user_ids))
    if not user_ids:
        return []

    try:
        with transaction.atomic():
            notifications = Notification.objects.bulk_create([
                Notification(
                    recipient_id=user_id,
                    notification_type=notification_type,
                    title=title,
                    message=message,
                    related_creator=related_creator,
                )
                for user_id in user_ids
            ])
    except Exception as e:
        logger.error(f"Failed to create {notification_type} notifications: {e}")
        return []

    if getattr(settings, 'LIFECYCLE_NOTIFY_BY_EMAIL', False):
        notification_ids = [n.id for n in notifications if n.id]
        transaction.on_commit(lambda: _queue_emails(notification_ids))

    logger.info(f"Created {len(notifications)} {notification_type} notification(s)")
    return notifications


def _queue_emails(notification_ids):
    from ..tasks import send_notification_email

    for notification_id in notification_ids:
        try:
            send_notification_email.delay(notification_id)
        except Exception as e:
            logger.warning(f"Could not queue notification email: {e}")


def get_unread_notifications(user):
    """Unread notifications for a user, newest first."""
    return Notification.objects.filter(recipient=user, is_read=False)


def mark_notification_read(user, notification_id):
    """
    Mark one of the user's notifications as read.

    Returns:
        bool: True if a notification was updated
    """
    updated = Notification.objects.filter(
        id=notification_id, recipient=user
    ).update(is_read=True)
    return updated > 0


def mark_all_read(user):
    """Mark all of the user's notifications as read. Returns the count."""
    return Notification.objects.filter(recipient=user, is_read=False).update(is_read=True)
