from .notifications import (
    notify_users,
    get_unread_notifications,
    mark_notification_read,
    mark_all_read,
)

__all__ = [
    'notify_users',
    'get_unread_notifications',
    'mark_notification_read',
    'mark_all_read',
]
