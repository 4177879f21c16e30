from .notification_service import NotificationService, validate_notification_ids
from .user_update_notifier import NOTIFICATION_TYPE_UPDATED, UserUpdateNotifier

__all__ = [
    "NOTIFICATION_TYPE_UPDATED",
    "NotificationService",
    "UserUpdateNotifier",
    "validate_notification_ids",
]
