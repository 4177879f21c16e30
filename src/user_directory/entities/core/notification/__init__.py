"""Entity package: Notification."""

from .entity import Notification, NotificationUser
from .repository import NotificationRepository
from .table import NotificationTable

__all__ = ["Notification", "NotificationRepository", "NotificationTable", "NotificationUser"]
