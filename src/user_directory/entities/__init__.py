"""Entities organized by business concept.

Each entity package holds:
- entity.py: Domain model returned to callers
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.address import Address, AddressFields, AddressTable
from .core.notification import Notification, NotificationRepository, NotificationTable
from .core.user import User, UserCreate, UserFields, UserRepository, UserTable

__all__ = [
    "Address",
    "AddressFields",
    "AddressTable",
    "Notification",
    "NotificationRepository",
    "NotificationTable",
    "User",
    "UserCreate",
    "UserFields",
    "UserRepository",
    "UserTable",
]
