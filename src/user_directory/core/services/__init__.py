"""Core services exports."""

from .database.db_manage import DbManageService
from .database.db_session import DbSessionService
from .notification import NotificationService, UserUpdateNotifier
from .redis_service import RedisService
from .search.search_service import SearchPage, UserSearchService, UserStream

__all__ = [
    "DbManageService",
    "DbSessionService",
    "NotificationService",
    "RedisService",
    "SearchPage",
    "UserSearchService",
    "UserStream",
    "UserUpdateNotifier",
]
