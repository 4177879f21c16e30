"""Dashboard reads and transactional user mutations.

Reads go through the cached search service. Writes run in one database
transaction each and invalidate cached search results before returning.
"""

from loguru import logger
from pydantic import BaseModel, Field

from src.user_directory.core.events.dispatcher import EventDispatcher, UserUpdated
from src.user_directory.core.exceptions import (
    DirectoryError,
    OperationFailedError,
    UserNotFoundError,
)
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.core.services.notification.notification_service import (
    NotificationService,
)
from src.user_directory.core.services.search.query_builder import normalize_query
from src.user_directory.core.services.search.search_service import (
    SearchPage,
    UserSearchService,
)
from src.user_directory.entities.core.address.entity import AddressFields
from src.user_directory.entities.core.notification.entity import Notification
from src.user_directory.entities.core.user.entity import User, UserFields
from src.user_directory.entities.core.user.repository import UserRepository


class DashboardData(BaseModel):
    """Everything the dashboard renders in one payload."""

    users: SearchPage
    search: str = ""
    notifications: list[Notification] = Field(default_factory=list)


class UserDirectoryRepository:
    def __init__(
        self,
        db_service: DbSessionService,
        search_service: UserSearchService,
        notification_service: NotificationService,
        dispatcher: EventDispatcher | None = None,
    ):
        self._db_service = db_service
        self._search = search_service
        self._notifications = notification_service
        self._dispatcher = dispatcher or EventDispatcher()

    @property
    def dispatcher(self) -> EventDispatcher:
        return self._dispatcher

    async def get_dashboard_data(
        self,
        search_query: str | None = None,
        per_page: int | None = None,
        page: int | None = 1,
    ) -> DashboardData:
        """Cached user page plus the latest unread notifications.

        A failure on the cached path is retried once straight against the
        database. If that fails too, the users page is empty. Notifications
        are read on their own and fall back to an empty list, so one failing
        read never discards the other.
        """
        query = normalize_query(search_query)
        size = self._search.clamp_per_page(per_page)
        page_number = max(page or 1, 1)

        try:
            users = await self._search.paginated(query, size, page_number)
        except Exception:
            logger.exception("Dashboard user page read failed, retrying without cache")
            try:
                users = await self._search.fetch_page(query, size, page_number)
            except Exception:
                logger.exception("Uncached user page read failed, returning an empty page")
                users = SearchPage.empty(query, size, page_number)

        return DashboardData(
            users=users,
            search=query,
            notifications=self._dashboard_notifications(),
        )

    def _dashboard_notifications(self) -> list[Notification]:
        try:
            return self._notifications.dashboard_notifications()
        except Exception:
            logger.exception("Dashboard notification read failed, showing none")
            return []

    def get_user(self, user_id: int) -> User:
        try:
            with self._db_service.get_session() as session:
                user = UserRepository(session).get(user_id)
        except Exception as e:
            logger.exception("Failed to load user {}", user_id)
            raise OperationFailedError() from e

        if user is None:
            raise UserNotFoundError(user_id)
        return user

    async def create_with_address(
        self, user_fields: UserFields, address_fields: AddressFields
    ) -> User:
        """Insert a user and its address atomically."""
        try:
            with self._db_service.session_scope() as session:
                user = UserRepository(session).create(user_fields, address_fields)
        except Exception as e:
            logger.exception("Failed to create user")
            raise OperationFailedError() from e

        await self._invalidate()
        logger.info("User created", user_id=user.id)
        return user

    async def update_with_address(
        self, user_id: int, user_fields: UserFields, address_fields: AddressFields
    ) -> User:
        """Update a user and upsert its address atomically, then emit UserUpdated."""
        try:
            with self._db_service.session_scope() as session:
                user = UserRepository(session).update(
                    user_id, user_fields, address_fields
                )
                if user is None:
                    raise UserNotFoundError(user_id)
        except DirectoryError:
            raise
        except Exception as e:
            logger.exception("Failed to update user {}", user_id)
            raise OperationFailedError() from e

        await self._invalidate()
        await self._dispatcher.dispatch(UserUpdated(user=user))
        logger.info("User updated", user_id=user.id)
        return user

    async def delete(self, user_id: int) -> bool:
        """Hard delete a user. The address is removed by the storage cascade."""
        try:
            with self._db_service.session_scope() as session:
                if not UserRepository(session).delete(user_id):
                    raise UserNotFoundError(user_id)
        except DirectoryError:
            raise
        except Exception as e:
            logger.exception("Failed to delete user {}", user_id)
            raise OperationFailedError() from e

        await self._invalidate()
        logger.info("User deleted", user_id=user_id)
        return True

    async def _invalidate(self) -> None:
        await self._search.clear_cache()
