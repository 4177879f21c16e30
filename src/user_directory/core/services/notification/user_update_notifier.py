"""Listener turning ``UserUpdated`` events into feed notifications."""

from loguru import logger

from src.user_directory.core.events.dispatcher import UserUpdated
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.entities.core.notification.entity import Notification
from src.user_directory.entities.core.notification.repository import (
    NotificationRepository,
)

NOTIFICATION_TYPE_UPDATED = "updated"


class UserUpdateNotifier:
    """Logs each user update and stores an unread ``updated`` notification."""

    def __init__(self, db_service: DbSessionService):
        self._db_service = db_service

    async def __call__(self, event: UserUpdated) -> Notification:
        user = event.user
        if user.id is None:
            raise ValueError("UserUpdated event carries a user without id")

        logger.info(
            "User updated",
            user_id=user.id,
            user_name=user.full_name,
            user_email=user.email,
            updated_at=user.updated_at.isoformat(),
        )

        with self._db_service.session_scope() as session:
            return NotificationRepository(session).create(
                user_id=user.id,
                type=NOTIFICATION_TYPE_UPDATED,
                message=f"User {user.full_name} has been updated.",
                data={
                    "user_id": user.id,
                    "user_name": user.full_name,
                    "user_email": user.email,
                    "updated_at": user.updated_at.isoformat(),
                },
            )
