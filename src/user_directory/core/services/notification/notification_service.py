"""Notification feed reads and the read-marking workflow."""

from collections.abc import Sequence
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from src.user_directory.core.exceptions import (
    OperationFailedError,
    ValidationFailedError,
)
from src.user_directory.core.services.database.db_session import DbSessionService
from src.user_directory.entities.core.notification.entity import Notification
from src.user_directory.entities.core.notification.repository import (
    NotificationRepository,
)
from src.user_directory.runtime.config.config_data import NotificationConfig


def validate_notification_ids(notification_ids: Any) -> list[int]:
    """Check the raw ``notification_ids`` input: a non-empty list of integers."""
    if notification_ids is None:
        raise ValidationFailedError(
            "The notification ids field is required.",
            {"notification_ids": ["The notification ids field is required."]},
        )
    if not isinstance(notification_ids, list | tuple):
        raise ValidationFailedError(
            "The notification ids field must be an array.",
            {"notification_ids": ["The notification ids field must be an array."]},
        )
    if not notification_ids:
        raise ValidationFailedError(
            "The notification ids field is required.",
            {"notification_ids": ["The notification ids field is required."]},
        )

    errors: dict[str, list[str]] = {}
    ids: list[int] = []
    for index, value in enumerate(notification_ids):
        if isinstance(value, bool) or not isinstance(value, int):
            errors[f"notification_ids.{index}"] = ["The selected id is invalid."]
            continue
        ids.append(value)
    if errors:
        raise ValidationFailedError("The selected notification ids are invalid.", errors)
    return ids


class NotificationService:
    """Unread feed queries. Never cached: the feed must reflect current state."""

    def __init__(
        self, db_service: DbSessionService, config: NotificationConfig | None = None
    ):
        self._db_service = db_service
        self._config = config or NotificationConfig()

    def list_unread(self, limit: int | None = None) -> list[Notification]:
        try:
            with self._db_service.get_session() as session:
                return NotificationRepository(session).list_unread(
                    limit or self._config.feed_limit
                )
        except SQLAlchemyError as e:
            logger.exception("Unread notification read failed")
            raise OperationFailedError() from e

    def dashboard_notifications(self) -> list[Notification]:
        return self.list_unread(self._config.dashboard_limit)

    def mark_as_read(self, notification_ids: Sequence[int] | Any) -> list[Notification]:
        """Mark the given notifications read and return the refreshed unread feed.

        Raises:
            ValidationFailedError: ids missing, not a list, or unknown.
            OperationFailedError: the store could not be read or written.
        """
        ids = validate_notification_ids(notification_ids)

        try:
            with self._db_service.get_session() as session:
                existing = NotificationRepository(session).existing_ids(ids)
        except SQLAlchemyError as e:
            logger.exception("Notification lookup failed")
            raise OperationFailedError() from e

        missing = {
            f"notification_ids.{index}": ["The selected id is invalid."]
            for index, value in enumerate(ids)
            if value not in existing
        }
        if missing:
            raise ValidationFailedError(
                "The selected notification ids are invalid.", missing
            )

        try:
            with self._db_service.session_scope() as session:
                marked = NotificationRepository(session).mark_as_read(ids)
        except SQLAlchemyError as e:
            raise OperationFailedError() from e

        logger.info("Notifications marked as read", count=marked)
        return self.list_unread(self._config.feed_limit)
