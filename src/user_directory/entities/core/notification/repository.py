"""Data-access layer for notifications."""

from collections.abc import Sequence
from typing import Any

from sqlmodel import Session, col, select

from src.user_directory.entities.core._base import utcnow
from src.user_directory.entities.core.notification.entity import (
    Notification,
    NotificationUser,
)
from src.user_directory.entities.core.notification.table import NotificationTable
from src.user_directory.entities.core.user.table import UserTable


def to_entity(row: NotificationTable, user_row: UserTable | None = None) -> Notification:
    notification = Notification.model_validate(row, from_attributes=True)
    if user_row is not None:
        notification.user = NotificationUser.model_validate(user_row)
    return notification


class NotificationRepository:
    """Notification reads and writes. Reads are never cached."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(
        self,
        user_id: int,
        message: str,
        data: dict[str, Any] | None = None,
        type: str = "updated",
    ) -> Notification:
        row = NotificationTable(
            user_id=user_id, type=type, message=message, data=data or {}, read=False
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Notification.model_validate(row, from_attributes=True)

    def get(self, notification_id: int) -> Notification | None:
        row = self._session.get(NotificationTable, notification_id)
        if row is None:
            return None
        return Notification.model_validate(row, from_attributes=True)

    def list_unread(self, limit: int) -> list[Notification]:
        """Newest unread notifications first, at most ``limit`` of them, with their user."""
        statement = (
            select(NotificationTable, UserTable)
            .outerjoin(UserTable, col(UserTable.id) == col(NotificationTable.user_id))
            .where(col(NotificationTable.read).is_(False))
            .order_by(col(NotificationTable.created_at).desc(), col(NotificationTable.id).desc())
            .limit(limit)
        )
        rows = self._session.exec(statement).all()
        return [to_entity(row, user_row) for row, user_row in rows]

    def existing_ids(self, notification_ids: Sequence[int]) -> set[int]:
        if not notification_ids:
            return set()
        statement = select(NotificationTable.id).where(
            col(NotificationTable.id).in_(notification_ids)
        )
        return {row for row in self._session.exec(statement).all() if row is not None}

    def mark_as_read(self, notification_ids: Sequence[int]) -> int:
        """Flag the given unread notifications as read. Returns the number of rows touched.

        Rows that are already read keep their original ``read_at``.
        """
        if not notification_ids:
            return 0

        now = utcnow()
        rows = self._session.exec(
            select(NotificationTable)
            .where(col(NotificationTable.id).in_(notification_ids))
            .where(col(NotificationTable.read).is_(False))
        ).all()
        for row in rows:
            row.read = True
            row.read_at = now
            row.updated_at = now
            self._session.add(row)
        self._session.flush()
        return len(rows)
