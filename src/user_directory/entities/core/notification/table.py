"""Notification database table model."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from src.user_directory.entities.core._base import EntityTable


class NotificationTable(EntityTable, table=True):
    """Database persistence model for notifications.

    No foreign key on ``user_id``: deleting a user keeps its feed history.
    """

    __tablename__ = "notifications"
    __table_args__ = (
        sa.Index("notifications_unread_feed_index", "read", "created_at"),
    )

    user_id: int = Field(index=True)
    type: str = Field(max_length=50)
    message: str = Field(max_length=500)
    data: dict[str, Any] = Field(
        default_factory=dict, sa_column=sa.Column(sa.JSON, nullable=False)
    )
    read: bool = Field(default=False)
    read_at: datetime | None = Field(default=None)
