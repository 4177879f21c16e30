"""Notification domain entity."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.user_directory.entities.core._base import Entity


class NotificationUser(BaseModel):
    """Who a notification is about, embedded in feed entries."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    first_name: str
    last_name: str
    email: str


class Notification(Entity):
    """Feed entry about a user, e.g. "user updated".

    ``user_id`` is a weak reference: the notification outlives the user.
    """

    user_id: int = Field(description="Id of the user the notification is about")
    type: str = Field(default="updated", description="Notification kind")
    message: str = Field(description="Human readable message")
    data: dict[str, Any] = Field(default_factory=dict, description="Structured payload")
    read: bool = Field(default=False, description="Whether the entry has been read")
    read_at: datetime | None = Field(default=None, description="When it was marked read")
    user: NotificationUser | None = Field(
        default=None, description="The user, when it still exists and was loaded"
    )
