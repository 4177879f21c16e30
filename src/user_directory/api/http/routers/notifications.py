"""Unread notification feed endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.user_directory.api.http.deps import get_notification_service
from src.user_directory.core.exceptions import OperationFailedError
from src.user_directory.core.services.notification import NotificationService
from src.user_directory.entities.core.notification.entity import Notification

router = APIRouter(prefix="/notifications", tags=["notifications"])


class NotificationFeed(BaseModel):
    notifications: list[Notification]


class MarkReadRequest(BaseModel):
    # Shape is checked by the service so every violation maps to one error format
    notification_ids: Any = None


class MarkReadResponse(NotificationFeed):
    success: bool = True


@router.get("", response_model=NotificationFeed)
async def unread_notifications(
    notification_service: Annotated[
        NotificationService, Depends(get_notification_service)
    ],
) -> NotificationFeed:
    try:
        notifications = notification_service.list_unread()
    except OperationFailedError:
        notifications = []
    return NotificationFeed(notifications=notifications)


@router.post("/mark-read", response_model=MarkReadResponse)
async def mark_as_read(
    payload: MarkReadRequest,
    notification_service: Annotated[
        NotificationService, Depends(get_notification_service)
    ],
) -> MarkReadResponse:
    notifications = notification_service.mark_as_read(payload.notification_ids)
    return MarkReadResponse(success=True, notifications=notifications)
