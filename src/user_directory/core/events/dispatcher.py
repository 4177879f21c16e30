"""In-process domain events.

Listeners are fire-and-forget: a failing listener is logged and never fails
the operation that dispatched the event.
"""

import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from src.user_directory.entities.core._base import utcnow
from src.user_directory.entities.core.user.entity import User


class DomainEvent(BaseModel):
    occurred_at: datetime = Field(default_factory=utcnow)


class UserUpdated(DomainEvent):
    """Emitted after an update of a user and its address has been committed."""

    user: User


EventHandler = Callable[[Any], Awaitable[None] | None]


class EventDispatcher:
    def __init__(self) -> None:
        self._handlers: dict[type[DomainEvent], list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: type[DomainEvent], handler: EventHandler) -> None:
        self._handlers[event_type].append(handler)

    def handlers_for(self, event_type: type[DomainEvent]) -> list[EventHandler]:
        return list(self._handlers.get(event_type, []))

    async def dispatch(self, event: DomainEvent) -> int:
        """Run every handler subscribed to the event's type.

        Returns the number of handlers that completed without error.
        """
        succeeded = 0
        for handler in self.handlers_for(type(event)):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
                succeeded += 1
            except Exception:
                logger.exception(
                    "Event handler {} failed for {}",
                    getattr(handler, "__qualname__", repr(handler)),
                    type(event).__name__,
                )
        return succeeded
