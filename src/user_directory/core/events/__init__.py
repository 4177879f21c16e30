from .dispatcher import DomainEvent, EventDispatcher, EventHandler, UserUpdated

__all__ = ["DomainEvent", "EventDispatcher", "EventHandler", "UserUpdated"]
