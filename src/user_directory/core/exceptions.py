"""Error taxonomy for the user directory.

Every error carries a machine-readable ``code`` and an ``outcome`` that the
HTTP layer maps to a status code. Messages are safe to show to clients;
storage details stay in the logs.
"""

from enum import StrEnum
from typing import Any


class OutcomeKind(StrEnum):
    """Caller-facing outcome of a failed operation."""

    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"
    TRANSIENT_FAILURE = "transient_failure"


class DirectoryError(Exception):
    """Base exception for all user directory errors."""

    outcome: OutcomeKind = OutcomeKind.TRANSIENT_FAILURE

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ValidationFailedError(DirectoryError):
    """Raised when input has the wrong shape or references unknown records."""

    outcome = OutcomeKind.VALIDATION_FAILED

    def __init__(self, message: str, errors: dict[str, list[str]] | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_FAILED",
            details={"errors": errors or {}},
        )
        self.errors = errors or {}


class EntityNotFoundError(DirectoryError):
    """Raised when a requested entity does not exist."""

    outcome = OutcomeKind.NOT_FOUND

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} not found: {entity_id}",
            code="ENTITY_NOT_FOUND",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )
        self.entity_type = entity_type
        self.entity_id = entity_id


class UserNotFoundError(EntityNotFoundError):
    def __init__(self, user_id: int):
        super().__init__("User", user_id)


class OperationFailedError(DirectoryError):
    """Storage failure surfaced to callers without storage detail."""

    outcome = OutcomeKind.TRANSIENT_FAILURE

    def __init__(self, message: str = "Operation failed"):
        super().__init__(message=message, code="OPERATION_FAILED")
