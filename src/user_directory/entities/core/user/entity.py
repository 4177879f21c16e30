"""User domain entity."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.user_directory.entities.core._base import Entity
from src.user_directory.entities.core.address.entity import Address, AddressFields

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class UserFields(BaseModel):
    """Writable user attributes, validated before they reach the repository."""

    first_name: str = Field(min_length=1, max_length=255, description="First name")
    last_name: str = Field(min_length=1, max_length=255, description="Last name")
    email: str = Field(max_length=255, pattern=_EMAIL_PATTERN, description="Email address")

    @field_validator("first_name", "last_name", "email", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class UserCreate(UserFields):
    """Payload for creating or replacing a user together with its address."""

    address: AddressFields


class User(Entity):
    """User entity representing a person in the directory.

    This is the domain model returned by searches and mutations. A user
    carries at most one address, never a collection.
    """

    first_name: str = Field(description="User's first name")
    last_name: str = Field(description="User's last name")
    email: str = Field(description="User's email address")
    address: Address | None = Field(default=None, description="User's address")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.id == other.id
            and self.first_name == other.first_name
            and self.last_name == other.last_name
            and self.email == other.email
            and self.address == other.address
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.first_name,
            self.last_name,
            self.email,
            self.address,
        ))
