"""Address domain entity."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AddressFields(BaseModel):
    """Writable address attributes, validated before they reach the repository."""

    country: str = Field(min_length=1, max_length=255, description="Country name")
    city: str = Field(min_length=1, max_length=255, description="City name")
    post_code: str = Field(min_length=1, max_length=32, description="Postal code")
    street: str = Field(min_length=1, max_length=255, description="Street and number")


class Address(AddressFields):
    """Address entity attached to exactly one user.

    Addresses are never exposed on their own; they travel inside a User.
    """

    model_config = ConfigDict(from_attributes=True)

    def __eq__(self, other: Any) -> bool:
        """Compare addresses by business attributes."""
        if not isinstance(other, Address):
            return False

        return (
            self.country == other.country
            and self.city == other.city
            and self.post_code == other.post_code
            and self.street == other.street
        )

    def __hash__(self) -> int:
        return hash((self.country, self.city, self.post_code, self.street))
