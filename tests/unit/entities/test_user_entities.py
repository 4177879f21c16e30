"""Unit tests for the user, address and notification entities."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from src.user_directory.entities import (
    Address,
    AddressFields,
    Notification,
    User,
    UserCreate,
    UserFields,
)


def _address(**overrides) -> Address:
    values = {"country": "UK", "city": "London", "post_code": "NW1", "street": "1 Main St"}
    values.update(overrides)
    return Address(**values)


class TestUserFields:
    """Test validation of writable user attributes."""

    def test_strips_whitespace(self):
        fields = UserFields(first_name="  Ada ", last_name=" Lovelace", email=" ada@example.com ")

        assert fields.first_name == "Ada"
        assert fields.last_name == "Lovelace"
        assert fields.email == "ada@example.com"

    def test_rejects_invalid_email(self):
        with pytest.raises(ValidationError):
            UserFields(first_name="Ada", last_name="Lovelace", email="not-an-email")

    def test_rejects_blank_names(self):
        with pytest.raises(ValidationError):
            UserFields(first_name="   ", last_name="Lovelace", email="ada@example.com")

    def test_create_payload_requires_address(self):
        with pytest.raises(ValidationError):
            UserCreate(first_name="Ada", last_name="Lovelace", email="ada@example.com")

        payload = UserCreate(
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            address=AddressFields(country="UK", city="London", post_code="NW1", street="1 Main St"),
        )
        assert payload.address.city == "London"


class TestUser:
    """Test the User domain entity."""

    def test_full_name(self):
        user = User(id=1, first_name="Ada", last_name="Lovelace", email="ada@example.com")
        assert user.full_name == "Ada Lovelace"

    def test_equality_ignores_timestamps(self):
        """Users should compare equal regardless of created/updated times."""
        first = User(
            id=1,
            first_name="Ada",
            last_name="Lovelace",
            email="ada@example.com",
            address=_address(),
            created_at=datetime(2020, 1, 1, tzinfo=UTC),
        )
        second = first.model_copy(update={"created_at": datetime(2024, 1, 1, tzinfo=UTC)})

        assert first == second
        assert hash(first) == hash(second)

    def test_address_difference_breaks_equality(self):
        first = User(id=1, first_name="Ada", last_name="L", email="a@b.co", address=_address())
        second = User(
            id=1, first_name="Ada", last_name="L", email="a@b.co", address=_address(city="Paris")
        )

        assert first != second

    def test_json_round_trip_keeps_single_address(self):
        user = User(id=7, first_name="Ada", last_name="L", email="a@b.co", address=_address())

        restored = User.model_validate_json(user.model_dump_json())

        assert restored == user
        assert isinstance(restored.address, Address)


class TestNotification:
    def test_defaults(self):
        notification = Notification(user_id=3, message="User A B has been updated.")

        assert notification.type == "updated"
        assert notification.read is False
        assert notification.read_at is None
        assert notification.data == {}
