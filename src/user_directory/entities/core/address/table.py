"""Address database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.user_directory.entities.core._base import EntityTable


class AddressTable(EntityTable, table=True):
    """Database persistence model for addresses.

    ``user_id`` is unique, so a user owns at most one row here, and the
    foreign key cascades deletes from ``users``.
    """

    __tablename__ = "addresses"
    __table_args__ = (
        sa.Index("addresses_location_index", "city", "country"),
    )

    user_id: int = Field(
        sa_column=sa.Column(
            sa.Integer,
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )
    country: str = Field(max_length=255)
    city: str = Field(max_length=255)
    post_code: str = Field(max_length=32, index=True)
    street: str = Field(max_length=255)
