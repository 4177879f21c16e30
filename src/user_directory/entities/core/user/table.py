"""User database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.user_directory.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    This represents how the User entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "users"
    __table_args__ = (
        sa.Index("users_name_search_index", "first_name", "last_name"),
    )

    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    email: str = Field(max_length=255, index=True)
