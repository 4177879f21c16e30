"""Schema management for the user directory tables."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel


def register_tables() -> None:
    """Import every table module so its metadata is registered."""
    from src.user_directory.entities.core.address import AddressTable  # noqa: F401
    from src.user_directory.entities.core.notification import NotificationTable  # noqa: F401
    from src.user_directory.entities.core.user import UserTable  # noqa: F401


class DbManageService:
    def __init__(self, engine: Engine):
        self._engine = engine

    def create_all(self) -> None:
        """Create all database tables."""
        register_tables()
        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def drop_all(self) -> None:
        """Drop all database tables."""
        register_tables()
        SQLModel.metadata.drop_all(self._engine)
        logger.warning("All database tables dropped.")
