"""Database engine and session factory used across the application."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from src.user_directory.runtime.config.config_data import ConfigData
from src.user_directory.runtime.context import get_config


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """Turn on SQLite foreign key enforcement for every new connection.

    SQLite ignores ON DELETE CASCADE unless the pragma is set per connection.
    """

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):  # noqa: ARG001
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(main_config: ConfigData) -> Engine:
    """Create the engine for the configured database with backend-specific tuning."""
    db_config = main_config.database
    engine_kwargs: dict[str, Any] = {
        "echo": db_config.echo,
        "echo_pool": False,
        "connect_args": _get_connect_args(main_config),
    }

    if db_config.is_sqlite:
        if ":memory:" in db_config.url:
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
                "pool_pre_ping": True,  # Validate connections before use
            }
        )

    engine = create_engine(db_config.connection_string, **engine_kwargs)
    if db_config.is_sqlite:
        enable_sqlite_foreign_keys(engine)
    return engine


def _get_connect_args(config: ConfigData) -> dict:
    """Get database-specific connection arguments."""
    connect_args: dict[str, Any] = {}

    if "postgresql" in config.database.url:
        connect_args.update(
            {
                "application_name": f"{config.app.environment}_user_directory",
                "connect_timeout": 30,
                "options": "-c jit=off",
            }
        )

    elif config.database.is_sqlite:
        connect_args.update(
            {
                "check_same_thread": False,
                "timeout": 20,  # Lock timeout
            }
        )

    return connect_args


class DbSessionService:
    def __init__(self, engine: Engine | None = None):
        """Initialize the shared database engine and session factory.

        Args:
            engine: Prebuilt engine, mainly for tests. Built from config otherwise.
        """
        if engine is not None:
            self._engine = engine
            return

        logger.info("Setting up database engine and session factory")
        main_config = get_config()
        logger.info(
            "Configuring database engine for environment: {}",
            main_config.app.environment,
        )
        self._engine = build_engine(main_config)

        if main_config.app.environment == "production":
            logger.info(
                "Database engine initialized",
                pool_size=main_config.database.pool_size,
                max_overflow=main_config.database.max_overflow,
                pool_timeout=main_config.database.pool_timeout,
                pool_recycle=main_config.database.pool_recycle,
            )

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(
            self._engine,
            expire_on_commit=False,  # Prevent lazy loading issues
            autoflush=True,
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Transaction scope: commit on success, rollback and re-raise on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Perform a health check on the database connection."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False

    def dispose(self) -> None:
        self._engine.dispose()
