from .db_manage import DbManageService, register_tables
from .db_session import DbSessionService, build_engine, enable_sqlite_foreign_keys

__all__ = [
    "DbManageService",
    "DbSessionService",
    "build_engine",
    "enable_sqlite_foreign_keys",
    "register_tables",
]
