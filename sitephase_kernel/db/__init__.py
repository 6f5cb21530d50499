"""Database layer - engine, base classes, and append-only enforcement."""

from sitephase_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from sitephase_kernel.db.engine import (
    create_tables,
    drop_tables,
    enable_sqlite_savepoints,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "enable_sqlite_savepoints",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
]
