"""
Core Database Package.

Provides centralized database management for the framework.
Modules should use these components instead of creating their own connections.
"""

from core.database.base import Base, TimestampMixin, UUIDPrimaryKey, CreatedAt, UpdatedAt, utc_now
from core.database.engine import get_engine, create_engine_for_url, close_engine
from core.database.session import (
    create_session_factory,
    get_session_factory,
    get_db_session,
    get_standalone_session,
    close_db_connections,
    init_database,
    DBSession,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKey",
    "CreatedAt",
    "UpdatedAt",
    "utc_now",
    # Engine
    "get_engine",
    "create_engine_for_url",
    "close_engine",
    # Session
    "create_session_factory",
    "get_session_factory",
    "get_db_session",
    "get_standalone_session",
    "close_db_connections",
    "init_database",
    "DBSession",
]
