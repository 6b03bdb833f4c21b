"""
Database Engine Management Module.

Provides a singleton AsyncEngine for the entire application.
Uses configuration from core.app_context.ConfigLoader.

Supported backends:
    - SQLite via aiosqlite (default, file database in ./data)
    - PostgreSQL via asyncpg (DATABASE_SSL_MODE controls SSL behavior:
      "require" (default), "verify-full" with DATABASE_SSL_CERT_PATH, "disable")
"""

import logging
import os
import ssl
from pathlib import Path
from typing import Any

from sqlalchemy import event
from sqlalchemy.engine.url import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from core.app_context import ConfigLoader

_logger = logging.getLogger(__name__)

# Global engine instance (singleton)
_engine: AsyncEngine | None = None


def _get_ssl_context() -> ssl.SSLContext | None:
    """
    Create SSL context based on DATABASE_SSL_MODE environment variable.

    Returns:
        ssl.SSLContext for verify-full / require modes, None for disable mode.
    """
    ssl_mode = os.getenv("DATABASE_SSL_MODE", "require").lower()

    if ssl_mode == "disable":
        _logger.warning(
            "DATABASE_SSL_MODE=disable: SSL is disabled. "
            "This should only be used for local development."
        )
        return None

    if ssl_mode == "verify-full":
        cert_path = os.getenv("DATABASE_SSL_CERT_PATH", "")
        if cert_path:
            ctx = ssl.create_default_context(cafile=cert_path)
            ctx.check_hostname = True
            ctx.verify_mode = ssl.CERT_REQUIRED
            _logger.info(f"SSL mode: verify-full with cert: {cert_path}")
            return ctx
        _logger.error(
            "DATABASE_SSL_MODE=verify-full requires DATABASE_SSL_CERT_PATH. "
            "Falling back to 'require' mode."
        )

    # Require SSL but don't verify certificate
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _engine_options(database_url: str) -> dict[str, Any]:
    """Backend-specific keyword arguments for create_async_engine."""
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        database = url.database or ""
        if database and database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)
        return {}

    return {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "connect_args": {"ssl": _get_ssl_context()},
    }


def _enable_sqlite_wal(engine: AsyncEngine) -> None:
    """Switch SQLite file databases to WAL journaling on every new connection."""

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


def create_engine_for_url(database_url: str) -> AsyncEngine:
    """Create a configured AsyncEngine for an explicit database URL."""
    engine = create_async_engine(
        database_url,
        echo=False,
        **_engine_options(database_url),
    )

    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        _enable_sqlite_wal(engine)

    return engine


def get_engine() -> AsyncEngine:
    """
    Get or create the async database engine (singleton).

    Returns:
        AsyncEngine: SQLAlchemy async engine instance.
    """
    global _engine

    if _engine is None:
        config_loader = ConfigLoader()
        config_loader.load()
        database_url = config_loader.get("database.url", "")
        _engine = create_engine_for_url(str(database_url))
        _logger.info(f"Database engine created for {make_url(str(database_url)).render_as_string()}")

    return _engine


async def close_engine() -> None:
    """
    Close the database engine and release all connections.

    Should be called during application shutdown.
    """
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None
