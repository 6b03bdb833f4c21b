"""
Unit Tests for core.database layer.

Tests database engine, session management, and base models.
"""

import pytest
from unittest.mock import MagicMock, patch, AsyncMock
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase


class TestDatabaseEngine:
    """Tests for database engine management."""

    @pytest.fixture(autouse=True)
    def reset_engine(self):
        """Reset global engine before each test."""
        import core.database.engine as engine_module
        engine_module._engine = None
        yield
        engine_module._engine = None

    @patch('core.database.engine.create_async_engine')
    def test_get_engine_creates_singleton(self, mock_create_engine, mock_env_vars):
        """Test get_engine() creates a singleton engine instance."""
        from core.database.engine import get_engine

        mock_create_engine.return_value = MagicMock(spec=AsyncEngine)

        engine1 = get_engine()
        engine2 = get_engine()

        assert engine1 is engine2
        assert mock_create_engine.call_count == 1

    @patch('core.database.engine.create_async_engine')
    def test_get_engine_uses_config_database_url(self, mock_create_engine, mock_env_vars):
        """Test engine uses database URL from config."""
        from core.database.engine import get_engine

        mock_create_engine.return_value = MagicMock(spec=AsyncEngine)

        get_engine()

        assert mock_create_engine.call_args[0][0] == "sqlite+aiosqlite:///:memory:"

    @pytest.mark.asyncio
    @patch('core.database.engine.create_async_engine')
    async def test_close_engine_disposes_connection(self, mock_create_engine, mock_env_vars):
        """Test close_engine() properly disposes the engine."""
        from core.database.engine import get_engine, close_engine
        import core.database.engine as engine_module

        mock_engine = AsyncMock(spec=AsyncEngine)
        mock_create_engine.return_value = mock_engine

        get_engine()
        assert engine_module._engine is not None

        await close_engine()

        mock_engine.dispose.assert_called_once()
        assert engine_module._engine is None


class TestEngineOptions:
    """Tests for backend-specific engine options."""

    def test_sqlite_file_creates_parent_directory(self, tmp_path):
        from core.database.engine import _engine_options

        db_path = tmp_path / "nested" / "vacations.sqlite"
        options = _engine_options(f"sqlite+aiosqlite:///{db_path}")

        assert options == {}
        assert db_path.parent.is_dir()

    def test_sqlite_memory_has_no_pool_options(self):
        from core.database.engine import _engine_options

        assert _engine_options("sqlite+aiosqlite:///:memory:") == {}

    def test_postgres_gets_pool_and_ssl(self, monkeypatch):
        from core.database.engine import _engine_options

        monkeypatch.setenv("DATABASE_SSL_MODE", "require")
        options = _engine_options("postgresql+asyncpg://user:pw@db.example.com/vacations")

        assert options["pool_pre_ping"] is True
        assert options["connect_args"]["ssl"] is not None

    def test_postgres_ssl_disabled(self, monkeypatch):
        from core.database.engine import _engine_options

        monkeypatch.setenv("DATABASE_SSL_MODE", "disable")
        options = _engine_options("postgresql+asyncpg://user:pw@localhost/vacations")

        assert options["connect_args"]["ssl"] is None

    @pytest.mark.asyncio
    async def test_sqlite_file_uses_wal(self, tmp_path):
        from core.database.engine import create_engine_for_url

        engine = create_engine_for_url(f"sqlite+aiosqlite:///{tmp_path / 'wal.sqlite'}")
        try:
            async with engine.connect() as conn:
                result = await conn.execute(text("PRAGMA journal_mode"))
                assert result.scalar().lower() == "wal"
        finally:
            await engine.dispose()


class TestSessionManagement:
    """Tests for database session management."""

    @pytest.fixture(autouse=True)
    def reset_session_factory(self):
        """Reset global session factory before each test."""
        import core.database.session as session_module
        session_module._async_session_factory = None
        yield
        session_module._async_session_factory = None

    @patch('core.database.session.get_engine')
    def test_get_session_factory_creates_singleton(self, mock_get_engine, mock_env_vars):
        """Test get_session_factory() creates a singleton factory."""
        from core.database.session import get_session_factory

        mock_get_engine.return_value = MagicMock(spec=AsyncEngine)

        factory1 = get_session_factory()
        factory2 = get_session_factory()

        assert factory1 is factory2
        assert isinstance(factory1, async_sessionmaker)

    @pytest.mark.asyncio
    @patch('core.database.session.get_session_factory')
    async def test_get_standalone_session_commits(self, mock_get_factory, mock_env_vars):
        """Test get_standalone_session() yields a session and commits on success."""
        from core.database.session import get_standalone_session

        mock_session = AsyncMock(spec=AsyncSession)
        mock_factory = MagicMock(spec=async_sessionmaker)
        mock_factory.return_value.__aenter__.return_value = mock_session
        mock_factory.return_value.__aexit__.return_value = None
        mock_get_factory.return_value = mock_factory

        async with get_standalone_session() as session:
            assert session is mock_session

        mock_session.commit.assert_awaited_once()
        mock_session.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    @patch('core.database.session.get_session_factory')
    async def test_get_standalone_session_rolls_back_on_error(self, mock_get_factory, mock_env_vars):
        from core.database.session import get_standalone_session

        mock_session = AsyncMock(spec=AsyncSession)
        mock_factory = MagicMock(spec=async_sessionmaker)
        mock_factory.return_value.__aenter__.return_value = mock_session
        mock_factory.return_value.__aexit__.return_value = None
        mock_get_factory.return_value = mock_factory

        with pytest.raises(RuntimeError):
            async with get_standalone_session():
                raise RuntimeError("boom")

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_init_database_creates_tables(self):
        from sqlalchemy.ext.asyncio import create_async_engine
        from sqlalchemy.pool import StaticPool

        from core.database.session import init_database

        engine = create_async_engine(
            "sqlite+aiosqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        try:
            await init_database(engine)
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
            assert "vacations" in tables
            assert "settings" in tables
        finally:
            await engine.dispose()


class TestBaseModels:
    """Tests for database base models and mixins."""

    def test_base_class_exists(self):
        """Test Base declarative class exists."""
        from core.database.base import Base

        assert issubclass(Base, DeclarativeBase)

    def test_timestamp_mixin_fields(self):
        """Test TimestampMixin adds created_at and updated_at."""
        from core.database.base import TimestampMixin
        from sqlalchemy import String
        from sqlalchemy.orm import Mapped, mapped_column

        class LocalBase(DeclarativeBase):
            pass

        class TimestampedModel(LocalBase, TimestampMixin):
            __tablename__ = "test_timestamp"
            id: Mapped[str] = mapped_column(String, primary_key=True)

        columns = TimestampedModel.__table__.columns
        assert 'created_at' in columns
        assert 'updated_at' in columns
        assert columns['updated_at'].onupdate is not None

    def test_uuid_primary_key_annotation(self):
        """Test UUIDPrimaryKey annotation creates a string UUID primary key."""
        from core.database.base import UUIDPrimaryKey
        from sqlalchemy.orm import Mapped

        class LocalBase(DeclarativeBase):
            pass

        class UUIDModel(LocalBase):
            __tablename__ = "test_uuid"
            id: Mapped[UUIDPrimaryKey]

        column = UUIDModel.__table__.columns['id']
        assert column.primary_key
        assert column.type.length == 36
        assert len(column.default.arg(None)) == 36

    def test_utc_now_is_timezone_aware(self):
        from core.database.base import utc_now

        assert utc_now().tzinfo is not None
