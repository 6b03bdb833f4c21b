"""
Conftest for Vacation Module Tests.

Provides an in-memory database, a pinned clock and a FastAPI app wired
with the vacation routers.
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from core.database import get_db_session
from core.database.session import create_session_factory, init_database
from modules.vacation.core.config import VacationSettings, get_vacation_settings
from modules.vacation.models import Department
from modules.vacation.routers import manager_router, vacations_router
from modules.vacation.services.clock import FixedClock, get_clock
from modules.vacation.services.manager_auth import ManagerTokens
from modules.vacation.services.notifications import get_vacation_notification_service

TODAY = date(2025, 5, 20)
NOW = datetime(2025, 5, 20, 9, 0, tzinfo=timezone.utc)

PRODUCTION_TOKEN = "ProdToken0123456789abcdefghijklm"
ADMINISTRATION_TOKEN = "AdminToken123456789abcdefghijklm"

SETTINGS_ENV = (
    "MANAGER_TOKEN_PRODUCTION",
    "MANAGER_TOKEN_GAMYBA",
    "MANAGER_TOKEN",
    "MANAGER_TOKEN_ADMINISTRATION",
    "MANAGER_TOKEN_ADMINISTRACIJA",
    "MANAGER_NOTIFICATION_EMAIL",
    "NOTIFICATION_EMAIL",
    "REMINDER_INTERVAL_SECONDS",
    "REMINDER_DEBOUNCE_SECONDS",
    "SIGNED_REQUEST_DEADLINE_DAYS",
    "FRONTEND_URL",
)


@pytest.fixture
def clean_settings_env(monkeypatch):
    """Remove vacation settings variables inherited from the shell."""
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# Database
# =============================================================================


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine with the schema created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_database(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# =============================================================================
# Collaborators
# =============================================================================


@pytest.fixture
def clock():
    return FixedClock(TODAY, NOW)


@pytest.fixture
def vacation_settings(clean_settings_env):
    return VacationSettings(
        _env_file=None,
        MANAGER_NOTIFICATION_EMAIL="manager@example.com",
        FRONTEND_URL="https://vacations.example.com",
    )


@pytest.fixture
def production_token():
    return PRODUCTION_TOKEN


@pytest.fixture
def administration_token():
    return ADMINISTRATION_TOKEN


@pytest.fixture
def manager_tokens(production_token, administration_token):
    return ManagerTokens({
        Department.PRODUCTION: production_token,
        Department.ADMINISTRATION: administration_token,
    })


@pytest.fixture
def mock_email_service():
    """EmailService stand-in that accepts every message."""
    service = MagicMock()
    service.can_send = True
    service.send_async = AsyncMock(return_value=True)
    return service


@pytest.fixture
def mock_notifications():
    """Notification service stand-in for route tests."""
    service = MagicMock()
    service.can_send = True
    service.notify_new_request = AsyncMock(return_value=True)
    service.send_signed_request_reminder = AsyncMock(return_value=True)
    return service


# =============================================================================
# API
# =============================================================================


@pytest.fixture
def app(session_factory, clock, vacation_settings, manager_tokens, mock_notifications):
    """FastAPI app with the vacation routers mounted under /api."""
    app = FastAPI()
    app.include_router(vacations_router, prefix="/api")
    app.include_router(manager_router, prefix="/api")

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_vacation_settings] = lambda: vacation_settings
    app.dependency_overrides[get_vacation_notification_service] = lambda: mock_notifications

    app.state.manager_tokens = manager_tokens
    app.state.reminder_scheduler = MagicMock()
    return app


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
