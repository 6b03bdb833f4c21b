"""
Pytest Configuration and Shared Fixtures.

Provides common test fixtures for framework unit tests.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock


# =============================================================================
# Environment Fixtures
# =============================================================================


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    env_vars = {
        "SERVER_HOST": "127.0.0.1",
        "SERVER_PORT": "8000",
        "BASE_URL": "https://test.example.com",
        "APP_DEBUG": "true",
        "APP_LOG_LEVEL": "DEBUG",
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "EMAIL_NOTIFICATIONS_ENABLED": "true",
        "SMTP_HOST": "smtp.test.com",
        "SMTP_PORT": "587",
        "SMTP_USERNAME": "test@test.com",
        "SMTP_PASSWORD": "testpass",
        "SMTP_FROM_EMAIL": "noreply@test.com",
        "SMTP_FROM_NAME": "Test System",
    }

    # Legacy names must not leak in from the developer's shell
    for key in ("SMTP_USER", "SMTP_PASS", "SMTP_FROM", "SMTP_SECURE", "SMTP_STARTTLS", "PORT"):
        monkeypatch.delenv(key, raising=False)

    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    return env_vars


@pytest.fixture
def config_loader(mock_env_vars):
    """Create a ConfigLoader instance with mock environment."""
    from core.app_context import ConfigLoader

    loader = ConfigLoader()
    loader.load()
    return loader


@pytest.fixture
def app_context(config_loader):
    """Create an AppContext instance with mock environment."""
    from core.app_context import AppContext

    return AppContext(config_loader)


# =============================================================================
# Module Fixtures
# =============================================================================


class MockModule:
    """Mock module implementation for testing."""

    def __init__(self, name: str = "mock_module"):
        self._name = name
        self._initialized = False
        self._shutdown = False
        self.started_with = None
        self.stopped_with = None

    def get_module_name(self) -> str:
        return self._name

    def on_entry(self, context) -> None:
        self._initialized = True

    def get_api_router(self):
        return None

    async def async_startup(self, app) -> None:
        self.started_with = app

    async def async_shutdown(self, app) -> None:
        self.stopped_with = app

    def get_status(self) -> dict:
        return {"status": "active", "details": {}}

    def on_shutdown(self) -> None:
        self._shutdown = True


@pytest.fixture
def mock_module():
    """Create a mock module instance."""
    return MockModule()


@pytest.fixture
def mock_module_factory():
    """Factory for creating mock modules with custom names."""
    def _create(name: str):
        return MockModule(name)
    return _create


# =============================================================================
# SMTP Fixtures
# =============================================================================


@pytest.fixture
def mock_smtp_send(monkeypatch):
    """Patch aiosmtplib.send with an AsyncMock."""
    send = AsyncMock(return_value=({}, "OK"))
    monkeypatch.setattr("aiosmtplib.send", send)
    return send


@pytest.fixture
def mock_email_service():
    """EmailService stand-in that accepts every message."""
    service = MagicMock()
    service.can_send = True
    service.is_configured = True
    service.send_async = AsyncMock(return_value=True)
    return service
