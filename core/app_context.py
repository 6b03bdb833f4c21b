"""
AppContext - Dependency Injection Container.
Implements the Dependency Inversion Principle (DIP).
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass, field
from pathlib import Path
import os
import logging

from dotenv import load_dotenv


DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/vacations.sqlite"

_TRUE_VALUES = ("1", "true", "yes", "y", "on")
_FALSE_VALUES = ("0", "false", "no", "n", "off")


def parse_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse a boolean environment value, falling back to default on junk."""
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return default


def _getenv_first(*names: str, default: str = "") -> str:
    """Return the first non-empty environment variable among names."""
    for name in names:
        value = os.getenv(name, "").strip()
        if value:
            return value
    return default


@dataclass
class ConfigLoader:
    """Configuration loader from environment variables."""

    _config: Dict[str, Any] = field(default_factory=dict)

    def load(self, env_path: Optional[str] = None) -> None:
        """Load configuration from .env file."""
        if env_path:
            load_dotenv(env_path)
        else:
            # Try to find .env in project root
            project_root = Path(__file__).parent.parent
            env_file = project_root / ".env"
            if env_file.exists():
                load_dotenv(env_file)

        smtp_port = int(os.getenv("SMTP_PORT", "587"))

        self._config = {
            "server": {
                "host": os.getenv("SERVER_HOST", "127.0.0.1"),
                "port": int(_getenv_first("SERVER_PORT", "PORT", default="8787")),
                "base_url": os.getenv("BASE_URL", "")
            },
            "app": {
                "name": os.getenv("APP_NAME", "Vacation Tracker"),
                "debug": os.getenv("APP_DEBUG", "true").lower() == "true",
                "log_level": os.getenv("APP_LOG_LEVEL", "INFO")
            },
            "database": {
                "url": _getenv_first("DATABASE_URL", default=DEFAULT_DATABASE_URL)
            },
            "email": {
                "enabled": parse_bool(os.getenv("EMAIL_NOTIFICATIONS_ENABLED"), True),
                "host": os.getenv("SMTP_HOST", ""),
                "port": smtp_port,
                # SMTP_USER / SMTP_PASS / SMTP_FROM are the legacy deployment names
                "username": _getenv_first("SMTP_USERNAME", "SMTP_USER"),
                "password": _getenv_first("SMTP_PASSWORD", "SMTP_PASS"),
                "from_email": _getenv_first(
                    "SMTP_FROM_EMAIL", "SMTP_FROM", "SMTP_USERNAME", "SMTP_USER"
                ),
                "from_name": os.getenv("SMTP_FROM_NAME", "Vacation Tracker"),
                "use_tls": parse_bool(os.getenv("SMTP_SECURE"), smtp_port == 465),
                "start_tls": parse_bool(os.getenv("SMTP_STARTTLS"), smtp_port == 587),
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation key."""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def is_email_configured(self) -> bool:
        """Check if SMTP credentials are set."""
        return bool(
            self.get("email.host") and
            self.get("email.username") and
            self.get("email.password") and
            self.get("email.from_email")
        )


class AppContext:
    """
    Application Context - Central Dependency Injection Container.
    """

    def __init__(self, config_loader: Optional[ConfigLoader] = None) -> None:
        self._logger = logging.getLogger(__name__)
        if config_loader is None:
            config_loader = ConfigLoader()
            config_loader.load()
        self._config_loader = config_loader

        # Event log for the status endpoint
        self._event_log: list[str] = []
        self._max_log_entries: int = 500

        # Runtime state
        self._server_running: bool = False
        self._server_port: int = self._config_loader.get("server.port", 8787)

    @property
    def config(self) -> ConfigLoader:
        """Access the configuration loader."""
        return self._config_loader

    def log_event(self, message: str, level: str = "INFO") -> None:
        """Log an event to both logger and event log."""
        from datetime import datetime
        timestamp = datetime.now().strftime("%H:%M:%S")
        formatted = f"[{timestamp}] [{level}] {message}"

        self._event_log.append(formatted)
        if len(self._event_log) > self._max_log_entries:
            self._event_log = self._event_log[-self._max_log_entries:]

        self._logger.info(message)

    def get_event_log(self) -> list[str]:
        """Get the current event log."""
        return self._event_log.copy()

    def set_server_status(self, running: bool, port: int = 8787) -> None:
        """Update server status."""
        self._server_running = running
        self._server_port = port

    def get_server_status(self) -> tuple[bool, int]:
        """Get current server status."""
        return (self._server_running, self._server_port)
