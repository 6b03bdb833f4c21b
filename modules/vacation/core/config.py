"""
Vacation Module Configuration.

Manages environment variables specific to the vacation module.
Manager token overrides accept the variable names used by earlier
deployments (MANAGER_TOKEN_GAMYBA, MANAGER_TOKEN_ADMINISTRACIJA, MANAGER_TOKEN).
"""

from functools import lru_cache
from typing import Annotated

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from modules.vacation.models.enums import Department


class VacationSettings(BaseSettings):
    """
    Vacation module settings loaded from environment variables.

    Sensitive values use SecretStr so they never end up in logs or reprs.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Explicit manager tokens (override generated ones when set)
    manager_token_production: Annotated[
        SecretStr,
        Field(
            description="Manager token of the production department",
            validation_alias=AliasChoices(
                "MANAGER_TOKEN_PRODUCTION", "MANAGER_TOKEN_GAMYBA", "MANAGER_TOKEN"
            ),
        ),
    ] = SecretStr("")

    manager_token_administration: Annotated[
        SecretStr,
        Field(
            description="Manager token of the administration department (cross-department)",
            validation_alias=AliasChoices(
                "MANAGER_TOKEN_ADMINISTRATION", "MANAGER_TOKEN_ADMINISTRACIJA"
            ),
        ),
    ] = SecretStr("")

    # Notifications
    manager_notification_email: Annotated[
        str,
        Field(
            description="Inbox receiving new-request and signed-request reminder emails",
            validation_alias=AliasChoices(
                "MANAGER_NOTIFICATION_EMAIL", "NOTIFICATION_EMAIL"
            ),
        ),
    ] = ""

    reminder_interval_seconds: Annotated[
        int,
        Field(
            gt=0,
            description="Interval of the recurring signed-request reminder sweep",
            validation_alias="REMINDER_INTERVAL_SECONDS",
        ),
    ] = 3600

    reminder_debounce_seconds: Annotated[
        float,
        Field(
            ge=0,
            description="Delay of the sweep triggered after a manager mutation",
            validation_alias="REMINDER_DEBOUNCE_SECONDS",
        ),
    ] = 5.0

    signed_request_deadline_days: Annotated[
        int,
        Field(
            ge=0,
            description="Days before leave start when a missing signed request is flagged",
            validation_alias="SIGNED_REQUEST_DEADLINE_DAYS",
        ),
    ] = 14

    frontend_url: Annotated[
        str,
        Field(
            description="Base URL of the web frontend (used in links and emails)",
            validation_alias="FRONTEND_URL",
        ),
    ] = ""

    def token_overrides(self) -> dict[Department, str]:
        """Explicit token per department; empty string when not configured."""
        return {
            Department.PRODUCTION: self.manager_token_production.get_secret_value().strip(),
            Department.ADMINISTRATION: self.manager_token_administration.get_secret_value().strip(),
        }


@lru_cache
def get_vacation_settings() -> VacationSettings:
    """
    Get cached vacation module settings.

    Uses LRU cache to ensure settings are loaded only once.

    Returns:
        VacationSettings: Vacation settings instance.
    """
    return VacationSettings()
