"""
Vacation Module Services.

Contains business logic services for the vacation module.

    - VacationStore / SettingsStore: persistence
    - manager_auth: manager tokens and role checks
    - VacationNotificationService: manager inbox e-mails
    - ReminderService: signed-request reminder sweep
"""

from modules.vacation.services.clock import Clock, FixedClock, get_clock
from modules.vacation.services.errors import (
    ManagerForbiddenError,
    ManagerUnauthorizedError,
    VacationError,
    VacationNotFoundError,
    VacationValidationError,
)
from modules.vacation.services.manager_auth import (
    ManagerRole,
    ManagerSession,
    ManagerTokens,
    authorize_update,
    ensure_in_scope,
    generate_manager_token,
    load_manager_tokens,
    resolve_manager_session,
)
from modules.vacation.services.notifications import (
    VacationNotificationService,
    get_vacation_notification_service,
)
from modules.vacation.services.reminders import ReminderService, ReminderSweepResult
from modules.vacation.services.store import (
    SettingsStore,
    VacationStore,
    normalize_employee_name,
)

__all__ = [
    # Clock
    "Clock",
    "FixedClock",
    "get_clock",
    # Errors
    "VacationError",
    "VacationValidationError",
    "VacationNotFoundError",
    "ManagerUnauthorizedError",
    "ManagerForbiddenError",
    # Manager auth
    "ManagerRole",
    "ManagerSession",
    "ManagerTokens",
    "authorize_update",
    "ensure_in_scope",
    "generate_manager_token",
    "load_manager_tokens",
    "resolve_manager_session",
    # Notifications
    "VacationNotificationService",
    "get_vacation_notification_service",
    # Reminders
    "ReminderService",
    "ReminderSweepResult",
    # Store
    "SettingsStore",
    "VacationStore",
    "normalize_employee_name",
]
