"""
Vacation Module Entry Point.

Implements IAppModule interface for integration with the framework.
Handles vacation requests, manager approvals and the signed-request
reminder sweep.
"""

import logging
from typing import Any, Optional, TYPE_CHECKING

from fastapi import APIRouter, FastAPI

from core.database import get_session_factory, get_standalone_session
from core.interface import IAppModule
from core.scheduler import SingleSlotScheduler
from modules.vacation.core.config import VacationSettings, get_vacation_settings
from modules.vacation.models import Department
from modules.vacation.routers import manager_router, vacations_router
from modules.vacation.services.manager_auth import ManagerTokens, load_manager_tokens
from modules.vacation.services.notifications import VacationNotificationService
from modules.vacation.services.reminders import ReminderService

if TYPE_CHECKING:
    from core.app_context import AppContext

logger = logging.getLogger(__name__)


def build_links(frontend_url: str, tokens: ManagerTokens) -> dict[str, str]:
    """Employee link and one manager link per department."""
    base_url = frontend_url.rstrip("/")
    links = {"employee": f"{base_url}/"}
    for department in (Department.ADMINISTRATION, Department.PRODUCTION):
        links[department.value] = (
            f"{base_url}/manager/{department.value}/{tokens.for_department(department)}"
        )
    return links


class VacationModule(IAppModule):
    """
    Vacation Module.

    Startup:
        - Resolves manager tokens (override, stored or generated)
        - Logs the employee and manager links
        - Starts the recurring reminder sweep
    """

    def __init__(self, settings: Optional[VacationSettings] = None) -> None:
        self._context: Optional["AppContext"] = None
        self._api_router: Optional[APIRouter] = None
        self._settings = settings or get_vacation_settings()
        self._scheduler: Optional[SingleSlotScheduler] = None
        self._reminders: Optional[ReminderService] = None

    def get_module_name(self) -> str:
        """Return module identifier."""
        return "vacation"

    def on_entry(self, context: "AppContext") -> None:
        """
        Build the API router.

        Async work (tokens, scheduler) is deferred to async_startup()
        because no event loop is running yet.
        """
        self._context = context
        logger.info("Vacation module initializing...")

        self._api_router = APIRouter()
        self._api_router.include_router(vacations_router)
        self._api_router.include_router(manager_router)

        context.log_event("Vacation module loaded", "VACATION")
        logger.info("Vacation module initialized")

    def get_api_router(self) -> Optional[APIRouter]:
        """
        Return the API router for this module.

        Returns:
            APIRouter with /vacations/* and /manager/{department}/* endpoints,
            mounted under /api by the framework.
        """
        return self._api_router

    def _frontend_url(self) -> str:
        if self._settings.frontend_url:
            return self._settings.frontend_url
        port = self._context.config.get("server.port", 8787) if self._context else 8787
        return f"http://localhost:{port}"

    async def async_startup(self, app: FastAPI) -> None:
        """Resolve manager tokens and start the reminder scheduler."""
        logger.info("Vacation module async startup...")

        async with get_standalone_session() as session:
            tokens = await load_manager_tokens(session, self._settings.token_overrides())
        app.state.manager_tokens = tokens

        links = build_links(self._frontend_url(), tokens)
        logger.info(f"Employee link: {links['employee']}")
        logger.info(
            f"Manager link (administration, manages all departments): "
            f"{links[Department.ADMINISTRATION.value]}"
        )
        logger.info(
            f"Manager link (production only): {links[Department.PRODUCTION.value]}"
        )

        self._reminders = ReminderService(
            notifications=VacationNotificationService(settings=self._settings),
            session_factory=get_session_factory(),
            deadline_days=self._settings.signed_request_deadline_days,
        )
        self._scheduler = SingleSlotScheduler(
            self._reminders.run_sweep,
            name="signed-request-reminders",
            debounce_seconds=self._settings.reminder_debounce_seconds,
        )
        self._scheduler.schedule_every(self._settings.reminder_interval_seconds)
        # First sweep shortly after startup
        self._scheduler.schedule_soon()
        app.state.reminder_scheduler = self._scheduler

        logger.info("Vacation module async startup completed")

    async def async_shutdown(self, app: FastAPI) -> None:
        if self._scheduler is not None:
            await self._scheduler.shutdown()
            self._scheduler = None
        app.state.reminder_scheduler = None

    def get_status(self) -> dict[str, Any]:
        """Return current module status for monitoring."""
        if self._scheduler is None:
            return {"status": "initializing", "details": {}}

        return {
            "status": "active",
            "details": {
                "Reminder Sweeps": str(self._scheduler.run_count),
                "Skipped Triggers": str(self._scheduler.skipped_count),
                "Sweep Running": str(self._scheduler.is_running),
            },
        }

    def on_shutdown(self) -> None:
        """Cleanup when module is shutting down."""
        logger.info("Vacation module shutting down")


# Module factory function for dynamic loading
def create_module() -> VacationModule:
    """Factory function for module instantiation."""
    return VacationModule()
