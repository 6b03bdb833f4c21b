"""
IAppModule - Abstract Base Class for all application modules.
Follows Interface Segregation Principle (ISP) and Open/Closed Principle (OCP).
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from fastapi import APIRouter, FastAPI

    from core.app_context import AppContext


class IAppModule(ABC):
    """
    Abstract interface for pluggable application modules.
    All business modules must implement this interface to be registered.
    """

    @abstractmethod
    def get_module_name(self) -> str:
        """
        Returns the unique identifier for this module.
        Used for routing and registry lookup.

        Returns:
            str: The module's unique name (e.g., 'vacation')
        """
        pass

    @abstractmethod
    def on_entry(self, context: "AppContext") -> None:
        """
        Called when the module is first loaded/activated.
        Use this for initialization logic that needs no event loop.

        Args:
            context: The application context containing shared services
        """
        pass

    def get_api_router(self) -> Optional["APIRouter"]:
        """
        Returns the module's API router, mounted under /api by the framework.
        """
        return None

    async def async_startup(self, app: "FastAPI") -> None:
        """
        Called from the application lifespan once the event loop runs
        and the database is initialized.
        """
        pass

    async def async_shutdown(self, app: "FastAPI") -> None:
        """
        Called from the application lifespan before connections are closed.
        """
        pass

    def on_shutdown(self) -> None:
        """
        Called when the module is being unloaded.
        Override for cleanup logic.
        """
        pass

    def get_status(self) -> dict:
        """
        Returns the current status of the module for monitoring.

        Returns:
            dict: Status info with structure:
                  {
                      "status": "active" | "warning" | "error" | "initializing",
                      "details": { "key": "value" }
                  }
        """
        return {
            "status": "active",
            "details": {}
        }
