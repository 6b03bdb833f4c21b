"""
Vacation Module Routers.
"""

from modules.vacation.routers.vacations import manager_router
from modules.vacation.routers.vacations import router as vacations_router

__all__ = [
    "manager_router",
    "vacations_router",
]
