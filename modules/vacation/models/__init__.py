"""
Vacation Module Database Models.
"""

from modules.vacation.models.enums import Department, VacationStatus
from modules.vacation.models.setting import Setting
from modules.vacation.models.vacation import Vacation

__all__ = ["Department", "VacationStatus", "Setting", "Vacation"]
