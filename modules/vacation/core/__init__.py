"""
Vacation Module Core Configuration.
"""

from modules.vacation.core.config import VacationSettings, get_vacation_settings

__all__ = ["VacationSettings", "get_vacation_settings"]
