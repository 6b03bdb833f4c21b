"""
Vacation Module.

Vacation requests, manager approvals, leave timeline and signed-request
reminders.
"""

from modules.vacation.vacation_module import VacationModule, create_module

__all__ = ["VacationModule", "create_module"]
