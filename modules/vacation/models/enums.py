"""
Vacation Domain Enums.

Closed value sets stored as plain strings in the database.
"""

from enum import Enum
from typing import Optional


class Department(str, Enum):
    """Organizational scope partitioning visibility and management authority."""

    PRODUCTION = "production"
    ADMINISTRATION = "administration"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _DEPARTMENT_LABELS[self]

    @classmethod
    def parse(cls, value: object) -> Optional["Department"]:
        """
        Parse a department from user input.

        Accepts the canonical values case-insensitively as well as the
        Lithuanian names used by the first deployment (gamyba, administracija).
        Returns None for anything else.
        """
        normalized = str(value or "").strip().lower()
        normalized = _DEPARTMENT_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            return None

    @classmethod
    def parse_or_default(
        cls, value: object, default: Optional["Department"] = None
    ) -> "Department":
        """Parse a department, falling back to production."""
        return cls.parse(value) or default or cls.PRODUCTION


_DEPARTMENT_ALIASES = {
    "gamyba": Department.PRODUCTION.value,
    "administracija": Department.ADMINISTRATION.value,
}

_DEPARTMENT_LABELS = {
    Department.PRODUCTION: "Production",
    Department.ADMINISTRATION: "Administration",
}


class VacationStatus(str, Enum):
    """Stored lifecycle status of a vacation request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    def __str__(self) -> str:
        return self.value

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS = {
    VacationStatus.PENDING: "Awaiting approval",
    VacationStatus.APPROVED: "Approved",
    VacationStatus.REJECTED: "Rejected",
}
