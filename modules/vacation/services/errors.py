"""
Vacation Module Exceptions.

Routers translate these into HTTP responses; services raise them before
anything is written to the database.
"""


class VacationError(Exception):
    """Base exception for vacation-related errors."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class VacationValidationError(VacationError):
    """
    Raised when input violates a domain rule.

    Examples:
        - empty employee name
        - start date after end date
        - unknown department or status
    """

    status_code = 400

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class VacationNotFoundError(VacationError):
    """
    Raised when a record does not exist, or exists outside the caller's
    department scope. Both cases answer the same way.
    """

    status_code = 404


class ManagerUnauthorizedError(VacationError):
    """Raised when the manager token is missing or unrecognized."""

    status_code = 401


class ManagerForbiddenError(VacationError):
    """Raised when a recognized manager lacks the role for a specific change."""

    status_code = 403
