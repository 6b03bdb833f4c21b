"""
Manager Authorization.

Each department has one shared manager secret. The administration secret
acts as a super-manager token: it opens every department's manager view
and is the only one allowed to change the signed-request flag or move a
record between departments.

Tokens are resolved once at startup and kept on app.state; request
handlers receive them through a FastAPI dependency.
"""

import logging
import secrets
import string
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from modules.vacation.models import Department, Vacation
from modules.vacation.services.errors import (
    ManagerForbiddenError,
    ManagerUnauthorizedError,
    VacationNotFoundError,
)
from modules.vacation.services.store import SettingsStore

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 32
TOKEN_ALPHABET = string.ascii_letters + string.digits

# Fields only a manager with cross-department authority may change
RESTRICTED_FIELDS = frozenset({"department", "signed_request_received"})


class ManagerRole(str, Enum):
    DEPARTMENT_MANAGER = "department-manager"
    SUPER_MANAGER = "administration-super"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ManagerTokens:
    """Immutable department -> token mapping."""

    tokens: Mapping[Department, str]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tokens", MappingProxyType(dict(self.tokens)))

    def for_department(self, department: Department) -> str:
        return self.tokens.get(department, "")


@dataclass(frozen=True)
class ManagerSession:
    """Authenticated manager context for one request."""

    department: Department
    manager_department: Department
    role: ManagerRole

    @property
    def can_manage_all_departments(self) -> bool:
        return self.role is ManagerRole.SUPER_MANAGER

    @property
    def can_edit_signed_request(self) -> bool:
        return self.role is ManagerRole.SUPER_MANAGER

    def to_dict(self) -> dict[str, Any]:
        return {
            "department": self.department.value,
            "manager_department": self.manager_department.value,
            "manager_role": self.role.value,
            "can_manage_all_departments": self.can_manage_all_departments,
            "can_edit_signed_request": self.can_edit_signed_request,
        }


def generate_manager_token(length: int = TOKEN_LENGTH) -> str:
    """Random alphanumeric secret from a CSPRNG."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def token_setting_key(department: Department) -> str:
    return f"manager_token_{department.value}"


async def load_manager_tokens(
    session: AsyncSession,
    overrides: Optional[Mapping[Department, str]] = None,
) -> ManagerTokens:
    """
    Resolve the manager token of every department.

    Precedence per department: explicit override (persisted so it survives
    a later restart without the variable), then the stored token, then a
    freshly generated token which is stored.
    """
    overrides = overrides or {}
    settings = SettingsStore(session)
    tokens: dict[Department, str] = {}

    for department in Department:
        key = token_setting_key(department)
        explicit = (overrides.get(department) or "").strip()

        if explicit:
            await settings.set(key, explicit)
            tokens[department] = explicit
            continue

        stored = await settings.get(key)
        if stored:
            tokens[department] = stored
            continue

        created = generate_manager_token()
        await settings.set(key, created)
        tokens[department] = created
        logger.info(f"Generated manager token for {department.value}")

    return ManagerTokens(tokens)


def _matches(supplied: str, expected: str) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def resolve_manager_session(
    tokens: ManagerTokens,
    department: Department,
    supplied_token: Optional[str],
) -> ManagerSession:
    """
    Authenticate a manager token against the path department.

    Raises:
        ManagerUnauthorizedError: token missing or matching neither the
            administration token nor the department's own token.
    """
    supplied = (supplied_token or "").strip()
    if not supplied:
        raise ManagerUnauthorizedError("Manager token is required.")

    if _matches(supplied, tokens.for_department(Department.ADMINISTRATION)):
        return ManagerSession(
            department=department,
            manager_department=Department.ADMINISTRATION,
            role=ManagerRole.SUPER_MANAGER,
        )

    if _matches(supplied, tokens.for_department(department)):
        return ManagerSession(
            department=department,
            manager_department=department,
            role=ManagerRole.DEPARTMENT_MANAGER,
        )

    raise ManagerUnauthorizedError("Unauthorized manager access.")


def ensure_in_scope(session: ManagerSession, vacation: Optional[Vacation]) -> Vacation:
    """
    Return the vacation if it belongs to the session's path department.

    Raises:
        VacationNotFoundError: record missing or in another department.
    """
    if vacation is None or vacation.department != session.department.value:
        raise VacationNotFoundError("Vacation not found in this department.")
    return vacation


def authorize_update(session: ManagerSession, changes: Mapping[str, Any]) -> None:
    """
    Raises:
        ManagerForbiddenError: a restricted field is changed without
            cross-department authority.
    """
    if session.can_manage_all_departments:
        return

    if "signed_request_received" in changes:
        raise ManagerForbiddenError(
            "Only the administration manager can change the signed request flag."
        )
    if "department" in changes:
        raise ManagerForbiddenError(
            "Only the administration manager can move a vacation to another department."
        )
