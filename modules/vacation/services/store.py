"""
Vacation Domain Store.

Persistence operations for vacation records and the settings table.
Each store wraps the request's AsyncSession; committing is left to the
session owner (get_db_session / get_standalone_session).

Invariants enforced here, before anything is written:
    - employee_name is trimmed, whitespace-collapsed and non-empty
    - start_date <= end_date for the resulting record, even when an update
      touches only one of the two dates
    - new records start as pending and unsigned
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Mapping, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.vacation.models import Department, Setting, Vacation, VacationStatus
from modules.vacation.services.clock import Clock
from modules.vacation.services.errors import (
    VacationNotFoundError,
    VacationValidationError,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset({
    "employee_name",
    "department",
    "start_date",
    "end_date",
    "status",
    "signed_request_received",
    "signed_request_reminder_sent_at",
})


def normalize_employee_name(value: object) -> str:
    """Trim and collapse internal whitespace to single spaces."""
    return " ".join(str(value or "").split())


def _require_name(value: object) -> str:
    name = normalize_employee_name(value)
    if not name:
        raise VacationValidationError("Employee name must not be empty.", field="employee_name")
    return name


def _require_date(value: object, field: str) -> date:
    if isinstance(value, datetime) or not isinstance(value, date):
        raise VacationValidationError(f"{field} must be a calendar date.", field=field)
    return value


def _require_order(start_date: date, end_date: date) -> None:
    if start_date > end_date:
        raise VacationValidationError(
            "Start date cannot be later than end date.", field="start_date"
        )


class VacationStore:
    """Create, list and update vacation records."""

    def __init__(self, session: AsyncSession, clock: Optional[Clock] = None) -> None:
        self._session = session
        self._clock = clock or Clock()

    async def create(
        self,
        employee_name: str,
        department: Department | str | None,
        start_date: date,
        end_date: date,
    ) -> Vacation:
        """
        Insert a new pending, unsigned vacation request.

        An unknown or missing department falls back to production.

        Raises:
            VacationValidationError: empty name or start after end.
        """
        name = _require_name(employee_name)
        start_date = _require_date(start_date, "start_date")
        end_date = _require_date(end_date, "end_date")
        _require_order(start_date, end_date)

        now = self._clock.now()
        vacation = Vacation(
            employee_name=name,
            department=Department.parse_or_default(department).value,
            start_date=start_date,
            end_date=end_date,
            status=VacationStatus.PENDING.value,
            signed_request_received=False,
            signed_request_received_at=None,
            signed_request_reminder_sent_at=None,
            created_at=now,
            updated_at=now,
        )
        self._session.add(vacation)
        await self._session.flush()

        logger.info(
            f"Vacation {vacation.id} created: {vacation.department} "
            f"{start_date.isoformat()}..{end_date.isoformat()}"
        )
        return vacation

    async def list_vacations(
        self,
        department: Department | str | None = None,
        include_rejected: bool = False,
    ) -> list[Vacation]:
        """
        Vacations ordered by start date, then case-insensitive employee name.

        Rejected vacations are excluded unless include_rejected is set.
        """
        stmt = select(Vacation)

        if department:
            stmt = stmt.where(Vacation.department == Department.parse_or_default(department).value)

        if not include_rejected:
            stmt = stmt.where(Vacation.status != VacationStatus.REJECTED.value)

        stmt = stmt.order_by(
            Vacation.start_date.asc(),
            func.lower(Vacation.employee_name).asc(),
            Vacation.created_at.asc(),
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, vacation_id: str) -> Optional[Vacation]:
        return await self._session.get(Vacation, vacation_id)

    async def update(self, vacation_id: str, changes: Mapping[str, Any]) -> Vacation:
        """
        Apply a partial update; only the supplied fields change.

        Setting signed_request_received to true stamps signed_request_received_at
        (kept when it was already true); false clears it. updated_at is refreshed
        whenever at least one field is supplied.

        Raises:
            VacationNotFoundError: unknown id.
            VacationValidationError: invalid value or resulting start > end.
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise VacationValidationError(
                f"Fields cannot be updated: {', '.join(sorted(unknown))}."
            )

        vacation = await self.get_by_id(vacation_id)
        if vacation is None:
            raise VacationNotFoundError("Vacation not found.")

        # Validate everything before touching the entity
        values: dict[str, Any] = {}

        if "employee_name" in changes:
            values["employee_name"] = _require_name(changes["employee_name"])

        if "department" in changes:
            department = Department.parse(changes["department"])
            if department is None:
                raise VacationValidationError("Unknown department.", field="department")
            values["department"] = department.value

        if "start_date" in changes:
            values["start_date"] = _require_date(changes["start_date"], "start_date")

        if "end_date" in changes:
            values["end_date"] = _require_date(changes["end_date"], "end_date")

        _require_order(
            values.get("start_date", vacation.start_date),
            values.get("end_date", vacation.end_date),
        )

        if "status" in changes:
            try:
                values["status"] = VacationStatus(changes["status"]).value
            except ValueError:
                raise VacationValidationError("Unknown status.", field="status")

        if "signed_request_received" in changes:
            received = changes["signed_request_received"]
            if not isinstance(received, bool):
                raise VacationValidationError(
                    "signed_request_received must be true or false.",
                    field="signed_request_received",
                )
            values["signed_request_received"] = received

        if "signed_request_reminder_sent_at" in changes:
            sent_at = changes["signed_request_reminder_sent_at"]
            if sent_at is not None and not isinstance(sent_at, datetime):
                raise VacationValidationError(
                    "signed_request_reminder_sent_at must be a timestamp.",
                    field="signed_request_reminder_sent_at",
                )
            values["signed_request_reminder_sent_at"] = sent_at

        if not values:
            return vacation

        now = self._clock.now()

        if "signed_request_received" in values:
            if not values["signed_request_received"]:
                vacation.signed_request_received_at = None
            elif not vacation.signed_request_received:
                vacation.signed_request_received_at = now

        for key, value in values.items():
            setattr(vacation, key, value)
        vacation.updated_at = now

        await self._session.flush()
        logger.info(f"Vacation {vacation.id} updated: {', '.join(sorted(values))}")
        return vacation

    async def list_reminder_candidates(
        self,
        today: date,
        deadline_days: int,
    ) -> list[Vacation]:
        """
        Approved, unsigned vacations starting within [today, today + deadline_days]
        that have not had a reminder yet.
        """
        stmt = (
            select(Vacation)
            .where(
                Vacation.status == VacationStatus.APPROVED.value,
                Vacation.signed_request_received.is_(False),
                Vacation.signed_request_reminder_sent_at.is_(None),
                Vacation.start_date >= today,
                Vacation.start_date <= today + timedelta(days=deadline_days),
            )
            .order_by(Vacation.start_date.asc(), func.lower(Vacation.employee_name).asc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def mark_reminder_sent(self, vacation_id: str, sent_at: datetime) -> Vacation:
        return await self.update(vacation_id, {"signed_request_reminder_sent_at": sent_at})


class SettingsStore:
    """Key-value access to the settings table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, key: str) -> Optional[str]:
        setting = await self._session.get(Setting, key)
        return setting.value if setting is not None else None

    async def set(self, key: str, value: str) -> None:
        setting = await self._session.get(Setting, key)
        if setting is None:
            self._session.add(Setting(key=key, value=value))
        else:
            setting.value = value
        await self._session.flush()
