"""
Vacation Status Engine.

Derives the display status of a vacation from its stored status, the
signed-request flag and today's date. The result is never persisted.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Protocol

from modules.vacation.models.enums import VacationStatus

SIGNED_REQUEST_DEADLINE_DAYS = 14

BLOCKED_NO_REQUEST = "blocked-no-request"
MISSING_REQUEST = "missing-request"
ON_LEAVE = "on-leave"


class VacationLike(Protocol):
    employee_name: str
    start_date: date
    end_date: date
    status: str
    signed_request_received: bool


@dataclass(frozen=True)
class StatusView:
    key: str
    label: str


@dataclass(frozen=True)
class SignedRequestAlert:
    key: str
    label: str
    days_until_start: int


def days_until_start(vacation: VacationLike, today: date) -> int:
    return (vacation.start_date - today).days


def _needs_signed_request(vacation: VacationLike) -> bool:
    return (
        vacation.status == VacationStatus.APPROVED.value
        and not vacation.signed_request_received
    )


def classify(
    vacation: VacationLike,
    today: date,
    deadline_days: int = SIGNED_REQUEST_DEADLINE_DAYS,
) -> StatusView:
    """
    Display status of a vacation on a given day.

    First match wins:
        1. approved, unsigned, already started       -> blocked-no-request
        2. approved, unsigned, starts within deadline -> missing-request
        3. approved, signed, today inside the leave   -> on-leave
        4. stored status
    """
    if _needs_signed_request(vacation):
        remaining = days_until_start(vacation, today)
        if remaining <= 0:
            return StatusView(
                BLOCKED_NO_REQUEST,
                "Cannot go on leave: signed paper request missing",
            )
        if remaining <= deadline_days:
            return StatusView(
                MISSING_REQUEST,
                f"Signed request missing, leave starts within {deadline_days} days",
            )

    if (
        vacation.status == VacationStatus.APPROVED.value
        and vacation.signed_request_received
        and vacation.start_date <= today <= vacation.end_date
    ):
        return StatusView(ON_LEAVE, "On leave")

    status = VacationStatus(vacation.status)
    return StatusView(status.value, status.label)


def signed_request_alert(
    vacation: VacationLike,
    today: date,
    deadline_days: int = SIGNED_REQUEST_DEADLINE_DAYS,
) -> Optional[SignedRequestAlert]:
    """Manager-facing alert for an approved vacation still missing its signed request."""
    if not _needs_signed_request(vacation):
        return None

    remaining = days_until_start(vacation, today)
    if remaining > deadline_days:
        return None

    if remaining <= 0:
        return SignedRequestAlert(
            BLOCKED_NO_REQUEST,
            "Leave has started or starts today, but the signed request was not received.",
            remaining,
        )

    return SignedRequestAlert(
        MISSING_REQUEST,
        f"{remaining} day(s) until leave, but the signed request was not received.",
        remaining,
    )


def sorted_alerts(
    vacations: Iterable[VacationLike],
    today: date,
    deadline_days: int = SIGNED_REQUEST_DEADLINE_DAYS,
) -> list[tuple[VacationLike, SignedRequestAlert]]:
    """Vacations with an alert, most urgent first."""
    pairs = []
    for vacation in vacations:
        alert = signed_request_alert(vacation, today, deadline_days)
        if alert is not None:
            pairs.append((vacation, alert))
    pairs.sort(key=lambda pair: pair[1].days_until_start)
    return pairs
