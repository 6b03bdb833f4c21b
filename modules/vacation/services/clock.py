"""
Clock abstraction.

"Today" drives status classification and reminder eligibility; routes and
services receive a Clock so tests can pin the date.
"""

from datetime import date, datetime, timezone


class Clock:
    """System clock."""

    def today(self) -> date:
        """Local calendar date."""
        return date.today()

    def now(self) -> datetime:
        """Timezone-aware UTC timestamp."""
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock pinned to a given day (tests, scripts)."""

    def __init__(self, today: date, now: datetime | None = None) -> None:
        self._today = today
        self._now = now or datetime(today.year, today.month, today.day, 9, 0, tzinfo=timezone.utc)

    def today(self) -> date:
        return self._today

    def now(self) -> datetime:
        return self._now


_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency returning the system clock."""
    return _clock
