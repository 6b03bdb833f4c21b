"""
Calendar and date utilities.

Dates are timezone-less calendar dates (datetime.date), so weekday and
day arithmetic never drift with daylight-saving changes. Holidays follow
the Lithuanian public-holiday calendar and only affect display.
"""

import re
from datetime import date, timedelta
from enum import Enum
from functools import lru_cache
from typing import NamedTuple, Optional

ISO_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)

# (month, day)
LITHUANIAN_FIXED_HOLIDAYS = (
    (1, 1),
    (2, 16),
    (3, 11),
    (5, 1),
    (6, 24),
    (7, 6),
    (8, 15),
    (11, 1),
    (11, 2),
    (12, 24),
    (12, 25),
    (12, 26),
)


class ViewMode(str, Enum):
    """Visible calendar window of the timeline."""

    MONTH = "month"
    YEAR = "year"

    def __str__(self) -> str:
        return self.value


class DateRange(NamedTuple):
    start: date
    end: date


def is_valid_iso_date(value: object) -> bool:
    """True for strings of the exact form YYYY-MM-DD naming a real day."""
    if not isinstance(value, str) or not ISO_DATE_PATTERN.fullmatch(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value: str) -> date:
    return date.fromisoformat(value)


def format_date(value: date) -> str:
    return value.isoformat()


def add_days(value: date, amount: int) -> date:
    return value + timedelta(days=amount)


def difference_in_days(start: date, end: date) -> int:
    """Calendar days from start to end (negative when end is earlier)."""
    return (end - start).days


def start_of_month(value: date) -> date:
    return value.replace(day=1)


def end_of_month(value: date) -> date:
    if value.month == 12:
        return date(value.year, 12, 31)
    return date(value.year, value.month + 1, 1) - timedelta(days=1)


def start_of_year(value: date) -> date:
    return date(value.year, 1, 1)


def end_of_year(value: date) -> date:
    return date(value.year, 12, 31)


def visible_range(anchor: date, mode: ViewMode | str) -> DateRange:
    """First and last day of the anchor's month (month mode) or year (year mode)."""
    if ViewMode(mode) is ViewMode.YEAR:
        return DateRange(start_of_year(anchor), end_of_year(anchor))
    return DateRange(start_of_month(anchor), end_of_month(anchor))


def enumerate_days(start: date, end: date) -> list[date]:
    """All days from start to end inclusive; empty when end < start."""
    return [start + timedelta(days=offset) for offset in range((end - start).days + 1)]


def clamp_interval(
    item_start: date,
    item_end: date,
    range_start: date,
    range_end: date,
) -> Optional[DateRange]:
    """Intersection of [item_start, item_end] and [range_start, range_end], or None."""
    if item_end < range_start or item_start > range_end:
        return None
    return DateRange(max(item_start, range_start), min(item_end, range_end))


def shift_iso_date(iso_date: str, delta_days: int) -> str:
    return format_date(add_days(parse_date(iso_date), delta_days))


def shift_anchor(anchor: date, mode: ViewMode | str, direction: int) -> date:
    """Move the anchor by whole months or years; the result is the 1st of a month."""
    if ViewMode(mode) is ViewMode.YEAR:
        return date(anchor.year + direction, anchor.month, 1)

    month_index = anchor.year * 12 + (anchor.month - 1) + direction
    return date(month_index // 12, month_index % 12 + 1, 1)


def order_dates(a: date, b: date) -> tuple[date, date]:
    return (a, b) if a <= b else (b, a)


def easter_sunday(year: int) -> date:
    """
    Gregorian Easter Sunday (Meeus/Jones/Butcher algorithm).

    Exact for every Gregorian year, e.g. 2024-03-31, 2025-04-20.
    """
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


@lru_cache(maxsize=64)
def holidays_for_year(year: int) -> frozenset[date]:
    """Lithuanian public holidays of one year (fixed dates plus Easter Sunday/Monday)."""
    easter = easter_sunday(year)
    fixed = {date(year, month, day) for month, day in LITHUANIAN_FIXED_HOLIDAYS}
    return frozenset(fixed | {easter, easter + timedelta(days=1)})


def is_weekend(value: date) -> bool:
    return value.weekday() >= 5


def is_holiday(value: date) -> bool:
    return value in holidays_for_year(value.year)
