"""
Timeline layout: lane assignment and daily overlap counts.

Lanes are a display concern only. Each employee's vacations are stacked
into the fewest rows such that no two vacations in the same row overlap
(greedy interval-graph colouring over intervals sorted by start date).
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Generic, Iterable, Sequence, TypeVar

from modules.vacation.models.enums import VacationStatus
from modules.vacation.services.calendar import (
    ViewMode,
    clamp_interval,
    difference_in_days,
    enumerate_days,
    is_holiday,
    is_weekend,
    visible_range,
)
from modules.vacation.services.status import (
    SIGNED_REQUEST_DEADLINE_DAYS,
    StatusView,
    VacationLike,
    classify,
)

T = TypeVar("T", bound=VacationLike)


@dataclass(frozen=True)
class LaneAssignment(Generic[T]):
    item: T
    lane: int


@dataclass(frozen=True)
class TimelineBar(Generic[T]):
    vacation: T
    lane: int
    offset_days: int
    span_days: int
    status: StatusView


@dataclass
class TimelineRow(Generic[T]):
    employee_name: str
    lane_count: int
    bars: list[TimelineBar[T]] = field(default_factory=list)


@dataclass(frozen=True)
class TimelineDay:
    day: date
    is_weekend: bool
    is_holiday: bool
    is_month_start: bool
    overlap: int


@dataclass
class Timeline(Generic[T]):
    mode: ViewMode
    range_start: date
    range_end: date
    rows: list[TimelineRow[T]]
    days: list[TimelineDay]

    @property
    def max_overlap(self) -> int:
        return max((day.overlap for day in self.days), default=0)


def assign_lanes(items: Iterable[T]) -> list[LaneAssignment[T]]:
    """
    Assign each interval the lowest lane whose last interval ended before it starts.

    The number of lanes used equals the maximum number of intervals
    overlapping on any single day.
    """
    lane_ends: list[date] = []
    assignments: list[LaneAssignment[T]] = []

    for item in sorted(items, key=lambda v: (v.start_date, v.end_date)):
        lane = next(
            (index for index, lane_end in enumerate(lane_ends) if lane_end < item.start_date),
            len(lane_ends),
        )
        if lane == len(lane_ends):
            lane_ends.append(item.end_date)
        else:
            lane_ends[lane] = item.end_date
        assignments.append(LaneAssignment(item, lane))

    return assignments


def _is_active(vacation: VacationLike) -> bool:
    return vacation.status != VacationStatus.REJECTED.value


def overlap_counts(vacations: Iterable[VacationLike], days: Sequence[date]) -> list[int]:
    """Per day, the number of non-rejected vacations covering it."""
    active = [v for v in vacations if _is_active(v)]
    return [
        sum(1 for v in active if v.start_date <= day <= v.end_date)
        for day in days
    ]


def overlap_counts_sweep(
    vacations: Iterable[VacationLike],
    range_start: date,
    range_end: date,
) -> list[int]:
    """
    Same result as overlap_counts over enumerate_days(range_start, range_end),
    computed with one pass over start/end boundary events.
    """
    total_days = difference_in_days(range_start, range_end) + 1
    if total_days <= 0:
        return []

    # deltas[i] changes the running count from day i onward
    deltas = [0] * (total_days + 1)
    for vacation in vacations:
        if not _is_active(vacation):
            continue
        clamped = clamp_interval(vacation.start_date, vacation.end_date, range_start, range_end)
        if clamped is None:
            continue
        deltas[difference_in_days(range_start, clamped.start)] += 1
        deltas[difference_in_days(range_start, clamped.end) + 1] -= 1

    counts: list[int] = []
    running = 0
    for delta in deltas[:total_days]:
        running += delta
        counts.append(running)
    return counts


def group_by_employee(vacations: Iterable[T]) -> dict[str, list[T]]:
    groups: dict[str, list[T]] = defaultdict(list)
    for vacation in vacations:
        groups[vacation.employee_name.strip()].append(vacation)
    return dict(groups)


def build_timeline(
    vacations: Sequence[T],
    anchor: date,
    mode: ViewMode | str,
    today: date,
    deadline_days: int = SIGNED_REQUEST_DEADLINE_DAYS,
) -> Timeline[T]:
    """
    Lay out vacations for the visible month or year around anchor.

    Lanes are assigned over all of an employee's vacations so a row keeps
    its layout when the window moves; bars are clamped to the window and
    rows without a visible bar are dropped. Overlap counts ignore rejected
    vacations.
    """
    mode = ViewMode(mode)
    range_start, range_end = visible_range(anchor, mode)
    days = enumerate_days(range_start, range_end)

    rows: list[TimelineRow[T]] = []
    for employee_name, employee_vacations in sorted(
        group_by_employee(vacations).items(), key=lambda entry: entry[0].casefold()
    ):
        assignments = assign_lanes(employee_vacations)
        bars = []
        for assignment in assignments:
            vacation = assignment.item
            clamped = clamp_interval(vacation.start_date, vacation.end_date, range_start, range_end)
            if clamped is None:
                continue
            bars.append(
                TimelineBar(
                    vacation=vacation,
                    lane=assignment.lane,
                    offset_days=difference_in_days(range_start, clamped.start),
                    span_days=difference_in_days(clamped.start, clamped.end) + 1,
                    status=classify(vacation, today, deadline_days),
                )
            )

        if not bars:
            continue

        lane_count = max((a.lane + 1 for a in assignments), default=1)
        rows.append(TimelineRow(employee_name, lane_count, bars))

    counts = overlap_counts_sweep(vacations, range_start, range_end)
    timeline_days = [
        TimelineDay(
            day=day,
            is_weekend=is_weekend(day),
            is_holiday=is_holiday(day),
            is_month_start=day.day == 1,
            overlap=count,
        )
        for day, count in zip(days, counts)
    ]

    return Timeline(mode, range_start, range_end, rows, timeline_days)
