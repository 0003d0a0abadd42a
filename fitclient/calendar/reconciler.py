"""Calendar reconciliation engine.

Expands the server's sparse list of day records into a dense, Monday-first
month grid and resolves one status per day.

Pure and deterministic: "today" is an argument, there are no clock reads
and no I/O, and every input (sparse, duplicated or contradictory) maps to
a defined output.

Day records are matched to cells by month and day-of-month only. The
server is known to send a sentinel or mismatched year, so the year is
ignored; day_match_key is the single place to change if that ever goes away.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import StrEnum

from fitclient.utils.calendar import iter_days, month_end, month_start, week_end, week_start

REST_DAY_LABEL = "Rest today"
DAYS_PER_WEEK = 7


class DayStatus(StrEnum):
    """Workout status of a calendar day."""

    COMPLETED = "completed"
    PLANNED = "planned"
    MISSED = "missed"
    ACTIVE_TODAY = "active"
    REST_DAY = "rest"


@dataclass(frozen=True)
class DayRecord:
    """One server calendar entry."""

    calendar_date: date
    label: str = ""
    workout_title: str = ""
    workout_id: str | None = None
    trained: bool = False
    canceled: bool = False

    @property
    def is_rest_day(self) -> bool:
        return self.label == REST_DAY_LABEL


@dataclass(frozen=True)
class CalendarCell:
    """One rendered day of the month grid.

    day_of_month is None for padding days outside the requested month.
    """

    civil_date: date
    day_of_month: int | None
    is_in_requested_month: bool
    status: DayStatus | None = None
    workout_id: str | None = None
    workout_title: str | None = None
    label: str | None = None
    is_today: bool = False
    is_past: bool = False

    @property
    def is_rest_day(self) -> bool:
        return self.status == DayStatus.REST_DAY


def day_match_key(d: date) -> tuple[int, int]:
    """Key used to match a record to a cell (year deliberately left out)."""
    return (d.month, d.day)


def same_calendar_day(a: date, b: date) -> bool:
    return day_match_key(a) == day_match_key(b)


def _month_relation(month: int, today_month: int) -> int:
    """Compare month numbers: 0 same month, 1 later, -1 earlier.

    The `month - 12` terms mirror the server contract's wraparound checks.
    """
    if month == today_month or month - 12 == today_month:
        return 0
    if month > today_month or month - 12 > today_month:
        return 1
    return -1


def resolve_status(record: DayRecord, today: date) -> DayStatus | None:
    """Resolve the status of a matched day record.

    First match wins:
    1. Rest-day label
    2. Trained and not canceled
    3. Canceled and not trained
    4. Today, with a workout
    5. Month/day position relative to today, for untouched workouts only
    """
    if record.is_rest_day:
        return DayStatus.REST_DAY
    if record.trained and not record.canceled:
        return DayStatus.COMPLETED
    if record.canceled and not record.trained:
        return DayStatus.MISSED

    record_date = record.calendar_date
    if record.workout_id and same_calendar_day(record_date, today):
        return DayStatus.ACTIVE_TODAY

    # Both flags set, or no workout to plan/miss
    if not record.workout_id or record.trained or record.canceled:
        return None

    relation = _month_relation(record_date.month, today.month)
    if relation == 0:
        if record_date.day > today.day:
            return DayStatus.PLANNED
        if record_date.day < today.day:
            return DayStatus.MISSED
        return None
    return DayStatus.PLANNED if relation > 0 else DayStatus.MISSED


def index_records(day_records: Iterable[DayRecord]) -> dict[tuple[int, int], DayRecord]:
    """Index records by match key; the last record for a day wins."""
    index: dict[tuple[int, int], DayRecord] = {}
    for record in day_records:
        index[day_match_key(record.calendar_date)] = record
    return index


def _build_cell(
    d: date,
    anchor_month: tuple[int, int],
    records: dict[tuple[int, int], DayRecord],
    today: date,
) -> CalendarCell:
    month_key = (d.year, d.month)
    in_month = month_key == anchor_month
    is_today = same_calendar_day(d, today)
    base = {
        "civil_date": d,
        "day_of_month": d.day if in_month else None,
        "is_in_requested_month": in_month,
        "is_today": is_today,
        "is_past": d < today,
    }

    # Trailing padding never shows next month's workouts
    if month_key > anchor_month:
        return CalendarCell(**base)

    record = records.get(day_match_key(d))
    if record is None:
        status = DayStatus.ACTIVE_TODAY if in_month and is_today else None
        return CalendarCell(**base, status=status)

    return CalendarCell(
        **base,
        status=resolve_status(record, today),
        workout_id=record.workout_id,
        workout_title=record.workout_title or None,
        label=record.label or None,
    )


def build_month_grid(anchor: date, day_records: Iterable[DayRecord], today: date) -> list[list[CalendarCell]]:
    """Build the Monday-first week grid for the month containing anchor.

    Args:
        anchor: Any date within the requested month
        day_records: Server day records, in any order, possibly duplicated
        today: Current civil date

    Returns:
        Weeks of exactly seven cells. Leading and trailing cells pad the
        first and last week with days of the neighbouring months.

    Trailing cells of the following month never carry a status. The months
    are compared as (year, month), so January's leading December cells keep
    theirs rather than being cleared as a larger month number.
    """
    first = month_start(anchor)
    anchor_month = (first.year, first.month)
    records = index_records(day_records)

    cells = [
        _build_cell(d, anchor_month, records, today)
        for d in iter_days(week_start(first), week_end(month_end(first)))
    ]
    return [cells[i : i + DAYS_PER_WEEK] for i in range(0, len(cells), DAYS_PER_WEEK)]


def current_week(grid: list[list[CalendarCell]]) -> list[CalendarCell]:
    """Return the week holding today's cell, or the first week if there is none."""
    for week in grid:
        if any(cell.is_today for cell in week):
            return week
    return grid[0] if grid else []
