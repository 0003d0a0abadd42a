"""Training calendar: month grid reconciliation and the cached calendar service."""

from fitclient.calendar.reconciler import (
    REST_DAY_LABEL,
    CalendarCell,
    DayRecord,
    DayStatus,
    build_month_grid,
    current_week,
    resolve_status,
    same_calendar_day,
)

__all__ = [
    "REST_DAY_LABEL",
    "CalendarCell",
    "DayRecord",
    "DayStatus",
    "build_month_grid",
    "current_week",
    "resolve_status",
    "same_calendar_day",
]
