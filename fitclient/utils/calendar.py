"""Week and month window helpers.

Week boundaries are Monday-Sunday (ISO week).
"""

import calendar
from collections.abc import Iterator
from datetime import date, timedelta


def week_start(d: date) -> date:
    """Return Monday of the calendar week containing d."""
    return d - timedelta(days=d.weekday())


def week_end(d: date) -> date:
    """Return Sunday of the calendar week containing d."""
    return week_start(d) + timedelta(days=6)


def month_start(d: date) -> date:
    return d.replace(day=1)


def month_end(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
