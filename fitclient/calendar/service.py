"""Month calendar for the signed-in user.

Fetches day records through the cache (network first, last good copy
when offline) and reconciles them into the grid the calendar screen renders.
"""

from dataclasses import dataclass
from datetime import date

from loguru import logger

from fitclient.cache.read_through import CacheSource
from fitclient.calendar.reconciler import CalendarCell, DayStatus, build_month_grid, current_week
from fitclient.services.content_service import ContentService, parse_day_records


@dataclass(frozen=True)
class MonthCalendar:
    """Reconciled calendar for one month.

    weeks holds the whole month, or only the current week when collapsed.
    """

    anchor: date
    weeks: list[list[CalendarCell]]
    source: CacheSource
    collapsed: bool = False

    @property
    def is_stale(self) -> bool:
        return self.source == CacheSource.STALE_CACHE

    def count(self, status: DayStatus) -> int:
        return sum(1 for week in self.weeks for cell in week if cell.status == status)


class CalendarService:
    def __init__(self, content: ContentService) -> None:
        self.content = content

    async def get_month_calendar(self, anchor: date, today: date, collapsed: bool = False) -> MonthCalendar:
        """Build the calendar for the month containing anchor.

        Args:
            anchor: Any date in the requested month
            today: Current civil date, supplied by the caller's clock
            collapsed: Return only the week containing today

        Raises:
            NoCachedDataAvailableError: Offline and the calendar was never fetched
        """
        result = await self.content.get_user_calendar_result()
        records = parse_day_records(result.value)
        grid = build_month_grid(anchor, records, today)
        weeks = [current_week(grid)] if collapsed else grid

        logger.debug(
            "Calendar reconciled",
            month=f"{anchor.year}-{anchor.month:02d}",
            record_count=len(records),
            week_count=len(grid),
            source=result.source.value,
        )
        return MonthCalendar(anchor=anchor, weeks=weeks, source=result.source, collapsed=collapsed)
