"""Content listings, program/exercise details, calendar and workout history.

Every read goes through the read-through cache under its own key, so each
screen keeps working offline with the last successful response.
"""

from typing import Any

from loguru import logger
from pydantic import ValidationError

from fitclient.api.types import AvailableContentResponse, CalendarServerItem, Exercise, Program, WorkoutHistoryItem
from fitclient.cache import keys
from fitclient.cache.read_through import CacheResult
from fitclient.calendar.reconciler import DayRecord
from fitclient.services.base import CachedService, cacheable, require_list


def parse_day_records(items: list[Any]) -> list[DayRecord]:
    """Convert raw calendar items into day records.

    Items that cannot be parsed (bad date, wrong shape) are dropped with a
    warning; the rest of the calendar still renders.
    """
    records: list[DayRecord] = []
    for item in items:
        try:
            records.append(CalendarServerItem.model_validate(item).to_day_record())
        except ValidationError as e:
            logger.warning(
                "Dropping unparseable calendar item: {error}",
                error=str(e).splitlines()[0],
                event="calendar_item_dropped",
            )
    return records


class ContentService(CachedService):
    async def get_available_content(self) -> AvailableContentResponse:
        async def remote() -> dict[str, Any]:
            response = await self.client.get("/api/users/available")
            return cacheable(AvailableContentResponse, response.data, response.status)

        result = await self._fetch(keys.available_content_key(), remote)
        return AvailableContentResponse.model_validate(result.value)

    async def get_program_details(self, program_id: str) -> Program:
        async def remote() -> dict[str, Any]:
            response = await self.client.get(f"/api/plans/{program_id}")
            return cacheable(Program, response.data, response.status)

        result = await self._fetch(keys.program_key(program_id), remote)
        return Program.model_validate(result.value)

    async def get_exercise_details(self, exercise_id: str) -> Exercise:
        async def remote() -> dict[str, Any]:
            response = await self.client.get(f"/api/exercises/{exercise_id}")
            return cacheable(Exercise, response.data, response.status)

        result = await self._fetch(keys.exercise_key(exercise_id), remote)
        return Exercise.model_validate(result.value)

    async def get_user_calendar_result(self) -> CacheResult[list[Any]]:
        """Fetch the raw calendar item list with its provenance."""

        async def remote() -> list[Any]:
            response = await self.client.get("/api/users/calendar")
            return require_list(response.data, "calendar", response.status)

        return await self._fetch(keys.user_calendar_key(), remote)

    async def get_user_calendar(self) -> list[DayRecord]:
        result = await self.get_user_calendar_result()
        return parse_day_records(result.value)

    async def get_user_workout_history(self) -> list[WorkoutHistoryItem]:
        async def remote() -> list[dict[str, Any]]:
            response = await self.client.get("/api/users/workout-history")
            items = require_list(response.data, "data", response.status)
            return [cacheable(WorkoutHistoryItem, item, response.status) for item in items]

        result = await self._fetch(keys.user_workout_history_key(), remote)
        return [WorkoutHistoryItem.model_validate(item) for item in result.value]

    async def clear_cache(self) -> int:
        """Drop every cached content entry (profile and session are kept)."""
        return await self.cache.clear(keys.is_content_key)
