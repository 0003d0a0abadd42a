"""User profile reads and updates."""

from typing import Any

from loguru import logger

from fitclient.api.types import UserProfile, WorkoutOptionsResponse
from fitclient.cache import keys
from fitclient.cache.read_through import check_reachable
from fitclient.core.errors import ApiError, NetworkUnavailableError, UnauthorizedError
from fitclient.services.base import CachedService, cacheable, require_object, validate_payload

# A refused session must reach the caller even when a cached profile exists
FATAL_PROFILE_STATUSES = frozenset({403})


class UserService(CachedService):
    async def get_profile(self) -> UserProfile:
        """Fetch the profile, falling back to the cached copy.

        Raises:
            UnauthorizedError: The server refused the session (never masked by the cache)
            NoCachedDataAvailableError: Offline with no cached profile
        """

        async def remote() -> dict[str, Any]:
            try:
                response = await self.client.get("/api/users/profile")
            except ApiError as e:
                if e.status == 403:
                    raise UnauthorizedError() from e
                raise
            profile = require_object(response.data, "profile", response.status)
            return cacheable(UserProfile, profile, response.status)

        result = await self._fetch(keys.user_profile_key(), remote, fatal_statuses=FATAL_PROFILE_STATUSES)
        return UserProfile.model_validate(result.value)

    async def update_profile(self, changes: dict[str, Any]) -> UserProfile:
        """Send profile changes and cache the profile the server returns."""
        response = await self.client.put("/api/users/profile", changes)
        profile = validate_payload(UserProfile, require_object(response.data, "profile", response.status), response.status)
        await self.cache.put(keys.user_profile_key(), profile.model_dump(mode="json"))
        return profile

    async def update_workout_options(self, goal_id: int, level_id: int) -> WorkoutOptionsResponse:
        """Change the user's goal and level.

        The server answers with the updated profile, which replaces the cached
        one, and the plan now assigned to the user.

        Raises:
            NetworkUnavailableError: Offline; the change is never queued
        """
        if not await check_reachable(self.is_network_reachable):
            raise NetworkUnavailableError("update workout options")

        response = await self.client.post("/api/users/profile", {"goal_id": goal_id, "level_id": level_id})
        options = validate_payload(WorkoutOptionsResponse, response.data, response.status)
        await self.cache.put(keys.user_profile_key(), options.profile.model_dump(mode="json"))
        logger.info("Workout options updated", goal_id=goal_id, level_id=level_id, event="workout_options_updated")
        return options

    async def clear_profile_cache(self) -> None:
        await self.cache.invalidate(keys.user_profile_key())
        logger.info("Profile cache cleared")
