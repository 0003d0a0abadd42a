"""Shared plumbing for cache-backed services."""

from collections.abc import Awaitable, Callable, Collection
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from fitclient.api.client import ApiClient
from fitclient.cache.read_through import CacheResult, ReachabilityProbe, ReadThroughCache
from fitclient.config.settings import settings
from fitclient.core.errors import ApiError


class CachedService:
    """Base for services whose reads go through the read-through cache.

    Args:
        client: API client carrying the user's session
        cache: Read-through cache shared by all services
        is_network_reachable: Sync or async reachability probe
        ttl_millis: Freshness window (defaults to CACHE_TTL_SECONDS)
    """

    def __init__(
        self,
        client: ApiClient,
        cache: ReadThroughCache,
        is_network_reachable: ReachabilityProbe,
        ttl_millis: int | None = None,
    ) -> None:
        self.client = client
        self.cache = cache
        self.is_network_reachable = is_network_reachable
        self.ttl_millis = ttl_millis if ttl_millis is not None else settings.cache_ttl_millis

    async def _fetch(
        self,
        key: str,
        remote_fetch: Callable[[], Awaitable[Any]],
        fatal_statuses: Collection[int] = (),
    ) -> CacheResult[Any]:
        return await self.cache.fetch_result(
            key,
            self.ttl_millis,
            self.is_network_reachable,
            remote_fetch,
            fatal_statuses=fatal_statuses,
        )


def require_list(payload: Any, field: str, status: int) -> list[Any]:
    """Extract a list field from an envelope payload.

    Raises:
        ApiError: If the field is missing or not a list (malformed payload)
    """
    value = payload.get(field) if isinstance(payload, dict) else None
    if not isinstance(value, list):
        raise ApiError(status, f"Malformed payload: expected list field '{field}'")
    return value


def require_object(payload: Any, field: str, status: int) -> dict[str, Any]:
    value = payload.get(field) if isinstance(payload, dict) else None
    if not isinstance(value, dict):
        raise ApiError(status, f"Malformed payload: expected object field '{field}'")
    return value


ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_payload(model: type[ModelT], payload: Any, status: int) -> ModelT:
    """Validate a response body before it can reach the cache.

    Raises:
        ApiError: If the payload does not match the model (malformed payload)
    """
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise ApiError(
            status,
            f"Malformed payload: {e.error_count()} invalid field(s) for {model.__name__}",
        ) from e


def cacheable(model: type[BaseModel], payload: Any, status: int) -> dict[str, Any]:
    """Validate a payload and return the JSON-shaped copy that gets cached."""
    return validate_payload(model, payload, status).model_dump(mode="json")
