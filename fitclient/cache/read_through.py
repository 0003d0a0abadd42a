"""Read-through cache with fetch-or-serve-stale semantics.

Fetch algorithm for a key:
1. Network unreachable: serve the stored entry whatever its age (offline
   access to old data beats no data). Nothing stored raises
   NoCachedDataAvailableError.
2. Network reachable: call the remote fetch.
   - Success: store {value, now} under the key and return the fresh value.
   - Failure: serve the stored entry if there is one (degraded success),
     otherwise re-raise the original failure unchanged.

The store is written only after a successful remote fetch. Concurrent
fetches for one key are not de-duplicated; the last writer wins.
Expired entries are never swept, they are replaced on the next good fetch.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable, Collection
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar

from loguru import logger

from fitclient.cache.entry import CacheEntry, decode_entry, encode_entry
from fitclient.cache.store import KeyValueStore
from fitclient.core.errors import ApiError, MalformedCacheEntryError, NoCachedDataAvailableError, RemoteFetchFailedError

T = TypeVar("T")

ReachabilityProbe = Callable[[], bool | Awaitable[bool]]
RemoteFetch = Callable[[], Awaitable[T]]


def epoch_millis() -> int:
    return time.time_ns() // 1_000_000


async def check_reachable(is_network_reachable: ReachabilityProbe, key: str | None = None) -> bool:
    """Run a sync or async probe; a probe that raises counts as offline."""
    try:
        reachable = is_network_reachable()
        if inspect.isawaitable(reachable):
            reachable = await reachable
    except Exception as e:
        logger.warning("Reachability probe failed, assuming offline: {error}", key=key, error=str(e), event="probe_failed")
        return False
    return bool(reachable)


class CacheSource(StrEnum):
    """Where a fetched value came from."""

    NETWORK = "network"
    CACHE = "cache"
    STALE_CACHE = "stale_cache"


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Fetched value plus its provenance.

    degraded_by is set when the network was reachable but the remote fetch
    failed and a cached value was served instead.
    """

    value: T
    source: CacheSource
    stored_at_epoch_millis: int
    degraded_by: RemoteFetchFailedError | None = None

    @property
    def is_fresh(self) -> bool:
        return self.source == CacheSource.NETWORK


class ReadThroughCache:
    """Keyed cache over a persistent KeyValueStore.

    Values must be JSON-shaped (dicts, lists, strings, numbers, booleans,
    None); callers parse them into typed models after fetching.
    """

    def __init__(self, store: KeyValueStore, clock: Callable[[], int] = epoch_millis) -> None:
        self._store = store
        self._clock = clock

    @property
    def store(self) -> KeyValueStore:
        return self._store

    async def fetch(
        self,
        key: str,
        ttl_millis: int,
        is_network_reachable: ReachabilityProbe,
        remote_fetch: RemoteFetch[T],
        fatal_statuses: Collection[int] = (),
    ) -> T:
        """Return a value for the key, from the network when possible.

        Args:
            key: Cache key built by fitclient.cache.keys
            ttl_millis: Maximum age at which a cached value counts as fresh
            is_network_reachable: Sync or async reachability probe
            remote_fetch: Async callable producing the fresh JSON payload
            fatal_statuses: ApiError statuses that must reach the caller even
                when a cached copy exists (e.g. 403 on the profile)

        Returns:
            Fresh value, or the cached value when the network is unreachable
            or the remote fetch failed

        Raises:
            NoCachedDataAvailableError: Offline with nothing cached
            Exception: The remote failure itself, when online with nothing cached
        """
        result = await self.fetch_result(
            key,
            ttl_millis,
            is_network_reachable,
            remote_fetch,
            fatal_statuses=fatal_statuses,
        )
        return result.value

    async def fetch_result(
        self,
        key: str,
        ttl_millis: int,
        is_network_reachable: ReachabilityProbe,
        remote_fetch: RemoteFetch[T],
        fatal_statuses: Collection[int] = (),
    ) -> CacheResult[T]:
        """Same as fetch, but reports whether the value was fresh, cached or stale."""
        if not await check_reachable(is_network_reachable, key):
            entry = await self._read(key)
            if entry is None:
                logger.warning("Offline and nothing cached", key=key, event="cache_offline_miss")
                raise NoCachedDataAvailableError(key)
            logger.info("Using cached data (offline mode)", key=key, event="cache_offline_hit")
            return self._serve(entry, ttl_millis)

        try:
            value = await remote_fetch()
        except Exception as e:
            if isinstance(e, ApiError) and e.status in fatal_statuses:
                logger.error("Remote fetch failed with fatal status", key=key, status=e.status, event="cache_fatal")
                raise
            entry = await self._read(key)
            if entry is None:
                logger.error("Remote fetch failed and nothing cached: {error}", key=key, error=str(e), event="cache_remote_miss")
                raise
            logger.warning("Remote fetch failed, using cached data: {error}", key=key, error=str(e), event="cache_degraded")
            return self._serve(entry, ttl_millis, degraded_by=RemoteFetchFailedError(key, e))

        try:
            stored_at = await self.put(key, value)
        except Exception as e:
            # The fresh value is still good even if persisting it failed
            logger.error("Failed to store fetched value: {error}", key=key, error=str(e), event="cache_write_failed")
            stored_at = self._clock()
        return CacheResult(value=value, source=CacheSource.NETWORK, stored_at_epoch_millis=stored_at)

    async def peek(self, key: str) -> CacheEntry | None:
        """Return the stored entry without touching the network."""
        return await self._read(key)

    async def put(self, key: str, value: Any) -> int:
        """Store a value as a fresh entry, replacing any previous one.

        Returns:
            The entry's stored_at_epoch_millis
        """
        entry = CacheEntry(value=value, stored_at_epoch_millis=self._clock())
        await self._store.set(key, encode_entry(entry))
        logger.debug("Cache entry stored", key=key, event="cache_write")
        return entry.stored_at_epoch_millis

    async def invalidate(self, key: str) -> None:
        await self._store.remove(key)
        logger.debug("Cache entry removed", key=key, event="cache_invalidate")

    async def clear(self, predicate: Callable[[str], bool]) -> int:
        """Remove every stored key matching the predicate.

        Returns:
            Number of keys removed
        """
        keys = [key for key in await self._store.all_keys() if predicate(key)]
        if keys:
            await self._store.remove_many(keys)
            logger.info(f"Cleared {len(keys)} cache items", event="cache_clear")
        return len(keys)

    async def _read(self, key: str) -> CacheEntry | None:
        try:
            raw = await self._store.get(key)
        except Exception as e:
            logger.error("Failed to read cache entry: {error}", key=key, error=str(e), event="cache_read_failed")
            return None
        if raw is None:
            return None
        try:
            return decode_entry(key, raw)
        except MalformedCacheEntryError as e:
            # Treated as absent; the next successful fetch overwrites it
            logger.warning("Ignoring malformed cache entry: {reason}", key=key, reason=e.reason, event="cache_malformed")
            return None

    def _serve(
        self,
        entry: CacheEntry,
        ttl_millis: int,
        degraded_by: RemoteFetchFailedError | None = None,
    ) -> CacheResult[Any]:
        source = CacheSource.CACHE if entry.is_fresh(self._clock(), ttl_millis) else CacheSource.STALE_CACHE
        return CacheResult(
            value=entry.value,
            source=source,
            stored_at_epoch_millis=entry.stored_at_epoch_millis,
            degraded_by=degraded_by,
        )
