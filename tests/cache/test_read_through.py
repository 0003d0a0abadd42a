"""Unit tests for the read-through cache.

Tests cover:
- Fresh fetch and write-back
- Offline serving within and past the TTL
- Offline with nothing cached
- Remote failure with and without a cached copy
- Fatal statuses
- Malformed entries
- Probe failures
"""

import json

import pytest

from fitclient.cache.entry import CacheEntry, encode_entry
from fitclient.cache.read_through import CacheSource
from fitclient.core.errors import ApiError, NoCachedDataAvailableError, RemoteFetchFailedError
from tests.conftest import HOUR_MILLIS

KEY = "cache_user_calendar"


def online() -> bool:
    return True


def offline() -> bool:
    return False


def returning(value):
    async def remote():
        return value

    return remote


def failing(error: Exception):
    async def remote():
        raise error

    return remote


class TestOnlineFetch:
    """Network reachable, remote fetch succeeds."""

    @pytest.mark.asyncio
    async def test_returns_and_stores_fresh_value(self, cache, store, clock):
        """A successful fetch is returned and persisted with the current time."""
        value = await cache.fetch(KEY, HOUR_MILLIS, online, returning({"calendar": [1, 2]}))

        assert value == {"calendar": [1, 2]}
        stored = json.loads(await store.get(KEY))
        assert stored == {"data": {"calendar": [1, 2]}, "timestamp": clock.now}

    @pytest.mark.asyncio
    async def test_overwrites_previous_entry(self, cache, clock):
        """Each successful fetch replaces the entry and its timestamp."""
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("old"))
        first = await cache.peek(KEY)
        clock.advance(5000)
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("new"))
        second = await cache.peek(KEY)

        assert second.value == "new"
        assert second.stored_at_epoch_millis == first.stored_at_epoch_millis + 5000

    @pytest.mark.asyncio
    async def test_result_reports_network_source(self, cache, clock):
        result = await cache.fetch_result(KEY, HOUR_MILLIS, online, returning([]))

        assert result.source == CacheSource.NETWORK
        assert result.is_fresh
        assert result.stored_at_epoch_millis == clock.now
        assert result.degraded_by is None

    @pytest.mark.asyncio
    async def test_async_probe_is_awaited(self, cache):
        async def async_online() -> bool:
            return True

        value = await cache.fetch(KEY, HOUR_MILLIS, async_online, returning(7))

        assert value == 7


class TestOfflineFetch:
    """Network unreachable."""

    @pytest.mark.asyncio
    async def test_serves_value_from_last_online_fetch(self, cache, clock):
        """Within the TTL, the last successful value comes back unchanged."""
        await cache.fetch(KEY, HOUR_MILLIS, online, returning({"a": 1}))
        clock.advance(HOUR_MILLIS // 2)

        result = await cache.fetch_result(KEY, HOUR_MILLIS, offline, failing(AssertionError("not called")))

        assert result.value == {"a": 1}
        assert result.source == CacheSource.CACHE

    @pytest.mark.asyncio
    async def test_entry_exactly_at_ttl_is_fresh(self, cache, clock):
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("v"))
        clock.advance(HOUR_MILLIS)

        result = await cache.fetch_result(KEY, HOUR_MILLIS, offline, returning("unused"))

        assert result.source == CacheSource.CACHE

    @pytest.mark.asyncio
    async def test_serves_expired_value(self, cache, clock):
        """Stale data beats no data when offline."""
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("yesterday"))
        clock.advance(24 * HOUR_MILLIS)

        result = await cache.fetch_result(KEY, HOUR_MILLIS, offline, returning("unused"))

        assert result.value == "yesterday"
        assert result.source == CacheSource.STALE_CACHE

    @pytest.mark.asyncio
    async def test_raises_when_nothing_cached(self, cache):
        with pytest.raises(NoCachedDataAvailableError) as exc_info:
            await cache.fetch(KEY, HOUR_MILLIS, offline, returning("unused"))

        assert exc_info.value.key == KEY

    @pytest.mark.asyncio
    async def test_remote_fetch_not_called(self, cache, store):
        calls = []

        async def remote():
            calls.append(1)
            return "x"

        await store.set(KEY, encode_entry(CacheEntry(value="cached", stored_at_epoch_millis=0)))
        await cache.fetch(KEY, HOUR_MILLIS, offline, remote)

        assert calls == []

    @pytest.mark.asyncio
    async def test_failing_probe_counts_as_offline(self, cache):
        def broken_probe() -> bool:
            raise OSError("netinfo unavailable")

        with pytest.raises(NoCachedDataAvailableError):
            await cache.fetch(KEY, HOUR_MILLIS, broken_probe, returning("unused"))


class TestRemoteFailure:
    """Network reachable, remote fetch fails."""

    @pytest.mark.asyncio
    async def test_serves_two_hour_old_value_without_error(self, cache, clock):
        """Degraded success: an expired entry is returned instead of the error."""
        await cache.fetch(KEY, HOUR_MILLIS, online, returning({"profile": "cached"}))
        clock.advance(2 * HOUR_MILLIS)

        value = await cache.fetch(KEY, HOUR_MILLIS, online, failing(ApiError(500, "Internal error")))

        assert value == {"profile": "cached"}

    @pytest.mark.asyncio
    async def test_degraded_result_records_failure(self, cache, clock):
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("cached"))
        error = ApiError(408, "Request timeout")

        result = await cache.fetch_result(KEY, HOUR_MILLIS, online, failing(error))

        assert isinstance(result.degraded_by, RemoteFetchFailedError)
        assert result.degraded_by.cause is error
        assert not result.is_fresh

    @pytest.mark.asyncio
    async def test_propagates_original_error_when_nothing_cached(self, cache):
        """The structured failure reaches the caller unchanged."""
        error = ApiError(401, "Token expired", {"token": ["expired"]})

        with pytest.raises(ApiError) as exc_info:
            await cache.fetch(KEY, HOUR_MILLIS, online, failing(error))

        assert exc_info.value is error
        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_failure_does_not_touch_store(self, cache, store):
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("cached"))
        before = await store.get(KEY)

        await cache.fetch(KEY, HOUR_MILLIS, online, failing(ValueError("malformed payload")))

        assert await store.get(KEY) == before

    @pytest.mark.asyncio
    async def test_fatal_status_is_not_masked(self, cache):
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("cached"))

        with pytest.raises(ApiError) as exc_info:
            await cache.fetch(KEY, HOUR_MILLIS, online, failing(ApiError(403, "Forbidden")), fatal_statuses={403})

        assert exc_info.value.status == 403

    @pytest.mark.asyncio
    async def test_non_fatal_status_still_degrades(self, cache):
        await cache.fetch(KEY, HOUR_MILLIS, online, returning("cached"))

        value = await cache.fetch(KEY, HOUR_MILLIS, online, failing(ApiError(502, "Bad gateway")), fatal_statuses={403})

        assert value == "cached"


class TestMalformedEntries:
    """Corrupt stored payloads are treated as absent."""

    @pytest.mark.asyncio
    async def test_offline_with_corrupt_entry_raises_no_cache(self, cache, store):
        await store.set(KEY, "{not json")

        with pytest.raises(NoCachedDataAvailableError):
            await cache.fetch(KEY, HOUR_MILLIS, offline, returning("unused"))

    @pytest.mark.asyncio
    async def test_next_success_overwrites_corrupt_entry(self, cache, store):
        await store.set(KEY, json.dumps({"unexpected": True}))

        await cache.fetch(KEY, HOUR_MILLIS, online, returning("healed"))

        assert (await cache.peek(KEY)).value == "healed"

    @pytest.mark.asyncio
    async def test_online_failure_with_corrupt_entry_propagates(self, cache, store):
        await store.set(KEY, json.dumps({"data": 1, "timestamp": "yesterday"}))
        error = ApiError(500, "boom")

        with pytest.raises(ApiError) as exc_info:
            await cache.fetch(KEY, HOUR_MILLIS, online, failing(error))

        assert exc_info.value is error


class TestKeyIsolation:
    """Entries for different keys never collide."""

    @pytest.mark.asyncio
    async def test_keys_are_independent(self, cache):
        await cache.fetch("cache_program_1", HOUR_MILLIS, online, returning("one"))
        await cache.fetch("cache_program_2", HOUR_MILLIS, online, returning("two"))

        assert await cache.fetch("cache_program_1", HOUR_MILLIS, offline, returning(None)) == "one"
        assert await cache.fetch("cache_program_2", HOUR_MILLIS, offline, returning(None)) == "two"

    @pytest.mark.asyncio
    async def test_invalidate_removes_single_key(self, cache):
        await cache.put("cache_program_1", "one")
        await cache.put("cache_program_2", "two")

        await cache.invalidate("cache_program_1")

        assert await cache.peek("cache_program_1") is None
        assert (await cache.peek("cache_program_2")).value == "two"

    @pytest.mark.asyncio
    async def test_clear_by_predicate(self, cache, store):
        await cache.put("cache_program_1", "one")
        await cache.put("cache_user_profile", "me")

        removed = await cache.clear(lambda key: key.startswith("cache_program_"))

        assert removed == 1
        assert await store.all_keys() == ["cache_user_profile"]
