"""Persistent key-value stores backing the read-through cache.

Each key is read and written independently; no multi-key atomicity is
offered or assumed. Values are JSON text produced by encode_entry.
"""

from typing import Protocol, runtime_checkable

import redis.asyncio as aioredis
from loguru import logger

from fitclient.config.settings import Settings


@runtime_checkable
class KeyValueStore(Protocol):
    """Async key-value store contract."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, key: str) -> None: ...

    async def remove_many(self, keys: list[str]) -> None: ...

    async def all_keys(self) -> list[str]: ...


class InMemoryStore:
    """Process-local store, used by default and in tests."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> str | None:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove(self, key: str) -> None:
        self._data.pop(key, None)

    async def remove_many(self, keys: list[str]) -> None:
        for key in keys:
            self._data.pop(key, None)

    async def all_keys(self) -> list[str]:
        return list(self._data)


class RedisStore:
    """Redis-backed store.

    Keys are namespaced so several clients can share one Redis database.
    The namespace is stripped again by all_keys, so callers only ever see
    the logical keys they wrote.
    """

    def __init__(self, client: aioredis.Redis, namespace: str = "") -> None:
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, url: str, namespace: str = "") -> "RedisStore":
        return cls(aioredis.from_url(url, decode_responses=True), namespace=namespace)

    def _redis_key(self, key: str) -> str:
        return f"{self._namespace}{key}"

    async def get(self, key: str) -> str | None:
        value = await self._client.get(self._redis_key(key))
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        await self._client.set(self._redis_key(key), value)

    async def remove(self, key: str) -> None:
        await self._client.delete(self._redis_key(key))

    async def remove_many(self, keys: list[str]) -> None:
        if not keys:
            return
        await self._client.delete(*[self._redis_key(key) for key in keys])

    async def all_keys(self) -> list[str]:
        keys: list[str] = []
        async for raw_key in self._client.scan_iter(match=f"{self._namespace}*"):
            key = raw_key.decode("utf-8") if isinstance(raw_key, bytes) else raw_key
            keys.append(key[len(self._namespace):])
        return keys


def build_store(config: Settings) -> KeyValueStore:
    """Build the store selected by CACHE_BACKEND."""
    if config.cache_backend == "redis":
        logger.info("Using Redis cache store", redis_url=config.redis_url, namespace=config.cache_namespace)
        return RedisStore.from_url(config.redis_url, namespace=config.cache_namespace)
    logger.info("Using in-memory cache store")
    return InMemoryStore()
