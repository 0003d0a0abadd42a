"""Read-through cache with TTL and offline fallback."""

from fitclient.cache.entry import CacheEntry, decode_entry, encode_entry
from fitclient.cache.read_through import CacheResult, CacheSource, ReadThroughCache
from fitclient.cache.store import InMemoryStore, KeyValueStore, RedisStore, build_store

__all__ = [
    "CacheEntry",
    "CacheResult",
    "CacheSource",
    "InMemoryStore",
    "KeyValueStore",
    "ReadThroughCache",
    "RedisStore",
    "build_store",
    "decode_entry",
    "encode_entry",
]
