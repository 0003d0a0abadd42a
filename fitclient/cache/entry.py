"""Cache envelope and its JSON encoding.

The stored form is {"data": <payload>, "timestamp": <epoch millis>}, which
keeps entries readable by older clients that wrote the same envelope.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from fitclient.core.errors import MalformedCacheEntryError


class CacheEntry(BaseModel):
    """A cached payload and the moment it was stored.

    Entries are immutable; a refresh replaces the whole record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: Any = Field(alias="data")
    stored_at_epoch_millis: int = Field(alias="timestamp", ge=0)

    def age_millis(self, now_millis: int) -> int:
        return now_millis - self.stored_at_epoch_millis

    def is_fresh(self, now_millis: int, ttl_millis: int) -> bool:
        return self.age_millis(now_millis) <= ttl_millis


def encode_entry(entry: CacheEntry) -> str:
    return entry.model_dump_json(by_alias=True)


def decode_entry(key: str, raw: str | bytes) -> CacheEntry:
    """Decode a stored payload.

    Raises:
        MalformedCacheEntryError: If the payload is not JSON or lacks the envelope fields
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
        raise MalformedCacheEntryError(key, f"invalid JSON: {e}") from e

    if not isinstance(data, dict) or "data" not in data:
        raise MalformedCacheEntryError(key, "missing cache envelope")

    try:
        return CacheEntry.model_validate(data)
    except ValidationError as e:
        raise MalformedCacheEntryError(key, str(e)) from e
