"""Error types surfaced by the API client and the read-through cache.

The cache never swallows a fatal condition: NoCachedDataAvailableError and
unrecoverable remote failures propagate to the caller. RemoteFetchFailedError
is only ever attached to a degraded result, never raised by a fetch.
"""

from typing import Any


class ApiError(Exception):
    """Structured failure of a remote call.

    Attributes:
        status: HTTP-like status code (408 for timeouts, 500 for transport errors)
        message: Human-readable message, taken from the server payload when present
        errors: Optional field-level validation errors from the server
    """

    def __init__(self, status: int, message: str, errors: dict[str, list[str]] | None = None) -> None:
        self.status = status
        self.message = message
        self.errors = errors
        super().__init__(f"[{status}] {message}")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"status": self.status, "message": self.message}
        if self.errors:
            payload["errors"] = self.errors
        return payload


class UnauthorizedError(ApiError):
    """Raised when the server refuses the session's credentials."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(403, message)


class NetworkUnavailableError(Exception):
    """Raised by write operations that need the network while offline."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"No network connection available to {operation}")


class CacheError(Exception):
    """Base exception for cache errors."""

    pass


class NoCachedDataAvailableError(CacheError):
    """Raised when the network is unreachable and nothing is cached for the key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"No network connection and no cached data available for '{key}'")


class RemoteFetchFailedError(CacheError):
    """Records a remote failure that was absorbed by serving a cached value.

    Attributes:
        key: Cache key the fetch was made for
        cause: Original exception raised by the remote fetch
    """

    def __init__(self, key: str, cause: BaseException) -> None:
        self.key = key
        self.cause = cause
        super().__init__(f"Remote fetch for '{key}' failed, served cached value: {cause}")


class MalformedCacheEntryError(CacheError):
    """Raised when a stored payload cannot be decoded into a cache entry."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed cache entry for '{key}': {reason}")
