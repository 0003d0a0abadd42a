"""Network reachability probes.

A probe answers "is the device currently online". Any response from the
probed host counts as reachable, whatever its status; only transport
failures count as offline.
"""

import httpx
from loguru import logger

from fitclient.config.settings import settings


class HttpReachabilityProbe:
    """Probe reachability with a short HEAD request."""

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url or settings.reachability_url
        self.timeout = timeout if timeout is not None else settings.reachability_timeout_seconds
        self._transport = transport

    async def __call__(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                await client.head(self.url)
        except httpx.HTTPError as e:
            logger.debug("Network unreachable: {error}", url=self.url, error=str(e), event="network_unreachable")
            return False
        return True


class StaticReachability:
    """Probe with a fixed answer, for forced offline mode and tests."""

    def __init__(self, reachable: bool = True) -> None:
        self.reachable = reachable

    def __call__(self) -> bool:
        return self.reachable
