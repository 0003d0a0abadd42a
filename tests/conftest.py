"""Root conftest for all tests.

Shared fixtures: an in-memory store, a controllable clock, a cache over
both, and a fake REST server served through httpx.MockTransport.
"""

from typing import Any

import httpx
import pytest

from fitclient.cache.read_through import ReadThroughCache
from fitclient.cache.store import InMemoryStore
from fitclient.config.settings import Settings
from fitclient.context import ClientContext, create_context
from fitclient.network.reachability import StaticReachability

HOUR_MILLIS = 60 * 60 * 1000
START_MILLIS = 1_700_000_000_000


class FakeClock:
    """Epoch-millis clock advanced by hand."""

    def __init__(self, now: int = START_MILLIS) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


class FakeServer:
    """Scripted REST server.

    Routes map (method, path) to (status, json body). Setting `down`
    makes every request fail at the transport level.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []
        self.down = False

    def route(self, method: str, path: str, status: int = 200, json: Any = None) -> None:
        self.routes[(method, path)] = (status, json)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("Connection refused", request=request)
        if request.method == "HEAD":
            return httpx.Response(200)
        status, body = self.routes.get((request.method, request.url.path), (404, {"message": "Not found"}))
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def cache(store: InMemoryStore, clock: FakeClock) -> ReadThroughCache:
    return ReadThroughCache(store, clock=clock)


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def network() -> StaticReachability:
    return StaticReachability(reachable=True)


@pytest.fixture
def context(store: InMemoryStore, server: FakeServer, network: StaticReachability) -> ClientContext:
    config = Settings(API_URL="http://api.test", CACHE_TTL_SECONDS=3600)
    return create_context(config, store=store, is_network_reachable=network, transport=server.transport)
