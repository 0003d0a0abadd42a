"""Wiring for one signed-in client.

ClientContext owns the store, the Session and the cache, and hands them to
every service at construction; there is no process-wide client state.
"""

from dataclasses import dataclass

import httpx

from fitclient.api.client import ApiClient
from fitclient.cache.read_through import ReachabilityProbe, ReadThroughCache
from fitclient.cache.store import KeyValueStore, build_store
from fitclient.calendar.service import CalendarService
from fitclient.config.settings import Settings, settings
from fitclient.core.session import Session
from fitclient.network.reachability import HttpReachabilityProbe
from fitclient.services.auth_service import AuthService
from fitclient.services.content_service import ContentService
from fitclient.services.user_service import UserService


@dataclass
class ClientContext:
    store: KeyValueStore
    session: Session
    cache: ReadThroughCache
    client: ApiClient
    auth: AuthService
    content: ContentService
    users: UserService
    calendar: CalendarService


def create_context(
    config: Settings = settings,
    store: KeyValueStore | None = None,
    is_network_reachable: ReachabilityProbe | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ClientContext:
    """Build a fully wired client context.

    Args:
        config: Settings to build from
        store: Store override (defaults to the CACHE_BACKEND store)
        is_network_reachable: Probe override (defaults to an HTTP probe of REACHABILITY_URL)
        transport: httpx transport override, shared by the API client and the default probe
    """
    store = store if store is not None else build_store(config)
    probe = is_network_reachable or HttpReachabilityProbe(
        config.reachability_url,
        config.reachability_timeout_seconds,
        transport=transport,
    )
    session = Session(store)
    cache = ReadThroughCache(store)
    client = ApiClient(session, base_url=config.api_url, timeout=config.api_timeout_seconds, transport=transport)
    ttl = config.cache_ttl_millis

    content = ContentService(client, cache, probe, ttl)
    return ClientContext(
        store=store,
        session=session,
        cache=cache,
        client=client,
        auth=AuthService(session, client, cache, probe, ttl),
        content=content,
        users=UserService(client, cache, probe, ttl),
        calendar=CalendarService(content),
    )
