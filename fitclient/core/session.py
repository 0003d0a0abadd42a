"""Authenticated session state.

A Session owns the access/refresh tokens (or social-login data) for one
user and mirrors them to the persistent store. It is passed explicitly to
the API client rather than living in a process-wide singleton.
"""

import json
from typing import Any

from loguru import logger

from fitclient.cache.store import KeyValueStore

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
SOCIAL_AUTH_PROVIDER_KEY = "social_auth_provider"
SOCIAL_AUTH_DATA_KEY = "social_auth_data"

SESSION_KEYS = [ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, SOCIAL_AUTH_PROVIDER_KEY, SOCIAL_AUTH_DATA_KEY]


class Session:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self.access_token: str | None = None
        self.refresh_token: str | None = None
        self.social_provider: str | None = None
        self.social_data: Any = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token and self.refresh_token) or bool(self.social_provider)

    async def load(self) -> bool:
        """Load credentials from the store.

        Token credentials win over social-login data when both are present.
        A store failure leaves the session unauthenticated.

        Returns:
            True if the session holds credentials after loading
        """
        try:
            access_token = await self._store.get(ACCESS_TOKEN_KEY)
            refresh_token = await self._store.get(REFRESH_TOKEN_KEY)
            social_provider = await self._store.get(SOCIAL_AUTH_PROVIDER_KEY)
            social_data = await self._store.get(SOCIAL_AUTH_DATA_KEY)
        except Exception as e:
            logger.error("Error getting user data: {error}", error=str(e), event="session_load_failed")
            return False

        if access_token and refresh_token:
            self.access_token = access_token
            self.refresh_token = refresh_token
        elif social_provider and social_data:
            try:
                self.social_data = json.loads(social_data)
            except json.JSONDecodeError:
                logger.warning("Stored social auth data is not valid JSON", provider=social_provider)
                return False
            self.social_provider = social_provider
        return self.is_authenticated

    async def save_tokens(self, access_token: str, refresh_token: str) -> None:
        """Store token credentials, dropping any social-login data."""
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.social_provider = None
        self.social_data = None
        await self._store.set(ACCESS_TOKEN_KEY, access_token)
        await self._store.set(REFRESH_TOKEN_KEY, refresh_token)
        await self._store.remove_many([SOCIAL_AUTH_PROVIDER_KEY, SOCIAL_AUTH_DATA_KEY])

    async def save_social(self, provider: str, auth_data: Any) -> None:
        """Store social-login data, dropping any token credentials."""
        self.access_token = None
        self.refresh_token = None
        self.social_provider = provider
        self.social_data = auth_data
        await self._store.remove_many([ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY])
        await self._store.set(SOCIAL_AUTH_PROVIDER_KEY, provider)
        await self._store.set(SOCIAL_AUTH_DATA_KEY, json.dumps(auth_data))

    async def clear(self) -> None:
        self.access_token = None
        self.refresh_token = None
        self.social_provider = None
        self.social_data = None
        await self._store.remove_many(SESSION_KEYS)

    async def bearer_token(self) -> str | None:
        """Return the access token, loading it from the store if needed."""
        if not self.access_token:
            await self.load()
        return self.access_token or None
