"""Authentication flows backed by an explicit Session."""

from typing import Any

from loguru import logger

from fitclient.api.client import ApiClient
from fitclient.api.types import (
    ConfirmEmailResponse,
    LoginResponse,
    MessageResponse,
    OnboardingWorkoutResponse,
    SocialAuthResponse,
)
from fitclient.cache import keys
from fitclient.cache.read_through import ReachabilityProbe, ReadThroughCache
from fitclient.core.session import Session
from fitclient.services.base import CachedService, cacheable, validate_payload


class AuthService(CachedService):
    def __init__(
        self,
        session: Session,
        client: ApiClient,
        cache: ReadThroughCache,
        is_network_reachable: ReachabilityProbe,
        ttl_millis: int | None = None,
    ) -> None:
        super().__init__(client, cache, is_network_reachable, ttl_millis)
        self.session = session

    async def _store_tokens(self, access_token: str | None, refresh_token: str | None) -> None:
        if access_token and refresh_token:
            await self.session.save_tokens(access_token, refresh_token)

    async def login(self, email: str, password: str) -> LoginResponse:
        response = await self.client.post("/api/auth/login", {"email": email, "password": password})
        tokens = LoginResponse.model_validate(response.data)
        await self._store_tokens(tokens.access_token, tokens.refresh_token)
        logger.info("User logged in", event="login")
        return tokens

    async def register(self, email: str, password: str, name: str, goal_id: int, level_id: int) -> MessageResponse:
        payload = {"email": email, "password": password, "name": name, "goal_id": goal_id, "level_id": level_id}
        response = await self.client.post("/api/auth/register", payload)
        return MessageResponse.model_validate(response.data)

    async def confirm_email(self, email: str, code: str) -> ConfirmEmailResponse:
        response = await self.client.post("/api/auth/confirm-email", {"email": email, "mail_password": code})
        confirmation = ConfirmEmailResponse.model_validate(response.data)
        await self._store_tokens(confirmation.access_token, confirmation.refresh_token)
        return confirmation

    async def resend_password(self, email: str) -> MessageResponse:
        response = await self.client.post("/api/auth/resend-password", {"email": email})
        return MessageResponse.model_validate(response.data)

    async def reset_password(self, email: str, password: str, mail_password: str) -> ConfirmEmailResponse:
        payload = {"email": email, "password": password, "mail_password": mail_password}
        response = await self.client.post("/api/auth/reset-password", payload)
        confirmation = ConfirmEmailResponse.model_validate(response.data)
        await self._store_tokens(confirmation.access_token, confirmation.refresh_token)
        return confirmation

    async def logout(self) -> None:
        await self.session.clear()
        logger.info("User logged out", event="logout")

    async def google_auth(
        self,
        email: str,
        name: str,
        goal_id: int,
        level_id: int,
        register: bool = False,
    ) -> SocialAuthResponse:
        """Exchange a Google identity for service tokens.

        New users go through the registration endpoint so their goal and
        level are recorded with the account.
        """
        endpoint = "/api/auth/register/google" if register else "/api/auth/login/google"
        payload = {"email": email, "name": name, "goal_id": goal_id, "level_id": level_id}
        response = await self.client.post(endpoint, payload)
        auth = validate_payload(SocialAuthResponse, response.data, response.status)
        await self._store_tokens(auth.access_token, auth.refresh_token)
        logger.info("User authenticated with Google", register=register, event="social_login")
        return auth

    async def apple_auth(self, id_token: str) -> SocialAuthResponse:
        response = await self.client.post("/api/auth/apple", {"id_token": id_token})
        auth = validate_payload(SocialAuthResponse, response.data, response.status)
        await self._store_tokens(auth.access_token, auth.refresh_token)
        logger.info("User authenticated with Apple", event="social_login")
        return auth

    async def login_with_social(self, provider: str, auth_data: dict[str, Any]) -> None:
        """Keep a provider's sign-in data as the session, replacing any tokens."""
        await self.session.save_social(provider, auth_data)
        logger.info("User logged in with {provider}", provider=provider, event="social_login")

    async def get_onboarding_workout(self, goal_id: int, level_id: int) -> OnboardingWorkoutResponse:
        """Fetch the trial workouts for a goal/level pair (cache-backed)."""

        async def remote() -> dict[str, Any]:
            response = await self.client.post(
                "/api/users/test-workout-filter",
                {"goal_id": goal_id, "level_id": level_id},
            )
            return cacheable(OnboardingWorkoutResponse, response.data, response.status)

        result = await self._fetch(keys.onboarding_workout_key(goal_id, level_id), remote)
        return OnboardingWorkoutResponse.model_validate(result.value)
