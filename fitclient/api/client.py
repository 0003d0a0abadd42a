"""Async JSON client for the fitness REST service.

Every failure leaves this module as an ApiError carrying a status, so
callers (and the cache's fatal-status check) can tell an authorization
failure from a connectivity one:
- timeout: 408 "Request timeout"
- transport failure: 500 with the transport's message
- non-2xx: the response status and the server's message
"""

import json
from dataclasses import dataclass
from typing import Any

import httpx
from loguru import logger

from fitclient.config.settings import settings
from fitclient.core.errors import ApiError
from fitclient.core.session import Session


@dataclass
class ApiResponse:
    data: Any
    status: int
    message: str


class ApiClient:
    def __init__(
        self,
        session: Session,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.session = session
        self.base_url = (base_url or settings.api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self._transport = transport

    async def _headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        token = await self.session.bearer_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def build_url(self, endpoint: str) -> str:
        normalized = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"{self.base_url}{normalized}"

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> ApiResponse:
        """Send a request and decode its JSON body.

        Raises:
            ApiError: On timeout, transport failure, undecodable JSON or non-2xx status
        """
        url = self.build_url(endpoint)
        query = {key: value for key, value in (params or {}).items() if value is not None}
        logger.debug(f"API Request: {method} {url}", params=query)

        try:
            async with httpx.AsyncClient(
                timeout=timeout if timeout is not None else self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=await self._headers(),
                    params=query or None,
                    json=body,
                )
        except httpx.TimeoutException as e:
            raise ApiError(408, "Request timeout") from e
        except httpx.HTTPError as e:
            raise ApiError(500, str(e) or "Network error occurred") from e

        data = self._decode(response)
        logger.debug(f"API Response: {response.status_code}", url=url)

        message = data.get("message") if isinstance(data, dict) else None
        if not response.is_success:
            errors = data.get("errors") if isinstance(data, dict) else None
            raise ApiError(response.status_code, message or "An error occurred", errors)

        return ApiResponse(data=data, status=response.status_code, message=message or "Success")

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as e:
                logger.error("JSON Parse Error", status=response.status_code, body=response.text[:200])
                raise ApiError(response.status_code, f"JSON Parse error: {e}") from e

        # Some endpoints answer with JSON under a text content type
        text = response.text
        try:
            return json.loads(text)
        except ValueError:
            return {"message": text}

    async def get(self, endpoint: str, params: dict[str, str] | None = None) -> ApiResponse:
        return await self.request(endpoint, method="GET", params=params)

    async def post(self, endpoint: str, body: Any) -> ApiResponse:
        return await self.request(endpoint, method="POST", body=body)

    async def put(self, endpoint: str, body: Any) -> ApiResponse:
        return await self.request(endpoint, method="PUT", body=body)

    async def delete(self, endpoint: str) -> ApiResponse:
        return await self.request(endpoint, method="DELETE")
