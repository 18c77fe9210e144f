"""API client for the portal assistant chat endpoints."""

import logging
from typing import Any

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Error response (or transport failure) from the assistant API."""

    def __init__(self, code: str, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.code = code
        self.hint = hint


class ChatAPIClient:
    """Client for interacting with the portal assistant API."""

    def __init__(self, config: CLIConfig, client: httpx.AsyncClient | None = None):
        self.config = config
        self.client = client or httpx.AsyncClient(timeout=config.timeout)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        logger.debug("%s %s %s", method, url, kwargs.get("json"))
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise APIError("TIMEOUT", "Request timed out.") from e
        except httpx.ConnectError as e:
            raise APIError("CONNECTION_ERROR", f"Connection error: {e}") from e
        except httpx.HTTPError as e:
            raise APIError("TRANSPORT_ERROR", f"Request failed: {e}") from e

        logger.debug("Response status: %s", response.status_code)
        if response.is_success:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise APIError(
                    "INVALID_RESPONSE",
                    f"HTTP {response.status_code}: response is not JSON",
                ) from e

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        detail = body.get("detail") or response.text
        raise APIError(
            body.get("code", "HTTP_ERROR"),
            f"HTTP {response.status_code}: {detail}",
            body.get("hint", ""),
        )

    async def open_session(self, subject_id: str, role: str | None = None) -> dict:
        payload: dict[str, Any] = {"subject_id": subject_id}
        if role:
            payload["role"] = role
        return await self._request("POST", self.config.sessions_url, json=payload)

    async def send(
        self, session_id: str, message: str, max_tokens: int | None = None
    ) -> dict:
        payload: dict[str, Any] = {"message": message}
        if max_tokens:
            payload["max_tokens"] = max_tokens
        url = f"{self.config.session_url(session_id)}/messages"
        return await self._request("POST", url, json=payload)

    async def history(self, session_id: str) -> list[dict]:
        url = f"{self.config.session_url(session_id)}/history"
        return (await self._request("GET", url))["history"]

    async def clear_history(self, session_id: str) -> None:
        await self._request("DELETE", f"{self.config.session_url(session_id)}/history")

    async def refresh_context(self, session_id: str) -> dict:
        url = f"{self.config.session_url(session_id)}/context"
        return await self._request("POST", url)

    async def close_session(self, session_id: str) -> None:
        await self._request("DELETE", self.config.session_url(session_id))

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
