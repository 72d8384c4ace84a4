"""
HTTP client for the remote session store.

Each call opens its own ``httpx.AsyncClient``. Tests pass an
``httpx.ASGITransport`` so the client talks to the FastAPI app in-process.
"""
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from .config import get_sync_settings
from .errors import InvalidEmailError, RemoteStoreError
from .models import FastingSession

logger = logging.getLogger(__name__)


class RemoteSessionStore:
    """Client for ``/sessions`` and ``/email`` on the session store API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_sync_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise RemoteStoreError(f"{method} {path} failed: {e}") from e

    @staticmethod
    def _error_detail(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("error") or body)
        return str(body)

    async def fetch_session(self, session_id: str) -> Optional[FastingSession]:
        """Return the stored session, or None when the store has no record."""
        response = await self._request("GET", f"/sessions/{session_id}")
        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise RemoteStoreError(
                f"Loading session {session_id} returned {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            return FastingSession.from_wire(response.json())
        except (ValueError, ValidationError) as e:
            raise RemoteStoreError(f"Session {session_id} has an unreadable body: {e}") from e

    async def save_session(self, session: FastingSession) -> int:
        """Replace the stored record. Returns the revision assigned by the store."""
        response = await self._request(
            "POST", f"/sessions/{session.id}", json=session.to_wire()
        )
        if response.status_code != 200:
            raise RemoteStoreError(
                f"Saving session {session.id} returned {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            return int(response.json().get("revision", 0))
        except (ValueError, TypeError, AttributeError) as e:
            raise RemoteStoreError(
                f"Saving session {session.id} returned an unreadable body: {e}"
            ) from e

    async def delete_session(self, session_id: str) -> None:
        response = await self._request("DELETE", f"/sessions/{session_id}")
        if response.status_code != 200:
            raise RemoteStoreError(
                f"Deleting session {session_id} returned {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )

    async def find_sessions_by_email(self, email: str) -> list[FastingSession]:
        """Sessions whose owner email matches, case-insensitively."""
        response = await self._request(
            "GET", "/sessions/by-email", params={"email": email}
        )
        if response.status_code == 404:
            return []
        if response.status_code == 400:
            raise InvalidEmailError(self._error_detail(response))
        if response.status_code != 200:
            raise RemoteStoreError(
                f"Email lookup returned {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            return [FastingSession.from_wire(s) for s in response.json().get("sessions", [])]
        except (ValueError, AttributeError, ValidationError) as e:
            raise RemoteStoreError(f"Email lookup returned an unreadable body: {e}") from e

    async def send_session_links(self, email: str) -> dict[str, Any]:
        """
        Ask the store to email every session link owned by ``email``.

        Returns the response body (``success``, ``sessionCount``, ``message``).
        A 404 (no sessions for that address) is returned as an unsuccessful
        result rather than raised.
        """
        response = await self._request(
            "POST", "/email/send-links", json={"email": email}
        )
        if response.status_code == 400:
            raise InvalidEmailError(self._error_detail(response))
        if response.status_code == 404:
            return {
                "success": False,
                "sessionCount": 0,
                "message": self._error_detail(response),
            }
        if response.status_code != 200:
            raise RemoteStoreError(
                f"Sending session links returned {response.status_code}: "
                f"{self._error_detail(response)}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise RemoteStoreError(
                f"Sending session links returned an unreadable body: {e}"
            ) from e
