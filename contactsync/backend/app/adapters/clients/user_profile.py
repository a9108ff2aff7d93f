# app/adapters/clients/user_profile.py
from __future__ import annotations

from typing import Any

import httpx

from ...config import settings
from ...domain.errors import MalformedDocument, RemoteRejection, TransportFailure


class UserProfileClient:
    """
    Thin async client for the remote user-profile API.

    One request per call, no retries. Failures surface as CalloutError
    subclasses; interpreting them is the caller's job.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.USER_API_BASE_URL).rstrip("/")
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.USER_API_TIMEOUT_S)
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport)

    async def get_user(self, external_id: str) -> Any:
        url = f"{self.base_url}/{external_id}"
        try:
            async with self._client() as client:
                r = await client.get(url, headers={"accept": "application/json"})
        except httpx.HTTPError as e:
            raise TransportFailure(f"GET {url}: {type(e).__name__}: {e}") from e

        if r.status_code != 200:
            raise RemoteRejection(r.status_code, r.text)

        try:
            return r.json()
        except ValueError as e:
            raise MalformedDocument(f"GET {url}: body is not JSON") from e

    async def add_user(self, payload: dict[str, Any]) -> None:
        url = f"{self.base_url}/add"
        try:
            async with self._client() as client:
                r = await client.post(url, json=payload, headers={"Content-Type": "application/json"})
        except httpx.HTTPError as e:
            raise TransportFailure(f"POST {url}: {type(e).__name__}: {e}") from e

        if not (200 <= r.status_code < 300):
            raise RemoteRejection(r.status_code, r.text)
