"""HTTP rendition of the corpus call contract."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from cancorpus.errors import RemoteRejected, RemoteUnavailable

DEFAULT_TIMEOUT = 10.0


def build_http_client(
    base_url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Build the shared async client used by every HTTP handle."""

    # Refuse non-HTTPS for remote hosts (bearer tokens would travel in cleartext)
    url = httpx.URL(base_url)
    if url.scheme != "https" and url.host not in ("localhost", "127.0.0.1", "::1"):
        raise ValueError(f"Corpus URL must use HTTPS (got {base_url}).")
    return httpx.AsyncClient(
        base_url=base_url,
        headers={"Content-Type": "application/json"},
        timeout=timeout,
        transport=transport,
    )


class HttpCallHandle:
    """Corpus calls over HTTP under one identity.

    The handle does not own ``client``; handles for different identities
    share it and differ only in the bearer token they send.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None) -> None:
        self._client = client
        self._token = token

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    async def list_entries(self) -> list[str]:
        data = await self._request("GET", "/entries")
        entries = data.get("entries") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise RemoteUnavailable("malformed entries response")
        return [str(entry) for entry in entries]

    async def add_entry(self, text: str) -> None:
        await self._request("POST", "/entries", json={"text": text})

    async def edit_entry(self, position: int, text: str) -> None:
        await self._request("PUT", f"/entries/{position}", json={"text": text})

    async def delete_entry(self, position: int) -> None:
        await self._request("DELETE", f"/entries/{position}")

    async def clear_entries(self) -> None:
        await self._request("DELETE", "/entries")

    async def ask(self, question: str) -> str:
        data = await self._request("POST", "/ask", json={"question": question})
        answer = data.get("answer") if isinstance(data, dict) else None
        if not isinstance(answer, str):
            raise RemoteUnavailable("malformed answer response")
        return answer

    async def _request(self, method: str, path: str, *, json: dict[str, Any] | None = None) -> Any:
        headers = {"Authorization": f"Bearer {self._token}"} if self._token else None
        try:
            resp = await self._client.request(method, path, json=json, headers=headers)
        except (httpx.TimeoutException, httpx.TransportError) as e:
            logger.warning("corpus.http.transport method={} path={} error={}", method, path, e)
            raise RemoteUnavailable(f"{method} {path} failed: {e}") from e

        if resp.status_code >= 500:
            raise RemoteUnavailable(f"{method} {path} returned {resp.status_code}")
        if resp.status_code >= 400:
            raise RemoteRejected(f"{method} {path} rejected: {resp.status_code} {resp.text}".rstrip())
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteUnavailable(f"{method} {path} returned invalid JSON") from e
