"""Shared async HTTP client with configurable timeout and default headers."""

from typing import Any, Mapping, Optional

import httpx


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient.

    One instance per external service keeps timeouts and auth headers
    independently configurable. Transport errors (``httpx.HTTPError``)
    propagate; callers decide how to classify them.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout, headers=dict(headers or {}))

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
