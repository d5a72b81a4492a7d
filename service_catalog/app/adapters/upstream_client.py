"""
Upstream HTTP client for the catalog service.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import httpx

from shared.logging import get_logger


class UpstreamNetworkError(Exception):
    """The upstream could not be reached (DNS, connect, timeout, protocol)."""


@dataclass
class UpstreamResponse:
    """Status, headers and raw body of an upstream answer."""

    status_code: int
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: bytes = b""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    def excerpt(self, limit: int = 200) -> str:
        """Decoded, truncated body for diagnostics."""
        return self.body[:limit * 4].decode("utf-8", errors="replace")[:limit]


class UpstreamClient:
    """Thin async wrapper around ``httpx.AsyncClient``.

    Deadlines are owned here through the client timeout; callers impose none
    of their own.
    """

    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self.timeout = timeout
        self.logger = get_logger("catalog.upstream_client")
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def get(self, url: str, headers: Optional[Mapping[str, str]] = None) -> UpstreamResponse:
        """Issue a GET request."""
        return await self._request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> UpstreamResponse:
        """Issue a POST request; dict/list bodies are sent as JSON, bytes/str verbatim."""
        if isinstance(body, (dict, list)):
            return await self._request("POST", url, headers=headers, json=body)
        return await self._request("POST", url, headers=headers, content=body)

    async def _request(self, method: str, url: str, **kwargs) -> UpstreamResponse:
        client = self._get_client()
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            self.logger.error("Upstream request failed", method=method, url=url, error=str(exc))
            raise UpstreamNetworkError(str(exc) or exc.__class__.__name__) from exc

        self.logger.debug("Upstream response", method=method, url=url, status_code=response.status_code)
        return UpstreamResponse(
            status_code=response.status_code,
            headers=response.headers,
            body=response.content,
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
