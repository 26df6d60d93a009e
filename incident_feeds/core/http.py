"""
Upstream HTTP fetch capability for incident feeds.

Wraps a shared httpx.AsyncClient that follows redirects. Non-2xx responses and
transport failures are reported consistently as UpstreamFetchError, which is
fatal for the pipeline invocation that hit it.

Usage:
    from incident_feeds.core.http import FeedFetcher

    async with FeedFetcher() as fetcher:
        response = await fetcher.fetch("pdx", "https://example.org/feed.kml")
        print(response.status, len(response.content))
"""

import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

import httpx

from incident_feeds.core.config import settings

logger = logging.getLogger(__name__)


class UpstreamFetchError(Exception):
    """Raised when a source feed cannot be fetched."""

    def __init__(
        self,
        message: str,
        source: str = "",
        url: str = "",
        status: Optional[int] = None,
    ):
        self.message = message
        self.source = source
        self.url = url
        self.status = status
        prefix = f"{source} adapter" if source else "Upstream"
        if status is not None:
            super().__init__(f"{prefix} HTTP {status}: {message}")
        else:
            super().__init__(f"{prefix} fetch failed: {message}")


@dataclass
class FetchResponse:
    """Raw upstream response: status plus undecoded body."""

    status: int
    content: bytes
    content_type: str = ""
    url: str = ""

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class FeedFetcher:
    """
    GET-only HTTP client used by the source adapters.

    The underlying client can be injected (tests pass one built on
    httpx.MockTransport); otherwise one is created lazily and owned here.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
    ):
        self._client = client
        self._owns_client = client is None
        self.timeout = timeout if timeout is not None else settings.HTTP_TIMEOUT
        self.user_agent = user_agent or settings.USER_AGENT

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Close the client if this fetcher created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> FetchResponse:
        """
        Issue a GET, following redirects.

        Raises:
            httpx.HTTPError on transport failure
        """
        response = await self.client.get(
            url, headers=headers, params=params, follow_redirects=True
        )
        return FetchResponse(
            status=response.status_code,
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            url=str(response.url),
        )

    async def fetch(
        self,
        source: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> FetchResponse:
        """
        Fetch a source feed, raising UpstreamFetchError on any failure.

        Args:
            source: Adapter name, used in error messages
            url: Feed URL
            headers: Optional extra request headers
            params: Optional query parameters

        Returns:
            FetchResponse with a status below 400
        """
        try:
            response = await self.get(url, headers=headers, params=params)
        except httpx.HTTPError as e:
            logger.error(f"{source}: transport error fetching {url}: {e}")
            raise UpstreamFetchError(str(e), source=source, url=url) from e

        if response.status >= 400:
            snippet = response.text[:200]
            logger.error(f"{source}: HTTP {response.status} from {url}")
            raise UpstreamFetchError(
                snippet, source=source, url=url, status=response.status
            )

        logger.debug(
            f"{source}: fetched {len(response.content)} bytes "
            f"({response.content_type or 'no content-type'})"
        )
        return response
