"""HTTP fetching utilities for the Montreal rinks listing pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from . import config

logger = logging.getLogger(__name__)

DEFAULT_ACCEPT_HEADER = (
    "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
)


class FetchError(RuntimeError):
    """Raised when a listing page cannot be retrieved."""

    def __init__(self, url: str, message: str, *, status_code: int | None = None) -> None:
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.status_code = status_code


@dataclass(slots=True)
class FetchResult:
    """Describes a successful page fetch."""

    url: str
    final_url: str
    status_code: int
    content_type: str | None
    text: str


class AsyncCrawler:
    """Async page fetcher with explicit timeouts and no retries."""

    def __init__(
        self,
        *,
        user_agent: str = config.USER_AGENT,
        connect_timeout: float = config.CONNECT_TIMEOUT,
        read_timeout: float = config.READ_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        timeout = httpx.Timeout(
            connect=connect_timeout,
            read=read_timeout,
            write=read_timeout,
            pool=connect_timeout,
        )
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": user_agent,
                "Accept": DEFAULT_ACCEPT_HEADER,
                "Accept-Language": "fr-CA,fr;q=0.9,en-CA;q=0.8,en;q=0.7",
            },
            timeout=timeout,
            http2=True,
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> "AsyncCrawler":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch(self, url: str) -> FetchResult:
        """Fetch *url*, raising :class:`FetchError` on transport or HTTP failure."""

        try:
            response = await self._client.get(url)
        except httpx.RequestError as exc:
            logger.debug("Request error for %s: %s", url, exc)
            raise FetchError(url, str(exc) or exc.__class__.__name__) from exc

        if not response.is_success:
            raise FetchError(
                url,
                f"{response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        logger.debug("Fetched %s (%d bytes)", url, len(response.content))
        return FetchResult(
            url=url,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            text=response.text,
        )
