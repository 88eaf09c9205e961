"""Short-lived in-memory cache in front of the listing scraper."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from . import config
from .models import RinkListings

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CacheEntry:
    listings: RinkListings
    timestamp: float


class RinkListingCache:
    """Serve the last scrape for ``ttl_seconds`` before scraping again.

    Not synchronized: overlapping misses may each scrape, the last one wins.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[RinkListings]],
        *,
        ttl_seconds: float = config.LISTING_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._fetch = fetch
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[CacheEntry] = None

    def is_fresh(self) -> bool:
        if self._entry is None:
            return False
        return self._clock() - self._entry.timestamp < self._ttl_seconds

    def clear(self) -> None:
        self._entry = None

    async def get_rinks(self) -> RinkListings:
        entry = self._entry
        if entry is not None and self._clock() - entry.timestamp < self._ttl_seconds:
            return entry.listings

        logger.info("Listing cache expired or empty; scraping")
        listings = await self._fetch()
        self._entry = CacheEntry(listings=listings, timestamp=self._clock())
        return listings
