"""Fetch both language versions of the listing and turn them into rinks."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Callable, Optional

from .crawler import AsyncCrawler
from .extractor import ENGLISH, FRENCH, ListingLanguage, MontrealListingExtractor, PageExtractor
from .models import UNKNOWN, RawRecord, Rink, RinkListings
from .timestamps import parse_stamp

logger = logging.getLogger(__name__)


def build_rink(
    record: RawRecord,
    language: ListingLanguage,
    *,
    today: date | None = None,
) -> Optional[Rink]:
    """Validate *record* and convert it, or return None if it must be skipped."""

    if not (record.type and record.ice_status and record.last_updated_raw):
        logger.warning(
            "Skipping %s entry missing required fields: type=%r ice_status=%r "
            "last_updated_raw=%r badge=%r name=%r href=%r address=%r",
            language.code,
            record.type,
            record.ice_status,
            record.last_updated_raw,
            record.badge,
            record.name,
            record.href,
            record.address,
        )
        return None

    return Rink(
        type=record.type,
        ice_status=record.ice_status,
        last_updated_raw=record.last_updated_raw,
        last_updated=parse_stamp(record.last_updated_raw, language.code, today=today),
        is_open=record.badge.strip().casefold() == language.open_token,
        name=record.name or UNKNOWN,
        hyperlink=record.href or language.listing_url,
        address=record.address or UNKNOWN,
    )


class RinkPageParser:
    """Scrapes the English and French listings concurrently."""

    def __init__(
        self,
        *,
        crawler_factory: Callable[[], AsyncCrawler] = AsyncCrawler,
        extractors: dict[str, PageExtractor] | None = None,
        today: Callable[[], date | None] = lambda: None,
    ) -> None:
        self._crawler_factory = crawler_factory
        self._extractors: dict[str, PageExtractor] = extractors or {
            ENGLISH.code: MontrealListingExtractor(ENGLISH),
            FRENCH.code: MontrealListingExtractor(FRENCH),
        }
        self._today = today

    async def parse_pages(self) -> RinkListings:
        async with self._crawler_factory() as crawler:
            # Wait for both sides before closing the client, then fail as a whole.
            results = await asyncio.gather(
                self._parse_language(crawler, ENGLISH),
                self._parse_language(crawler, FRENCH),
                return_exceptions=True,
            )
        for outcome in results:
            if isinstance(outcome, BaseException):
                raise outcome
        rinks_en, rinks_fr = results
        return RinkListings(rinks_en=rinks_en, rinks_fr=rinks_fr)

    async def _parse_language(
        self, crawler: AsyncCrawler, language: ListingLanguage
    ) -> tuple[Rink, ...]:
        logger.info("Fetching %s listing from %s", language.code, language.listing_url)
        result = await crawler.fetch(language.listing_url)
        logger.debug(
            "Got %s listing: status=%d final_url=%s content_type=%s",
            language.code,
            result.status_code,
            result.final_url,
            result.content_type,
        )

        records = self._extractors[language.code].extract(result.text)
        today = self._today()
        rinks = tuple(
            rink
            for rink in (build_rink(record, language, today=today) for record in records)
            if rink is not None
        )
        logger.info(
            "Parsed %d %s rinks (%d skipped)",
            len(rinks),
            language.code,
            len(records) - len(rinks),
        )
        return rinks
