"""Compose the cached listings with the geocoding cache."""

from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from .geocode_store import BatchGeocoder, GeocodingCacheStore
from .listing_cache import RinkListingCache
from .models import GeocodingEntry, Rink, RinkListings
from .parser import RinkPageParser

logger = logging.getLogger(__name__)


def attach_coordinates(
    rinks: tuple[Rink, ...], geocoded: dict[str, GeocodingEntry]
) -> tuple[Rink, ...]:
    """Return copies of *rinks* carrying coordinates where an entry exists."""

    located: list[Rink] = []
    for rink in rinks:
        entry = geocoded.get(rink.address)
        if entry is None:
            located.append(rink)
        else:
            located.append(dataclasses.replace(rink, lat=entry.lat, lng=entry.lng))
    return tuple(located)


class RinkGeocodingService:
    """Entry point used by the web layer and the CLI."""

    def __init__(
        self,
        *,
        listing_cache: Optional[RinkListingCache] = None,
        geocoder: Optional[BatchGeocoder] = None,
    ) -> None:
        if listing_cache is None:
            listing_cache = RinkListingCache(RinkPageParser().parse_pages)
        if geocoder is None:
            geocoder = BatchGeocoder(GeocodingCacheStore())
        self.listing_cache = listing_cache
        self.geocoder = geocoder

    async def get_geocoded_rinks(self) -> RinkListings:
        listings = await self.listing_cache.get_rinks()

        # Addresses are shared between both languages of the same listing.
        geocoded = await self.geocoder.geocode_many(listings.addresses())

        result = RinkListings(
            rinks_en=attach_coordinates(listings.rinks_en, geocoded),
            rinks_fr=attach_coordinates(listings.rinks_fr, geocoded),
        )
        logger.info(
            "Serving %d en / %d fr rinks (%d addresses located)",
            len(result.rinks_en),
            len(result.rinks_fr),
            len(geocoded),
        )
        return result
