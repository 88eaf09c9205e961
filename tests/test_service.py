"""
End-to-end tests for the geocoded rinks service
"""
import asyncio

import pytest

from conftest import FakeGeocodingProvider
from html_fixtures import french_item, listing_page, rink_item
from rink_scraper.crawler import FetchError
from rink_scraper.geocoding import ProviderConfigError
from rink_scraper.listing_cache import RinkListingCache
from rink_scraper.models import GeocodingEntry, Rink, RinkListings
from rink_scraper.service import RinkGeocodingService, attach_coordinates


class RecordingGeocoder:
    def __init__(self, known: dict[str, GeocodingEntry]) -> None:
        self.known = known
        self.calls: list[set[str]] = []

    async def geocode_many(self, addresses):
        self.calls.append(set(addresses))
        return {a: self.known[a] for a in addresses if a in self.known}


def _rink(address: str) -> Rink:
    return Rink(
        type="Outdoor rink",
        ice_status="Good",
        last_updated_raw="January 4 - 10:10 am",
        last_updated=None,
        is_open=True,
        name="Parc",
        hyperlink="https://montreal.ca",
        address=address,
    )


class TestAttachCoordinates:
    def test_returns_new_records(self):
        original = (_rink("123 Rue X"), _rink("456 Rue Y"))
        located = attach_coordinates(original, {"123 Rue X": GeocodingEntry("123 Rue X", 45.5, -73.6)})

        assert (located[0].lat, located[0].lng) == (45.5, -73.6)
        assert located[1].lat is None and located[1].lng is None
        assert original[0].lat is None
        assert located[0].name == original[0].name


class TestRinkGeocodingService:
    """Orchestration of listings and geocoding"""

    def test_shared_address_geocoded_once(self):
        listings = RinkListings(rinks_en=(_rink("123 Rue X"),), rinks_fr=(_rink("123 Rue X"),))

        async def fetch():
            return listings

        geocoder = RecordingGeocoder({"123 Rue X": GeocodingEntry("123 Rue X", 45.5, -73.6)})
        service = RinkGeocodingService(listing_cache=RinkListingCache(fetch), geocoder=geocoder)

        result = asyncio.run(service.get_geocoded_rinks())

        assert geocoder.calls == [{"123 Rue X"}]
        assert (result.rinks_en[0].lat, result.rinks_en[0].lng) == (45.5, -73.6)
        assert (result.rinks_fr[0].lat, result.rinks_fr[0].lng) == (45.5, -73.6)

    def test_unknown_address_is_not_geocoded(self):
        """Rinks without an address are not sent to the provider"""
        listings = RinkListings(
            rinks_en=(_rink("Unknown"), _rink("123 Rue X")), rinks_fr=(_rink("Unknown"),)
        )

        async def fetch():
            return listings

        geocoder = RecordingGeocoder({"Unknown": GeocodingEntry("Unknown", 45.0, -73.0)})
        service = RinkGeocodingService(listing_cache=RinkListingCache(fetch), geocoder=geocoder)

        result = asyncio.run(service.get_geocoded_rinks())

        assert geocoder.calls == [{"123 Rue X"}]
        assert result.rinks_en[0].lat is None
        assert result.rinks_fr[0].lat is None

    def test_cached_listing_is_not_mutated(self):
        listings = RinkListings(rinks_en=(_rink("123 Rue X"),), rinks_fr=())

        async def fetch():
            return listings

        geocoder = RecordingGeocoder({"123 Rue X": GeocodingEntry("123 Rue X", 45.5, -73.6)})
        service = RinkGeocodingService(listing_cache=RinkListingCache(fetch), geocoder=geocoder)
        asyncio.run(service.get_geocoded_rinks())

        assert listings.rinks_en[0].lat is None

    def test_end_to_end(self, listing_site, make_geocoder):
        """3 + 3 rinks sharing 2 addresses are all geocoded in one batch"""
        listing_site.pages["en"] = listing_page(
            [
                rink_item(name="Parc A", address="1 Rue A"),
                rink_item(name="Parc B", address="2 Rue B"),
                rink_item(name="Parc C", address="3 Rue C"),
            ]
        )
        listing_site.pages["fr"] = listing_page(
            [
                french_item(name="Parc A", address="1 Rue A"),
                french_item(name="Parc B", address="2 Rue B"),
                french_item(name="Parc D", address="4 Rue D"),
            ]
        )
        provider = FakeGeocodingProvider(
            {
                "1 Rue A": (45.51, -73.51),
                "2 Rue B": (45.52, -73.52),
                "3 Rue C": (45.53, -73.53),
                "4 Rue D": (45.54, -73.54),
            }
        )
        service = RinkGeocodingService(
            listing_cache=RinkListingCache(listing_site.parser().parse_pages),
            geocoder=make_geocoder(provider),
        )

        result = asyncio.run(service.get_geocoded_rinks())

        assert len(result.rinks_en) == 3
        assert len(result.rinks_fr) == 3
        for rink in result.rinks_en + result.rinks_fr:
            assert rink.lat is not None and rink.lng is not None
        assert len(provider.queries) == 4

        payload = result.to_dict()
        assert set(payload["rinks"]) == {"en", "fr"}
        first = payload["rinks"]["fr"][0]
        assert first["iceStatus"] == "Bonnes conditions"
        assert first["isOpen"] is True
        assert first["lastUpdated"] == "2024-01-04T13:05:00-05:00"
        assert (first["lat"], first["lng"]) == (45.51, -73.51)

    def test_geocode_miss_leaves_coordinates_unset(self, listing_site, make_geocoder):
        listing_site.pages["en"] = listing_page(
            [rink_item(address="1 Rue A"), rink_item(address="9 Rue Nowhere")]
        )
        listing_site.pages["fr"] = listing_page([])
        provider = FakeGeocodingProvider({"1 Rue A": (45.51, -73.51)})
        service = RinkGeocodingService(
            listing_cache=RinkListingCache(listing_site.parser().parse_pages),
            geocoder=make_geocoder(provider),
        )

        result = asyncio.run(service.get_geocoded_rinks())

        located = [rink for rink in result.rinks_en if rink.is_geocoded]
        assert len(located) == 1
        assert "lat" not in result.rinks_en[1].to_dict()

    def test_fetch_error_propagates(self, listing_site, make_geocoder):
        listing_site.status["fr"] = 500
        service = RinkGeocodingService(
            listing_cache=RinkListingCache(listing_site.parser().parse_pages),
            geocoder=make_geocoder(FakeGeocodingProvider()),
        )
        with pytest.raises(FetchError):
            asyncio.run(service.get_geocoded_rinks())

    def test_missing_api_key_propagates(self, listing_site, cache_path, monkeypatch):
        from rink_scraper.geocode_store import BatchGeocoder, GeocodingCacheStore

        monkeypatch.delenv("GOOGLE_MAPS_BACKEND_API_KEY", raising=False)
        listing_site.pages["en"] = listing_page([rink_item()])
        service = RinkGeocodingService(
            listing_cache=RinkListingCache(listing_site.parser().parse_pages),
            geocoder=BatchGeocoder(GeocodingCacheStore(cache_path)),
        )
        with pytest.raises(ProviderConfigError):
            asyncio.run(service.get_geocoded_rinks())
