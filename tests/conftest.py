"""
Pytest fixtures for testing
"""
import sys
from datetime import date
from pathlib import Path

import httpx
import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rink_scraper.crawler import AsyncCrawler  # noqa: E402
from rink_scraper.geocode_store import BatchGeocoder, GeocodingCacheStore  # noqa: E402
from rink_scraper.geocoding import GeocodingClient  # noqa: E402
from rink_scraper.parser import RinkPageParser  # noqa: E402

WINTER_DAY = date(2024, 1, 10)


async def _no_sleep(_seconds: float) -> None:
    return None


class FakeListingSite:
    """Serves canned English and French listing pages and counts requests."""

    def __init__(self, en_html: str = "", fr_html: str = "") -> None:
        self.pages = {"en": en_html, "fr": fr_html}
        self.status = {"en": 200, "fr": 200}
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        language = "en" if request.url.path.startswith("/en/") else "fr"
        self.requests.append(language)
        return httpx.Response(
            self.status[language],
            text=self.pages[language],
            headers={"content-type": "text/html; charset=utf-8"},
        )

    def parser(self) -> RinkPageParser:
        return RinkPageParser(
            crawler_factory=lambda: AsyncCrawler(transport=httpx.MockTransport(self.handler)),
            today=lambda: WINTER_DAY,
        )


class FakeGeocodingProvider:
    """Answers like the Google Geocoding API for a fixed set of addresses."""

    def __init__(self, known: dict[str, tuple[float, float]] | None = None) -> None:
        self.known = known or {}
        self.queries: list[str] = []
        self.http_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        query = request.url.params["address"]
        self.queries.append(query)
        if self.http_status != 200:
            return httpx.Response(self.http_status, text="boom")

        street = query.split(", Montreal, QC, Canada")[0]
        if street not in self.known:
            return httpx.Response(200, json={"status": "ZERO_RESULTS", "results": []})
        lat, lng = self.known[street]
        return httpx.Response(
            200,
            json={
                "status": "OK",
                "results": [{"geometry": {"location": {"lat": lat, "lng": lng}}}],
            },
        )

    def client(self) -> GeocodingClient:
        return GeocodingClient(api_key="test-key", transport=httpx.MockTransport(self.handler))


@pytest.fixture
def listing_site():
    return FakeListingSite()


@pytest.fixture
def geocoding_provider():
    return FakeGeocodingProvider()


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "rinks_geocoding.json"


@pytest.fixture
def make_geocoder(cache_path):
    """Build a batch geocoder backed by a temp cache file and a fake provider."""

    def _make(provider: FakeGeocodingProvider) -> BatchGeocoder:
        return BatchGeocoder(
            GeocodingCacheStore(cache_path),
            client_factory=provider.client,
            sleep=_no_sleep,
        )

    return _make
