"""Google Geocoding API client for rink addresses."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from . import config
from .models import GeocodingEntry

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """Raised when the geocoding provider cannot be reached or answers non-2xx."""


class ProviderConfigError(RuntimeError):
    """Raised when the geocoding provider is not configured."""


class GeocodingClient:
    """Resolve one street address at a time.

    Addresses are suffixed with the city, province and country because the
    listing only prints the street part.
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        url: str = config.GEOCODING_URL,
        suffix: str = config.GEOCODING_SUFFIX,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key if api_key is not None else config.google_maps_api_key()
        self._url = url
        self._suffix = suffix
        self._client = httpx.AsyncClient(
            headers={"User-Agent": config.USER_AGENT},
            timeout=httpx.Timeout(
                config.READ_TIMEOUT, connect=config.CONNECT_TIMEOUT, read=config.READ_TIMEOUT
            ),
            transport=transport,
        )

    async def __aenter__(self) -> "GeocodingClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def full_address(self, address: str) -> str:
        return f"{address}, {self._suffix}"

    async def geocode_one(self, address: str) -> Optional[GeocodingEntry]:
        if not self._api_key:
            raise ProviderConfigError("GOOGLE_MAPS_BACKEND_API_KEY is not set")

        try:
            response = await self._client.get(
                self._url,
                params={"address": self.full_address(address), "key": self._api_key},
            )
        except httpx.RequestError as exc:
            raise ProviderError(f"Geocoding request failed for {address!r}: {exc}") from exc

        if not response.is_success:
            raise ProviderError(
                f"Geocoding API error: {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"Geocoding API returned invalid JSON for {address!r}") from exc

        status = payload.get("status")
        results = payload.get("results") or []
        if status != "OK" or not results:
            logger.warning("Geocoding failed for address: %s (status: %s)", address, status)
            return None

        location = (results[0].get("geometry") or {}).get("location") or {}
        lat = location.get("lat")
        lng = location.get("lng")
        if lat is None or lng is None:
            logger.warning("Geocoding result for %s has no location", address)
            return None

        return GeocodingEntry(address=address, lat=float(lat), lng=float(lng))
