"""Environment-driven settings for the Montreal rinks pipeline."""

from __future__ import annotations

import os

LISTING_URL_EN = "https://montreal.ca/en/outdoor-skating-rinks-conditions"
LISTING_URL_FR = "https://montreal.ca/conditions-des-patinoires-exterieures?shownResults=1000"
SITE_ROOT = "https://montreal.ca"

GEOCODING_URL = "https://maps.googleapis.com/maps/api/geocode/json"
GEOCODING_SUFFIX = "Montreal, QC, Canada"

DEFAULT_USER_AGENT = "MontrealRinks/0.1 (+https://github.com/)"


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def google_maps_api_key() -> str | None:
    # Read lazily so a key exported after import is still picked up.
    value = os.getenv("GOOGLE_MAPS_BACKEND_API_KEY")
    return value.strip() if value and value.strip() else None


GEOCODING_CACHE_FILE = os.getenv("GEOCODING_CACHE_FILE", "rinks_geocoding.json")
GEOCODING_DELAY_SECONDS = _env_float("GEOCODING_DELAY_SECONDS", 0.1)

LISTING_CACHE_TTL_SECONDS = _env_int("RINKS_CACHE_TTL_SECONDS", 5 * 60)

USER_AGENT = os.getenv("RINKS_USER_AGENT", DEFAULT_USER_AGENT)
CONNECT_TIMEOUT = _env_float("RINKS_CONNECT_TIMEOUT", 10.0)
READ_TIMEOUT = _env_float("RINKS_READ_TIMEOUT", 30.0)

# 0-based month index; timestamps from later months belong to the previous year.
SEASON_BOUNDARY_MONTH = _env_int("RINKS_SEASON_BOUNDARY_MONTH", 8)

PORT = _env_int("PORT", 8000)
