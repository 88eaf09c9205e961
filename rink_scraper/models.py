"""Data models used across the Montreal rinks pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

UNKNOWN = "Unknown"


@dataclass(slots=True, frozen=True)
class RawRecord:
    """Fields pulled out of one listing item before validation."""

    type: str
    ice_status: str
    last_updated_raw: str
    badge: str
    name: str
    href: str
    address: str


@dataclass(slots=True, frozen=True)
class Rink:
    """A single outdoor rink as published on the listing page."""

    type: str
    ice_status: str
    last_updated_raw: str
    last_updated: Optional[datetime]
    is_open: bool
    name: str
    hyperlink: str
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None

    @property
    def is_geocoded(self) -> bool:
        return self.lat is not None and self.lng is not None

    def to_dict(self) -> dict[str, Any]:
        """Return the camelCase wire form consumed by the map client."""

        payload: dict[str, Any] = {
            "type": self.type,
            "iceStatus": self.ice_status,
            "lastUpdatedRaw": self.last_updated_raw,
            "lastUpdated": self.last_updated.isoformat() if self.last_updated else None,
            "isOpen": self.is_open,
            "name": self.name,
            "hyperlink": self.hyperlink,
            "address": self.address,
        }
        if self.is_geocoded:
            payload["lat"] = self.lat
            payload["lng"] = self.lng
        return payload


@dataclass(slots=True, frozen=True)
class RinkListings:
    """English and French rink lists scraped from the same listing."""

    rinks_en: tuple[Rink, ...]
    rinks_fr: tuple[Rink, ...]

    def addresses(self) -> set[str]:
        """Distinct addresses across both languages, without the placeholder."""

        found = {rink.address for rink in self.rinks_en} | {
            rink.address for rink in self.rinks_fr
        }
        found.discard(UNKNOWN)
        return found

    def to_dict(self) -> dict[str, Any]:
        return {
            "rinks": {
                "en": [rink.to_dict() for rink in self.rinks_en],
                "fr": [rink.to_dict() for rink in self.rinks_fr],
            }
        }


@dataclass(slots=True, frozen=True)
class GeocodingEntry:
    """Resolved coordinates for one exact address string."""

    address: str
    lat: float
    lng: float

    def to_dict(self) -> dict[str, Any]:
        return {"address": self.address, "lat": self.lat, "lng": self.lng}
