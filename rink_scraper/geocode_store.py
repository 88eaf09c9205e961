"""File-backed geocoding cache and the batch geocoder that fills it."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Awaitable, Callable, Iterable

from . import config
from .geocoding import GeocodingClient
from .models import GeocodingEntry

logger = logging.getLogger(__name__)

GeocodingCache = dict[str, GeocodingEntry]


class CacheIOError(RuntimeError):
    """Raised when the geocoding cache file cannot be written."""


class GeocodingCacheStore:
    """JSON file mapping exact address strings to coordinates.

    Read-modify-write without locking; a single writer is assumed.
    """

    def __init__(self, path: str | Path = config.GEOCODING_CACHE_FILE) -> None:
        self.path = Path(path)

    def load(self) -> GeocodingCache:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.error("Error loading geocoding cache %s: %s", self.path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("Geocoding cache %s is not a JSON object; ignoring it", self.path)
            return {}

        cache: GeocodingCache = {}
        for address, value in data.items():
            try:
                cache[address] = GeocodingEntry(
                    address=str(value.get("address", address)),
                    lat=float(value["lat"]),
                    lng=float(value["lng"]),
                )
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Dropping malformed geocoding cache entry for %r", address)
        return cache

    def save(self, cache: GeocodingCache) -> None:
        payload = {address: cache[address].to_dict() for address in sorted(cache)}
        directory = self.path.parent
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(payload, f, indent=2, ensure_ascii=False)
                    f.write("\n")
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise CacheIOError(f"Error saving geocoding cache {self.path}: {exc}") from exc


class BatchGeocoder:
    """Resolve a set of addresses, serving known ones from the store."""

    def __init__(
        self,
        store: GeocodingCacheStore,
        *,
        client_factory: Callable[[], GeocodingClient] = GeocodingClient,
        delay_seconds: float = config.GEOCODING_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._client_factory = client_factory
        self._delay_seconds = delay_seconds
        self._sleep = sleep

    async def geocode_many(self, addresses: Iterable[str]) -> dict[str, GeocodingEntry]:
        cache = self._store.load()
        result: dict[str, GeocodingEntry] = {}
        missing: list[str] = []

        for address in sorted(set(addresses)):
            cached = cache.get(address)
            if cached is not None:
                result[address] = cached
            else:
                missing.append(address)

        logger.info(
            "Geocoding %d addresses: %d cached, %d to resolve",
            len(result) + len(missing),
            len(result),
            len(missing),
        )
        if not missing:
            return result

        updated = dict(cache)
        added = 0
        try:
            async with self._client_factory() as client:
                for index, address in enumerate(missing):
                    if index:
                        await self._sleep(self._delay_seconds)
                    logger.info("Geocoding new address: %s", address)
                    entry = await client.geocode_one(address)
                    if entry is None:
                        logger.warning("Failed to geocode address: %s", address)
                        continue
                    result[address] = entry
                    updated[address] = entry
                    added += 1
                    logger.info("Geocoded %s -> (%s, %s)", address, entry.lat, entry.lng)
        finally:
            # Persist what was resolved even when the provider fails midway.
            if added:
                self._store.save(updated)
        return result
