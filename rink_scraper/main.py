"""CLI entry point for the Montreal rinks scraper."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from . import config
from .geocode_store import BatchGeocoder, GeocodingCacheStore
from .listing_cache import RinkListingCache
from .models import RinkListings
from .parser import RinkPageParser
from .service import RinkGeocodingService


def main(argv: Sequence[str] | None = None) -> None:
    """Execute the CLI."""

    args = _parse_args(argv)
    _configure_logging(args.log_level)

    listings = asyncio.run(_collect(args))

    for code, rinks in (("en", listings.rinks_en), ("fr", listings.rinks_fr)):
        located = sum(1 for rink in rinks if rink.is_geocoded)
        logging.info("%s: %d rinks, %d with coordinates", code, len(rinks), located)

    document = json.dumps(listings.to_dict(), indent=2, ensure_ascii=False)
    if args.output == "-":
        sys.stdout.write(document + "\n")
        return

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document + "\n", encoding="utf-8")
    logging.info("Wrote rinks to %s", output_path)


async def _collect(args: argparse.Namespace) -> RinkListings:
    parser = RinkPageParser()
    if args.no_geocode:
        return await parser.parse_pages()

    service = RinkGeocodingService(
        listing_cache=RinkListingCache(parser.parse_pages),
        geocoder=BatchGeocoder(GeocodingCacheStore(args.cache_file)),
    )
    return await service.get_geocoded_rinks()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--output",
        default="-",
        help="Where to write the rinks JSON ('-' for stdout)",
    )
    parser.add_argument(
        "--cache-file",
        default=config.GEOCODING_CACHE_FILE,
        help="Path to the geocoding cache JSON file",
    )
    parser.add_argument(
        "--no-geocode",
        action="store_true",
        help="Only scrape and parse the listings, skip geocoding",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g. INFO, DEBUG)",
    )
    return parser.parse_args(argv)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)s %(message)s",
        stream=sys.stderr,
    )


if __name__ == "__main__":
    main()
