"""Structural extraction of rink entries from the montreal.ca listing markup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from . import config
from .models import RawRecord
from .timestamps import Language, find_stamp

logger = logging.getLogger(__name__)


class PageExtractor(Protocol):
    """Turns one listing page into raw, unvalidated records."""

    def extract(self, html: str) -> list[RawRecord]:
        ...


@dataclass(slots=True, frozen=True)
class ListingLanguage:
    code: Language
    listing_url: str
    open_token: str
    updated_label: str


ENGLISH = ListingLanguage(
    code="en",
    listing_url=config.LISTING_URL_EN,
    open_token="open",
    updated_label="last updated",
)

FRENCH = ListingLanguage(
    code="fr",
    listing_url=config.LISTING_URL_FR,
    open_token="ouvert",
    updated_label="dernière mise à jour",
)


def _text(node: Tag | None) -> str:
    if node is None:
        return ""
    return " ".join(node.get_text(" ", strip=True).split())


def _strip_label(text: str, label: str) -> str:
    if text.casefold().startswith(label):
        return text[len(label):].strip(" :")
    return text


class MontrealListingExtractor:
    """Positional extractor for ``li.list-element`` entries.

    The first ``.list-group-info-item`` of an entry carries the ice status and
    the update stamp; the last one carries the facility link and address.
    """

    def __init__(self, language: ListingLanguage) -> None:
        self.language = language

    def extract(self, html: str) -> list[RawRecord]:
        if not html:
            return []

        soup = BeautifulSoup(html, "lxml")
        records: list[RawRecord] = []
        for item in soup.select("li.list-element"):
            records.append(self._extract_item(item))

        logger.debug(
            "Extracted %d raw entries from the %s listing", len(records), self.language.code
        )
        return records

    def _extract_item(self, item: Tag) -> RawRecord:
        info_items = item.select(".list-group-info-item")
        status_block = info_items[0] if info_items else None
        identity_block = info_items[-1] if len(info_items) > 1 else None

        ice_status, last_updated_raw = self._status_fields(status_block)
        name, href, address = self._identity_fields(identity_block)

        return RawRecord(
            type=_text(item.select_one("strong.h4.mb-2")),
            ice_status=ice_status,
            last_updated_raw=last_updated_raw,
            badge=_text(item.select_one(".badge")),
            name=name,
            href=href,
            address=address,
        )

    def _status_fields(self, block: Tag | None) -> tuple[str, str]:
        if block is None:
            return "", ""

        content = block.select_one(".list-item-content")
        if content is None:
            return "", ""

        divs = content.find_all("div", recursive=False)
        status = ""
        for div in divs:
            classes = div.get("class") or []
            if "list-item-label" in classes or "mt-1" in classes:
                continue
            status = _text(div)
            break
        if not status and len(divs) > 1:
            status = _text(divs[1])

        updated_line = _text(content.select_one(".mt-1"))
        stamp = find_stamp(updated_line, self.language.code)
        if stamp is None and not updated_line:
            stamp = find_stamp(_text(content), self.language.code)
        if stamp is None:
            # Keep whatever the page printed so the entry is not lost.
            stamp = _strip_label(updated_line, self.language.updated_label)
        return status, stamp

    def _identity_fields(self, block: Tag | None) -> tuple[str, str, str]:
        if block is None:
            return "", "", ""

        link = block.select_one(".list-item-action a")
        name = ""
        href = ""
        if link is not None:
            name = _text(link.select_one(".link-icon-label")) or _text(link)
            raw_href = (link.get("href") or "").strip()
            if raw_href:
                href = urljoin(config.SITE_ROOT, raw_href)

        address_divs = [
            div
            for div in block.select(".list-item > div")
            if "list-item-action" not in (div.get("class") or [])
        ]
        address = _text(address_divs[-1]) if address_divs else ""
        return name, href, address
