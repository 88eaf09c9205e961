"""Parsing of the "last updated" stamps shown on the rinks listing.

The listing prints stamps without a year and without a timezone:

* English: ``January 4 - 10:10 am``
* French: ``4 janvier à 13 h 05``

Rinks only operate in winter, so stamps are anchored to a fixed UTC-5 offset
(Eastern Standard Time, no daylight saving) and the year is inferred from the
month: stamps from the autumn months belong to the season that started the
previous calendar year.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from typing import Literal, Optional

from . import config

Language = Literal["en", "fr"]

EASTERN_STANDARD = timezone(timedelta(hours=-5), "EST")

MONTHS_EN: tuple[str, ...] = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

MONTHS_FR: tuple[str, ...] = (
    "janvier",
    "fevrier",
    "mars",
    "avril",
    "mai",
    "juin",
    "juillet",
    "aout",
    "septembre",
    "octobre",
    "novembre",
    "decembre",
)

EN_PATTERN = re.compile(
    r"(?P<month>[A-Za-z]+)\s+(?P<day>\d{1,2})\s*-\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})\s*(?P<meridiem>am|pm)",
    re.IGNORECASE,
)

FR_PATTERN = re.compile(
    r"(?P<day>\d{1,2})\s+(?P<month>[^\W\d_]+)\s+à\s+(?P<hour>\d{1,2})\s*h\s*(?P<minute>\d{2})",
    re.IGNORECASE,
)

PATTERNS: dict[str, re.Pattern[str]] = {"en": EN_PATTERN, "fr": FR_PATTERN}


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value.strip().casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def month_index(name: str, language: Language) -> Optional[int]:
    """Return the 0-based month index for *name*, or None if unknown."""

    lexicon = MONTHS_EN if language == "en" else MONTHS_FR
    try:
        return lexicon.index(_fold(name))
    except ValueError:
        return None


def infer_season_year(
    month: int,
    today: date,
    *,
    boundary_month: int = config.SEASON_BOUNDARY_MONTH,
) -> int:
    """Return the calendar year a seasonal stamp in *month* (0-based) belongs to."""

    if month > boundary_month:
        return today.year - 1
    return today.year


def find_stamp(text: str, language: Language) -> Optional[str]:
    """Locate the stamp substring inside a larger block of text."""

    match = PATTERNS[language].search(text or "")
    if not match:
        return None
    return " ".join(match.group(0).split())


def parse_stamp(
    raw: str,
    language: Language,
    *,
    today: date | None = None,
    boundary_month: int = config.SEASON_BOUNDARY_MONTH,
) -> Optional[datetime]:
    """Parse a raw stamp into an aware datetime, or None when it does not match."""

    match = PATTERNS[language].search(raw or "")
    if not match:
        return None

    month = month_index(match.group("month"), language)
    if month is None:
        return None

    hour = int(match.group("hour"))
    minute = int(match.group("minute"))
    if language == "en":
        meridiem = match.group("meridiem").lower()
        if hour > 12:
            return None
        if meridiem == "am":
            hour = 0 if hour == 12 else hour
        elif hour != 12:
            hour += 12

    today = today or datetime.now(EASTERN_STANDARD).date()
    year = infer_season_year(month, today, boundary_month=boundary_month)

    try:
        return datetime(
            year,
            month + 1,
            int(match.group("day")),
            hour,
            minute,
            tzinfo=EASTERN_STANDARD,
        )
    except ValueError:
        return None
