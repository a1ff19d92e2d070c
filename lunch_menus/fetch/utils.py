import math
import re
import unicodedata
from datetime import date, datetime, timedelta
from enum import IntEnum
from typing import Optional
from urllib.parse import urljoin, urlparse
from zoneinfo import ZoneInfo

CZ_TZ = ZoneInfo("Europe/Prague")
CZ_WEEKDAYS = ["Pondělí", "Úterý", "Středa", "Čtvrtek", "Pátek", "Sobota", "Neděle"]


def fold(text: str) -> str:
    """Lowercase and strip diacritics, so 'Polévky' and 'polevky' compare equal."""
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch)).lower()


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


class Weekday(IntEnum):
    """Monday-indexed weekday with its Czech label."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def label(self) -> str:
        return CZ_WEEKDAYS[self.value]

    @classmethod
    def find_in(cls, text: str) -> Optional["Weekday"]:
        """Return the first weekday whose label occurs in text."""
        folded = fold(text)
        for day in cls:
            if fold(day.label) in folded:
                return day
        return None

    @classmethod
    def today(cls, tz: ZoneInfo = CZ_TZ) -> "Weekday":
        return cls(datetime.now(tz).weekday())


def today_prague() -> date:
    return datetime.now(CZ_TZ).date()


def week_start(today: Optional[date] = None) -> str:
    """
    Monday of the week containing `today` as an ISO date string.
    Sunday belongs to the week that started six days earlier.
    """
    today = today or today_prague()
    return (today - timedelta(days=today.weekday())).isoformat()


def normalize_domain(url: str) -> str:
    """
    Stable domain key for a restaurant URL.
    'https://www.example.cz/menu' -> 'example.cz'; malformed input -> ''.
    """
    try:
        hostname = urlparse(url.strip()).hostname
    except (ValueError, AttributeError):
        return ""
    if not hostname:
        return ""
    if hostname.startswith("www."):
        hostname = hostname[len("www."):]
    return hostname


def to_absolute_url(base_url: str, maybe_relative: str) -> str:
    try:
        return urljoin(base_url, maybe_relative)
    except ValueError:
        return maybe_relative


def normalize_price_human(price_text) -> Optional[int]:
    """
    Normalize price text to integer CZK.
    Examples: '145,-' -> 145, '145 Kč' -> 145, '95.50' -> 95
    """
    if price_text is None or price_text == "":
        return None
    if isinstance(price_text, bool):
        return None
    if isinstance(price_text, float) and not math.isfinite(price_text):
        return None
    if isinstance(price_text, (int, float)):
        return int(price_text)

    cleaned = re.sub(r"[^\d,.-]", "", str(price_text))
    match = re.search(r"(\d+)(?:[,.-]\d*)?", cleaned)
    if match:
        return int(match.group(1))
    return None
