import re
from enum import Enum
from typing import Optional

from lunch_menus.fetch.utils import fold


class SectionKind(Enum):
    SOUP = "soup"
    MAIN = "main"
    UNCLASSIFIED = "unclassified"


# Matched against folded (lowercase, no diacritics) heading text
SOUP_KEYWORDS = ("polev", "soup")
MAIN_KEYWORDS = ("hlavni", "jidl", "chod", "nabidk", "menu", "main")

PRICE_WITH_CURRENCY = re.compile(r"(\d{1,3}(?:[ \u00a0]\d{3})+|\d+)\s*(?:kč|kc|czk|,-)", re.IGNORECASE)
LEADING_NUMBER = re.compile(r"^(\d+)[.)]?\s+")


def classify_section(heading: str) -> SectionKind:
    folded = fold(heading)
    if any(k in folded for k in SOUP_KEYWORDS):
        return SectionKind.SOUP
    if any(k in folded for k in MAIN_KEYWORDS):
        return SectionKind.MAIN
    return SectionKind.UNCLASSIFIED


def parse_currency_price(text: str) -> int:
    """'129 Kč' -> 129, '1 290 Kč' -> 1290; no number followed by a currency marker -> 0."""
    match = PRICE_WITH_CURRENCY.search(text or "")
    return int(re.sub(r"\D", "", match.group(1))) if match else 0


def split_dish_number(name: str) -> tuple[int, str]:
    """'2 Svíčková' -> (2, 'Svíčková'); names without a leading number keep 0."""
    match = LEADING_NUMBER.match(name)
    if not match:
        return 0, name
    return int(match.group(1)), name[match.end():]


def cell_number(text: str) -> Optional[int]:
    """A cell holding just a serial number, like '1' or '1.'."""
    match = re.fullmatch(r"(\d+)\.?", text.strip())
    return int(match.group(1)) if match else None
