"""
Excel-style listing: a spreadsheet exported to one HTML table, with
"Polévky" and "Denní nabídka" rows opening the soup and main-dish sections.
"""

import re
from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup

from lunch_menus.extractors.base import MenuExtractor
from lunch_menus.extractors.sections import cell_number, split_dish_number
from lunch_menus.fetch.html_analyzer import page_text
from lunch_menus.fetch.utils import Weekday, collapse_whitespace, fold
from lunch_menus.schemas import DayMenu, Dish, WeeklyMenu

# Only pages announcing a menu listing are read, unrelated tables are left alone
MARKER_PHRASE = "jidelni listek"
SOUPS_ROW = "polevky"
MAINS_ROW = "denni nabidka"


class RowState(Enum):
    NONE = "none"
    SOUPS = "soups"
    MAINS = "mains"


def _first_int(text: str) -> int:
    match = re.search(r"(\d+)", text or "")
    return int(match.group(1)) if match else 0


def parse_excel_table(html: str, today: Optional[Weekday] = None) -> Optional[WeeklyMenu]:
    """
    Read a single day's menu from the first table of the page.

    The day comes from a weekday name in any row; without one, `today`
    (default: current Prague weekday) is assumed. That guess can be wrong.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table")
    if table is None:
        return None
    if MARKER_PHRASE not in fold(page_text(html)):
        return None

    soups = []
    mains = []
    state = RowState.NONE
    day: Optional[Weekday] = None

    for tr in table.find_all("tr"):
        texts = [collapse_whitespace(td.get_text()) for td in tr.find_all("td")]
        line = " ".join(texts).strip()
        if not line:
            continue

        found = Weekday.find_in(line)
        if found is not None:
            day = found

        folded = fold(line)
        if SOUPS_ROW in folded:
            state = RowState.SOUPS
            continue
        if MAINS_ROW in folded:
            state = RowState.MAINS
            continue

        if len(texts) < 2 or not texts[1]:
            continue

        if state is RowState.SOUPS:
            soups.append(texts[1])
        elif state is RowState.MAINS:
            number, name = split_dish_number(texts[1])
            if not number:
                number = cell_number(texts[0]) or 0
            if not name:
                continue
            price = _first_int(texts[2]) if len(texts) >= 3 else 0
            mains.append(Dish(number=number, name=name, price_without_soup=price))

    if not soups and not mains:
        return None

    if day is None:
        day = today if today is not None else Weekday.today()

    return WeeklyMenu(days=[DayMenu(day_label=day.label, soups=soups, main_dishes=mains)])


class ExcelTableExtractor(MenuExtractor):
    name = "excel-table"

    def attempt(self, html: str, base_url: str) -> Optional[WeeklyMenu]:
        return parse_excel_table(html)
