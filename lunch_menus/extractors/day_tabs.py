"""
Day-tab layout: a `.daily-menu` widget with one tab per day and one content
block per tab, each block split into headed sections holding a table of dishes.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from lunch_menus.extractors.base import MenuExtractor
from lunch_menus.extractors.sections import SectionKind, classify_section, parse_currency_price
from lunch_menus.fetch.utils import collapse_whitespace
from lunch_menus.schemas import DayMenu, Dish, WeeklyMenu

logger = logging.getLogger(__name__)

CONTAINER = ".daily-menu"
DAY_LABELS = ".daily-menu-tab__list .daily-menu-tab__item .daily-menu-tab__day"
DAY_BLOCKS = "#daily-menu-content-list .daily-menu-content__content"
SECTIONS = ".daily-menu-content__item"
SECTION_HEADING = ".daily-menu-content__heading"


def parse_day_tabs(html: str) -> Optional[WeeklyMenu]:
    soup = BeautifulSoup(html, "html.parser")
    if soup.select_one(CONTAINER) is None:
        return None

    labels = [collapse_whitespace(el.get_text()) for el in soup.select(DAY_LABELS)]
    labels = [label for label in labels if label]

    days = []
    for i, block in enumerate(soup.select(DAY_BLOCKS)):
        day_label = labels[i] if i < len(labels) else f"Den {i + 1}"
        soups = []
        mains = []

        for section in block.select(SECTIONS):
            heading_el = section.select_one(SECTION_HEADING)
            heading = collapse_whitespace(heading_el.get_text()) if heading_el else ""
            kind = classify_section(heading)
            if kind is SectionKind.UNCLASSIFIED:
                logger.info("Unclassified section %r on %s, keeping its rows as main dishes", heading, day_label)

            for tr in section.select("table tr"):
                tds = tr.find_all("td")
                if len(tds) < 2:
                    continue
                name = collapse_whitespace(tds[1].get_text())
                if not name:
                    continue
                if kind is SectionKind.SOUP:
                    soups.append(name)
                else:
                    price = parse_currency_price(tds[2].get_text()) if len(tds) >= 3 else 0
                    mains.append(Dish(name=name, price_without_soup=price))

        days.append(DayMenu(day_label=day_label, soups=soups, main_dishes=mains))

    if not days:
        return None
    return WeeklyMenu(days=days)


class DayTabsExtractor(MenuExtractor):
    name = "day-tabs"

    def attempt(self, html: str, base_url: str) -> Optional[WeeklyMenu]:
        return parse_day_tabs(html)
