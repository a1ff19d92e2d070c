from typing import Optional

from lunch_menus.schemas import WeeklyMenu


class MenuExtractor:
    """Parses one known page layout straight into a WeeklyMenu, without the language model."""

    name: str = "extractor"

    def attempt(self, html: str, base_url: str) -> Optional[WeeklyMenu]:
        raise NotImplementedError


class LinkLocator:
    """Finds the URL of menu content that lives outside the page (widget, PDF)."""

    name: str = "locator"

    def attempt(self, html: str, base_url: str) -> Optional[str]:
        raise NotImplementedError
