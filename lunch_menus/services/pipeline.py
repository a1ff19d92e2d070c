"""
Menu extraction pipeline.

For one restaurant URL, try strategies from cheapest to most expensive and
return the first usable result:

1. Fetch the page HTML directly
2. Structured extractors (known layouts, no language model)
3. Widget iframe / PDF link -> remote rendering -> language model
4. Reduced page text, else remote rendering of the page -> language model

A WeeklyMenu with no days means "checked, nothing published"; None means the
menu could not be checked with any strategy this time.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Sequence, TypeVar

import httpx

from lunch_menus.core.config import Settings
from lunch_menus.extractors.base import LinkLocator, MenuExtractor
from lunch_menus.extractors.day_tabs import DayTabsExtractor
from lunch_menus.extractors.excel_table import ExcelTableExtractor
from lunch_menus.extractors.pdf_link import PdfLinkLocator
from lunch_menus.extractors.widget import WidgetLocator
from lunch_menus.fetch.remote_render import render_remote
from lunch_menus.fetch.scraper import fetch_html, fetch_reduced_text, reduced_text_from_html
from lunch_menus.llm.client import extract_via_model
from lunch_menus.schemas import WeeklyMenu

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BudgetExhausted(Exception):
    """No time left to start another stage."""


class Deadline:
    """Wall-clock budget shared by every stage of a run."""

    def __init__(self, seconds: float):
        self.expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        return self.expires_at - time.monotonic()

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


def default_extractors() -> list:
    return [DayTabsExtractor(), ExcelTableExtractor()]


def default_locators(settings: Settings) -> list:
    return [WidgetLocator(settings.WIDGET_DOMAINS), PdfLinkLocator()]


class MenuPipeline:
    """
    Runs the extraction strategies for a URL.

    Holds only read-only collaborators, so one instance can serve many
    concurrent `scrape` calls.
    """

    def __init__(
        self,
        settings: Settings,
        client: httpx.AsyncClient,
        extractors: Optional[Sequence[MenuExtractor]] = None,
        locators: Optional[Sequence[LinkLocator]] = None,
    ):
        settings.require_llm_api_key()
        self.settings = settings
        self.client = client
        self.extractors = list(extractors) if extractors is not None else default_extractors()
        self.locators = list(locators) if locators is not None else default_locators(settings)

    async def scrape(self, url: str, deadline: Optional[Deadline] = None) -> Optional[WeeklyMenu]:
        try:
            return await self._scrape(url, deadline)
        except BudgetExhausted:
            logger.warning("Time budget exhausted, giving up on %s", url)
            return None

    async def _stage(
        self,
        name: str,
        deadline: Optional[Deadline],
        run: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        """Run one network stage within the remaining budget; a timeout fails only this stage."""
        if deadline is None:
            return await run()
        if deadline.expired:
            raise BudgetExhausted(name)
        try:
            return await asyncio.wait_for(run(), timeout=deadline.remaining())
        except asyncio.TimeoutError:
            logger.warning("Stage %s ran out of time", name)
            return None

    def _usable(self, text: Optional[str], minimum: int) -> bool:
        return bool(text) and len(text) > minimum

    async def _scrape(self, url: str, deadline: Optional[Deadline]) -> Optional[WeeklyMenu]:
        settings = self.settings
        html = await self._stage("html-fetch", deadline, lambda: fetch_html(self.client, url, settings))

        text: Optional[str] = None
        if html:
            logger.info("HTML received for %s: %d chars", url, len(html))
            for extractor in self.extractors:
                menu = extractor.attempt(html, url)
                if menu is not None and not menu.is_empty:
                    logger.info("Structured parse (%s) succeeded for %s: %d days", extractor.name, url, len(menu.days))
                    return menu

            for locator in self.locators:
                target = locator.attempt(html, url)
                if not target:
                    continue
                logger.info("Found %s for %s: %s", locator.name, url, target)
                rendered = await self._stage(
                    f"{locator.name}-render", deadline, lambda: render_remote(self.client, target, settings)
                )
                if self._usable(rendered, settings.MIN_REMOTE_TEXT_LENGTH):
                    return await self._extract(rendered, deadline)
                logger.info("Rendered %s gave too little text, trying next strategy", locator.name)

            text = reduced_text_from_html(html, settings)
        else:
            text = await self._stage(
                "reduced-text", deadline, lambda: fetch_reduced_text(self.client, url, settings)
            )

        if text is None:
            logger.info("Direct text insufficient for %s, using remote rendering", url)
            text = await self._stage("remote-render", deadline, lambda: render_remote(self.client, url, settings))
            if not self._usable(text, settings.MIN_REMOTE_TEXT_LENGTH):
                text = None

        if text is None:
            logger.error("Could not get page text for %s", url)
            return None

        return await self._extract(text, deadline)

    async def _extract(self, text: str, deadline: Optional[Deadline]) -> Optional[WeeklyMenu]:
        return await self._stage(
            "model-extract", deadline, lambda: extract_via_model(self.client, text, self.settings)
        )
