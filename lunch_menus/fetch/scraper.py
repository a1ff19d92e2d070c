import logging
from typing import Optional

import httpx

from lunch_menus.core.config import Settings
from lunch_menus.fetch.html_analyzer import reduce_markup

logger = logging.getLogger(__name__)


def browser_headers(settings: Settings) -> dict:
    """Desktop-browser headers; caches are bypassed so every call sees the live page."""
    return {
        "User-Agent": settings.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
        "Accept-Language": "cs,en-US;q=0.7,en;q=0.3",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
    }


async def fetch_html(client: httpx.AsyncClient, url: str, settings: Settings) -> Optional[str]:
    """Fetch raw HTML from a URL. Any failure returns None."""
    try:
        response = await client.get(
            url,
            headers=browser_headers(settings),
            timeout=settings.REQUEST_TIMEOUT,
            follow_redirects=True,
        )
    except httpx.HTTPError as e:
        logger.warning("Direct fetch failed for %s: %s", url, e)
        return None

    if not response.is_success:
        logger.warning("Direct fetch of %s returned HTTP %s", url, response.status_code)
        return None
    return response.text


def reduced_text_from_html(html: str, settings: Settings) -> Optional[str]:
    """Reduced page text, or None when too little text is left to be a menu."""
    text = reduce_markup(html)
    if len(text) <= settings.MIN_DIRECT_TEXT_LENGTH:
        logger.info("Reduced text too short (%d chars)", len(text))
        return None
    return text[: settings.DIRECT_TEXT_MAX_CHARS]


async def fetch_reduced_text(client: httpx.AsyncClient, url: str, settings: Settings) -> Optional[str]:
    html = await fetch_html(client, url, settings)
    if not html:
        return None
    return reduced_text_from_html(html, settings)
