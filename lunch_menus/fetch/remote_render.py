import logging
from typing import Optional

import httpx

from lunch_menus.core.config import Settings

logger = logging.getLogger(__name__)


async def render_remote(client: httpx.AsyncClient, url: str, settings: Settings) -> Optional[str]:
    """
    Get the rendered text of a page from the remote URL-to-text service.

    Used for pages that block direct requests or need JavaScript, and for
    widget iframes and PDF menus. Returns None on any failure.
    """
    render_url = settings.REMOTE_RENDER_URL_TEMPLATE.format(url=url)
    headers = {
        "User-Agent": settings.REMOTE_RENDER_USER_AGENT,
        "X-Target-Selector": "body",
    }
    try:
        response = await client.get(render_url, headers=headers, timeout=settings.REQUEST_TIMEOUT)
    except httpx.HTTPError as e:
        logger.error("Remote render failed for %s: %s", url, e)
        return None

    if not response.is_success:
        logger.warning("Remote render of %s returned HTTP %s", url, response.status_code)
        return None

    text = response.text
    logger.info("Remote render returned %d chars for %s", len(text), url)
    return text[: settings.REMOTE_TEXT_MAX_CHARS]
