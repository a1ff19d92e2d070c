import asyncio
import logging
from typing import Any, Dict, List, Optional, Protocol

import httpx

from lunch_menus.core.config import Settings
from lunch_menus.fetch.utils import normalize_domain, week_start as current_week_start
from lunch_menus.schemas import RefreshStats, WeeklyMenu
from lunch_menus.services.pipeline import Deadline, MenuPipeline

logger = logging.getLogger(__name__)


class MenuRepository(Protocol):
    def upsert_restaurant(self, domain: str, url: str) -> int: ...

    def list_restaurants(self) -> List[Dict[str, Any]]: ...

    def delete_menus_for_week(self, restaurant_id: int, week_start: str): ...

    def insert_menu(self, restaurant_id: int, week_start: str, menu: WeeklyMenu): ...


async def add_restaurant(
    store: MenuRepository,
    settings: Settings,
    client: httpx.AsyncClient,
    url: str,
    week_start: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Register a restaurant by URL and store its menu for the week if one is found.

    1. Normalize the domain (the restaurant key)
    2. Upsert the restaurant
    3. Run the extraction pipeline
    4. Store the menu when it has at least one day
    """
    domain = normalize_domain(url)
    if not domain:
        raise ValueError(f"Unusable URL: {url!r}")

    pipeline = MenuPipeline(settings, client)
    restaurant_id = store.upsert_restaurant(domain, url)
    logger.info("Restaurant %s has id %s, scraping %s", domain, restaurant_id, url)

    menu = await pipeline.scrape(url, Deadline(settings.BATCH_TIMEOUT_SECONDS))
    menu_saved = False
    if menu is not None and not menu.is_empty:
        week = week_start or current_week_start()
        store.delete_menus_for_week(restaurant_id, week)
        store.insert_menu(restaurant_id, week, menu)
        menu_saved = True
        logger.info("Stored %d days of menu for %s", len(menu.days), domain)
    else:
        logger.warning("No menu stored for %s", domain)

    return {"success": True, "restaurant_id": restaurant_id, "menu_saved": menu_saved}


async def refresh_all(
    store: MenuRepository,
    settings: Settings,
    client: httpx.AsyncClient,
    week_start: Optional[str] = None,
) -> RefreshStats:
    """
    Re-scrape every stored restaurant and replace this week's menus.

    Restaurants run concurrently (bounded by BATCH_CONCURRENCY) under one
    shared time budget. A restaurant whose menu cannot be checked is skipped;
    an unexpected error is counted as failed. Neither stops the others.
    """
    pipeline = MenuPipeline(settings, client)
    week = week_start or current_week_start()
    restaurants = store.list_restaurants()
    stats = RefreshStats(total=len(restaurants))
    if not restaurants:
        logger.info("No restaurants to refresh")
        return stats

    logger.info("Refreshing %d restaurants for week %s", len(restaurants), week)
    deadline = Deadline(settings.BATCH_TIMEOUT_SECONDS)
    semaphore = asyncio.Semaphore(settings.BATCH_CONCURRENCY)

    async def refresh_one(restaurant: Dict[str, Any]) -> str:
        async with semaphore:
            name = restaurant.get("name") or restaurant["domain"]
            try:
                menu = await pipeline.scrape(restaurant["full_url"], deadline)
                if menu is None:
                    logger.warning("Menu not found for %s, skipping", name)
                    return "skipped"
                store.delete_menus_for_week(restaurant["id"], week)
                store.insert_menu(restaurant["id"], week, menu)
                logger.info("Menu updated for %s", name)
                return "updated"
            except Exception:
                logger.exception("Refresh failed for %s", name)
                return "failed"

    outcomes = await asyncio.gather(*(refresh_one(r) for r in restaurants))
    stats.updated = outcomes.count("updated")
    stats.skipped = outcomes.count("skipped")
    stats.failed = outcomes.count("failed")

    logger.info(
        "Refresh done: total %d, updated %d, failed %d, skipped %d",
        stats.total, stats.updated, stats.failed, stats.skipped,
    )
    return stats
