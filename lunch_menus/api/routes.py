import logging
from typing import AsyncIterator, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from lunch_menus.core.config import ConfigurationError, Settings, get_settings
from lunch_menus.extractors.pdf_link import find_pdf_url
from lunch_menus.extractors.widget import find_widget_url
from lunch_menus.fetch.html_analyzer import reduce_markup
from lunch_menus.fetch.scraper import fetch_html
from lunch_menus.fetch.utils import week_start
from lunch_menus.schemas import AddRestaurantRequest, AddRestaurantResponse, RefreshStats
from lunch_menus.services.pipeline import default_extractors
from lunch_menus.services.refresh import add_restaurant, refresh_all
from lunch_menus.store.db import MenuStore

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(settings: Settings = Depends(get_settings)) -> MenuStore:
    store = MenuStore(settings.DATABASE_PATH)
    store.init_db()
    return store


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


def _check_url(url: str):
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required")
    if not url.startswith(("http://", "https://")):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL must start with http:// or https://",
        )


@router.post("/restaurants", response_model=AddRestaurantResponse)
async def create_restaurant(
    request: AddRestaurantRequest,
    settings: Settings = Depends(get_settings),
    store: MenuStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """
    Add a restaurant by the URL of its lunch-menu page.

    The menu is scraped right away and stored for the current week when found.
    """
    _check_url(request.url)
    try:
        result = await add_restaurant(store, settings, client, request.url)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return AddRestaurantResponse(**result)


@router.delete("/restaurants/{restaurant_id}")
async def remove_restaurant(restaurant_id: int, store: MenuStore = Depends(get_store)):
    if not store.delete_restaurant(restaurant_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Restaurant not found")
    return {"success": True}


@router.get("/menus")
async def list_menus(ids: Optional[str] = None, store: MenuStore = Depends(get_store)):
    """
    Menus stored for the current week.

    `ids` is an optional comma-separated list of restaurant ids to limit the result to.
    """
    restaurant_ids = None
    if ids is not None:
        try:
            restaurant_ids = [int(part) for part in ids.split(",") if part.strip()]
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="ids must be a comma-separated list of restaurant ids",
            )

    week = week_start()
    return {"success": True, "week_start": week, "menus": store.list_menus(week, restaurant_ids)}


@router.get("/cron/refresh-menus")
async def refresh_menus(
    settings: Settings = Depends(get_settings),
    store: MenuStore = Depends(get_store),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Re-scrape all restaurants; meant to be called by an external scheduler"""
    try:
        stats: RefreshStats = await refresh_all(store, settings, client)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    return {
        "success": True,
        "message": f"Refresh done: {stats.updated}/{stats.total} restaurants updated",
        "stats": stats,
    }


@router.post("/debug-scrape")
async def debug_scrape(
    request: AddRestaurantRequest,
    settings: Settings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    """Debug endpoint showing what the cheap pipeline stages see for a URL"""
    _check_url(request.url)
    html = await fetch_html(client, request.url, settings)
    if html is None:
        return {"url": request.url, "html_length": 0}

    reduced = reduce_markup(html)
    structured = None
    for extractor in default_extractors():
        menu = extractor.attempt(html, request.url)
        if menu is not None and not menu.is_empty:
            structured = {"extractor": extractor.name, "days": len(menu.days)}
            break

    return {
        "url": request.url,
        "html_length": len(html),
        "reduced_text_length": len(reduced),
        "reduced_text_preview": reduced[:1500] + "..." if len(reduced) > 1500 else reduced,
        "structured": structured,
        "widget_url": find_widget_url(html, request.url, settings.WIDGET_DOMAINS),
        "pdf_url": find_pdf_url(html, request.url),
    }


@router.get("/stats")
async def store_statistics(store: MenuStore = Depends(get_store)):
    return store.get_stats()


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "Lunch Menu Aggregator"}
