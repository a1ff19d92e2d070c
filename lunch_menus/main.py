import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lunch_menus.api.routes import router
from lunch_menus.core.config import get_settings
from lunch_menus.store.db import MenuStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Initialize resources on startup, cleanup on shutdown.
    """
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Initializing Lunch Menu Aggregator...")
    MenuStore(settings.DATABASE_PATH).init_db()
    logger.info("Database initialized at %s", settings.DATABASE_PATH)

    yield

    logger.info("Shutting down Lunch Menu Aggregator...")


app = FastAPI(
    title="Lunch Menu Aggregator",
    description="Collects weekly lunch menus of Czech restaurants from their websites",
    version="1.0.0",
    lifespan=lifespan,
)

app.include_router(router)


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "service": "Lunch Menu Aggregator",
        "version": "1.0.0",
        "endpoints": {
            "add_restaurant": "POST /restaurants",
            "delete_restaurant": "DELETE /restaurants/{id}",
            "menus": "GET /menus",
            "refresh": "GET /cron/refresh-menus",
            "health": "GET /health",
        },
    }
