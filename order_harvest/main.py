"""
FastAPI Main Application
Order range fetching and TSV export
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator
import logging

from fastapi import FastAPI

from order_harvest.api.routes import health, orders
from order_harvest.config import settings
from order_harvest.core.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Runs hold no state between requests, so there is nothing to open here.
    """
    logger.info("=" * 60)
    logger.info("Starting Order Harvest")
    logger.info(f"   Order service: {settings.ORDER_API_BASE_URL}")
    logger.info(
        f"   Concurrency: {settings.FETCH_CONCURRENCY} | Retries: {settings.FETCH_RETRIES} "
        f"| Initial backoff: {settings.FETCH_INITIAL_DELAY_MS}ms"
    )
    logger.info(f"   Docs: http://{settings.API_HOST}:{settings.API_PORT}/docs")
    logger.info("=" * 60)

    yield

    logger.info("Order Harvest shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Order Harvest",
        description="Fetch, filter and total orders for a delivery date range",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(health.router, tags=["Health"])
    app.include_router(orders.router, prefix="/api/v1/orders", tags=["Orders"])
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("order_harvest.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
