"""FastAPI application bootstrap with router wiring."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from catalog.api.errors import register_exception_handlers
from catalog.api.routers import health, products
from catalog.core.config import Settings, get_settings
from catalog.services.container import CatalogServices, build_services

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    services: CatalogServices | None = None,
) -> FastAPI:
    """Instantiate the FastAPI app and include top-level routers.

    When ``services`` is given (tests, embedding) the app uses it as-is and
    leaves its lifecycle to the caller. Otherwise the lifespan builds the
    database engine and Redis client at startup and closes them at shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if services is not None:
            yield
            return
        app.state.services = await build_services(settings)
        logger.info(f"{settings.app_name} started")
        try:
            yield
        finally:
            await app.state.services.close()
            logger.info(f"{settings.app_name} stopped")

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    if services is not None:
        app.state.services = services

    register_exception_handlers(app)
    app.include_router(health.router)
    app.include_router(products.router, prefix="/api/products", tags=["products"])

    return app


app = create_app()
