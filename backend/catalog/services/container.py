"""Explicit construction of the process-wide store, cache and services."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from catalog.cache.store import CacheStore
from catalog.core.config import Settings
from catalog.db.repository import ProductStore, SqlProductStore
from catalog.db.session import create_engine_from_settings, create_session_factory, create_tables
from catalog.services.product_mutations import ProductMutationService
from catalog.services.product_queries import ProductQueryService
from catalog.utils.redis_client import create_redis_client

logger = logging.getLogger(__name__)


@dataclass
class CatalogServices:
    store: ProductStore
    cache: CacheStore
    queries: ProductQueryService
    mutations: ProductMutationService
    engine: AsyncEngine | None = None

    async def close(self) -> None:
        await self.cache.close()
        if self.engine is not None:
            await self.engine.dispose()
            logger.info("Database engine disposed")


def assemble_services(
    store: ProductStore,
    cache: CacheStore,
    settings: Settings,
    engine: AsyncEngine | None = None,
) -> CatalogServices:
    """Wire services around an existing store and cache (used by tests too)."""
    return CatalogServices(
        store=store,
        cache=cache,
        queries=ProductQueryService(
            store,
            cache,
            list_ttl=settings.cache_list_ttl_seconds,
            item_ttl=settings.cache_item_ttl_seconds,
        ),
        mutations=ProductMutationService(store, cache),
        engine=engine,
    )


async def build_services(settings: Settings) -> CatalogServices:
    """Create the engine, Redis client and services for one process."""
    engine = create_engine_from_settings(settings)
    if settings.create_tables_on_startup:
        await create_tables(engine)
    store = SqlProductStore(create_session_factory(engine))

    redis_client = None
    if settings.cache_enabled:
        redis_client = create_redis_client(
            settings.redis_url,
            decode_responses=True,
            socket_connect_timeout=settings.cache_operation_timeout,
            socket_timeout=settings.cache_operation_timeout,
        )
    else:
        logger.info("Cache disabled by configuration")
    cache = CacheStore(
        redis_client,
        operation_timeout=settings.cache_operation_timeout,
        scan_timeout=settings.cache_scan_timeout,
        enabled=settings.cache_enabled,
    )
    return assemble_services(store, cache, settings, engine=engine)
