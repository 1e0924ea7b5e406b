"""Read-through product queries (Redis first, database on miss)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from catalog.schemas.product import Pagination, ProductQuery
from catalog.cache.keys import categories_key, collection_key, single_key
from catalog.cache.store import CacheStore
from catalog.core.errors import NotFoundError
from catalog.db.repository import ProductFilter, ProductSort, ProductStore
from catalog.services.pagination import compute_pagination, page_offset

logger = logging.getLogger(__name__)

DEFAULT_LIST_TTL = 300
DEFAULT_ITEM_TTL = 60


class ProductQueryService:
    """Serve listings, single products and categories through the cache.

    A cache hit is returned as stored: no database access and no
    pagination recomputation. Listings and categories use ``list_ttl``;
    single products use the shorter ``item_ttl`` so detail views catch up
    with edits sooner when an invalidation was missed.
    """

    def __init__(
        self,
        store: ProductStore,
        cache: CacheStore,
        *,
        list_ttl: int = DEFAULT_LIST_TTL,
        item_ttl: int = DEFAULT_ITEM_TTL,
    ) -> None:
        self._store = store
        self._cache = cache
        self._list_ttl = list_ttl
        self._item_ttl = item_ttl

    async def list_products(self, params: ProductQuery) -> dict[str, Any]:
        """Return the ``{products, pagination}`` envelope for a listing query."""
        key = collection_key(params)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        product_filter = ProductFilter.from_query(params)
        products, total_count, enabled_count, disabled_count = await asyncio.gather(
            self._store.find(
                product_filter,
                ProductSort.from_query(params),
                page_offset(params.page, params.limit),
                params.limit,
            ),
            # totalCount follows the filter; the enabled/disabled counts are catalog-wide
            self._store.count_documents(product_filter),
            self._store.count_documents(ProductFilter(is_enabled=True)),
            self._store.count_documents(ProductFilter(is_enabled=False)),
        )

        window = compute_pagination(total_count, params.limit, params.page)
        pagination = Pagination(
            current_page=window.page,
            total_pages=window.total_pages,
            total_count=window.total_count,
            total_enabled_count=enabled_count,
            total_disabled_count=disabled_count,
            has_next=window.has_next,
            has_prev=window.has_prev,
            limit=window.limit,
        )
        payload = {
            "products": [product.to_payload() for product in products],
            "pagination": pagination.model_dump(mode="json", by_alias=True),
        }
        await self._cache.set(key, payload, self._list_ttl)
        return payload

    async def get_product(self, product_id: str) -> dict[str, Any]:
        key = single_key(product_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        product = await self._store.find_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")

        payload = product.to_payload()
        await self._cache.set(key, payload, self._item_ttl)
        return payload

    async def list_categories(self) -> list[str]:
        key = categories_key()
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        categories = sorted(await self._store.distinct_values("category"))
        await self._cache.set(key, categories, self._list_ttl)
        return categories
