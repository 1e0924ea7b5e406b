"""Product writes followed by cache invalidation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from catalog.schemas.product import (
    MAX_BULK_UPLOAD,
    ProductCreate,
    ProductUpdate,
)
from catalog.cache.keys import COLLECTION_PREFIX, ITEM_PREFIX, single_key
from catalog.cache.store import CacheStore
from catalog.core.errors import NotFoundError, ValidationError
from catalog.db.repository import ProductFilter, ProductStore

logger = logging.getLogger(__name__)


class ProductMutationService:
    """Apply product writes, then drop the cache entries they affect.

    The write always completes before any invalidation runs. Invalidation
    problems are absorbed by the cache adapter, so a committed write is
    never reported as failed. Nothing is invalidated when the write itself
    fails or finds no product.
    """

    def __init__(self, store: ProductStore, cache: CacheStore) -> None:
        self._store = store
        self._cache = cache

    async def _invalidate_collections(self) -> None:
        await self._cache.delete_by_prefix(COLLECTION_PREFIX)

    async def _invalidate_product(self, product_id: str) -> None:
        await self._cache.delete(single_key(product_id))
        await self._invalidate_collections()

    async def create_product(self, payload: ProductCreate) -> dict[str, Any]:
        product = await self._store.insert(payload.to_record())
        logger.info(f"Created product {product.id} with SKU {product.sku}")
        await self._invalidate_collections()
        return product.to_payload()

    async def update_product(
        self, product_id: str, payload: ProductUpdate
    ) -> dict[str, Any]:
        product = await self._store.update_by_id(product_id, payload.to_fields())
        if product is None:
            raise NotFoundError("Product not found")
        logger.info(f"Updated product {product_id}")
        await self._invalidate_product(product_id)
        return product.to_payload()

    async def toggle_status(self, product_id: str, is_enabled: bool) -> dict[str, Any]:
        product = await self._store.update_by_id(product_id, {"is_enabled": is_enabled})
        if product is None:
            raise NotFoundError("Product not found")
        logger.info(
            f"{'Enabled' if is_enabled else 'Disabled'} product {product_id}"
        )
        await self._invalidate_product(product_id)
        return product.to_payload()

    async def delete_product(self, product_id: str) -> None:
        product = await self._store.delete_by_id(product_id)
        if product is None:
            raise NotFoundError("Product not found")
        logger.info(f"Deleted product {product_id}")
        await self._invalidate_product(product_id)

    async def bulk_upload(self, items: Sequence[ProductCreate]) -> dict[str, Any]:
        """Replace the live catalog with ``items``.

        Every existing product is disabled and the batch is inserted enabled.
        Rows the store rejects are skipped. Since every product changes,
        listings and single-product entries are each invalidated once, after
        the batch.
        """
        if not items:
            raise ValidationError("Bulk upload requires at least one product")
        if len(items) > MAX_BULK_UPLOAD:
            raise ValidationError(
                f"Bulk upload accepts at most {MAX_BULK_UPLOAD} products"
            )

        existing = await self._store.update_many(
            ProductFilter(), {"is_enabled": False}
        )
        # The disable above is committed; invalidate even if the insert fails
        try:
            records = [{**item.to_record(), "is_enabled": True} for item in items]
            created = await self._store.insert_many(records)
            disabled = await self._store.count_documents(
                ProductFilter(is_enabled=False)
            )
        finally:
            await self._cache.delete_by_prefix(ITEM_PREFIX)
            await self._invalidate_collections()

        skipped = len(records) - len(created)
        if skipped:
            logger.warning(f"Bulk upload skipped {skipped} of {len(records)} product(s)")
        logger.info(
            f"Bulk upload created {len(created)} product(s), "
            f"disabled {existing} existing product(s)"
        )
        return {
            "message": "Bulk upload completed successfully",
            "created": len(created),
            "disabled": disabled,
        }
