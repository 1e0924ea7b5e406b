"""Shared test fixtures for the product catalog tests."""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from fnmatch import fnmatchcase
from typing import Any

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from catalog.schemas.product import ProductRead
from catalog.cache.store import CacheStore
from catalog.core.config import Settings
from catalog.db.repository import ProductFilter, ProductSort
from catalog.services.container import assemble_services


# ============================================================================
# Redis fakes
# ============================================================================

class FakeRedis:
    """In-memory stand-in for ``redis.asyncio.Redis``.

    Every command yields to the event loop so callers cannot rely on
    synchronous completion. ``calls`` records (command, key) pairs.
    """

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.calls: list[tuple[str, str]] = []
        self.closed = False

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        self.calls.append(("get", key))
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        await asyncio.sleep(0)
        self.calls.append(("set", key))
        self.data[key] = value
        self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        await asyncio.sleep(0)
        removed = 0
        for key in keys:
            self.calls.append(("delete", key))
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    async def scan_iter(self, match: str | None = None):
        self.calls.append(("scan", match or "*"))
        for key in list(self.data):
            await asyncio.sleep(0)
            if match is None or fnmatchcase(key, match):
                yield key

    async def ping(self) -> bool:
        await asyncio.sleep(0)
        return True

    async def aclose(self) -> None:
        self.closed = True

    def commands(self, name: str) -> list[str]:
        return [key for command, key in self.calls if command == name]


class BrokenRedis(FakeRedis):
    """Every command fails the way a dropped connection does."""

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(0)
        raise RedisConnectionError("Connection refused")

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        await asyncio.sleep(0)
        raise RedisConnectionError("Connection refused")

    async def delete(self, *keys: str) -> int:
        await asyncio.sleep(0)
        raise RedisConnectionError("Connection refused")

    async def scan_iter(self, match: str | None = None):
        await asyncio.sleep(0)
        raise RedisConnectionError("Connection refused")
        yield  # pragma: no cover

    async def ping(self) -> bool:
        await asyncio.sleep(0)
        raise RedisConnectionError("Connection refused")


class SlowRedis(FakeRedis):
    """Commands hang far longer than the adapter's timeout."""

    delay = 5.0

    async def get(self, key: str) -> str | None:
        await asyncio.sleep(self.delay)
        return await super().get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        await asyncio.sleep(self.delay)
        return await super().set(key, value, ex=ex)

    async def delete(self, *keys: str) -> int:
        await asyncio.sleep(self.delay)
        return await super().delete(*keys)


# ============================================================================
# Product store fake
# ============================================================================

SORT_ATTRIBUTES = {
    "name": "name",
    "price": "price",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class InMemoryProductStore:
    """ProductStore over a dict, counting every call in ``calls``."""

    def __init__(self) -> None:
        self.rows: dict[str, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.reject_skus: set[str] = set()
        self._clock = 0

    def _now(self) -> datetime:
        # Strictly increasing timestamps keep sort order deterministic
        self._clock += 1
        return datetime(2024, 1, 1, tzinfo=timezone.utc).replace(microsecond=self._clock)

    async def _tick(self, name: str) -> None:
        await asyncio.sleep(0)
        self.calls.append(name)

    def _matches(self, row: Mapping[str, Any], product_filter: ProductFilter) -> bool:
        if product_filter.category and row["category"] != product_filter.category:
            return False
        if product_filter.min_price is not None and row["price"] < product_filter.min_price:
            return False
        if product_filter.max_price is not None and row["price"] > product_filter.max_price:
            return False
        if product_filter.search:
            needle = product_filter.search.lower()
            if needle not in row["name"].lower() and needle not in row["description"].lower():
                return False
        if (
            product_filter.is_enabled is not None
            and row["is_enabled"] != product_filter.is_enabled
        ):
            return False
        return True

    def _new_row(self, record: Mapping[str, Any]) -> dict[str, Any]:
        now = self._now()
        row = {
            "id": str(uuid.uuid4()),
            "image_url": None,
            "is_enabled": True,
            "stock": 0,
            "tags": [],
            "created_at": now,
            "updated_at": now,
        }
        row.update(record)
        return row

    async def find(
        self, product_filter: ProductFilter, sort: ProductSort, skip: int, limit: int
    ) -> list[ProductRead]:
        await self._tick("find")
        rows = [row for row in self.rows.values() if self._matches(row, product_filter)]
        rows.sort(key=lambda row: row[SORT_ATTRIBUTES[sort.field]], reverse=sort.descending)
        return [ProductRead.model_validate(row) for row in rows[skip : skip + limit]]

    async def count_documents(self, product_filter: ProductFilter | None = None) -> int:
        await self._tick("count_documents")
        product_filter = product_filter or ProductFilter()
        return sum(1 for row in self.rows.values() if self._matches(row, product_filter))

    async def find_by_id(self, product_id: str) -> ProductRead | None:
        await self._tick("find_by_id")
        row = self.rows.get(product_id)
        return ProductRead.model_validate(row) if row else None

    async def insert(self, record: Mapping[str, Any]) -> ProductRead:
        await self._tick("insert")
        row = self._new_row(record)
        self.rows[row["id"]] = row
        return ProductRead.model_validate(row)

    async def insert_many(self, records: Sequence[Mapping[str, Any]]) -> list[ProductRead]:
        await self._tick("insert_many")
        created = []
        for record in records:
            if record["sku"] in self.reject_skus:
                continue
            row = self._new_row(record)
            self.rows[row["id"]] = row
            created.append(ProductRead.model_validate(row))
        return created

    async def update_by_id(
        self, product_id: str, fields: Mapping[str, Any]
    ) -> ProductRead | None:
        await self._tick("update_by_id")
        row = self.rows.get(product_id)
        if row is None:
            return None
        row.update(fields)
        row["updated_at"] = self._now()
        return ProductRead.model_validate(row)

    async def update_many(
        self, product_filter: ProductFilter, fields: Mapping[str, Any]
    ) -> int:
        await self._tick("update_many")
        updated = 0
        for row in self.rows.values():
            if self._matches(row, product_filter):
                row.update(fields)
                row["updated_at"] = self._now()
                updated += 1
        return updated

    async def delete_by_id(self, product_id: str) -> ProductRead | None:
        await self._tick("delete_by_id")
        row = self.rows.pop(product_id, None)
        return ProductRead.model_validate(row) if row else None

    async def distinct_values(self, field: str) -> set[str]:
        await self._tick("distinct_values")
        return {row[field] for row in self.rows.values()}

    async def ping(self) -> bool:
        await self._tick("ping")
        return True

    def count(self, name: str) -> int:
        return self.calls.count(name)


# ============================================================================
# Fixtures
# ============================================================================

def product_data(**overrides: Any) -> dict[str, Any]:
    """Valid camelCase product payload."""
    data = {
        "name": "Widget",
        "description": "A very useful widget",
        "price": 9.99,
        "category": "Tools",
        "sku": "W-1",
        "stock": 5,
    }
    data.update(overrides)
    return data


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        cache_list_ttl_seconds=300,
        cache_item_ttl_seconds=60,
    )


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return CacheStore(fake_redis, operation_timeout=0.5, scan_timeout=1.0)


@pytest.fixture
def store():
    return InMemoryProductStore()


@pytest.fixture
def services(store, cache, settings):
    return assemble_services(store, cache, settings)


@pytest.fixture
def make_product():
    """Factory for valid camelCase product payloads."""
    return product_data


@pytest.fixture
def broken_redis():
    return BrokenRedis()


@pytest.fixture
def slow_redis():
    return SlowRedis()
