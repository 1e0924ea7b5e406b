"""Product store: the source of truth behind the cached read paths."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Protocol

from sqlalchemy import Select, func, or_, select, text, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.schemas.product import ProductQuery, ProductRead
from catalog.core.errors import ConflictError, StoreUnavailableError
from catalog.db.models.product import Product

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "name": Product.name,
    "price": Product.price,
    "createdAt": Product.created_at,
    "updatedAt": Product.updated_at,
}

DISTINCT_COLUMNS = {
    "category": Product.category,
    "sku": Product.sku,
}


@dataclass(frozen=True)
class ProductFilter:
    """Conjunction of optional product predicates; empty matches everything."""

    category: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    search: str | None = None
    is_enabled: bool | None = None

    @classmethod
    def from_query(cls, query: ProductQuery) -> ProductFilter:
        return cls(
            category=query.category or None,
            min_price=query.min_price,
            max_price=query.max_price,
            search=query.search or None,
            is_enabled=query.is_enabled,
        )


@dataclass(frozen=True)
class ProductSort:
    field: str = "createdAt"
    descending: bool = True

    @classmethod
    def from_query(cls, query: ProductQuery) -> ProductSort:
        return cls(field=query.sort_by, descending=query.sort_order == "desc")


class ProductStore(Protocol):
    """Async contract the query and mutation services rely on."""

    async def find(
        self, product_filter: ProductFilter, sort: ProductSort, skip: int, limit: int
    ) -> list[ProductRead]: ...

    async def count_documents(self, product_filter: ProductFilter | None = None) -> int: ...

    async def find_by_id(self, product_id: str) -> ProductRead | None: ...

    async def insert(self, record: Mapping[str, Any]) -> ProductRead: ...

    async def insert_many(self, records: Sequence[Mapping[str, Any]]) -> list[ProductRead]: ...

    async def update_by_id(
        self, product_id: str, fields: Mapping[str, Any]
    ) -> ProductRead | None: ...

    async def update_many(
        self, product_filter: ProductFilter, fields: Mapping[str, Any]
    ) -> int: ...

    async def delete_by_id(self, product_id: str) -> ProductRead | None: ...

    async def distinct_values(self, field: str) -> set[str]: ...

    async def ping(self) -> bool: ...


def apply_filter(stmt: Select, product_filter: ProductFilter) -> Select:
    """Add WHERE clauses for every set predicate (AND semantics)."""
    if product_filter.category:
        stmt = stmt.where(Product.category == product_filter.category)
    if product_filter.min_price is not None:
        stmt = stmt.where(Product.price >= product_filter.min_price)
    if product_filter.max_price is not None:
        stmt = stmt.where(Product.price <= product_filter.max_price)
    if product_filter.search:
        pattern = f"%{product_filter.search}%"
        stmt = stmt.where(
            or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )
    if product_filter.is_enabled is not None:
        stmt = stmt.where(Product.is_enabled == product_filter.is_enabled)
    return stmt


@asynccontextmanager
async def _store_errors(action: str) -> AsyncIterator[None]:
    """Translate SQLAlchemy failures into catalog error kinds."""
    try:
        yield
    except IntegrityError as e:
        logger.error(f"Integrity error {action}: {e}", exc_info=True)
        raise ConflictError(f"Conflict while {action}: record already exists") from e
    except SQLAlchemyError as e:
        logger.error(f"Database error {action}: {e}", exc_info=True)
        raise StoreUnavailableError(f"Database unavailable while {action}") from e


class SqlProductStore:
    """ProductStore backed by an async SQLAlchemy engine.

    Each call runs in its own short session, so calls may be awaited
    concurrently (e.g. the page query and its counts).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def find(
        self, product_filter: ProductFilter, sort: ProductSort, skip: int, limit: int
    ) -> list[ProductRead]:
        column = SORT_COLUMNS[sort.field]
        order = column.desc() if sort.descending else column.asc()
        stmt = (
            apply_filter(select(Product), product_filter)
            .order_by(order, Product.id)
            .offset(skip)
            .limit(limit)
        )
        async with _store_errors("listing products"):
            async with self._session_factory() as session:
                rows = (await session.scalars(stmt)).all()
                return [ProductRead.model_validate(row) for row in rows]

    async def count_documents(self, product_filter: ProductFilter | None = None) -> int:
        stmt = apply_filter(select(func.count(Product.id)), product_filter or ProductFilter())
        async with _store_errors("counting products"):
            async with self._session_factory() as session:
                return await session.scalar(stmt) or 0

    async def find_by_id(self, product_id: str) -> ProductRead | None:
        async with _store_errors(f"fetching product {product_id}"):
            async with self._session_factory() as session:
                product = await session.get(Product, product_id)
                return ProductRead.model_validate(product) if product else None

    async def insert(self, record: Mapping[str, Any]) -> ProductRead:
        async with _store_errors("creating product"):
            async with self._session_factory() as session, session.begin():
                product = Product(**record)
                session.add(product)
                await session.flush()
                return ProductRead.model_validate(product)

    async def insert_many(self, records: Sequence[Mapping[str, Any]]) -> list[ProductRead]:
        """Insert each record in its own savepoint; failed rows are skipped."""
        created: list[ProductRead] = []
        async with _store_errors("bulk inserting products"):
            async with self._session_factory() as session, session.begin():
                for index, record in enumerate(records):
                    product = Product(**record)
                    try:
                        async with session.begin_nested():
                            session.add(product)
                    except IntegrityError as e:
                        logger.warning(f"Skipping bulk row {index}: {e.orig}")
                        continue
                    created.append(ProductRead.model_validate(product))
        return created

    async def update_by_id(
        self, product_id: str, fields: Mapping[str, Any]
    ) -> ProductRead | None:
        async with _store_errors(f"updating product {product_id}"):
            async with self._session_factory() as session, session.begin():
                product = await session.get(Product, product_id)
                if product is None:
                    return None
                for name, value in fields.items():
                    setattr(product, name, value)
                await session.flush()
                return ProductRead.model_validate(product)

    async def update_many(
        self, product_filter: ProductFilter, fields: Mapping[str, Any]
    ) -> int:
        stmt = update(Product).values(**fields).execution_options(synchronize_session=False)
        if product_filter != ProductFilter():
            ids = apply_filter(select(Product.id), product_filter)
            stmt = stmt.where(Product.id.in_(ids.scalar_subquery()))
        async with _store_errors("bulk updating products"):
            async with self._session_factory() as session, session.begin():
                result = await session.execute(stmt)
                return result.rowcount or 0

    async def delete_by_id(self, product_id: str) -> ProductRead | None:
        async with _store_errors(f"deleting product {product_id}"):
            async with self._session_factory() as session, session.begin():
                product = await session.get(Product, product_id)
                if product is None:
                    return None
                snapshot = ProductRead.model_validate(product)
                await session.delete(product)
                return snapshot

    async def distinct_values(self, field: str) -> set[str]:
        try:
            column = DISTINCT_COLUMNS[field]
        except KeyError:
            raise ValueError(f"Unsupported distinct field: {field}") from None
        async with _store_errors(f"listing distinct {field} values"):
            async with self._session_factory() as session:
                values = (await session.scalars(select(column).distinct())).all()
                return set(values)

    async def ping(self) -> bool:
        async with _store_errors("checking database connectivity"):
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
                return True
