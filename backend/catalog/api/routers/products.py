"""CRUD + filtering endpoints for the product catalog."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query, status

from catalog.api.dependencies.services import get_mutation_service, get_query_service
from catalog.schemas.product import (
    BulkUploadRequest,
    BulkUploadResult,
    MessageResponse,
    ProductCreate,
    ProductListResponse,
    ProductQuery,
    ProductRead,
    ProductStatusUpdate,
    ProductUpdate,
    SortField,
    SortOrder,
)
from catalog.services.product_mutations import ProductMutationService
from catalog.services.product_queries import ProductQueryService

router = APIRouter()


def parse_tri_state(value: str | None) -> bool | None:
    """Map ``"true"``/``"false"`` to booleans; anything else means unset."""
    if value == "true":
        return True
    if value == "false":
        return False
    return None


@router.get(
    "",
    summary="List products with filters and pagination",
    response_model=ProductListResponse,
)
async def list_products(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    category: str | None = Query(None, description="Exact category match"),
    min_price: float | None = Query(None, ge=0, alias="minPrice"),
    max_price: float | None = Query(None, ge=0, alias="maxPrice"),
    search: str | None = Query(None, description="Text search over name and description"),
    is_enabled: str | None = Query(
        None, alias="isEnabled", description="'true' or 'false'; omit for all"
    ),
    sort_by: SortField = Query("createdAt", alias="sortBy"),
    sort_order: SortOrder = Query("desc", alias="sortOrder"),
    queries: ProductQueryService = Depends(get_query_service),
) -> dict[str, Any]:
    """Return one page of products plus pagination counters.

    Responses are cached per distinct filter combination and dropped on any
    product write.
    """
    params = ProductQuery(
        page=page,
        limit=limit,
        category=category,
        min_price=min_price,
        max_price=max_price,
        search=search,
        is_enabled=parse_tri_state(is_enabled),
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return await queries.list_products(params)


@router.get(
    "/categories",
    summary="List distinct product categories",
    response_model=list[str],
)
async def list_categories(
    queries: ProductQueryService = Depends(get_query_service),
) -> list[str]:
    return await queries.list_categories()


@router.get(
    "/{product_id}",
    summary="Fetch a single product",
    response_model=ProductRead,
)
async def get_product(
    product_id: str,
    queries: ProductQueryService = Depends(get_query_service),
) -> dict[str, Any]:
    return await queries.get_product(product_id)


@router.post(
    "",
    summary="Create a product",
    status_code=status.HTTP_201_CREATED,
    response_model=ProductRead,
)
async def create_product(
    payload: ProductCreate,
    mutations: ProductMutationService = Depends(get_mutation_service),
) -> dict[str, Any]:
    return await mutations.create_product(payload)


@router.post(
    "/bulk-upload",
    summary="Replace the live catalog with an uploaded batch",
    status_code=status.HTTP_201_CREATED,
    response_model=BulkUploadResult,
)
async def bulk_upload(
    payload: BulkUploadRequest,
    mutations: ProductMutationService = Depends(get_mutation_service),
) -> dict[str, Any]:
    """Disable every existing product, then insert the batch as enabled.

    Accepts 1-1000 products. Rows the database rejects are skipped and the
    response reports how many were created.
    """
    return await mutations.bulk_upload(payload.root)


@router.put(
    "/{product_id}",
    summary="Update existing product",
    response_model=ProductRead,
)
async def update_product(
    product_id: str,
    payload: ProductUpdate,
    mutations: ProductMutationService = Depends(get_mutation_service),
) -> dict[str, Any]:
    """Only updates provided fields (partial update)."""
    return await mutations.update_product(product_id, payload)


@router.patch(
    "/{product_id}/toggle-status",
    summary="Enable or disable a product",
    response_model=ProductRead,
)
async def toggle_product_status(
    product_id: str,
    payload: ProductStatusUpdate,
    mutations: ProductMutationService = Depends(get_mutation_service),
) -> dict[str, Any]:
    return await mutations.toggle_status(product_id, payload.is_enabled)


@router.delete(
    "/{product_id}",
    summary="Delete product (hard delete)",
    response_model=MessageResponse,
)
async def delete_product(
    product_id: str,
    mutations: ProductMutationService = Depends(get_mutation_service),
) -> MessageResponse:
    """Permanently remove a product; it cannot be restored."""
    await mutations.delete_product(product_id)
    return MessageResponse(message="Product deleted successfully")
