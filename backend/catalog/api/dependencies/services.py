"""Service dependencies resolved from application state."""

from fastapi import Request

from catalog.services.container import CatalogServices
from catalog.services.product_mutations import ProductMutationService
from catalog.services.product_queries import ProductQueryService


def get_services(request: Request) -> CatalogServices:
    """FastAPI dependency returning the services built at startup."""
    return request.app.state.services


def get_query_service(request: Request) -> ProductQueryService:
    return get_services(request).queries


def get_mutation_service(request: Request) -> ProductMutationService:
    return get_services(request).mutations
