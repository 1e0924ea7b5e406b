"""Simple health and readiness endpoints."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from catalog.api.dependencies.services import get_services
from catalog.core.errors import StoreUnavailableError
from catalog.services.container import CatalogServices

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live", summary="Liveness probe")
async def live() -> dict[str, str]:
    """Indicates API process is running.

    Used by orchestration systems (Kubernetes, Docker, etc.) to determine
    if the container/process should be restarted.
    """
    return {"status": "ok", "service": "product-catalog-api"}


@router.get("/ready", summary="Readiness probe")
async def ready(services: CatalogServices = Depends(get_services)) -> dict[str, Any]:
    """Check readiness of dependencies (database, Redis cache).

    The database is required; an unreachable database answers 503. Redis is
    an optimization, so a cache outage only marks the service ``degraded``.
    """
    checks: dict[str, Any] = {
        "status": "ok",
        "service": "product-catalog-api",
        "checks": {},
    }

    try:
        await services.store.ping()
        checks["checks"]["database"] = {
            "status": "healthy",
            "message": "Database connection successful",
        }
    except StoreUnavailableError as e:
        logger.error(f"Database health check failed: {e}")
        checks["checks"]["database"] = {
            "status": "unhealthy",
            "message": f"Database connection failed: {e}",
        }
        checks["status"] = "unhealthy"
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=checks,
        ) from e

    if not services.cache.enabled:
        checks["checks"]["redis"] = {
            "status": "disabled",
            "message": "Cache disabled by configuration",
        }
    elif await services.cache.ping():
        checks["checks"]["redis"] = {
            "status": "healthy",
            "message": "Redis connection successful",
        }
    else:
        checks["checks"]["redis"] = {
            "status": "unhealthy",
            "message": "Redis unreachable; serving from the database only",
        }
        checks["status"] = "degraded"

    return checks
