"""Map catalog error kinds and request validation failures to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.core.errors import CatalogError, ErrorKind

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.CACHE_UNAVAILABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.STORE_UNAVAILABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

DETAIL_BY_KIND: dict[ErrorKind, str] = {
    ErrorKind.CACHE_UNAVAILABLE: "Internal server error",
    ErrorKind.STORE_UNAVAILABLE: "Internal server error",
}


def status_for(kind: ErrorKind) -> int:
    try:
        return STATUS_BY_KIND[kind]
    except KeyError:
        raise RuntimeError(f"No HTTP status mapped for error kind {kind!r}") from None


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    status_code = status_for(exc.kind)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    detail = DETAIL_BY_KIND.get(exc.kind, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report schema violations as 400 with the first error first."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Validation error")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": f"{location}: {message}" if location else message,
            "errors": jsonable_errors(errors),
        },
    )


def jsonable_errors(errors: list[dict]) -> list[dict]:
    # ctx may hold exception instances that JSONResponse cannot encode
    return [
        {key: value for key, value in error.items() if key in ("loc", "msg", "type")}
        for error in errors
    ]


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
