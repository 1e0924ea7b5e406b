"""Tagged error kinds shared by the store, cache and service layers."""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CACHE_UNAVAILABLE = "cache_unavailable"
    STORE_UNAVAILABLE = "store_unavailable"


class CatalogError(Exception):
    """Base error; ``kind`` decides how the HTTP boundary reports it."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Malformed or out-of-range input."""

    kind = ErrorKind.VALIDATION


class NotFoundError(CatalogError):
    """No record matches the requested id."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(CatalogError):
    """A uniqueness constraint rejected the write."""

    kind = ErrorKind.CONFLICT


class CacheUnavailableError(CatalogError):
    """Redis failed or timed out.

    Raised and caught inside the cache adapter only; callers see a miss.
    """

    kind = ErrorKind.CACHE_UNAVAILABLE


class StoreUnavailableError(CatalogError):
    """The product database failed; fatal to the request."""

    kind = ErrorKind.STORE_UNAVAILABLE
