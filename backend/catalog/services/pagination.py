"""Pagination arithmetic for product listings."""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    page: int
    limit: int
    skip: int
    total_count: int
    total_pages: int
    has_next: bool
    has_prev: bool


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def compute_pagination(total_count: int, limit: int, page: int) -> PageWindow:
    """Derive page metadata without clamping.

    A page past the end is allowed; it simply selects no rows and keeps
    ``has_prev`` true.
    """
    total_pages = math.ceil(total_count / limit) if total_count else 0
    return PageWindow(
        page=page,
        limit=limit,
        skip=page_offset(page, limit),
        total_count=total_count,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )
