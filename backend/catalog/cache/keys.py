"""Cache key derivation for product reads.

Key layout::

    products:list:<token>   one entry per distinct listing query
    products:categories     sorted category names
    product:<id>            single product lookups

Everything a mutation can affect in bulk lives under ``COLLECTION_PREFIX``
so one prefix delete drops it. Single products sit outside that namespace
and are deleted by exact key.
"""

from __future__ import annotations

import base64
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

COLLECTION_PREFIX = "products:"
LIST_PREFIX = f"{COLLECTION_PREFIX}list:"
ITEM_PREFIX = "product:"


def _normalize_value(value: Any) -> Any:
    # 10 and 10.0 describe the same bound
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def normalize_params(params: BaseModel | Mapping[str, Any]) -> dict[str, Any]:
    """Drop unset/empty values so only meaningful filters reach the key.

    Strings are kept verbatim: a value the store would match differently must
    produce a different key.
    """
    if isinstance(params, BaseModel):
        raw = params.model_dump(by_alias=True)
    else:
        raw = dict(params)

    normalized: dict[str, Any] = {}
    for name, value in raw.items():
        if value is None:
            continue
        value = _normalize_value(value)
        if value == "":
            continue
        normalized[name] = value
    return normalized


def collection_key(params: BaseModel | Mapping[str, Any]) -> str:
    """Deterministic key for a listing query; field order never matters."""
    canonical = json.dumps(
        normalize_params(params),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    token = base64.urlsafe_b64encode(canonical.encode("utf-8")).decode("ascii")
    return f"{LIST_PREFIX}{token}"


def single_key(product_id: str) -> str:
    return f"{ITEM_PREFIX}{product_id}"


def categories_key() -> str:
    return f"{COLLECTION_PREFIX}categories"
