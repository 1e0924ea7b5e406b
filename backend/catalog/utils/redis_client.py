"""Async Redis client construction for the catalog cache."""

from __future__ import annotations

import ssl
from typing import Any

from redis.asyncio import Redis

UPSTASH_HOST_SUFFIX = ".upstash.io"


def normalize_redis_url(url: str) -> str:
    """Upstash only accepts TLS connections, so force ``rediss://`` for its hosts."""
    if UPSTASH_HOST_SUFFIX in url and url.startswith("redis://"):
        return url.replace("redis://", "rediss://", 1)
    return url


def uses_tls(url: str) -> bool:
    return url.startswith("rediss://")


def create_redis_client(url: str, **kwargs: Any) -> Redis:
    """Build a lazily-connecting ``redis.asyncio`` client for ``url``.

    TLS URLs skip certificate verification, since hosted providers such as
    Upstash terminate TLS with certificates the default store rejects.
    Extra keyword arguments (timeouts, ``decode_responses``) pass through to
    ``Redis.from_url``.
    """
    url = normalize_redis_url(url)
    if uses_tls(url):
        kwargs.setdefault("ssl_cert_reqs", ssl.CERT_NONE)
    return Redis.from_url(url, **kwargs)
