"""Fail-soft Redis adapter used by the product read and write paths."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError

from catalog.core.errors import CacheUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheStore:
    """JSON key-value cache whose failures never reach the caller.

    Every Redis error, timeout or undecodable value is logged and turned into
    a miss (reads) or a no-op (writes and deletes). The cache is an
    optimization only; the product store stays the source of truth.

    ``delete_by_prefix`` walks the keyspace with SCAN and deletes keys one at
    a time. It is not atomic: a read that repopulates a key the scan already
    passed survives until that entry's TTL expires. Its cost also grows with
    the number of keys under the prefix.
    """

    def __init__(
        self,
        client: Redis | None,
        *,
        operation_timeout: float = 0.25,
        scan_timeout: float = 2.0,
        enabled: bool = True,
    ) -> None:
        self._client = client
        self._operation_timeout = operation_timeout
        self._scan_timeout = scan_timeout
        self._enabled = enabled and client is not None

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def _run(
        self,
        operation: Callable[[], Awaitable[T]],
        timeout: float | None = None,
    ) -> T:
        timeout = timeout if timeout is not None else self._operation_timeout
        try:
            return await asyncio.wait_for(operation(), timeout)
        except asyncio.TimeoutError as exc:
            raise CacheUnavailableError(f"timed out after {timeout}s") from exc
        except (RedisError, OSError) as exc:
            raise CacheUnavailableError(str(exc) or exc.__class__.__name__) from exc

    async def get(self, key: str) -> Any | None:
        """Return the decoded value for ``key`` or None on miss/failure."""
        if not self._enabled:
            return None
        try:
            raw = await self._run(lambda: self._client.get(key))
        except CacheUnavailableError as e:
            logger.warning(f"Cache GET failed for {key}: {e}")
            return None
        if raw is None:
            logger.debug(f"Cache miss for {key}")
            return None
        try:
            value = json.loads(raw)
        except (TypeError, ValueError) as e:
            # Malformed entries are treated as absent and left to expire
            logger.warning(f"Discarding undecodable cache entry {key}: {e}")
            return None
        logger.debug(f"Cache hit for {key}")
        return value

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        if not self._enabled:
            return
        try:
            payload = json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError) as e:
            logger.warning(f"Cannot serialize cache value for {key}: {e}")
            return
        try:
            await self._run(lambda: self._client.set(key, payload, ex=ttl_seconds))
        except CacheUnavailableError as e:
            logger.warning(f"Cache SET failed for {key}: {e}")

    async def delete(self, key: str) -> None:
        if not self._enabled:
            return
        try:
            await self._run(lambda: self._client.delete(key))
        except CacheUnavailableError as e:
            logger.warning(f"Cache DEL failed for {key}: {e}")

    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every key starting with ``prefix``; returns the number removed."""
        if not self._enabled:
            return 0

        deleted = 0

        async def scan_and_delete() -> int:
            nonlocal deleted
            async for key in self._client.scan_iter(match=f"{prefix}*"):
                deleted += await self._client.delete(key)
            return deleted

        try:
            await self._run(scan_and_delete, timeout=self._scan_timeout)
        except CacheUnavailableError as e:
            logger.warning(
                f"Cache invalidation for prefix {prefix!r} stopped after "
                f"{deleted} key(s): {e}"
            )
            return deleted
        logger.debug(f"Invalidated {deleted} cache key(s) under {prefix!r}")
        return deleted

    async def ping(self) -> bool:
        if not self._enabled:
            return False
        try:
            return bool(await self._run(lambda: self._client.ping()))
        except CacheUnavailableError as e:
            logger.warning(f"Cache PING failed: {e}")
            return False

    async def close(self) -> None:
        if self._client is None:
            return
        try:
            await self._client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Error closing Redis client: {e}")
