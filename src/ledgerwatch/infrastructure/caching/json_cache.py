# src/ledgerwatch/infrastructure/caching/json_cache.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""JSON Cache (Redis-backed).

Synopsis:
    Thin adapter that implements the application CachePort Protocol on top of
    the shared Redis client provided by `infrastructure/caching/redis_client.py`,
    plus a generic read-through helper usable with any CachePort.

Design:
    * Uses the global Redis client via `get_redis_client()`.
    * Pure JSON (utf-8) serialization; no pickle.
    * TTL is delegated to Redis (``SET ... EX``), so expired entries are never
      returned.
    * Key policy:
        - Namespace prefix owns the project + version: `ledgerwatch:v1`
        - Callers provide the remaining segments, e.g.
          `edgar:GET:https://data.sec.gov/submissions/CIK0000320193.json`
          or `analysis:0000320193:5:annual:...`

Layer:
    infrastructure/caching

See Also:
    - ledgerwatch.infrastructure.caching.redis_client
    - ledgerwatch.application.interfaces.cache_port.CachePort
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from ledgerwatch.application.interfaces.cache_port import CachePort
from ledgerwatch.infrastructure.caching.redis_client import get_redis_client
from ledgerwatch.infrastructure.observability.metrics import get_cache_lookups_total

__all__ = [
    "RedisJsonCache",
    "TTL_EDGAR_RAW_S",
    "read_through_json",
]

# -----------------------------------------------------------------------------
# TTL bands (seconds)
# -----------------------------------------------------------------------------

#: Raw EDGAR submissions / company facts documents.
TTL_EDGAR_RAW_S = 3600


async def read_through_json(
    cache: CachePort,
    key: str,
    *,
    ttl: int,
    loader: Callable[[], Awaitable[Mapping[str, Any] | None]],
) -> Mapping[str, Any] | None:
    """Generic read-through helper.

    The loader's exceptions propagate and nothing is written, so an aborted
    request never leaves a partial value behind.

    Args:
        cache: CachePort implementation.
        key: Fully-qualified cache key.
        ttl: Time-to-live for new entries.
        loader: Async callable that fetches the value on a cache miss.

    Returns:
        The mapping returned from cache or loader, or ``None`` if loader
        returns ``None``.
    """
    cached = await cache.get_json(key)
    if cached is not None:
        return cached

    value = await loader()
    if value is not None and ttl > 0:
        await cache.set_json(key, value, ttl=ttl)
    return value


class RedisJsonCache(CachePort):
    """Redis-backed implementation of the CachePort Protocol.

    The namespace parameter configures the project + version prefix; the `key`
    arguments passed to methods are the remaining segments.
    """

    def __init__(self, *, namespace: str = "ledgerwatch:v1", name: str = "redis") -> None:
        """Initialize the cache adapter.

        Args:
            namespace: Prefix applied to all keys to avoid collisions.
            name: Label used for metrics.
        """
        self._ns = namespace
        self._name = name

    def _k(self, key: str) -> str:
        key = key.lstrip(":")
        return f"{self._ns}:{key}"

    # ------------------------------------------------------------------ #
    # CachePort implementation
    # ------------------------------------------------------------------ #
    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Get a JSON-serialized value by key.

        Args:
            key: Unqualified cache key.

        Returns:
            Deserialized mapping if present, else None.
        """
        raw = await get_redis_client().get(self._k(key))
        get_cache_lookups_total().labels(
            cache=self._name, result="hit" if raw is not None else "miss"
        ).inc()
        if raw is None:
            return None
        return json.loads(raw)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        """Set a JSON-serialized value with TTL.

        Args:
            key: Unqualified cache key.
            value: JSON-serializable mapping.
            ttl: Time-to-live in seconds.
        """
        if ttl <= 0:
            return
        await get_redis_client().set(
            self._k(key), json.dumps(value, separators=(",", ":")), ex=ttl
        )

    async def remove(self, key: str) -> None:
        await get_redis_client().delete(self._k(key))

    async def clear(self) -> None:
        """Delete every key under this cache's namespace."""
        redis = get_redis_client()
        keys = [k async for k in redis.scan_iter(match=f"{self._ns}:*")]
        if keys:
            await redis.delete(*keys)
