# src/ledgerwatch/infrastructure/caching/memory_cache.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""In-memory JSON cache with TTL.

Synopsis:
    Process-local implementation of the CachePort Protocol. Default backend
    for single-process deployments and tests.

Design:
    * Values are stored as JSON text so callers never share mutable state with
      the cache; every read returns a fresh mapping.
    * A ``threading.Lock`` guards the table, so the cache is safe to share
      between event loops running in different threads.
    * Expired entries are invisible to readers and removed lazily on access,
      or eagerly by :meth:`purge_expired` (see :func:`run_periodic_sweep`).
    * The clock is injectable for deterministic TTL tests.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import asyncio
import json
import logging
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ledgerwatch.application.interfaces.cache_port import CachePort
from ledgerwatch.infrastructure.logging.logger import get_json_logger
from ledgerwatch.infrastructure.observability.metrics import get_cache_lookups_total

__all__ = ["InMemoryJsonCache", "run_periodic_sweep"]


@dataclass(frozen=True)
class _Entry:
    payload: str
    expires_at: float


class InMemoryJsonCache(CachePort):
    """Thread-safe, TTL-bounded JSON cache.

    Args:
        name: Label used for metrics and logs.
        clock: Monotonic time source in seconds.
        logger: Optional injected logger.
    """

    def __init__(
        self,
        *,
        name: str = "memory",
        clock: Callable[[], float] = time.monotonic,
        logger: logging.Logger | None = None,
    ) -> None:
        self._name = name
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()
        self._log = logger or get_json_logger(__name__)

    # ------------------------------------------------------------------ #
    # CachePort implementation
    # ------------------------------------------------------------------ #
    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.expires_at <= now:
                del self._entries[key]
                entry = None

        get_cache_lookups_total().labels(
            cache=self._name, result="hit" if entry is not None else "miss"
        ).inc()
        if entry is None:
            return None
        return json.loads(entry.payload)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        if ttl <= 0:
            return
        payload = json.dumps(value, separators=(",", ":"))
        entry = _Entry(payload=payload, expires_at=self._clock() + ttl)
        with self._lock:
            self._entries[key] = entry

    async def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #
    def size(self) -> int:
        """Number of stored entries, including expired ones not yet purged."""
        with self._lock:
            return len(self._entries)

    def purge_expired(self) -> int:
        """Drop every expired entry.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired = [k for k, e in self._entries.items() if e.expires_at <= now]
            for key in expired:
                del self._entries[key]
        if expired:
            self._log.debug(
                "cache.purge_expired",
                extra={"cache": self._name, "removed": len(expired)},
            )
        return len(expired)


async def run_periodic_sweep(cache: InMemoryJsonCache, *, interval_s: float) -> None:
    """Purge expired entries every ``interval_s`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval_s)
        cache.purge_expired()
