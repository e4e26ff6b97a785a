# src/ledgerwatch/application/interfaces/cache_port.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Port.

Synopsis:
    Minimal JSON cache behavior used by the EDGAR client and the analysis use
    case. Enables swapping Redis, in-memory, or other cache implementations.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol


class CachePort(Protocol):
    """JSON cache with TTL semantics.

    Implementations must store values as JSON-serializable mappings and apply
    TTL in seconds. A TTL ``<= 0`` means "do not cache". An entry past its TTL
    must never be returned.
    """

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Get a JSON-serializable value by key.

        Args:
            key: Cache key (already namespaced if applicable).

        Returns:
            Deserialized JSON mapping if present and unexpired, else ``None``.
        """

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        """Set a JSON-serializable value with TTL.

        Args:
            key: Cache key (already namespaced if applicable).
            value: JSON-serializable mapping.
            ttl: Time-to-live in seconds.
        """

    async def remove(self, key: str) -> None:
        """Remove ``key`` if present."""

    async def clear(self) -> None:
        """Remove every entry owned by this cache."""
