# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Process-wide outbound request pacing for EDGAR.

Exactly one caller at a time checks and updates the last-call timestamp;
everybody else queues on the lock. The wait is bounded by the minimum
interval.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from ledgerwatch.infrastructure.observability.metrics import get_rate_gate_wait_seconds

__all__ = ["RateGate", "get_rate_gate", "reset_rate_gate"]


class RateGate:
    """Enforce a minimum interval between outbound calls.

    Args:
        min_interval_s: Minimum spacing between two acquisitions.
        clock: Monotonic time source in seconds.
        sleep: Awaitable sleep; injectable for tests.
    """

    def __init__(
        self,
        min_interval_s: float = 0.1,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._min_interval = max(0.0, float(min_interval_s))
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self._last_call: float | None = None

    @property
    def min_interval_s(self) -> float:
        return self._min_interval

    async def acquire(self) -> float:
        """Wait until the next call may go out.

        Returns:
            Seconds spent sleeping (0.0 when no wait was needed).
        """
        async with self._lock:
            waited = 0.0
            if self._last_call is not None:
                remaining = self._min_interval - (self._clock() - self._last_call)
                if remaining > 0:
                    await self._sleep(remaining)
                    waited = remaining
            self._last_call = self._clock()
        get_rate_gate_wait_seconds().observe(waited)
        return waited


_gate: RateGate | None = None


def get_rate_gate(min_interval_s: float = 0.1) -> RateGate:
    """Return the shared gate, creating it on first use."""
    global _gate
    if _gate is None:
        _gate = RateGate(min_interval_s)
    return _gate


def reset_rate_gate() -> None:
    """Drop the shared gate (tests and event-loop restarts)."""
    global _gate
    _gate = None
