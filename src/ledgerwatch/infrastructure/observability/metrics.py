# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for the analysis pipeline.

Purpose:
    Provide Prometheus metrics for:
      * EDGAR request latency, HTTP status distribution and error reasons.
      * Rate-gate wait time.
      * Cache hits/misses by cache name.
      * Analysis verdicts by risk level.

Design:
    - Functions return singleton metric instances, created lazily on first use
      so importing this module never registers collectors.
    - Callers immediately ``.labels(...).observe/inc`` as usual.
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

_LATENCY_BUCKETS: Final[tuple[float, ...]] = (
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
    10.000,
    30.000,
)

_edgar_request_latency_seconds: Histogram | None = None
_edgar_http_status_total: Counter | None = None
_edgar_errors_total: Counter | None = None
_rate_gate_wait_seconds: Histogram | None = None
_cache_lookups_total: Counter | None = None
_analysis_verdicts_total: Counter | None = None


def get_edgar_request_latency_seconds() -> Histogram:
    """Return (and lazily create) the EDGAR request latency histogram."""
    global _edgar_request_latency_seconds
    if _edgar_request_latency_seconds is None:
        _edgar_request_latency_seconds = Histogram(
            "ledgerwatch_edgar_request_latency_seconds",
            "Latency of outbound EDGAR requests in seconds.",
            ["endpoint", "outcome"],
            buckets=_LATENCY_BUCKETS,
        )
    return _edgar_request_latency_seconds


def get_edgar_http_status_total() -> Counter:
    """Return (and lazily create) the EDGAR HTTP status counter."""
    global _edgar_http_status_total
    if _edgar_http_status_total is None:
        _edgar_http_status_total = Counter(
            "ledgerwatch_edgar_http_status_total",
            "EDGAR HTTP responses by status code.",
            ["endpoint", "status"],
        )
    return _edgar_http_status_total


def get_edgar_errors_total() -> Counter:
    """Return (and lazily create) the EDGAR error counter."""
    global _edgar_errors_total
    if _edgar_errors_total is None:
        _edgar_errors_total = Counter(
            "ledgerwatch_edgar_errors_total",
            "Total number of EDGAR client errors.",
            ["endpoint", "reason"],
        )
    return _edgar_errors_total


def get_rate_gate_wait_seconds() -> Histogram:
    """Return (and lazily create) the rate-gate wait histogram."""
    global _rate_gate_wait_seconds
    if _rate_gate_wait_seconds is None:
        _rate_gate_wait_seconds = Histogram(
            "ledgerwatch_rate_gate_wait_seconds",
            "Time spent waiting for the outbound request rate gate.",
            buckets=(0.0, 0.010, 0.025, 0.050, 0.100, 0.250, 0.500, 1.000),
        )
    return _rate_gate_wait_seconds


def get_cache_lookups_total() -> Counter:
    """Return (and lazily create) the cache lookup counter."""
    global _cache_lookups_total
    if _cache_lookups_total is None:
        _cache_lookups_total = Counter(
            "ledgerwatch_cache_lookups_total",
            "Cache lookups by cache name and result.",
            ["cache", "result"],
        )
    return _cache_lookups_total


def get_analysis_verdicts_total() -> Counter:
    """Return (and lazily create) the analysis verdict counter."""
    global _analysis_verdicts_total
    if _analysis_verdicts_total is None:
        _analysis_verdicts_total = Counter(
            "ledgerwatch_analysis_verdicts_total",
            "Completed analyses by resulting risk level.",
            ["risk_level"],
        )
    return _analysis_verdicts_total
