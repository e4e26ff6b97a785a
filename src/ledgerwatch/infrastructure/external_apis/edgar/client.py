# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""EDGAR Transport Client: paced, cached, instrumented, async.

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with an overall per-request timeout.
* A process-wide rate gate acquired before every outbound call.
* A raw-response cache keyed ``GET:<url>``; a hit skips the gate and the
  network entirely.
* Deterministic mapping to EDGAR domain errors.
* Prometheus metrics and structured logs.

Endpoints:
    * fetch_company_tickers: www.sec.gov/files/company_tickers.json
    * fetch_company_submissions: submissions/CIK##########.json
    * fetch_company_facts: api/xbrl/companyfacts/CIK##########.json

Notes:
    * No retries are performed here; retry policy belongs to the caller.
    * Caller-facing exceptions are always EDGAR domain exceptions; httpx types
      never cross the boundary.
    * Failed responses are never cached.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any, Final

import httpx

from ledgerwatch.application.interfaces.cache_port import CachePort
from ledgerwatch.domain.entities.company import normalize_cik
from ledgerwatch.domain.exceptions.edgar import (
    EdgarError,
    EdgarMappingError,
    EdgarNotFound,
    EdgarRateLimited,
    EdgarUpstreamUnavailable,
)
from ledgerwatch.infrastructure.caching.json_cache import read_through_json
from ledgerwatch.infrastructure.external_apis.edgar.rate_gate import RateGate, get_rate_gate
from ledgerwatch.infrastructure.external_apis.edgar.settings import EdgarSettings
from ledgerwatch.infrastructure.logging.logger import (
    get_json_logger,
    get_request_id,
    get_trace_id,
)
from ledgerwatch.infrastructure.observability.metrics import (
    get_edgar_errors_total,
    get_edgar_http_status_total,
    get_edgar_request_latency_seconds,
)

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "Accept-Encoding": "gzip, deflate",
}


def cache_key_for(url: str) -> str:
    """Cache key for a raw GET response."""
    return f"GET:{url}"


class EdgarClient:
    """Paced, cached transport client for SEC EDGAR."""

    def __init__(
        self,
        settings: EdgarSettings,
        *,
        http: httpx.AsyncClient | None = None,
        cache: CachePort | None = None,
        gate: RateGate | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Provider settings loaded from environment or DI.
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
            cache: Optional raw-response cache. Without one every call hits
                the network.
            gate: Rate gate; defaults to the process-wide shared gate.
            logger: Optional injected logger.
        """
        self._settings = settings
        self._base_url = str(settings.base_url).rstrip("/")
        self._timeout = float(settings.timeout_s)
        self._cache = cache
        self._cache_ttl = int(settings.cache_ttl_s)
        self._gate = gate or get_rate_gate(settings.min_interval_s)
        self._log = logger or get_json_logger(__name__)

        self._owns_http = http is None
        self._client = http or httpx.AsyncClient(timeout=self._timeout)
        self._client.headers["User-Agent"] = settings.user_agent
        for key, value in _DEFAULT_HEADERS.items():
            self._client.headers.setdefault(key, value)

        self._latency = get_edgar_request_latency_seconds()
        self._errors = get_edgar_errors_total()
        self._status_total = get_edgar_http_status_total()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_http and not self._client.is_closed:
            await self._client.aclose()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    async def fetch_company_tickers(self) -> Mapping[str, Any]:
        """Fetch the ticker-to-CIK lookup table."""
        return await self._get_json(self._settings.tickers_url, endpoint="company_tickers")

    async def fetch_company_submissions(self, cik: str) -> Mapping[str, Any]:
        """Fetch the company submissions JSON document for a given CIK."""
        url = f"{self._base_url}/submissions/CIK{normalize_cik(cik)}.json"
        return await self._get_json(url, endpoint="company_submissions")

    async def fetch_company_facts(self, cik: str) -> Mapping[str, Any]:
        """Fetch the structured XBRL company facts document for a given CIK."""
        url = f"{self._base_url}/api/xbrl/companyfacts/CIK{normalize_cik(cik)}.json"
        return await self._get_json(url, endpoint="company_facts")

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    async def _get_json(self, url: str, *, endpoint: str) -> Mapping[str, Any]:
        """Return a parsed JSON object for ``url``, from cache when possible.

        Raises:
            EdgarNotFound: On 404.
            EdgarRateLimited: On 429.
            EdgarUpstreamUnavailable: On other 4xx/5xx or transport failures.
            EdgarMappingError: On non-JSON or non-object payloads.
        """
        if self._cache is None:
            return await self._fetch(url, endpoint=endpoint)

        payload = await read_through_json(
            self._cache,
            cache_key_for(url),
            ttl=self._cache_ttl,
            loader=lambda: self._fetch(url, endpoint=endpoint),
        )
        return payload if payload is not None else {}

    async def _fetch(self, url: str, *, endpoint: str) -> Mapping[str, Any]:
        """Gate, request and map one response; never touches the cache."""
        waited = await self._gate.acquire()
        self._log.debug(
            "edgar.fetch.start",
            extra={"endpoint": endpoint, "url": url, "gate_wait_s": round(waited, 4)},
        )

        start = time.perf_counter()
        outcome = "success"
        try:
            response = await self._perform_request(url=url, endpoint=endpoint)
            payload = self._handle_response(response=response, url=url, endpoint=endpoint)
        except EdgarError as exc:
            outcome = "error"
            self._errors.labels(endpoint=endpoint, reason=type(exc).__name__).inc()
            self._log.warning(
                "edgar.fetch.error",
                extra={"endpoint": endpoint, "url": url, "error": exc.code, **exc.details},
            )
            raise
        finally:
            self._latency.labels(endpoint=endpoint, outcome=outcome).observe(
                time.perf_counter() - start
            )
        return payload

    async def _perform_request(self, *, url: str, endpoint: str) -> httpx.Response:
        """Execute a single HTTP GET and map transport errors."""
        headers: dict[str, str] = {}
        request_id = get_request_id()
        trace_id = get_trace_id()
        if request_id:
            headers["X-Request-ID"] = request_id
        if trace_id:
            headers["x-trace-id"] = trace_id

        try:
            return await self._client.get(url, headers=headers, timeout=self._timeout)
        except httpx.TimeoutException as exc:
            raise EdgarUpstreamUnavailable(
                "EDGAR request timed out.",
                details={"endpoint": endpoint, "url": url},
            ) from exc
        except httpx.RequestError as exc:
            raise EdgarUpstreamUnavailable(
                "EDGAR transport failure.",
                details={"endpoint": endpoint, "url": url, "error": str(exc)},
            ) from exc

    def _handle_response(
        self,
        *,
        response: httpx.Response,
        url: str,
        endpoint: str,
    ) -> Mapping[str, Any]:
        """Map an HTTP response into a JSON object or domain error."""
        status = response.status_code
        self._status_total.labels(endpoint=endpoint, status=str(status)).inc()

        if status == 404:
            raise EdgarNotFound(
                "EDGAR resource not found.",
                details={"endpoint": endpoint, "url": url, "status": 404},
            )
        if status == 429:
            raise EdgarRateLimited(
                "EDGAR rate limited.",
                details={
                    "endpoint": endpoint,
                    "url": url,
                    "status": 429,
                    "retry_after_s": self._parse_retry_after(response.headers.get("Retry-After")),
                },
            )
        if status >= 400:
            raise EdgarUpstreamUnavailable(
                "EDGAR upstream unavailable.",
                details={"endpoint": endpoint, "url": url, "status": status},
            )

        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise EdgarMappingError(
                "EDGAR response was not valid JSON.",
                details={"endpoint": endpoint, "url": url, "error": str(exc)},
            ) from exc

        if not isinstance(payload, Mapping):
            raise EdgarMappingError(
                "EDGAR JSON response must be an object.",
                details={"endpoint": endpoint, "url": url, "type": type(payload).__name__},
            )
        return payload

    @staticmethod
    def _parse_retry_after(val: str | None) -> float | None:
        """Parse HTTP Retry-After header (seconds form only)."""
        if not val:
            return None
        try:
            seconds = float(val)
        except (TypeError, ValueError):
            return None
        return max(0.0, seconds)
