# tests/unit/infrastructure/external_apis/edgar/test_edgar_client_unit.py
from __future__ import annotations

import httpx
import pytest
import respx
from prometheus_client import REGISTRY

from ledgerwatch.domain.exceptions.edgar import (
    EdgarMappingError,
    EdgarNotFound,
    EdgarRateLimited,
    EdgarUpstreamUnavailable,
)
from ledgerwatch.infrastructure.caching.memory_cache import InMemoryJsonCache
from ledgerwatch.infrastructure.external_apis.edgar.client import EdgarClient, cache_key_for
from ledgerwatch.infrastructure.external_apis.edgar.rate_gate import RateGate
from ledgerwatch.infrastructure.external_apis.edgar.settings import EdgarSettings
from ledgerwatch.infrastructure.logging.logger import set_request_context

SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK0000320193.json"


def _client(http: httpx.AsyncClient, **kwargs) -> EdgarClient:
    return EdgarClient(settings=EdgarSettings(), http=http, gate=RateGate(0.0), **kwargs)


@pytest.mark.asyncio
@respx.mock
async def test_fetch_company_submissions_happy_path_and_headers_propagated() -> None:
    async with httpx.AsyncClient() as http:
        client = _client(http)
        set_request_context(request_id="req-123", trace_id="trace-abc")

        expected = {"cik": "0000320193", "filings": {"recent": {}}}
        route = respx.get(SUBMISSIONS_URL).mock(return_value=httpx.Response(200, json=expected))

        payload = await client.fetch_company_submissions("320193")

        assert route.called
        request = route.calls.last.request
        assert request.headers["X-Request-ID"] == "req-123"
        assert request.headers["x-trace-id"] == "trace-abc"
        assert request.headers["User-Agent"] == EdgarSettings().user_agent
        assert payload["cik"] == "0000320193"


@pytest.mark.asyncio
@respx.mock
async def test_edgar_client_status_mapping_and_json_validation() -> None:
    async with httpx.AsyncClient() as http:
        client = _client(http)
        base = "https://data.sec.gov/submissions"

        respx.get(f"{base}/CIK0000000001.json").mock(return_value=httpx.Response(404))
        with pytest.raises(EdgarNotFound):
            await client.fetch_company_submissions("1")

        respx.get(f"{base}/CIK0000000002.json").mock(return_value=httpx.Response(500))
        with pytest.raises(EdgarUpstreamUnavailable):
            await client.fetch_company_submissions("2")

        respx.get(f"{base}/CIK0000000003.json").mock(
            return_value=httpx.Response(429, headers={"Retry-After": "7"})
        )
        with pytest.raises(EdgarRateLimited) as exc_info:
            await client.fetch_company_submissions("3")
        assert exc_info.value.details["retry_after_s"] == 7.0

        respx.get(f"{base}/CIK0000000004.json").mock(
            return_value=httpx.Response(200, content=b"<html>not json</html>")
        )
        with pytest.raises(EdgarMappingError):
            await client.fetch_company_submissions("4")

        respx.get(f"{base}/CIK0000000005.json").mock(return_value=httpx.Response(200, json=[1, 2]))
        with pytest.raises(EdgarMappingError):
            await client.fetch_company_submissions("5")


@pytest.mark.asyncio
@respx.mock
async def test_transport_errors_map_to_upstream_unavailable() -> None:
    async with httpx.AsyncClient() as http:
        client = _client(http)
        respx.get(SUBMISSIONS_URL).mock(side_effect=httpx.ConnectTimeout("slow"))
        with pytest.raises(EdgarUpstreamUnavailable):
            await client.fetch_company_submissions("320193")

        respx.get(SUBMISSIONS_URL).mock(side_effect=httpx.ConnectError("refused"))
        with pytest.raises(EdgarUpstreamUnavailable):
            await client.fetch_company_submissions("320193")


@pytest.mark.asyncio
@respx.mock
async def test_cache_hit_skips_gate_and_network() -> None:
    cache = InMemoryJsonCache()
    async with httpx.AsyncClient() as http:
        client = _client(http, cache=cache)
        route = respx.get(SUBMISSIONS_URL).mock(
            return_value=httpx.Response(200, json={"cik": "0000320193"})
        )

        first = await client.fetch_company_submissions("320193")
        second = await client.fetch_company_submissions("0000320193")

        assert first == second == {"cik": "0000320193"}
        assert route.call_count == 1
        assert await cache.get_json(cache_key_for(SUBMISSIONS_URL)) == {"cik": "0000320193"}


@pytest.mark.asyncio
@respx.mock
async def test_failed_responses_are_not_cached() -> None:
    cache = InMemoryJsonCache()
    async with httpx.AsyncClient() as http:
        client = _client(http, cache=cache)
        route = respx.get(SUBMISSIONS_URL).mock(
            side_effect=[
                httpx.Response(503),
                httpx.Response(200, json={"cik": "0000320193"}),
            ]
        )

        with pytest.raises(EdgarUpstreamUnavailable):
            await client.fetch_company_submissions("320193")
        assert cache.size() == 0

        assert await client.fetch_company_submissions("320193") == {"cik": "0000320193"}
        assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_status_metric_is_recorded() -> None:
    labels = {"endpoint": "company_facts", "status": "200"}
    before = REGISTRY.get_sample_value("ledgerwatch_edgar_http_status_total", labels) or 0.0

    async with httpx.AsyncClient() as http:
        client = _client(http)
        respx.get("https://data.sec.gov/api/xbrl/companyfacts/CIK0000320193.json").mock(
            return_value=httpx.Response(200, json={"facts": {}})
        )
        await client.fetch_company_facts("320193")

    after = REGISTRY.get_sample_value("ledgerwatch_edgar_http_status_total", labels)
    assert after == before + 1


@pytest.mark.asyncio
@respx.mock
async def test_fetch_company_tickers_uses_configured_url() -> None:
    settings = EdgarSettings(tickers_url="https://example.test/tickers.json")
    async with httpx.AsyncClient() as http:
        client = EdgarClient(settings=settings, http=http, gate=RateGate(0.0))
        respx.get("https://example.test/tickers.json").mock(
            return_value=httpx.Response(
                200, json={"0": {"cik_str": 1, "ticker": "A", "title": "A"}}
            )
        )
        payload = await client.fetch_company_tickers()
    assert payload["0"]["ticker"] == "A"


@pytest.mark.asyncio
async def test_owned_http_client_is_closed() -> None:
    client = EdgarClient(settings=EdgarSettings(), gate=RateGate(0.0))
    await client.aclose()
    await client.aclose()
