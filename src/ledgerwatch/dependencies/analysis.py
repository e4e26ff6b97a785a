# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the analysis pipeline.

Purpose:
    Build the shared cache, the EDGAR transport, the filings gateway and the
    use cases from settings, and tear them down together.

Layer:
    dependencies
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from ledgerwatch.adapters.gateways.edgar_gateway import HttpEdgarFilingsGateway
from ledgerwatch.application.interfaces.cache_port import CachePort
from ledgerwatch.application.use_cases.analyze_company import AnalyzeCompanyUseCase
from ledgerwatch.application.use_cases.search_companies import SearchCompaniesUseCase
from ledgerwatch.config.settings import CacheBackend, Settings, get_settings
from ledgerwatch.domain.entities.verdict import RiskWeights
from ledgerwatch.infrastructure.caching.json_cache import RedisJsonCache
from ledgerwatch.infrastructure.caching.memory_cache import InMemoryJsonCache, run_periodic_sweep
from ledgerwatch.infrastructure.caching.redis_client import close_redis, init_redis
from ledgerwatch.infrastructure.external_apis.edgar.client import EdgarClient
from ledgerwatch.infrastructure.external_apis.edgar.settings import (
    EdgarSettings,
    get_edgar_settings,
)


@dataclass(frozen=True)
class AnalysisServices:
    """Wired use cases sharing one cache and one transport."""

    analyze: AnalyzeCompanyUseCase
    search: SearchCompaniesUseCase
    cache: CachePort


def weights_from_settings(settings: Settings) -> RiskWeights:
    """Default composite-score weights configured via environment."""
    return RiskWeights(
        beneish=settings.weight_beneish,
        altman=settings.weight_altman,
        piotroski=settings.weight_piotroski,
        fraud_triangle=settings.weight_fraud_triangle,
        benford=settings.weight_benford,
        red_flags=settings.weight_red_flags,
    )


def build_cache(settings: Settings) -> CachePort:
    """Return the cache implementation selected by ``cache_backend``."""
    if settings.cache_backend is CacheBackend.REDIS:
        init_redis(settings)
        return RedisJsonCache(namespace=settings.cache_namespace)
    return InMemoryJsonCache()


@asynccontextmanager
async def analysis_services(
    settings: Settings | None = None,
    edgar_settings: EdgarSettings | None = None,
    *,
    cache: CachePort | None = None,
) -> AsyncIterator[AnalysisServices]:
    """Yield wired services; closes the transport and Redis on exit.

    An in-memory cache gets a background sweep every
    ``cache_sweep_interval_s`` seconds for the lifetime of the context.
    """
    settings = settings or get_settings()
    edgar_settings = edgar_settings or get_edgar_settings()
    cache = cache or build_cache(settings)

    client = EdgarClient(edgar_settings, cache=cache)
    gateway = HttpEdgarFilingsGateway(client, max_filings=edgar_settings.max_filings)
    sweeper: asyncio.Task[None] | None = None
    if isinstance(cache, InMemoryJsonCache):
        sweeper = asyncio.create_task(
            run_periodic_sweep(cache, interval_s=settings.cache_sweep_interval_s)
        )
    try:
        yield AnalysisServices(
            analyze=AnalyzeCompanyUseCase(
                gateway,
                cache=cache,
                result_ttl_s=settings.result_cache_ttl_s,
                default_weights=weights_from_settings(settings),
            ),
            search=SearchCompaniesUseCase(gateway),
            cache=cache,
        )
    finally:
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await client.aclose()
        if settings.cache_backend is CacheBackend.REDIS:
            await close_redis()
