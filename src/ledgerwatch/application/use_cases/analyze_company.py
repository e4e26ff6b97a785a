# src/ledgerwatch/application/use_cases/analyze_company.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Use case: Analyze a company's filings for fraud and distress risk.

Purpose:
    Run the acquisition -> normalization -> scoring -> aggregation pipeline
    for one company and return the full analysis report.

Layer:
    application

Notes:
    - Reports are cached under a key covering every request parameter, so two
      requests that differ only in weights never share a result.
    - An aborted request (domain error, cancellation) never writes to the
      cache.
    - Scoring is pure and synchronous; only the gateway awaits.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, fields
from datetime import UTC, datetime

from ledgerwatch import __version__
from ledgerwatch.application.interfaces.cache_port import CachePort
from ledgerwatch.application.interfaces.filings_gateway import FilingsGateway
from ledgerwatch.application.schemas.dto.analysis import report_from_payload, report_to_payload
from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.entities.verdict import AnalysisReport, RiskWeights
from ledgerwatch.domain.enums.analysis import Cadence, DistressVariant
from ledgerwatch.domain.exceptions.base import InvalidRequestError
from ledgerwatch.domain.services.aggregator import RiskAggregator
from ledgerwatch.infrastructure.logging.logger import get_json_logger
from ledgerwatch.infrastructure.observability.metrics import get_analysis_verdicts_total

MIN_YEARS = 1
MAX_YEARS = 10


@dataclass(frozen=True)
class AnalyzeCompanyRequest:
    """Request parameters for a company analysis.

    Attributes:
        identifier: Ticker (``AAPL``, ``BRK.B``) or all-digit CIK.
        years: Year window, 1-10.
        market_value: Optional market value of equity for the distress model;
            ignored when not positive.
        weights: Optional composite-score weights; normalized before use.
        cadence: Annual (10-K) or quarterly (10-Q) records.
        distress_variant: Altman formula to apply.
    """

    identifier: str
    years: int = 5
    market_value: float = 0.0
    weights: RiskWeights | None = None
    cadence: Cadence = Cadence.ANNUAL
    distress_variant: DistressVariant = DistressVariant.MANUFACTURING


def result_cache_key(req: AnalyzeCompanyRequest, company: CompanyInfo) -> str:
    """Cache key for a computed report; includes every request parameter."""
    weights = req.weights or RiskWeights()
    weight_part = ",".join(f"{getattr(weights, f.name):.6g}" for f in fields(weights))
    return ":".join(
        (
            "analysis",
            company.cik,
            str(req.years),
            req.cadence.value,
            req.distress_variant.value,
            f"{req.market_value:.6g}",
            weight_part,
        )
    )


class AnalyzeCompanyUseCase:
    """Analyze one company end to end.

    Args:
        gateway: Filings gateway used to resolve the company and fetch records.
        cache: Optional result cache.
        result_ttl_s: TTL for cached reports; 0 disables result caching.
        default_weights: Weights applied when a request carries none.
        clock: UTC timestamp source for ``analyzed_at``.
        logger: Optional injected logger.
    """

    def __init__(
        self,
        gateway: FilingsGateway,
        *,
        cache: CachePort | None = None,
        result_ttl_s: int = 3600,
        default_weights: RiskWeights | None = None,
        clock: Callable[[], datetime] = lambda: datetime.now(tz=UTC),
        logger: logging.Logger | None = None,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._ttl = result_ttl_s
        self._default_weights = default_weights or RiskWeights()
        self._clock = clock
        self._log = logger or get_json_logger(__name__)

    async def execute(self, req: AnalyzeCompanyRequest) -> AnalysisReport:
        """Execute the analysis.

        Returns:
            The full report: company, records scored, model results, verdict.

        Raises:
            InvalidRequestError: On an empty identifier or out-of-range years.
            EdgarNotFound: If the identifier does not resolve.
            EdgarUpstreamUnavailable: On transport or parse failures.
            EdgarRateLimited: If the registry throttles the request.
            InsufficientDataError: If fewer than two valid records exist.
        """
        if not req.identifier.strip():
            raise InvalidRequestError("Company identifier must not be empty.")
        if not MIN_YEARS <= req.years <= MAX_YEARS:
            raise InvalidRequestError(
                f"years must be between {MIN_YEARS} and {MAX_YEARS}.",
                details={"years": req.years},
            )

        weights = req.weights or self._default_weights
        self._log.info(
            "analysis.start",
            extra={
                "identifier": req.identifier,
                "years": req.years,
                "cadence": req.cadence.value,
                "distress_variant": req.distress_variant.value,
            },
        )

        company = await self._gateway.resolve_company(req.identifier)
        key = result_cache_key(
            AnalyzeCompanyRequest(
                identifier=req.identifier,
                years=req.years,
                market_value=req.market_value,
                weights=weights,
                cadence=req.cadence,
                distress_variant=req.distress_variant,
            ),
            company,
        )
        if self._cache is not None:
            cached = await self._cache.get_json(key)
            if cached is not None:
                self._log.info("analysis.cache_hit", extra={"cik": company.cik})
                return report_from_payload(cached)

        company, records = await self._gateway.fetch_records(
            company.cik, years=req.years, cadence=req.cadence
        )

        aggregator = RiskAggregator(weights, logger=self._log)
        scored, models, verdict = aggregator.analyze(
            records,
            market_value=req.market_value,
            distress_variant=req.distress_variant,
        )

        report = AnalysisReport(
            company=company,
            records=tuple(scored),
            models=models,
            verdict=verdict,
            analyzed_at=self._clock(),
            version=__version__,
        )

        if self._cache is not None and self._ttl > 0:
            await self._cache.set_json(key, report_to_payload(report), ttl=self._ttl)

        get_analysis_verdicts_total().labels(risk_level=verdict.risk_level.value).inc()
        self._log.info(
            "analysis.success",
            extra={
                "cik": company.cik,
                "risk_level": verdict.risk_level.value,
                "composite_score": round(verdict.composite_score, 4),
                "filings_analyzed": verdict.filings_analyzed,
            },
        )
        return report
