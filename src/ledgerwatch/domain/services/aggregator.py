# src/ledgerwatch/domain/services/aggregator.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Risk aggregator.

Purpose:
    Run the five scoring models over an ordered record sequence and combine
    their heterogeneous outputs into one weighted verdict with red flags, a
    trend summary, and a recommendation.

Layer:
    domain

Notes:
    - Invalid records are excluded before any model runs; fewer than two
      valid records is a hard failure (InsufficientDataError).
    - A model that produced no result is excluded from the weighted sum and
      the remaining weights are renormalized. It is never scored as zero.
    - Every float leaving the aggregator is finite. Non-finite values are
      replaced with 0.0 and reported through the injected logger.
    - Red-flag rules are independent; each fires at most once.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace

from ledgerwatch.domain.entities.financial_record import FinancialRecord, usable_records
from ledgerwatch.domain.entities.verdict import (
    AggregateVerdict,
    ModelResults,
    RedFlag,
    RiskWeights,
    TrendSummary,
)
from ledgerwatch.domain.enums.analysis import DistressVariant, RiskLevel, TrendDirection
from ledgerwatch.domain.exceptions.analysis import InsufficientDataError
from ledgerwatch.domain.services.numeric import clamp, safe_divide, sanitize_floats
from ledgerwatch.domain.services.scoring import altman, beneish, benford, fraud_triangle, piotroski

MIN_VALID_RECORDS = 2


@dataclass(frozen=True)
class AggregatorConfig:
    """Band thresholds and proxy constants for the composite score."""

    critical_at_or_above: float = 0.8
    high_at_or_above: float = 0.6
    elevated_at_or_above: float = 0.4
    moderate_at_or_above: float = 0.2
    benford_suspicious_risk: float = 0.8
    benford_conforming_risk: float = 0.2
    red_flag_saturation: int = 5
    weak_fundamentals_at_or_below: int = 3
    fraud_triangle_flag_above: float = 0.6
    trend_tolerance: float = 0.05


DEFAULT_CONFIG = AggregatorConfig()

RECOMMENDATIONS: dict[RiskLevel, str] = {
    RiskLevel.CRITICAL: (
        "CRITICAL RISK: Multiple fraud indicators detected. "
        "Recommend immediate detailed investigation."
    ),
    RiskLevel.HIGH: (
        "HIGH RISK: Significant fraud indicators present. "
        "Exercise extreme caution and conduct thorough due diligence."
    ),
    RiskLevel.ELEVATED: (
        "ELEVATED RISK: Some concerning indicators detected. "
        "Recommend additional scrutiny of financial statements."
    ),
    RiskLevel.MODERATE: (
        "MODERATE RISK: Minor concerns noted. Standard due diligence procedures recommended."
    ),
    RiskLevel.LOW: (
        "LOW RISK: No significant fraud indicators detected. "
        "Financial statements appear consistent with expected patterns."
    ),
}


def risk_level_for(score: float, config: AggregatorConfig = DEFAULT_CONFIG) -> RiskLevel:
    """Classify a composite score; bands partition [0, 1] at 0.2/0.4/0.6/0.8."""
    if score >= config.critical_at_or_above:
        return RiskLevel.CRITICAL
    if score >= config.high_at_or_above:
        return RiskLevel.HIGH
    if score >= config.elevated_at_or_above:
        return RiskLevel.ELEVATED
    if score >= config.moderate_at_or_above:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def recommendation_for(level: RiskLevel) -> str:
    return RECOMMENDATIONS[level]


def detect_red_flags(
    models: ModelResults,
    config: AggregatorConfig = DEFAULT_CONFIG,
) -> tuple[RedFlag, ...]:
    """Apply the fixed red-flag rule table to the model results."""
    flags: list[RedFlag] = []

    if models.beneish is not None and models.beneish.likely_manipulator:
        flags.append(
            RedFlag(
                category="EARNINGS_MANIPULATION",
                title="Beneish M-Score Above Threshold",
                description="M-Score indicates potential earnings manipulation",
                severity=RiskLevel.HIGH,
                source="Beneish Model",
                confidence=0.9,
            )
        )
    if models.altman is not None and models.altman.is_distressed:
        flags.append(
            RedFlag(
                category="BANKRUPTCY_RISK",
                title="Altman Z-Score in Distress Zone",
                description="High probability of bankruptcy within 2 years",
                severity=RiskLevel.HIGH,
                source="Altman Model",
                confidence=0.85,
            )
        )
    if (
        models.piotroski is not None
        and models.piotroski.f_score <= config.weak_fundamentals_at_or_below
    ):
        flags.append(
            RedFlag(
                category="WEAK_FUNDAMENTALS",
                title="Low Piotroski F-Score",
                description="Financial fundamentals indicate weakness",
                severity=RiskLevel.ELEVATED,
                source="Piotroski Model",
                confidence=0.7,
            )
        )
    if (
        models.fraud_triangle is not None
        and models.fraud_triangle.overall_risk > config.fraud_triangle_flag_above
    ):
        flags.append(
            RedFlag(
                category="FRAUD_TRIANGLE",
                title="High Fraud Triangle Risk",
                description="Multiple fraud risk factors detected",
                severity=RiskLevel.HIGH,
                source="Fraud Triangle Model",
                confidence=0.8,
            )
        )
    if models.benford is not None and models.benford.is_suspicious:
        flags.append(
            RedFlag(
                category="BENFORD_ANOMALY",
                title="Benford's Law Deviation",
                description="Unusual digit distribution in financial figures",
                severity=RiskLevel.ELEVATED,
                source="Benford Model",
                confidence=0.65,
            )
        )
    return tuple(flags)


def effective_weights(weights: RiskWeights, models: ModelResults) -> RiskWeights:
    """Zero the weight of every absent model, then renormalize.

    The red-flag term is always present.
    """
    base = weights.normalized()
    return replace(
        base,
        beneish=base.beneish if models.beneish is not None else 0.0,
        altman=base.altman if models.altman is not None else 0.0,
        piotroski=base.piotroski if models.piotroski is not None else 0.0,
        fraud_triangle=base.fraud_triangle if models.fraud_triangle is not None else 0.0,
        benford=base.benford if models.benford is not None else 0.0,
    ).normalized()


def composite_score(
    models: ModelResults,
    red_flag_count: int,
    weights: RiskWeights,
    config: AggregatorConfig = DEFAULT_CONFIG,
) -> float:
    """Weighted sum of the present components plus the red-flag density term.

    ``weights`` must already be the effective (renormalized) weights.
    """
    score = weights.red_flags * min(1.0, red_flag_count / config.red_flag_saturation)
    if models.beneish is not None:
        score += weights.beneish * models.beneish.risk_score
    if models.altman is not None:
        score += weights.altman * models.altman.risk_score
    if models.piotroski is not None:
        score += weights.piotroski * models.piotroski.risk_score
    if models.fraud_triangle is not None:
        score += weights.fraud_triangle * models.fraud_triangle.overall_risk
    if models.benford is not None:
        proxy = (
            config.benford_suspicious_risk
            if models.benford.is_suspicious
            else config.benford_conforming_risk
        )
        score += weights.benford * proxy
    return clamp(score)


# ---------------------------------------------------------------------- #
# Trends                                                                  #
# ---------------------------------------------------------------------- #
_TREND_METRICS: tuple[tuple[str, str, Callable[[FinancialRecord], float], bool], ...] = (
    ("revenue", "Revenue", lambda r: r.income_statement.revenue, True),
    ("net_income", "Net income", lambda r: r.income_statement.net_income, True),
    (
        "operating_cash_flow",
        "Operating cash flow",
        lambda r: r.cash_flow.operating_cash_flow,
        True,
    ),
    ("total_liabilities", "Total liabilities", lambda r: r.balance_sheet.total_liabilities, False),
    ("net_margin", "Net margin", lambda r: r.income_statement.net_margin, True),
)


def _direction(
    recent: float, oldest: float, higher_is_better: bool, tolerance: float
) -> TrendDirection:
    delta = recent - oldest
    if abs(delta) <= tolerance * abs(oldest):
        return TrendDirection.STABLE
    improved = delta > 0 if higher_is_better else delta < 0
    return TrendDirection.IMPROVING if improved else TrendDirection.DECLINING


def analyze_trends(
    records: Sequence[FinancialRecord],
    config: AggregatorConfig = DEFAULT_CONFIG,
) -> TrendSummary:
    """Compare the most recent record against the oldest one.

    Only the two endpoints are used; intermediate periods are ignored.
    """
    if len(records) < 2:
        return TrendSummary()
    recent, oldest = records[0], records[-1]

    directions: dict[str, TrendDirection] = {}
    observations: list[str] = []
    for key, label, metric, higher_is_better in _TREND_METRICS:
        new, old = metric(recent), metric(oldest)
        direction = _direction(new, old, higher_is_better, config.trend_tolerance)
        directions[key] = direction
        if direction is TrendDirection.STABLE:
            continue
        change = safe_divide(new - old, abs(old))
        verb = "increased" if new > old else "decreased"
        if change:
            observations.append(
                f"{label} {verb} {abs(change):.1%} between FY{oldest.filing.fiscal_year} "
                f"and FY{recent.filing.fiscal_year}"
            )
        else:
            observations.append(
                f"{label} {verb} from zero between FY{oldest.filing.fiscal_year} "
                f"and FY{recent.filing.fiscal_year}"
            )

    return TrendSummary(observations=tuple(observations), **directions)


# ---------------------------------------------------------------------- #
# Aggregator                                                              #
# ---------------------------------------------------------------------- #
class RiskAggregator:
    """Run every model over a record sequence and combine the results.

    Args:
        weights: Caller weights; normalized before use.
        config: Band thresholds and proxy constants.
        logger: Injected logger; defaults to the module logger.
    """

    def __init__(
        self,
        weights: RiskWeights | None = None,
        *,
        config: AggregatorConfig = DEFAULT_CONFIG,
        logger: logging.Logger | None = None,
    ) -> None:
        self._weights = weights or RiskWeights()
        self._config = config
        self._logger = logger or logging.getLogger(__name__)

    def select_records(self, records: Sequence[FinancialRecord]) -> list[FinancialRecord]:
        """Return the valid records, raising when fewer than two remain.

        Non-finite fields of the returned records are replaced with 0.0.

        Raises:
            InsufficientDataError: If fewer than two valid records are supplied.
        """
        valid = usable_records(records)
        excluded = len(records) - len(valid)
        if excluded:
            self._logger.info(
                "aggregator.records_excluded",
                extra={"excluded": excluded, "valid": len(valid)},
            )
        if len(valid) < MIN_VALID_RECORDS:
            raise InsufficientDataError(
                "Insufficient financial data for analysis.",
                details={"valid_records": len(valid), "required": MIN_VALID_RECORDS},
            )

        cleaned: list[FinancialRecord] = []
        degraded: list[str] = []
        for idx, record in enumerate(valid):
            scrubbed, bad = sanitize_floats(record, path=f"[{idx}].")
            cleaned.append(scrubbed)
            degraded.extend(bad)
        if degraded:
            self._logger.warning(
                "aggregator.non_finite_sanitized",
                extra={"fields": degraded},
            )
        return cleaned

    def run_models(
        self,
        records: Sequence[FinancialRecord],
        *,
        market_value: float = 0.0,
        distress_variant: DistressVariant = DistressVariant.MANUFACTURING,
    ) -> ModelResults:
        """Evaluate the five models over valid, most-recent-first records."""
        current, prior = records[0], records[1]
        models = ModelResults(
            beneish=beneish.calculate(current, prior),
            altman=altman.calculate(current, market_value, altman.config_for(distress_variant)),
            piotroski=piotroski.calculate(current, prior),
            fraud_triangle=fraud_triangle.calculate(records),
            benford=benford.calculate_for_records(records),
        )
        cleaned, degraded = sanitize_floats(models)
        if degraded:
            self._logger.warning(
                "aggregator.non_finite_sanitized",
                extra={"fields": degraded},
            )
        return cleaned

    def aggregate(
        self,
        records: Sequence[FinancialRecord],
        models: ModelResults,
    ) -> AggregateVerdict:
        """Combine model results into one verdict."""
        flags = detect_red_flags(models, self._config)
        weights = effective_weights(self._weights, models)
        score = composite_score(models, len(flags), weights, self._config)
        level = risk_level_for(score, self._config)

        verdict = AggregateVerdict(
            composite_score=score,
            risk_level=level,
            red_flags=flags,
            trends=analyze_trends(records, self._config),
            filings_analyzed=len(records),
            weights=weights,
            risk_summary=f"Analysis complete with {len(flags)} red flags detected.",
            recommendation=recommendation_for(level),
        )
        cleaned, degraded = sanitize_floats(verdict)
        if degraded:
            self._logger.warning(
                "aggregator.non_finite_sanitized",
                extra={"fields": degraded},
            )
        return cleaned

    def analyze(
        self,
        records: Sequence[FinancialRecord],
        *,
        market_value: float = 0.0,
        distress_variant: DistressVariant = DistressVariant.MANUFACTURING,
    ) -> tuple[list[FinancialRecord], ModelResults, AggregateVerdict]:
        """Select, score and aggregate in one pass.

        Returns:
            The records actually scored, the per-model results, and the verdict.

        Raises:
            InsufficientDataError: If fewer than two valid records are supplied.
        """
        valid = self.select_records(records)
        models = self.run_models(
            valid, market_value=market_value, distress_variant=distress_variant
        )
        verdict = self.aggregate(valid, models)
        self._logger.info(
            "aggregator.verdict",
            extra={
                "composite_score": round(verdict.composite_score, 4),
                "risk_level": verdict.risk_level.value,
                "red_flags": len(verdict.red_flags),
                "filings_analyzed": verdict.filings_analyzed,
            },
        )
        return valid, models, verdict
