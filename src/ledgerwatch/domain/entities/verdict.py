# src/ledgerwatch/domain/entities/verdict.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Aggregate verdict entities.

Purpose:
    Represent the combined output of the scoring pipeline: weights, red flags,
    trend summary, the composite verdict, and the full analysis report handed
    to presentation layers.

Layer:
    domain

Notes:
    Every entity here is constructed once per analysis request and immutable
    thereafter, so a report can be cached and served to many readers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from datetime import datetime

from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import (
    AltmanResult,
    BeneishResult,
    BenfordResult,
    FraudTriangleResult,
    PiotroskiResult,
)
from ledgerwatch.domain.enums.analysis import RiskLevel, TrendDirection
from ledgerwatch.domain.exceptions.base import InvalidRequestError


@dataclass(frozen=True)
class RiskWeights:
    """Relative weight of each composite-score component.

    Callers may pass any non-negative weights; consumers must call
    :meth:`normalized` before use. An all-zero set normalizes to the defaults.

    Raises:
        InvalidRequestError: If any weight is negative or not finite.
    """

    beneish: float = 0.30
    altman: float = 0.25
    piotroski: float = 0.15
    fraud_triangle: float = 0.15
    benford: float = 0.05
    red_flags: float = 0.10

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value) or value < 0.0:
                raise InvalidRequestError(
                    "Risk weights must be finite and non-negative.",
                    details={"weight": f.name, "value": value},
                )

    @property
    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def normalized(self) -> RiskWeights:
        """Return a copy whose six weights sum to 1.0."""
        total = self.total
        if total <= 0.0:
            return RiskWeights().normalized()
        return RiskWeights(**{f.name: getattr(self, f.name) / total for f in fields(self)})


@dataclass(frozen=True)
class RedFlag:
    """Discrete, rule-triggered risk indicator."""

    category: str
    title: str
    description: str
    severity: RiskLevel
    source: str
    confidence: float


@dataclass(frozen=True)
class TrendSummary:
    """Direction of key metrics between the oldest and most recent record."""

    revenue: TrendDirection = TrendDirection.STABLE
    net_income: TrendDirection = TrendDirection.STABLE
    operating_cash_flow: TrendDirection = TrendDirection.STABLE
    total_liabilities: TrendDirection = TrendDirection.STABLE
    net_margin: TrendDirection = TrendDirection.STABLE
    observations: tuple[str, ...] = ()


@dataclass(frozen=True)
class ModelResults:
    """Per-model outputs; ``None`` marks a model that produced no result."""

    beneish: BeneishResult | None = None
    altman: AltmanResult | None = None
    piotroski: PiotroskiResult | None = None
    fraud_triangle: FraudTriangleResult | None = None
    benford: BenfordResult | None = None


@dataclass(frozen=True)
class AggregateVerdict:
    """Single weighted risk verdict with supporting evidence.

    Attributes:
        composite_score: Weighted risk in [0, 1].
        risk_level: Five-level ordinal classification of ``composite_score``.
        red_flags: Triggered red flags in rule order.
        trends: Oldest-versus-latest trend summary.
        filings_analyzed: Number of valid records the verdict is based on.
        weights: Effective weights after exclusion and renormalization.
        risk_summary: One-line summary.
        recommendation: Recommended action for the risk level.
    """

    composite_score: float
    risk_level: RiskLevel
    red_flags: tuple[RedFlag, ...]
    trends: TrendSummary
    filings_analyzed: int
    weights: RiskWeights
    risk_summary: str = ""
    recommendation: str = ""


@dataclass(frozen=True)
class AnalysisReport:
    """Everything the pipeline exposes for one company analysis."""

    company: CompanyInfo
    records: tuple[FinancialRecord, ...]
    models: ModelResults
    verdict: AggregateVerdict
    analyzed_at: datetime
    version: str
