# src/ledgerwatch/domain/services/scoring/fraud_triangle.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Behavioral-risk model (fraud triangle).

Purpose:
    Score pressure, opportunity and rationalization over the whole ordered
    record history. Each leg is the fraction of a fixed checklist that is
    triggered; the overall score is a fixed weighted sum of the three legs.

Layer:
    domain

Notes:
    - Records are ordered most-recent-first. A period-over-period comparison
      pairs ``records[i]`` (newer) with ``records[i + 1]`` (older).
    - "Majority of periods" means strictly more than half of the
      period-over-period comparisons.
    - Single-period checks look only at the most recent record.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import FraudTriangleResult
from ledgerwatch.domain.enums.analysis import RiskLevel
from ledgerwatch.domain.services.numeric import clamp, safe_divide


@dataclass(frozen=True)
class FraudTriangleConfig:
    """Checklist thresholds, leg sizes and leg weights."""

    high_leverage_ratio: float = 0.6
    near_zero_margin_upper: float = 0.02
    boundary_margin_upper: float = 0.01
    min_boundary_periods: int = 2
    intangibles_ratio: float = 0.3
    working_capital_swing: float = 0.5
    depreciation_rate_swing: float = 0.3
    income_to_cash_multiple: float = 1.5

    pressure_items: int = 5
    opportunity_items: int = 3
    rationalization_items: int = 2

    pressure_weight: float = 0.35
    opportunity_weight: float = 0.35
    rationalization_weight: float = 0.30

    high_at_or_above: float = 0.7
    moderate_at_or_above: float = 0.4


DEFAULT_CONFIG = FraudTriangleConfig()


def _pairs(records: Sequence[FinancialRecord]) -> Iterator[tuple[FinancialRecord, FinancialRecord]]:
    """Yield (newer, older) adjacent pairs."""
    for i in range(len(records) - 1):
        yield records[i], records[i + 1]


def _majority_declining(
    records: Sequence[FinancialRecord],
    metric: Callable[[FinancialRecord], float],
) -> bool:
    comparisons = len(records) - 1
    if comparisons < 1:
        return False
    declines = sum(1 for newer, older in _pairs(records) if metric(newer) < metric(older))
    return declines * 2 > comparisons


def _margin_band_count(records: Sequence[FinancialRecord], upper: float) -> int:
    return sum(1 for r in records if 0.0 < r.income_statement.net_margin < upper)


def _relative_change(newer: float, older: float) -> float:
    return abs(newer - older) / older if older > 0 else 0.0


def _depreciation_rate(record: FinancialRecord) -> float:
    if record.balance_sheet.ppe <= 0:
        return 0.0
    return safe_divide(record.income_statement.depreciation, record.balance_sheet.ppe)


# ---------------------------------------------------------------------- #
# Checklists                                                              #
# ---------------------------------------------------------------------- #
def pressure_indicators(
    records: Sequence[FinancialRecord],
    config: FraudTriangleConfig = DEFAULT_CONFIG,
) -> tuple[str, ...]:
    if not records:
        return ()
    current = records[0]
    found: list[str] = []
    if _majority_declining(records, lambda r: r.income_statement.revenue):
        found.append("Declining revenue trend")
    if _majority_declining(records, lambda r: r.income_statement.gross_margin):
        found.append("Declining profit margins")
    if current.balance_sheet.debt_ratio > config.high_leverage_ratio:
        found.append("High leverage ratio")
    if current.cash_flow.operating_cash_flow < 0:
        found.append("Negative operating cash flow")
    if _margin_band_count(records, config.near_zero_margin_upper) >= config.min_boundary_periods:
        found.append("Pattern of barely meeting earnings targets")
    return tuple(found)


def opportunity_indicators(
    records: Sequence[FinancialRecord],
    config: FraudTriangleConfig = DEFAULT_CONFIG,
) -> tuple[str, ...]:
    if not records:
        return ()
    bs = records[0].balance_sheet
    found: list[str] = []

    soft_assets = safe_divide(bs.goodwill + bs.intangible_assets, bs.total_assets)
    if bs.total_assets > 0 and soft_assets > config.intangibles_ratio:
        found.append("Complex organizational structure (high intangibles)")

    if any(
        _relative_change(n.balance_sheet.accounts_receivable, o.balance_sheet.accounts_receivable)
        > config.working_capital_swing
        or _relative_change(n.balance_sheet.inventory, o.balance_sheet.inventory)
        > config.working_capital_swing
        for n, o in _pairs(records)
    ):
        found.append("Unusual changes in receivables or inventory")

    if any(
        _relative_change(_depreciation_rate(n), _depreciation_rate(o))
        > config.depreciation_rate_swing
        for n, o in _pairs(records)
    ):
        found.append("Significant changes in accounting estimates")
    return tuple(found)


def rationalization_indicators(
    records: Sequence[FinancialRecord],
    config: FraudTriangleConfig = DEFAULT_CONFIG,
) -> tuple[str, ...]:
    found: list[str] = []
    if any(
        r.income_statement.net_income > 0
        and r.cash_flow.operating_cash_flow > 0
        and r.income_statement.net_income
        > r.cash_flow.operating_cash_flow * config.income_to_cash_multiple
        for r in records
    ):
        found.append("Aggressive accounting (income >> cash flow)")
    if _margin_band_count(records, config.boundary_margin_upper) >= config.min_boundary_periods:
        found.append("Earnings consistently at boundary levels")
    return tuple(found)


def risk_level_for(overall: float, config: FraudTriangleConfig = DEFAULT_CONFIG) -> RiskLevel:
    if overall >= config.high_at_or_above:
        return RiskLevel.HIGH
    if overall >= config.moderate_at_or_above:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def calculate(
    records: Sequence[FinancialRecord],
    config: FraudTriangleConfig = DEFAULT_CONFIG,
) -> FraudTriangleResult:
    """Score the fraud triangle over ``records`` (most-recent-first)."""
    pressure = pressure_indicators(records, config)
    opportunity = opportunity_indicators(records, config)
    rationalization = rationalization_indicators(records, config)

    pressure_score = clamp(safe_divide(len(pressure), config.pressure_items))
    opportunity_score = clamp(safe_divide(len(opportunity), config.opportunity_items))
    rationalization_score = clamp(safe_divide(len(rationalization), config.rationalization_items))

    overall = clamp(
        config.pressure_weight * pressure_score
        + config.opportunity_weight * opportunity_score
        + config.rationalization_weight * rationalization_score
    )

    return FraudTriangleResult(
        pressure_score=pressure_score,
        opportunity_score=opportunity_score,
        rationalization_score=rationalization_score,
        overall_risk=overall,
        risk_level=risk_level_for(overall, config),
        pressure_indicators=pressure,
        opportunity_indicators=opportunity,
        rationalization_indicators=rationalization,
    )
