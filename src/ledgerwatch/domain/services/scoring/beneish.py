# src/ledgerwatch/domain/services/scoring/beneish.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Earnings-manipulation model (Beneish M-Score).

Purpose:
    Compare the current period against the immediately preceding comparable
    period through eight ratio indices and combine them with the published
    eight-variable coefficients into an M-Score.

Layer:
    domain

Notes:
    - Pure: no logging, no I/O, inputs are never mutated.
    - Ratio indices fall back to 1.0 ("no change") on a degenerate
      denominator; the accruals index falls back to 0.0.
    - Per-index flags are independent of the combined score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import BeneishResult
from ledgerwatch.domain.services.numeric import clamp, safe_divide

RATIO_DEFAULT = 1.0
ACCRUALS_DEFAULT = 0.0


@dataclass(frozen=True)
class BeneishConfig:
    """Coefficients, zone thresholds, and per-index flag thresholds."""

    intercept: float = -4.84
    coef_dsri: float = 0.920
    coef_gmi: float = 0.528
    coef_aqi: float = 0.404
    coef_sgi: float = 0.892
    coef_depi: float = 0.115
    coef_sgai: float = -0.172
    coef_tata: float = 4.679
    coef_lvgi: float = -0.327

    # Zones, strictly-greater-than comparisons, highest first.
    high_risk_above: float = -1.78
    manipulation_threshold: float = -2.22
    moderate_risk_above: float = -2.50

    flag_dsri: float = 1.465
    flag_gmi: float = 1.193
    flag_aqi: float = 1.254
    flag_sgi: float = 1.607
    flag_depi: float = 1.077
    flag_sgai: float = 1.041
    flag_lvgi: float = 1.111
    flag_tata: float = 0.018


DEFAULT_CONFIG = BeneishConfig()


def dsri(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Days-sales-in-receivables index: receivables/sales, current over prior."""
    cur = safe_divide(
        current.balance_sheet.accounts_receivable, current.income_statement.revenue, RATIO_DEFAULT
    )
    pri = safe_divide(
        prior.balance_sheet.accounts_receivable, prior.income_statement.revenue, RATIO_DEFAULT
    )
    return safe_divide(cur, pri, RATIO_DEFAULT)


def gmi(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Gross-margin index: prior margin over current margin."""
    return safe_divide(
        prior.income_statement.gross_margin, current.income_statement.gross_margin, RATIO_DEFAULT
    )


def _asset_quality(record: FinancialRecord) -> float:
    bs = record.balance_sheet
    return 1.0 - safe_divide(bs.current_assets + bs.ppe, bs.total_assets, 0.0)


def aqi(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Asset-quality index: share of soft (non-current, non-PP&E) assets."""
    return safe_divide(_asset_quality(current), _asset_quality(prior), RATIO_DEFAULT)


def sgi(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Sales-growth index."""
    return safe_divide(
        current.income_statement.revenue, prior.income_statement.revenue, RATIO_DEFAULT
    )


def _depreciation_rate(record: FinancialRecord) -> float:
    dep = record.income_statement.depreciation
    return safe_divide(dep, dep + record.balance_sheet.ppe, RATIO_DEFAULT)


def depi(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Depreciation index: prior depreciation rate over current rate."""
    return safe_divide(_depreciation_rate(prior), _depreciation_rate(current), RATIO_DEFAULT)


def sgai(current: FinancialRecord, prior: FinancialRecord) -> float:
    """SG&A index: SG&A/sales, current over prior."""
    cur = safe_divide(
        current.income_statement.sga_expense, current.income_statement.revenue, RATIO_DEFAULT
    )
    pri = safe_divide(
        prior.income_statement.sga_expense, prior.income_statement.revenue, RATIO_DEFAULT
    )
    return safe_divide(cur, pri, RATIO_DEFAULT)


def lvgi(current: FinancialRecord, prior: FinancialRecord) -> float:
    """Leverage index: liabilities/assets, current over prior."""
    return safe_divide(
        current.balance_sheet.debt_ratio, prior.balance_sheet.debt_ratio, RATIO_DEFAULT
    )


def tata(current: FinancialRecord) -> float:
    """Total accruals (net income less operating cash flow) over total assets."""
    accruals = current.income_statement.net_income - current.cash_flow.operating_cash_flow
    return safe_divide(accruals, current.balance_sheet.total_assets, ACCRUALS_DEFAULT)


def zone_for(m_score: float, config: BeneishConfig = DEFAULT_CONFIG) -> str:
    """Classify an M-Score into one of four zones."""
    if m_score > config.high_risk_above:
        return "High Risk"
    if m_score > config.manipulation_threshold:
        return "Elevated Risk"
    if m_score > config.moderate_risk_above:
        return "Moderate Risk"
    return "Low Risk"


def score_to_probability(m_score: float, config: BeneishConfig = DEFAULT_CONFIG) -> float:
    """Logistic transform centred on the manipulation threshold."""
    exponent = -(m_score - config.manipulation_threshold)
    # math.exp overflows past ~709; the limit is already 0.
    if exponent > 700.0:
        return 0.0
    return 1.0 / (1.0 + math.exp(exponent))


def _flags(indices: dict[str, float], config: BeneishConfig) -> tuple[str, ...]:
    rules = (
        ("dsri", config.flag_dsri, "High Days Sales in Receivables - potential revenue manipulation"),
        ("gmi", config.flag_gmi, "Declining gross margins - pressure to manipulate"),
        ("aqi", config.flag_aqi, "Increasing non-current assets - potential capitalization abuse"),
        ("sgi", config.flag_sgi, "Rapid sales growth - higher manipulation risk"),
        ("depi", config.flag_depi, "Slowing depreciation - possible useful-life extension"),
        ("sgai", config.flag_sgai, "SG&A growing faster than sales - declining efficiency"),
        ("lvgi", config.flag_lvgi, "Increasing leverage - financial pressure"),
        ("tata", config.flag_tata, "High accruals relative to assets - earnings quality concern"),
    )
    return tuple(message for key, threshold, message in rules if indices[key] > threshold)


def calculate(
    current: FinancialRecord,
    prior: FinancialRecord,
    config: BeneishConfig = DEFAULT_CONFIG,
) -> BeneishResult:
    """Compute the M-Score for ``current`` relative to ``prior``.

    Args:
        current: Most recent period.
        prior: Immediately preceding period of the same cadence.
        config: Coefficient and threshold table.

    Returns:
        BeneishResult with all eight indices, zone, probability and flags.
    """
    indices = {
        "dsri": dsri(current, prior),
        "gmi": gmi(current, prior),
        "aqi": aqi(current, prior),
        "sgi": sgi(current, prior),
        "depi": depi(current, prior),
        "sgai": sgai(current, prior),
        "lvgi": lvgi(current, prior),
        "tata": tata(current),
    }

    m_score = (
        config.intercept
        + config.coef_dsri * indices["dsri"]
        + config.coef_gmi * indices["gmi"]
        + config.coef_aqi * indices["aqi"]
        + config.coef_sgi * indices["sgi"]
        + config.coef_depi * indices["depi"]
        + config.coef_sgai * indices["sgai"]
        + config.coef_tata * indices["tata"]
        + config.coef_lvgi * indices["lvgi"]
    )

    probability = score_to_probability(m_score, config)
    return BeneishResult(
        m_score=m_score,
        probability=probability,
        risk_score=clamp(probability),
        likely_manipulator=m_score > config.manipulation_threshold,
        zone=zone_for(m_score, config),
        flags=_flags(indices, config),
        **indices,
    )
