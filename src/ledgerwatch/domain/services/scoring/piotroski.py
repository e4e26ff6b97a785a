# src/ledgerwatch/domain/services/scoring/piotroski.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Financial-strength model (Piotroski F-Score).

Nine binary criteria over the current and prior period. Every ratio is
zero-safe, so a degenerate denominator reads as a ratio of 0.0.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import PiotroskiResult
from ledgerwatch.domain.services.numeric import clamp, safe_divide

MAX_SCORE = 9


@dataclass(frozen=True)
class PiotroskiConfig:
    strong_at_or_above: int = 7
    weak_at_or_below: int = 3


DEFAULT_CONFIG = PiotroskiConfig()


def _roa(record: FinancialRecord) -> float:
    return safe_divide(record.income_statement.net_income, record.balance_sheet.total_assets)


def _leverage(record: FinancialRecord) -> float:
    return safe_divide(record.balance_sheet.long_term_debt, record.balance_sheet.total_assets)


def _asset_turnover(record: FinancialRecord) -> float:
    return safe_divide(record.income_statement.revenue, record.balance_sheet.total_assets)


def interpretation_for(f_score: int, config: PiotroskiConfig = DEFAULT_CONFIG) -> str:
    if f_score >= config.strong_at_or_above:
        return "Strong"
    if f_score > config.weak_at_or_below:
        return "Moderate"
    return "Weak"


def score_to_risk(f_score: int) -> float:
    """Linear complement of the score fraction: 0 at 9, 1 at 0."""
    return clamp(1.0 - f_score / MAX_SCORE)


def calculate(
    current: FinancialRecord,
    prior: FinancialRecord,
    config: PiotroskiConfig = DEFAULT_CONFIG,
) -> PiotroskiResult:
    """Evaluate the nine criteria for ``current`` relative to ``prior``."""
    criteria = {
        # Profitability
        "net_income_positive": current.income_statement.net_income > 0,
        "cfo_positive": current.cash_flow.operating_cash_flow > 0,
        "roa_increasing": _roa(current) > _roa(prior),
        "cfo_exceeds_net_income": (
            current.cash_flow.operating_cash_flow > current.income_statement.net_income
        ),
        # Leverage and liquidity
        "leverage_decreasing": _leverage(current) < _leverage(prior),
        "current_ratio_increasing": (
            current.balance_sheet.current_ratio > prior.balance_sheet.current_ratio
        ),
        "no_dilution": (
            current.balance_sheet.shares_outstanding <= prior.balance_sheet.shares_outstanding
        ),
        # Operating efficiency
        "gross_margin_increasing": (
            current.income_statement.gross_margin > prior.income_statement.gross_margin
        ),
        "asset_turnover_increasing": _asset_turnover(current) > _asset_turnover(prior),
    }
    f_score = sum(1 for passed in criteria.values() if passed)

    return PiotroskiResult(
        f_score=f_score,
        risk_score=score_to_risk(f_score),
        interpretation=interpretation_for(f_score, config),
        **criteria,
    )
