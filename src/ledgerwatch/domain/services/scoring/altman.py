# src/ledgerwatch/domain/services/scoring/altman.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Distress model (Altman Z-Score and Z''-Score).

Purpose:
    Score a single period's bankruptcy distress from five balance-sheet and
    income-statement ratios.

Layer:
    domain

Notes:
    - The primary (manufacturing) variant uses the market value of equity for
      X4 when supplied, falling back to book equity.
    - The Z'' (non-manufacturing) variant always uses book equity, drops X5,
      and classifies with its own threshold pair. Both variants are described
      by frozen config tables; nothing is shared between calls.
    - The bankruptcy probability is a piecewise step function of Z; its
      breakpoints are reproduced exactly rather than smoothed.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import AltmanResult
from ledgerwatch.domain.enums.analysis import DistressVariant
from ledgerwatch.domain.services.numeric import clamp, safe_divide


@dataclass(frozen=True)
class AltmanConfig:
    """Coefficient and threshold table for one Altman variant."""

    variant: DistressVariant
    coef_x1: float
    coef_x2: float
    coef_x3: float
    coef_x4: float
    coef_x5: float
    safe_above: float
    distress_at_or_below: float
    use_market_value: bool


MANUFACTURING_CONFIG = AltmanConfig(
    variant=DistressVariant.MANUFACTURING,
    coef_x1=1.2,
    coef_x2=1.4,
    coef_x3=3.3,
    coef_x4=0.6,
    coef_x5=1.0,
    safe_above=2.99,
    distress_at_or_below=1.81,
    use_market_value=True,
)

NON_MANUFACTURING_CONFIG = AltmanConfig(
    variant=DistressVariant.NON_MANUFACTURING,
    coef_x1=6.56,
    coef_x2=3.26,
    coef_x3=6.72,
    coef_x4=1.05,
    coef_x5=0.0,
    safe_above=2.60,
    distress_at_or_below=1.10,
    use_market_value=False,
)

# (exclusive lower bound on Z, bankruptcy probability), highest bound first.
PROBABILITY_STEPS: tuple[tuple[float, float], ...] = (
    (3.0, 0.01),
    (2.7, 0.05),
    (2.4, 0.10),
    (2.0, 0.20),
    (1.8, 0.35),
    (1.5, 0.50),
    (1.2, 0.65),
    (1.0, 0.75),
    (0.5, 0.85),
)
PROBABILITY_FLOOR = 0.95


def config_for(variant: DistressVariant) -> AltmanConfig:
    """Return the config table for ``variant``."""
    if variant is DistressVariant.NON_MANUFACTURING:
        return NON_MANUFACTURING_CONFIG
    return MANUFACTURING_CONFIG


def score_to_probability(z_score: float) -> float:
    """Map a Z-Score to the empirical bankruptcy-probability step function."""
    for bound, probability in PROBABILITY_STEPS:
        if z_score > bound:
            return probability
    return PROBABILITY_FLOOR


def zone_for(z_score: float, config: AltmanConfig = MANUFACTURING_CONFIG) -> str:
    if z_score > config.safe_above:
        return "Safe"
    if z_score > config.distress_at_or_below:
        return "Gray"
    return "Distress"


def calculate(
    record: FinancialRecord,
    market_value: float = 0.0,
    config: AltmanConfig = MANUFACTURING_CONFIG,
) -> AltmanResult:
    """Compute the Z-Score of a single period.

    Args:
        record: Period to score.
        market_value: Market value of equity; ignored when not positive or
            when the variant uses book equity.
        config: Variant table; defaults to the manufacturing formula.

    Returns:
        AltmanResult carrying X1..X5, zone, and bankruptcy probability.
    """
    bs = record.balance_sheet
    inc = record.income_statement

    x1 = safe_divide(bs.working_capital, bs.total_assets)
    x2 = safe_divide(bs.retained_earnings, bs.total_assets)
    x3 = safe_divide(inc.operating_income, bs.total_assets)
    equity = market_value if config.use_market_value and market_value > 0 else bs.total_equity
    x4 = safe_divide(equity, bs.total_liabilities)
    x5 = safe_divide(inc.revenue, bs.total_assets) if config.coef_x5 else 0.0

    z_score = (
        config.coef_x1 * x1
        + config.coef_x2 * x2
        + config.coef_x3 * x3
        + config.coef_x4 * x4
        + config.coef_x5 * x5
    )
    zone = zone_for(z_score, config)
    probability = score_to_probability(z_score)

    return AltmanResult(
        z_score=z_score,
        x1=x1,
        x2=x2,
        x3=x3,
        x4=x4,
        x5=x5,
        bankruptcy_probability=probability,
        risk_score=clamp(probability),
        zone=zone,
        variant=config.variant,
        is_distressed=zone == "Distress",
    )


def calculate_non_manufacturing(record: FinancialRecord) -> AltmanResult:
    """Compute the Z''-Score (book equity, no sales-turnover term)."""
    return calculate(record, config=NON_MANUFACTURING_CONFIG)
