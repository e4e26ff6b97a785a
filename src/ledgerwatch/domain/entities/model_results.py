# src/ledgerwatch/domain/entities/model_results.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Scoring model result entities.

Purpose:
    One immutable result type per scoring model. Each carries its numeric
    sub-components, a bounded ``risk_score`` in [0, 1], and a categorical
    zone or interpretation string.

Layer:
    domain
"""

from __future__ import annotations

from dataclasses import dataclass

from ledgerwatch.domain.enums.analysis import DistressVariant, RiskLevel


@dataclass(frozen=True)
class BeneishResult:
    """Earnings-manipulation (Beneish M-Score) result."""

    m_score: float
    dsri: float
    gmi: float
    aqi: float
    sgi: float
    depi: float
    sgai: float
    lvgi: float
    tata: float
    probability: float
    risk_score: float
    likely_manipulator: bool
    zone: str
    flags: tuple[str, ...] = ()


@dataclass(frozen=True)
class AltmanResult:
    """Distress (Altman Z-Score) result."""

    z_score: float
    x1: float
    x2: float
    x3: float
    x4: float
    x5: float
    bankruptcy_probability: float
    risk_score: float
    zone: str
    variant: DistressVariant = DistressVariant.MANUFACTURING
    is_distressed: bool = False


@dataclass(frozen=True)
class PiotroskiResult:
    """Financial-strength (Piotroski F-Score) result."""

    f_score: int
    net_income_positive: bool
    cfo_positive: bool
    roa_increasing: bool
    cfo_exceeds_net_income: bool
    leverage_decreasing: bool
    current_ratio_increasing: bool
    no_dilution: bool
    gross_margin_increasing: bool
    asset_turnover_increasing: bool
    risk_score: float
    interpretation: str


@dataclass(frozen=True)
class FraudTriangleResult:
    """Behavioral-risk (fraud triangle) result."""

    pressure_score: float
    opportunity_score: float
    rationalization_score: float
    overall_risk: float
    risk_level: RiskLevel
    pressure_indicators: tuple[str, ...] = ()
    opportunity_indicators: tuple[str, ...] = ()
    rationalization_indicators: tuple[str, ...] = ()

    @property
    def risk_score(self) -> float:
        return self.overall_risk

    @property
    def zone(self) -> str:
        return self.risk_level.value

    @property
    def indicators(self) -> tuple[str, ...]:
        """Every triggered indicator, pressure first."""
        return (
            self.pressure_indicators
            + self.opportunity_indicators
            + self.rationalization_indicators
        )


@dataclass(frozen=True)
class BenfordResult:
    """Digit-distribution (Benford's law) result."""

    sample_size: int
    expected_distribution: tuple[float, ...]
    actual_distribution: tuple[float, ...]
    chi_square: float
    mad: float
    deviation_percent: float
    risk_score: float
    is_suspicious: bool
    zone: str
    suspicious_digits: tuple[int, ...] = ()
    anomalies: tuple[str, ...] = ()
