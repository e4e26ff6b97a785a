# src/ledgerwatch/domain/services/scoring/benford.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Digit-distribution model (Benford's law).

Purpose:
    Pool reported magnitudes across every period and compare the observed
    leading-digit distribution against Benford's expected frequencies.

Layer:
    domain

Notes:
    - Values with magnitude below 1 (first digit) or 10 (second digit) carry
      no usable digit and are excluded from the sample.
    - Chi-square is computed on counts; MAD on frequencies.
    - A per-digit z-test at the 99% bound flags individual digits regardless
      of the aggregate MAD verdict.
    - An empty sample yields no result (``None``); callers treat the model as
      absent.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.entities.model_results import BenfordResult
from ledgerwatch.domain.services.numeric import clamp

FIRST_DIGITS: tuple[int, ...] = tuple(range(1, 10))
SECOND_DIGITS: tuple[int, ...] = tuple(range(0, 10))

FIRST_DIGIT_EXPECTED: tuple[float, ...] = tuple(math.log10(1 + 1 / d) for d in FIRST_DIGITS)
SECOND_DIGIT_EXPECTED: tuple[float, ...] = tuple(
    sum(math.log10(1 + 1 / (10 * k + d)) for k in range(1, 10)) for d in SECOND_DIGITS
)


@dataclass(frozen=True)
class BenfordConfig:
    """Conformity bands (MAD), suspicion threshold and z-test bound."""

    digits: tuple[int, ...]
    expected: tuple[float, ...]
    min_magnitude: float
    close_at_or_below: float
    acceptable_at_or_below: float
    suspicious_at_or_above: float
    mad_risk_scale: float
    z_critical: float = 2.576


FIRST_DIGIT_CONFIG = BenfordConfig(
    digits=FIRST_DIGITS,
    expected=FIRST_DIGIT_EXPECTED,
    min_magnitude=1.0,
    close_at_or_below=0.006,
    acceptable_at_or_below=0.012,
    suspicious_at_or_above=0.015,
    mad_risk_scale=0.02,
)

SECOND_DIGIT_CONFIG = BenfordConfig(
    digits=SECOND_DIGITS,
    expected=SECOND_DIGIT_EXPECTED,
    min_magnitude=10.0,
    close_at_or_below=0.008,
    acceptable_at_or_below=0.010,
    suspicious_at_or_above=0.012,
    mad_risk_scale=0.016,
)


def first_digit(value: float) -> int | None:
    """Return the leading significant digit of ``|value|``, or None below 1."""
    if not math.isfinite(value):
        return None
    v = abs(value)
    if v < 1.0:
        return None
    while v >= 10.0:
        v /= 10.0
    return int(v)


def second_digit(value: float) -> int | None:
    """Return the second significant digit of ``|value|``, or None below 10."""
    if not math.isfinite(value):
        return None
    v = abs(value)
    if v < 10.0:
        return None
    while v >= 100.0:
        v /= 10.0
    return int(v) % 10


def pooled_values(records: Iterable[FinancialRecord]) -> list[float]:
    """Collect the magnitudes tested for digit conformity from every record."""
    values: list[float] = []
    for r in records:
        values.extend(
            (
                r.income_statement.revenue,
                r.income_statement.net_income,
                r.balance_sheet.total_assets,
                r.balance_sheet.total_liabilities,
                r.cash_flow.operating_cash_flow,
            )
        )
    return values


def conformity_for(mad: float, config: BenfordConfig = FIRST_DIGIT_CONFIG) -> str:
    if mad <= config.close_at_or_below:
        return "Close Conformity"
    if mad <= config.acceptable_at_or_below:
        return "Acceptable Conformity"
    if mad < config.suspicious_at_or_above:
        return "Marginally Acceptable"
    return "Nonconformity"


def _analyze(digits: Sequence[int], config: BenfordConfig) -> BenfordResult | None:
    n = len(digits)
    if n == 0:
        return None

    counts = {d: 0 for d in config.digits}
    for d in digits:
        counts[d] += 1
    actual = tuple(counts[d] / n for d in config.digits)

    chi_square = 0.0
    mad_sum = 0.0
    suspicious: list[int] = []
    for d, p, p_hat in zip(config.digits, config.expected, actual):
        expected_count = p * n
        chi_square += (counts[d] - expected_count) ** 2 / expected_count
        mad_sum += abs(p_hat - p)
        se = math.sqrt(p * (1 - p) / n)
        if se > 0 and abs(p_hat - p) / se > config.z_critical:
            suspicious.append(d)
    mad = mad_sum / len(config.digits)

    return BenfordResult(
        sample_size=n,
        expected_distribution=config.expected,
        actual_distribution=actual,
        chi_square=chi_square,
        mad=mad,
        deviation_percent=mad * 100.0,
        risk_score=clamp(mad / config.mad_risk_scale),
        is_suspicious=mad >= config.suspicious_at_or_above,
        zone=conformity_for(mad, config),
        suspicious_digits=tuple(suspicious),
        anomalies=tuple(f"Digit {d} significantly deviates from expected" for d in suspicious),
    )


def calculate(
    values: Iterable[float],
    config: BenfordConfig = FIRST_DIGIT_CONFIG,
) -> BenfordResult | None:
    """First-digit test over ``values``; None when no value has a leading digit."""
    digits = [d for d in (first_digit(v) for v in values) if d is not None]
    return _analyze(digits, config)


def calculate_second_digit(
    values: Iterable[float],
    config: BenfordConfig = SECOND_DIGIT_CONFIG,
) -> BenfordResult | None:
    """Second-digit test over ``values``; None when no value reaches 10."""
    digits = [d for d in (second_digit(v) for v in values) if d is not None]
    return _analyze(digits, config)


def calculate_for_records(
    records: Iterable[FinancialRecord],
    config: BenfordConfig = FIRST_DIGIT_CONFIG,
) -> BenfordResult | None:
    return calculate(pooled_values(records), config)
