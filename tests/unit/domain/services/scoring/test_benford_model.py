# tests/unit/domain/services/scoring/test_benford_model.py
from __future__ import annotations

import math

import pytest

from ledgerwatch.domain.services.scoring import benford


def _sample(expected: tuple[float, ...], digits: tuple[int, ...], base: int) -> list[float]:
    """Values whose digit histogram matches ``expected`` to three decimals."""
    values: list[float] = []
    for d, p in zip(digits, expected):
        values.extend([float(base + d)] * round(p * 1000))
    return values


def test_expected_distributions_sum_to_one() -> None:
    assert math.fsum(benford.FIRST_DIGIT_EXPECTED) == pytest.approx(1.0)
    assert math.fsum(benford.SECOND_DIGIT_EXPECTED) == pytest.approx(1.0)
    assert benford.FIRST_DIGIT_EXPECTED[0] == pytest.approx(0.30103, abs=1e-5)


@pytest.mark.parametrize(
    ("value", "first", "second"),
    [
        (1234.0, 1, 2),
        (-4500.0, 4, 5),
        (9.0, 9, None),
        (0.5, None, None),
        (0.0, None, None),
        (math.nan, None, None),
        (1_000_000.0, 1, 0),
    ],
)
def test_digit_extraction(value: float, first: int | None, second: int | None) -> None:
    assert benford.first_digit(value) == first
    assert benford.second_digit(value) == second


def test_conforming_sample_is_not_suspicious() -> None:
    values = _sample(benford.FIRST_DIGIT_EXPECTED, benford.FIRST_DIGITS, base=0)

    result = benford.calculate(values)

    assert result is not None
    assert result.mad < 0.001
    assert result.zone == "Close Conformity"
    assert not result.is_suspicious
    assert result.suspicious_digits == ()
    assert len(result.actual_distribution) == 9


def test_single_digit_sample_is_nonconforming() -> None:
    result = benford.calculate([9_000.0 + i for i in range(50)])

    assert result is not None
    assert result.is_suspicious
    assert result.zone == "Nonconformity"
    assert 9 in result.suspicious_digits
    assert "Digit 9 significantly deviates from expected" in result.anomalies
    assert result.risk_score == 1.0
    assert result.deviation_percent == pytest.approx(result.mad * 100)


def test_empty_sample_yields_no_result() -> None:
    assert benford.calculate([]) is None
    assert benford.calculate([0.0, 0.4, -0.9]) is None


@pytest.mark.parametrize(
    ("mad", "zone"),
    [
        (0.006, "Close Conformity"),
        (0.012, "Acceptable Conformity"),
        (0.0149, "Marginally Acceptable"),
        (0.015, "Nonconformity"),
    ],
)
def test_conformity_bands(mad: float, zone: str) -> None:
    assert benford.conformity_for(mad) == zone


def test_second_digit_conforming_sample() -> None:
    values = _sample(benford.SECOND_DIGIT_EXPECTED, benford.SECOND_DIGITS, base=10)

    result = benford.calculate_second_digit(values)

    assert result is not None
    assert len(result.actual_distribution) == 10
    assert result.mad < 0.001
    assert not result.is_suspicious


def test_pooled_values_cover_five_fields_per_record(make_record) -> None:
    records = [make_record(2024), make_record(2023)]
    assert len(benford.pooled_values(records)) == 10
    result = benford.calculate_for_records(records)
    assert result is not None
    assert result.sample_size == 10
