# tests/unit/domain/entities/test_risk_weights.py
from __future__ import annotations

import math

import pytest

from ledgerwatch.domain.entities.verdict import RiskWeights
from ledgerwatch.domain.exceptions.base import InvalidRequestError


def test_default_weights_sum_to_one() -> None:
    assert math.isclose(RiskWeights().total, 1.0)


def test_normalized_scales_arbitrary_weights() -> None:
    weights = RiskWeights(
        beneish=3, altman=3, piotroski=1, fraud_triangle=1, benford=1, red_flags=1
    ).normalized()
    assert math.isclose(weights.total, 1.0)
    assert math.isclose(weights.beneish, 0.3)


def test_all_zero_weights_fall_back_to_defaults() -> None:
    zero = RiskWeights(0, 0, 0, 0, 0, 0)
    assert zero.normalized() == RiskWeights().normalized()


@pytest.mark.parametrize("bad", [-0.1, math.nan, math.inf])
def test_negative_or_non_finite_weights_are_rejected(bad: float) -> None:
    with pytest.raises(InvalidRequestError):
        RiskWeights(beneish=bad)
