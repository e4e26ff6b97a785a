# tests/unit/domain/services/scoring/test_beneish_model.py
from __future__ import annotations

import math

import pytest

from ledgerwatch.domain.services.scoring import beneish


def test_dsri_above_one_when_receivables_outgrow_sales(make_record) -> None:
    current = make_record(2024, revenue=120.0, accounts_receivable=40.0)
    prior = make_record(2023, revenue=100.0, accounts_receivable=20.0)

    first = beneish.calculate(current, prior)
    second = beneish.calculate(current, prior)

    assert first == second
    assert first.dsri == pytest.approx((40 / 120) / (20 / 100))
    assert first.dsri > 1.0
    assert "High Days Sales in Receivables - potential revenue manipulation" in first.flags


def test_identical_periods_score_low_risk(make_record) -> None:
    record = make_record(2024)
    result = beneish.calculate(record, make_record(2023))

    for name in ("dsri", "gmi", "aqi", "sgi", "depi", "sgai", "lvgi"):
        assert getattr(result, name) == pytest.approx(1.0)
    # (120 - 180) / 2000
    assert result.tata == pytest.approx(-0.03)
    assert result.m_score == pytest.approx(-2.48 + 4.679 * -0.03)
    assert result.zone == "Low Risk"
    assert not result.likely_manipulator
    assert result.flags == ()
    assert 0.0 <= result.risk_score <= 1.0


def test_degenerate_records_stay_finite(make_record) -> None:
    empty_fields = {
        name: 0.0
        for name in (
            "revenue",
            "cost_of_revenue",
            "gross_profit",
            "sga_expense",
            "depreciation",
            "net_income",
            "total_assets",
            "current_assets",
            "accounts_receivable",
            "ppe",
            "total_liabilities",
            "operating_cash_flow",
        )
    }
    current = make_record(2024, **empty_fields)
    prior = make_record(2023, **empty_fields)

    result = beneish.calculate(current, prior)

    assert math.isfinite(result.m_score)
    assert result.tata == 0.0
    assert result.sgi == 1.0


@pytest.mark.parametrize(
    ("m_score", "zone"),
    [
        (-1.0, "High Risk"),
        (-1.78, "Elevated Risk"),
        (-2.0, "Elevated Risk"),
        (-2.22, "Moderate Risk"),
        (-2.5, "Low Risk"),
        (-3.0, "Low Risk"),
    ],
)
def test_zone_thresholds_are_strict(m_score: float, zone: str) -> None:
    assert beneish.zone_for(m_score) == zone


def test_probability_is_centred_on_threshold() -> None:
    assert beneish.score_to_probability(-2.22) == pytest.approx(0.5)
    assert beneish.score_to_probability(10.0) > 0.99
    assert beneish.score_to_probability(-1000.0) == 0.0
