# tests/unit/domain/services/scoring/test_piotroski_model.py
from __future__ import annotations

import pytest

from ledgerwatch.domain.services.scoring import piotroski


def test_identical_periods_score_four(make_record) -> None:
    result = piotroski.calculate(make_record(2024), make_record(2023))

    assert result.net_income_positive
    assert result.cfo_positive
    assert result.cfo_exceeds_net_income
    assert result.no_dilution
    assert not result.roa_increasing
    assert not result.leverage_decreasing
    assert result.f_score == 4
    assert result.interpretation == "Moderate"
    assert result.risk_score == pytest.approx(1 - 4 / 9)


def test_improving_company_scores_nine(make_record) -> None:
    prior = make_record(2023)
    current = make_record(
        2024,
        revenue=1_100.0,
        gross_profit=500.0,
        net_income=200.0,
        operating_cash_flow=250.0,
        long_term_debt=200.0,
        current_assets=900.0,
    )

    result = piotroski.calculate(current, prior)

    assert result.f_score == piotroski.MAX_SCORE
    assert result.interpretation == "Strong"
    assert result.risk_score == 0.0


def test_score_stays_within_bounds_for_empty_records(make_record) -> None:
    zeros = dict.fromkeys(
        ("revenue", "gross_profit", "net_income", "total_assets", "operating_cash_flow"), 0.0
    )
    result = piotroski.calculate(make_record(2024, **zeros), make_record(2023, **zeros))
    assert 0 <= result.f_score <= piotroski.MAX_SCORE
    assert result.interpretation == "Weak"


@pytest.mark.parametrize(
    ("score", "label"),
    [(9, "Strong"), (7, "Strong"), (6, "Moderate"), (4, "Moderate"), (3, "Weak")],
)
def test_interpretation_bands(score: int, label: str) -> None:
    assert piotroski.interpretation_for(score) == label


def test_deteriorating_company_fails_every_criterion(make_record) -> None:
    prior = make_record(2023)
    current = make_record(
        2024,
        gross_profit=300.0,
        net_income=-50.0,
        operating_cash_flow=-100.0,
        long_term_debt=600.0,
        current_liabilities=600.0,
        shares_outstanding=120.0,
    )

    result = piotroski.calculate(current, prior)

    assert not any(
        (
            result.net_income_positive,
            result.cfo_positive,
            result.roa_increasing,
            result.cfo_exceeds_net_income,
            result.leverage_decreasing,
            result.current_ratio_increasing,
            result.no_dilution,
            result.gross_margin_increasing,
            result.asset_turnover_increasing,
        )
    )
    assert result.f_score == 0
    assert result.risk_score == 1.0
    assert result.interpretation == "Weak"


def test_risk_endpoints() -> None:
    assert piotroski.score_to_risk(0) == 1.0
    assert piotroski.score_to_risk(9) == 0.0
