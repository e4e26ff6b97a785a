# tests/unit/domain/services/scoring/test_altman_model.py
from __future__ import annotations

import pytest

from ledgerwatch.domain.enums.analysis import DistressVariant
from ledgerwatch.domain.services.scoring import altman


@pytest.mark.parametrize(
    ("z_score", "probability"),
    [
        (3.5, 0.01),
        (3.0, 0.05),
        (2.71, 0.05),
        (2.7, 0.10),
        (2.1, 0.20),
        (1.9, 0.35),
        (1.6, 0.50),
        (1.3, 0.65),
        (1.1, 0.75),
        (0.6, 0.85),
        (0.5, 0.95),
        (-4.0, 0.95),
    ],
)
def test_bankruptcy_probability_steps(z_score: float, probability: float) -> None:
    assert altman.score_to_probability(z_score) == probability


@pytest.mark.parametrize(
    ("z_score", "zone"),
    [(3.0, "Safe"), (2.99, "Gray"), (1.82, "Gray"), (1.81, "Distress"), (-1.0, "Distress")],
)
def test_manufacturing_zones(z_score: float, zone: str) -> None:
    assert altman.zone_for(z_score) == zone


@pytest.mark.parametrize(
    ("z_score", "zone"),
    [(2.61, "Safe"), (2.60, "Gray"), (1.11, "Gray"), (1.10, "Distress")],
)
def test_non_manufacturing_zones(z_score: float, zone: str) -> None:
    assert altman.zone_for(z_score, altman.NON_MANUFACTURING_CONFIG) == zone


def test_calculate_uses_book_equity_without_market_value(make_record) -> None:
    result = altman.calculate(make_record())

    assert result.x1 == pytest.approx(0.2)
    assert result.x2 == pytest.approx(0.3)
    assert result.x3 == pytest.approx(0.1)
    assert result.x4 == pytest.approx(1100 / 900)
    assert result.x5 == pytest.approx(0.5)
    assert result.z_score == pytest.approx(0.24 + 0.42 + 0.33 + 0.6 * 1100 / 900 + 0.5)
    assert result.zone == "Gray"
    assert result.bankruptcy_probability == 0.20
    assert not result.is_distressed


def test_calculate_prefers_positive_market_value(make_record) -> None:
    result = altman.calculate(make_record(), market_value=9_000.0)
    assert result.x4 == pytest.approx(10.0)
    assert result.zone == "Safe"
    assert result.risk_score == 0.01


def test_distressed_company(make_record) -> None:
    record = make_record(
        current_assets=100.0,
        current_liabilities=500.0,
        retained_earnings=-500.0,
        operating_income=-100.0,
        total_equity=100.0,
        total_liabilities=1_900.0,
        revenue=200.0,
    )
    result = altman.calculate(record)
    assert result.zone == "Distress"
    assert result.is_distressed
    assert result.bankruptcy_probability == altman.PROBABILITY_FLOOR


def test_non_manufacturing_variant_ignores_sales_and_market_value(make_record) -> None:
    record = make_record()
    result = altman.calculate(
        record, market_value=9_000.0, config=altman.config_for(DistressVariant.NON_MANUFACTURING)
    )

    assert result.variant is DistressVariant.NON_MANUFACTURING
    assert result.x5 == 0.0
    assert result.x4 == pytest.approx(1100 / 900)
    assert result.z_score == pytest.approx(6.56 * 0.2 + 3.26 * 0.3 + 6.72 * 0.1 + 1.05 * 1100 / 900)
    assert result == altman.calculate_non_manufacturing(record)


def test_zero_assets_do_not_raise(make_record) -> None:
    result = altman.calculate(make_record(total_assets=0.0, total_liabilities=0.0))
    assert result.z_score == 0.0
    assert result.zone == "Distress"
