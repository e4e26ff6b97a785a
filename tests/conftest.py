# tests/conftest.py
from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import date
from typing import Any

import pytest

from ledgerwatch.domain.entities.financial_record import (
    BalanceSheet,
    CashFlowStatement,
    FilingInfo,
    FinancialRecord,
    IncomeStatement,
)
from ledgerwatch.domain.enums.analysis import FormKind
from ledgerwatch.infrastructure.external_apis.edgar.rate_gate import reset_rate_gate

RecordFactory = Callable[..., FinancialRecord]


def _split(overrides: dict[str, Any], cls: type) -> dict[str, Any]:
    names = cls.__dataclass_fields__.keys()
    return {k: overrides.pop(k) for k in list(overrides) if k in names}


def build_record(
    fiscal_year: int = 2024, *, form: FormKind = FormKind.FORM_10K, **values: Any
) -> FinancialRecord:
    """Build a record from flat field overrides on top of a healthy baseline."""
    baseline: dict[str, Any] = {
        "revenue": 1_000.0,
        "cost_of_revenue": 600.0,
        "gross_profit": 400.0,
        "sga_expense": 150.0,
        "depreciation": 50.0,
        "operating_income": 200.0,
        "interest_expense": 10.0,
        "net_income": 120.0,
        "total_assets": 2_000.0,
        "current_assets": 800.0,
        "cash": 200.0,
        "accounts_receivable": 150.0,
        "inventory": 100.0,
        "ppe": 700.0,
        "goodwill": 100.0,
        "intangible_assets": 50.0,
        "total_liabilities": 900.0,
        "current_liabilities": 400.0,
        "accounts_payable": 80.0,
        "long_term_debt": 300.0,
        "total_equity": 1_100.0,
        "retained_earnings": 600.0,
        "shares_outstanding": 100.0,
        "operating_cash_flow": 180.0,
        "investing_cash_flow": -90.0,
        "financing_cash_flow": -40.0,
        "capital_expenditures": 80.0,
    }
    baseline.update(values)
    bs = BalanceSheet(**_split(baseline, BalanceSheet))
    inc = IncomeStatement(**_split(baseline, IncomeStatement))
    cf = CashFlowStatement(**_split(baseline, CashFlowStatement))
    if baseline:
        raise TypeError(f"unknown record fields: {sorted(baseline)}")

    filing = FilingInfo(
        cik="0000320193",
        accession_number=f"0000320193-{fiscal_year % 100:02d}-000001",
        form=form,
        filed_date=date(fiscal_year + 1, 2, 1),
        period_end_date=date(fiscal_year, 12, 31),
        fiscal_year=fiscal_year,
    )
    return FinancialRecord.build(filing, bs, inc, cf)


@pytest.fixture
def make_record() -> RecordFactory:
    return build_record


@pytest.fixture(autouse=True)
def _fresh_rate_gate() -> Iterator[None]:
    """Each test gets its own process-wide rate gate."""
    reset_rate_gate()
    yield
    reset_rate_gate()
