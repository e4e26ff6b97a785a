# src/ledgerwatch/domain/entities/financial_record.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Canonical financial record entities.

Purpose:
    Represent one filing period as an immutable snapshot of balance-sheet,
    income-statement and cash-flow figures plus filing metadata. These are the
    only inputs the scoring models accept.

Layer:
    domain

Notes:
    - Amounts are plain floats in reporting currency units (USD for EDGAR).
    - A field the registry did not report stays at 0.0 and is named in
      ``FinancialRecord.missing_fields``; that is a completeness limitation,
      not an error.
    - A record with zero total assets and zero revenue is invalid and must be
      excluded from scoring rather than scored as a zero-risk data point.
    - Sequences of records for one company are ordered most-recent-first.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date

from ledgerwatch.domain.enums.analysis import Cadence, FormKind
from ledgerwatch.domain.services.numeric import safe_divide


@dataclass(frozen=True)
class FilingInfo:
    """Identity of a single periodic filing.

    Attributes:
        cik: 10-digit, zero-padded Central Index Key of the filer.
        accession_number: EDGAR accession number (``0000320193-24-000123``).
        form: Analyzable form kind.
        filed_date: Date the filing was accepted by EDGAR.
        period_end_date: Period end (``reportDate``); None when EDGAR omits it.
        fiscal_year: Fiscal year the filing reports on.
        fiscal_quarter: 1-3 for quarterly filings when known, 0 for annual.
    """

    cik: str
    accession_number: str
    form: FormKind
    filed_date: date
    period_end_date: date | None
    fiscal_year: int
    fiscal_quarter: int = 0

    @property
    def cadence(self) -> Cadence:
        """Cadence implied by the form kind."""
        return self.form.cadence

    @property
    def is_annual(self) -> bool:
        return self.cadence is Cadence.ANNUAL

    @property
    def is_quarterly(self) -> bool:
        return self.cadence is Cadence.QUARTERLY


@dataclass(frozen=True)
class BalanceSheet:
    """Point-in-time balance-sheet figures."""

    total_assets: float = 0.0
    current_assets: float = 0.0
    cash: float = 0.0
    accounts_receivable: float = 0.0
    inventory: float = 0.0
    ppe: float = 0.0
    goodwill: float = 0.0
    intangible_assets: float = 0.0
    total_liabilities: float = 0.0
    current_liabilities: float = 0.0
    accounts_payable: float = 0.0
    long_term_debt: float = 0.0
    total_equity: float = 0.0
    retained_earnings: float = 0.0
    shares_outstanding: float = 0.0

    @property
    def working_capital(self) -> float:
        return self.current_assets - self.current_liabilities

    @property
    def current_ratio(self) -> float:
        return safe_divide(self.current_assets, self.current_liabilities)

    @property
    def debt_ratio(self) -> float:
        """Total liabilities over total assets."""
        return safe_divide(self.total_liabilities, self.total_assets)

    @property
    def debt_to_equity(self) -> float:
        return safe_divide(self.total_liabilities, self.total_equity)


@dataclass(frozen=True)
class IncomeStatement:
    """Period income-statement figures."""

    revenue: float = 0.0
    cost_of_revenue: float = 0.0
    gross_profit: float = 0.0
    sga_expense: float = 0.0
    depreciation: float = 0.0
    operating_income: float = 0.0
    interest_expense: float = 0.0
    net_income: float = 0.0

    @property
    def gross_margin(self) -> float:
        return safe_divide(self.gross_profit, self.revenue)

    @property
    def net_margin(self) -> float:
        return safe_divide(self.net_income, self.revenue)


@dataclass(frozen=True)
class CashFlowStatement:
    """Period cash-flow figures."""

    operating_cash_flow: float = 0.0
    investing_cash_flow: float = 0.0
    financing_cash_flow: float = 0.0
    capital_expenditures: float = 0.0


@dataclass(frozen=True)
class FinancialRecord:
    """Canonical, immutable snapshot of one filing period.

    Attributes:
        filing: Filing identity.
        balance_sheet: Balance-sheet figures.
        income_statement: Income-statement figures.
        cash_flow: Cash-flow figures.
        is_valid: False when the record carries no usable substance.
        error: Optional note explaining why the record is invalid.
        missing_fields: Names of logical fields no registry concept supplied.
    """

    filing: FilingInfo
    balance_sheet: BalanceSheet = field(default_factory=BalanceSheet)
    income_statement: IncomeStatement = field(default_factory=IncomeStatement)
    cash_flow: CashFlowStatement = field(default_factory=CashFlowStatement)
    is_valid: bool = True
    error: str | None = None
    missing_fields: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        filing: FilingInfo,
        balance_sheet: BalanceSheet,
        income_statement: IncomeStatement,
        cash_flow: CashFlowStatement,
        *,
        missing_fields: Iterable[str] = (),
    ) -> FinancialRecord:
        """Construct a record and derive its validity flag.

        A record is valid when it reports positive revenue or positive total
        assets.
        """
        valid = income_statement.revenue > 0 or balance_sheet.total_assets > 0
        return cls(
            filing=filing,
            balance_sheet=balance_sheet,
            income_statement=income_statement,
            cash_flow=cash_flow,
            is_valid=valid,
            error=None if valid else "No revenue or total assets reported for period.",
            missing_fields=tuple(missing_fields),
        )

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


def usable_records(records: Sequence[FinancialRecord]) -> list[FinancialRecord]:
    """Return the valid records, preserving most-recent-first order."""
    return [r for r in records if r.is_valid]
