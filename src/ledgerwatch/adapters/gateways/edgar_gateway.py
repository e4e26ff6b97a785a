# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
Adapter Gateway: EDGAR -> canonical financial records.

Purpose:
    Implement the FilingsGateway interface on top of the EDGAR HTTP client.
    Provide:

    * Company resolution by ticker or CIK, and company search.
    * Filing enumeration from the submissions index (10-K, 10-K/A, 10-Q,
      10-Q/A only).
    * Fact extraction from the XBRL company-facts feed into FinancialRecord.
    * End-to-end record retrieval with cadence selection and amendment dedupe.

Layer:
    adapters

Notes:
    - A field no concept alias supplies stays 0.0 and is named in
      ``missing_fields``; it never aborts the pipeline.
    - A missing company-facts document degrades every record to "all fields
      missing" (and therefore invalid) rather than failing the request.
    - Index rows with no usable CIK or accession number are dropped and
      logged; they are never surfaced half-populated.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import replace
from datetime import date
from typing import Any, Final, cast

from ledgerwatch.application.interfaces.filings_gateway import FilingsGateway
from ledgerwatch.domain.entities.company import CompanyInfo, normalize_cik, normalize_ticker
from ledgerwatch.domain.entities.financial_record import (
    BalanceSheet,
    CashFlowStatement,
    FilingInfo,
    FinancialRecord,
    IncomeStatement,
)
from ledgerwatch.domain.enums.analysis import Cadence, FormKind
from ledgerwatch.domain.exceptions.base import InvalidRequestError
from ledgerwatch.domain.exceptions.edgar import EdgarMappingError, EdgarNotFound
from ledgerwatch.infrastructure.external_apis.edgar.client import EdgarClient
from ledgerwatch.infrastructure.external_apis.edgar.types import (
    EdgarSubmissionsRecentSection,
    EdgarSubmissionsRoot,
    EdgarTickerRow,
)
from ledgerwatch.infrastructure.logging.logger import get_json_logger

_US_GAAP: Final[str] = "us-gaap"
_DEI: Final[str] = "dei"
_UNIT_ORDER: Final[tuple[str, ...]] = ("USD", "shares", "pure")
_QUARTER_PERIODS: Final[frozenset[str]] = frozenset({"Q1", "Q2", "Q3"})
SEARCH_LIMIT: Final[int] = 10

# Logical field -> ordered (taxonomy, concept) aliases; the first alias that
# yields a matching value wins.
BALANCE_SHEET_CONCEPTS: Final[dict[str, tuple[tuple[str, str], ...]]] = {
    "total_assets": ((_US_GAAP, "Assets"),),
    "current_assets": ((_US_GAAP, "AssetsCurrent"),),
    "cash": (
        (_US_GAAP, "CashAndCashEquivalentsAtCarryingValue"),
        (_US_GAAP, "CashCashEquivalentsRestrictedCashAndRestrictedCashEquivalents"),
        (_US_GAAP, "Cash"),
    ),
    "accounts_receivable": (
        (_US_GAAP, "AccountsReceivableNetCurrent"),
        (_US_GAAP, "ReceivablesNetCurrent"),
    ),
    "inventory": ((_US_GAAP, "InventoryNet"), (_US_GAAP, "InventoryGross")),
    "ppe": (
        (_US_GAAP, "PropertyPlantAndEquipmentNet"),
        (
            _US_GAAP,
            "PropertyPlantAndEquipmentAndFinanceLeaseRightOfUseAssetAfterAccumulatedDepreciationAndAmortization",
        ),
    ),
    "goodwill": ((_US_GAAP, "Goodwill"),),
    "intangible_assets": (
        (_US_GAAP, "IntangibleAssetsNetExcludingGoodwill"),
        (_US_GAAP, "FiniteLivedIntangibleAssetsNet"),
    ),
    "total_liabilities": ((_US_GAAP, "Liabilities"),),
    "current_liabilities": ((_US_GAAP, "LiabilitiesCurrent"),),
    "accounts_payable": (
        (_US_GAAP, "AccountsPayableCurrent"),
        (_US_GAAP, "AccountsPayableAndAccruedLiabilitiesCurrent"),
    ),
    "long_term_debt": (
        (_US_GAAP, "LongTermDebt"),
        (_US_GAAP, "LongTermDebtNoncurrent"),
    ),
    "total_equity": (
        (_US_GAAP, "StockholdersEquity"),
        (_US_GAAP, "StockholdersEquityIncludingPortionAttributableToNoncontrollingInterest"),
    ),
    "retained_earnings": ((_US_GAAP, "RetainedEarningsAccumulatedDeficit"),),
    "shares_outstanding": (
        (_DEI, "EntityCommonStockSharesOutstanding"),
        (_US_GAAP, "CommonStockSharesOutstanding"),
    ),
}

INCOME_STATEMENT_CONCEPTS: Final[dict[str, tuple[tuple[str, str], ...]]] = {
    "revenue": (
        (_US_GAAP, "Revenues"),
        (_US_GAAP, "RevenueFromContractWithCustomerExcludingAssessedTax"),
        (_US_GAAP, "SalesRevenueNet"),
    ),
    "cost_of_revenue": (
        (_US_GAAP, "CostOfGoodsAndServicesSold"),
        (_US_GAAP, "CostOfRevenue"),
    ),
    "gross_profit": ((_US_GAAP, "GrossProfit"),),
    "sga_expense": ((_US_GAAP, "SellingGeneralAndAdministrativeExpense"),),
    "depreciation": (
        (_US_GAAP, "DepreciationDepletionAndAmortization"),
        (_US_GAAP, "DepreciationAndAmortization"),
        (_US_GAAP, "Depreciation"),
    ),
    "operating_income": ((_US_GAAP, "OperatingIncomeLoss"),),
    "interest_expense": ((_US_GAAP, "InterestExpense"),),
    "net_income": ((_US_GAAP, "NetIncomeLoss"),),
}

CASH_FLOW_CONCEPTS: Final[dict[str, tuple[tuple[str, str], ...]]] = {
    "operating_cash_flow": ((_US_GAAP, "NetCashProvidedByUsedInOperatingActivities"),),
    "investing_cash_flow": ((_US_GAAP, "NetCashProvidedByUsedInInvestingActivities"),),
    "financing_cash_flow": ((_US_GAAP, "NetCashProvidedByUsedInFinancingActivities"),),
    "capital_expenditures": ((_US_GAAP, "PaymentsToAcquirePropertyPlantAndEquipment"),),
}


def _finite_value(raw: Any) -> float | None:
    """Return ``raw`` as a finite float, or None for non-numbers, NaN and infinities."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    try:
        value = float(raw)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


class HttpEdgarFilingsGateway(FilingsGateway):
    """HTTP-based EDGAR filings gateway implementation."""

    def __init__(
        self,
        client: EdgarClient,
        *,
        max_filings: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the gateway.

        Args:
            client: EDGAR HTTP client.
            max_filings: Upper bound on filings read from one submissions index.
            logger: Optional injected logger.
        """
        self._client = client
        self._max_filings = max_filings
        self._log = logger or get_json_logger(__name__)

    # ------------------------------------------------------------------ #
    # Company lookup
    # ------------------------------------------------------------------ #
    async def resolve_company(self, identifier: str) -> CompanyInfo:
        """Resolve a ticker or an all-digit CIK to a company identity."""
        cleaned = identifier.strip()
        if not cleaned:
            raise InvalidRequestError("Company identifier must not be empty.")

        if cleaned.isdigit():
            self._log.info("edgar.resolve_company.by_cik", extra={"cik": cleaned})
            root = self._ensure_submissions_root(
                await self._client.fetch_company_submissions(cleaned)
            )
            return self._company_from_submissions(root, fallback_cik=cleaned)

        symbol = normalize_ticker(cleaned)
        self._log.info("edgar.resolve_company.by_ticker", extra={"ticker": symbol})
        for row in self._ticker_rows(await self._client.fetch_company_tickers()):
            if normalize_ticker(str(row.get("ticker", ""))) == symbol:
                return CompanyInfo(
                    cik=str(row["cik_str"]),
                    name=str(row.get("title", "")),
                    ticker=str(row["ticker"]),
                )

        raise EdgarNotFound(
            f"Company not found: {identifier}",
            details={"identifier": identifier},
        )

    async def search_companies(
        self, query: str, *, limit: int = SEARCH_LIMIT
    ) -> list[CompanyInfo]:
        """Return up to ``limit`` companies whose name or ticker contains ``query``."""
        needle = query.strip().upper()
        if not needle:
            return []

        results: list[CompanyInfo] = []
        for row in self._ticker_rows(await self._client.fetch_company_tickers()):
            title = str(row.get("title", ""))
            ticker = str(row.get("ticker", ""))
            if needle in title.upper() or needle in ticker.upper():
                results.append(CompanyInfo(cik=str(row["cik_str"]), name=title, ticker=ticker))
                if len(results) >= limit:
                    break
        return results

    # ------------------------------------------------------------------ #
    # Filings and records
    # ------------------------------------------------------------------ #
    async def list_filings(self, cik: str) -> list[FilingInfo]:
        """Enumerate analyzable filings for ``cik`` in index order."""
        root = self._ensure_submissions_root(await self._client.fetch_company_submissions(cik))
        return self.parse_filings(root, fallback_cik=cik)

    async def fetch_records(
        self,
        identifier: str,
        *,
        years: int,
        cadence: Cadence = Cadence.ANNUAL,
    ) -> tuple[CompanyInfo, list[FinancialRecord]]:
        """Resolve, enumerate, select and extract records, most-recent-first."""
        company = await self.resolve_company(identifier)
        self._log.info(
            "edgar.fetch_records.start",
            extra={"cik": company.cik, "years": years, "cadence": cadence.value},
        )

        try:
            root = self._ensure_submissions_root(
                await self._client.fetch_company_submissions(company.cik)
            )
        except EdgarNotFound:
            self._log.warning("edgar.fetch_records.no_submissions", extra={"cik": company.cik})
            return company, []

        company = self._enrich_company(company, root)
        limit = years if cadence is Cadence.ANNUAL else 4 * years
        filings = self.parse_filings(root, fallback_cik=company.cik)
        selected = self.select_filings(filings, cadence, limit)
        if not selected:
            return company, []

        try:
            facts_doc = await self._client.fetch_company_facts(company.cik)
        except EdgarNotFound:
            self._log.warning("edgar.fetch_records.no_company_facts", extra={"cik": company.cik})
            facts_doc = {}
        facts = facts_doc.get("facts")
        facts = facts if isinstance(facts, Mapping) else {}

        records = [self.extract_record(filing, facts) for filing in selected]
        self._log.info(
            "edgar.fetch_records.success",
            extra={
                "cik": company.cik,
                "records": len(records),
                "valid": sum(1 for r in records if r.is_valid),
            },
        )
        return company, records

    def parse_filings(
        self, root: EdgarSubmissionsRoot, *, fallback_cik: str = ""
    ) -> list[FilingInfo]:
        """Map the submissions index into FilingInfo rows.

        Non-analyzable forms are silently dropped. Rows whose CIK or accession
        number is unusable are dropped with a warning. At most ``max_filings``
        rows are read.
        """
        raw_cik = root.get("cik") or fallback_cik
        try:
            cik = normalize_cik(raw_cik)
        except EdgarMappingError:
            self._log.warning("edgar.parse_filings.missing_cik", extra={"cik": raw_cik})
            return []

        recent = self._extract_recent_section(root)
        accession_numbers = recent.get("accessionNumber") or []
        filing_dates = recent.get("filingDate") or []
        report_dates = recent.get("reportDate") or []
        forms = recent.get("form") or []

        n = min(len(accession_numbers), len(filing_dates), len(forms), self._max_filings)
        filings: list[FilingInfo] = []
        for idx in range(n):
            form = FormKind.from_form(str(forms[idx]))
            if form is None:
                continue

            accession = str(accession_numbers[idx] or "").strip()
            filed = self._parse_iso_date(filing_dates[idx])
            if not accession or filed is None:
                self._log.warning(
                    "edgar.parse_filings.malformed_row",
                    extra={"cik": cik, "index": idx, "accession": accession},
                )
                continue

            period_end = (
                self._parse_iso_date(report_dates[idx]) if idx < len(report_dates) else None
            )
            filings.append(
                FilingInfo(
                    cik=cik,
                    accession_number=accession,
                    form=form,
                    filed_date=filed,
                    period_end_date=period_end,
                    fiscal_year=(period_end or filed).year,
                )
            )
        return filings

    @staticmethod
    def select_filings(
        filings: Sequence[FilingInfo],
        cadence: Cadence,
        limit: int,
    ) -> list[FilingInfo]:
        """Keep one cadence, dedupe amendments, cap, and order most-recent-first.

        Filings reporting the same period collapse to the latest filed one, so
        an amendment replaces the report it amends.
        """
        same_cadence = sorted(
            (f for f in filings if f.cadence is cadence),
            key=lambda f: f.filed_date,
            reverse=True,
        )
        seen: set[object] = set()
        unique: list[FilingInfo] = []
        for filing in same_cadence:
            period_key = filing.period_end_date or filing.fiscal_year
            if period_key in seen:
                continue
            seen.add(period_key)
            unique.append(filing)

        unique.sort(
            key=lambda f: f.period_end_date or date(f.fiscal_year, 12, 31),
            reverse=True,
        )
        return unique[: max(0, limit)]

    # ------------------------------------------------------------------ #
    # Fact extraction
    # ------------------------------------------------------------------ #
    @classmethod
    def extract_record(cls, filing: FilingInfo, facts: Mapping[str, Any]) -> FinancialRecord:
        """Build a FinancialRecord for ``filing`` from a company-facts mapping.

        Args:
            filing: Filing to extract.
            facts: The ``facts`` object of the company-facts document
                (taxonomy -> concept -> {units: {unit: [values]}}).

        Returns:
            A record whose validity is derived from revenue and total assets.
        """
        missing: list[str] = []
        quarters: list[str] = []

        def _section(table: Mapping[str, tuple[tuple[str, str], ...]]) -> dict[str, float]:
            values: dict[str, float] = {}
            for name, aliases in table.items():
                found = cls._probe(facts, aliases, filing)
                if found is None:
                    missing.append(name)
                    values[name] = 0.0
                    continue
                value, fp = found
                values[name] = value
                if fp:
                    quarters.append(fp)
            return values

        balance = _section(BALANCE_SHEET_CONCEPTS)
        income = _section(INCOME_STATEMENT_CONCEPTS)
        cash_flow = _section(CASH_FLOW_CONCEPTS)

        if (
            "gross_profit" in missing
            and "revenue" not in missing
            and "cost_of_revenue" not in missing
        ):
            income["gross_profit"] = income["revenue"] - income["cost_of_revenue"]
            missing.remove("gross_profit")

        if filing.is_quarterly and filing.fiscal_quarter == 0:
            quarter = next((fp for fp in quarters if fp in _QUARTER_PERIODS), None)
            if quarter is not None:
                filing = replace(filing, fiscal_quarter=int(quarter[1]))

        return FinancialRecord.build(
            filing,
            BalanceSheet(**balance),
            IncomeStatement(**income),
            CashFlowStatement(**cash_flow),
            missing_fields=missing,
        )

    @staticmethod
    def _matches_cadence(entry: Mapping[str, Any], filing: FilingInfo) -> bool:
        form = str(entry.get("form") or "")
        fp = str(entry.get("fp") or "")
        if filing.is_annual:
            return form.startswith("10-K") or fp == "FY"
        return form.startswith("10-Q") or fp in _QUARTER_PERIODS

    @classmethod
    def _probe(
        cls,
        facts: Mapping[str, Any],
        aliases: Sequence[tuple[str, str]],
        filing: FilingInfo,
    ) -> tuple[float, str] | None:
        """Return (value, fiscal period) for the first alias with a match."""
        period_end = filing.period_end_date.isoformat() if filing.period_end_date else None
        for taxonomy, concept in aliases:
            taxonomy_facts = facts.get(taxonomy)
            node = taxonomy_facts.get(concept) if isinstance(taxonomy_facts, Mapping) else None
            units = node.get("units") if isinstance(node, Mapping) else None
            if not isinstance(units, Mapping):
                continue
            for unit in _UNIT_ORDER:
                entries = units.get(unit)
                if not isinstance(entries, list):
                    continue
                candidates = [
                    e
                    for e in entries
                    if isinstance(e, Mapping)
                    and _finite_value(e.get("val")) is not None
                    and (
                        e.get("fy") == filing.fiscal_year
                        or e.get("accn") == filing.accession_number
                    )
                    and cls._matches_cadence(e, filing)
                ]
                if not candidates:
                    continue
                # Comparatives share fy and accn; without a period end the latest one wins.
                latest = max(candidates, key=lambda e: str(e.get("end") or ""))
                best = next((e for e in candidates if e.get("end") == period_end), latest)
                return cast(float, _finite_value(best["val"])), str(best.get("fp") or "")
        return None

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #
    @staticmethod
    def _ticker_rows(raw: Mapping[str, Any]) -> list[EdgarTickerRow]:
        """Return well-formed rows of the ticker table, in table order."""
        rows: list[EdgarTickerRow] = []
        for value in raw.values():
            if isinstance(value, Mapping) and "ticker" in value and "cik_str" in value:
                rows.append(cast(EdgarTickerRow, value))
        return rows

    @staticmethod
    def _company_from_submissions(
        root: EdgarSubmissionsRoot, *, fallback_cik: str
    ) -> CompanyInfo:
        name = root.get("name")
        if not name or not isinstance(name, str):
            raise EdgarMappingError(
                "EDGAR submissions JSON missing 'name' field.",
                details={"cik": root.get("cik") or fallback_cik},
            )
        tickers = root.get("tickers") or []
        ticker = tickers[0] if tickers and isinstance(tickers[0], str) else None
        return CompanyInfo(
            cik=str(root.get("cik") or fallback_cik),
            name=name,
            ticker=ticker,
            sic=str(root["sic"]) if root.get("sic") else None,
            industry=root.get("sicDescription") or None,
        )

    @staticmethod
    def _enrich_company(company: CompanyInfo, root: EdgarSubmissionsRoot) -> CompanyInfo:
        """Fill SIC and name details from the submissions document."""
        return replace(
            company,
            name=company.name or str(root.get("name") or ""),
            sic=company.sic or (str(root["sic"]) if root.get("sic") else None),
            industry=company.industry or root.get("sicDescription") or None,
        )

    @staticmethod
    def _ensure_submissions_root(raw: Any) -> EdgarSubmissionsRoot:
        """Validate that the submissions payload has the expected root shape."""
        if not isinstance(raw, Mapping):
            raise EdgarMappingError(
                "EDGAR submissions payload must be a JSON object.",
                details={"type": type(raw).__name__},
            )
        return cast(EdgarSubmissionsRoot, raw)

    @staticmethod
    def _extract_recent_section(root: EdgarSubmissionsRoot) -> EdgarSubmissionsRecentSection:
        """Extract the 'recent' filings section; absent means no filings."""
        filings = root.get("filings")
        if filings is None:
            return {}
        if not isinstance(filings, Mapping):
            raise EdgarMappingError(
                "EDGAR submissions 'filings' section must be an object.",
                details={"type": type(filings).__name__},
            )
        recent = filings.get("recent")
        if recent is None:
            return {}
        if not isinstance(recent, Mapping):
            raise EdgarMappingError(
                "EDGAR submissions 'filings.recent' section must be an object.",
                details={"keys": list(filings.keys())},
            )
        return recent

    @staticmethod
    def _parse_iso_date(value: Any) -> date | None:
        """Parse an ISO date string; empty or malformed values yield None."""
        if not value or not isinstance(value, str):
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
