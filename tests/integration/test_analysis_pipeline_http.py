# tests/integration/test_analysis_pipeline_http.py
"""End-to-end analysis over a mocked EDGAR: transport, gateway, scoring and caches."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import respx

from ledgerwatch.application.use_cases.analyze_company import AnalyzeCompanyRequest
from ledgerwatch.config.settings import Settings
from ledgerwatch.dependencies.analysis import analysis_services
from ledgerwatch.domain.enums.analysis import RiskLevel
from ledgerwatch.infrastructure.caching.memory_cache import InMemoryJsonCache
from ledgerwatch.infrastructure.external_apis.edgar.settings import EdgarSettings

TICKERS_URL = "https://www.sec.gov/files/company_tickers.json"
SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK0000320193.json"
FACTS_URL = "https://data.sec.gov/api/xbrl/companyfacts/CIK0000320193.json"

SUBMISSIONS = {
    "cik": "0000320193",
    "name": "Apple Inc.",
    "tickers": ["AAPL"],
    "sic": "3571",
    "sicDescription": "Electronic Computers",
    "filings": {
        "recent": {
            "accessionNumber": ["0000320193-24-000123", "0000320193-23-000106"],
            "filingDate": ["2024-11-01", "2023-11-03"],
            "reportDate": ["2024-09-28", "2023-09-30"],
            "form": ["10-K", "10-K"],
        }
    },
}

YEAR_ENDS = {2024: "2024-09-28", 2023: "2023-09-30"}

VALUES: dict[str, dict[int, float]] = {
    "Revenues": {2024: 1100.0, 2023: 1000.0},
    "CostOfRevenue": {2024: 650.0, 2023: 600.0},
    "SellingGeneralAndAdministrativeExpense": {2024: 160.0, 2023: 150.0},
    "DepreciationDepletionAndAmortization": {2024: 55.0, 2023: 50.0},
    "OperatingIncomeLoss": {2024: 220.0, 2023: 200.0},
    "NetIncomeLoss": {2024: 130.0, 2023: 120.0},
    "Assets": {2024: 2100.0, 2023: 2000.0},
    "AssetsCurrent": {2024: 850.0, 2023: 800.0},
    "AccountsReceivableNetCurrent": {2024: 160.0, 2023: 150.0},
    "PropertyPlantAndEquipmentNet": {2024: 720.0, 2023: 700.0},
    "Liabilities": {2024: 920.0, 2023: 900.0},
    "LiabilitiesCurrent": {2024: 410.0, 2023: 400.0},
    "LongTermDebt": {2024: 290.0, 2023: 300.0},
    "StockholdersEquity": {2024: 1180.0, 2023: 1100.0},
    "RetainedEarningsAccumulatedDeficit": {2024: 680.0, 2023: 600.0},
    "NetCashProvidedByUsedInOperatingActivities": {2024: 200.0, 2023: 180.0},
}


def _facts_doc() -> dict[str, Any]:
    us_gaap = {
        concept: {
            "units": {
                "USD": [
                    {"val": val, "fy": fy, "fp": "FY", "form": "10-K", "end": YEAR_ENDS[fy]}
                    for fy, val in by_year.items()
                ]
            }
        }
        for concept, by_year in VALUES.items()
    }
    return {"cik": 320193, "entityName": "Apple Inc.", "facts": {"us-gaap": us_gaap}}


@pytest.mark.asyncio
@respx.mock
async def test_analyze_company_over_http_then_serves_from_cache() -> None:
    tickers = respx.get(TICKERS_URL).mock(
        return_value=httpx.Response(
            200, json={"0": {"cik_str": 320193, "ticker": "AAPL", "title": "Apple Inc."}}
        )
    )
    submissions = respx.get(SUBMISSIONS_URL).mock(
        return_value=httpx.Response(200, json=SUBMISSIONS)
    )
    facts = respx.get(FACTS_URL).mock(return_value=httpx.Response(200, json=_facts_doc()))

    cache = InMemoryJsonCache()
    settings = Settings(_env_file=None)
    async with analysis_services(
        settings, EdgarSettings(min_interval_s=0.0), cache=cache
    ) as services:
        report = await services.analyze.execute(AnalyzeCompanyRequest(identifier="AAPL", years=2))
        again = await services.analyze.execute(AnalyzeCompanyRequest(identifier="aapl", years=2))

    assert report.company.cik == "0000320193"
    assert report.company.industry == "Electronic Computers"
    assert [r.filing.fiscal_year for r in report.records] == [2024, 2023]
    assert report.records[0].income_statement.gross_profit == 450.0
    assert report.verdict.filings_analyzed == 2
    assert isinstance(report.verdict.risk_level, RiskLevel)
    assert 0.0 <= report.verdict.composite_score <= 1.0
    assert report.models.beneish is not None
    assert report.models.altman is not None
    assert report.models.piotroski is not None

    assert again.verdict == report.verdict
    assert tickers.call_count == 1
    assert submissions.call_count == 1
    assert facts.call_count == 1
