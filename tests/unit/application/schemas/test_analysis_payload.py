# tests/unit/application/schemas/test_analysis_payload.py
from __future__ import annotations

import json
from datetime import UTC, datetime

import pydantic
import pytest

from ledgerwatch.application.schemas.dto.analysis import (
    CompanyDTO,
    report_from_payload,
    report_to_payload,
)
from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.entities.verdict import AnalysisReport
from ledgerwatch.domain.services.aggregator import RiskAggregator


def _report(make_record) -> AnalysisReport:
    records, models, verdict = RiskAggregator().analyze(
        [make_record(2024, revenue=1_250.0), make_record(2023), make_record(2022)]
    )
    return AnalysisReport(
        company=CompanyInfo(cik="320193", name="Apple Inc.", ticker="AAPL"),
        records=tuple(records),
        models=models,
        verdict=verdict,
        analyzed_at=datetime(2025, 1, 1, tzinfo=UTC),
        version="0.1.0",
    )


def test_payload_is_json_native(make_record) -> None:
    payload = report_to_payload(_report(make_record))

    text = json.dumps(payload)
    assert payload["company"]["cik"] == "0000320193"
    assert payload["verdict"]["risk_level"] in {"LOW", "MODERATE", "ELEVATED", "HIGH", "CRITICAL"}
    assert payload["records"][0]["filing"]["form"] == "10-K"
    assert payload["records"][0]["filing"]["filed_date"] == "2025-02-01"
    assert isinstance(payload["verdict"]["red_flags"], list)
    assert json.loads(text) == payload


def test_payload_rebuilds_an_equal_report(make_record) -> None:
    report = _report(make_record)
    assert report_from_payload(report_to_payload(report)) == report


def test_malformed_payload_is_rejected() -> None:
    with pytest.raises(pydantic.ValidationError):
        report_from_payload({"company": {"cik": "1"}})


def test_company_dto_from_entity() -> None:
    dto = CompanyDTO.from_entity(CompanyInfo(cik="789019", name="MICROSOFT CORP", ticker="msft"))
    assert dto.model_dump() == {
        "cik": "0000789019",
        "name": "MICROSOFT CORP",
        "ticker": "MSFT",
        "sic": None,
        "industry": None,
    }
