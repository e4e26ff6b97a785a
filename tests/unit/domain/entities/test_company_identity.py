# tests/unit/domain/entities/test_company_identity.py
from __future__ import annotations

import pytest

from ledgerwatch.domain.entities.company import CompanyInfo, normalize_cik, normalize_ticker
from ledgerwatch.domain.exceptions.edgar import EdgarMappingError


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("320193", "0000320193"),
        (320193, "0000320193"),
        ("CIK0000320193", "0000320193"),
        ("0000320193", "0000320193"),
    ],
)
def test_normalize_cik_pads_to_ten_digits(raw: str | int, expected: str) -> None:
    assert normalize_cik(raw) == expected


def test_normalize_cik_rejects_empty_identifier() -> None:
    with pytest.raises(EdgarMappingError):
        normalize_cik("abc")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("aapl", "AAPL"), (" brk.b ", "BRK-B"), ("BRK-B", "BRK-B")],
)
def test_normalize_ticker_is_canonical_and_idempotent(raw: str, expected: str) -> None:
    assert normalize_ticker(raw) == expected
    assert normalize_ticker(normalize_ticker(raw)) == expected


def test_company_info_normalizes_on_construction() -> None:
    company = CompanyInfo(cik="789019", name="MICROSOFT CORP", ticker="msft")
    assert company.cik == "0000789019"
    assert company.ticker == "MSFT"

    blank = CompanyInfo(cik="1", name="X", ticker="  ")
    assert blank.ticker is None
