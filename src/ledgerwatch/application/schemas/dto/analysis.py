# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Analysis DTOs and report payload mapping (Application Layer).

Purpose:
    Convert the immutable AnalysisReport into a language-neutral mapping of
    JSON-native values (and back), and expose compact DTOs for listings.

Layer: application/schemas/dto

Notes:
    - Wire encoding (JSON text, HTML, CSV) is a presentation concern; this
      module stops at plain mappings.
    - Enum members serialize to their values; dates and datetimes to ISO-8601
      strings; tuples to lists.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, TypeAdapter

from ledgerwatch.application.schemas.dto.base import BaseDTO
from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.entities.verdict import AnalysisReport

_REPORT_ADAPTER: TypeAdapter[AnalysisReport] = TypeAdapter(AnalysisReport)


def report_to_payload(report: AnalysisReport) -> dict[str, Any]:
    """Map a report to JSON-native Python values."""
    return _REPORT_ADAPTER.dump_python(report, mode="json")


def report_from_payload(payload: Mapping[str, Any]) -> AnalysisReport:
    """Rebuild a report from a mapping produced by :func:`report_to_payload`.

    Raises:
        pydantic.ValidationError: If the mapping does not describe a report.
    """
    return _REPORT_ADAPTER.validate_python(dict(payload))


class CompanyDTO(BaseDTO):
    """Company identity row used by search listings."""

    cik: str = Field(..., min_length=10, max_length=10)
    name: str
    ticker: str | None = None
    sic: str | None = None
    industry: str | None = None

    @classmethod
    def from_entity(cls, company: CompanyInfo) -> CompanyDTO:
        return cls(
            cik=company.cik,
            name=company.name,
            ticker=company.ticker,
            sic=company.sic,
            industry=company.industry,
        )
