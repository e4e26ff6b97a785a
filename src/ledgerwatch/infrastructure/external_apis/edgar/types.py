# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
EDGAR Types.

Purpose:
    Provide typed response fragments for the EDGAR documents this service
    consumes (ticker table, company submissions, company facts).

Layer:
    infrastructure

Notes:
    These are intentionally partial; only fields read by the gateway are typed.
"""

from __future__ import annotations

from typing import NotRequired, TypedDict


class EdgarTickerRow(TypedDict):
    """One row of ``company_tickers.json`` (keyed by a running index)."""

    cik_str: int
    ticker: str
    title: str


class EdgarSubmissionsRecentSection(TypedDict, total=False):
    """Subset of the 'recent' section from submissions JSON (parallel arrays)."""

    accessionNumber: list[str]
    filingDate: list[str]
    reportDate: list[str]
    form: list[str]
    primaryDocument: list[str]


class EdgarSubmissionsRoot(TypedDict, total=False):
    """Subset of the SEC submissions JSON used by the gateway."""

    cik: str
    name: str
    tickers: list[str]
    sic: str
    sicDescription: str
    filings: dict[str, EdgarSubmissionsRecentSection]


class EdgarFactValue(TypedDict):
    """One reported value of a concept in the company facts feed."""

    end: str
    val: float
    fy: NotRequired[int | None]
    fp: NotRequired[str | None]
    form: NotRequired[str]
    filed: NotRequired[str]
    start: NotRequired[str]
    accn: NotRequired[str]


class EdgarConcept(TypedDict, total=False):
    """A single concept: label plus values grouped by unit (USD, shares, pure)."""

    label: str
    units: dict[str, list[EdgarFactValue]]


class EdgarCompanyFactsRoot(TypedDict, total=False):
    """Subset of EDGAR company facts JSON, keyed taxonomy -> concept."""

    cik: int
    entityName: str
    facts: dict[str, dict[str, EdgarConcept]]
