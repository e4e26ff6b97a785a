# src/ledgerwatch/domain/entities/company.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""EDGAR company identity entity.

Purpose:
    Represent the resolved company behind an analysis request: CIK, ticker,
    legal name, and SIC code.

Layer:
    domain

Notes:
    Invariants are enforced in __post_init__ and violations raise
    EdgarMappingError.
"""

from __future__ import annotations

from dataclasses import dataclass

from ledgerwatch.domain.exceptions.edgar import EdgarMappingError


def normalize_cik(cik: str | int) -> str:
    """Normalize a CIK to a 10-digit, zero-padded string.

    Non-digit characters are stripped.

    Raises:
        EdgarMappingError: If no digits remain after normalization.
    """
    digits = "".join(ch for ch in str(cik) if ch.isdigit())
    if not digits:
        raise EdgarMappingError("CIK must contain at least one digit.", details={"cik": cik})
    return digits.zfill(10)


def normalize_ticker(symbol: str) -> str:
    """Normalize a ticker to EDGAR's canonical symbol format.

    Upper-cases and rewrites the ``.`` class separator to ``-``
    (``brk.a`` -> ``BRK-A``). Idempotent.
    """
    return symbol.strip().upper().replace(".", "-")


@dataclass(frozen=True)
class CompanyInfo:
    """Resolved identity of an EDGAR filer.

    Args:
        cik: Central Index Key; normalized to 10 digits.
        name: Registrant name as reported by EDGAR.
        ticker: Optional primary ticker, stored in canonical form.
        sic: Optional Standard Industrial Classification code.
        industry: Optional SIC description.

    Raises:
        EdgarMappingError: If the CIK is empty or contains no digits.
    """

    cik: str
    name: str
    ticker: str | None = None
    sic: str | None = None
    industry: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize the identity fields."""
        object.__setattr__(self, "cik", normalize_cik(self.cik))
        if self.ticker is not None:
            cleaned = normalize_ticker(self.ticker)
            object.__setattr__(self, "ticker", cleaned or None)
