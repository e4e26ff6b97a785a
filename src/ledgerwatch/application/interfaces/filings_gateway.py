# src/ledgerwatch/application/interfaces/filings_gateway.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
Filings gateway interface.

Purpose:
- Define a provider-agnostic interface for resolving companies and fetching
  canonical financial records from a filings registry.
- Hide transport, pacing and caching concerns behind a stable contract.

Layer: application/interfaces

Notes:
- Implementations must translate transport errors into domain exceptions.
- Returned record sequences are ordered most-recent-first.
"""

from __future__ import annotations

from typing import Protocol

from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.entities.financial_record import FinancialRecord
from ledgerwatch.domain.enums.analysis import Cadence


class FilingsGateway(Protocol):
    """Protocol for filings gateways."""

    async def resolve_company(self, identifier: str) -> CompanyInfo:
        """Resolve a ticker or CIK to a company identity.

        Raises:
            EdgarNotFound: If the identifier does not resolve.
            EdgarUpstreamUnavailable: On transport or upstream failures.
            EdgarRateLimited: If the registry throttles the request.
        """

    async def search_companies(self, query: str, *, limit: int = 10) -> list[CompanyInfo]:
        """Return companies whose name or ticker contains ``query``."""

    async def fetch_records(
        self,
        identifier: str,
        *,
        years: int,
        cadence: Cadence = Cadence.ANNUAL,
    ) -> tuple[CompanyInfo, list[FinancialRecord]]:
        """Resolve ``identifier`` and return its records, most-recent-first.

        At most ``years`` annual records (or ``4 * years`` quarterly ones) are
        returned. Records may be invalid or incomplete; callers decide how to
        treat them.
        """
