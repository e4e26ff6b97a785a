# src/ledgerwatch/application/use_cases/search_companies.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Use case: Search registry companies by name or ticker.

Layer:
    application
"""

from __future__ import annotations

import logging

from ledgerwatch.application.interfaces.filings_gateway import FilingsGateway
from ledgerwatch.domain.entities.company import CompanyInfo
from ledgerwatch.domain.exceptions.base import InvalidRequestError
from ledgerwatch.infrastructure.logging.logger import get_json_logger

MAX_RESULTS = 10


class SearchCompaniesUseCase:
    """Case-insensitive substring search over the registry ticker table."""

    def __init__(self, gateway: FilingsGateway, *, logger: logging.Logger | None = None) -> None:
        self._gateway = gateway
        self._log = logger or get_json_logger(__name__)

    async def execute(self, query: str, *, limit: int = MAX_RESULTS) -> list[CompanyInfo]:
        """Return at most ``limit`` (capped at 10) matching companies.

        Raises:
            InvalidRequestError: If ``query`` is blank or ``limit`` is not positive.
        """
        if not query.strip():
            raise InvalidRequestError("Search query must not be empty.")
        if limit < 1:
            raise InvalidRequestError("limit must be positive.", details={"limit": limit})

        results = await self._gateway.search_companies(query.strip(), limit=min(limit, MAX_RESULTS))
        self._log.info("search.done", extra={"query": query, "results": len(results)})
        return results
