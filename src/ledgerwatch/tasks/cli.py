# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Ledgerwatch CLI: fraud and distress analysis of registry filings.

Commands:
    analyze <identifier>   Score a company (ticker or CIK) and print the report.
    search <query>         Find companies by name or ticker.

Environment:
    EDGAR_USER_AGENT              Contact string sent with every request.
    LEDGERWATCH_CACHE_BACKEND     "memory" (default) or "redis".
    REDIS_URL                     Required for the redis backend.
    LEDGERWATCH_WEIGHT_*          Default composite-score weights.

Exit codes:
    0 success, 2 invalid request, 3 not found, 4 insufficient data,
    5 rate limited, 6 upstream unavailable.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer

from ledgerwatch.application.schemas.dto.analysis import CompanyDTO, report_to_payload
from ledgerwatch.application.use_cases.analyze_company import AnalyzeCompanyRequest
from ledgerwatch.config.settings import get_settings
from ledgerwatch.dependencies.analysis import analysis_services
from ledgerwatch.domain.enums.analysis import Cadence, DistressVariant
from ledgerwatch.domain.exceptions.base import DomainError, ErrorKind
from ledgerwatch.infrastructure.logging.logger import configure_root_logging, get_json_logger

configure_root_logging()
log = get_json_logger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True)

EXIT_CODES: dict[ErrorKind, int] = {
    ErrorKind.INVALID_REQUEST: 2,
    ErrorKind.NOT_FOUND: 3,
    ErrorKind.INSUFFICIENT_DATA: 4,
    ErrorKind.RATE_LIMITED: 5,
    ErrorKind.UPSTREAM_UNAVAILABLE: 6,
}


def _fail(exc: DomainError) -> typer.Exit:
    """Report a domain error on stderr and return the matching exit."""
    log.error("cli.failed", extra={"error": exc.code, "kind": exc.kind.value, **exc.details})
    typer.echo(
        json.dumps({"error": {"code": exc.code, "kind": exc.kind.value, "message": exc.message}}),
        err=True,
    )
    return typer.Exit(code=EXIT_CODES.get(exc.kind, 1))


def _echo_json(payload: Any, *, pretty: bool) -> None:
    typer.echo(json.dumps(payload, indent=2 if pretty else None, sort_keys=False))


@app.command("analyze")
def analyze(
    identifier: str = typer.Argument(..., help="Ticker (e.g., AAPL) or CIK."),  # noqa: B008
    years: int | None = typer.Option(
        None, min=1, max=10, help="Year window; defaults to LEDGERWATCH_DEFAULT_YEARS."
    ),  # noqa: B008
    cadence: Cadence = typer.Option(
        Cadence.ANNUAL, help="annual (10-K) or quarterly (10-Q)."
    ),  # noqa: B008
    market_value: float = typer.Option(
        0.0, min=0.0, help="Market value of equity for the distress model."
    ),  # noqa: B008
    variant: DistressVariant = typer.Option(
        DistressVariant.MANUFACTURING, help="Distress formula variant."
    ),  # noqa: B008
    pretty: bool = typer.Option(True, help="Indent JSON output."),  # noqa: B008
) -> None:
    """Analyze a company's filings and print the report as JSON."""
    settings = get_settings()
    req = AnalyzeCompanyRequest(
        identifier=identifier,
        years=years or settings.default_years,
        market_value=market_value,
        cadence=cadence,
        distress_variant=variant,
    )

    async def _run() -> dict[str, Any]:
        async with analysis_services(settings) as services:
            report = await services.analyze.execute(req)
        return report_to_payload(report)

    try:
        payload = asyncio.run(_run())
    except DomainError as exc:
        raise _fail(exc) from exc
    _echo_json(payload, pretty=pretty)


@app.command("search")
def search(
    query: str = typer.Argument(..., help="Name or ticker fragment."),  # noqa: B008
    limit: int = typer.Option(10, min=1, max=10, help="Maximum results."),  # noqa: B008
) -> None:
    """Search companies by name or ticker and print matches as JSON."""

    async def _run() -> list[dict[str, Any]]:
        async with analysis_services() as services:
            companies = await services.search.execute(query, limit=limit)
        return [CompanyDTO.from_entity(c).model_dump(mode="json") for c in companies]

    try:
        rows = asyncio.run(_run())
    except DomainError as exc:
        raise _fail(exc) from exc
    _echo_json(rows, pretty=True)


if __name__ == "__main__":
    app()
