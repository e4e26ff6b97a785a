# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""EDGAR transport client settings.

Purpose:
    Provide Pydantic-based configuration for the EDGAR HTTP client, including
    endpoints, user agent, timeout, request pacing and raw-response caching.

Layer:
    infrastructure

Notes:
    - Values are sourced from environment variables prefixed with ``EDGAR_``.
    - SEC fair-access policy requires a descriptive User-Agent with contact
      details and at most ten requests per second.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EdgarSettings(BaseSettings):
    """Configuration for the EDGAR HTTP client.

    Environment variables (with ``model_config.env_prefix``):

    * ``EDGAR_BASE_URL``
    * ``EDGAR_TICKERS_URL``
    * ``EDGAR_USER_AGENT``
    * ``EDGAR_TIMEOUT_S``
    * ``EDGAR_MIN_INTERVAL_S``
    * ``EDGAR_MAX_FILINGS``
    * ``EDGAR_CACHE_TTL_S``
    """

    base_url: str = Field(
        "https://data.sec.gov",
        description="Base URL for the SEC EDGAR data APIs.",
    )
    tickers_url: str = Field(
        "https://www.sec.gov/files/company_tickers.json",
        description="URL of the ticker-to-CIK lookup table.",
    )
    user_agent: str = Field(
        "Ledgerwatch/0.1 (ledgerwatch@example.com)",
        description=(
            "User agent string sent to EDGAR. Must follow SEC guidelines and "
            "include contact details."
        ),
    )
    timeout_s: float = Field(
        30.0,
        gt=0.0,
        description="Overall per-request timeout in seconds.",
    )
    min_interval_s: float = Field(
        0.1,
        ge=0.0,
        description="Minimum interval between outbound requests, process-wide.",
    )
    max_filings: int = Field(
        100,
        ge=1,
        description="Upper bound on filings read from one submissions index.",
    )
    cache_ttl_s: int = Field(
        3600,
        ge=0,
        description="TTL for cached raw EDGAR responses. 0 disables caching.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="EDGAR_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_edgar_settings() -> EdgarSettings:
    """Return a cached singleton ``EdgarSettings`` instance."""
    return EdgarSettings()
