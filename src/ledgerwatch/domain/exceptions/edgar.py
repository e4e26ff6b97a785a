# src/ledgerwatch/domain/exceptions/edgar.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
EDGAR domain exceptions.

Purpose:
    Provide EDGAR-specific error types for lookup, transport, throttling and
    mapping failures.

Layer:
    domain

Notes:
    - Infrastructure is responsible for translating transport errors (httpx)
      into these types; httpx exceptions never cross the client boundary.
    - A parse failure is an upstream-unavailable condition: the registry
      answered with something we cannot use.
"""

from __future__ import annotations

from ledgerwatch.domain.exceptions.base import DomainError, ErrorKind


class EdgarError(DomainError):
    """Base class for EDGAR-related domain errors."""

    code = "EDGAR_ERROR"
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class EdgarNotFound(EdgarError):
    """Raised when a ticker, CIK, or registry document cannot be found."""

    code = "EDGAR_NOT_FOUND"
    kind = ErrorKind.NOT_FOUND


class EdgarUpstreamUnavailable(EdgarError):
    """Raised on transport failures or non-success upstream responses."""

    code = "EDGAR_UPSTREAM_UNAVAILABLE"
    kind = ErrorKind.UPSTREAM_UNAVAILABLE


class EdgarRateLimited(EdgarError):
    """Raised when EDGAR signals throttling (HTTP 429)."""

    code = "EDGAR_RATE_LIMITED"
    kind = ErrorKind.RATE_LIMITED


class EdgarMappingError(EdgarUpstreamUnavailable):
    """Raised when raw EDGAR data cannot be mapped into domain entities safely."""

    code = "EDGAR_MAPPING_ERROR"
