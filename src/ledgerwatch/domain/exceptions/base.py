# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
Base Domain Exceptions.

Summary:
    Canonical base class for domain/application exceptions. Every abort of the
    analysis pipeline surfaces as one of these, carrying a single client-safe
    message plus a stable taxonomy kind for deterministic mapping at the
    boundary (HTTP status, CLI exit code).

Layer:
    domain/exceptions
"""
from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Failure taxonomy surfaced to callers of the pipeline."""

    NOT_FOUND = "not_found"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    RATE_LIMITED = "rate_limited"
    INSUFFICIENT_DATA = "insufficient_data"
    INVALID_REQUEST = "invalid_request"


class DomainError(Exception):
    """Base class for all domain/application exceptions.

    Args:
        message: Human-readable error message (safe for clients).
        details: Optional machine-readable diagnostic payload.
    """

    code: str = "DOMAIN_ERROR"
    kind: ErrorKind = ErrorKind.INVALID_REQUEST

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}

    def __str__(self) -> str:
        return self.message


class InvalidRequestError(DomainError):
    """Raised when an analysis request violates its own constraints."""

    code = "INVALID_REQUEST"
    kind = ErrorKind.INVALID_REQUEST
