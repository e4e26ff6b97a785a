# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Analysis-stage domain exceptions."""

from __future__ import annotations

from ledgerwatch.domain.exceptions.base import DomainError, ErrorKind


class InsufficientDataError(DomainError):
    """Raised when fewer than two usable records are available for scoring.

    No partial verdict is produced: every model family needs at least a
    current/prior comparison or a minimally meaningful sample.
    """

    code = "INSUFFICIENT_DATA"
    kind = ErrorKind.INSUFFICIENT_DATA
