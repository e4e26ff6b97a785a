# src/ledgerwatch/domain/enums/analysis.py
# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""
Analysis enumerations.

Purpose:
    Provide stable, provider-agnostic tokens for filing forms, reporting
    cadence, risk levels, and trend directions.

Layer:
    domain

Notes:
    - Adapters are responsible for mapping raw SEC form codes into FormKind.
    - Only the analyzable forms are modeled; every other form is dropped at the
      gateway because it never carries structured financials.
"""

from __future__ import annotations

from enum import Enum


class Cadence(str, Enum):
    """Reporting cadence of a filing."""

    ANNUAL = "annual"
    QUARTERLY = "quarterly"


class FormKind(str, Enum):
    """Analyzable EDGAR form kinds."""

    FORM_10K = "10-K"
    FORM_10K_A = "10-K/A"
    FORM_10Q = "10-Q"
    FORM_10Q_A = "10-Q/A"

    @classmethod
    def from_form(cls, form: str) -> FormKind | None:
        """Map a raw SEC form code to a FormKind, or None when not analyzable."""
        try:
            return cls(form.strip().upper())
        except ValueError:
            return None

    @property
    def cadence(self) -> Cadence:
        """Cadence implied by the form."""
        if self in (FormKind.FORM_10K, FormKind.FORM_10K_A):
            return Cadence.ANNUAL
        return Cadence.QUARTERLY


class RiskLevel(str, Enum):
    """Ordinal risk classification, lowest first."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    ELEVATED = "ELEVATED"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TrendDirection(str, Enum):
    """Direction of a metric between the oldest and most recent period."""

    IMPROVING = "IMPROVING"
    STABLE = "STABLE"
    DECLINING = "DECLINING"


class DistressVariant(str, Enum):
    """Altman formula selection."""

    MANUFACTURING = "manufacturing"
    NON_MANUFACTURING = "non_manufacturing"
