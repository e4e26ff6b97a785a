# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Ledgerwatch: fraud and distress risk scoring over SEC EDGAR filings."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
