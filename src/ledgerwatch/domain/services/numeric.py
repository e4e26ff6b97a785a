# Copyright (c) Ledgerwatch.
# SPDX-License-Identifier: MIT
"""Numeric guards shared by every scoring model.

Division by a near-zero denominator is a local degradation, never an error:
callers choose the default that reads as "no signal" for their formula.
"""

from __future__ import annotations

import math
from dataclasses import fields, is_dataclass, replace
from typing import Any, Final, TypeVar

T = TypeVar("T")

EPSILON: Final[float] = 1e-10


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Divide, returning ``default`` when ``|denominator| < 1e-10``.

    Args:
        numerator: Dividend.
        denominator: Divisor.
        default: Value returned for a degenerate denominator.

    Returns:
        The quotient, or ``default``. Never NaN or infinity for finite inputs.
    """
    if not math.isfinite(denominator) or abs(denominator) < EPSILON:
        return default
    result = numerator / denominator
    return result if math.isfinite(result) else default


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp ``value`` to ``[lower, upper]``; NaN collapses to ``lower``."""
    if math.isnan(value):
        return lower
    return max(lower, min(upper, value))


def finite_or(value: float, default: float = 0.0) -> float:
    """Return ``value`` when finite, otherwise ``default``."""
    return value if math.isfinite(value) else default


def sanitize_floats(obj: T, *, path: str = "") -> tuple[T, list[str]]:
    """Replace non-finite floats inside a (nested) frozen dataclass with 0.0.

    Float fields, tuples of floats, and nested dataclasses are visited.

    Args:
        obj: Dataclass instance to scrub.
        path: Prefix used when reporting degraded field names.

    Returns:
        A tuple of the scrubbed instance (``obj`` itself when nothing changed)
        and the dotted names of every degraded field.
    """
    if not is_dataclass(obj) or isinstance(obj, type):
        return obj, []

    changes: dict[str, Any] = {}
    degraded: list[str] = []
    for f in fields(obj):
        value = getattr(obj, f.name)
        name = f"{path}{f.name}"
        if isinstance(value, float) and not math.isfinite(value):
            changes[f.name] = 0.0
            degraded.append(name)
        elif isinstance(value, tuple) and any(
            isinstance(v, float) and not math.isfinite(v) for v in value
        ):
            changes[f.name] = tuple(
                finite_or(v) if isinstance(v, float) else v for v in value
            )
            degraded.append(name)
        elif is_dataclass(value) and not isinstance(value, type):
            cleaned, nested = sanitize_floats(value, path=f"{name}.")
            if nested:
                changes[f.name] = cleaned
                degraded.extend(nested)

    if not changes:
        return obj, []
    return replace(obj, **changes), degraded  # type: ignore[type-var]
