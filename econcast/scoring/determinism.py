"""Determinism utilities for displayed statistics.

Statistics are recomputed from snapshots on every query, so identical
snapshots must always round to identical display values:
1. Decimal rounding on the exact binary value of a float (matches the
   fixed-point formatting the web client historically used)
2. Safe division that never raises on empty denominators
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .types import ValidationError


def to_decimal(value: Any, name: str = "value") -> Decimal:
    """Convert a value to Decimal with validation.

    Raises:
        ValidationError: If value is None, NaN, infinite or not numeric
    """
    if value is None:
        raise ValidationError(f"{name} is None")
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric, got bool")

    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as e:
        raise ValidationError(f"Cannot convert {name}={value!r} to Decimal: {e}")

    if d.is_nan():
        raise ValidationError(f"{name} is NaN")
    if d.is_infinite():
        raise ValidationError(f"{name} is infinite")
    return d


def round_display(value: float, places: int) -> float:
    """Round half-up to ``places`` decimals and return a float."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    if denominator == 0:
        return default
    return numerator / denominator


__all__ = [
    "to_decimal",
    "round_display",
    "safe_divide",
]
