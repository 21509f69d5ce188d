"""Probability utilities shared by validation and scoring.

Forecasts are entered as percentages (0-100); scoring works on fractions of 1.
Non-numeric, NaN and infinite inputs degrade to 0.0 in the lenient helpers.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable

PERCENT_TOTAL = 100.0


def coerce_percent(value: object) -> float:
    """Convert a raw percentage to a float clamped to [0, 100].

    Returns 0.0 for None, booleans, non-numeric strings, NaN and infinities.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        f = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(f):
        return 0.0
    return min(max(f, 0.0), PERCENT_TOTAL)


def percent_to_fraction(value: float) -> float:
    return float(value) / PERCENT_TOTAL


def even_split(labels: Iterable[str]) -> Dict[str, int]:
    """Split 100 across labels as integers, remainder to the first label."""
    keys = list(labels)
    if not keys:
        return {}
    share = int(PERCENT_TOTAL) // len(keys)
    remainder = int(PERCENT_TOTAL) - share * len(keys)
    return {k: share + remainder if i == 0 else share for i, k in enumerate(keys)}


__all__ = [
    "PERCENT_TOTAL",
    "coerce_percent",
    "percent_to_fraction",
    "even_split",
]
