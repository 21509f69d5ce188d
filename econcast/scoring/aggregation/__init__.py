"""Aggregation of a forecast history into one score per question."""

from __future__ import annotations

from .time_weight import (
    ForecastWindow,
    active_windows,
    sort_history,
    time_weighted_score,
)

__all__ = [
    "ForecastWindow",
    "active_windows",
    "sort_history",
    "time_weighted_score",
]
