"""Scoring and ranking of economic forecasts.

This package contains:
- Forecast normalization across the three question shapes
- Proper scoring rules (Brier)
- Time-weighted aggregation of a forecast history
- User statistics, leaderboard ranking and per-question summaries
- Submission validation
- Audit logging and deterministic hashing of computed rankings
"""

from __future__ import annotations

from .leaderboard import (
    compute_leaderboard,
    compute_user_stats,
    leaderboard,
    question_summary,
    user_stats,
)
from .metrics.proper_scoring import BINARY_SCORE_DOUBLED, score
from .normalizer import normalize, normalize_resolution
from .aggregation.time_weight import time_weighted_score
from .validation import default_forecast, validate_forecast_submission

__all__ = [
    "BINARY_SCORE_DOUBLED",
    "normalize",
    "normalize_resolution",
    "score",
    "time_weighted_score",
    "user_stats",
    "leaderboard",
    "question_summary",
    "compute_user_stats",
    "compute_leaderboard",
    "validate_forecast_submission",
    "default_forecast",
]
