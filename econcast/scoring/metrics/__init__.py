"""Scoring metrics module.

Contains the Brier score for binary, three-category and
multiple-choice questions.
"""

from __future__ import annotations

from .proper_scoring import (
    BINARY_SCORE_DOUBLED,
    brier_score,
    score,
    score_forecast,
)

__all__ = [
    "BINARY_SCORE_DOUBLED",
    "brier_score",
    "score",
    "score_forecast",
]
