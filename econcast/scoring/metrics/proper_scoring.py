"""Proper scoring rules: the Brier score for all three question shapes.

Brier = Σ_k (p_k - y_k)² over a probability vector and a one-hot outcome.

- Binary questions are scored over both arms, [p, 1-p] against [o, 1-o].
  This doubles the single-term Brier score; historical leaderboards were
  computed this way, so the doubling is kept and flagged by
  ``BINARY_SCORE_DOUBLED``.
- Three-category and multiple-choice questions are scored over the canonical
  key set (increase/unchanged/decrease, or the question's options in order).

Lower is better: 0 = certainty placed on the realized outcome, 2 = certainty
placed on a single wrong outcome. For any probability vector summing to 1
against a one-hot truth the score is bounded by 2 regardless of K:
Σ p_k² ≤ 1 and the truth term adds at most 1 - 2·p_true.

A resolution that matches none of the keys leaves the outcome vector all
zeros ("no outcome wins"): the score stays deterministic and callers report
the data-integrity problem instead of failing.
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray

from econcast.shared.enums import QuestionType
from econcast.shared.probability import percent_to_fraction

from ..normalizer import NormalizedForecast, canonical_keys, normalize, normalize_resolution
from ..types import Question


BINARY_SCORE_DOUBLED = True

MIN_SCORE = 0.0
MAX_SCORE = 2.0


def brier_score(p_forecast: NDArray[np.float64], outcome: NDArray[np.int8]) -> float:
    """Compute the Brier score of one probability vector.

    Args:
        p_forecast: Probability vector shape (K,), as fractions of 1
        outcome: One-hot outcome vector shape (K,), at most one 1

    Returns:
        Score clipped to [0, 2] (2.0 = worst, also returned for non-finite input)
    """
    if p_forecast.size == 0:
        return MIN_SCORE
    if not np.all(np.isfinite(p_forecast)):
        return MAX_SCORE

    raw = float(np.sum((p_forecast - outcome) ** 2))
    return float(np.clip(raw, MIN_SCORE, MAX_SCORE))


def outcome_to_vector(keys: Sequence[str], resolution: Any) -> NDArray[np.int8]:
    """One-hot vector of ``resolution`` over ``keys``; all zeros when unmatched."""
    return np.array([1 if key == resolution else 0 for key in keys], dtype=np.int8)


def forecast_to_vector(normalized: NormalizedForecast) -> NDArray[np.float64]:
    """Probability vector (fractions of 1) in the forecast's key order."""
    values = normalized.as_dict()
    return np.array(
        [percent_to_fraction(values[key]) for key in normalized.keys()],
        dtype=np.float64,
    )


def binary_vectors(probability: float, resolution: Any) -> tuple[NDArray[np.float64], NDArray[np.int8]]:
    """Two-arm vectors [p, 1-p] and [o, 1-o] for a binary forecast."""
    p = percent_to_fraction(probability)
    o = 1 if resolution else 0
    return np.array([p, 1.0 - p], dtype=np.float64), np.array([o, 1 - o], dtype=np.int8)


def resolution_matches(keys: Sequence[str], resolution: Any) -> bool:
    return any(key == resolution for key in keys)


def score(normalized: NormalizedForecast, resolution: Any, question_type: QuestionType) -> float:
    """Brier score of one normalized forecast against a resolution.

    Never raises; see module docstring for the unmatched-resolution rule.
    """
    question_type = QuestionType.parse(question_type)
    if question_type == QuestionType.BINARY:
        probability = normalized.as_dict().get("probability", 0.0)
        p_vec, o_vec = binary_vectors(probability, resolution)
        return brier_score(p_vec, o_vec)

    return brier_score(
        forecast_to_vector(normalized),
        outcome_to_vector(normalized.keys(), resolution),
    )


def score_forecast(forecast: Any, question: Question) -> float:
    """Normalize a raw forecast and score it against ``question``'s resolution."""
    return score(
        normalize(forecast, question),
        normalize_resolution(question),
        question.type,
    )


def has_malformed_resolution(question: Question) -> bool:
    """True when a resolved question's resolution matches no outcome.

    A binary question resolved without a YES/NO value counts as malformed.
    """
    if not question.is_resolved:
        return False
    if question.type == QuestionType.BINARY:
        return normalize_resolution(question) is None
    return not resolution_matches(canonical_keys(question), normalize_resolution(question))


__all__ = [
    "BINARY_SCORE_DOUBLED",
    "MIN_SCORE",
    "MAX_SCORE",
    "brier_score",
    "outcome_to_vector",
    "forecast_to_vector",
    "binary_vectors",
    "resolution_matches",
    "score",
    "score_forecast",
    "has_malformed_resolution",
]
