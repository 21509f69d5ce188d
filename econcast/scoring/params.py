"""Scoring hyperparameters and configuration.

All scoring-related configuration lives here so that every leaderboard
rendering derives from a single source of truth.

IMPORTANT: Changes to these parameters change historical leaderboard values.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field


class RoundingParams(BaseModel):
    """Display precision for user statistics."""

    brier_places: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Decimal places kept for the user-level Brier score.",
    )
    accuracy_places: int = Field(
        default=1,
        ge=0,
        le=6,
        description="Decimal places kept for the accuracy percentage.",
    )


class TimeWeightParams(BaseModel):
    """Day-weighting of a forecast history."""

    min_window_days: int = Field(
        default=1,
        ge=1,
        le=7,
        description="Minimum weight of any forecast window, in days.",
    )
    day_seconds: int = Field(
        default=86400,
        ge=60,
        le=86400,
        description="Length of one weighting day in seconds.",
    )


class AccuracyParams(BaseModel):
    """Rules for counting a last forecast as correct."""

    binary_threshold: Decimal = Field(
        default=Decimal("50"),
        ge=Decimal("0"),
        le=Decimal("100"),
        description="A binary forecast predicts YES when probability is strictly above this.",
    )


class SubmissionParams(BaseModel):
    """Bounds for accepting a forecast submission."""

    sum_tolerance: Decimal = Field(
        default=Decimal("0"),
        ge=Decimal("0"),
        le=Decimal("1"),
        description="Allowed deviation from 100 for category/choice totals (0 = exact).",
    )
    reject_resolved: bool = Field(
        default=True,
        description="Reject new forecasts on questions that are already resolved.",
    )


class LeaderboardParams(BaseModel):
    """Leaderboard ordering policy."""

    unscored_last: bool = Field(
        default=False,
        description=(
            "Sort users without any resolved-answered question after scored users. "
            "Off by default: their sentinel score of 0 ranks them first."
        ),
    )


class ScoringParams(BaseModel):
    """Master configuration for all scoring parameters."""

    rounding: RoundingParams = Field(default_factory=RoundingParams)
    time_weight: TimeWeightParams = Field(default_factory=TimeWeightParams)
    accuracy: AccuracyParams = Field(default_factory=AccuracyParams)
    submission: SubmissionParams = Field(default_factory=SubmissionParams)
    leaderboard: LeaderboardParams = Field(default_factory=LeaderboardParams)


# Default instance for easy import
DEFAULT_SCORING_PARAMS = ScoringParams()


def get_scoring_params() -> ScoringParams:
    """Get scoring parameters. Settings files override via ``load_settings``."""
    return DEFAULT_SCORING_PARAMS


__all__ = [
    "RoundingParams",
    "TimeWeightParams",
    "AccuracyParams",
    "SubmissionParams",
    "LeaderboardParams",
    "ScoringParams",
    "DEFAULT_SCORING_PARAMS",
    "get_scoring_params",
]
