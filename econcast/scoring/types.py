"""Type definitions and constants for the scoring system."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from econcast.shared.enums import QuestionType, UserRole


class ValidationError(Exception):
    """Raised when a forecast submission fails validation."""

    pass


class ScoringError(Exception):
    """Raised when scoring computation fails."""

    pass


class MalformedResolutionError(ScoringError):
    """A resolved question's resolution matches none of its keys.

    Never raised by the score function; its name labels the audit record.
    """

    pass


class EmptyHistoryError(ScoringError):
    """No forecast history for a resolved question.

    Soft: the aggregator scores 0 and its name labels the audit record."""

    pass


class SnapshotError(Exception):
    """Raised by snapshot sources when the store cannot be read."""

    pass


class SubmissionError(Exception):
    """Raised by submission sinks when a write fails."""

    pass


# ─────────────────────────────────────────────────────────────────────────────
# Snapshot models
# ─────────────────────────────────────────────────────────────────────────────


def _as_id(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _as_date(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    return value


def _as_utc(value: Any) -> Any:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value


class Question(BaseModel):
    """One forecasting target.

    Accepts both the snake_case column names and the camelCase keys used by
    the web client, plus hyphenated type names (``three-category``).
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    title: str = ""
    description: str = ""
    type: QuestionType
    categories: Optional[List[str]] = None
    options: Optional[List[str]] = None
    created_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("created_date", "createdDate", "created_at"),
    )
    close_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("close_date", "closeDate"),
    )
    is_resolved: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_resolved", "isResolved"),
    )
    resolution: Any = None
    resolved_date: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("resolved_date", "resolvedDate"),
    )

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _as_id(v)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, v: Any) -> QuestionType:
        return QuestionType.parse(v)

    @field_validator("created_date", "close_date", "resolved_date", mode="before")
    @classmethod
    def _coerce_date(cls, v: Any) -> Any:
        return _as_date(v)


class ForecastRecord(BaseModel):
    """One stored belief snapshot of a user for a question."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    question_id: str = Field(validation_alias=AliasChoices("question_id", "questionId"))
    user_id: str = Field(validation_alias=AliasChoices("user_id", "userId"))
    forecast: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("created_at", "createdAt"),
    )
    updated_at: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("updated_at", "updatedAt"),
    )

    @field_validator("question_id", "user_id", mode="before")
    @classmethod
    def _coerce_ids(cls, v: Any) -> Any:
        return _as_id(v)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _coerce_ts(cls, v: Any) -> Any:
        return _as_utc(v)

    @field_validator("forecast", mode="before")
    @classmethod
    def _coerce_forecast(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def timestamp(self) -> Optional[datetime]:
        """Ordering timestamp: ``created_at``, falling back to ``updated_at``."""
        return self.created_at or self.updated_at


class User(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: UserRole = UserRole.FORECASTER

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _as_id(v)

    @property
    def display_name(self) -> str:
        return self.name or self.email or self.id


def coerce_questions(items: Iterable[Any]) -> List[Question]:
    """Accept Question models or raw row mappings."""
    return [q if isinstance(q, Question) else Question.model_validate(q) for q in items]


def coerce_forecasts(items: Iterable[Any]) -> List[ForecastRecord]:
    return [f if isinstance(f, ForecastRecord) else ForecastRecord.model_validate(f) for f in items]


def coerce_users(items: Iterable[Any]) -> List[User]:
    return [u if isinstance(u, User) else User.model_validate(u) for u in items]


# ─────────────────────────────────────────────────────────────────────────────
# Dataclasses for derived results
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UserStat:
    """Per-user statistics; recomputed from snapshots on every query."""

    brier_score: float
    questions_answered: int
    accuracy: float  # percent
    questions_scored: int = 0  # resolved questions contributing to brier_score


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    user: User
    stats: UserStat


@dataclass(frozen=True)
class QuestionSummary:
    """Outcome summary of a resolved question across all forecasters."""

    question_id: str
    total: int
    correct: int
    incorrect: int
    top_user_id: Optional[str]
    top_score: Optional[float]


@dataclass(frozen=True)
class SubmissionCheck:
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    error: Optional[str] = None


__all__ = [
    "ValidationError",
    "ScoringError",
    "MalformedResolutionError",
    "EmptyHistoryError",
    "SnapshotError",
    "SubmissionError",
    "Question",
    "ForecastRecord",
    "User",
    "coerce_questions",
    "coerce_forecasts",
    "coerce_users",
    "UserStat",
    "LeaderboardEntry",
    "QuestionSummary",
    "SubmissionCheck",
    "SubmissionResult",
]
