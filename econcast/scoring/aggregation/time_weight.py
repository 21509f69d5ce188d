"""Time-weighted Brier score of a forecast history.

A forecast is scored over every day it was live, not once at resolution:
committing early and holding an accurate forecast earns more weight than a
last-minute revision.

Windows:
- Forecast i is live from its own timestamp until forecast i+1 is made, the
  last forecast until the resolution date.
- Day count is floor(elapsed days) + 1 for every window, so both endpoint
  days are counted.
- Every window weighs at least ``min_window_days`` so a resolution date
  recorded before the last forecast (clock skew) still contributes instead
  of producing a negative weight.

Result = Σ score_i · days_i / Σ days_i.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..metrics.proper_scoring import score
from ..normalizer import NormalizedForecast, normalize, normalize_resolution
from ..params import ScoringParams, get_scoring_params
from ..types import ForecastRecord, Question


HistoryEntry = Union[ForecastRecord, Tuple[Any, Any]]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ForecastWindow:
    """One forecast value and the span it was live for."""

    forecast: NormalizedForecast
    start: datetime
    end: datetime
    days: int
    score: float


def to_utc_datetime(value: date | datetime | None) -> Optional[datetime]:
    """Dates become UTC midnight; naive datetimes are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def window_days(
    start: datetime,
    end: datetime,
    *,
    min_days: int = 1,
    day_seconds: int = 86400,
) -> int:
    """Days between ``start`` and ``end`` counting both endpoints, floored to ``min_days``."""
    elapsed = (end - start).total_seconds()
    days = math.floor(elapsed / day_seconds) + 1
    return max(days, min_days)


def _coerce_entry(entry: HistoryEntry, question: Question) -> ForecastRecord:
    if isinstance(entry, ForecastRecord):
        return entry
    value, created_at = entry
    return ForecastRecord(
        question_id=question.id,
        user_id="",
        forecast=value.as_dict() if hasattr(value, "as_dict") else value,
        created_at=created_at,
    )


def sort_history(history: Iterable[HistoryEntry], question: Question) -> List[ForecastRecord]:
    """Stable ascending sort by timestamp; records without one go last."""
    records = [_coerce_entry(e, question) for e in history]
    return sorted(records, key=lambda r: (r.timestamp is None, r.timestamp or _EPOCH))


def resolution_datetime(
    question: Question,
    history: Sequence[ForecastRecord] = (),
) -> Optional[datetime]:
    """End of the last window: resolved date, else close date, else last forecast."""
    resolved = question.resolved_date or question.close_date
    if resolved is not None:
        return to_utc_datetime(resolved)
    for record in reversed(history):
        if record.timestamp is not None:
            return record.timestamp
    return None


def active_windows(
    history: Iterable[HistoryEntry],
    question: Question,
    params: ScoringParams | None = None,
    audit: Any = None,
) -> List[ForecastWindow]:
    """Split a history into scored windows.

    Args:
        history: ForecastRecords, or (forecast value, created_at) pairs
        question: The resolved question the history belongs to
        params: Scoring parameters (defaults to module defaults)
        audit: Optional ScoringAuditLogger notified of clock skew

    Returns:
        One window per forecast, in chronological order
    """
    params = params or get_scoring_params()
    tw = params.time_weight
    records = sort_history(history, question)
    if not records:
        return []

    resolved_at = resolution_datetime(question, records)
    resolution = normalize_resolution(question)
    windows: List[ForecastWindow] = []

    for i, record in enumerate(records):
        last = i == len(records) - 1
        end = resolved_at if last else records[i + 1].timestamp
        start = record.timestamp or end or _EPOCH
        end = end or start

        if last and end < start and audit is not None:
            audit.log_clock_skew(
                question_id=question.id,
                user_id=record.user_id,
                forecast_at=start,
                resolved_at=end,
            )

        days = window_days(
            start,
            end,
            min_days=tw.min_window_days,
            day_seconds=tw.day_seconds,
        )
        normalized = normalize(record.forecast, question)
        windows.append(
            ForecastWindow(
                forecast=normalized,
                start=start,
                end=end,
                days=days,
                score=score(normalized, resolution, question.type),
            )
        )

    return windows


def time_weighted_score(
    history: Iterable[HistoryEntry],
    question: Question,
    params: ScoringParams | None = None,
    audit: Any = None,
) -> float:
    """Day-weighted mean Brier score of a history for one resolved question.

    Returns 0.0 for an empty history or an unresolved question; callers must
    not read that as a perfect score.
    """
    if not question.is_resolved:
        return 0.0

    windows = active_windows(history, question, params=params, audit=audit)
    if not windows:
        if audit is not None:
            audit.log_empty_history(question_id=question.id)
        return 0.0
    if len(windows) == 1:
        return windows[0].score

    scores = np.array([w.score for w in windows], dtype=np.float64)
    weights = np.array([w.days for w in windows], dtype=np.float64)
    return float(np.average(scores, weights=weights))


__all__ = [
    "ForecastWindow",
    "HistoryEntry",
    "to_utc_datetime",
    "window_days",
    "sort_history",
    "resolution_datetime",
    "active_windows",
    "time_weighted_score",
]
