"""User statistics and leaderboard ranking.

Per user:
- questions_answered: distinct questions the user ever forecast on,
  resolved or not
- brier_score: unweighted mean of the time-weighted scores of the RESOLVED
  questions the user forecast on, rounded for display
- accuracy: percent of those resolved questions where the user's LAST
  forecast picked the realized outcome

The two denominators differ on purpose (all-time answered vs resolved
answered); callers read ``questions_scored`` before trusting a zero score.

Ranking is ascending brier_score with Python's stable sort, so ties keep the
order in which users were supplied. A user with no resolved-answered
questions carries brier_score 0 and therefore ranks first unless
``params.leaderboard.unscored_last`` is set.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from econcast.shared.enums import QuestionType

from .aggregation.time_weight import sort_history, time_weighted_score
from .audit.logging import ScoringAuditLogger
from .determinism import round_display, safe_divide
from .metrics.proper_scoring import has_malformed_resolution, score
from .normalizer import NormalizedForecast, canonical_keys, normalize, normalize_resolution
from .params import ScoringParams, get_scoring_params
from .types import (
    ForecastRecord,
    LeaderboardEntry,
    Question,
    QuestionSummary,
    User,
    UserStat,
    coerce_forecasts,
    coerce_questions,
    coerce_users,
)


def predicted_outcome(
    normalized: NormalizedForecast,
    question: Question,
    params: ScoringParams | None = None,
) -> Any:
    """Outcome a forecast bets on.

    Binary: True when probability is strictly above the threshold (50).
    Category/choice: arg-max over canonical keys; ties go to the first key.
    """
    params = params or get_scoring_params()
    if question.type == QuestionType.BINARY:
        threshold = float(params.accuracy.binary_threshold)
        return normalized.as_dict().get("probability", 0.0) > threshold

    values = normalized.as_dict()
    best_key: Optional[str] = None
    best_value = float("-inf")
    for key in normalized.keys():
        if values[key] > best_value:
            best_key, best_value = key, values[key]
    return best_key


def is_correct(
    forecast: Any,
    question: Question,
    params: ScoringParams | None = None,
) -> bool:
    normalized = normalize(forecast, question)
    return predicted_outcome(normalized, question, params) == normalize_resolution(question)


def _histories_for_user(
    user_id: str,
    forecasts: Iterable[ForecastRecord],
) -> Dict[str, List[ForecastRecord]]:
    by_question: Dict[str, List[ForecastRecord]] = defaultdict(list)
    for record in forecasts:
        if record.user_id == user_id:
            by_question[record.question_id].append(record)
    return by_question


def _compute_user_stats(
    user_id: str,
    questions: Sequence[Question],
    forecasts: Sequence[ForecastRecord],
    params: ScoringParams,
    audit: ScoringAuditLogger | None,
) -> UserStat:
    by_question = _histories_for_user(user_id, forecasts)
    questions_answered = len(by_question)

    scored = [q for q in questions if q.is_resolved and q.id in by_question]
    if not scored:
        return UserStat(
            brier_score=0.0,
            questions_answered=questions_answered,
            accuracy=0.0,
            questions_scored=0,
        )

    total_score = 0.0
    correct = 0
    for question in scored:
        history = sort_history(by_question[question.id], question)
        total_score += time_weighted_score(history, question, params=params, audit=audit)
        if is_correct(history[-1].forecast, question, params):
            correct += 1

    rounding = params.rounding
    return UserStat(
        brier_score=round_display(total_score / len(scored), rounding.brier_places),
        questions_answered=questions_answered,
        accuracy=round_display(
            safe_divide(correct * 100.0, len(scored)),
            rounding.accuracy_places,
        ),
        questions_scored=len(scored),
    )


def _audit_resolutions(questions: Iterable[Question], audit: ScoringAuditLogger) -> None:
    for question in questions:
        if has_malformed_resolution(question):
            audit.log_malformed_resolution(
                question_id=question.id,
                question_type=question.type.value,
                resolution=question.resolution,
                keys=canonical_keys(question),
            )


def user_stats(
    user_id: str,
    questions: Iterable[Any],
    forecasts: Iterable[Any],
    params: ScoringParams | None = None,
    audit: ScoringAuditLogger | None = None,
) -> UserStat:
    """Compute one user's statistics from a snapshot.

    Args:
        user_id: User to compute statistics for
        questions: Question models or raw question rows
        forecasts: ForecastRecords or raw forecast rows (full history)
        params: Scoring parameters
        audit: Optional audit logger for data-integrity warnings

    Returns:
        UserStat (pure function of its inputs)
    """
    params = params or get_scoring_params()
    question_list = coerce_questions(questions)
    forecast_list = coerce_forecasts(forecasts)
    user_id = str(user_id)

    if audit is not None:
        answered = {f.question_id for f in forecast_list if f.user_id == user_id}
        _audit_resolutions((q for q in question_list if q.id in answered), audit)

    stats = _compute_user_stats(user_id, question_list, forecast_list, params, audit)
    if audit is not None:
        audit.log_user_stats(user_id, stats)
    return stats


def leaderboard(
    users: Iterable[Any],
    questions: Iterable[Any],
    forecasts: Iterable[Any],
    params: ScoringParams | None = None,
    audit: ScoringAuditLogger | None = None,
) -> List[LeaderboardEntry]:
    """Rank users by ascending brier_score.

    Ties keep the input order of ``users`` (stable sort).
    """
    params = params or get_scoring_params()
    user_list = coerce_users(users)
    question_list = coerce_questions(questions)
    forecast_list = coerce_forecasts(forecasts)

    if audit is not None:
        _audit_resolutions(question_list, audit)

    rows = [
        (user, _compute_user_stats(user.id, question_list, forecast_list, params, audit))
        for user in user_list
    ]

    if params.leaderboard.unscored_last:
        rows.sort(key=lambda row: (row[1].questions_scored == 0, row[1].brier_score))
    else:
        rows.sort(key=lambda row: row[1].brier_score)

    entries = [
        LeaderboardEntry(rank=i + 1, user=user, stats=stats)
        for i, (user, stats) in enumerate(rows)
    ]
    if audit is not None:
        audit.log_leaderboard_computed(
            entries,
            n_questions=len(question_list),
            n_forecasts=len(forecast_list),
        )
    return entries


def question_summary(
    question: Any,
    forecasts: Iterable[Any],
    params: ScoringParams | None = None,
) -> QuestionSummary:
    """Summarize a question across forecasters using each user's last forecast.

    For resolved questions: how many forecasters picked the realized outcome,
    and the forecaster whose last forecast scored lowest (first on ties).
    Unresolved questions only report the forecaster count.
    """
    params = params or get_scoring_params()
    q = coerce_questions([question])[0]

    latest: Dict[str, ForecastRecord] = {}
    for record in sort_history(
        (f for f in coerce_forecasts(forecasts) if f.question_id == q.id), q
    ):
        latest[record.user_id] = record

    if not q.is_resolved:
        return QuestionSummary(
            question_id=q.id,
            total=len(latest),
            correct=0,
            incorrect=0,
            top_user_id=None,
            top_score=None,
        )

    resolution = normalize_resolution(q)
    correct = 0
    scored: List[tuple[float, str]] = []
    for user_id, record in latest.items():
        normalized = normalize(record.forecast, q)
        if predicted_outcome(normalized, q, params) == resolution:
            correct += 1
        scored.append((score(normalized, resolution, q.type), user_id))

    top = min(scored, key=lambda item: item[0]) if scored else None
    return QuestionSummary(
        question_id=q.id,
        total=len(latest),
        correct=correct,
        incorrect=len(latest) - correct,
        top_user_id=top[1] if top else None,
        top_score=top[0] if top else None,
    )


# Names used by the web client
compute_user_stats = user_stats
compute_leaderboard = leaderboard


__all__ = [
    "predicted_outcome",
    "is_correct",
    "user_stats",
    "leaderboard",
    "question_summary",
    "compute_user_stats",
    "compute_leaderboard",
]
