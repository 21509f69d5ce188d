"""Forecasting service: the query and submission surface used by the app.

Collaborators are injected: a ``SnapshotSource`` for reads and a
``SubmissionSink`` for writes. Queries are answered from the last loaded
snapshot and recomputed on every call; nothing derived is cached.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from econcast.data.snapshot import Snapshot, SnapshotSource
from econcast.data.submission import SubmissionSink
from econcast.scoring.audit import ScoringAuditLogger
from econcast.scoring.leaderboard import compute_leaderboard, compute_user_stats, question_summary
from econcast.scoring.params import ScoringParams, get_scoring_params
from econcast.scoring.types import LeaderboardEntry, QuestionSummary, SubmissionResult, UserStat
from econcast.scoring.validation import (
    SubmissionValidator,
    default_forecast,
    validate_submission_safe,
)

logger = logging.getLogger(__name__)


class ForecastingService:
    def __init__(
        self,
        source: SnapshotSource,
        sink: SubmissionSink,
        params: ScoringParams | None = None,
        *,
        audit: ScoringAuditLogger | None = None,
        refresh_after_submit: bool = True,
    ) -> None:
        self.source = source
        self.sink = sink
        self.params = params or get_scoring_params()
        self.audit = audit or ScoringAuditLogger()
        self.refresh_after_submit = refresh_after_submit
        self.validator = SubmissionValidator(self.params)
        self.snapshot = Snapshot()

    async def refresh(self) -> Snapshot:
        """Reload the snapshot from the source."""
        self.snapshot = await self.source.load()
        if self.snapshot.degraded:
            logger.warning({"event": "snapshot_degraded", "errors": list(self.snapshot.errors)})
        return self.snapshot

    def user_stats(self, user_id: str) -> UserStat:
        return compute_user_stats(
            user_id,
            self.snapshot.questions,
            self.snapshot.forecasts,
            params=self.params,
            audit=self.audit,
        )

    def leaderboard(self) -> List[LeaderboardEntry]:
        return compute_leaderboard(
            self.snapshot.users,
            self.snapshot.questions,
            self.snapshot.forecasts,
            params=self.params,
            audit=self.audit,
        )

    def question_summary(self, question_id: str) -> Optional[QuestionSummary]:
        question = self.snapshot.question(question_id)
        if question is None:
            return None
        return question_summary(question, self.snapshot.forecasts, params=self.params)

    def default_forecast(self, question_id: str) -> Optional[Dict[str, Any]]:
        question = self.snapshot.question(question_id)
        if question is None:
            return None
        return default_forecast(question)

    async def submit(self, question_id: str, user_id: str, value: Any) -> SubmissionResult:
        """Validate, normalize and hand a forecast to the sink.

        Rejected submissions never reach the sink.
        """
        question_id, user_id = str(question_id), str(user_id)
        question = self.snapshot.question(question_id)
        if question is None:
            await self.refresh()
            question = self.snapshot.question(question_id)
        if question is None:
            reason = f"unknown question: {question_id}"
            self.audit.log_submission_rejected(question_id, user_id, reason)
            return SubmissionResult(success=False, error=reason)

        normalized, error = validate_submission_safe(question, value, self.validator)
        if normalized is None:
            self.audit.log_submission_rejected(question_id, user_id, error or "invalid forecast")
            return SubmissionResult(success=False, error=error)

        result = await self.sink.submit_forecast(question_id, user_id, normalized)
        if result.success and self.refresh_after_submit:
            await self.refresh()
        return result


__all__ = ["ForecastingService"]
