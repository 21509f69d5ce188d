"""Structured audit logging for scoring operations.

Data-integrity conditions (malformed resolutions, clock skew) are absorbed
by the scoring code so the leaderboard always renders; this logger is where
they surface instead.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from econcast.shared.logging import DATA_INTEGRITY_LEVEL_NUM

from ..types import EmptyHistoryError, MalformedResolutionError
from .hashing import compute_leaderboard_hash, compute_user_stat_hash


class ScoringAuditLogger:
    """Structured logger for the scoring audit trail."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize the audit logger.

        Args:
            logger: Optional logger instance (creates one if not provided)
        """
        self.logger = logger or logging.getLogger("econcast.scoring.audit")

    def _integrity(self, payload: dict) -> None:
        self.logger.log(DATA_INTEGRITY_LEVEL_NUM, payload)

    def log_malformed_resolution(
        self,
        question_id: str,
        question_type: str,
        resolution: Any,
        keys: Sequence[str],
    ) -> None:
        """Log a resolution that matches none of the question's keys.

        Args:
            question_id: Question identifier
            question_type: Question type value
            resolution: The stored resolution value
            keys: Canonical keys the resolution was matched against
        """
        self._integrity({
            "event": "malformed_resolution",
            "error": MalformedResolutionError.__name__,
            "question_id": question_id,
            "question_type": question_type,
            "resolution": repr(resolution),
            "keys": list(keys),
        })

    def log_empty_history(self, question_id: str) -> None:
        """Log a resolved question scored with no forecast history."""
        self._integrity({
            "event": "empty_history",
            "error": EmptyHistoryError.__name__,
            "question_id": question_id,
        })

    def log_clock_skew(
        self,
        question_id: str,
        user_id: str,
        forecast_at: datetime,
        resolved_at: datetime,
    ) -> None:
        """Log a resolution date that precedes the last forecast."""
        self._integrity({
            "event": "clock_skew",
            "question_id": question_id,
            "user_id": user_id,
            "forecast_at": forecast_at.isoformat(),
            "resolved_at": resolved_at.isoformat(),
        })

    def log_submission_rejected(
        self,
        question_id: str,
        user_id: str,
        reason: str,
    ) -> None:
        self.logger.info({
            "event": "submission_rejected",
            "question_id": question_id,
            "user_id": user_id,
            "reason": reason,
        })

    def log_user_stats(self, user_id: str, stats: Any) -> None:
        self.logger.debug({
            "event": "user_stats",
            "user_id": user_id,
            "brier_score": stats.brier_score,
            "questions_scored": stats.questions_scored,
            "stat_hash": compute_user_stat_hash(user_id, stats)[:16] + "...",
        })

    def log_leaderboard_computed(
        self,
        entries: Sequence[Any],
        n_questions: int,
        n_forecasts: int,
    ) -> str:
        """Log a computed leaderboard with its ranking hash.

        Returns:
            The full ranking hash
        """
        ranking_hash = compute_leaderboard_hash(entries)
        self.logger.info({
            "event": "leaderboard_computed",
            "n_users": len(entries),
            "n_questions": n_questions,
            "n_forecasts": n_forecasts,
            "ranking_hash": ranking_hash[:16] + "...",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })
        return ranking_hash


__all__ = ["ScoringAuditLogger"]
