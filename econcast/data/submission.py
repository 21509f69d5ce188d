"""Submission sinks: durable writes of validated forecasts.

Sinks receive forecasts that already passed validation and normalization.
Write failures come back as ``SubmissionResult(success=False, error=...)``;
they are never raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from econcast.database import DBM
from econcast.database import repository as repo
from econcast.scoring.normalizer import NormalizedForecast
from econcast.scoring.types import SubmissionError, SubmissionResult

logger = logging.getLogger(__name__)


class SubmissionSink(Protocol):
    async def submit_forecast(
        self,
        question_id: str,
        user_id: str,
        normalized_value: NormalizedForecast,
    ) -> SubmissionResult:
        ...


class DatabaseSubmissionSink:
    """Upserts the current forecast and appends the submission to history."""

    def __init__(self, dbm: DBM):
        self.dbm = dbm

    async def _write(self, question_id: str, user_id: str, normalized_value: NormalizedForecast) -> None:
        try:
            await repo.upsert_forecast(
                self.dbm,
                question_id=question_id,
                user_id=user_id,
                forecast=normalized_value.as_dict(),
            )
        except SQLAlchemyError as e:
            raise SubmissionError(f"failed to store forecast: {e.__class__.__name__}") from e

    async def submit_forecast(
        self,
        question_id: str,
        user_id: str,
        normalized_value: NormalizedForecast,
    ) -> SubmissionResult:
        try:
            await self._write(question_id, user_id, normalized_value)
        except SubmissionError as e:
            logger.error({
                "event": "submission_failed",
                "question_id": question_id,
                "user_id": user_id,
                "error": str(e),
                "cause": str(e.__cause__),
            })
            return SubmissionResult(success=False, error=str(e))

        logger.info({
            "event": "forecast_submitted",
            "question_id": question_id,
            "user_id": user_id,
            "kind": normalized_value.kind.value,
        })
        return SubmissionResult(success=True)


class ReadOnlySubmissionSink:
    """Sink for snapshots that cannot be written back (JSON exports)."""

    async def submit_forecast(
        self,
        question_id: str,
        user_id: str,
        normalized_value: NormalizedForecast,
    ) -> SubmissionResult:
        return SubmissionResult(success=False, error="snapshot is read-only")


__all__ = [
    "SubmissionSink",
    "DatabaseSubmissionSink",
    "ReadOnlySubmissionSink",
]
