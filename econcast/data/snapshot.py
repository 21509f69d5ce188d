"""Snapshot sources: read questions, forecast histories and users in one shot.

Loading never raises to the caller. A table that cannot be read contributes
nothing and a row that fails to parse is skipped; both are logged and listed
in ``Snapshot.errors`` so the leaderboard still renders from what was read.

Questions whose close date has passed are treated as resolved on load
(resolved_date = close_date). The database source also persists that flag.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Tuple, TypeVar

import pydantic
from sqlalchemy.exc import SQLAlchemyError

from econcast.database import DBM
from econcast.database import repository as repo
from econcast.scoring.types import ForecastRecord, Question, SnapshotError, User

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the store at one point in time."""

    questions: Tuple[Question, ...] = ()
    forecasts: Tuple[ForecastRecord, ...] = ()
    users: Tuple[User, ...] = ()
    loaded_at: Optional[datetime] = None
    errors: Tuple[str, ...] = field(default=())

    @property
    def degraded(self) -> bool:
        return bool(self.errors)

    def question(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class SnapshotSource(Protocol):
    async def load(self) -> Snapshot:
        ...


# ─────────────────────────────────────────────────────────────────────────────
# Shared loading steps
# ─────────────────────────────────────────────────────────────────────────────


def auto_resolve_expired(
    questions: Iterable[Question],
    today: date,
) -> Tuple[List[Question], List[str]]:
    """Mark unresolved questions with ``close_date <= today`` as resolved.

    Returns:
        (questions, ids_resolved_now)
    """
    out: List[Question] = []
    resolved_now: List[str] = []
    for q in questions:
        if not q.is_resolved and q.close_date is not None and q.close_date <= today:
            q = q.model_copy(update={"is_resolved": True, "resolved_date": q.close_date})
            resolved_now.append(q.id)
        out.append(q)
    return out, resolved_now


def sort_by_close_date(questions: Iterable[Question]) -> List[Question]:
    """Ascending close date, undated questions last, stable otherwise."""
    return sorted(questions, key=lambda q: (q.close_date is None, q.close_date or date.min))


def parse_rows(
    rows: Iterable[Any],
    model: Callable[[Any], T],
    kind: str,
    errors: List[str],
) -> List[T]:
    """Validate raw rows, skipping (and recording) the ones that do not parse."""
    parsed: List[T] = []
    for i, row in enumerate(rows):
        try:
            parsed.append(model(row))
        except pydantic.ValidationError as e:
            message = f"{kind}[{i}]: {e.error_count()} validation error(s)"
            logger.warning({"event": "snapshot_row_skipped", "kind": kind, "index": i, "error": str(e)})
            errors.append(message)
    return parsed


def _merge_current(
    history: Sequence[ForecastRecord],
    current: Sequence[ForecastRecord],
) -> List[ForecastRecord]:
    """History plus current forecasts for pairs the history has never seen."""
    seen = {(f.user_id, f.question_id) for f in history}
    return list(history) + [f for f in current if (f.user_id, f.question_id) not in seen]


# ─────────────────────────────────────────────────────────────────────────────
# Sources
# ─────────────────────────────────────────────────────────────────────────────


class DatabaseSnapshotSource:
    """Snapshot source over the SQLite store."""

    def __init__(
        self,
        dbm: DBM,
        *,
        auto_resolve: bool = True,
        persist_auto_resolve: bool = True,
        today: Callable[[], date] = _utc_today,
    ):
        self.dbm = dbm
        self.auto_resolve = auto_resolve
        self.persist_auto_resolve = persist_auto_resolve
        self.today = today

    async def _read(self, name: str, reader: Callable[[DBM], Any], errors: List[str]) -> List[Any]:
        try:
            return await reader(self.dbm)
        except SQLAlchemyError as e:
            logger.error({"event": "snapshot_read_failed", "table": name, "error": str(e)})
            errors.append(f"{name}: {e.__class__.__name__}")
            return []

    async def _persist_resolved(self, questions: Sequence[Question], ids: Sequence[str], errors: List[str]) -> None:
        by_id = {q.id: q for q in questions}
        for question_id in ids:
            resolved_date = by_id[question_id].resolved_date
            try:
                await repo.mark_resolved(self.dbm, question_id=question_id, resolved_date=resolved_date)
            except SQLAlchemyError as e:
                logger.error({"event": "auto_resolve_persist_failed", "question_id": question_id, "error": str(e)})
                errors.append(f"auto_resolve[{question_id}]: {e.__class__.__name__}")

    async def load(self) -> Snapshot:
        errors: List[str] = []

        question_rows = await self._read("question", repo.list_questions, errors)
        history_rows = await self._read("forecast_history", repo.list_forecast_history, errors)
        current_rows = await self._read("forecast", repo.list_current_forecasts, errors)
        user_rows = await self._read("app_user", repo.list_users, errors)

        questions = parse_rows(question_rows, Question.model_validate, "question", errors)
        forecasts = _merge_current(
            parse_rows(history_rows, ForecastRecord.model_validate, "forecast_history", errors),
            parse_rows(current_rows, ForecastRecord.model_validate, "forecast", errors),
        )
        users = parse_rows(user_rows, User.model_validate, "user", errors)

        if self.auto_resolve:
            questions, resolved_now = auto_resolve_expired(questions, self.today())
            if resolved_now:
                logger.info({"event": "questions_auto_resolved", "question_ids": resolved_now})
                if self.persist_auto_resolve:
                    await self._persist_resolved(questions, resolved_now, errors)

        snapshot = Snapshot(
            questions=tuple(sort_by_close_date(questions)),
            forecasts=tuple(forecasts),
            users=tuple(users),
            loaded_at=datetime.now(timezone.utc),
            errors=tuple(errors),
        )
        logger.info({
            "event": "snapshot_loaded",
            "source": "database",
            "n_questions": len(snapshot.questions),
            "n_forecasts": len(snapshot.forecasts),
            "n_users": len(snapshot.users),
            "degraded": snapshot.degraded,
        })
        return snapshot


class JsonSnapshotSource:
    """Snapshot source over an exported JSON file.

    Expected shape: ``{"questions": [...], "forecasts": [...], "users": [...]}``
    with snake_case or camelCase row keys.
    """

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        auto_resolve: bool = True,
        today: Callable[[], date] = _utc_today,
    ):
        self.path = path
        self.auto_resolve = auto_resolve
        self.today = today

    def _read_file(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"cannot read snapshot {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise SnapshotError(f"snapshot {self.path} must contain an object")
        return data

    async def load(self) -> Snapshot:
        errors: List[str] = []
        try:
            data = await asyncio.to_thread(self._read_file)
        except SnapshotError as e:
            logger.error({"event": "snapshot_read_failed", "source": str(self.path), "error": str(e)})
            return Snapshot(loaded_at=datetime.now(timezone.utc), errors=(str(e),))

        questions = parse_rows(data.get("questions") or [], Question.model_validate, "question", errors)
        forecasts = parse_rows(data.get("forecasts") or [], ForecastRecord.model_validate, "forecast", errors)
        users = parse_rows(data.get("users") or [], User.model_validate, "user", errors)

        if self.auto_resolve:
            questions, _ = auto_resolve_expired(questions, self.today())

        return Snapshot(
            questions=tuple(sort_by_close_date(questions)),
            forecasts=tuple(forecasts),
            users=tuple(users),
            loaded_at=datetime.now(timezone.utc),
            errors=tuple(errors),
        )


__all__ = [
    "Snapshot",
    "SnapshotSource",
    "DatabaseSnapshotSource",
    "JsonSnapshotSource",
    "auto_resolve_expired",
    "sort_by_close_date",
    "parse_rows",
]
