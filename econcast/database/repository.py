from __future__ import annotations

import datetime as dt
from typing import Any, List, Mapping

from sqlalchemy import select, update
from sqlalchemy.dialects.sqlite import insert as sqlite_upsert

from econcast.shared.rows import ForecastRow, QuestionRow, UserRow

from .dbm import DBM
from .schema import AppUser, Forecast, ForecastHistory, Question


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


async def list_questions(dbm: DBM) -> List[QuestionRow]:
    """All questions, ordered by close date with undated questions last."""
    stmt = select(Question.__table__).order_by(
        Question.close_date.is_(None),
        Question.close_date.asc(),
    )
    rows = await dbm.read(stmt)
    return [dict(row) for row in rows]


async def list_forecast_history(dbm: DBM) -> List[ForecastRow]:
    """Every accepted submission, oldest first."""
    stmt = select(ForecastHistory.__table__).order_by(
        ForecastHistory.created_at.asc(),
        ForecastHistory.id.asc(),
    )
    rows = await dbm.read(stmt)
    return [dict(row) for row in rows]


async def list_current_forecasts(dbm: DBM) -> List[ForecastRow]:
    stmt = select(Forecast.__table__).order_by(Forecast.id.asc())
    rows = await dbm.read(stmt)
    return [dict(row) for row in rows]


async def list_users(dbm: DBM) -> List[UserRow]:
    stmt = select(AppUser.__table__).order_by(AppUser.id.asc())
    rows = await dbm.read(stmt)
    return [dict(row) for row in rows]


async def upsert_question(dbm: DBM, row: Mapping[str, Any]) -> None:
    values = dict(row)
    stmt = sqlite_upsert(Question).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[Question.id],  # type: ignore[arg-type]
        set_={k: v for k, v in values.items() if k != "id"},
    )
    async with dbm.session() as session:
        async with session.begin():
            await session.execute(stmt)


async def upsert_user(dbm: DBM, row: Mapping[str, Any]) -> None:
    values = dict(row)
    stmt = sqlite_upsert(AppUser).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[AppUser.id],  # type: ignore[arg-type]
        set_={k: v for k, v in values.items() if k != "id"},
    )
    async with dbm.session() as session:
        async with session.begin():
            await session.execute(stmt)


async def mark_resolved(
    dbm: DBM,
    *,
    question_id: str,
    resolved_date: dt.date,
) -> int:
    """Flag a question resolved without touching its resolution value."""
    stmt = (
        update(Question)
        .where(Question.id == question_id)
        .where(Question.is_resolved.is_(False))
        .values(is_resolved=True, resolved_date=resolved_date)
    )
    async with dbm.session() as session:
        async with session.begin():
            result = await session.execute(stmt)
            return result.rowcount or 0


async def upsert_forecast(
    dbm: DBM,
    *,
    question_id: str,
    user_id: str,
    forecast: Mapping[str, Any],
    now: dt.datetime | None = None,
) -> None:
    """Replace the current forecast of a user and append it to the history.

    Both writes share one transaction; concurrent submissions for the same
    pair resolve last-write-wins on the unique (user_id, question_id) key.
    """
    now = now or _utcnow()
    value = dict(forecast)
    stmt = sqlite_upsert(Forecast).values(
        question_id=question_id,
        user_id=user_id,
        forecast=value,
        created_at=now,
        updated_at=now,
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=[Forecast.user_id, Forecast.question_id],  # type: ignore[list-item]
        set_={
            "forecast": value,
            "updated_at": now,
        },
    )
    history = ForecastHistory.__table__.insert().values(
        question_id=question_id,
        user_id=user_id,
        forecast=value,
        created_at=now,
    )
    async with dbm.session() as session:
        async with session.begin():
            await session.execute(stmt)
            await session.execute(history)


__all__ = [
    "list_questions",
    "list_forecast_history",
    "list_current_forecasts",
    "list_users",
    "upsert_question",
    "upsert_user",
    "mark_resolved",
    "upsert_forecast",
]
