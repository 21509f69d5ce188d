"""Tables read by the snapshot loader and written by the submission sink."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import JSON, Boolean, Column, Date, DateTime, Integer, String, Text, UniqueConstraint

from .base import Base


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class Question(Base):
    """Admin-authored forecasting question."""
    __tablename__ = "question"

    id = Column(String(64), primary_key=True)
    title = Column(String(255), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    type = Column(String(32), nullable=False)  # binary | three_category | multiple_choice
    categories = Column(JSON, nullable=True)
    options = Column(JSON, nullable=True)
    created_date = Column(Date, nullable=True)
    close_date = Column(Date, nullable=True, index=True)
    is_resolved = Column(Boolean, nullable=False, default=False)
    resolution = Column(JSON, nullable=True)
    resolved_date = Column(Date, nullable=True)


class Forecast(Base):
    """Current forecast of a user for a question (one row per pair)."""
    __tablename__ = "forecast"
    __table_args__ = (
        UniqueConstraint("user_id", "question_id", name="uq_forecast_user_question"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    forecast = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)


class ForecastHistory(Base):
    """Append-only log of every accepted submission."""
    __tablename__ = "forecast_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(String(64), nullable=False, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    forecast = Column(JSON, nullable=False)
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)


class AppUser(Base):
    __tablename__ = "app_user"

    id = Column(String(64), primary_key=True)
    name = Column(String(128), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    role = Column(String(32), nullable=False, default="forecaster")
