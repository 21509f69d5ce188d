"""Tests for snapshot models."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from econcast.scoring.types import ForecastRecord, Question, User, coerce_questions
from econcast.shared.enums import QuestionType, UserRole


class TestQuestion:
    def test_camel_case_row(self):
        q = Question.model_validate({
            "id": 3,
            "type": "multiple-choice",
            "options": ["A", "B"],
            "closeDate": "2025-06-20",
            "isResolved": True,
            "resolution": "A",
            "resolvedDate": "2025-06-21T10:00:00Z",
        })
        assert q.id == "3"
        assert q.type is QuestionType.MULTIPLE_CHOICE
        assert q.close_date == date(2025, 6, 20)
        assert q.resolved_date == date(2025, 6, 21)
        assert q.is_resolved

    def test_snake_case_row(self):
        q = Question.model_validate({"id": "q", "type": "three_category", "close_date": None, "is_resolved": False})
        assert q.type is QuestionType.THREE_CATEGORY
        assert q.close_date is None

    def test_unknown_type_rejected(self):
        with pytest.raises(PydanticValidationError):
            Question.model_validate({"id": "q", "type": "numeric"})

    def test_coerce_keeps_models(self):
        q = Question(id="q", type=QuestionType.BINARY)
        assert coerce_questions([q])[0] is q


class TestForecastRecord:
    def test_naive_timestamp_is_utc(self):
        f = ForecastRecord.model_validate({
            "question_id": 1,
            "user_id": 2,
            "forecast": {"probability": 10},
            "created_at": datetime(2025, 6, 1, 12, 0),
        })
        assert f.created_at.utcoffset() == timedelta(0)
        assert f.question_id == "1"

    def test_timestamp_falls_back_to_updated_at(self):
        ts = datetime(2025, 6, 2, tzinfo=timezone.utc)
        f = ForecastRecord(question_id="q", user_id="u", updated_at=ts)
        assert f.timestamp == ts

    def test_null_forecast_is_empty(self):
        f = ForecastRecord.model_validate({"questionId": "q", "userId": "u", "forecast": None})
        assert f.forecast == {}


class TestUser:
    def test_display_name(self):
        assert User(id="u1", name="Ann").display_name == "Ann"
        assert User(id="u1", email="a@x.org").display_name == "a@x.org"
        assert User(id="u1").display_name == "u1"

    def test_role(self):
        assert User(id="u1", role="admin").role is UserRole.ADMIN
