from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, List, Optional, TypedDict


class QuestionRow(TypedDict, total=False):
    id: str
    title: str
    description: str
    type: str
    categories: Optional[List[str]]
    options: Optional[List[str]]
    created_date: Optional[date]
    close_date: Optional[date]
    is_resolved: bool
    resolution: Any
    resolved_date: Optional[date]


class ForecastRow(TypedDict, total=False):
    question_id: str
    user_id: str
    forecast: Dict[str, Any]
    created_at: datetime
    updated_at: Optional[datetime]


class UserRow(TypedDict, total=False):
    id: str
    name: Optional[str]
    email: Optional[str]
    role: str


__all__ = [
    "QuestionRow",
    "ForecastRow",
    "UserRow",
]
