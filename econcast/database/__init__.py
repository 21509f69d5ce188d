from .dbm import DBM, build_sqlite_url
from .repository import (
    list_current_forecasts,
    list_forecast_history,
    list_questions,
    list_users,
    mark_resolved,
    upsert_forecast,
    upsert_question,
    upsert_user,
)

__all__ = [
    "DBM",
    "build_sqlite_url",
    "list_questions",
    "list_forecast_history",
    "list_current_forecasts",
    "list_users",
    "upsert_question",
    "upsert_user",
    "mark_resolved",
    "upsert_forecast",
]
