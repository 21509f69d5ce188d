from __future__ import annotations

from enum import Enum


class QuestionType(str, Enum):
    BINARY = "binary"
    THREE_CATEGORY = "three_category"
    MULTIPLE_CHOICE = "multiple_choice"

    @classmethod
    def parse(cls, value: object) -> "QuestionType":
        """Accept enum members and the hyphenated spellings used by stored rows."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        return cls(text)


class CategoryKey(str, Enum):
    INCREASE = "increase"
    UNCHANGED = "unchanged"
    DECREASE = "decrease"


class UserRole(str, Enum):
    ADMIN = "admin"
    FORECASTER = "forecaster"


__all__ = ["QuestionType", "CategoryKey", "UserRole"]
