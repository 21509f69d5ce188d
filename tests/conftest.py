from __future__ import annotations

import pytest

from builders import binary_question, category_question, choice_question
from econcast.scoring.types import Question


@pytest.fixture
def bin_q() -> Question:
    return binary_question()


@pytest.fixture
def cat_q() -> Question:
    return category_question()


@pytest.fixture
def mc_q() -> Question:
    return choice_question()
