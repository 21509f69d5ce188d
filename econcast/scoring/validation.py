"""Input validation for forecast submissions.

All validation happens BEFORE a forecast reaches the submission sink.
Rejected submissions are reported back to the caller, never written.

Rejects:
- Non-numeric, NaN, infinite values
- Percentages outside [0, 100]
- Category/choice vectors that do not sum to 100
- Unknown multiple-choice options and unknown category keys
- A binary forecast without ``probability``
- New forecasts on an already resolved question
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Tuple

from econcast.shared.enums import QuestionType
from econcast.shared.probability import PERCENT_TOTAL, even_split

from .determinism import to_decimal
from .normalizer import (
    CATEGORY_KEYS,
    BinaryForecast,
    NormalizedForecast,
    normalize,
    resolve_category_key,
)
from .params import ScoringParams, get_scoring_params
from .types import Question, SubmissionCheck, ValidationError, coerce_questions

_ZERO = Decimal("0")
_HUNDRED = Decimal(str(int(PERCENT_TOTAL)))


class SubmissionValidator:
    """Validate forecast submissions.

    All validation is stateless and deterministic.
    """

    def __init__(self, params: ScoringParams | None = None):
        self.params = params or get_scoring_params()
        self.bounds = self.params.submission

    def validate_percent(self, value: object, name: str = "probability") -> Decimal:
        """Validate one percentage and convert it to Decimal.

        Raises:
            ValidationError: If the value is not a finite number in [0, 100]
        """
        d = to_decimal(value, name)
        if d < _ZERO:
            raise ValidationError(f"{name} {d} < 0")
        if d > _HUNDRED:
            raise ValidationError(f"{name} {d} > 100")
        return d

    def validate_total(self, values: Mapping[str, Decimal]) -> Decimal:
        """Check that a category/choice vector sums to 100.

        Returns:
            The exact decimal total
        """
        total = sum(values.values(), _ZERO)
        deviation = abs(total - _HUNDRED)
        if deviation > self.bounds.sum_tolerance:
            raise ValidationError(f"probabilities sum to {total}, expected 100")
        return total

    def _validate_binary(self, value: Mapping[str, Any]) -> None:
        if "probability" not in value or value["probability"] is None:
            raise ValidationError("binary forecast requires probability")
        self.validate_percent(value["probability"], "probability")

    def _validate_three_category(self, value: Mapping[str, Any], question: Question) -> None:
        exact: Dict[str, Decimal] = {}
        aliased: Dict[str, Decimal] = {}
        for raw_key, raw_value in value.items():
            key = resolve_category_key(raw_key, question.categories)
            if key is None:
                raise ValidationError(f"unknown category: {raw_key!r}")
            d = self.validate_percent(raw_value, str(raw_key))
            if str(raw_key) == key:
                exact[key] = d
            else:
                aliased.setdefault(key, d)
        merged = {**aliased, **exact}
        self.validate_total({k: merged.get(k, _ZERO) for k in CATEGORY_KEYS})

    def _validate_multiple_choice(self, value: Mapping[str, Any], question: Question) -> None:
        options = list(question.options or [])
        if not options:
            raise ValidationError("question has no options")
        unknown = [k for k in value if k not in options]
        if unknown:
            raise ValidationError(f"unknown options: {', '.join(map(str, unknown))}")
        self.validate_total(
            {opt: self.validate_percent(value[opt], opt) for opt in options if opt in value}
        )

    def validate(self, question: Question, value: object) -> NormalizedForecast:
        """Validate a raw forecast value for ``question``.

        Args:
            question: Target question
            value: Raw forecast mapping as entered by the user

        Returns:
            The normalized forecast, ready for the submission sink

        Raises:
            ValidationError: If the submission must be rejected
        """
        if question.is_resolved and self.bounds.reject_resolved:
            raise ValidationError("question is already resolved")
        if not isinstance(value, Mapping):
            raise ValidationError(f"forecast must be a mapping, got {type(value).__name__}")

        if question.type == QuestionType.BINARY:
            self._validate_binary(value)
        elif question.type == QuestionType.THREE_CATEGORY:
            self._validate_three_category(value, question)
        else:
            self._validate_multiple_choice(value, question)

        return normalize(value, question)


def validate_forecast_submission(
    question: Any,
    forecast_value: object,
    params: ScoringParams | None = None,
) -> SubmissionCheck:
    """Check a submission without raising.

    Returns:
        SubmissionCheck(valid=True) or SubmissionCheck(valid=False, reason=...)
    """
    q = coerce_questions([question])[0]
    try:
        SubmissionValidator(params).validate(q, forecast_value)
    except ValidationError as e:
        return SubmissionCheck(valid=False, reason=str(e))
    return SubmissionCheck(valid=True)


def validate_submission_safe(
    question: Question,
    forecast_value: object,
    validator: SubmissionValidator | None = None,
) -> Tuple[NormalizedForecast | None, str | None]:
    """Safely validate a submission, returning None on failure.

    Returns:
        (normalized_forecast, error_message) - one will be None
    """
    if validator is None:
        validator = SubmissionValidator()

    try:
        return validator.validate(question, forecast_value), None
    except ValidationError as e:
        return None, str(e)


def default_forecast(question: Any) -> Dict[str, Any]:
    """Starting value shown for a question the user has not forecast yet.

    binary 50; three-category 33/34/33; multiple choice an even integer split
    with the remainder on the first option.
    """
    q = coerce_questions([question])[0]
    if q.type == QuestionType.BINARY:
        return BinaryForecast(probability=50).as_dict()
    if q.type == QuestionType.THREE_CATEGORY:
        return {"increase": 33, "unchanged": 34, "decrease": 33}
    return even_split(q.options or [])


__all__ = [
    "SubmissionValidator",
    "validate_forecast_submission",
    "validate_submission_safe",
    "default_forecast",
]
