"""Tests for forecast submission validation."""

from __future__ import annotations

from decimal import Decimal

import pytest

from builders import binary_question, category_question, choice_question
from econcast.scoring.normalizer import BinaryForecast, ThreeCategoryForecast
from econcast.scoring.params import ScoringParams, SubmissionParams
from econcast.scoring.types import ValidationError
from econcast.scoring.validation import (
    SubmissionValidator,
    default_forecast,
    validate_forecast_submission,
    validate_submission_safe,
)


@pytest.fixture
def validator():
    """Create a validator instance."""
    return SubmissionValidator()


@pytest.fixture
def open_bin():
    return binary_question(resolved=False)


@pytest.fixture
def open_cat():
    return category_question(resolved=False)


@pytest.fixture
def open_mc():
    return choice_question(resolved=False)


class TestValidatePercent:
    """Tests for single percentage validation."""

    def test_valid(self, validator):
        assert validator.validate_percent(42) == Decimal("42")

    def test_string_converted(self, validator):
        assert validator.validate_percent("12.5") == Decimal("12.5")

    def test_below_zero(self, validator):
        with pytest.raises(ValidationError, match="< 0"):
            validator.validate_percent(-1)

    def test_above_hundred(self, validator):
        with pytest.raises(ValidationError, match="> 100"):
            validator.validate_percent(100.5)

    def test_nan(self, validator):
        with pytest.raises(ValidationError, match="NaN"):
            validator.validate_percent(float("nan"))

    def test_infinite(self, validator):
        with pytest.raises(ValidationError, match="infinite"):
            validator.validate_percent(float("inf"))

    def test_non_numeric(self, validator):
        with pytest.raises(ValidationError, match="Cannot convert"):
            validator.validate_percent("lots")


class TestValidateBinary:
    def test_valid_returns_normalized(self, validator, open_bin):
        assert validator.validate(open_bin, {"probability": 65}) == BinaryForecast(65.0)

    def test_missing_probability(self, validator, open_bin):
        with pytest.raises(ValidationError, match="requires probability"):
            validator.validate(open_bin, {})

    def test_no_sum_constraint(self, validator, open_bin):
        validator.validate(open_bin, {"probability": 3})


class TestValidateThreeCategory:
    """Category vectors must sum to 100."""

    def test_valid(self, validator, open_cat):
        result = validator.validate(open_cat, {"increase": 30, "unchanged": 40, "decrease": 30})
        assert result == ThreeCategoryForecast(30.0, 40.0, 30.0)

    def test_label_keys_accepted(self, validator, open_cat):
        result = validator.validate(open_cat, {"Increase": 20, "Remain Unchanged": 60, "Decrease": 20})
        assert result.unchanged == 60.0

    def test_sum_not_hundred(self, validator, open_cat):
        with pytest.raises(ValidationError, match="sum to 90"):
            validator.validate(open_cat, {"increase": 30, "unchanged": 30, "decrease": 30})

    def test_decimal_fractions_sum_exactly(self, validator, open_cat):
        validator.validate(open_cat, {"increase": 33.3, "unchanged": 33.4, "decrease": 33.3})

    def test_near_hundred_rejected(self, validator, open_cat):
        """Totals are exact: 99.9999996 is not 100."""
        value = {"increase": 33.3333333, "unchanged": 33.3333333, "decrease": 33.333333}
        with pytest.raises(ValidationError, match="sum to 99.9999996"):
            validator.validate(open_cat, value)
        assert not validate_forecast_submission(open_cat, value).valid

    def test_tolerance_is_opt_in(self, open_cat):
        params = ScoringParams(submission=SubmissionParams(sum_tolerance=Decimal("0.000001")))
        value = {"increase": 33.3333333, "unchanged": 33.3333333, "decrease": 33.333333}
        SubmissionValidator(params).validate(open_cat, value)

    def test_unknown_key(self, validator, open_cat):
        with pytest.raises(ValidationError, match="unknown category"):
            validator.validate(open_cat, {"increase": 50, "sideways": 50})

    def test_accepted_forecasts_sum_to_hundred(self, validator, open_cat):
        """Every accepted category forecast normalizes to a total of 100."""
        for inc in range(0, 101, 7):
            for unc in range(0, 101 - inc, 11):
                value = {"increase": inc, "unchanged": unc, "decrease": 100 - inc - unc}
                result = validator.validate(open_cat, value)
                assert sum(result.as_dict().values()) == 100


class TestValidateMultipleChoice:
    def test_valid(self, validator, open_mc):
        result = validator.validate(open_mc, {"Technology": 50, "Healthcare": 50})
        assert result.as_dict() == {"Technology": 50.0, "Healthcare": 50.0, "Energy": 0.0}

    def test_unknown_option(self, validator, open_mc):
        with pytest.raises(ValidationError, match="unknown options: Retail"):
            validator.validate(open_mc, {"Technology": 50, "Retail": 50})

    def test_sum_not_hundred(self, validator, open_mc):
        with pytest.raises(ValidationError, match="expected 100"):
            validator.validate(open_mc, {"Technology": 50, "Energy": 20})


class TestRejections:
    def test_resolved_question_rejected(self, validator):
        with pytest.raises(ValidationError, match="already resolved"):
            validator.validate(binary_question(), {"probability": 50})

    def test_resolved_allowed_when_configured(self):
        params = ScoringParams(submission=SubmissionParams(reject_resolved=False))
        SubmissionValidator(params).validate(binary_question(), {"probability": 50})

    def test_non_mapping(self, validator, open_bin):
        with pytest.raises(ValidationError, match="must be a mapping"):
            validator.validate(open_bin, 50)


class TestValidateForecastSubmission:
    """Non-raising wrappers."""

    def test_valid(self, open_cat):
        check = validate_forecast_submission(open_cat, {"increase": 30, "unchanged": 40, "decrease": 30})
        assert check.valid is True
        assert check.reason is None

    def test_invalid_reason(self, open_cat):
        check = validate_forecast_submission(open_cat, {"increase": 30, "unchanged": 40, "decrease": 20})
        assert check.valid is False
        assert "expected 100" in check.reason

    def test_accepts_raw_question_row(self):
        row = {"id": "q9", "type": "multiple-choice", "options": ["A", "B"], "isResolved": False}
        assert validate_forecast_submission(row, {"A": 100}).valid

    def test_safe_wrapper(self, open_bin):
        value, error = validate_submission_safe(open_bin, {"probability": "nan"})
        assert value is None
        assert "NaN" in error

        value, error = validate_submission_safe(open_bin, {"probability": 20})
        assert value == BinaryForecast(20.0)
        assert error is None


class TestDefaultForecast:
    def test_binary(self, open_bin):
        assert default_forecast(open_bin) == {"probability": 50}

    def test_three_category(self, open_cat):
        assert default_forecast(open_cat) == {"increase": 33, "unchanged": 34, "decrease": 33}

    def test_multiple_choice_even_split(self, open_mc):
        assert default_forecast(open_mc) == {"Technology": 34, "Healthcare": 33, "Energy": 33}

    def test_defaults_are_valid(self, validator, open_bin, open_cat, open_mc):
        for q in (open_bin, open_cat, open_mc):
            validator.validate(q, default_forecast(q))
