"""Forecast normalization.

Raw forecast values are plain mappings whose keys depend on the question
type. This module resolves them once into a tagged union so that the score
function and the ranker never re-interpret raw keys:

- ``BinaryForecast``          {probability}
- ``ThreeCategoryForecast``   {increase, unchanged, decrease}
- ``MultipleChoiceForecast``  {<option label>: pct, ...} in question option order

Category labels are admin-editable free text ("Remain Unchanged", "No Change"),
so the alias table below is the only place where label variability is
absorbed. Normalization is pure: inputs are never mutated and missing or
non-numeric values degrade to 0 instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple, Union

from econcast.shared.enums import CategoryKey, QuestionType
from econcast.shared.probability import coerce_percent

from .types import Question


CATEGORY_KEYS: Tuple[str, ...] = (
    CategoryKey.INCREASE.value,
    CategoryKey.UNCHANGED.value,
    CategoryKey.DECREASE.value,
)

# Lower-cased synonym -> canonical category key
CATEGORY_ALIASES: Dict[str, str] = {
    "increase": "increase",
    "increases": "increase",
    "up": "increase",
    "rise": "increase",
    "higher": "increase",
    "unchanged": "unchanged",
    "remain unchanged": "unchanged",
    "remains unchanged": "unchanged",
    "no change": "unchanged",
    "same": "unchanged",
    "flat": "unchanged",
    "decrease": "decrease",
    "decreases": "decrease",
    "down": "decrease",
    "fall": "decrease",
    "lower": "decrease",
}

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0", ""}


# ─────────────────────────────────────────────────────────────────────────────
# Normalized forecast values
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class BinaryForecast:
    probability: float = 0.0

    kind: ClassVar[QuestionType] = QuestionType.BINARY

    def keys(self) -> Tuple[str, ...]:
        return ("probability",)

    def as_dict(self) -> Dict[str, float]:
        return {"probability": self.probability}


@dataclass(frozen=True)
class ThreeCategoryForecast:
    increase: float = 0.0
    unchanged: float = 0.0
    decrease: float = 0.0

    kind: ClassVar[QuestionType] = QuestionType.THREE_CATEGORY

    def keys(self) -> Tuple[str, ...]:
        return CATEGORY_KEYS

    def as_dict(self) -> Dict[str, float]:
        return {
            "increase": self.increase,
            "unchanged": self.unchanged,
            "decrease": self.decrease,
        }


@dataclass(frozen=True)
class MultipleChoiceForecast:
    values: Dict[str, float] = field(default_factory=dict)

    kind: ClassVar[QuestionType] = QuestionType.MULTIPLE_CHOICE

    def keys(self) -> Tuple[str, ...]:
        return tuple(self.values.keys())

    def as_dict(self) -> Dict[str, float]:
        return dict(self.values)


NormalizedForecast = Union[BinaryForecast, ThreeCategoryForecast, MultipleChoiceForecast]

_NORMALIZED_TYPES = (BinaryForecast, ThreeCategoryForecast, MultipleChoiceForecast)


# ─────────────────────────────────────────────────────────────────────────────
# Key resolution
# ─────────────────────────────────────────────────────────────────────────────


def resolve_category_key(
    raw_key: Any,
    categories: Optional[Sequence[str]] = None,
) -> Optional[str]:
    """Map a raw three-category key or label onto its canonical key.

    Resolution order: canonical key, any key containing "unchanged", the
    question's own labels (positional: increase, unchanged, decrease), then the
    static alias table. Returns None when nothing matches.
    """
    if raw_key is None:
        return None
    text = str(raw_key).strip().lower()
    if text in CATEGORY_KEYS:
        return text
    if "unchanged" in text:
        return CategoryKey.UNCHANGED.value
    if categories:
        for idx, label in enumerate(list(categories)[: len(CATEGORY_KEYS)]):
            if str(label).strip().lower() == text:
                return CATEGORY_KEYS[idx]
    return CATEGORY_ALIASES.get(text)


def canonical_keys(question: Question) -> Tuple[str, ...]:
    """Scoring keys of a question in canonical order."""
    if question.type == QuestionType.BINARY:
        return ("probability",)
    if question.type == QuestionType.THREE_CATEGORY:
        return CATEGORY_KEYS
    return tuple(question.options or ())


# ─────────────────────────────────────────────────────────────────────────────
# Normalization
# ─────────────────────────────────────────────────────────────────────────────


def _normalize_three_category(
    forecast: Mapping[str, Any],
    categories: Optional[Sequence[str]],
) -> ThreeCategoryForecast:
    exact: Dict[str, float] = {}
    aliased: Dict[str, float] = {}
    for raw_key, raw_value in forecast.items():
        key = resolve_category_key(raw_key, categories)
        if key is None:
            continue
        if str(raw_key) == key:
            exact[key] = coerce_percent(raw_value)
        else:
            aliased.setdefault(key, coerce_percent(raw_value))
    merged = {**aliased, **exact}
    return ThreeCategoryForecast(
        increase=merged.get("increase", 0.0),
        unchanged=merged.get("unchanged", 0.0),
        decrease=merged.get("decrease", 0.0),
    )


def normalize(forecast: Any, question: Question) -> NormalizedForecast:
    """Canonicalize a raw forecast value for ``question``.

    Already-normalized values of the matching kind are returned unchanged.
    """
    if isinstance(forecast, _NORMALIZED_TYPES) and forecast.kind == question.type:
        return forecast
    if isinstance(forecast, _NORMALIZED_TYPES):
        forecast = forecast.as_dict()
    raw: Mapping[str, Any] = forecast if isinstance(forecast, Mapping) else {}

    if question.type == QuestionType.BINARY:
        return BinaryForecast(probability=coerce_percent(raw.get("probability")))

    if question.type == QuestionType.THREE_CATEGORY:
        return _normalize_three_category(raw, question.categories)

    return MultipleChoiceForecast(
        values={opt: coerce_percent(raw.get(opt)) for opt in (question.options or [])}
    )


def normalize_resolution(question: Question) -> Any:
    """Canonicalize a question's resolution through the same key tables.

    Binary resolutions become booleans, or None when missing or unreadable
    (scored as NO, never counted correct). Category resolutions map through the
    alias table; choice resolutions match options exactly, then ignoring case.
    Values matching nothing are returned unchanged so the scorer can treat
    them as "no outcome wins".
    """
    resolution = question.resolution
    if question.type == QuestionType.BINARY:
        if isinstance(resolution, str):
            text = resolution.strip().lower()
            if text in _TRUE_STRINGS:
                return True
            if text in _FALSE_STRINGS:
                return False
            return None
        if resolution is None:
            return None
        return bool(resolution)

    if question.type == QuestionType.THREE_CATEGORY:
        key = resolve_category_key(resolution, question.categories)
        return key if key is not None else resolution

    options = list(question.options or [])
    if resolution in options:
        return resolution
    if isinstance(resolution, str):
        lowered = resolution.strip().lower()
        for opt in options:
            if opt.strip().lower() == lowered:
                return opt
    return resolution


__all__ = [
    "CATEGORY_KEYS",
    "CATEGORY_ALIASES",
    "BinaryForecast",
    "ThreeCategoryForecast",
    "MultipleChoiceForecast",
    "NormalizedForecast",
    "resolve_category_key",
    "canonical_keys",
    "normalize",
    "normalize_resolution",
]
