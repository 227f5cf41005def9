"""
Suggestion output model.

A ``Suggestion`` proposes one value for one ``BusinessProfile`` field, with a
confidence in ``(0, 1]``, a human-readable reason, and a provenance tag.

The model validator is the single place the confidence bound is enforced:
rules build suggestions through the constructor, so an out-of-range value
fails at construction instead of leaking to callers.  The model is frozen;
modifiers derive adjusted copies with ``model_copy(update=...)`` followed by
``Suggestion.model_validate`` to re-run the checks.
"""

from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, field_validator

from listing_insights.models.profile import BusinessProfile
from listing_insights.taxonomy.business_taxonomy import SuggestionSource

SuggestionValue = Union[int, float, str, list[str]]

MIN_CONFIDENCE_EXCLUSIVE = 0.0
MAX_CONFIDENCE = 1.0


class Suggestion(BaseModel):
    """A proposed value for one profile field.

    Attributes:
        field: ``BusinessProfile`` attribute name (camelCase aliases accepted).
        value: Proposed value: a number, text, or a list of strings.
        confidence: Strictly greater than 0 and at most 1.
        reason: Non-empty explanation shown next to the hint.
        source: Provenance tag (see ``SuggestionSource``).
    """

    model_config = ConfigDict(frozen=True)

    field: str
    value: SuggestionValue
    confidence: float
    reason: str
    source: SuggestionSource

    @field_validator("field")
    @classmethod
    def validate_field(cls, v: str) -> str:
        return BusinessProfile.resolve_field(v)

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not MIN_CONFIDENCE_EXCLUSIVE < v <= MAX_CONFIDENCE:
            raise ValueError(f"confidence must be in (0.0, 1.0], got {v}.")
        return v

    @field_validator("reason")
    @classmethod
    def validate_reason_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("reason must not be empty.")
        return v.strip()

    @property
    def key(self) -> str:
        """Dismissal key: ``field-value-source``.

        ``field`` is the snake_case name and list values are joined with
        ``","``, so keys are stable across calls for a given suggestion.
        """
        if isinstance(self.value, list):
            rendered = ",".join(self.value)
        else:
            rendered = _render_scalar(self.value)
        return f"{self.field}-{rendered}-{self.source.value}"


def _render_scalar(value: int | float | str) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
