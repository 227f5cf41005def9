"""
Suggestion engine: runs the registered rules over a profile and returns a
ranked, de-duplicated list of suggestions.

Usage flow
----------
1. coerce_profile(profile) / coerce_context(context)
   -> BusinessProfile, SuggestionContext  (mappings and None accepted)

2. resolve_context(profile, context)
   -> SuggestionContext with category / location / listing type filled in
      from the profile where the caller left them empty

3. SuggestionEngine.generate_suggestions(profile, context)
   -> list[Suggestion]  (rules → modifiers → drop populated fields →
      stable sort by confidence desc → first suggestion per field)

The engine never raises for malformed or empty data.  A rule that raises
``ValueError`` / ``TypeError`` / ``ArithmeticError`` (which includes a
``pydantic.ValidationError`` from an out-of-range confidence) is logged and
treated as abstaining.  Passing something that is neither a model, a mapping
nor ``None`` is a caller bug and raises ``TypeError``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence, Union

from listing_insights.benchmarks.tables import DEFAULT_BENCHMARKS, BenchmarkTables
from listing_insights.models.profile import (
    BusinessProfile,
    Location,
    SuggestionContext,
    coerce_context,
    coerce_profile,
)
from listing_insights.models.suggestion import Suggestion
from listing_insights.suggestions.rules import (
    DEFAULT_MODIFIERS,
    DEFAULT_RULES,
    SuggestionModifier,
    SuggestionRule,
)

logger = logging.getLogger(__name__)

ProfileInput = Union[BusinessProfile, Mapping[str, Any], None]
ContextInput = Union[SuggestionContext, Mapping[str, Any], None]

_RULE_ERRORS = (ValueError, TypeError, ArithmeticError)


def resolve_context(profile: BusinessProfile, context: SuggestionContext) -> SuggestionContext:
    """Fill empty context fields from the profile.

    Explicit context values always win; ``business_size`` is left alone (the
    rules derive it from revenue with the category's own thresholds).
    """
    updates: dict[str, Any] = {}
    if context.category is None and profile.category:
        updates["category"] = profile.category
    if context.listing_type is None and profile.listing_type:
        updates["listing_type"] = profile.listing_type
    if context.location.state is None and profile.state:
        updates["location"] = Location(
            city=context.location.city or profile.city,
            state=profile.state,
        )
    elif context.location.city is None and profile.city:
        updates["location"] = Location(city=profile.city, state=context.location.state)
    return context.model_copy(update=updates) if updates else context


def _name(func: Any) -> str:
    return getattr(func, "__name__", repr(func))


class SuggestionEngine:
    """Runs an ordered set of rules and modifiers against a profile.

    Args:
        benchmarks: Category benchmark tables passed to every rule.
        rules: Rules in registration order.
        modifiers: Modifiers applied, in order, to every emitted suggestion.
    """

    def __init__(
        self,
        benchmarks: BenchmarkTables = DEFAULT_BENCHMARKS,
        rules: Sequence[SuggestionRule] = DEFAULT_RULES,
        modifiers: Sequence[SuggestionModifier] = DEFAULT_MODIFIERS,
    ) -> None:
        self._benchmarks = benchmarks
        self._rules = tuple(rules)
        self._modifiers = tuple(modifiers)

    @property
    def benchmarks(self) -> BenchmarkTables:
        return self._benchmarks

    def generate_suggestions(
        self,
        profile: ProfileInput = None,
        context: ContextInput = None,
    ) -> list[Suggestion]:
        """Suggestions for every empty field, highest confidence first.

        Args:
            profile: Partially filled listing (model, mapping or ``None``).
            context: Out-of-band context (model, mapping or ``None``).

        Returns:
            At most one suggestion per field, none for populated fields,
            sorted by confidence descending with ties in rule order.
        """
        biz = coerce_profile(profile)
        ctx = resolve_context(biz, coerce_context(context))

        collected: list[Suggestion] = []
        for rule in self._rules:
            try:
                suggestion = rule(biz, ctx, self._benchmarks)
            except _RULE_ERRORS as exc:
                logger.warning("Suggestion rule %s skipped: %s", _name(rule), exc)
                continue
            if suggestion is None:
                continue
            collected.append(self._apply_modifiers(suggestion, biz, ctx))

        visible = [s for s in collected if not biz.is_field_populated(s.field)]
        ranked = sorted(visible, key=lambda s: s.confidence, reverse=True)

        seen: set[str] = set()
        result: list[Suggestion] = []
        for suggestion in ranked:
            if suggestion.field in seen:
                continue
            seen.add(suggestion.field)
            result.append(suggestion)

        logger.debug(
            "Generated %d suggestion(s) for %d populated field(s)",
            len(result), len(biz.populated_fields()),
        )
        return result

    def get_field_suggestions(
        self,
        field: str,
        profile: ProfileInput = None,
        context: ContextInput = None,
    ) -> list[Suggestion]:
        """``generate_suggestions`` restricted to one field.

        Raises:
            UnknownFieldError: If ``field`` is not a ``BusinessProfile`` field.
        """
        target = BusinessProfile.resolve_field(field)
        return [s for s in self.generate_suggestions(profile, context) if s.field == target]

    def _apply_modifiers(
        self,
        suggestion: Suggestion,
        profile: BusinessProfile,
        context: SuggestionContext,
    ) -> Suggestion:
        for modifier in self._modifiers:
            try:
                suggestion = modifier(suggestion, profile, context, self._benchmarks)
            except _RULE_ERRORS as exc:
                logger.warning("Suggestion modifier %s skipped: %s", _name(modifier), exc)
        return suggestion


_DEFAULT_ENGINE = SuggestionEngine()


def generate_suggestions(
    profile: ProfileInput = None,
    context: ContextInput = None,
    engine: Optional[SuggestionEngine] = None,
) -> list[Suggestion]:
    """Module-level shortcut for ``SuggestionEngine.generate_suggestions``."""
    return (engine or _DEFAULT_ENGINE).generate_suggestions(profile, context)


def get_field_suggestions(
    field: str,
    profile: ProfileInput = None,
    context: ContextInput = None,
    engine: Optional[SuggestionEngine] = None,
) -> list[Suggestion]:
    """Module-level shortcut for ``SuggestionEngine.get_field_suggestions``."""
    return (engine or _DEFAULT_ENGINE).get_field_suggestions(field, profile, context)
