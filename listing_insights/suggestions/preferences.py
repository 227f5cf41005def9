"""
Consumer-side preference layer for suggestions.

``SuggestionPreferences`` is the user's persisted filter (JSON round-trip via
``to_json`` / ``from_json``).  ``filter_suggestions`` applies it to engine
output.

``SuggestionSession`` is the only stateful piece of the package.  It models
an editing session on one listing form:

  submit(updates)      merge form edits, bump the revision, restart the
                       debounce timer
  is_due()             True once ``debounce_seconds`` of quiescence passed
  refresh(force=False) when due (or forced): run the engine and deliver
  deliver(rev, items)  accept results only for the latest revision
                       (last-write-wins; stale results are dropped)
  dismiss / apply      remove a suggestion; apply also writes the value
  update_preferences   change filters and schedule a refresh

The clock is injectable so tests can drive the debounce deterministically.
Nothing is cancelled: a superseded computation simply has its result
discarded by ``deliver``.
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from listing_insights.models.profile import (
    BusinessProfile,
    SuggestionContext,
    coerce_context,
    is_populated,
)
from listing_insights.models.suggestion import Suggestion
from listing_insights.suggestions.engine import SuggestionEngine
from listing_insights.taxonomy.business_taxonomy import SuggestionSource

if TYPE_CHECKING:
    from listing_insights.config import SuggestionConfig

logger = logging.getLogger(__name__)

AUTO_APPLY_THRESHOLD = 0.8
DEFAULT_DEBOUNCE_SECONDS = 0.5


class SuggestionPreferences(BaseModel):
    """User-controlled suggestion filters.

    Attributes:
        auto_apply_high_confidence: Write high-confidence suggestions into
            empty fields automatically.
        minimum_confidence: Suggestions below this are hidden.
        enabled_sources: Sources the user wants to see.
        dismissed_suggestions: ``Suggestion.key`` values the user dismissed.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    auto_apply_high_confidence: bool = False
    minimum_confidence: float = 0.3
    enabled_sources: frozenset[SuggestionSource] = frozenset(SuggestionSource)
    dismissed_suggestions: frozenset[str] = frozenset()

    @field_validator("minimum_confidence")
    @classmethod
    def validate_minimum_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"minimum_confidence must be in [0.0, 1.0], got {v}.")
        return v

    def with_dismissed(self, key: str) -> "SuggestionPreferences":
        return self.model_copy(update={"dismissed_suggestions": self.dismissed_suggestions | {key}})

    def to_json(self) -> str:
        """Serialize with camelCase keys, sets as sorted lists."""
        data = self.model_dump(mode="json", by_alias=True)
        data["enabledSources"] = sorted(data["enabledSources"])
        data["dismissedSuggestions"] = sorted(data["dismissedSuggestions"])
        return json.dumps(data, sort_keys=True)

    @classmethod
    def from_json(cls, raw: str) -> "SuggestionPreferences":
        return cls.model_validate_json(raw)


def filter_suggestions(
    suggestions: Iterable[Suggestion],
    preferences: SuggestionPreferences,
) -> list[Suggestion]:
    """Drop suggestions below the minimum confidence, from disabled sources,
    or previously dismissed.  Order is preserved."""
    return [
        s for s in suggestions
        if s.confidence >= preferences.minimum_confidence
        and s.source in preferences.enabled_sources
        and s.key not in preferences.dismissed_suggestions
    ]


class SuggestionSession:
    """Debounced, last-write-wins suggestion state for one listing form.

    Args:
        engine: Engine used by ``refresh``.
        preferences: Initial preferences.
        profile: Initial form values (snake_case or camelCase keys).
        context: Explicit context; derived from the form when ``None``.
        debounce_seconds: Quiescence required before ``is_due`` is True.
        auto_apply_threshold: Minimum confidence for auto-apply.
        clock: Monotonic time source in seconds.
    """

    def __init__(
        self,
        engine: Optional[SuggestionEngine] = None,
        preferences: Optional[SuggestionPreferences] = None,
        profile: Optional[Mapping[str, Any]] = None,
        context: Optional[SuggestionContext | Mapping[str, Any]] = None,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        auto_apply_threshold: float = AUTO_APPLY_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {debounce_seconds}.")
        self._engine = engine or SuggestionEngine()
        self._preferences = preferences or SuggestionPreferences()
        self._context = coerce_context(context) if context is not None else None
        self._debounce = debounce_seconds
        self._auto_apply_threshold = auto_apply_threshold
        self._clock = clock

        self._form: dict[str, Any] = {}
        self._revision = 0
        self._delivered_revision = 0
        self._last_change_at: Optional[float] = None
        self._pending = False
        self._suggestions: list[Suggestion] = []
        self._auto_applied: list[Suggestion] = []

        if profile:
            self.submit(profile)

    @classmethod
    def from_config(
        cls,
        config: "SuggestionConfig",
        engine: Optional[SuggestionEngine] = None,
        **kwargs: Any,
    ) -> "SuggestionSession":
        """Build a session whose defaults come from ``AppConfig.suggestions``."""
        preferences = SuggestionPreferences(
            minimum_confidence=config.minimum_confidence,
            enabled_sources=frozenset(SuggestionSource(s) for s in config.enabled_sources),
        )
        return cls(
            engine=engine,
            preferences=preferences,
            debounce_seconds=config.debounce_ms / 1000.0,
            auto_apply_threshold=config.auto_apply_threshold,
            **kwargs,
        )

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def delivered_revision(self) -> int:
        return self._delivered_revision

    @property
    def preferences(self) -> SuggestionPreferences:
        return self._preferences

    @property
    def suggestions(self) -> list[Suggestion]:
        return list(self._suggestions)

    @property
    def auto_applied(self) -> list[Suggestion]:
        """Suggestions written into the form by the last delivery."""
        return list(self._auto_applied)

    @property
    def profile(self) -> BusinessProfile:
        return BusinessProfile.model_validate(self._form)

    def context(self) -> SuggestionContext:
        return self._context or SuggestionContext.from_profile(self.profile)

    def suggestions_for_field(self, field: str) -> list[Suggestion]:
        target = BusinessProfile.resolve_field(field)
        return [s for s in self._suggestions if s.field == target]

    # ── Input ─────────────────────────────────────────────────────────────────

    def submit(self, updates: Mapping[str, Any]) -> int:
        """Merge form edits and restart the debounce window.

        Returns:
            The new revision number.

        Raises:
            UnknownFieldError: If a key is not a ``BusinessProfile`` field.
        """
        for name, value in updates.items():
            self._form[BusinessProfile.resolve_field(name)] = value
        return self._touch()

    def is_due(self) -> bool:
        """True when an input change has been quiet for the debounce window."""
        if not self._pending or self._last_change_at is None:
            return False
        return self._clock() - self._last_change_at >= self._debounce

    def compute(self) -> tuple[int, list[Suggestion]]:
        """Run the engine on the current form; pair the result with its revision."""
        revision = self._revision
        return revision, self._engine.generate_suggestions(self.profile, self.context())

    def refresh(self, force: bool = False) -> Optional[list[Suggestion]]:
        """Recompute if the debounce window has elapsed (or ``force``).

        Returns:
            The visible suggestions, or ``None`` when nothing was due.
        """
        if not force and not self.is_due():
            return None
        revision, raw = self.compute()
        self.deliver(revision, raw)
        return self.suggestions

    def deliver(self, revision: int, suggestions: Iterable[Suggestion]) -> bool:
        """Accept engine output computed for ``revision``.

        Results for anything but the latest revision are discarded.

        Returns:
            True if the results were accepted.
        """
        if revision != self._revision:
            logger.debug("Discarding stale suggestions (rev %d, latest %d)", revision, self._revision)
            return False

        visible = filter_suggestions(suggestions, self._preferences)
        self._delivered_revision = revision
        self._pending = False
        self._auto_applied = []

        if self._preferences.auto_apply_high_confidence:
            to_apply = [
                s for s in visible
                if s.confidence >= self._auto_apply_threshold
                and not is_populated(self._form.get(s.field))
            ]
            if to_apply:
                self._auto_applied = to_apply
                visible = [s for s in visible if s not in to_apply]
                self.submit({s.field: s.value for s in to_apply})
                logger.info("Auto-applied %d suggestion(s)", len(to_apply))

        self._suggestions = visible
        return True

    # ── Actions ───────────────────────────────────────────────────────────────

    def dismiss(self, suggestion: Suggestion) -> None:
        """Hide ``suggestion`` now and in future deliveries."""
        self._preferences = self._preferences.with_dismissed(suggestion.key)
        self._suggestions = [s for s in self._suggestions if s != suggestion]

    def apply(self, suggestion: Suggestion) -> int:
        """Write ``suggestion``'s value into the form.

        Returns:
            The new revision number.
        """
        self._suggestions = [s for s in self._suggestions if s != suggestion]
        return self.submit({suggestion.field: suggestion.value})

    def update_preferences(self, **changes: Any) -> SuggestionPreferences:
        """Replace preference fields and schedule a refresh.

        Raises:
            pydantic.ValidationError: If a new value is invalid.
        """
        data = self._preferences.model_dump()
        data.update(changes)
        self._preferences = SuggestionPreferences.model_validate(data)
        self._touch()
        return self._preferences

    def _touch(self) -> int:
        self._revision += 1
        self._last_change_at = self._clock()
        self._pending = True
        return self._revision
