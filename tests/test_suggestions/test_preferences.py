"""
Tests for the suggestion preference layer and SuggestionSession.

What we test
------------
SuggestionPreferences / filter_suggestions:
  - Minimum confidence, enabled sources and dismissed keys filter output.
  - JSON round-trip with camelCase keys.

SuggestionSession (driven by a fake clock):
  - Debounce: nothing is due until the input has been quiet for the window;
    every submit restarts the window.
  - Last-write-wins: results computed for a superseded revision are
    discarded by deliver().
  - dismiss / apply / update_preferences.
  - Auto-apply writes high-confidence suggestions into empty fields only.
  - from_config picks up SuggestionConfig defaults.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from listing_insights.config import SuggestionConfig
from listing_insights.models.profile import UnknownFieldError
from listing_insights.models.suggestion import Suggestion
from listing_insights.suggestions.preferences import (
    SuggestionPreferences,
    SuggestionSession,
    filter_suggestions,
)
from listing_insights.taxonomy.business_taxonomy import SuggestionSource


def _s(field: str, value, confidence: float, source=SuggestionSource.ALGORITHM) -> Suggestion:
    return Suggestion(field=field, value=value, confidence=confidence, reason="r", source=source)


_SAMPLE = [
    _s("monthly_revenue", 41667, 0.95),
    _s("gross_margin", 62.5, 0.70, SuggestionSource.INDUSTRY_AVERAGE),
    _s("customer_base", 500, 0.30),
    _s("employees", 8, 0.20),
]


class TestSuggestionPreferences:
    def test_defaults(self):
        prefs = SuggestionPreferences()
        assert prefs.minimum_confidence == 0.3
        assert not prefs.auto_apply_high_confidence
        assert prefs.enabled_sources == frozenset(SuggestionSource)
        assert prefs.dismissed_suggestions == frozenset()

    def test_minimum_confidence_validated(self):
        with pytest.raises(ValidationError, match="minimum_confidence"):
            SuggestionPreferences(minimum_confidence=1.5)

    def test_json_round_trip(self):
        prefs = SuggestionPreferences(
            auto_apply_high_confidence=True,
            minimum_confidence=0.5,
            enabled_sources=frozenset({SuggestionSource.ALGORITHM}),
            dismissed_suggestions=frozenset({"profit-300000-algorithm"}),
        )
        raw = prefs.to_json()
        assert '"minimumConfidence": 0.5' in raw
        assert '"enabledSources": ["algorithm"]' in raw
        assert SuggestionPreferences.from_json(raw) == prefs

    def test_with_dismissed(self):
        prefs = SuggestionPreferences().with_dismissed("a").with_dismissed("b")
        assert prefs.dismissed_suggestions == {"a", "b"}


class TestFilterSuggestions:
    def test_minimum_confidence(self):
        kept = filter_suggestions(_SAMPLE, SuggestionPreferences())
        assert [s.field for s in kept] == ["monthly_revenue", "gross_margin", "customer_base"]

    def test_enabled_sources(self):
        prefs = SuggestionPreferences(enabled_sources=frozenset({SuggestionSource.INDUSTRY_AVERAGE}))
        assert [s.field for s in filter_suggestions(_SAMPLE, prefs)] == ["gross_margin"]

    def test_dismissed(self):
        prefs = SuggestionPreferences(dismissed_suggestions=frozenset({_SAMPLE[0].key}))
        assert "monthly_revenue" not in {s.field for s in filter_suggestions(_SAMPLE, prefs)}


class TestSessionDebounce:
    def test_not_due_before_window(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, debounce_seconds=0.5)
        assert not session.is_due()
        assert session.submit({"revenue": 500_000}) == 1
        fake_clock.advance(0.4)
        assert not session.is_due()
        assert session.refresh() is None

    def test_due_after_quiet_window(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, debounce_seconds=0.5)
        session.submit({"revenue": 500_000})
        fake_clock.advance(0.5)
        assert session.is_due()
        result = session.refresh()
        assert result is not None
        assert {s.field: s.value for s in result}["monthly_revenue"] == 41667
        assert not session.is_due()
        assert session.delivered_revision == 1

    def test_submit_restarts_window(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, debounce_seconds=0.5)
        session.submit({"revenue": 500_000})
        fake_clock.advance(0.25)
        session.submit({"category": "RESTAURANT"})
        fake_clock.advance(0.25)
        assert not session.is_due()
        fake_clock.advance(0.25)
        assert session.is_due()

    def test_force_refresh_ignores_window(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 120_000})
        assert session.refresh(force=True)

    def test_negative_debounce_rejected(self):
        with pytest.raises(ValueError):
            SuggestionSession(debounce_seconds=-1)

    def test_unknown_field_rejected(self, fake_clock):
        session = SuggestionSession(clock=fake_clock)
        with pytest.raises(UnknownFieldError):
            session.submit({"favouriteColour": "blue"})


class TestSessionLastWriteWins:
    def test_stale_result_discarded(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        revision, stale = session.compute()
        session.submit({"revenue": 600_000})
        assert not session.deliver(revision, stale)
        assert session.suggestions == []
        assert session.delivered_revision == 0

    def test_latest_result_accepted(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        session.submit({"revenue": 600_000})
        revision, fresh = session.compute()
        assert session.deliver(revision, fresh)
        assert {s.field: s.value for s in session.suggestions}["monthly_revenue"] == 50_000

    def test_out_of_order_delivery(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 120_000})
        first = session.compute()
        session.submit({"revenue": 240_000})
        second = session.compute()
        assert session.deliver(*second)
        assert not session.deliver(*first)
        assert {s.field: s.value for s in session.suggestions}["monthly_revenue"] == 20_000


class TestSessionActions:
    def test_dismiss_hides_now_and_later(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        session.refresh(force=True)
        monthly = session.suggestions_for_field("monthlyRevenue")[0]
        session.dismiss(monthly)
        assert monthly not in session.suggestions
        assert monthly.key in session.preferences.dismissed_suggestions
        session.refresh(force=True)
        assert session.suggestions_for_field("monthly_revenue") == []

    def test_apply_writes_value(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        session.refresh(force=True)
        monthly = session.suggestions_for_field("monthly_revenue")[0]
        revision = session.apply(monthly)
        assert revision == session.revision
        assert session.profile.monthly_revenue == 41667
        assert monthly not in session.suggestions
        session.refresh(force=True)
        assert session.suggestions_for_field("monthly_revenue") == []

    def test_update_preferences_schedules_refresh(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        session.refresh(force=True)
        before = session.revision
        prefs = session.update_preferences(minimum_confidence=0.9)
        assert prefs.minimum_confidence == 0.9
        assert session.revision == before + 1
        fake_clock.advance(1.0)
        result = session.refresh()
        assert result and all(s.confidence >= 0.9 for s in result)

    def test_update_preferences_validates(self, fake_clock):
        session = SuggestionSession(clock=fake_clock)
        with pytest.raises(ValidationError):
            session.update_preferences(minimum_confidence=2.0)

    def test_context_derived_from_form(self, fake_clock):
        session = SuggestionSession(
            clock=fake_clock, profile={"category": "RESTAURANT", "state": "WA", "revenue": 500_000}
        )
        ctx = session.context()
        assert ctx.category == "RESTAURANT"
        assert ctx.location.state == "WA"
        assert ctx.business_size == "small"


class TestAutoApply:
    def test_high_confidence_written_into_empty_fields(self, fake_clock):
        session = SuggestionSession(
            clock=fake_clock,
            preferences=SuggestionPreferences(auto_apply_high_confidence=True),
            profile={"revenue": 2_000_000, "netMargin": 15, "category": "TECHNOLOGY"},
        )
        session.refresh(force=True)
        applied = {s.field for s in session.auto_applied}
        assert applied == {"monthly_revenue", "profit"}
        assert session.profile.monthly_revenue == 166_667
        assert session.profile.profit == 300_000
        assert not applied & {s.field for s in session.suggestions}
        # auto-apply is an input change: a follow-up refresh is pending
        assert session.revision > session.delivered_revision

    def test_disabled_by_default(self, fake_clock):
        session = SuggestionSession(clock=fake_clock, profile={"revenue": 500_000})
        session.refresh(force=True)
        assert session.auto_applied == []
        assert session.profile.monthly_revenue is None


def test_from_config(fake_clock):
    config = SuggestionConfig(
        minimum_confidence=0.5,
        auto_apply_threshold=0.9,
        debounce_ms=200,
        enabled_sources=["algorithm"],
    )
    session = SuggestionSession.from_config(config, clock=fake_clock, profile={"revenue": 500_000})
    assert session.preferences.minimum_confidence == 0.5
    assert session.preferences.enabled_sources == {SuggestionSource.ALGORITHM}
    fake_clock.advance(0.25)
    result = session.refresh()
    assert result is not None
    assert all(s.source == SuggestionSource.ALGORITHM and s.confidence >= 0.5 for s in result)
