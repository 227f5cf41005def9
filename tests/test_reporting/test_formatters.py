"""Tests for listing_insights.reporting.formatters."""

from __future__ import annotations

import pytest

from listing_insights.benchmarks.tables import DEFAULT_BENCHMARKS
from listing_insights.health.insights import generate_health_insights
from listing_insights.health.scorer import compute_health_score
from listing_insights.models.suggestion import Suggestion
from listing_insights.reporting.formatters import (
    confidence_tag,
    format_benchmark_table,
    format_health_report,
    format_suggestions_table,
)
from listing_insights.taxonomy.business_taxonomy import SuggestionSource


# ── confidence_tag ────────────────────────────────────────────────────────────


@pytest.mark.parametrize("confidence, tag", [
    (0.95, "[HIGH]"), (0.7, "[HIGH]"), (0.5, "[MED]"), (0.4, "[MED]"), (0.3, "[LOW]"),
])
def test_confidence_tag(confidence, tag) -> None:
    assert confidence_tag(confidence) == tag


# ── format_suggestions_table ──────────────────────────────────────────────────


def test_suggestions_table_empty() -> None:
    """Empty input shows a placeholder instead of a table."""
    out = format_suggestions_table([])
    assert "=== Suggestions ===" in out
    assert "(no suggestions available)" in out


def test_suggestions_table_rows() -> None:
    """Each row shows field, formatted value, confidence tag and source."""
    rows = [
        Suggestion(
            field="monthly_revenue", value=41667, confidence=0.95,
            reason="Calculated from annual revenue ÷ 12 months", source=SuggestionSource.ALGORITHM,
        ),
        Suggestion(
            field="gross_margin", value=62.5, confidence=0.7,
            reason="Average gross margin", source=SuggestionSource.INDUSTRY_AVERAGE,
        ),
    ]
    out = format_suggestions_table(rows, title="Restaurant")
    assert "=== Restaurant ===" in out
    assert "$41,667" in out
    assert "62.5%" in out
    assert "0.95 [HIGH]" in out
    assert "industry_average" in out
    assert "Calculated from annual revenue" in out


def test_suggestions_table_without_reasons() -> None:
    rows = [
        Suggestion(
            field="employees", value=7, confidence=0.4,
            reason="Estimated from typical revenue per employee", source=SuggestionSource.ALGORITHM,
        ),
    ]
    out = format_suggestions_table(rows, show_reasons=False)
    assert "Estimated from" not in out


def test_suggestions_table_truncates_long_values() -> None:
    rows = [
        Suggestion(
            field="days_open",
            value=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
            confidence=0.6, reason="Common days", source=SuggestionSource.INDUSTRY_AVERAGE,
        ),
    ]
    out = format_suggestions_table(rows)
    assert "Monday, Tuesday, Wedn..." in out


# ── format_health_report ──────────────────────────────────────────────────────


def test_health_report_basic(fixed_now) -> None:
    score = compute_health_score({}, now=fixed_now)
    out = format_health_report(score)
    assert "=== Business Health ===" in out
    assert "Overall:         50/100" in out
    assert "trajectory stable" in out
    assert "Data sources:    none" in out
    for name in ("financial", "growth", "operational", "sale_readiness"):
        assert name in out


def test_health_report_with_insights_and_factors(full_profile, fixed_now) -> None:
    score = compute_health_score(full_profile, now=fixed_now)
    out = format_health_report(score, generate_health_insights(score), show_factors=True)
    assert "Strengths:" in out or "Weaknesses:" in out
    assert "Gross margin 66%" in out
    assert "Data sources:    profile" in out


def test_health_report_recommendations_numbered(fixed_now) -> None:
    score = compute_health_score({}, now=fixed_now)
    out = format_health_report(score, generate_health_insights(score))
    assert "Recommendations:" in out
    assert "    1. " in out


# ── format_benchmark_table ────────────────────────────────────────────────────


def test_benchmark_table() -> None:
    out = format_benchmark_table(DEFAULT_BENCHMARKS)
    assert "=== Industry Benchmarks ===" in out
    for category in DEFAULT_BENCHMARKS.categories:
        assert category in out
    assert "GENERAL*" in out
    assert "55-70" in out
    assert "* default used for unknown categories" in out
