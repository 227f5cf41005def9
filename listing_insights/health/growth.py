"""
Growth category: stated growth, statement revenue growth and history trend.

Signals (expected 2, up to 3 scored)
------------------------------------
yearly_growth     : ``profile.yearly_growth`` (percent).
statement_growth  : latest vs previous ``FinancialStatement.revenue``.
history_growth    : newest vs oldest ``HealthHistoryPoint.revenue``.

All three use the same fixed percent thresholds, independent of the
financial inputs, so the growth and financial categories never share a
signal.  Coverage is ``min(1, available / 2)``: two independent growth
readings are treated as complete evidence.
"""

from __future__ import annotations

from typing import Optional, Sequence

from listing_insights.health.utils import build_breakdown, normalize_to_score
from listing_insights.models.health import FinancialStatement, HealthHistoryPoint, ScoreBreakdown
from listing_insights.models.profile import BusinessProfile

EXPECTED_SIGNALS = 2

GROWTH_PCT_THRESHOLDS = {"poor": 0.0, "average": 5.0, "good": 15.0, "excellent": 30.0}


def _pct_change(previous: float, latest: float) -> Optional[float]:
    if previous <= 0:
        return None
    return (latest - previous) / previous * 100.0


def statement_growth_pct(statements: Sequence[FinancialStatement]) -> Optional[float]:
    """Revenue growth between the two most recent statements, in percent."""
    ordered = sorted(statements, key=lambda s: s.period_end)
    if len(ordered) < 2:
        return None
    return _pct_change(ordered[-2].revenue, ordered[-1].revenue)


def history_growth_pct(history: Sequence[HealthHistoryPoint]) -> Optional[float]:
    """Revenue growth from the oldest to the newest history point that has revenue."""
    with_revenue = sorted(
        (h for h in history if h.revenue is not None),
        key=lambda h: h.calculated_at,
    )
    if len(with_revenue) < 2:
        return None
    return _pct_change(with_revenue[0].revenue, with_revenue[-1].revenue)  # type: ignore[arg-type]


def _describe(pct: float) -> str:
    if pct > GROWTH_PCT_THRESHOLDS["excellent"]:
        return "exceptional growth"
    if pct > GROWTH_PCT_THRESHOLDS["good"]:
        return "strong growth"
    if pct > GROWTH_PCT_THRESHOLDS["average"]:
        return "moderate growth"
    if pct > GROWTH_PCT_THRESHOLDS["poor"]:
        return "modest growth"
    return "flat or declining revenue"


def score_growth(
    profile: BusinessProfile,
    statements: Sequence[FinancialStatement] = (),
    history: Sequence[HealthHistoryPoint] = (),
) -> ScoreBreakdown:
    """Score the growth category."""
    readings: dict[str, Optional[float]] = {
        "yearly_growth": profile.yearly_growth,
        "statement_growth": statement_growth_pct(statements),
        "history_growth": history_growth_pct(history),
    }
    labels = {
        "yearly_growth": "Stated annual growth",
        "statement_growth": "Statement revenue growth",
        "history_growth": "Historical revenue trend",
    }

    components: dict[str, float] = {}
    factors: list[str] = []
    for key, pct in readings.items():
        if pct is None:
            continue
        components[key] = normalize_to_score(pct, GROWTH_PCT_THRESHOLDS)
        factors.append(f"{labels[key]}: {pct:+.1f}% ({_describe(pct)})")

    recommendations: list[str] = []
    if not components:
        factors.append("No growth data available")
        recommendations.append("Add year-over-year growth or prior-year financial statements")
    elif sum(components.values()) / len(components) < 50.0:
        recommendations.append("Document a growth plan (new channels, pricing, locations) for buyers")

    return build_breakdown(
        components,
        coverage=min(1.0, len(components) / EXPECTED_SIGNALS),
        factors=factors,
        recommendations=recommendations,
    )
