"""
Trajectory classification from recent health history.

The blend of a score is ``(financial + growth) / 2``.  The baseline is the
mean blend of the ``HISTORY_WINDOW`` most recent history points (by
``calculated_at``); the delta is current blend minus baseline::

    delta >= +5  -> improving
    delta <= -5  -> declining
    otherwise    -> stable

No history means ``stable``.
"""

from __future__ import annotations

from typing import Sequence

from listing_insights.models.health import HealthHistoryPoint
from listing_insights.taxonomy.business_taxonomy import HealthTrajectory

HISTORY_WINDOW = 3
TREND_THRESHOLD = 5.0


def blend(financial: float, growth: float) -> float:
    return (financial + growth) / 2.0


def trajectory_delta(
    financial_score: float,
    growth_score: float,
    history: Sequence[HealthHistoryPoint],
) -> float | None:
    """Current blend minus the recent-history baseline; ``None`` without history."""
    if not history:
        return None
    recent = sorted(history, key=lambda h: h.calculated_at)[-HISTORY_WINDOW:]
    baseline = sum(blend(h.financial_score, h.growth_score) for h in recent) / len(recent)
    return blend(financial_score, growth_score) - baseline


def classify_trajectory(
    financial_score: float,
    growth_score: float,
    history: Sequence[HealthHistoryPoint] = (),
) -> HealthTrajectory:
    """Improving / stable / declining relative to recent history."""
    delta = trajectory_delta(financial_score, growth_score, history)
    if delta is None:
        return HealthTrajectory.STABLE
    if delta >= TREND_THRESHOLD:
        return HealthTrajectory.IMPROVING
    if delta <= -TREND_THRESHOLD:
        return HealthTrajectory.DECLINING
    return HealthTrajectory.STABLE
