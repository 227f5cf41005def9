"""
Shared scoring helpers for the health categories.

Threshold normalisation
-----------------------
``normalize_to_score(value, thresholds)`` maps a raw metric onto 0–100 by
piecewise-linear interpolation between five anchors::

    poor - (average - poor)  ->   0
    poor                     ->  25
    average                  ->  50
    good                     ->  75
    excellent                -> 100

Values below the first anchor score 0, values above ``excellent`` score 100.

Shrinkage
---------
A category score is the mean of its available signal scores, pulled toward
the neutral midpoint in proportion to the missing signals::

    score = 50 + (raw - 50) * coverage        coverage = available / expected

so an empty category scores exactly 50 and a sparse one cannot swing far.
"""

from __future__ import annotations

import math
from typing import Mapping, Optional, Sequence

from listing_insights.models.health import ScoreBreakdown

NEUTRAL_SCORE = 50.0

Thresholds = Mapping[str, float]


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def round_score(value: float) -> int:
    """Clamp to [0, 100] and round halves up."""
    return int(math.floor(clamp(value) + 0.5))


def normalize_to_score(value: float, thresholds: Thresholds) -> float:
    """Map ``value`` onto 0–100 using poor / average / good / excellent cut points."""
    poor = thresholds["poor"]
    average = thresholds["average"]
    points = [
        (poor - (average - poor), 0.0),
        (poor, 25.0),
        (average, 50.0),
        (thresholds["good"], 75.0),
        (thresholds["excellent"], 100.0),
    ]
    if value <= points[0][0]:
        return 0.0
    for (x0, y0), (x1, y1) in zip(points, points[1:]):
        if value <= x1:
            if x1 <= x0:
                return y1
            return y0 + (value - x0) / (x1 - x0) * (y1 - y0)
    return 100.0


def shrink_toward_neutral(raw: float, coverage: float) -> float:
    return NEUTRAL_SCORE + (raw - NEUTRAL_SCORE) * clamp(coverage, 0.0, 1.0)


def safe_ratio(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    """``numerator / denominator`` or ``None`` when either is missing or the denominator is not positive."""
    if numerator is None or denominator is None or denominator <= 0:
        return None
    return numerator / denominator


def build_breakdown(
    components: dict[str, float],
    coverage: float,
    factors: Sequence[str] = (),
    recommendations: Sequence[str] = (),
    weights: Optional[Mapping[str, float]] = None,
) -> ScoreBreakdown:
    """Average ``components``, shrink by ``coverage`` and package the result.

    With ``weights`` the average is weighted over the components present.
    """
    if not components:
        raw = NEUTRAL_SCORE
    elif weights is None:
        raw = sum(components.values()) / len(components)
    else:
        total = sum(weights[k] for k in components)
        raw = sum(v * weights[k] for k, v in components.items()) / total
    return ScoreBreakdown(
        score=round_score(shrink_toward_neutral(raw, coverage)),
        raw_score=round(raw, 2),
        coverage=round(clamp(coverage, 0.0, 1.0), 4),
        components={k: round(v, 2) for k, v in components.items()},
        factors=list(factors),
        recommendations=list(recommendations),
    )
