"""
Confidence level for a health score.

    confidence = sum(weight_c * coverage_c)           # CATEGORY_WEIGHTS
               - INCONSISTENCY_PENALTY * inconsistencies
               - OUTLIER_PENALTY * outliers
    clamped to [0, 1]

Inconsistencies (contradictory inputs)
--------------------------------------
profit_exceeds_revenue      profit > revenue
ebitda_below_profit         ebitda < profit
monthly_revenue_mismatch    |monthly * 12 - revenue| / revenue > 25%
cash_flow_profit_mismatch   cash flow outside [1/3, 3] x a positive profit

Outliers (implausible but possible inputs)
------------------------------------------
profit_margin_extreme       profit / revenue > 95% or < -50%
growth_extreme              |yearly_growth| > 500%
"""

from __future__ import annotations

from typing import Mapping

from listing_insights.health.utils import safe_ratio
from listing_insights.models.health import CATEGORY_WEIGHTS
from listing_insights.models.profile import BusinessProfile

INCONSISTENCY_PENALTY = 0.10
OUTLIER_PENALTY = 0.05

MONTHLY_REVENUE_TOLERANCE = 0.25
CASH_FLOW_PROFIT_BAND = (1.0 / 3.0, 3.0)
PROFIT_MARGIN_MAX = 0.95
PROFIT_MARGIN_MIN = -0.50
GROWTH_PCT_MAX = 500.0


def find_inconsistencies(profile: BusinessProfile) -> list[str]:
    """Names of contradictory input combinations on ``profile``."""
    issues: list[str] = []
    revenue, profit = profile.revenue, profile.profit

    if revenue is not None and profit is not None and revenue > 0 and profit > revenue:
        issues.append("profit_exceeds_revenue")

    if profile.ebitda is not None and profit is not None and profile.ebitda < profit:
        issues.append("ebitda_below_profit")

    if profile.monthly_revenue is not None and revenue is not None and revenue > 0:
        drift = abs(profile.monthly_revenue * 12 - revenue) / revenue
        if drift > MONTHLY_REVENUE_TOLERANCE:
            issues.append("monthly_revenue_mismatch")

    ratio = safe_ratio(profile.cash_flow, profit)
    if ratio is not None:
        low, high = CASH_FLOW_PROFIT_BAND
        if not low <= ratio <= high:
            issues.append("cash_flow_profit_mismatch")

    return issues


def find_outliers(profile: BusinessProfile) -> list[str]:
    """Names of statistically implausible inputs on ``profile``."""
    outliers: list[str] = []
    margin = safe_ratio(profile.profit, profile.revenue)
    if margin is not None and not PROFIT_MARGIN_MIN <= margin <= PROFIT_MARGIN_MAX:
        outliers.append("profit_margin_extreme")
    if profile.yearly_growth is not None and abs(profile.yearly_growth) > GROWTH_PCT_MAX:
        outliers.append("growth_extreme")
    return outliers


def compute_confidence(
    coverages: Mapping[str, float],
    inconsistencies: int = 0,
    outliers: int = 0,
) -> float:
    """Combine category coverages and data-quality penalties into a 0–1 level.

    Args:
        coverages: Category name → coverage (0–1), keyed like ``CATEGORY_WEIGHTS``.
        inconsistencies: Number of contradictory input combinations.
        outliers: Number of implausible inputs.
    """
    base = sum(CATEGORY_WEIGHTS[name] * coverages.get(name, 0.0) for name in CATEGORY_WEIGHTS)
    level = base - INCONSISTENCY_PENALTY * inconsistencies - OUTLIER_PENALTY * outliers
    return round(max(0.0, min(1.0, level)), 4)
