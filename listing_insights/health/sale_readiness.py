"""
Sale-readiness category: how prepared the listing is for a buyer.

    raw = 0.40 * documentation + 0.35 * financial_score + 0.25 * valuation

``documentation`` is 80% field completeness and 20% description quality.
``valuation`` compares the asking price's revenue multiple with the
category's typical multiple; when there is no asking price (or no revenue)
it is dropped and the remaining weights are renormalised.

Coverage is ``(completeness + has_valuation) / 2``, so an empty profile
shrinks all the way back to the neutral 50.
"""

from __future__ import annotations

from typing import Optional

from listing_insights.benchmarks.tables import CategoryBenchmark
from listing_insights.health.utils import build_breakdown, safe_ratio
from listing_insights.models.health import ScoreBreakdown
from listing_insights.models.profile import BusinessProfile, is_populated

WEIGHTS: dict[str, float] = {
    "documentation": 0.40,
    "financial":     0.35,
    "valuation":     0.25,
}

DOCUMENTATION_FIELDS: tuple[str, ...] = (
    "category", "revenue", "profit", "cash_flow", "asking_price",
    "gross_margin", "net_margin", "employees", "years_established",
    "city", "state", "description", "hours_of_operation", "days_open",
)


def documentation_completeness(profile: BusinessProfile) -> float:
    """Fraction (0–1) of ``DOCUMENTATION_FIELDS`` that are populated."""
    filled = sum(1 for f in DOCUMENTATION_FIELDS if is_populated(getattr(profile, f)))
    return filled / len(DOCUMENTATION_FIELDS)


def description_quality(description: str | None) -> float:
    """Score a listing description by length (0–90)."""
    if not description:
        return 0.0
    words = len(description.split())
    if words < 20:
        return 40.0
    if words < 50:
        return 70.0
    return 90.0


def multiple_score(actual: float, typical: float) -> Optional[float]:
    """Score an asking-price multiple against the category's typical multiple.

    Returns ``None`` when ``typical`` is not positive.
    """
    if typical <= 0:
        return None
    ratio = actual / typical
    if ratio <= 0.8:
        return 95.0
    if ratio <= 1.0:
        return 85.0
    if ratio <= 1.2:
        return 70.0
    if ratio <= 1.5:
        return 50.0
    if ratio <= 2.0:
        return 30.0
    return 10.0


def score_sale_readiness(
    profile: BusinessProfile,
    benchmark: CategoryBenchmark,
    financial_score: int,
) -> ScoreBreakdown:
    """Score the sale-readiness category.

    Args:
        profile: Business profile.
        benchmark: Category benchmark (typical revenue multiple).
        financial_score: Final financial category score.
    """
    factors: list[str] = []
    recommendations: list[str] = []

    completeness = documentation_completeness(profile)
    desc = description_quality(profile.description)
    documentation = (completeness * 0.8 + desc / 100.0 * 0.2) * 100.0
    components: dict[str, float] = {
        "documentation": documentation,
        "financial": float(financial_score),
    }
    factors.append(f"Listing {completeness:.0%} complete")
    if completeness < 0.7:
        recommendations.append("Fill in the remaining listing details buyers expect to see")
    if desc < 90.0:
        recommendations.append("Expand the business description (at least 50 words)")

    has_valuation = False
    if profile.asking_price is not None and profile.asking_price > 0:
        multiple = safe_ratio(profile.asking_price, profile.revenue)
        typical = benchmark.revenue_multiple.center
        valuation = multiple_score(multiple, typical) if multiple is not None else None
        if valuation is not None:
            has_valuation = True
            components["valuation"] = valuation
            factors.append(
                f"Asking price {multiple:.1f}x revenue "
                f"({benchmark.display_name} typical {typical:.1f}x)"
            )
            if components["valuation"] < 50.0:
                recommendations.append(
                    "Asking price is high relative to revenue; support it with "
                    "documented cash flow or reconsider the price"
                )
    if not has_valuation:
        recommendations.append("Set an asking price so buyers can assess the valuation")

    coverage = (completeness + (1.0 if has_valuation else 0.0)) / 2.0
    return build_breakdown(components, coverage, factors, recommendations, weights=WEIGHTS)
