"""
Suggestion rules: pure functions that propose one value for one profile field.

Every rule has the signature::

    (profile, context, benchmarks) -> Suggestion | None

and returns ``None`` (abstains) when its inputs are missing or implausible:
non-positive revenue, a margin outside [0, 100], a zero denominator.  Rules
never mutate their inputs and never perform I/O.

Rules are registered in ``DEFAULT_RULES``; the order is significant because
the engine's stable sort keeps registration order for equal confidences.

    #   field              source            confidence
    1   monthly_revenue    algorithm         0.95
    2   profit             algorithm         0.90
    3   gross_margin       industry_average  0.70 (0.50 unknown category)
    4   net_margin         industry_average  0.70 (0.50 unknown category)
    5   ebitda             algorithm         0.60
    6   cash_flow          algorithm         0.60
    7   hours_of_operation industry_average  0.60 (known category only)
    8   days_open          industry_average  0.60 (known category only)
    9   asking_price       industry_average  0.50 (0.40 unknown category)
    10  employees          algorithm         0.40
    11  customer_base      algorithm         0.30
    12  years_established  algorithm         0.30 (revenue above $1M only)

Modifiers
---------
A modifier has the signature ``(suggestion, profile, context, benchmarks) ->
Suggestion`` and returns either the input unchanged or an adjusted copy.
``location_modifier`` scales asking-price suggestions by the state
cost-of-living factor (see ``benchmarks.location``).

Asking-price bounds
-------------------
An emitted ``asking_price`` always satisfies both::

    MIN_ASKING_PRICE <= price <= MAX_ASKING_PRICE
    MIN_REVENUE_MULTIPLE <= price / revenue <= MAX_REVENUE_MULTIPLE

When the two cannot hold together (tiny or enormous revenue) the rule
abstains; the location modifier keeps the unscaled suggestion when scaling
would break them.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Optional

from listing_insights.benchmarks.location import (
    TIER_FACTORS,
    cost_of_living_tier,
    normalize_state,
)
from listing_insights.benchmarks.tables import BenchmarkTables, CategoryBenchmark
from listing_insights.models.profile import BusinessProfile, SuggestionContext, is_populated
from listing_insights.models.suggestion import MAX_CONFIDENCE, Suggestion
from listing_insights.taxonomy.business_taxonomy import BusinessSize, SuggestionSource

logger = logging.getLogger(__name__)

SuggestionRule = Callable[[BusinessProfile, SuggestionContext, BenchmarkTables], Optional[Suggestion]]
SuggestionModifier = Callable[
    [Suggestion, BusinessProfile, SuggestionContext, BenchmarkTables], Suggestion
]

MIN_ASKING_PRICE = 10_000
MAX_ASKING_PRICE = 10_000_000
MIN_REVENUE_MULTIPLE = 0.5
MAX_REVENUE_MULTIPLE = 10.0

# Applied to the category's typical multiple before clamping into its range.
SIZE_MULTIPLE_FACTORS: dict[BusinessSize, float] = {
    BusinessSize.SMALL:  0.9,
    BusinessSize.MEDIUM: 1.0,
    BusinessSize.LARGE:  1.1,
}

LOCATION_CONFIDENCE_BOOST = 0.05
EBITDA_ADDBACK_PCT = 5.0          # D&A + interest + taxes, percent of revenue
CASH_FLOW_TO_PROFIT = 1.1
AVG_CUSTOMER_VALUE = 1_000

# Business age estimate: one year per $500k of revenue, 3 to 15 years,
# only for businesses above $1M revenue.
MATURITY_REVENUE_THRESHOLD = 1_000_000
REVENUE_PER_YEAR_ESTABLISHED = 500_000
MIN_ESTIMATED_YEARS = 3
MAX_ESTIMATED_YEARS = 15


# ── Helpers ───────────────────────────────────────────────────────────────────


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (``2.5 -> 3``).

    Python's ``round`` uses banker's rounding, which would turn
    ``41666.5`` into ``41666``.
    """
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _positive(value: Optional[float]) -> bool:
    return value is not None and value > 0


def _percent(value: Optional[float]) -> bool:
    return value is not None and 0.0 <= value <= 100.0


def _absent(profile: BusinessProfile, field: str) -> bool:
    return not is_populated(getattr(profile, field))


def _benchmark_for(
    context: SuggestionContext, benchmarks: BenchmarkTables
) -> tuple[CategoryBenchmark, bool]:
    """Benchmark for the context category and whether the category is known."""
    return benchmarks.get(context.category), benchmarks.is_known(context.category)


def _fmt_number(value: float) -> str:
    return f"{value:g}"


def price_within_bounds(price: float, revenue: float) -> bool:
    """True when ``price`` respects both the absolute and the multiple bounds."""
    if not MIN_ASKING_PRICE <= price <= MAX_ASKING_PRICE:
        return False
    multiple = price / revenue
    return MIN_REVENUE_MULTIPLE <= multiple <= MAX_REVENUE_MULTIPLE


# ── Rules ─────────────────────────────────────────────────────────────────────


def monthly_revenue_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Annual revenue / 12."""
    if not _positive(profile.revenue) or not _absent(profile, "monthly_revenue"):
        return None
    return Suggestion(
        field="monthly_revenue",
        value=round_half_up(profile.revenue / 12),
        confidence=0.95,
        reason="Calculated from annual revenue ÷ 12 months",
        source=SuggestionSource.ALGORITHM,
    )


def derived_profit_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Revenue × net margin."""
    if (
        not _positive(profile.revenue)
        or not _percent(profile.net_margin)
        or not _absent(profile, "profit")
    ):
        return None
    return Suggestion(
        field="profit",
        value=round_half_up(profile.revenue * profile.net_margin / 100),
        confidence=0.90,
        reason=(
            f"Calculated from revenue (${profile.revenue:,.0f}) × "
            f"net margin ({_fmt_number(profile.net_margin)}%)"
        ),
        source=SuggestionSource.ALGORITHM,
    )


def _margin_suggestion(
    field: str,
    label: str,
    profile: BusinessProfile,
    context: SuggestionContext,
    benchmarks: BenchmarkTables,
) -> Optional[Suggestion]:
    if context.category is None or not _absent(profile, field):
        return None
    bench, known = _benchmark_for(context, benchmarks)
    margin_range = bench.gross_margin if field == "gross_margin" else bench.net_margin
    value = margin_range.midpoint
    reason = f"Average {label} for {bench.display_name} businesses is {_fmt_number(value)}%"
    if not known:
        reason += f" (no benchmark for '{context.category}')"
    return Suggestion(
        field=field,
        value=value,
        confidence=0.70 if known else 0.50,
        reason=reason,
        source=SuggestionSource.INDUSTRY_AVERAGE,
    )


def gross_margin_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Category gross-margin midpoint."""
    return _margin_suggestion("gross_margin", "gross margin", profile, context, benchmarks)


def net_margin_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Category net-margin midpoint."""
    return _margin_suggestion("net_margin", "net margin", profile, context, benchmarks)


def ebitda_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Revenue × (net margin + typical add-backs)."""
    if (
        not _positive(profile.revenue)
        or not _percent(profile.net_margin)
        or not _absent(profile, "ebitda")
    ):
        return None
    return Suggestion(
        field="ebitda",
        value=round_half_up(profile.revenue * (profile.net_margin + EBITDA_ADDBACK_PCT) / 100),
        confidence=0.60,
        reason="Estimated EBITDA based on revenue and net margin (rough calculation)",
        source=SuggestionSource.ALGORITHM,
    )


def cash_flow_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Profit × 1.1."""
    if not _positive(profile.profit) or not _absent(profile, "cash_flow"):
        return None
    return Suggestion(
        field="cash_flow",
        value=round_half_up(profile.profit * CASH_FLOW_TO_PROFIT),
        confidence=0.60,
        reason="Estimated cash flow based on profit (typically close to net profit)",
        source=SuggestionSource.ALGORITHM,
    )


def hours_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Typical opening hours for a benchmarked category."""
    bench, known = _benchmark_for(context, benchmarks)
    if not known or not _absent(profile, "hours_of_operation"):
        return None
    return Suggestion(
        field="hours_of_operation",
        value=bench.typical_hours,
        confidence=0.60,
        reason=f"Typical hours for {bench.display_name} businesses",
        source=SuggestionSource.INDUSTRY_AVERAGE,
    )


def days_open_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Common operating days for a benchmarked category."""
    bench, known = _benchmark_for(context, benchmarks)
    if not known or not _absent(profile, "days_open") or not bench.common_days:
        return None
    return Suggestion(
        field="days_open",
        value=list(bench.common_days),
        confidence=0.60,
        reason=f"Most {bench.display_name} businesses operate these days",
        source=SuggestionSource.INDUSTRY_AVERAGE,
    )


def asking_price_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Revenue × size-adjusted category multiple, within the price bounds."""
    revenue = profile.revenue
    if not _positive(revenue) or not _absent(profile, "asking_price"):
        return None

    bench, known = _benchmark_for(context, benchmarks)
    size = context.business_size or bench.size_band(revenue) or BusinessSize.MEDIUM
    multiple = bench.revenue_multiple.clamp(
        bench.revenue_multiple.center * SIZE_MULTIPLE_FACTORS[size]
    )

    price = round_half_up(revenue * multiple)
    price = max(MIN_ASKING_PRICE, min(MAX_ASKING_PRICE, price))
    if not price_within_bounds(price, revenue):
        logger.debug(
            "asking_price abstained: price %d implies %.2fx revenue %.0f",
            price, price / revenue, revenue,
        )
        return None

    return Suggestion(
        field="asking_price",
        value=price,
        confidence=0.50 if known else 0.40,
        reason=(
            f"Based on {multiple:.2f}x revenue multiple typical for "
            f"{size.value} {bench.display_name} businesses"
        ),
        source=SuggestionSource.INDUSTRY_AVERAGE,
    )


def employees_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Revenue / category revenue-per-employee, at least one."""
    if not _positive(profile.revenue) or not _absent(profile, "employees"):
        return None
    bench, _ = _benchmark_for(context, benchmarks)
    return Suggestion(
        field="employees",
        value=max(1, round_half_up(profile.revenue / bench.revenue_per_employee)),
        confidence=0.40,
        reason=(
            f"Estimated from typical revenue per employee "
            f"(~${bench.revenue_per_employee / 1000:,.0f}K)"
        ),
        source=SuggestionSource.ALGORITHM,
    )


def customer_base_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Revenue / assumed average customer value."""
    if not _positive(profile.revenue) or not _absent(profile, "customer_base"):
        return None
    estimate = round_half_up(profile.revenue / AVG_CUSTOMER_VALUE)
    if estimate < 1:
        return None
    return Suggestion(
        field="customer_base",
        value=estimate,
        confidence=0.30,
        reason="Rough estimate based on an assumed average customer value of $1,000",
        source=SuggestionSource.ALGORITHM,
    )


def years_established_rule(
    profile: BusinessProfile, context: SuggestionContext, benchmarks: BenchmarkTables
) -> Optional[Suggestion]:
    """Business age implied by revenue, for businesses above $1M."""
    revenue = profile.revenue
    if revenue is None or revenue <= MATURITY_REVENUE_THRESHOLD:
        return None
    if not _absent(profile, "years_established"):
        return None
    years = min(
        MAX_ESTIMATED_YEARS,
        max(MIN_ESTIMATED_YEARS, math.floor(revenue / REVENUE_PER_YEAR_ESTABLISHED)),
    )
    return Suggestion(
        field="years_established",
        value=years,
        confidence=0.30,
        reason="Estimated business age based on revenue maturity",
        source=SuggestionSource.ALGORITHM,
    )


# ── Modifiers ─────────────────────────────────────────────────────────────────


def location_modifier(
    suggestion: Suggestion,
    profile: BusinessProfile,
    context: SuggestionContext,
    benchmarks: BenchmarkTables,
) -> Suggestion:
    """Scale an asking-price suggestion by the state cost-of-living factor.

    Non-price suggestions, unknown states and non-positive revenue pass
    through unchanged.  When the scaled price would break the price bounds
    the original suggestion is returned.
    """
    if suggestion.field != "asking_price":
        return suggestion
    tier = cost_of_living_tier(context.location.state)
    revenue = profile.revenue
    if tier is None or not _positive(revenue):
        return suggestion

    price = round_half_up(float(suggestion.value) * TIER_FACTORS[tier])  # type: ignore[arg-type]
    if not price_within_bounds(price, revenue):
        return suggestion

    state = normalize_state(context.location.state)
    return Suggestion(
        field=suggestion.field,
        value=price,
        confidence=min(MAX_CONFIDENCE, round(suggestion.confidence + LOCATION_CONFIDENCE_BOOST, 4)),
        reason=f"{suggestion.reason}; adjusted for {state} ({tier.value} cost of living)",
        source=suggestion.source,
    )


# ── Registration ──────────────────────────────────────────────────────────────

DEFAULT_RULES: tuple[SuggestionRule, ...] = (
    monthly_revenue_rule,
    derived_profit_rule,
    gross_margin_rule,
    net_margin_rule,
    ebitda_rule,
    cash_flow_rule,
    hours_rule,
    days_open_rule,
    asking_price_rule,
    employees_rule,
    customer_base_rule,
    years_established_rule,
)

DEFAULT_MODIFIERS: tuple[SuggestionModifier, ...] = (location_modifier,)
