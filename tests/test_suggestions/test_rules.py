"""
Tests for listing_insights.suggestions.rules.

What we test
------------
Arithmetic rules (monthly revenue, profit, EBITDA, cash flow, employees,
customer base, years established):
  - Exact derived values with half-up rounding.
  - Abstain when inputs are missing, implausible, or the field is filled.

Benchmark rules (margins, hours, days open):
  - Use the category benchmark; lower confidence on the GENERAL fallback.
  - Hours / days only for known categories.

asking_price_rule:
  - Size-adjusted multiple clamped into the category range.
  - Always within [10,000, 10,000,000] and [0.5x, 10x] revenue, or abstains.

location_modifier:
  - Scales by the state tier, boosts confidence, annotates the reason.
  - Leaves non-price suggestions, unknown states and bound-breaking
    scalings untouched.
"""

from __future__ import annotations

import pytest

from listing_insights.benchmarks.tables import DEFAULT_BENCHMARKS
from listing_insights.models.profile import BusinessProfile, Location, SuggestionContext
from listing_insights.models.suggestion import Suggestion
from listing_insights.suggestions.rules import (
    DEFAULT_RULES,
    MAX_ASKING_PRICE,
    MIN_ASKING_PRICE,
    asking_price_rule,
    cash_flow_rule,
    customer_base_rule,
    days_open_rule,
    derived_profit_rule,
    ebitda_rule,
    employees_rule,
    gross_margin_rule,
    hours_rule,
    location_modifier,
    monthly_revenue_rule,
    net_margin_rule,
    price_within_bounds,
    round_half_up,
    years_established_rule,
)
from listing_insights.taxonomy.business_taxonomy import SuggestionSource


def _ctx(category=None, size=None, state=None) -> SuggestionContext:
    return SuggestionContext(
        category=category, business_size=size, location=Location(state=state)
    )


def _run(rule, ctx=None, **profile):
    return rule(BusinessProfile(**profile), ctx or _ctx(), DEFAULT_BENCHMARKS)


class TestRoundHalfUp:
    @pytest.mark.parametrize("value, expected", [
        (2.5, 3), (2.4, 2), (41666.5, 41667), (-2.5, -3), (0.0, 0),
    ])
    def test_rounding(self, value, expected):
        assert round_half_up(value) == expected


class TestArithmeticRules:
    def test_monthly_revenue(self):
        s = _run(monthly_revenue_rule, revenue=500_000)
        assert s.value == 41667
        assert s.confidence == 0.95
        assert s.source == SuggestionSource.ALGORITHM

    @pytest.mark.parametrize("profile", [
        {}, {"revenue": 0}, {"revenue": -100}, {"revenue": 500_000, "monthly_revenue": 40_000},
    ])
    def test_monthly_revenue_abstains(self, profile):
        assert _run(monthly_revenue_rule, **profile) is None

    def test_derived_profit(self):
        s = _run(derived_profit_rule, revenue=2_000_000, net_margin=15)
        assert s.value == 300_000
        assert s.confidence > 0.8
        assert s.source == SuggestionSource.ALGORITHM
        assert "15%" in s.reason

    @pytest.mark.parametrize("net_margin", [None, -5, 140])
    def test_derived_profit_abstains_on_bad_margin(self, net_margin):
        assert _run(derived_profit_rule, revenue=2_000_000, net_margin=net_margin) is None

    def test_ebitda(self):
        s = _run(ebitda_rule, revenue=1_000_000, net_margin=10)
        assert s.value == 150_000
        assert s.confidence == 0.60

    def test_cash_flow(self):
        s = _run(cash_flow_rule, profit=100_000)
        assert s.value == 110_000
        assert _run(cash_flow_rule, profit=-5) is None
        assert _run(cash_flow_rule, profit=100_000, cash_flow=90_000) is None

    def test_employees_uses_category_revenue_per_employee(self):
        s = _run(employees_rule, _ctx("RESTAURANT"), revenue=650_000)
        assert s.value == 10
        assert s.confidence == 0.40

    def test_employees_at_least_one(self):
        assert _run(employees_rule, revenue=100).value == 1

    def test_customer_base(self):
        assert _run(customer_base_rule, revenue=500_000).value == 500
        assert _run(customer_base_rule, revenue=400) is None

    @pytest.mark.parametrize("revenue, years", [
        (1_000_001, 3), (1_600_000, 3), (2_000_000, 4),
        (3_750_000, 7), (7_500_000, 15), (50_000_000, 15),
    ])
    def test_years_established_from_revenue(self, revenue, years):
        s = _run(years_established_rule, revenue=revenue)
        assert s.value == years
        assert s.confidence == 0.30
        assert s.source == SuggestionSource.ALGORITHM

    @pytest.mark.parametrize("profile", [
        {}, {"revenue": 1_000_000}, {"revenue": 500_000},
        {"revenue": 2_000_000, "years_established": 8},
    ])
    def test_years_established_abstains(self, profile):
        assert _run(years_established_rule, **profile) is None


class TestBenchmarkRules:
    def test_margins_for_known_category(self):
        ctx = _ctx("RESTAURANT")
        gross = _run(gross_margin_rule, ctx)
        net = _run(net_margin_rule, ctx)
        assert gross.value == 62.5
        assert net.value == 9.0
        assert gross.confidence == net.confidence == 0.70
        assert gross.source == SuggestionSource.INDUSTRY_AVERAGE
        assert "restaurant" in gross.reason

    def test_margins_for_unknown_category_use_general(self):
        s = _run(gross_margin_rule, _ctx("UNKNOWN_CATEGORY"))
        assert s.value == 50.0
        assert s.confidence == 0.50
        assert "general business" in s.reason

    def test_margins_need_category(self):
        assert _run(gross_margin_rule) is None
        assert _run(net_margin_rule) is None

    def test_margin_not_suggested_when_filled(self):
        assert _run(gross_margin_rule, _ctx("RETAIL"), gross_margin=50) is None

    def test_hours_and_days_for_known_category(self):
        hours = _run(hours_rule, _ctx("TECHNOLOGY"))
        days = _run(days_open_rule, _ctx("TECHNOLOGY"))
        assert hours.value == "9:00 AM - 5:00 PM"
        assert days.value == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]

    def test_hours_and_days_skip_unknown_category(self):
        assert _run(hours_rule, _ctx("UNKNOWN_CATEGORY")) is None
        assert _run(days_open_rule, _ctx("UNKNOWN_CATEGORY")) is None


class TestAskingPriceRule:
    def test_medium_restaurant(self):
        s = _run(asking_price_rule, _ctx("RESTAURANT", "medium"), revenue=500_000)
        assert s.value == 700_000
        assert s.confidence == 0.50
        assert "1.40x" in s.reason

    def test_small_size_factor(self):
        s = _run(asking_price_rule, _ctx("RESTAURANT", "small"), revenue=100_000)
        assert s.value == 126_000

    def test_size_derived_from_revenue_when_missing(self):
        # 500k is "small" for restaurants: 1.4 * 0.9 = 1.26x
        s = _run(asking_price_rule, _ctx("RESTAURANT"), revenue=500_000)
        assert s.value == 630_000

    def test_multiple_clamped_into_category_range(self):
        # automotive typical 0.8 * 1.1 (large) = 0.88, inside [0.5, 1.5]
        s = _run(asking_price_rule, _ctx("AUTOMOTIVE", "large"), revenue=1_000_000)
        assert s.value == 880_000

    def test_unknown_category_lower_confidence(self):
        s = _run(asking_price_rule, _ctx("UNKNOWN_CATEGORY"), revenue=500_000)
        assert s.confidence == 0.40

    def test_floor_applied_for_tiny_revenue(self):
        s = _run(asking_price_rule, _ctx("RESTAURANT", "small"), revenue=5_000)
        assert s.value == MIN_ASKING_PRICE

    def test_abstains_when_floor_breaks_multiple_band(self):
        assert _run(asking_price_rule, _ctx("RESTAURANT", "small"), revenue=999) is None

    def test_abstains_when_ceiling_breaks_multiple_band(self):
        assert _run(asking_price_rule, _ctx("TECHNOLOGY", "large"), revenue=50_000_000) is None

    def test_ceiling_applied(self):
        s = _run(asking_price_rule, _ctx("TECHNOLOGY", "large"), revenue=5_000_000)
        assert s.value == MAX_ASKING_PRICE

    @pytest.mark.parametrize("category", DEFAULT_BENCHMARKS.categories + ["UNKNOWN_CATEGORY"])
    @pytest.mark.parametrize("size", ["small", "medium", "large", None])
    @pytest.mark.parametrize("revenue", [1, 900, 1_000, 9_000, 100_000, 2_500_000, 40_000_000])
    def test_bounds_hold_everywhere(self, category, size, revenue):
        s = _run(asking_price_rule, _ctx(category, size), revenue=revenue)
        if s is not None:
            assert MIN_ASKING_PRICE <= s.value <= MAX_ASKING_PRICE
            assert 0.5 <= s.value / revenue <= 10

    def test_price_within_bounds(self):
        assert price_within_bounds(100_000, 100_000)
        assert not price_within_bounds(9_999, 10_000)
        assert not price_within_bounds(20_000, 1_000)


class TestLocationModifier:
    def _price(self, value=700_000, confidence=0.5) -> Suggestion:
        return Suggestion(
            field="asking_price",
            value=value,
            confidence=confidence,
            reason="Based on 1.40x revenue multiple",
            source=SuggestionSource.INDUSTRY_AVERAGE,
        )

    def _apply(self, suggestion, state, revenue=500_000):
        return location_modifier(
            suggestion, BusinessProfile(revenue=revenue), _ctx(state=state), DEFAULT_BENCHMARKS
        )

    def test_high_cost_state(self):
        s = self._apply(self._price(), "WA")
        assert s.value == 840_000
        assert s.confidence == 0.55
        assert s.reason.endswith("adjusted for WA (high cost of living)")

    def test_low_cost_state(self):
        assert self._apply(self._price(), "MS").value == 630_000

    def test_full_state_name(self):
        assert self._apply(self._price(), "California").reason.endswith("(high cost of living)")

    def test_confidence_capped(self):
        assert self._apply(self._price(confidence=0.98), "TX").confidence == 1.0

    def test_unknown_state_unchanged(self):
        original = self._price()
        assert self._apply(original, "ZZ") is original
        assert self._apply(original, None) is original

    def test_non_price_suggestion_unchanged(self):
        s = Suggestion(
            field="monthly_revenue", value=41667, confidence=0.95,
            reason="Calculated", source=SuggestionSource.ALGORITHM,
        )
        assert self._apply(s, "WA") is s

    def test_keeps_original_when_scaling_breaks_bounds(self):
        at_floor = self._price(value=MIN_ASKING_PRICE)
        assert self._apply(at_floor, "MS", revenue=5_000) is at_floor
        at_max_multiple = self._price(value=10_000)
        assert self._apply(at_max_multiple, "CA", revenue=1_000) is at_max_multiple


def test_default_rules_registration_order():
    names = [rule.__name__ for rule in DEFAULT_RULES]
    assert names == [
        "monthly_revenue_rule", "derived_profit_rule", "gross_margin_rule",
        "net_margin_rule", "ebitda_rule", "cash_flow_rule", "hours_rule",
        "days_open_rule", "asking_price_rule", "employees_rule", "customer_base_rule",
        "years_established_rule",
    ]
