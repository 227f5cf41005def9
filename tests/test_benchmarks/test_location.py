"""Tests for state cost-of-living tiers and price factors."""

from __future__ import annotations

import pytest

from listing_insights.benchmarks.location import (
    TIER_FACTORS,
    cost_of_living_tier,
    location_factor,
    normalize_state,
)
from listing_insights.taxonomy.business_taxonomy import CostOfLivingTier


class TestNormalizeState:
    @pytest.mark.parametrize("raw, expected", [
        ("WA", "WA"),
        (" wa ", "WA"),
        ("California", "CA"),
        ("new york", "NY"),
        ("DC", "DC"),
    ])
    def test_recognised(self, raw, expected):
        assert normalize_state(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "ZZ", "Atlantis", 12])
    def test_unrecognised(self, raw):
        assert normalize_state(raw) is None


class TestCostOfLivingTier:
    @pytest.mark.parametrize("state, tier", [
        ("CA", CostOfLivingTier.HIGH),
        ("WA", CostOfLivingTier.HIGH),
        ("CO", CostOfLivingTier.ELEVATED),
        ("TX", CostOfLivingTier.STANDARD),
        ("OH", CostOfLivingTier.STANDARD),
        ("MS", CostOfLivingTier.LOW),
    ])
    def test_tiers(self, state, tier):
        assert cost_of_living_tier(state) == tier

    def test_unknown_state_has_no_tier(self):
        assert cost_of_living_tier("ZZ") is None


class TestLocationFactor:
    def test_factors(self):
        assert location_factor("NY") == 1.2
        assert location_factor("FL") == 1.1
        assert location_factor("GA") == 1.0
        assert location_factor("AL") == 0.9

    def test_unknown_state_is_neutral(self):
        assert location_factor(None) == 1.0
        assert location_factor("ZZ") == 1.0

    def test_every_tier_has_a_factor(self):
        assert set(TIER_FACTORS) == set(CostOfLivingTier)
