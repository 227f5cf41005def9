"""
State cost-of-living tiers used to adjust suggested asking prices.

Tier → price factor
-------------------
    high     : 1.20   (CA, NY, MA, CT, NJ, WA, plus HI and DC)
    elevated : 1.10   (coastal / metro-heavy states)
    standard : 1.00   (every recognised state not listed elsewhere)
    low      : 0.90   (lowest cost-of-living states)

Lookup is by two-letter USPS code, case-insensitive.  Full state names are
accepted for the most common spellings.  Unrecognised input returns ``None``
so the caller can leave the suggestion untouched.
"""

from __future__ import annotations

from typing import Optional

from listing_insights.taxonomy.business_taxonomy import CostOfLivingTier

TIER_FACTORS: dict[CostOfLivingTier, float] = {
    CostOfLivingTier.HIGH:     1.20,
    CostOfLivingTier.ELEVATED: 1.10,
    CostOfLivingTier.STANDARD: 1.00,
    CostOfLivingTier.LOW:      0.90,
}

_HIGH = {"CA", "NY", "MA", "CT", "NJ", "WA", "HI", "DC"}
_ELEVATED = {"MD", "VA", "CO", "OR", "RI", "NH", "VT", "AK", "DE", "IL", "FL", "NV", "MN", "UT"}
_LOW = {"MS", "AR", "AL", "WV", "OK", "KY", "KS", "IA", "MO", "TN", "IN", "LA"}

_ALL_STATES = {
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL", "GA", "HI", "ID",
    "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO",
    "MT", "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA",
    "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
}

_STATE_NAMES: dict[str, str] = {
    "CALIFORNIA": "CA",
    "NEW YORK": "NY",
    "MASSACHUSETTS": "MA",
    "CONNECTICUT": "CT",
    "NEW JERSEY": "NJ",
    "WASHINGTON": "WA",
    "TEXAS": "TX",
    "FLORIDA": "FL",
    "ILLINOIS": "IL",
    "COLORADO": "CO",
    "GEORGIA": "GA",
    "OHIO": "OH",
    "PENNSYLVANIA": "PA",
    "ARIZONA": "AZ",
    "MISSISSIPPI": "MS",
}


def normalize_state(state: Optional[str]) -> Optional[str]:
    """Return the two-letter code for ``state``, or ``None`` if unrecognised."""
    if not isinstance(state, str):
        return None
    key = state.strip().upper()
    if not key:
        return None
    key = _STATE_NAMES.get(key, key)
    return key if key in _ALL_STATES else None


def cost_of_living_tier(state: Optional[str]) -> Optional[CostOfLivingTier]:
    """Cost-of-living tier for a state; ``None`` when the state is unknown."""
    code = normalize_state(state)
    if code is None:
        return None
    if code in _HIGH:
        return CostOfLivingTier.HIGH
    if code in _ELEVATED:
        return CostOfLivingTier.ELEVATED
    if code in _LOW:
        return CostOfLivingTier.LOW
    return CostOfLivingTier.STANDARD


def location_factor(state: Optional[str]) -> float:
    """Price factor for a state; 1.0 when the state is unknown."""
    tier = cost_of_living_tier(state)
    return TIER_FACTORS[tier] if tier is not None else 1.0
