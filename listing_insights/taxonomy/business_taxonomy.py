"""
Business listing taxonomy shared by the suggestion engine and the health scorer.

Enumerations
------------
``BusinessCategory``   : industry tag carried on a listing (form ``category``).
``SuggestionSource``   : provenance tag on every ``Suggestion``.
``BusinessSize``       : coarse revenue bucket used as suggestion context.
``HealthTrajectory``   : directional label on a ``HealthScore``.
``CostOfLivingTier``   : state-level location modifier tier.

The string values are the wire values used by the marketplace front end
(upper-case categories, lower-case everything else); never rename a value
without migrating persisted suggestion keys.

This module has NO imports from any other ``listing_insights`` package.
"""

from enum import StrEnum


class BusinessCategory(StrEnum):
    """Industry tag for a listed business."""

    RESTAURANT = "RESTAURANT"
    """Full-service and quick-service food businesses, cafes, bars."""

    RETAIL = "RETAIL"
    """Brick-and-mortar stores selling physical goods."""

    ECOMMERCE = "ECOMMERCE"
    """Online stores, marketplaces sellers, subscription boxes."""

    TECHNOLOGY = "TECHNOLOGY"
    """Software, SaaS, IT services and other technology-led businesses."""

    SERVICES = "SERVICES"
    """Professional and personal services (agencies, cleaning, consulting)."""

    MANUFACTURING = "MANUFACTURING"
    """Production of goods, light industrial, fabrication."""

    HEALTHCARE = "HEALTHCARE"
    """Clinics, practices, home care and other healthcare providers."""

    AUTOMOTIVE = "AUTOMOTIVE"
    """Repair shops, dealerships, detailing."""

    GENERAL = "GENERAL"
    """Fallback "general business" benchmark for unknown categories."""


class SuggestionSource(StrEnum):
    """Where a suggested value came from."""

    INDUSTRY_AVERAGE = "industry_average"
    """Category benchmark figure — a guess, not a calculation."""

    SIMILAR_BUSINESS = "similar_business"
    """Derived from comparable listings (reserved for callers)."""

    USER_HISTORY = "user_history"
    """Derived from the user's previous listings (reserved for callers)."""

    ALGORITHM = "algorithm"
    """Exact or near-exact arithmetic derivation from populated fields."""


class BusinessSize(StrEnum):
    """Coarse revenue bucket."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class HealthTrajectory(StrEnum):
    """Direction of recent health performance."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class CostOfLivingTier(StrEnum):
    """State cost-of-living tier used by the location modifier."""

    HIGH = "high"
    ELEVATED = "elevated"
    STANDARD = "standard"
    LOW = "low"


# Sources enabled by default in the preference layer (all of them).
ALL_SOURCES: frozenset[str] = frozenset(s.value for s in SuggestionSource)
