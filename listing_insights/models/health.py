"""
Health score output and history input models.

``HealthScore`` is the scorer's output.  ``overall_score`` is a computed
field: it is derived from the four category scores with the fixed
``CATEGORY_WEIGHTS`` every time it is read or serialized, so the whole can
never drift from its parts.

``HealthHistoryPoint`` and ``FinancialStatement`` are optional inputs that the
health-dashboard layer loads from its own storage and passes in.

All models are frozen; a score is computed fresh per call and never mutated.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, computed_field, field_validator

from listing_insights.taxonomy.business_taxonomy import HealthTrajectory

# Fixed overall-score weights.  Documented and stable; sum to 1.0.
CATEGORY_WEIGHTS: dict[str, float] = {
    "financial":      0.40,
    "growth":         0.25,
    "operational":    0.20,
    "sale_readiness": 0.15,
}

ConfidenceLabel = Literal["low", "medium", "high", "very_high"]


def label_for_confidence(level: float) -> ConfidenceLabel:
    """Map a 0–1 confidence level to its categorical label."""
    if level < 0.50:
        return "low"
    if level < 0.75:
        return "medium"
    if level < 0.90:
        return "high"
    return "very_high"


def _validate_score(v: int) -> int:
    if not 0 <= v <= 100:
        raise ValueError(f"score must be in [0, 100], got {v}.")
    return v


class ScoreBreakdown(BaseModel):
    """Detail behind one category score.

    Attributes:
        score: Final category score (0–100) after shrinkage toward 50.
        raw_score: Mean of the available signal scores before shrinkage.
        coverage: Fraction of expected signals that were available (0–1).
        components: Signal name → signal score (0–100).
        factors: Human-readable notes about the inputs.
        recommendations: Suggested improvements for low-scoring areas.
    """

    model_config = ConfigDict(frozen=True)

    score: int
    raw_score: float
    coverage: float
    components: dict[str, float] = {}
    factors: list[str] = []
    recommendations: list[str] = []


class HealthScore(BaseModel):
    """Aggregate health/valuation rating for one business profile.

    Attributes:
        financial_score: 0–100.
        growth_score: 0–100.
        operational_score: 0–100.
        sale_readiness_score: 0–100.
        confidence_level: 0–1, driven by data completeness and consistency.
        trajectory: ``improving`` / ``stable`` / ``declining``.
        data_sources: Input source name → whether it was available.
        calculated_at: UTC timestamp of the calculation.
        breakdown: Category name → ``ScoreBreakdown``.
    """

    model_config = ConfigDict(frozen=True)

    financial_score: int
    growth_score: int
    operational_score: int
    sale_readiness_score: int
    confidence_level: float
    trajectory: HealthTrajectory = HealthTrajectory.STABLE
    data_sources: dict[str, bool] = {}
    calculated_at: datetime
    breakdown: dict[str, ScoreBreakdown] = {}

    @field_validator(
        "financial_score", "growth_score", "operational_score", "sale_readiness_score"
    )
    @classmethod
    def validate_score_range(cls, v: int) -> int:
        return _validate_score(v)

    @field_validator("confidence_level")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence_level must be in [0.0, 1.0], got {v}.")
        return v

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall_score(self) -> int:
        """Weighted average of the category scores, rounded to an int in [0, 100]."""
        total = (
            self.financial_score        * CATEGORY_WEIGHTS["financial"]
            + self.growth_score         * CATEGORY_WEIGHTS["growth"]
            + self.operational_score    * CATEGORY_WEIGHTS["operational"]
            + self.sale_readiness_score * CATEGORY_WEIGHTS["sale_readiness"]
        )
        return max(0, min(100, int(total + 0.5)))

    @computed_field  # type: ignore[prop-decorator]
    @property
    def confidence_label(self) -> ConfidenceLabel:
        """Categorical form of ``confidence_level``."""
        return label_for_confidence(self.confidence_level)

    def category_scores(self) -> dict[str, int]:
        """Category name → score, in weight order."""
        return {
            "financial":      self.financial_score,
            "growth":         self.growth_score,
            "operational":    self.operational_score,
            "sale_readiness": self.sale_readiness_score,
        }


class HealthHistoryPoint(BaseModel):
    """One previously persisted health calculation.

    Attributes:
        calculated_at: When the historical score was computed (naive values are taken as UTC).
        financial_score: Historical financial score.
        growth_score: Historical growth score.
        overall_score: Historical overall score, if stored.
        revenue: Annual revenue at that time, if stored.
    """

    model_config = ConfigDict(frozen=True)

    calculated_at: datetime
    financial_score: int
    growth_score: int
    overall_score: Optional[int] = None
    revenue: Optional[float] = None

    @field_validator("calculated_at")
    @classmethod
    def normalize_to_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are taken as UTC so mixed history still sorts.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator("financial_score", "growth_score")
    @classmethod
    def validate_score_range(cls, v: int) -> int:
        return _validate_score(v)

    @classmethod
    def from_health_score(
        cls, score: HealthScore, revenue: Optional[float] = None
    ) -> "HealthHistoryPoint":
        """Snapshot a computed ``HealthScore`` for use as history."""
        return cls(
            calculated_at=score.calculated_at,
            financial_score=score.financial_score,
            growth_score=score.growth_score,
            overall_score=score.overall_score,
            revenue=revenue,
        )


class FinancialStatement(BaseModel):
    """Annual financial statement summary (e.g. from accounting exports).

    Attributes:
        period_end: Last day of the fiscal period.
        revenue: Revenue for the period in USD.
        net_income: Net income for the period in USD, if known.
    """

    model_config = ConfigDict(frozen=True)

    period_end: date
    revenue: float
    net_income: Optional[float] = None
