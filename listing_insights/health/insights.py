"""
Human-readable insights derived from a ``HealthScore``.

``generate_health_insights(score)`` returns a summary sentence, key
strengths (category score >= 70), key weaknesses (< 50) and at most
``MAX_RECOMMENDATIONS`` recommendations: category recommendations in weight
order, followed by data-quality recommendations.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from listing_insights.models.health import HealthScore

STRENGTH_THRESHOLD = 70
WEAKNESS_THRESHOLD = 50
MAX_RECOMMENDATIONS = 8

_STRENGTH_TEXT = {
    "financial":      "Strong financial performance",
    "growth":         "Excellent growth potential",
    "operational":    "Solid operational foundation",
    "sale_readiness": "Well-prepared for sale",
}
_WEAKNESS_TEXT = {
    "financial":      "Financial health needs improvement",
    "growth":         "Growth potential limited",
    "operational":    "Operational efficiency concerns",
    "sale_readiness": "Sale readiness requires attention",
}
_CATEGORY_DATA_HINT = {
    "financial":      "margins, cash flow, liabilities and total assets",
    "growth":         "year-over-year growth or prior-year statements",
    "operational":    "years established, employees and operating schedule",
    "sale_readiness": "asking price and a full listing description",
}


class HealthInsights(BaseModel):
    """Summary view of a health score."""

    model_config = ConfigDict(frozen=True)

    summary: str
    key_strengths: list[str] = []
    key_weaknesses: list[str] = []
    recommendations: list[str] = []


def _summary(overall: int) -> str:
    if overall >= 80:
        return (
            f"Excellent business health with a score of {overall}/100. This business "
            "demonstrates strong performance across multiple dimensions."
        )
    if overall >= 60:
        return (
            f"Good business health with a score of {overall}/100. The business shows "
            "solid fundamentals with opportunities for improvement."
        )
    if overall >= 40:
        return (
            f"Moderate business health with a score of {overall}/100. Several areas "
            "need attention to strengthen overall performance."
        )
    return (
        f"Business health concerns with a score of {overall}/100. Significant "
        "improvements needed across multiple areas."
    )


def _data_quality_recommendations(score: HealthScore) -> list[str]:
    recs: list[str] = []
    for name, part in score.breakdown.items():
        if part.coverage < 0.5:
            hint = _CATEGORY_DATA_HINT.get(name, "more data")
            recs.append(f"Add {hint} to sharpen the {name.replace('_', ' ')} score")
    if score.confidence_level < 0.5:
        recs.append("Complete and reconcile the financial figures to raise scoring confidence")
    return recs


def generate_health_insights(score: HealthScore) -> HealthInsights:
    """Summarise ``score`` into strengths, weaknesses and recommendations."""
    strengths: list[str] = []
    weaknesses: list[str] = []
    for name, value in score.category_scores().items():
        if value >= STRENGTH_THRESHOLD:
            strengths.append(f"{_STRENGTH_TEXT[name]} ({value}/100)")
        elif value < WEAKNESS_THRESHOLD:
            weaknesses.append(f"{_WEAKNESS_TEXT[name]} ({value}/100)")

    recommendations: list[str] = []
    for name in score.category_scores():
        part = score.breakdown.get(name)
        if part is not None:
            recommendations.extend(part.recommendations)
    recommendations.extend(_data_quality_recommendations(score))

    deduped = list(dict.fromkeys(recommendations))
    return HealthInsights(
        summary=_summary(score.overall_score),
        key_strengths=strengths,
        key_weaknesses=weaknesses,
        recommendations=deduped[:MAX_RECOMMENDATIONS],
    )
