"""
Financial category: profitability, leverage, cash generation and efficiency.

Signals (expected 5)
--------------------
gross_margin     : ``gross_margin`` against the category gross-margin range.
net_margin       : ``net_margin``, or ``profit / revenue`` when the margin is
                   missing, against the category net-margin range.
debt_ratio       : ``1 - liabilities / total_assets`` (equity share).
cash_flow_ratio  : ``cash_flow / revenue``.
asset_turnover   : ``revenue / total_assets``.

Percentages outside [-100, 100] and ratios with a non-positive denominator
are treated as missing rather than scored.
"""

from __future__ import annotations

from typing import Optional

from listing_insights.benchmarks.tables import CategoryBenchmark
from listing_insights.health.utils import build_breakdown, normalize_to_score, safe_ratio
from listing_insights.models.health import ScoreBreakdown
from listing_insights.models.profile import BusinessProfile

EXPECTED_SIGNALS = 5

EQUITY_SHARE_THRESHOLDS = {"poor": 0.10, "average": 0.40, "good": 0.60, "excellent": 0.80}
CASH_FLOW_RATIO_THRESHOLDS = {"poor": -0.10, "average": 0.05, "good": 0.15, "excellent": 0.25}
ASSET_TURNOVER_THRESHOLDS = {"poor": 0.5, "average": 1.0, "good": 1.8, "excellent": 3.0}

WEAK_SIGNAL = 50.0


def _plausible_percent(value: Optional[float]) -> Optional[float]:
    if value is None or not -100.0 <= value <= 100.0:
        return None
    return value


def net_margin_pct(profile: BusinessProfile) -> Optional[float]:
    """Stated net margin, else profit / revenue in percent."""
    stated = _plausible_percent(profile.net_margin)
    if stated is not None:
        return stated
    derived = safe_ratio(profile.profit, profile.revenue)
    return _plausible_percent(derived * 100.0) if derived is not None else None


def score_financial(profile: BusinessProfile, benchmark: CategoryBenchmark) -> ScoreBreakdown:
    """Score the financial category for ``profile``.

    Args:
        profile: Business profile.
        benchmark: Category benchmark (margin ranges).

    Returns:
        ``ScoreBreakdown`` with up to five components.
    """
    components: dict[str, float] = {}
    factors: list[str] = []
    recommendations: list[str] = []
    name = benchmark.display_name

    gross = _plausible_percent(profile.gross_margin)
    if gross is not None:
        gm = benchmark.gross_margin
        components["gross_margin"] = normalize_to_score(gross, gm.thresholds())
        factors.append(f"Gross margin {gross:g}% ({name} range {gm.low:g}–{gm.high:g}%)")
        if components["gross_margin"] < WEAK_SIGNAL:
            recommendations.append(
                f"Review pricing and cost of goods to lift gross margin toward "
                f"{gm.midpoint:g}%"
            )

    net = net_margin_pct(profile)
    if net is not None:
        nm = benchmark.net_margin
        components["net_margin"] = normalize_to_score(net, nm.thresholds())
        factors.append(f"Net margin {net:.1f}% ({name} range {nm.low:g}–{nm.high:g}%)")
        if components["net_margin"] < WEAK_SIGNAL:
            recommendations.append("Reduce operating expenses to improve net profitability")

    debt_ratio = safe_ratio(profile.liabilities, profile.total_assets)
    if debt_ratio is not None and debt_ratio >= 0:
        components["debt_ratio"] = normalize_to_score(1.0 - debt_ratio, EQUITY_SHARE_THRESHOLDS)
        factors.append(f"Debt ratio {debt_ratio:.0%} of total assets")
        if components["debt_ratio"] < WEAK_SIGNAL:
            recommendations.append("Pay down liabilities before listing to strengthen the balance sheet")

    cash_ratio = safe_ratio(profile.cash_flow, profile.revenue)
    if cash_ratio is not None:
        components["cash_flow_ratio"] = normalize_to_score(cash_ratio, CASH_FLOW_RATIO_THRESHOLDS)
        factors.append(f"Cash flow {cash_ratio:.1%} of revenue")
        if components["cash_flow_ratio"] < WEAK_SIGNAL:
            recommendations.append("Improve cash conversion (receivables, inventory, owner add-backs)")

    turnover = safe_ratio(profile.revenue, profile.total_assets)
    if turnover is not None and turnover > 0:
        components["asset_turnover"] = normalize_to_score(turnover, ASSET_TURNOVER_THRESHOLDS)
        factors.append(f"Asset turnover {turnover:.2f}x")
        if components["asset_turnover"] < WEAK_SIGNAL:
            recommendations.append("Put idle assets to work or divest them to raise asset turnover")

    if len(components) < EXPECTED_SIGNALS:
        missing = EXPECTED_SIGNALS - len(components)
        factors.append(f"{missing} of {EXPECTED_SIGNALS} financial signals unavailable")

    return build_breakdown(
        components,
        coverage=len(components) / EXPECTED_SIGNALS,
        factors=factors,
        recommendations=recommendations,
    )
