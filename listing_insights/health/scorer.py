"""
Health / valuation scorer: assembles a ``HealthScore`` from the four
category scorers.

Input subsets (disjoint)
------------------------
financial      ← gross / net margin, profit, revenue, cash flow,
                 liabilities, total assets
growth         ← yearly growth, statement revenue growth, history trend
operational    ← years established, employees, days open, hours
sale_readiness ← documentation completeness, description, asking-price
                 multiple, and the financial *score*

Each category is shrunk toward 50 by its coverage (see ``health.utils``).
``HealthScore.overall_score`` is derived from the four category scores with
the fixed ``CATEGORY_WEIGHTS``.

The scorer is pure: same inputs (and ``now``) give the same score.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from listing_insights.benchmarks.tables import DEFAULT_BENCHMARKS, BenchmarkTables
from listing_insights.health.confidence import (
    compute_confidence,
    find_inconsistencies,
    find_outliers,
)
from listing_insights.health.financial import score_financial
from listing_insights.health.growth import score_growth
from listing_insights.health.operational import score_operational
from listing_insights.health.sale_readiness import score_sale_readiness
from listing_insights.health.trajectory import classify_trajectory
from listing_insights.models.health import FinancialStatement, HealthHistoryPoint, HealthScore
from listing_insights.models.profile import coerce_context, coerce_profile

logger = logging.getLogger(__name__)


def compute_health_score(
    profile: Any = None,
    context: Any = None,
    history: Optional[Sequence[HealthHistoryPoint]] = None,
    statements: Optional[Sequence[FinancialStatement]] = None,
    benchmarks: BenchmarkTables = DEFAULT_BENCHMARKS,
    now: Optional[datetime] = None,
) -> HealthScore:
    """Compute the health score for one business profile.

    Args:
        profile: ``BusinessProfile``, mapping or ``None``.
        context: ``SuggestionContext``, mapping or ``None``; its category
            overrides ``profile.category``.
        history: Previously persisted scores, any order.
        statements: Annual financial statements, any order.
        benchmarks: Category benchmark tables.
        now: Calculation timestamp; defaults to the current UTC time.

    Returns:
        Frozen ``HealthScore``.

    Raises:
        TypeError: If ``profile`` or ``context`` is neither a model, a
            mapping nor ``None``.
    """
    biz = coerce_profile(profile)
    ctx = coerce_context(context)
    history = list(history or [])
    statements = list(statements or [])

    category = ctx.category or biz.category
    benchmark = benchmarks.get(category)

    financial = score_financial(biz, benchmark)
    growth = score_growth(biz, statements=statements, history=history)
    operational = score_operational(biz)
    sale_readiness = score_sale_readiness(biz, benchmark, financial.score)

    breakdown = {
        "financial":      financial,
        "growth":         growth,
        "operational":    operational,
        "sale_readiness": sale_readiness,
    }

    inconsistencies = find_inconsistencies(biz)
    outliers = find_outliers(biz)
    confidence = compute_confidence(
        {name: b.coverage for name, b in breakdown.items()},
        inconsistencies=len(inconsistencies),
        outliers=len(outliers),
    )
    if inconsistencies or outliers:
        logger.info(
            "Data quality issues lowered confidence: %s",
            ", ".join(inconsistencies + outliers),
        )

    score = HealthScore(
        financial_score=financial.score,
        growth_score=growth.score,
        operational_score=operational.score,
        sale_readiness_score=sale_readiness.score,
        confidence_level=confidence,
        trajectory=classify_trajectory(financial.score, growth.score, history),
        data_sources={
            "profile":              bool(biz.populated_fields()),
            "history":              bool(history),
            "financial_statements": bool(statements),
        },
        calculated_at=now or datetime.now(timezone.utc),
        breakdown=breakdown,
    )
    logger.debug(
        "Health score %d (confidence %.2f, %s) for category %s",
        score.overall_score, score.confidence_level, score.trajectory.value,
        benchmark.category,
    )
    return score
