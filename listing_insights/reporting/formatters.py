"""
ASCII terminal formatters for CLI commands.

All formatters accept model instances and return plain multi-line strings
suitable for ``typer.echo()``.

No third-party dependencies (no ``rich``, no ``colorama``).

Confidence tags
---------------
Suggestion rows carry a coarse confidence tag next to the numeric value so
readers can skim the table::

  [HIGH]  confidence >= 0.7
  [MED]   confidence >= 0.4
  [LOW]   otherwise
"""

from __future__ import annotations

from typing import Optional

from listing_insights.benchmarks.tables import BenchmarkTables
from listing_insights.health.insights import HealthInsights
from listing_insights.models.health import CATEGORY_WEIGHTS, HealthScore
from listing_insights.models.suggestion import Suggestion
from listing_insights.suggestions.formatting import format_suggestion_value

_BAR_WIDTH = 20


def confidence_tag(confidence: float) -> str:
    if confidence >= 0.7:
        return "[HIGH]"
    if confidence >= 0.4:
        return "[MED]"
    return "[LOW]"


def _bar(score: int) -> str:
    filled = int(round(score / 100 * _BAR_WIDTH))
    return "#" * filled + "." * (_BAR_WIDTH - filled)


# ── Suggestions ───────────────────────────────────────────────────────────────


def format_suggestions_table(
    suggestions: list[Suggestion],
    title: str = "Suggestions",
    show_reasons: bool = True,
) -> str:
    """Format suggestions as an ASCII table, in the order given.

    Example::

          Field               Value                  Conf          Source
          ----------------------------------------------------------------------
          monthly_revenue     $41,667                0.95 [HIGH]   algorithm
            Calculated from annual revenue ÷ 12 months

    Args:
        suggestions:  Engine output (already ranked).
        title:        Header line.
        show_reasons: Print the reason under each row.

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", f"=== {title} ==="]

    if not suggestions:
        lines.append("")
        lines.append("  (no suggestions available)")
        return "\n".join(lines)

    lines.append("")
    header = f"  {'Field':<20}  {'Value':<24}  {'Conf':<12}  {'Source':<16}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for s in suggestions:
        value = format_suggestion_value(s)
        if len(value) > 24:
            value = value[:21] + "..."
        conf = f"{s.confidence:.2f} {confidence_tag(s.confidence)}"
        lines.append(f"  {s.field:<20}  {value:<24}  {conf:<12}  {s.source.value:<16}")
        if show_reasons:
            lines.append(f"    {s.reason}")

    return "\n".join(lines)


# ── Health ────────────────────────────────────────────────────────────────────


def format_health_report(
    score: HealthScore,
    insights: Optional[HealthInsights] = None,
    show_factors: bool = False,
) -> str:
    """Format a health score (and optional insights) for the terminal.

    Example::

        === Business Health ===
          Overall:         64/100   (confidence 0.72 medium, trajectory stable)

          Category          Score  Weight  Coverage
          financial            71    0.40      100%  ##############......

    Returns:
        Multi-line string.
    """
    lines: list[str] = ["", "=== Business Health ==="]
    lines.append(
        f"  Overall:         {score.overall_score}/100   "
        f"(confidence {score.confidence_level:.2f} {score.confidence_label}, "
        f"trajectory {score.trajectory.value})"
    )
    lines.append(f"  Calculated at:   {score.calculated_at.isoformat()}")
    sources = ", ".join(name for name, present in score.data_sources.items() if present)
    lines.append(f"  Data sources:    {sources or 'none'}")

    lines.append("")
    header = f"  {'Category':<16}  {'Score':>5}  {'Weight':>6}  {'Coverage':>8}"
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2 + _BAR_WIDTH + 2))
    for name, value in score.category_scores().items():
        part = score.breakdown.get(name)
        coverage = f"{part.coverage:.0%}" if part is not None else "N/A"
        lines.append(
            f"  {name:<16}  {value:>5}  {CATEGORY_WEIGHTS[name]:>6.2f}  "
            f"{coverage:>8}  {_bar(value)}"
        )
        if show_factors and part is not None:
            for factor in part.factors:
                lines.append(f"      - {factor}")

    if insights is not None:
        lines.append("")
        lines.append(f"  {insights.summary}")
        if insights.key_strengths:
            lines.append("")
            lines.append("  Strengths:")
            lines.extend(f"    + {s}" for s in insights.key_strengths)
        if insights.key_weaknesses:
            lines.append("")
            lines.append("  Weaknesses:")
            lines.extend(f"    - {w}" for w in insights.key_weaknesses)
        if insights.recommendations:
            lines.append("")
            lines.append("  Recommendations:")
            lines.extend(
                f"    {i}. {r}" for i, r in enumerate(insights.recommendations, start=1)
            )

    return "\n".join(lines)


# ── Benchmarks ────────────────────────────────────────────────────────────────


def format_benchmark_table(tables: BenchmarkTables) -> str:
    """Format every benchmark (default last) as an ASCII table."""
    lines: list[str] = ["", "=== Industry Benchmarks ===", ""]
    header = (
        f"  {'Category':<14}  {'Gross %':>9}  {'Net %':>7}  {'Multiple':>14}  "
        f"{'Rev/Emp':>9}  {'Hours':<18}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    rows = [tables.get(key) for key in tables.categories] + [tables.default]
    for b in rows:
        gross = f"{b.gross_margin.low:g}-{b.gross_margin.high:g}"
        net = f"{b.net_margin.low:g}-{b.net_margin.high:g}"
        rm = b.revenue_multiple
        multiple = f"{rm.low:g}-{rm.high:g} ({rm.center:g}x)"
        rev_emp = f"${b.revenue_per_employee / 1000:,.0f}K"
        label = b.category if b is not tables.default else f"{b.category}*"
        lines.append(
            f"  {label:<14}  {gross:>9}  {net:>7}  {multiple:>14}  "
            f"{rev_emp:>9}  {b.typical_hours:<18}"
        )

    lines.append("")
    lines.append("  * default used for unknown categories")
    return "\n".join(lines)
