"""
Display formatting for suggestion values.

    currency fields   : "$" + thousands-grouped integer   1500000 -> "$1,500,000"
    percentage fields : number + "%", one decimal kept   62.5 -> "62.5%", 8 -> "8%"
    list values       : joined with ", "
    anything else     : str(value)
"""

from __future__ import annotations

from listing_insights.models.suggestion import Suggestion, SuggestionValue
from listing_insights.suggestions.rules import round_half_up

CURRENCY_FIELDS: frozenset[str] = frozenset({
    "asking_price", "revenue", "profit", "cash_flow", "ebitda",
    "monthly_revenue", "total_assets", "liabilities",
})
PERCENT_FIELDS: frozenset[str] = frozenset({"gross_margin", "net_margin", "yearly_growth"})


def format_currency(value: float) -> str:
    amount = round_half_up(value)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_percent(value: float) -> str:
    rounded = round(float(value), 1)
    if rounded.is_integer():
        return f"{int(rounded)}%"
    return f"{rounded:.1f}%"


def format_value(field: str, value: SuggestionValue) -> str:
    """Render ``value`` as it would appear next to ``field`` in the form."""
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if field in CURRENCY_FIELDS:
            return format_currency(value)
        if field in PERCENT_FIELDS:
            return format_percent(value)
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
    return str(value)


def format_suggestion_value(suggestion: Suggestion) -> str:
    """Display string for a suggestion's value."""
    return format_value(suggestion.field, suggestion.value)
