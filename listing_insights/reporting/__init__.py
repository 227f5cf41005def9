"""
listing_insights.reporting — ASCII formatting for CLI display.

Modules:
  formatters — terminal table formatters for suggestions, health scores
               and benchmark tables.
"""
