"""
Operational category: maturity, staffing and operating schedule.

Signals (expected 4)
--------------------
maturity  : ``years_established``       (1 / 3 / 7 / 15 years)
staffing  : ``employees``               (1 / 3 / 10 / 25 people)
schedule  : distinct ``days_open``      (2 / 4 / 5 / 6 days)
hours     : ``hours_of_operation`` text (keyword scoring)
"""

from __future__ import annotations

import re
from typing import Optional

from listing_insights.health.utils import build_breakdown, normalize_to_score
from listing_insights.models.health import ScoreBreakdown
from listing_insights.models.profile import BusinessProfile

EXPECTED_SIGNALS = 4

MATURITY_THRESHOLDS = {"poor": 1.0, "average": 3.0, "good": 7.0, "excellent": 15.0}
STAFFING_THRESHOLDS = {"poor": 1.0, "average": 3.0, "good": 10.0, "excellent": 25.0}
SCHEDULE_THRESHOLDS = {"poor": 2.0, "average": 4.0, "good": 5.0, "excellent": 6.0}

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

_TIME_PATTERN = re.compile(r"\b\d{1,2}(:\d{2})?\s*(am|pm)\b", re.IGNORECASE)
_ALWAYS_OPEN = re.compile(r"24\s*/\s*7|24\s*hours|always open", re.IGNORECASE)
_APPOINTMENT = re.compile(r"appointment", re.IGNORECASE)


def maturity_stage(years: Optional[float]) -> str:
    """``new`` / ``growing`` / ``mature`` / ``established``."""
    if years is None or years <= 2:
        return "new"
    if years <= 5:
        return "growing"
    if years <= 10:
        return "mature"
    return "established"


def count_operating_days(days: Optional[list[str]]) -> int:
    """Distinct recognised weekday names (full or three-letter) in ``days``."""
    if not days:
        return 0
    seen: set[str] = set()
    for day in days:
        key = day.strip().lower()
        for name in WEEKDAYS:
            if key == name or (len(key) >= 3 and name.startswith(key)):
                seen.add(name)
                break
    return len(seen)


def hours_score(hours: str) -> float:
    """Score free-text opening hours by how clearly they are stated."""
    if _ALWAYS_OPEN.search(hours):
        return 90.0
    if len(_TIME_PATTERN.findall(hours)) >= 2:
        return 75.0
    if _APPOINTMENT.search(hours):
        return 50.0
    return 40.0


def score_operational(profile: BusinessProfile) -> ScoreBreakdown:
    """Score the operational category."""
    components: dict[str, float] = {}
    factors: list[str] = []
    recommendations: list[str] = []

    years = profile.years_established
    if years is not None and years >= 0:
        components["maturity"] = normalize_to_score(years, MATURITY_THRESHOLDS)
        factors.append(f"{years:g} years in operation ({maturity_stage(years)} business)")

    employees = profile.employees
    if employees is not None and employees >= 0:
        components["staffing"] = normalize_to_score(employees, STAFFING_THRESHOLDS)
        factors.append(f"{employees:g} employees")
        if employees <= 1:
            recommendations.append("Reduce owner dependence by documenting roles and training staff")

    days = count_operating_days(profile.days_open)
    if days > 0:
        components["schedule"] = normalize_to_score(float(days), SCHEDULE_THRESHOLDS)
        factors.append(f"Open {days} day(s) per week")

    if profile.hours_of_operation:
        components["hours"] = hours_score(profile.hours_of_operation)
        factors.append(f"Hours: {profile.hours_of_operation}")
        if components["hours"] < 50.0:
            recommendations.append("State opening hours explicitly (e.g. '9:00 AM - 5:00 PM')")

    missing = EXPECTED_SIGNALS - len(components)
    if missing:
        factors.append(f"{missing} of {EXPECTED_SIGNALS} operational signals unavailable")
        recommendations.append("Complete years established, staffing and schedule details")

    return build_breakdown(
        components,
        coverage=len(components) / EXPECTED_SIGNALS,
        factors=factors,
        recommendations=recommendations,
    )
