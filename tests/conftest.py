"""
Shared pytest fixtures for the listing-insights test suite.

Provides:
  - Sample profile / context factories (restaurant listing, fully
    documented listing) used across suggestion and health tests.
  - ``fixture_benchmarks``: a small injected ``BenchmarkTables`` so tests do
    not depend on the built-in figures.
  - ``fake_clock``: a manually advanced clock for ``SuggestionSession``.
  - ``config_file``: a minimal TOML config in ``tmp_path`` with
    ``LISTING_INSIGHTS_*`` env vars cleared.
"""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from listing_insights.benchmarks.tables import (
    BenchmarkRange,
    BenchmarkTables,
    CategoryBenchmark,
)
from listing_insights.models.profile import BusinessProfile, SuggestionContext


# ── Profiles ──────────────────────────────────────────────────────────────────

@pytest.fixture
def restaurant_profile() -> BusinessProfile:
    """A sparse restaurant listing with only category and revenue."""
    return BusinessProfile(category="RESTAURANT", revenue=500_000)


@pytest.fixture
def restaurant_context() -> SuggestionContext:
    """Medium restaurant in Seattle, WA."""
    return SuggestionContext.model_validate({
        "category": "RESTAURANT",
        "businessSize": "medium",
        "location": {"city": "Seattle", "state": "WA"},
    })


@pytest.fixture
def full_profile() -> BusinessProfile:
    """A fully documented, internally consistent restaurant listing."""
    return BusinessProfile(
        category="RESTAURANT",
        revenue=1_200_000,
        gross_margin=66,
        net_margin=12,
        profit=144_000,
        cash_flow=160_000,
        ebitda=200_000,
        monthly_revenue=100_000,
        asking_price=1_500_000,
        employees=18,
        years_established=12,
        city="Portland",
        state="OR",
        description=" ".join(["Established neighborhood bistro with loyal regulars."] * 10),
        days_open=["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
        hours_of_operation="11:00 AM - 10:00 PM",
        yearly_growth=12,
        liabilities=150_000,
        total_assets=600_000,
    )


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


# ── Benchmarks ────────────────────────────────────────────────────────────────

@pytest.fixture
def fixture_benchmarks() -> BenchmarkTables:
    """Tables with a single BAKERY benchmark and a custom default."""
    bakery = CategoryBenchmark(
        category="BAKERY",
        display_name="bakery",
        gross_margin=BenchmarkRange(low=60, high=80),
        net_margin=BenchmarkRange(low=4, high=10),
        revenue_multiple=BenchmarkRange(low=1.0, high=2.0, typical=1.5),
        revenue_per_employee=50_000,
        typical_hours="6:00 AM - 2:00 PM",
        common_days=["Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
    )
    fallback = CategoryBenchmark(
        category="GENERAL",
        display_name="general business",
        gross_margin=BenchmarkRange(low=30, high=50),
        net_margin=BenchmarkRange(low=2, high=8),
        revenue_multiple=BenchmarkRange(low=0.5, high=1.5, typical=1.0),
    )
    return BenchmarkTables({"BAKERY": bakery}, default=fallback)


# ── Session clock ─────────────────────────────────────────────────────────────

class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


# ── Config ────────────────────────────────────────────────────────────────────

_ENV_VARS = (
    "LISTING_INSIGHTS_LOG_LEVEL",
    "LISTING_INSIGHTS_BENCHMARKS_FILE",
    "LISTING_INSIGHTS_DEBUG",
)

CONFIG_TOML = """\
[project]
debug = false

[logging]
level = "WARNING"
log_file = ""
json_format = false

[suggestions]
minimum_confidence = 0.3
auto_apply_threshold = 0.8
debounce_ms = 500
enabled_sources = ["algorithm", "industry_average"]

[benchmarks]
overrides_file = ""
"""


@pytest.fixture
def clean_env(monkeypatch):
    """Remove LISTING_INSIGHTS_* overrides inherited from the shell."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def config_file(tmp_path, clean_env):
    """Path to a minimal valid TOML config."""
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML, encoding="utf-8")
    return path
