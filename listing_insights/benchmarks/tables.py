"""
Per-category industry benchmark tables.

``CategoryBenchmark`` holds the static reference figures for one industry:
gross / net margin ranges (percent), the revenue-multiple range used to
price a listing, size-band revenue thresholds, revenue per employee, and the
typical operating schedule.

``BenchmarkTables`` is an immutable lookup object.  It is passed into the
suggestion engine and the health scorer at construction / call time so tests
can substitute fixture tables without touching module state.  Lookup never
fails: an unknown or missing category returns the ``GENERAL`` ("general
business") benchmark.

Benchmark overrides
-------------------
``load_benchmark_tables(path)`` reads a JSON object keyed by category tag and
merges each entry over the built-in benchmark of the same key (or over
``GENERAL`` for a new key)::

    {
      "RESTAURANT": {"revenue_multiple": {"low": 0.9, "high": 2.4, "typical": 1.5}},
      "FITNESS":    {"display_name": "fitness", "gross_margin": {"low": 50, "high": 70}}
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, model_validator

from listing_insights.taxonomy.business_taxonomy import BusinessCategory, BusinessSize

logger = logging.getLogger(__name__)

_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
_ALL_DAYS = _WEEKDAYS + ["Saturday", "Sunday"]


class BenchmarkRange(BaseModel):
    """Inclusive numeric range with an optional typical value.

    ``typical`` defaults to the midpoint when not given.
    """

    model_config = ConfigDict(frozen=True)

    low: float
    high: float
    typical: Optional[float] = None

    @model_validator(mode="after")
    def validate_bounds(self) -> "BenchmarkRange":
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must be <= high ({self.high}).")
        if self.typical is not None and not self.low <= self.typical <= self.high:
            raise ValueError(
                f"typical ({self.typical}) must lie within [{self.low}, {self.high}]."
            )
        return self

    @property
    def midpoint(self) -> float:
        return round((self.low + self.high) / 2.0, 1)

    @property
    def center(self) -> float:
        """``typical`` when set, else the midpoint."""
        return self.typical if self.typical is not None else self.midpoint

    def clamp(self, value: float) -> float:
        return max(self.low, min(self.high, value))

    def thresholds(self) -> dict[str, float]:
        """Poor / average / good / excellent cut points derived from the range.

        ``low`` scores 25, the midpoint 50, ``high`` 75, and half a range
        width above ``high`` scores 100 (see ``health.utils.normalize_to_score``).
        """
        width = self.high - self.low
        return {
            "poor":      self.low,
            "average":   (self.low + self.high) / 2.0,
            "good":      self.high,
            "excellent": self.high + max(width / 2.0, 1e-6),
        }


class CategoryBenchmark(BaseModel):
    """Reference figures for one business category.

    Attributes:
        category: Category tag this benchmark describes.
        display_name: Lower-case name used in suggestion reasons.
        gross_margin: Typical gross margin range, percent.
        net_margin: Typical net margin range, percent.
        revenue_multiple: Asking price / annual revenue range.
        medium_revenue_threshold: Revenue above this is a medium business.
        large_revenue_threshold: Revenue above this is a large business.
        revenue_per_employee: Typical annual revenue per employee, USD.
        typical_hours: Usual opening hours text.
        common_days: Usual operating weekdays.
    """

    model_config = ConfigDict(frozen=True)

    category: str
    display_name: str
    gross_margin: BenchmarkRange
    net_margin: BenchmarkRange
    revenue_multiple: BenchmarkRange
    medium_revenue_threshold: float = 1_000_000
    large_revenue_threshold: float = 5_000_000
    revenue_per_employee: float = 75_000
    typical_hours: str = "9:00 AM - 5:00 PM"
    common_days: list[str] = _WEEKDAYS

    @model_validator(mode="after")
    def validate_size_bands(self) -> "CategoryBenchmark":
        if self.medium_revenue_threshold >= self.large_revenue_threshold:
            raise ValueError("medium_revenue_threshold must be below large_revenue_threshold.")
        if self.revenue_per_employee <= 0:
            raise ValueError("revenue_per_employee must be positive.")
        if self.revenue_multiple.low <= 0:
            raise ValueError(
                f"revenue_multiple.low must be positive, got {self.revenue_multiple.low}."
            )
        return self

    def size_band(self, revenue: Optional[float]) -> Optional[BusinessSize]:
        """Classify revenue with this category's thresholds; ``None`` without positive revenue."""
        if revenue is None or revenue <= 0:
            return None
        if revenue > self.large_revenue_threshold:
            return BusinessSize.LARGE
        if revenue > self.medium_revenue_threshold:
            return BusinessSize.MEDIUM
        return BusinessSize.SMALL


def _benchmark(
    category: BusinessCategory,
    display_name: str,
    gross: tuple[float, float],
    net: tuple[float, float],
    multiple: tuple[float, float, float],
    revenue_per_employee: float,
    typical_hours: str,
    common_days: list[str],
) -> CategoryBenchmark:
    return CategoryBenchmark(
        category=category.value,
        display_name=display_name,
        gross_margin=BenchmarkRange(low=gross[0], high=gross[1]),
        net_margin=BenchmarkRange(low=net[0], high=net[1]),
        revenue_multiple=BenchmarkRange(low=multiple[0], high=multiple[1], typical=multiple[2]),
        revenue_per_employee=revenue_per_employee,
        typical_hours=typical_hours,
        common_days=common_days,
    )


GENERAL_BENCHMARK = _benchmark(
    BusinessCategory.GENERAL, "general business",
    gross=(40, 60), net=(5, 15), multiple=(0.6, 2.5, 1.2),
    revenue_per_employee=75_000, typical_hours="9:00 AM - 5:00 PM", common_days=_WEEKDAYS,
)

_BUILTIN: dict[str, CategoryBenchmark] = {
    b.category: b
    for b in [
        _benchmark(
            BusinessCategory.RESTAURANT, "restaurant",
            gross=(55, 70), net=(3, 15), multiple=(0.8, 2.5, 1.4),
            revenue_per_employee=65_000, typical_hours="8:00 AM - 10:00 PM", common_days=_ALL_DAYS,
        ),
        _benchmark(
            BusinessCategory.RETAIL, "retail",
            gross=(45, 65), net=(2, 12), multiple=(0.5, 2.0, 1.2),
            revenue_per_employee=45_000, typical_hours="9:00 AM - 9:00 PM", common_days=_ALL_DAYS,
        ),
        _benchmark(
            BusinessCategory.ECOMMERCE, "ecommerce",
            gross=(40, 80), net=(5, 25), multiple=(1.5, 5.0, 2.8),
            revenue_per_employee=120_000, typical_hours="24/7 (Online)", common_days=_ALL_DAYS,
        ),
        _benchmark(
            BusinessCategory.TECHNOLOGY, "technology",
            gross=(65, 85), net=(10, 30), multiple=(2.0, 8.0, 4.5),
            revenue_per_employee=200_000, typical_hours="9:00 AM - 5:00 PM", common_days=_WEEKDAYS,
        ),
        _benchmark(
            BusinessCategory.SERVICES, "services",
            gross=(50, 75), net=(8, 20), multiple=(1.0, 3.5, 2.2),
            revenue_per_employee=85_000, typical_hours="9:00 AM - 5:00 PM", common_days=_WEEKDAYS,
        ),
        _benchmark(
            BusinessCategory.MANUFACTURING, "manufacturing",
            gross=(25, 45), net=(4, 12), multiple=(0.6, 2.0, 1.0),
            revenue_per_employee=150_000, typical_hours="7:00 AM - 4:00 PM", common_days=_WEEKDAYS,
        ),
        _benchmark(
            BusinessCategory.HEALTHCARE, "healthcare",
            gross=(35, 60), net=(6, 18), multiple=(1.0, 3.0, 1.8),
            revenue_per_employee=150_000, typical_hours="8:00 AM - 6:00 PM", common_days=_WEEKDAYS,
        ),
        _benchmark(
            BusinessCategory.AUTOMOTIVE, "automotive",
            gross=(20, 40), net=(3, 10), multiple=(0.5, 1.5, 0.8),
            revenue_per_employee=180_000, typical_hours="8:00 AM - 6:00 PM",
            common_days=_WEEKDAYS + ["Saturday"],
        ),
    ]
}


class BenchmarkTables:
    """Immutable category → ``CategoryBenchmark`` lookup with a default fallback."""

    def __init__(
        self,
        benchmarks: Mapping[str, CategoryBenchmark],
        default: CategoryBenchmark = GENERAL_BENCHMARK,
    ) -> None:
        self._benchmarks: dict[str, CategoryBenchmark] = {
            key.upper(): bench for key, bench in benchmarks.items()
        }
        self._default = default

    @property
    def default(self) -> CategoryBenchmark:
        return self._default

    @property
    def categories(self) -> list[str]:
        """Known category keys, sorted."""
        return sorted(self._benchmarks)

    def is_known(self, category: Optional[str]) -> bool:
        """True when ``category`` has its own benchmark (not the default)."""
        if not isinstance(category, str) or not category.strip():
            return False
        return category.strip().upper() in self._benchmarks

    def get(self, category: Optional[str]) -> CategoryBenchmark:
        """Benchmark for ``category``; the ``GENERAL`` default when unknown or missing."""
        if not self.is_known(category):
            return self._default
        return self._benchmarks[category.strip().upper()]  # type: ignore[union-attr]

    def __contains__(self, category: object) -> bool:
        return isinstance(category, str) and self.is_known(category)

    def __len__(self) -> int:
        return len(self._benchmarks)


DEFAULT_BENCHMARKS = BenchmarkTables(_BUILTIN)


def load_benchmark_tables(
    path: Optional[Path | str],
    base: BenchmarkTables = DEFAULT_BENCHMARKS,
) -> BenchmarkTables:
    """Build tables from ``base`` plus the JSON overrides in ``path``.

    Args:
        path: JSON override file.  ``None`` returns ``base`` unchanged.
        base: Tables the overrides are merged over.

    Returns:
        New ``BenchmarkTables`` instance.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not a JSON object or an entry is invalid.
    """
    if path is None:
        return base

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Benchmark override file not found: {path}")

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"Benchmark overrides must be a JSON object, got {type(raw).__name__}.")

    merged = {key: base.get(key) for key in base.categories}
    default = base.default
    for key, override in raw.items():
        if not isinstance(override, dict):
            raise ValueError(f"Benchmark override for '{key}' must be an object.")
        key_upper = key.strip().upper()
        starting = merged.get(key_upper, default)
        data: dict[str, Any] = starting.model_dump()
        data.update(override)
        data["category"] = key_upper
        if key_upper == default.category:
            default = CategoryBenchmark.model_validate(data)
        else:
            if key_upper not in merged and "display_name" not in override:
                data["display_name"] = key.strip().lower()
            merged[key_upper] = CategoryBenchmark.model_validate(data)

    logger.info("Loaded %d benchmark override(s) from %s", len(raw), path)
    return BenchmarkTables(merged, default=default)
