"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``LISTING_INSIGHTS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

CLI commands receive an ``AppConfig`` instance and build engines, sessions
and benchmark tables from it; library code never reads env vars directly.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from listing_insights.taxonomy.business_taxonomy import ALL_SOURCES

# ── Sub-config models ─────────────────────────────────────────────────────────


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class SuggestionConfig(BaseModel):
    """Defaults for the suggestion preference layer."""

    model_config = ConfigDict(frozen=True)

    minimum_confidence: float = 0.3
    auto_apply_threshold: float = 0.8
    debounce_ms: int = 500
    enabled_sources: list[str] = sorted(ALL_SOURCES)

    @field_validator("minimum_confidence", "auto_apply_threshold")
    @classmethod
    def validate_unit_interval(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"confidence thresholds must be in [0.0, 1.0], got {v}.")
        return v

    @field_validator("debounce_ms")
    @classmethod
    def validate_debounce(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {v}.")
        return v

    @field_validator("enabled_sources")
    @classmethod
    def validate_sources(cls, v: list[str]) -> list[str]:
        unknown = sorted(set(v) - ALL_SOURCES)
        if unknown:
            raise ValueError(
                f"Unknown suggestion source(s) {unknown}. Must be among {sorted(ALL_SOURCES)}."
            )
        return v

    @model_validator(mode="after")
    def validate_threshold_order(self) -> "SuggestionConfig":
        if self.auto_apply_threshold < self.minimum_confidence:
            raise ValueError("auto_apply_threshold must be >= minimum_confidence.")
        return self


class BenchmarkConfig(BaseModel):
    """Benchmark table sources."""

    model_config = ConfigDict(frozen=True)

    overrides_file: str = ""


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    logging: LoggingConfig = LoggingConfig()
    suggestions: SuggestionConfig = SuggestionConfig()
    benchmarks: BenchmarkConfig = BenchmarkConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply LISTING_INSIGHTS_* env vars to the raw config dict.

    Supported overrides:
      LISTING_INSIGHTS_LOG_LEVEL        → raw["logging"]["level"]
      LISTING_INSIGHTS_BENCHMARKS_FILE  → raw["benchmarks"]["overrides_file"]
      LISTING_INSIGHTS_DEBUG            → raw["debug"]
    """
    if log_level := os.environ.get("LISTING_INSIGHTS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if bench_file := os.environ.get("LISTING_INSIGHTS_BENCHMARKS_FILE"):
        raw.setdefault("benchmarks", {})["overrides_file"] = bench_file

    if debug := os.environ.get("LISTING_INSIGHTS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        logging=LoggingConfig(**raw.get("logging", {})),
        suggestions=SuggestionConfig(**raw.get("suggestions", {})),
        benchmarks=BenchmarkConfig(**raw.get("benchmarks", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
