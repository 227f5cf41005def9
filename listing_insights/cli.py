"""
Listing Insights — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Read and validate inputs (profile / history / statements JSON).
  4. Run the suggestion engine or health scorer.
  5. Report result to stdout (ASCII table or ``--json``).

Install and run::

    pip install -e .
    listing-insights --help
    listing-insights validate-config
    listing-insights show-benchmarks
    listing-insights suggest listing.json
    listing-insights suggest listing.json --field askingPrice --state WA
    listing-insights health listing.json --history history.json --factors

Profile files hold either a profile object (camelCase or snake_case keys) or
``{"profile": {...}, "context": {...}}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="listing-insights",
    help="Business listing suggestions and health scoring — operator CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from listing_insights.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from listing_insights.utils.logging import configure_logging
    configure_logging(config.logging)


def _load_benchmarks_or_exit(config):
    """Built-in benchmark tables merged with the configured override file."""
    from listing_insights.benchmarks.tables import load_benchmark_tables

    path = config.benchmarks.overrides_file or None
    try:
        return load_benchmark_tables(path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:
        typer.echo(f"[ERROR] Invalid benchmark overrides: {exc}", err=True)
        raise typer.Exit(code=1)


def _read_json_or_exit(path_str: str, label: str) -> Any:
    path = Path(path_str)
    if not path.exists():
        typer.echo(f"[ERROR] {label} file not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] {label} JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)


def _read_profile_or_exit(path_str: str) -> tuple[dict, dict]:
    """Return ``(profile, context)`` dicts from a profile file."""
    raw = _read_json_or_exit(path_str, "Profile")
    if not isinstance(raw, dict):
        typer.echo("[ERROR] Profile file must contain a JSON object.", err=True)
        raise typer.Exit(code=1)
    if isinstance(raw.get("profile"), dict):
        context = raw.get("context")
        return raw["profile"], context if isinstance(context, dict) else {}
    return raw, {}


def _read_records_or_exit(path_str: Optional[str], label: str, model) -> list:
    """Validate a JSON array file into ``model`` instances."""
    from pydantic import ValidationError

    if not path_str:
        return []
    raw = _read_json_or_exit(path_str, label)
    if not isinstance(raw, list):
        typer.echo(f"[ERROR] {label} file must contain a JSON array.", err=True)
        raise typer.Exit(code=1)
    records = []
    for idx, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except ValidationError as exc:
            typer.echo(f"[ERROR] {label} record #{idx} is invalid: {exc}", err=True)
            raise typer.Exit(code=1)
    return records


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config or the benchmark override file is invalid.
    """
    config = _load_config_or_exit(config_path)
    tables = _load_benchmarks_or_exit(config)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Min confidence:     {config.suggestions.minimum_confidence}")
    typer.echo(f"  Auto-apply at:      {config.suggestions.auto_apply_threshold}")
    typer.echo(f"  Debounce:           {config.suggestions.debounce_ms} ms")
    typer.echo(f"  Enabled sources:    {', '.join(config.suggestions.enabled_sources)}")
    typer.echo(f"  Benchmark override: {config.benchmarks.overrides_file or '(built-in only)'}")
    typer.echo(f"  Benchmarked categories: {len(tables)}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("show-benchmarks")
def show_benchmarks(
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Print the category benchmark table in use."""
    from listing_insights.reporting.formatters import format_benchmark_table

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    tables = _load_benchmarks_or_exit(config)
    typer.echo(format_benchmark_table(tables))


@app.command("suggest")
def suggest(
    profile_path: str = typer.Argument(..., help="Profile JSON file."),
    field: Optional[str] = typer.Option(
        None, "--field", help="Only suggestions for this field (snake_case or camelCase)."
    ),
    category: Optional[str] = typer.Option(None, "--category", help="Override context category."),
    state: Optional[str] = typer.Option(None, "--state", help="Override context state code."),
    size: Optional[str] = typer.Option(
        None, "--size", help="Override business size: small / medium / large."
    ),
    show_all: bool = typer.Option(
        False, "--all", help="Skip the configured confidence / source filters."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Suggest values for the empty fields of a business profile."""
    from listing_insights.models.profile import UnknownFieldError
    from listing_insights.reporting.formatters import format_suggestions_table
    from listing_insights.suggestions.engine import SuggestionEngine
    from listing_insights.suggestions.preferences import (
        SuggestionPreferences,
        filter_suggestions,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    engine = SuggestionEngine(benchmarks=_load_benchmarks_or_exit(config))

    profile, context = _read_profile_or_exit(profile_path)
    if category:
        context["category"] = category
    if size:
        context["businessSize"] = size
    if state:
        location = dict(context.get("location") or {})
        location["state"] = state
        context["location"] = location

    try:
        if field:
            suggestions = engine.get_field_suggestions(field, profile, context)
        else:
            suggestions = engine.generate_suggestions(profile, context)
    except UnknownFieldError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if not show_all:
        preferences = SuggestionPreferences(
            minimum_confidence=config.suggestions.minimum_confidence,
            enabled_sources=frozenset(config.suggestions.enabled_sources),
        )
        suggestions = filter_suggestions(suggestions, preferences)

    if as_json:
        typer.echo(json.dumps([s.model_dump(mode="json") for s in suggestions], indent=2))
        return
    typer.echo(format_suggestions_table(suggestions))


@app.command("health")
def health(
    profile_path: str = typer.Argument(..., help="Profile JSON file."),
    history_path: Optional[str] = typer.Option(
        None, "--history", help="JSON array of previous health scores."
    ),
    statements_path: Optional[str] = typer.Option(
        None, "--statements", help="JSON array of annual financial statements."
    ),
    show_factors: bool = typer.Option(False, "--factors", help="Print per-category factors."),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a report."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Compute the health / valuation score of a business profile."""
    from listing_insights.health.insights import generate_health_insights
    from listing_insights.health.scorer import compute_health_score
    from listing_insights.models.health import FinancialStatement, HealthHistoryPoint
    from listing_insights.reporting.formatters import format_health_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    tables = _load_benchmarks_or_exit(config)

    profile, context = _read_profile_or_exit(profile_path)
    history = _read_records_or_exit(history_path, "History", HealthHistoryPoint)
    statements = _read_records_or_exit(statements_path, "Statements", FinancialStatement)

    score = compute_health_score(
        profile, context, history=history, statements=statements, benchmarks=tables
    )
    insights = generate_health_insights(score)

    if as_json:
        payload = score.model_dump(mode="json")
        payload["insights"] = insights.model_dump(mode="json")
        typer.echo(json.dumps(payload, indent=2))
        return
    typer.echo(format_health_report(score, insights, show_factors=show_factors))
