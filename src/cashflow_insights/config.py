# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Configuration helpers for CashFlow Insights.

This module is responsible for:
- exposing the heuristic constants used by the engine as named values
  (seasonality threshold, seasonal factors, scenario multipliers, runway
  cap, burn-rate window, no-history baseline),
- loading an optional TOML file overriding those constants,
- exposing the typed, immutable EngineConfig used by the rest of the
  application.

Every engine function accepts an ``EngineConfig`` and defaults to
``DEFAULT_CONFIG``, so the constants can be tuned without touching the
algorithms.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomllib

# ---------------------------------------------------------------------------
# Named constants
# ---------------------------------------------------------------------------

#: Number of calendar months loaded as history by the projector and insights.
HISTORY_MONTHS = 6

#: Default number of future months projected per scenario.
PROJECTION_PERIODS = 3

#: Below this number of buckets, regression returns a neutral result.
MIN_TREND_POINTS = 3

#: Below this number of buckets, seasonality is never reported.
MIN_SEASONALITY_POINTS = 6

#: Deviation from the mean (in stddev units) flagging a peak/low month.
SEASONALITY_THRESHOLD_FACTOR = 0.5

#: Projected inflow multiplier for peak and low months.
SEASONAL_PEAK_FACTOR = 1.2
SEASONAL_LOW_FACTOR = 0.8

#: Scenario multipliers, in ascending order.
SCENARIO_MULTIPLIERS: tuple[tuple[str, float], ...] = (
    ("pessimistic", 0.8),
    ("realistic", 1.0),
    ("optimistic", 1.3),
)

#: Ceiling on every reported runway (months).
# TODO: confirm with product whether the insights ceiling and the projection
# horizon cap must stay tied; both fields below currently default to this.
RUNWAY_CAP_MONTHS = 12

#: Number of trailing months averaged for burn rate and revenue.
BURN_RATE_WINDOW_MONTHS = 3

#: Deterministic baseline used to project scenarios when no history exists.
BASELINE_OPENING_BALANCE = 10000.0
BASELINE_MONTHLY_INFLOW = 15000.0
BASELINE_MONTHLY_OUTFLOW = 8000.0

SCENARIO_NAMES: tuple[str, ...] = tuple(name for name, _ in SCENARIO_MULTIPLIERS)


@dataclass(frozen=True)
class BaselineConfig:
    """Seed values projected when a user has no history at all."""

    opening_balance: float = BASELINE_OPENING_BALANCE
    monthly_inflow: float = BASELINE_MONTHLY_INFLOW
    monthly_outflow: float = BASELINE_MONTHLY_OUTFLOW


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide configuration for CashFlow Insights.

    This aggregates:
    - the history window and projection horizon,
    - the minimum sample sizes for regression and seasonality,
    - the seasonality heuristics,
    - the scenario multipliers (ascending),
    - the runway caps used by the projector and by the insights engine,
    - the burn-rate averaging window,
    - the no-history baseline,
    - display options for the CLI.
    """

    history_months: int = HISTORY_MONTHS
    projection_periods: int = PROJECTION_PERIODS
    min_trend_points: int = MIN_TREND_POINTS
    min_seasonality_points: int = MIN_SEASONALITY_POINTS
    seasonality_threshold_factor: float = SEASONALITY_THRESHOLD_FACTOR
    seasonal_peak_factor: float = SEASONAL_PEAK_FACTOR
    seasonal_low_factor: float = SEASONAL_LOW_FACTOR
    scenarios: tuple[tuple[str, float], ...] = SCENARIO_MULTIPLIERS
    projection_runway_cap: int = RUNWAY_CAP_MONTHS
    insights_runway_cap: int = RUNWAY_CAP_MONTHS
    burn_rate_window: int = BURN_RATE_WINDOW_MONTHS
    baseline: BaselineConfig = field(default_factory=BaselineConfig)
    display_mode: str = "table"
    decimals: int = 2


DEFAULT_CONFIG = EngineConfig()


def _load_toml(path: Path) -> dict[str, Any]:
    """
    Load a TOML file and return its content as a dictionary.

    Raises:
        FileNotFoundError: if the file does not exist.
        ValueError: if the TOML content cannot be parsed or is not a table.
    """
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Failed to parse TOML config file: {path}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"Invalid TOML root type in {path}, expected a table.")

    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    """Return a sub-table, or an empty mapping when missing or malformed."""
    value = data.get(name) or {}
    if not isinstance(value, Mapping):
        return {}
    return value


def _as_int(section: Mapping[str, Any], key: str, default: int, where: str) -> int:
    raw = section.get(key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected an integer."
        ) from exc
    if value <= 0:
        raise ValueError(f"'{where}.{key}' must be a positive integer.")
    return value


def _as_float(section: Mapping[str, Any], key: str, default: float, where: str) -> float:
    raw = section.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Invalid value for '{where}.{key}' in the configuration. "
            "Expected a number."
        ) from exc


def _parse_scenarios(section: Mapping[str, Any]) -> tuple[tuple[str, float], ...]:
    """
    Build the scenario table from a [projections.scenarios] section.

    Scenario names are fixed; only their multipliers can be overridden.
    Multipliers must stay strictly ascending so that the scenario order
    (pessimistic, realistic, optimistic) keeps its meaning.

    Raises:
        ValueError: if a multiplier is not a positive number, if an unknown
            scenario is configured, or if the ordering is broken.
    """
    unknown = set(section) - set(SCENARIO_NAMES)
    if unknown:
        raise ValueError(
            f"Unknown scenario(s) in [projections.scenarios]: {sorted(unknown)}. "
            f"Expected any of: {', '.join(SCENARIO_NAMES)}."
        )

    scenarios: list[tuple[str, float]] = []
    for name, default in SCENARIO_MULTIPLIERS:
        multiplier = _as_float(section, name, default, "projections.scenarios")
        if multiplier <= 0:
            raise ValueError(f"Scenario multiplier for {name!r} must be positive.")
        scenarios.append((name, multiplier))

    multipliers = [m for _, m in scenarios]
    if any(a >= b for a, b in zip(multipliers, multipliers[1:])):
        raise ValueError(
            "Scenario multipliers must be strictly ascending: "
            "pessimistic < realistic < optimistic."
        )

    return tuple(scenarios)


def load_engine_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load the engine configuration from an optional TOML file.

    When ``config_path`` is None, the built-in defaults are returned.

    Expected sections in the TOML file (all optional)
    -------------------------------------------------
    [history]
        months: number of calendar months used as history.

    [trend]
        min_points: minimum number of buckets for regression.

    [seasonality]
        min_points, threshold_factor, peak_factor, low_factor.

    [projections]
        periods, runway_cap_months.

    [projections.scenarios]
        pessimistic, realistic, optimistic multipliers.

    [projections.baseline]
        opening_balance, monthly_inflow, monthly_outflow.

    [insights]
        burn_window_months, runway_cap_months.

    [display]
        mode ("table" or "json"), decimals.

    Parameters
    ----------
    config_path : str, optional
        Path to the TOML configuration file.

    Returns
    -------
    EngineConfig
        Parsed and validated engine configuration.
    """
    if config_path is None:
        return DEFAULT_CONFIG

    raw = _load_toml(Path(config_path).resolve())

    history = _section(raw, "history")
    trend = _section(raw, "trend")
    seasonality = _section(raw, "seasonality")
    projections = _section(raw, "projections")
    insights = _section(raw, "insights")
    display = _section(raw, "display")

    baseline_section = _section(projections, "baseline")
    baseline = BaselineConfig(
        opening_balance=_as_float(
            baseline_section,
            "opening_balance",
            BASELINE_OPENING_BALANCE,
            "projections.baseline",
        ),
        monthly_inflow=_as_float(
            baseline_section,
            "monthly_inflow",
            BASELINE_MONTHLY_INFLOW,
            "projections.baseline",
        ),
        monthly_outflow=_as_float(
            baseline_section,
            "monthly_outflow",
            BASELINE_MONTHLY_OUTFLOW,
            "projections.baseline",
        ),
    )

    display_mode = str(display.get("mode", "table"))
    if display_mode not in {"table", "json"}:
        raise ValueError(
            f"Invalid display mode {display_mode!r}, expected 'table' or 'json'."
        )

    try:
        decimals = int(display.get("decimals", 2))
    except (TypeError, ValueError):
        decimals = 2

    return EngineConfig(
        history_months=_as_int(history, "months", HISTORY_MONTHS, "history"),
        projection_periods=_as_int(
            projections, "periods", PROJECTION_PERIODS, "projections"
        ),
        min_trend_points=_as_int(trend, "min_points", MIN_TREND_POINTS, "trend"),
        min_seasonality_points=_as_int(
            seasonality, "min_points", MIN_SEASONALITY_POINTS, "seasonality"
        ),
        seasonality_threshold_factor=_as_float(
            seasonality,
            "threshold_factor",
            SEASONALITY_THRESHOLD_FACTOR,
            "seasonality",
        ),
        seasonal_peak_factor=_as_float(
            seasonality, "peak_factor", SEASONAL_PEAK_FACTOR, "seasonality"
        ),
        seasonal_low_factor=_as_float(
            seasonality, "low_factor", SEASONAL_LOW_FACTOR, "seasonality"
        ),
        scenarios=_parse_scenarios(_section(projections, "scenarios")),
        projection_runway_cap=_as_int(
            projections, "runway_cap_months", RUNWAY_CAP_MONTHS, "projections"
        ),
        insights_runway_cap=_as_int(
            insights, "runway_cap_months", RUNWAY_CAP_MONTHS, "insights"
        ),
        burn_rate_window=_as_int(
            insights, "burn_window_months", BURN_RATE_WINDOW_MONTHS, "insights"
        ),
        baseline=baseline,
        display_mode=display_mode,
        decimals=decimals,
    )
