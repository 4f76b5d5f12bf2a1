# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Scenario projections for CashFlow Insights.

Future months are extrapolated from the last historical bucket, the
regression slopes and the inflow seasonality, under three scenarios whose
multipliers are applied uniformly to projected inflow and outflow:

    pessimistic  0.8
    realistic    1.0
    optimistic   1.3

For future period i (1-based) of a scenario with multiplier m:

    inflow_i  = max(0, (last_inflow  + inflow_slope  * i) * m * season(month_i))
    outflow_i = max(0, (last_outflow + outflow_slope * i) * m)

where ``season`` is the peak factor (1.2) for peak months, the low factor
(0.8) for low months and 1 otherwise. Outflow is not seasonality-adjusted.
The cumulative balance continues from the last historical bucket.

Each projection carries a summary with total inflow/outflow, the final
cumulative balance, and a runway: the 1-based index of the first projected
month whose cumulative balance is <= 0, or the runway cap (12) when the
balance stays positive over the whole horizon.

When there is no history at all, scenarios are built from a fixed,
deterministic baseline (see :class:`cashflow_insights.config.BaselineConfig`)
and summarized with the same rules, so the three results stay internally
consistent.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .historical import MonthlyBucket, build_buckets, get_historical_data
from .ledger import LedgerReader
from .periods import _today, add_months, month_start
from .trends import SeasonalityResult, TrendAnalysis, analyze_trend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectionSummary:
    """Totals and runway of one projected scenario."""

    total_inflow: float
    total_outflow: float
    final_balance: float
    runway_months: int


@dataclass(frozen=True)
class ScenarioProjection:
    """
    Projected future months under one scenario.

    Attributes
    ----------
    scenario :
        'pessimistic', 'realistic' or 'optimistic'.
    multiplier :
        Scalar applied to projected inflow and outflow.
    projections :
        Future monthly buckets, oldest first.
    summary :
        Totals, final balance and runway.
    """

    scenario: str
    multiplier: float
    projections: tuple[MonthlyBucket, ...]
    summary: ProjectionSummary


def seasonality_factor(
    month_index: int,
    seasonality: SeasonalityResult,
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """Inflow factor for a calendar month (0-11)."""
    if not seasonality.has_seasonality:
        return 1.0
    if month_index in seasonality.peak_months:
        return config.seasonal_peak_factor
    if month_index in seasonality.low_months:
        return config.seasonal_low_factor
    return 1.0


def summarize_projection(
    projections: Sequence[MonthlyBucket],
    config: EngineConfig = DEFAULT_CONFIG,
) -> ProjectionSummary:
    """Totals, final balance and runway of a projected series."""
    total_inflow = sum(p.inflow for p in projections)
    total_outflow = sum(p.outflow for p in projections)
    final_balance = projections[-1].cumulative_balance if projections else 0.0

    runway = config.projection_runway_cap
    for i, p in enumerate(projections, start=1):
        if p.cumulative_balance <= 0:
            runway = i
            break

    return ProjectionSummary(
        total_inflow=total_inflow,
        total_outflow=total_outflow,
        final_balance=final_balance,
        runway_months=runway,
    )


def project_future(
    historical: Sequence[MonthlyBucket],
    trends: TrendAnalysis,
    periods: int,
    multiplier: float,
    config: EngineConfig = DEFAULT_CONFIG,
    start_month: Optional[date] = None,
) -> list[MonthlyBucket]:
    """
    Extrapolate ``periods`` future months under one multiplier.

    Args:
        historical: Monthly history, oldest first.
        trends: Trend analysis of ``historical``.
        periods: Number of future months.
        multiplier: Scenario multiplier.
        config: Engine configuration (seasonal factors).
        start_month: Month the projection follows. Defaults to the last
            historical month, or the current month without history.

    Returns:
        ``periods`` projected buckets chained onto the last historical
        cumulative balance.
    """
    last = historical[-1] if historical else None
    last_inflow = last.inflow if last else 0.0
    last_outflow = last.outflow if last else 0.0
    opening = last.cumulative_balance if last else 0.0

    if start_month is None:
        start_month = last.date if last else month_start(_today())

    months: list[date] = []
    inflows: list[float] = []
    outflows: list[float] = []
    for i in range(1, periods + 1):
        month = add_months(month_start(start_month), i)
        factor = seasonality_factor(month.month - 1, trends.seasonality, config)

        inflow = (last_inflow + trends.inflow_trend.slope * i) * multiplier * factor
        outflow = (last_outflow + trends.outflow_trend.slope * i) * multiplier

        months.append(month)
        inflows.append(max(0.0, inflow))
        outflows.append(max(0.0, outflow))

    return build_buckets(months, inflows, outflows, opening_balance=opening)


def _baseline_projection(
    periods: int,
    multiplier: float,
    start_month: date,
    config: EngineConfig,
) -> list[MonthlyBucket]:
    baseline = config.baseline
    months = [add_months(start_month, i) for i in range(1, periods + 1)]
    return build_buckets(
        months,
        [baseline.monthly_inflow * multiplier] * periods,
        [baseline.monthly_outflow * multiplier] * periods,
        opening_balance=baseline.opening_balance,
    )


def project_scenarios(
    historical: Sequence[MonthlyBucket],
    trends: TrendAnalysis,
    periods: int,
    config: EngineConfig = DEFAULT_CONFIG,
    today: Optional[date] = None,
) -> list[ScenarioProjection]:
    """
    Project every configured scenario, in ascending multiplier order.

    Args:
        historical: Monthly history, oldest first. May be empty, in which
            case the deterministic baseline is projected.
        trends: Trend analysis of ``historical``.
        periods: Number of future months (> 0).
        config: Engine configuration.
        today: Reference date, only used when there is no history.

    Returns:
        One ScenarioProjection per scenario (pessimistic, realistic,
        optimistic).

    Raises:
        ValueError: if ``periods`` is not positive.
    """
    if periods <= 0:
        raise ValueError(f"Projection needs at least one period, got {periods}.")

    start = month_start(today or _today())
    if not historical:
        logger.info(
            "No history available, projecting the baseline over %d month(s)",
            periods,
        )

    results: list[ScenarioProjection] = []
    for scenario, multiplier in config.scenarios:
        if historical:
            projected = project_future(historical, trends, periods, multiplier, config)
        else:
            projected = _baseline_projection(periods, multiplier, start, config)

        results.append(
            ScenarioProjection(
                scenario=scenario,
                multiplier=multiplier,
                projections=tuple(projected),
                summary=summarize_projection(projected, config),
            )
        )

    return results


def generate_projections(
    reader: LedgerReader,
    user_id: str,
    periods: Optional[int] = None,
    today: Optional[date] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ScenarioProjection]:
    """
    Load a user's history and project every scenario.

    Parameters
    ----------
    reader:
        Ledger reader supplying the user's records.
    user_id:
        Identifier of the user.
    periods:
        Number of future months. Defaults to ``config.projection_periods``.
    today:
        Reference date (system date by default).
    config:
        Engine configuration.

    Returns
    -------
    list[ScenarioProjection]
        Exactly one projection per scenario, pessimistic first.
    """
    if periods is None:
        periods = config.projection_periods
    if periods <= 0:
        raise ValueError(f"Projection needs at least one period, got {periods}.")

    historical = get_historical_data(
        reader, user_id, config.history_months, today=today, config=config
    )
    trends = analyze_trend(historical, config)
    return project_scenarios(historical, trends, periods, config, today=today)


def get_scenario(projections: Sequence[ScenarioProjection], scenario: str) -> ScenarioProjection:
    """
    Return the projection of one scenario.

    Raises:
        ValueError: if ``scenario`` is not one of the projected scenarios.
    """
    for projection in projections:
        if projection.scenario == scenario:
            return projection

    valid = ", ".join(p.scenario for p in projections)
    raise ValueError(f"Unknown scenario {scenario!r}. Use one of: {valid}.")
