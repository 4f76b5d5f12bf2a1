# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Dashboard orchestration for CashFlow Insights.

This module provides the high-level entry point used to compute the whole
cash-flow picture of a user in a *single pass*:

1. Computes the history window ending at the current month.
2. Loads the user's ledger *once* for that window (the three record
   streams are fetched concurrently).
3. Aggregates the monthly buckets.
4. Runs the trend and seasonality analysis.
5. Projects the pessimistic / realistic / optimistic scenarios.
6. Derives insights (or an insufficient-data result).

Every step after the fetch is a pure computation over the same buckets,
so the components always agree with each other, and a consumer (web
layer, CLI) only needs this one call to power a dashboard.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from .config import DEFAULT_CONFIG, EngineConfig
from .historical import MonthlyBucket, consolidate_monthly
from .insights import InsightsResult, build_insights
from .ledger import LedgerReader, fetch_ledger
from .periods import history_window
from .projections import ScenarioProjection, project_scenarios
from .trends import TrendAnalysis, analyze_trend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CashFlowDashboard:
    """
    Complete cash-flow picture of one user.

    Attributes
    ----------
    historical :
        Monthly buckets of the history window, oldest first.
    trends :
        Trend and seasonality analysis of ``historical``.
    projections :
        One projection per scenario, pessimistic first.
    insights :
        Insights, or InsufficientData without history.
    data_quality :
        'high' when the history is long enough for trend analysis,
        'limited' otherwise.
    """

    historical: tuple[MonthlyBucket, ...]
    trends: TrendAnalysis
    projections: tuple[ScenarioProjection, ...]
    insights: InsightsResult
    data_quality: str


def compute_dashboard(
    reader: LedgerReader,
    user_id: str,
    periods: Optional[int] = None,
    months: Optional[int] = None,
    today: Optional[date] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> CashFlowDashboard:
    """
    Compute history, trends, projections and insights in a single pass.

    Parameters
    ----------
    reader :
        Ledger reader supplying the user's records.
    user_id :
        Identifier of the user.
    periods :
        Number of projected months. Defaults to ``config.projection_periods``.
    months :
        History window length. Defaults to ``config.history_months``.
    today :
        Reference date (system date by default).
    config :
        Engine configuration.

    Returns
    -------
    CashFlowDashboard

    Raises
    ------
    ValueError
        If ``months`` or ``periods`` is not positive.
    """
    if months is None:
        months = config.history_months
    if periods is None:
        periods = config.projection_periods
    if periods <= 0:
        raise ValueError(f"Projection needs at least one period, got {periods}.")

    # 1) History window and a single ledger fetch for it.
    window = history_window(months, today)
    records = fetch_ledger(reader, user_id, window[0].start, window[-1].end)

    # 2) Pure computations over the same buckets.
    historical = consolidate_monthly(records, window)
    trends = analyze_trend(historical, config)
    projections = project_scenarios(historical, trends, periods, config, today=today)
    insights = build_insights(historical, trends, config)

    data_quality = "high" if len(historical) >= config.min_trend_points else "limited"

    logger.debug(
        "Dashboard for user %s: %d months of history, %d projected, quality=%s",
        user_id,
        len(historical),
        periods,
        data_quality,
    )

    return CashFlowDashboard(
        historical=tuple(historical),
        trends=trends,
        projections=tuple(projections),
        insights=insights,
        data_quality=data_quality,
    )
