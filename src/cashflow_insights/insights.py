# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Financial insights for CashFlow Insights.

From a monthly history and its trend analysis, this module derives:

- the current balance (closing cumulative balance of the history),
- the monthly burn rate and revenue (mean outflow / inflow over the last
  few months),
- the runway in months (capped),
- a 0-100 health score built from an additive rubric,
- prioritized alerts and textual recommendations,
- a per-factor breakdown of the health score.

Health score rubric (clamped to [0, 100])::

    base                                 50
    current balance > 0                 +20
    inflow trend growing                +15
    outflow trend not growing           +10
    runway >= 6 months                  +15   (>= 3 months: +10)
    monthly revenue > monthly burn rate +10

When no history is available at all, :func:`build_insights` returns an
:class:`InsufficientData` result instead of made-up figures.
"""

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from types import MappingProxyType
from typing import Optional, Union

from .config import DEFAULT_CONFIG, EngineConfig
from .historical import MonthlyBucket, get_historical_data
from .ledger import LedgerReader
from .trends import TrendAnalysis, analyze_trend

logger = logging.getLogger(__name__)

HEALTH_SCORE_BASE = 50
HEALTH_SCORE_POSITIVE_BALANCE = 20
HEALTH_SCORE_REVENUE_GROWTH = 15
HEALTH_SCORE_COST_CONTROL = 10
HEALTH_SCORE_LONG_RUNWAY = 15
HEALTH_SCORE_SHORT_RUNWAY = 10
HEALTH_SCORE_PROFITABILITY = 10

LONG_RUNWAY_MONTHS = 6
SHORT_RUNWAY_MONTHS = 3

# Balance thresholds, expressed in months of burn.
DANGER_BALANCE_MONTHS = 2
WARNING_BALANCE_MONTHS = 6
HEALTHY_BALANCE_MONTHS = 12

SEVERITY_DANGER = "danger"
SEVERITY_WARNING = "warning"
SEVERITY_INFO = "info"

# Health score bands, highest first.
HEALTH_BANDS: tuple[tuple[str, int], ...] = (
    ("excellent", 80),
    ("good", 60),
    ("warning", 40),
    ("critical", 0),
)

ONBOARDING_RECOMMENDATIONS: tuple[str, ...] = (
    "Connect your sales platform so approved sales are tracked automatically.",
    "Add your recurring expenses to get more accurate projections.",
    "Upload your ad spend CSV to complete the return-on-ad-spend picture.",
)


@dataclass(frozen=True)
class Alert:
    """One alert; a lower priority number means more urgent."""

    severity: str
    message: str
    priority: int


@dataclass(frozen=True)
class Insights:
    """
    Computed financial picture of a user.

    Attributes
    ----------
    current_balance :
        Closing cumulative balance of the history.
    monthly_burn_rate :
        Mean monthly outflow over the burn-rate window.
    monthly_revenue :
        Mean monthly inflow over the same window.
    runway_months :
        Months the balance sustains the burn rate, in [0, cap].
    health_score :
        Composite score in [0, 100].
    alerts :
        Alerts sorted by ascending priority.
    recommendations :
        Suggested actions (order not significant).
    """

    current_balance: float
    monthly_burn_rate: float
    monthly_revenue: float
    runway_months: int
    health_score: int
    alerts: tuple[Alert, ...]
    recommendations: tuple[str, ...]


@dataclass(frozen=True)
class InsufficientData:
    """Returned instead of Insights when there is no history to analyse."""

    reason: str
    alerts: tuple[Alert, ...] = ()
    recommendations: tuple[str, ...] = ()


InsightsResult = Union[Insights, InsufficientData]


@dataclass(frozen=True)
class HealthScoreBreakdown:
    """Points granted by each factor of the health-score rubric (read-only)."""

    score: int
    factors: Mapping[str, int]
    band: str


def _trailing_mean(values: Sequence[float], window: int) -> float:
    recent = list(values)[-window:]
    if not recent:
        return 0.0
    return sum(recent) / len(recent)


def monthly_burn_rate(
    buckets: Sequence[MonthlyBucket], config: EngineConfig = DEFAULT_CONFIG
) -> float:
    """Mean outflow over the last ``config.burn_rate_window`` buckets."""
    return _trailing_mean([b.outflow for b in buckets], config.burn_rate_window)


def monthly_revenue(
    buckets: Sequence[MonthlyBucket], config: EngineConfig = DEFAULT_CONFIG
) -> float:
    """Mean inflow over the last ``config.burn_rate_window`` buckets."""
    return _trailing_mean([b.inflow for b in buckets], config.burn_rate_window)


def calculate_runway(
    balance: float, burn_rate: float, config: EngineConfig = DEFAULT_CONFIG
) -> int:
    """
    Whole months ``balance`` sustains ``burn_rate``, clamped to [0, cap].

    A non-positive burn rate means the balance is never depleted, which is
    reported as the cap.
    """
    cap = config.insights_runway_cap
    if burn_rate <= 0:
        return cap
    return int(max(0, min(cap, math.floor(balance / burn_rate))))


def _score_factors(
    balance: float,
    revenue: float,
    burn_rate: float,
    runway: int,
    trends: TrendAnalysis,
) -> dict[str, int]:
    if runway >= LONG_RUNWAY_MONTHS:
        runway_points = HEALTH_SCORE_LONG_RUNWAY
    elif runway >= SHORT_RUNWAY_MONTHS:
        runway_points = HEALTH_SCORE_SHORT_RUNWAY
    else:
        runway_points = 0

    return {
        "balance": HEALTH_SCORE_POSITIVE_BALANCE if balance > 0 else 0,
        "revenue_growth": (
            HEALTH_SCORE_REVENUE_GROWTH if trends.inflow_trend.is_growing else 0
        ),
        "cost_control": (
            HEALTH_SCORE_COST_CONTROL if not trends.outflow_trend.is_growing else 0
        ),
        "runway": runway_points,
        "profitability": HEALTH_SCORE_PROFITABILITY if revenue > burn_rate else 0,
    }


def calculate_health_score(
    balance: float,
    revenue: float,
    burn_rate: float,
    trends: TrendAnalysis,
    config: EngineConfig = DEFAULT_CONFIG,
) -> int:
    """Health score in [0, 100] (see the module docstring for the rubric)."""
    runway = calculate_runway(balance, burn_rate, config)
    factors = _score_factors(balance, revenue, burn_rate, runway, trends)
    score = HEALTH_SCORE_BASE + sum(factors.values())
    return min(100, max(0, score))


def generate_alerts(
    balance: float,
    burn_rate: float,
    runway: int,
    trends: TrendAnalysis,
) -> list[Alert]:
    """Alerts sorted by ascending priority (stable within a priority)."""
    alerts: list[Alert] = []

    if balance < burn_rate * DANGER_BALANCE_MONTHS:
        alerts.append(
            Alert(
                severity=SEVERITY_DANGER,
                message="Low balance: less than 2 months of runway.",
                priority=1,
            )
        )
    elif balance < burn_rate * WARNING_BALANCE_MONTHS:
        alerts.append(
            Alert(
                severity=SEVERITY_WARNING,
                message="Watch your balance: less than 6 months of runway.",
                priority=2,
            )
        )

    if trends.outflow_trend.is_growing:
        alerts.append(
            Alert(
                severity=SEVERITY_WARNING,
                message="Expenses are trending up.",
                priority=2,
            )
        )

    if not trends.inflow_trend.is_growing and trends.inflow_trend.slope < 0:
        alerts.append(
            Alert(
                severity=SEVERITY_WARNING,
                message="Revenue is trending down.",
                priority=2,
            )
        )

    if runway <= SHORT_RUNWAY_MONTHS:
        alerts.append(
            Alert(
                severity=SEVERITY_DANGER,
                message=f"Critical runway: {runway} months remaining.",
                priority=1,
            )
        )

    return sorted(alerts, key=lambda a: a.priority)


def generate_recommendations(
    trends: TrendAnalysis,
    balance: float,
    burn_rate: float,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[str]:
    """Heuristic recommendations; order is not significant."""
    recommendations: list[str] = []

    if not trends.inflow_trend.is_growing:
        recommendations.append(
            "Look for ways to grow revenue: new products, marketing campaigns "
            "or a price increase."
        )

    if trends.outflow_trend.is_growing:
        recommendations.append(
            "Review recurring expenses and look for savings opportunities."
        )

    if trends.seasonality.has_seasonality:
        recommendations.append(
            "Plan for seasonality: set cash aside for low months and make the "
            "most of sales peaks."
        )

    runway = calculate_runway(balance, burn_rate, config)
    if runway <= LONG_RUNWAY_MONTHS:
        recommendations.append(
            "Short runway: prioritize revenue generation and cut non-essential "
            "spending."
        )

    if balance > burn_rate * HEALTHY_BALANCE_MONTHS:
        recommendations.append(
            "Healthy balance: consider investing in growth or new projects."
        )

    return recommendations


def insufficient_data(reason: str) -> InsufficientData:
    """Deterministic result for users without history."""
    return InsufficientData(
        reason=reason,
        alerts=(
            Alert(
                severity=SEVERITY_INFO,
                message="Connect your data sources to get accurate insights.",
                priority=3,
            ),
        ),
        recommendations=ONBOARDING_RECOMMENDATIONS,
    )


def build_insights(
    buckets: Sequence[MonthlyBucket],
    trends: TrendAnalysis,
    config: EngineConfig = DEFAULT_CONFIG,
) -> InsightsResult:
    """
    Derive insights from a monthly history and its trend analysis.

    Args:
        buckets: Monthly history, oldest first.
        trends: Trend analysis of ``buckets``.
        config: Engine configuration.

    Returns:
        Insights, or InsufficientData when ``buckets`` is empty.
    """
    if not buckets:
        logger.info("No history available, returning an insufficient-data result")
        return insufficient_data("No historical data available.")

    balance = buckets[-1].cumulative_balance
    burn_rate = monthly_burn_rate(buckets, config)
    revenue = monthly_revenue(buckets, config)
    runway = calculate_runway(balance, burn_rate, config)

    insights = Insights(
        current_balance=balance,
        monthly_burn_rate=burn_rate,
        monthly_revenue=revenue,
        runway_months=runway,
        health_score=calculate_health_score(balance, revenue, burn_rate, trends, config),
        alerts=tuple(generate_alerts(balance, burn_rate, runway, trends)),
        recommendations=tuple(
            generate_recommendations(trends, balance, burn_rate, config)
        ),
    )

    logger.debug(
        "Insights: balance %.2f, burn %.2f, revenue %.2f, runway %d, score %d",
        insights.current_balance,
        insights.monthly_burn_rate,
        insights.monthly_revenue,
        insights.runway_months,
        insights.health_score,
    )
    return insights


def generate_insights(
    reader: LedgerReader,
    user_id: str,
    today: Optional[date] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> InsightsResult:
    """
    Load a user's history and derive insights from it.

    Parameters
    ----------
    reader:
        Ledger reader supplying the user's records.
    user_id:
        Identifier of the user.
    today:
        Reference date (system date by default).
    config:
        Engine configuration (history window, caps, burn window).

    Returns
    -------
    Insights or InsufficientData
    """
    buckets = get_historical_data(
        reader, user_id, config.history_months, today=today, config=config
    )
    return build_insights(buckets, analyze_trend(buckets, config), config)


def health_score_band(score: int) -> str:
    """'excellent', 'good', 'warning' or 'critical'."""
    for band, floor in HEALTH_BANDS:
        if score >= floor:
            return band
    return HEALTH_BANDS[-1][0]


def health_score_breakdown(insights: Insights, trends: TrendAnalysis) -> HealthScoreBreakdown:
    """
    Explain the health score of ``insights`` factor by factor.

    The factor points are recomputed from the insights figures and the
    trends that produced them; ``score`` is the one reported in
    ``insights``.
    """
    factors = _score_factors(
        insights.current_balance,
        insights.monthly_revenue,
        insights.monthly_burn_rate,
        insights.runway_months,
        trends,
    )
    return HealthScoreBreakdown(
        score=insights.health_score,
        factors=MappingProxyType(factors),
        band=health_score_band(insights.health_score),
    )
