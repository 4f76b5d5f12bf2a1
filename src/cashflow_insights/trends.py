# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Trend and seasonality analysis for CashFlow Insights.

1. Trend
   -----
   Each tracked series (inflow, outflow) is fitted with an ordinary
   least-squares line where x is the bucket index (0..n-1) and y the
   monthly amount. Slope, intercept and Pearson's correlation are computed
   from the usual sums (Σx, Σy, Σxy, Σx², Σy²). A series is "growing" when
   its slope is strictly positive.

2. Seasonality
   -----------
   Inflow of each bucket is compared with the series mean. With a
   threshold of ``threshold_factor`` population standard deviations, a
   calendar month (0-11) whose average deviation is above ``threshold`` is
   a peak month, one below ``-threshold`` a low month. Deviations of the
   same month seen in several years are averaged first, so each month is
   a peak, a low, or neither.

Small samples are not errors: below ``min_trend_points`` buckets the
analysis is neutral (zero slope and correlation, no growth, no
seasonality), and below ``min_seasonality_points`` no seasonality is
reported. Zero denominators yield a correlation of 0 instead of NaN.
"""

import logging
import math
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass

from .config import DEFAULT_CONFIG, EngineConfig
from .historical import MonthlyBucket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionResult:
    """Raw least-squares fit of a series."""

    slope: float
    intercept: float
    correlation: float


@dataclass(frozen=True)
class TrendResult:
    """
    Direction of one tracked series.

    Attributes:
        slope: Monthly change estimated by least squares.
        correlation: Pearson's r, in [-1, 1].
        is_growing: True when ``slope > 0``.
    """

    slope: float
    correlation: float
    is_growing: bool


@dataclass(frozen=True)
class SeasonalityResult:
    """Calendar months (0-11) whose inflow deviates from the mean."""

    has_seasonality: bool
    peak_months: frozenset[int]
    low_months: frozenset[int]


@dataclass(frozen=True)
class TrendAnalysis:
    """Trend of inflow and outflow plus inflow seasonality."""

    inflow_trend: TrendResult
    outflow_trend: TrendResult
    seasonality: SeasonalityResult


NEUTRAL_TREND = TrendResult(slope=0.0, correlation=0.0, is_growing=False)
NO_SEASONALITY = SeasonalityResult(
    has_seasonality=False, peak_months=frozenset(), low_months=frozenset()
)


def linear_regression(points: Sequence[tuple[float, float]]) -> RegressionResult:
    """
    Least-squares fit of ``y = slope * x + intercept``.

    Args:
        points: (x, y) pairs.

    Returns:
        A RegressionResult. An empty input, or inputs whose x values are
        all identical, yield a zero slope. A zero-variance series yields a
        zero correlation.
    """
    n = len(points)
    if n == 0:
        return RegressionResult(slope=0.0, intercept=0.0, correlation=0.0)

    sum_x = sum(x for x, _ in points)
    sum_y = sum(y for _, y in points)
    sum_xy = sum(x * y for x, y in points)
    sum_xx = sum(x * x for x, _ in points)
    sum_yy = sum(y * y for _, y in points)

    numerator = n * sum_xy - sum_x * sum_y
    var_x = n * sum_xx - sum_x * sum_x
    var_y = n * sum_yy - sum_y * sum_y

    slope = numerator / var_x if var_x != 0 else 0.0
    intercept = (sum_y - slope * sum_x) / n

    denominator = math.sqrt(var_x * var_y) if var_x > 0 and var_y > 0 else 0.0
    if denominator == 0:
        correlation = 0.0
    else:
        # Rounding can push |r| a hair above 1.
        correlation = max(-1.0, min(1.0, numerator / denominator))

    return RegressionResult(slope=slope, intercept=intercept, correlation=correlation)


def _trend_of(values: Sequence[float]) -> TrendResult:
    fit = linear_regression([(float(i), float(v)) for i, v in enumerate(values)])
    return TrendResult(
        slope=fit.slope,
        correlation=fit.correlation,
        is_growing=fit.slope > 0,
    )


def detect_seasonality(
    buckets: Sequence[MonthlyBucket],
    config: EngineConfig = DEFAULT_CONFIG,
) -> SeasonalityResult:
    """
    Flag peak and low calendar months of the inflow series.

    Requires at least ``config.min_seasonality_points`` buckets; otherwise
    no seasonality is reported.
    """
    n = len(buckets)
    if n < config.min_seasonality_points:
        return NO_SEASONALITY

    mean = sum(b.inflow for b in buckets) / n
    std_dev = math.sqrt(sum((b.inflow - mean) ** 2 for b in buckets) / n)
    threshold = config.seasonality_threshold_factor * std_dev

    # One deviation per calendar month, so a month is a peak or a low, never both.
    by_month: dict[int, list[float]] = defaultdict(list)
    for b in buckets:
        by_month[b.date.month - 1].append(b.inflow - mean)
    month_deviation = {m: sum(ds) / len(ds) for m, ds in by_month.items()}

    peaks = frozenset(m for m, d in month_deviation.items() if d > threshold)
    lows = frozenset(m for m, d in month_deviation.items() if d < -threshold)

    return SeasonalityResult(
        has_seasonality=bool(peaks or lows),
        peak_months=peaks,
        low_months=lows,
    )


def analyze_trend(
    buckets: Sequence[MonthlyBucket],
    config: EngineConfig = DEFAULT_CONFIG,
) -> TrendAnalysis:
    """
    Trend of inflow and outflow, plus inflow seasonality.

    Args:
        buckets: Monthly history, oldest first.
        config: Engine configuration (sample-size minimums and seasonality
            threshold).

    Returns:
        A TrendAnalysis. With fewer than ``config.min_trend_points``
        buckets, both trends are neutral and no seasonality is reported.
    """
    if len(buckets) < config.min_trend_points:
        logger.debug(
            "Trend analysis skipped: %d bucket(s), %d required",
            len(buckets),
            config.min_trend_points,
        )
        return TrendAnalysis(
            inflow_trend=NEUTRAL_TREND,
            outflow_trend=NEUTRAL_TREND,
            seasonality=NO_SEASONALITY,
        )

    analysis = TrendAnalysis(
        inflow_trend=_trend_of([b.inflow for b in buckets]),
        outflow_trend=_trend_of([b.outflow for b in buckets]),
        seasonality=detect_seasonality(buckets, config),
    )

    logger.debug(
        "Trend analysis over %d buckets: inflow slope %.2f (r=%.3f), "
        "outflow slope %.2f (r=%.3f), seasonality=%s",
        len(buckets),
        analysis.inflow_trend.slope,
        analysis.inflow_trend.correlation,
        analysis.outflow_trend.slope,
        analysis.outflow_trend.correlation,
        analysis.seasonality.has_seasonality,
    )
    return analysis
