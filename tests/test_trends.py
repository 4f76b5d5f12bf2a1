from datetime import date

import pytest

from cashflow_insights.config import EngineConfig
from cashflow_insights.historical import build_buckets
from cashflow_insights.periods import add_months
from cashflow_insights.trends import (
    analyze_trend,
    detect_seasonality,
    linear_regression,
)


def make_buckets(inflows, outflows=None, start=date(2025, 1, 1)):
    """Consecutive monthly buckets starting at ``start``."""
    if outflows is None:
        outflows = [0.0] * len(inflows)
    months = [add_months(start, i) for i in range(len(inflows))]
    return build_buckets(months, list(inflows), list(outflows))


@pytest.mark.parametrize("n", [0, 1, 2])
def test_degenerate_regression_below_three_points(n: int) -> None:
    """Fewer than three buckets give a neutral analysis."""
    buckets = make_buckets([1000.0 * (i + 1) for i in range(n)], [500.0 * i for i in range(n)])

    analysis = analyze_trend(buckets)

    for trend in (analysis.inflow_trend, analysis.outflow_trend):
        assert trend.slope == 0.0
        assert trend.correlation == 0.0
        assert trend.is_growing is False
    assert analysis.seasonality.has_seasonality is False


def test_regression_correctness_on_perfect_line() -> None:
    """A perfectly linear series has slope 500 and correlation 1."""
    buckets = make_buckets([1000.0 + 500.0 * i for i in range(6)])

    analysis = analyze_trend(buckets)

    assert analysis.inflow_trend.slope == pytest.approx(500.0, abs=1e-6)
    assert analysis.inflow_trend.correlation == pytest.approx(1.0, abs=1e-6)
    assert analysis.inflow_trend.is_growing is True


def test_linear_regression_intercept_and_negative_slope() -> None:
    """linear_regression recovers intercept and negative slope."""
    fit = linear_regression([(0, 10.0), (1, 8.0), (2, 6.0), (3, 4.0)])

    assert fit.slope == pytest.approx(-2.0)
    assert fit.intercept == pytest.approx(10.0)
    assert fit.correlation == pytest.approx(-1.0)


def test_zero_variance_series_has_zero_correlation() -> None:
    """A constant series has zero correlation instead of NaN."""
    buckets = make_buckets([2000.0] * 5, [750.0] * 5)

    analysis = analyze_trend(buckets)

    assert analysis.inflow_trend.slope == pytest.approx(0.0)
    assert analysis.inflow_trend.correlation == 0.0
    assert analysis.outflow_trend.correlation == 0.0
    assert analysis.outflow_trend.is_growing is False


def test_identical_x_values_do_not_divide_by_zero() -> None:
    """Identical x values give a zero slope."""
    fit = linear_regression([(1.0, 3.0), (1.0, 5.0), (1.0, 7.0)])

    assert fit.slope == 0.0
    assert fit.correlation == 0.0
    assert fit.intercept == pytest.approx(5.0)


def test_empty_regression() -> None:
    """An empty input fits to zeros."""
    fit = linear_regression([])

    assert (fit.slope, fit.intercept, fit.correlation) == (0.0, 0.0, 0.0)


def test_outflow_trend_is_tracked_independently() -> None:
    """Inflow and outflow trends are fitted separately."""
    buckets = make_buckets([5000.0, 4000.0, 3000.0], [100.0, 200.0, 300.0])

    analysis = analyze_trend(buckets)

    assert analysis.inflow_trend.is_growing is False
    assert analysis.inflow_trend.slope == pytest.approx(-1000.0)
    assert analysis.outflow_trend.is_growing is True
    assert analysis.outflow_trend.slope == pytest.approx(100.0)


def test_uniform_inflow_has_no_seasonality() -> None:
    """A flat inflow has no peak or low months."""
    buckets = make_buckets([3000.0] * 12)

    seasonality = analyze_trend(buckets).seasonality

    assert seasonality.has_seasonality is False
    assert seasonality.peak_months == frozenset()
    assert seasonality.low_months == frozenset()


def test_seasonality_requires_six_points() -> None:
    """Seasonality needs at least six buckets."""
    buckets = make_buckets([1000.0, 9000.0, 1000.0, 9000.0, 1000.0])

    assert analyze_trend(buckets).seasonality.has_seasonality is False


def test_seasonality_flags_peak_and_low_calendar_months() -> None:
    """Months far above or below the mean are flagged."""
    # January..June 2025; mean 1000, March well above, May well below.
    inflows = [1000.0, 1000.0, 2000.0, 1000.0, 0.0, 1000.0]
    buckets = make_buckets(inflows)

    seasonality = detect_seasonality(buckets)

    assert seasonality.has_seasonality is True
    assert seasonality.peak_months == frozenset({2})
    assert seasonality.low_months == frozenset({4})
    assert seasonality.peak_months.isdisjoint(seasonality.low_months)


def test_seasonality_months_are_deduplicated_across_years() -> None:
    """The same calendar month in two years is reported once."""
    # 24 months from January 2024: every December is a peak.
    inflows = [1000.0] * 24
    inflows[11] = 5000.0
    inflows[23] = 5000.0
    buckets = make_buckets(inflows, start=date(2024, 1, 1))

    seasonality = detect_seasonality(buckets)

    assert seasonality.peak_months == frozenset({11})
    assert seasonality.low_months == frozenset()


def test_seasonality_threshold_is_configurable() -> None:
    """A larger threshold factor hides mild deviations."""
    inflows = [1000.0, 1000.0, 2000.0, 1000.0, 0.0, 1000.0]
    buckets = make_buckets(inflows)

    strict = detect_seasonality(buckets, EngineConfig(seasonality_threshold_factor=3.0))

    assert strict.has_seasonality is False


def test_month_high_one_year_and_low_the_next_is_not_both() -> None:
    """A calendar month is a peak, a low or neither, even across years."""
    inflows = [1000.0] * 24
    inflows[0] = 5000.0  # January 2024
    inflows[12] = 0.0  # January 2025
    buckets = make_buckets(inflows, start=date(2024, 1, 1))

    seasonality = detect_seasonality(buckets)

    assert seasonality.peak_months.isdisjoint(seasonality.low_months)
    # January averages above the mean once both years are combined.
    assert seasonality.peak_months == frozenset({0})
    assert seasonality.low_months == frozenset()


def test_opposite_years_cancel_out() -> None:
    """Equal and opposite deviations of the same month average to no seasonality."""
    inflows = [2500.0] * 24
    inflows[0] = 5000.0
    inflows[12] = 0.0
    buckets = make_buckets(inflows, start=date(2024, 1, 1))

    seasonality = detect_seasonality(buckets)

    assert seasonality.has_seasonality is False
    assert seasonality.peak_months == seasonality.low_months == frozenset()
