# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
View helpers for CashFlow Insights.

The engine returns frozen dataclasses. This module turns them into:

- pandas DataFrames for tabular display or CSV export (CLI),
- plain, JSON-ready structures (``to_serializable``) for an API layer:
  dates as ISO strings, money as floats, scenario tags as strings and
  month sets as sorted lists.
"""

import dataclasses
from collections.abc import Mapping, Sequence
from datetime import date
from typing import Any

import pandas as pd

from .historical import MonthlyBucket
from .insights import Alert, Insights, InsufficientData
from .projections import ScenarioProjection
from .trends import TrendAnalysis

BUCKET_COLUMNS = ["date", "inflow", "outflow", "balance", "cumulative_balance"]


def buckets_to_dataframe(buckets: Sequence[MonthlyBucket], decimals: int = 2) -> pd.DataFrame:
    """
    Convert a bucket series into a DataFrame.

    Columns: date (YYYY-MM), inflow, outflow, balance, cumulative_balance.
    Amounts are rounded to ``decimals`` places.
    """
    if not buckets:
        return pd.DataFrame(columns=BUCKET_COLUMNS)

    rows = [
        {
            "date": b.date.strftime("%Y-%m"),
            "inflow": round(b.inflow, decimals),
            "outflow": round(b.outflow, decimals),
            "balance": round(b.balance, decimals),
            "cumulative_balance": round(b.cumulative_balance, decimals),
        }
        for b in buckets
    ]
    return pd.DataFrame(rows, columns=BUCKET_COLUMNS)


def trends_to_dataframe(trends: TrendAnalysis, decimals: int = 2) -> pd.DataFrame:
    """One row per tracked series: series, slope, correlation, is_growing."""
    rows = []
    for series, trend in (
        ("inflow", trends.inflow_trend),
        ("outflow", trends.outflow_trend),
    ):
        rows.append(
            {
                "series": series,
                "slope": round(trend.slope, decimals),
                "correlation": round(trend.correlation, 4),
                "is_growing": trend.is_growing,
            }
        )
    return pd.DataFrame(rows, columns=["series", "slope", "correlation", "is_growing"])


def projections_to_dataframe(
    projections: Sequence[ScenarioProjection], decimals: int = 2
) -> pd.DataFrame:
    """
    Long-format DataFrame of every projected month of every scenario.

    Columns: scenario, multiplier, then the bucket columns.
    """
    frames = []
    for projection in projections:
        df = buckets_to_dataframe(projection.projections, decimals)
        df.insert(0, "multiplier", projection.multiplier)
        df.insert(0, "scenario", projection.scenario)
        frames.append(df)

    if not frames:
        return pd.DataFrame(columns=["scenario", "multiplier", *BUCKET_COLUMNS])
    return pd.concat(frames, ignore_index=True)


def summaries_to_dataframe(
    projections: Sequence[ScenarioProjection], decimals: int = 2
) -> pd.DataFrame:
    """One row per scenario with its summary figures."""
    columns = [
        "scenario",
        "multiplier",
        "total_inflow",
        "total_outflow",
        "final_balance",
        "runway_months",
    ]
    rows = [
        {
            "scenario": p.scenario,
            "multiplier": p.multiplier,
            "total_inflow": round(p.summary.total_inflow, decimals),
            "total_outflow": round(p.summary.total_outflow, decimals),
            "final_balance": round(p.summary.final_balance, decimals),
            "runway_months": p.summary.runway_months,
        }
        for p in projections
    ]
    return pd.DataFrame(rows, columns=columns)


def alerts_to_dataframe(alerts: Sequence[Alert]) -> pd.DataFrame:
    """Alerts in priority order: priority, severity, message."""
    columns = ["priority", "severity", "message"]
    if not alerts:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(
        [{"priority": a.priority, "severity": a.severity, "message": a.message} for a in alerts],
        columns=columns,
    )
    return df.sort_values("priority", kind="stable").reset_index(drop=True)


def to_serializable(value: Any) -> Any:
    """
    Convert engine results into JSON-ready Python structures.

    Dataclasses become dicts (with a ``kind`` key naming the result class
    for result variants), dates become ISO strings, sets become sorted
    lists and tuples become lists.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out = {
            field.name: to_serializable(getattr(value, field.name))
            for field in dataclasses.fields(value)
        }
        if isinstance(value, (Insights, InsufficientData)):
            out["kind"] = type(value).__name__
        return out
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (set, frozenset)):
        return sorted(to_serializable(v) for v in value)
    if isinstance(value, Mapping):
        return {str(k): to_serializable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_serializable(v) for v in value]
    return value
