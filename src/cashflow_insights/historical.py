# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Historical aggregation for CashFlow Insights.

This module turns raw ledger records into a series of monthly buckets:

    inflow            = sum of approved sales in the month
    outflow           = sum of expenses + sum of ad spend in the month
    balance           = inflow - outflow
    cumulative_balance = running sum of balance within the window

The window spans a number of calendar months ending at the current month,
oldest first. Months without records are zero-filled: absence of data is a
valid state, not an error. The engine has no visibility into balances
before the window, so the first bucket's cumulative balance equals its own
balance.

The pure step, :func:`consolidate_monthly`, works on DataFrames already
fetched. :func:`get_historical_data` wires it to a ledger reader.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from .config import DEFAULT_CONFIG, EngineConfig
from .ledger import LedgerReader, LedgerRecords, fetch_ledger
from .periods import Period, history_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyBucket:
    """
    Cash movements of one calendar month.

    Attributes
    ----------
    date :
        First day of the month.
    inflow :
        Money in (approved sales), >= 0.
    outflow :
        Money out (expenses + ad spend), >= 0.
    balance :
        ``inflow - outflow``.
    cumulative_balance :
        Running sum of ``balance`` over the series.
    """

    date: date
    inflow: float
    outflow: float
    balance: float
    cumulative_balance: float


def _monthly_totals(records: pd.DataFrame) -> dict[date, float]:
    """Sum record amounts per first-of-month date."""
    if records is None or records.empty:
        return {}

    dates = pd.to_datetime(records["date"])
    months = dates.dt.to_period("M").dt.to_timestamp()
    amounts = pd.to_numeric(records["amount"], errors="raise").astype(float)
    totals = amounts.groupby(months.values).sum()
    return {pd.Timestamp(k).date(): float(v) for k, v in totals.items()}


def build_buckets(
    months: list[date],
    inflows: list[float],
    outflows: list[float],
    opening_balance: float = 0.0,
) -> list[MonthlyBucket]:
    """
    Build a chained bucket series from parallel inflow/outflow sequences.

    ``opening_balance`` is the cumulative balance the series is chained
    onto (0 for a standalone series).
    """
    if not (len(months) == len(inflows) == len(outflows)):
        raise ValueError("months, inflows and outflows must have the same length.")

    buckets: list[MonthlyBucket] = []
    cumulative = opening_balance
    for month, inflow, outflow in zip(months, inflows, outflows):
        balance = inflow - outflow
        cumulative += balance
        buckets.append(
            MonthlyBucket(
                date=month,
                inflow=inflow,
                outflow=outflow,
                balance=balance,
                cumulative_balance=cumulative,
            )
        )
    return buckets


def consolidate_monthly(records: LedgerRecords, window: list[Period]) -> list[MonthlyBucket]:
    """
    Bucket ledger records into one MonthlyBucket per month of the window.

    Args:
        records: Sales, expenses and ad spend already fetched for the window.
        window: Consecutive calendar months, oldest first
            (see :func:`cashflow_insights.periods.history_window`).

    Returns:
        A list of MonthlyBucket, one per period of ``window``, in order.
        Records dated outside the window are ignored.
    """
    sales = _monthly_totals(records.sales)
    expenses = _monthly_totals(records.expenses)
    ad_spend = _monthly_totals(records.ad_spend)

    months = [p.start for p in window]
    inflows = [sales.get(m, 0.0) for m in months]
    outflows = [expenses.get(m, 0.0) + ad_spend.get(m, 0.0) for m in months]

    return build_buckets(months, inflows, outflows)


def get_historical_data(
    reader: LedgerReader,
    user_id: str,
    months: Optional[int] = None,
    today: Optional[date] = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[MonthlyBucket]:
    """
    Monthly cash-flow history of a user.

    Parameters
    ----------
    reader:
        Ledger reader supplying the user's records.
    user_id:
        Identifier of the user.
    months:
        Number of calendar months in the window, ending at the current
        month. Defaults to ``config.history_months``.
    today:
        Reference date (system date by default).
    config:
        Engine configuration.

    Returns
    -------
    list[MonthlyBucket]
        Exactly ``months`` buckets, oldest first.

    Raises
    ------
    ValueError
        If ``months`` is not positive.
    """
    if months is None:
        months = config.history_months

    window = history_window(months, today)
    records = fetch_ledger(reader, user_id, window[0].start, window[-1].end)
    buckets = consolidate_monthly(records, window)

    logger.debug(
        "Aggregated %d months of history for user %s (closing balance %.2f)",
        len(buckets),
        user_id,
        buckets[-1].cumulative_balance,
    )
    return buckets

