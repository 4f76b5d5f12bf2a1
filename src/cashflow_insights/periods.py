# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Period helpers for CashFlow Insights.

This module defines a Period value object and the calendar-month helpers
used by the aggregator and the projector: month arithmetic, the history
window ending at the current month, and record filtering.
"""

from calendar import monthrange
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import pandas as pd


@dataclass(frozen=True)
class Period:
    """Represents a reporting period with a human-readable label."""

    start: date
    end: date
    label: str


def _today() -> date:
    """Return today's date as a date object (isolated for easier testing)."""
    return datetime.today().date()


def month_start(day: date) -> date:
    """First day of the month containing ``day``."""
    return day.replace(day=1)


def add_months(day: date, months: int) -> date:
    """
    Shift a first-of-month date by a (possibly negative) number of months.

    The result is always the first day of the target month.
    """
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def month_period(start: date) -> Period:
    """Full calendar month starting at ``start``."""
    first = month_start(start)
    last_day = monthrange(first.year, first.month)[1]
    return Period(
        start=first,
        end=date(first.year, first.month, last_day),
        label=first.strftime("%Y-%m"),
    )


def history_window(months: int, today: Optional[date] = None) -> list[Period]:
    """
    Calendar months of a history window, oldest first.

    The window spans ``months`` months and ends with the month containing
    ``today`` (the system date by default).

    Raises:
        ValueError: if ``months`` is not a positive integer.
    """
    if months <= 0:
        raise ValueError(f"History window needs at least one month, got {months}.")

    current = month_start(today or _today())
    return [month_period(add_months(current, -i)) for i in range(months - 1, -1, -1)]


def filter_records_by_period(records: pd.DataFrame, period: Period) -> pd.DataFrame:
    """
    Filter ledger records to keep only those within the period.

    The ``records`` DataFrame is expected to contain a 'date' column
    convertible to datetime64[ns].

    Parameters
    ----------
    records:
        DataFrame with at least a 'date' column.
    period:
        Period defining the [start, end] boundaries (inclusive).

    Returns
    -------
    pandas.DataFrame
        Filtered DataFrame containing only records within the period.
    """
    if records.empty:
        return records.copy()

    # End bound is a calendar day: keep anything dated on it, whatever the time.
    dates = pd.to_datetime(records["date"])
    upper = pd.Timestamp(period.end) + pd.Timedelta(days=1)
    mask = (dates >= pd.Timestamp(period.start)) & (dates < upper)
    return records.loc[mask].copy()
