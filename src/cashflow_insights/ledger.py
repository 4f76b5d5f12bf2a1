# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Ledger readers for CashFlow Insights.

The engine never talks to a database directly. It receives a *ledger
reader*: any object exposing three read-only streams for one user and an
inclusive date range:

- ``fetch_sales(user_id, start, end)``     approved sales,
- ``fetch_expenses(user_id, start, end)``  expenses,
- ``fetch_ad_spend(user_id, start, end)``  advertising spend.

Each stream returns a pandas DataFrame with at least ``date`` and
``amount`` columns. Readers are expected to filter records to the user and
(for sales) to approved records; the engine performs no authorization.

Two implementations are provided:

- :class:`FrameLedgerReader` over a normalized ledger DataFrame,
- :class:`CsvLedgerReader` over a CSV file (see :mod:`cashflow_insights.io`).

Reader failures (missing file, unavailable backend, ...) propagate to the
caller unchanged: retry and backoff policies belong to the reader.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Protocol, Union

import pandas as pd

from .io import APPROVED_STATUS, empty_ledger, normalize_ledger, read_ledger_csv
from .periods import Period, filter_records_by_period

logger = logging.getLogger(__name__)


class LedgerReader(Protocol):
    """Read-only access to the dated monetary records of one user."""

    def fetch_sales(self, user_id: str, start: date, end: date) -> pd.DataFrame: ...

    def fetch_expenses(self, user_id: str, start: date, end: date) -> pd.DataFrame: ...

    def fetch_ad_spend(self, user_id: str, start: date, end: date) -> pd.DataFrame: ...


@dataclass(frozen=True)
class LedgerRecords:
    """
    The three record streams of one user for one date range.

    Attributes
    ----------
    sales :
        Approved sales (``date``, ``amount``).
    expenses :
        Expenses (``date``, ``amount``).
    ad_spend :
        Advertising spend (``date``, ``amount``).
    """

    sales: pd.DataFrame
    expenses: pd.DataFrame
    ad_spend: pd.DataFrame

    @property
    def is_empty(self) -> bool:
        return self.sales.empty and self.expenses.empty and self.ad_spend.empty


class FrameLedgerReader:
    """
    Ledger reader over an in-memory ledger DataFrame.

    The frame is normalized once at construction. Records with an empty
    ``user_id`` are shared by every user, which is convenient for
    single-tenant CSV exports.
    """

    def __init__(self, frame: pd.DataFrame) -> None:
        self._frame = normalize_ledger(frame) if not frame.empty else empty_ledger()

    def _select(self, user_id: str, start: date, end: date, kind: str) -> pd.DataFrame:
        df = self._frame
        mask = (df["kind"] == kind) & ((df["user_id"] == user_id) | (df["user_id"] == ""))
        if kind == "sale":
            mask &= df["status"] == APPROVED_STATUS
        period = Period(start=start, end=end, label=f"{start} → {end}")
        selected = filter_records_by_period(df.loc[mask], period)
        return selected[["date", "amount"]].reset_index(drop=True)

    def fetch_sales(self, user_id: str, start: date, end: date) -> pd.DataFrame:
        return self._select(user_id, start, end, "sale")

    def fetch_expenses(self, user_id: str, start: date, end: date) -> pd.DataFrame:
        return self._select(user_id, start, end, "expense")

    def fetch_ad_spend(self, user_id: str, start: date, end: date) -> pd.DataFrame:
        return self._select(user_id, start, end, "ad_spend")


class CsvLedgerReader(FrameLedgerReader):
    """Ledger reader backed by a CSV file, read once at construction."""

    def __init__(self, path: Union[str, "os.PathLike[str]"]) -> None:
        self.path = path
        super().__init__(read_ledger_csv(path))


def fetch_ledger(
    reader: LedgerReader,
    user_id: str,
    start: date,
    end: date,
    parallel: bool = True,
) -> LedgerRecords:
    """
    Fetch the three record streams of a user for ``[start, end]``.

    The streams are independent and read-only, so by default they are
    requested concurrently and joined. If any stream fails, the exception
    is re-raised to the caller once all requests have completed.

    Parameters
    ----------
    reader:
        Ledger reader to query.
    user_id:
        Identifier of the user whose records are requested.
    start, end:
        Inclusive date bounds.
    parallel:
        When False, the streams are fetched sequentially.

    Returns
    -------
    LedgerRecords
    """
    if end < start:
        raise ValueError("Ledger range end date cannot be before start date.")

    if parallel:
        with ThreadPoolExecutor(max_workers=3) as pool:
            sales_f = pool.submit(reader.fetch_sales, user_id, start, end)
            expenses_f = pool.submit(reader.fetch_expenses, user_id, start, end)
            ad_spend_f = pool.submit(reader.fetch_ad_spend, user_id, start, end)
        records = LedgerRecords(
            sales=sales_f.result(),
            expenses=expenses_f.result(),
            ad_spend=ad_spend_f.result(),
        )
    else:
        records = LedgerRecords(
            sales=reader.fetch_sales(user_id, start, end),
            expenses=reader.fetch_expenses(user_id, start, end),
            ad_spend=reader.fetch_ad_spend(user_id, start, end),
        )

    logger.debug(
        "Fetched ledger for user %s (%s → %s): %d sales, %d expenses, %d ad spend",
        user_id,
        start,
        end,
        len(records.sales),
        len(records.expenses),
        len(records.ad_spend),
    )
    return records
