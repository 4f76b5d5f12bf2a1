# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
I/O module for CashFlow Insights.

This module handles reading ledger records from a CSV file and normalizing
them into a simple, consistent structure suitable for the ledger readers
and the historical aggregator.

Expected input format
---------------------

Column names are case-insensitive:

    date, kind, amount[, status][, user_id][, description]

- ``date``:        date of the record (YYYY-MM-DD, a time part is accepted)
- ``kind``:        one of ``sale``, ``expense``, ``ad_spend``
                   (``ad``, ``ads`` and ``adspend`` are accepted aliases)
- ``amount``:      positive monetary amount
- ``status``:      sale status; only ``approved`` sales count as inflow.
                   Defaults to ``approved`` when the column is absent or empty.
- ``user_id``:     owner of the record. Defaults to an empty string, which
                   the readers treat as "belongs to every user".
- ``description``: free text label

The column ``label`` is accepted as an alias for ``description``.

Output schema
-------------
The function returns a pandas DataFrame with exactly these columns:

    - ``user_id``     (str)
    - ``date``        (datetime64[ns], timezone-naive)
    - ``kind``        (str, normalized)
    - ``amount``      (float, >= 0)
    - ``status``      (str, lower-case)
    - ``description`` (str)

Any other columns present in the input file are ignored.
"""

import os
from typing import Union

import pandas as pd

LEDGER_COLUMNS = ["user_id", "date", "kind", "amount", "status", "description"]

RECORD_KINDS = ("sale", "expense", "ad_spend")

_KIND_ALIASES = {
    "sale": "sale",
    "sales": "sale",
    "expense": "expense",
    "expenses": "expense",
    "ad_spend": "ad_spend",
    "adspend": "ad_spend",
    "ad": "ad_spend",
    "ads": "ad_spend",
}

APPROVED_STATUS = "approved"


def empty_ledger() -> pd.DataFrame:
    """Return an empty, well-typed ledger DataFrame."""
    return pd.DataFrame(
        {
            "user_id": pd.Series(dtype="object"),
            "date": pd.Series(dtype="datetime64[ns]"),
            "kind": pd.Series(dtype="object"),
            "amount": pd.Series(dtype="float64"),
            "status": pd.Series(dtype="object"),
            "description": pd.Series(dtype="object"),
        }
    )


def normalize_ledger(df: pd.DataFrame) -> pd.DataFrame:
    """
    Normalize a raw ledger DataFrame into the canonical ledger schema.

    Parameters
    ----------
    df:
        DataFrame with at least ``date``, ``kind`` and ``amount`` columns
        (case-insensitive names).

    Returns
    -------
    pandas.DataFrame
        A DataFrame with the columns listed in :data:`LEDGER_COLUMNS`.

    Raises
    ------
    ValueError
        If required columns are missing, or if dates, amounts or kinds
        cannot be parsed.
    """
    d = df.copy()
    d.columns = [str(c).lower().strip() for c in d.columns]
    cols = set(d.columns)

    if "label" in cols and "description" not in cols:
        d = d.rename(columns={"label": "description"})
        cols = set(d.columns)

    required = {"date", "kind", "amount"}
    if not required.issubset(cols):
        missing = ", ".join(sorted(required - cols))
        raise ValueError(
            f"Invalid ledger structure, missing column(s): {missing}. Expected:\n"
            "  - date, kind, amount[, status][, user_id][, description]\n"
            "(column names are case-insensitive; 'label' is accepted as an alias "
            "for 'description')."
        )

    if d.empty:
        return empty_ledger()

    # Parse date strictly: invalid dates should fail loudly
    try:
        dates = pd.to_datetime(d["date"], errors="raise", format="ISO8601")
    except (TypeError, ValueError) as exc:
        raise ValueError("Invalid values in 'date' column.") from exc
    if getattr(dates.dt, "tz", None) is not None:
        dates = dates.dt.tz_localize(None)
    d["date"] = dates

    d["amount"] = pd.to_numeric(d["amount"], errors="coerce")
    if d["amount"].isna().any():
        raise ValueError("Invalid numeric values in 'amount' column.")
    if (d["amount"] < 0).any():
        raise ValueError("Negative values in 'amount' column; amounts must be >= 0.")

    kinds = d["kind"].astype(str).str.lower().str.strip().map(_KIND_ALIASES)
    if kinds.isna().any():
        bad = sorted(set(d.loc[kinds.isna(), "kind"].astype(str)))
        raise ValueError(
            f"Unknown record kind(s) {bad}; expected one of: "
            f"{', '.join(RECORD_KINDS)}."
        )
    d["kind"] = kinds

    if "status" in cols:
        d["status"] = (
            d["status"].fillna(APPROVED_STATUS).astype(str).str.lower().str.strip()
        )
        d.loc[d["status"] == "", "status"] = APPROVED_STATUS
    else:
        d["status"] = APPROVED_STATUS

    if "user_id" in cols:
        d["user_id"] = d["user_id"].fillna("").astype(str).str.strip()
    else:
        d["user_id"] = ""

    if "description" in cols:
        d["description"] = d["description"].fillna("").astype(str)
    else:
        d["description"] = ""

    out = d[LEDGER_COLUMNS].copy()
    out["amount"] = out["amount"].astype(float)
    return out.reset_index(drop=True)


def read_ledger_csv(path: Union[str, "os.PathLike[str]"]) -> pd.DataFrame:
    """
    Read ledger records from a CSV file and normalize them.

    Parameters
    ----------
    path:
        Path to the CSV file containing sales, expenses and ad spend.

    Returns
    -------
    pandas.DataFrame
        The normalized ledger (see :func:`normalize_ledger`).

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the CSV structure is invalid or parsing fails.
    """
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Ledger file not found: {path}")

    df = pd.read_csv(path, dtype={"user_id": str})
    return normalize_ledger(df)
