from datetime import date

import pandas as pd
import pytest

from cashflow_insights.ledger import CsvLedgerReader, FrameLedgerReader, fetch_ledger


def make_frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"user_id": "u1", "date": "2025-01-05", "kind": "sale", "amount": 100.0},
            {
                "user_id": "u1",
                "date": "2025-01-06",
                "kind": "sale",
                "amount": 999.0,
                "status": "pending",
            },
            {"user_id": "u2", "date": "2025-01-07", "kind": "sale", "amount": 50.0},
            {"user_id": "u1", "date": "2025-01-08", "kind": "expense", "amount": 30.0},
            {"user_id": "u1", "date": "2025-02-01", "kind": "expense", "amount": 70.0},
            {"user_id": "", "date": "2025-01-20", "kind": "ad_spend", "amount": 12.0},
        ]
    )


def test_frame_reader_filters_user_status_and_dates() -> None:
    """The frame reader filters by user, sale status and date range."""
    reader = FrameLedgerReader(make_frame())

    sales = reader.fetch_sales("u1", date(2025, 1, 1), date(2025, 1, 31))
    expenses = reader.fetch_expenses("u1", date(2025, 1, 1), date(2025, 1, 31))
    ad_spend = reader.fetch_ad_spend("u1", date(2025, 1, 1), date(2025, 1, 31))

    # Pending sale and other user's sale are excluded.
    assert list(sales["amount"]) == [100.0]
    # February expense is outside the range.
    assert list(expenses["amount"]) == [30.0]
    # Records without user_id are shared by every user.
    assert list(ad_spend["amount"]) == [12.0]
    assert set(sales.columns) == {"date", "amount"}


def test_frame_reader_accepts_empty_frame() -> None:
    """An empty frame yields empty record streams."""
    reader = FrameLedgerReader(pd.DataFrame())

    records = fetch_ledger(reader, "u1", date(2025, 1, 1), date(2025, 12, 31))

    assert records.is_empty


@pytest.mark.parametrize("parallel", [True, False])
def test_fetch_ledger_joins_the_three_streams(parallel: bool) -> None:
    """fetch_ledger returns sales, expenses and ad spend together."""
    reader = FrameLedgerReader(make_frame())

    records = fetch_ledger(
        reader, "u1", date(2025, 1, 1), date(2025, 2, 28), parallel=parallel
    )

    assert records.sales["amount"].sum() == pytest.approx(100.0)
    assert records.expenses["amount"].sum() == pytest.approx(100.0)
    assert records.ad_spend["amount"].sum() == pytest.approx(12.0)
    assert not records.is_empty


class FailingReader:
    """Reader whose expenses backend is unavailable."""

    def fetch_sales(self, user_id, start, end):
        return pd.DataFrame({"date": [], "amount": []})

    def fetch_expenses(self, user_id, start, end):
        raise ConnectionError("ledger backend unavailable")

    def fetch_ad_spend(self, user_id, start, end):
        return pd.DataFrame({"date": [], "amount": []})


@pytest.mark.parametrize("parallel", [True, False])
def test_fetch_ledger_propagates_reader_failures(parallel: bool) -> None:
    """A failing stream propagates its exception to the caller."""
    with pytest.raises(ConnectionError):
        fetch_ledger(
            FailingReader(), "u1", date(2025, 1, 1), date(2025, 1, 31), parallel=parallel
        )


def test_fetch_ledger_rejects_inverted_range() -> None:
    """An end date before the start date raises ValueError."""
    with pytest.raises(ValueError):
        fetch_ledger(FrameLedgerReader(make_frame()), "u1", date(2025, 2, 1), date(2025, 1, 1))


def test_csv_reader(tmp_path) -> None:
    """CsvLedgerReader serves the records of a CSV file."""
    csv_path = tmp_path / "ledger.csv"
    csv_path.write_text(
        "date,kind,amount\n2025-01-05,sale,10\n2025-01-06,expense,4\n",
        encoding="utf-8",
    )

    reader = CsvLedgerReader(csv_path)

    sales = reader.fetch_sales("anyone", date(2025, 1, 1), date(2025, 1, 31))
    assert list(sales["amount"]) == [10.0]
