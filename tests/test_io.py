import pandas as pd
import pytest

from cashflow_insights.io import LEDGER_COLUMNS, normalize_ledger, read_ledger_csv


def test_read_ledger_csv_normalizes_columns(tmp_path) -> None:
    """Column names are case-insensitive and kinds/status are normalized."""
    csv_path = tmp_path / "ledger.csv"
    csv_path.write_text(
        "Date,Kind,Amount,Status,User_ID,Label\n"
        "2025-01-05,Sale,120.50,APPROVED,u1,Ebook\n"
        "2025-01-06,sale,80.00,refunded,u1,Course\n"
        "2025-01-07,expense,40.00,,u1,Hosting\n"
        "2025-01-08,ads,25.00,,u2,Meta campaign\n",
        encoding="utf-8",
    )

    df = read_ledger_csv(csv_path)

    assert list(df.columns) == LEDGER_COLUMNS
    assert pd.api.types.is_datetime64_any_dtype(df["date"])
    assert list(df["kind"]) == ["sale", "sale", "expense", "ad_spend"]
    assert list(df["status"]) == ["approved", "refunded", "approved", "approved"]
    assert list(df["user_id"]) == ["u1", "u1", "u1", "u2"]
    assert df.loc[0, "description"] == "Ebook"
    assert df.loc[0, "amount"] == pytest.approx(120.50)


def test_optional_columns_get_defaults() -> None:
    """status, user_id and description get defaults."""
    df = normalize_ledger(
        pd.DataFrame(
            {
                "date": ["2025-03-01"],
                "kind": ["expense"],
                "amount": [10],
            }
        )
    )

    assert df.loc[0, "status"] == "approved"
    assert df.loc[0, "user_id"] == ""
    assert df.loc[0, "description"] == ""
    assert df.loc[0, "amount"] == pytest.approx(10.0)


def test_missing_required_column_raises() -> None:
    """date, kind and amount are required."""
    with pytest.raises(ValueError, match="missing column"):
        normalize_ledger(pd.DataFrame({"date": ["2025-01-01"], "amount": [1.0]}))


def test_invalid_amount_raises() -> None:
    """Non-numeric amounts are rejected."""
    with pytest.raises(ValueError, match="amount"):
        normalize_ledger(
            pd.DataFrame({"date": ["2025-01-01"], "kind": ["sale"], "amount": ["abc"]})
        )


def test_negative_amount_raises() -> None:
    """Negative amounts are rejected."""
    with pytest.raises(ValueError, match="Negative"):
        normalize_ledger(
            pd.DataFrame({"date": ["2025-01-01"], "kind": ["sale"], "amount": [-5.0]})
        )


def test_unknown_kind_raises() -> None:
    """Unknown record kinds are rejected."""
    with pytest.raises(ValueError, match="Unknown record kind"):
        normalize_ledger(
            pd.DataFrame({"date": ["2025-01-01"], "kind": ["refund"], "amount": [5.0]})
        )


def test_invalid_date_raises() -> None:
    """Unparsable dates are rejected."""
    with pytest.raises(ValueError, match="date"):
        normalize_ledger(
            pd.DataFrame({"date": ["not-a-date"], "kind": ["sale"], "amount": [5.0]})
        )


def test_missing_file_raises(tmp_path) -> None:
    """A missing CSV file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        read_ledger_csv(tmp_path / "nope.csv")


def test_dates_with_and_without_time_part(tmp_path) -> None:
    """Rows with a time part can be mixed with plain dates."""
    csv_path = tmp_path / "ledger.csv"
    csv_path.write_text(
        "date,kind,amount\n2025-01-05,sale,10\n2025-01-06 18:30,expense,4\n",
        encoding="utf-8",
    )

    df = read_ledger_csv(csv_path)

    assert list(df["date"]) == [
        pd.Timestamp("2025-01-05"),
        pd.Timestamp("2025-01-06 18:30"),
    ]
    assert list(df["kind"]) == ["sale", "expense"]
