from datetime import date

import pandas as pd
import pytest

from cashflow_insights.historical import (
    build_buckets,
    consolidate_monthly,
    get_historical_data,
)
from cashflow_insights.ledger import FrameLedgerReader, LedgerRecords
from cashflow_insights.periods import history_window


def ledger_frame() -> pd.DataFrame:
    return pd.DataFrame(
        [
            # Outside the 3-month window ending in March 2025.
            {"date": "2024-12-20", "kind": "sale", "amount": 5000.0},
            {"date": "2025-01-10", "kind": "sale", "amount": 1000.0},
            {"date": "2025-01-25", "kind": "sale", "amount": 500.0},
            {"date": "2025-01-12", "kind": "expense", "amount": 300.0},
            {"date": "2025-01-31", "kind": "ad_spend", "amount": 200.0},
            {"date": "2025-03-03", "kind": "sale", "amount": 800.0},
            {"date": "2025-03-15", "kind": "expense", "amount": 1200.0},
            {
                "date": "2025-03-16",
                "kind": "sale",
                "amount": 10000.0,
                "status": "refunded",
            },
        ]
    )


def test_get_historical_data_buckets_by_calendar_month() -> None:
    """Records are summed per calendar month of the window."""
    reader = FrameLedgerReader(ledger_frame())

    buckets = get_historical_data(reader, "u1", months=3, today=date(2025, 3, 20))

    assert [b.date for b in buckets] == [
        date(2025, 1, 1),
        date(2025, 2, 1),
        date(2025, 3, 1),
    ]

    jan, feb, mar = buckets
    assert jan.inflow == pytest.approx(1500.0)
    assert jan.outflow == pytest.approx(500.0)
    assert jan.balance == pytest.approx(1000.0)

    # Empty month is zero-filled, not an error.
    assert feb.inflow == 0.0
    assert feb.outflow == 0.0
    assert feb.balance == 0.0

    assert mar.inflow == pytest.approx(800.0)
    assert mar.outflow == pytest.approx(1200.0)
    assert mar.balance == pytest.approx(-400.0)

    # Cumulative balance only sees the window (December sale ignored).
    assert [b.cumulative_balance for b in buckets] == pytest.approx([1000.0, 1000.0, 600.0])


def test_cumulative_balance_is_running_sum_of_balances() -> None:
    """cumulative_balance is the running sum of balance."""
    reader = FrameLedgerReader(ledger_frame())

    buckets = get_historical_data(reader, "u1", months=6, today=date(2025, 3, 1))

    running = 0.0
    for b in buckets:
        running += b.balance
        assert b.cumulative_balance == pytest.approx(running)
    assert buckets[0].cumulative_balance == pytest.approx(buckets[0].balance)


def test_history_without_records_is_zero_filled() -> None:
    """A user without records gets a zero-filled window."""
    buckets = get_historical_data(
        FrameLedgerReader(pd.DataFrame()), "u1", months=4, today=date(2025, 6, 1)
    )

    assert len(buckets) == 4
    assert all(b.inflow == b.outflow == b.cumulative_balance == 0.0 for b in buckets)


def test_get_historical_data_rejects_non_positive_months() -> None:
    """months must be positive."""
    with pytest.raises(ValueError):
        get_historical_data(FrameLedgerReader(pd.DataFrame()), "u1", months=0)


def test_consolidate_monthly_ignores_records_outside_window() -> None:
    """Records dated outside the window are ignored."""
    window = history_window(2, today=date(2025, 2, 1))
    records = LedgerRecords(
        sales=pd.DataFrame(
            {"date": pd.to_datetime(["2025-01-02", "2025-05-01"]), "amount": [10.0, 99.0]}
        ),
        expenses=pd.DataFrame({"date": pd.to_datetime([]), "amount": []}),
        ad_spend=pd.DataFrame({"date": pd.to_datetime(["2025-02-10"]), "amount": [4.0]}),
    )

    buckets = consolidate_monthly(records, window)

    assert [(b.inflow, b.outflow) for b in buckets] == [(10.0, 0.0), (0.0, 4.0)]


def test_worked_example_cumulative_balances() -> None:
    """Balances and cumulative balances of the reference six months."""
    months = [date(2025, m, 1) for m in range(1, 7)]
    inflows = [45000.0, 52000.0, 48000.0, 58000.0, 61000.0, 55000.0]
    outflows = [32000.0, 35000.0, 38000.0, 42000.0, 45000.0, 47000.0]

    buckets = build_buckets(months, inflows, outflows)

    assert [b.balance for b in buckets] == [13000, 17000, 10000, 16000, 16000, 8000]
    assert [b.cumulative_balance for b in buckets] == [
        13000,
        30000,
        40000,
        56000,
        72000,
        80000,
    ]


def test_build_buckets_chains_onto_opening_balance() -> None:
    """build_buckets continues from an opening balance."""
    buckets = build_buckets([date(2025, 1, 1)], [100.0], [40.0], opening_balance=1000.0)

    assert buckets[0].cumulative_balance == pytest.approx(1060.0)


def test_build_buckets_rejects_mismatched_lengths() -> None:
    """Parallel sequences must have the same length."""
    with pytest.raises(ValueError):
        build_buckets([date(2025, 1, 1)], [1.0, 2.0], [0.0])
