# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
CashFlow Insights
-----------------

A Python cash-flow analytics engine for independent digital-product
sellers. It turns raw dated records (approved sales, expenses, ad spend)
into a forward-looking financial picture.

Main capabilities:
- monthly aggregation of inflow, outflow and cumulative balance,
- least-squares trend detection and calendar-month seasonality,
- pessimistic / realistic / optimistic scenario projections,
- burn rate, revenue run-rate, runway and a 0-100 health score,
- prioritized alerts and recommendations,
- a single-pass dashboard assembly,
- pluggable ledger readers (in-memory DataFrame, CSV file).

The engine is a library invoked in-process: every computation is pure and
parameterized by an injected ledger reader, so it can be driven by a web
layer, a script or the bundled command-line interface.

Version: 0.1.0

Usage:
    cashflow-insights --help
"""

__all__ = [
    "config",
    "dashboard",
    "historical",
    "insights",
    "io",
    "ledger",
    "periods",
    "projections",
    "trends",
    "views",
]

__version__ = "0.1.0"
