# CashFlow Insights - Cash-flow analytics engine for digital-product sellers
# Copyright (c) 2025 Maxence Bernard (maxencebernardhub)
# Licensed under the MIT License. See LICENSE file for details.

"""
Command-Line Interface (CLI) for CashFlow Insights.

This module wires together the main building blocks of CashFlow Insights:

- engine configuration (optional TOML file),
- a CSV-backed ledger reader,
- historical aggregation, trend analysis, scenario projections and
  insights,
- view helpers (tabular and JSON rendering).

The CLI is intentionally thin: it does not implement any financial logic
itself. It orchestrates the underlying modules based on command-line
arguments.


Commands
--------

- ``historical``   monthly inflow/outflow/balance series
- ``trends``       regression trends and seasonality
- ``projections``  pessimistic / realistic / optimistic scenarios
                   (``--scenario`` restricts the output to one of them)
- ``insights``     balance, burn rate, runway, health score, alerts and
                   recommendations
- ``health-score`` per-factor breakdown of the health score
- ``dashboard``    everything above, computed in a single pass


Example
-------

    cashflow-insights --ledger data/ledger.csv --user u1 dashboard
    cashflow-insights --ledger data/ledger.csv --user u1 \\
        --display-mode json projections --periods 6 --scenario optimistic
"""

import argparse
import json
import logging
from datetime import date
from typing import Optional

from . import __version__
from .config import SCENARIO_NAMES, EngineConfig, load_engine_config
from .dashboard import compute_dashboard
from .historical import get_historical_data
from .insights import Insights, InsightsResult, build_insights, health_score_breakdown
from .ledger import CsvLedgerReader
from .projections import get_scenario, project_scenarios
from .trends import TrendAnalysis, analyze_trend
from .views import (
    alerts_to_dataframe,
    buckets_to_dataframe,
    projections_to_dataframe,
    summaries_to_dataframe,
    to_serializable,
    trends_to_dataframe,
)


def _build_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for the CLI."""
    ap = argparse.ArgumentParser(
        prog="cashflow-insights",
        description=(
            "CashFlow Insights - cash-flow analytics for digital-product sellers. "
            "Reads sales, expenses and ad spend, aggregates them per month, "
            "detects trends and seasonality, projects scenarios and derives "
            "a financial health picture."
        ),
    )

    ap.add_argument(
        "--version",
        action="version",
        version=f"cashflow_insights version {__version__}",
    )
    ap.add_argument(
        "--config",
        dest="config_path",
        help="Path to an optional TOML file overriding the engine constants.",
    )
    ap.add_argument(
        "--ledger",
        dest="ledger_path",
        required=True,
        metavar="CSV_PATH",
        help="CSV file with columns date, kind, amount[, status][, user_id].",
    )
    ap.add_argument(
        "--user",
        dest="user_id",
        default="",
        help="User whose records are analysed (default: records without user_id).",
    )
    ap.add_argument(
        "--months",
        type=int,
        help="History window in months (default: from config, 6).",
    )
    ap.add_argument(
        "--as-of",
        dest="as_of",
        help="Reference date (YYYY-MM-DD) used as the current month.",
    )
    ap.add_argument(
        "--display-mode",
        dest="display_mode",
        choices=["table", "json"],
        help="Output format. Overrides the configuration display mode.",
    )
    ap.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    sub = ap.add_subparsers(dest="command", required=True)
    sub.add_parser("historical", help="Monthly inflow/outflow/balance series.")
    sub.add_parser("trends", help="Regression trends and seasonality.")

    proj = sub.add_parser("projections", help="Scenario projections.")
    proj.add_argument("--periods", type=int, help="Number of projected months.")
    proj.add_argument(
        "--scenario",
        choices=list(SCENARIO_NAMES),
        help="Only show one scenario.",
    )

    sub.add_parser("insights", help="Balance, runway, health score and alerts.")
    sub.add_parser("health-score", help="Per-factor health score breakdown.")

    dash = sub.add_parser("dashboard", help="Everything, in a single pass.")
    dash.add_argument("--periods", type=int, help="Number of projected months.")

    return ap


def _parse_optional_date(value: Optional[str]) -> Optional[date]:
    """Parse an optional YYYY-MM-DD string, raising ValueError on error."""
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD.") from exc


def _print_table(title: str, df) -> None:
    print()
    print(f"=== {title} ===")
    if df.empty:
        print("(no rows)")
    else:
        print(df.to_string(index=False))


def _print_trends(trends: TrendAnalysis, config: EngineConfig) -> None:
    _print_table("Trends", trends_to_dataframe(trends, config.decimals))
    seasonality = trends.seasonality
    if seasonality.has_seasonality:
        peaks = ", ".join(str(m + 1) for m in sorted(seasonality.peak_months)) or "-"
        lows = ", ".join(str(m + 1) for m in sorted(seasonality.low_months)) or "-"
        print(f"Seasonality: peak months {peaks}; low months {lows}")
    else:
        print("Seasonality: none detected")


def _print_insights(result: InsightsResult, config: EngineConfig) -> None:
    print()
    print("=== Insights ===")
    if not isinstance(result, Insights):
        print(f"Insufficient data: {result.reason}")
    else:
        d = config.decimals
        print(f"Current balance:   {result.current_balance:,.{d}f}")
        print(f"Monthly burn rate: {result.monthly_burn_rate:,.{d}f}")
        print(f"Monthly revenue:   {result.monthly_revenue:,.{d}f}")
        print(f"Runway (months):   {result.runway_months}")
        print(f"Health score:      {result.health_score}/100")

    _print_table("Alerts", alerts_to_dataframe(result.alerts))
    print()
    print("=== Recommendations ===")
    for rec in result.recommendations:
        print(f"- {rec}")


def _emit_json(payload) -> None:
    print(json.dumps(to_serializable(payload), indent=2, ensure_ascii=False))


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for the CashFlow Insights CLI.

    This function parses command-line arguments, loads the engine
    configuration and the CSV ledger, runs the requested computation and
    renders it as console tables or JSON.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 1) Configuration and ledger
    try:
        config = load_engine_config(args.config_path)
        reader = CsvLedgerReader(args.ledger_path)
    except (FileNotFoundError, ValueError) as exc:
        parser.error(str(exc))

    try:
        today = _parse_optional_date(args.as_of)
    except ValueError as exc:
        parser.error(str(exc))
    months = args.months if args.months is not None else config.history_months
    display_mode = args.display_mode or config.display_mode
    periods = getattr(args, "periods", None)
    if periods is None:
        periods = config.projection_periods

    if months <= 0:
        parser.error("--months must be a positive integer.")
    if periods <= 0:
        parser.error("--periods must be a positive integer.")

    # 2) Dashboard: single pass, then exit.
    if args.command == "dashboard":
        dashboard = compute_dashboard(
            reader, args.user_id, periods=periods, months=months, today=today, config=config
        )
        if display_mode == "json":
            _emit_json(dashboard)
            return
        print(f"Data quality: {dashboard.data_quality}")
        _print_table("Historical", buckets_to_dataframe(dashboard.historical, config.decimals))
        _print_trends(dashboard.trends, config)
        _print_table("Scenarios", summaries_to_dataframe(dashboard.projections, config.decimals))
        _print_insights(dashboard.insights, config)
        return

    # 3) Other commands share the history and its trend analysis.
    historical = get_historical_data(reader, args.user_id, months, today=today, config=config)
    trends = analyze_trend(historical, config)

    if args.command == "historical":
        if display_mode == "json":
            _emit_json(historical)
        else:
            _print_table("Historical", buckets_to_dataframe(historical, config.decimals))
        return

    if args.command == "trends":
        if display_mode == "json":
            _emit_json(trends)
        else:
            _print_trends(trends, config)
        return

    if args.command == "projections":
        projections = project_scenarios(historical, trends, periods, config, today=today)
        if args.scenario:
            projections = [get_scenario(projections, args.scenario)]
        if display_mode == "json":
            _emit_json(projections)
        else:
            _print_table("Scenarios", summaries_to_dataframe(projections, config.decimals))
            _print_table(
                "Projected months", projections_to_dataframe(projections, config.decimals)
            )
        return

    result = build_insights(historical, trends, config)

    if args.command == "insights":
        if display_mode == "json":
            _emit_json(result)
        else:
            _print_insights(result, config)
        return

    # health-score
    if not isinstance(result, Insights):
        parser.error(f"Cannot compute a health score: {result.reason}")

    breakdown = health_score_breakdown(result, trends)
    if display_mode == "json":
        _emit_json(breakdown)
        return
    print()
    print("=== Health score ===")
    print(f"Score: {breakdown.score}/100 ({breakdown.band})")
    for factor, points in breakdown.factors.items():
        print(f"  {factor:<15} +{points}")


if __name__ == "__main__":
    main()
