# ==============================================
# CLI — Command Line Entry Point
# ==============================================
#
# PURPOSE:
#   Provides command-line interface to run the engine and
#   its reports. This is what the scheduler (cron) calls.
#
# COMMANDS:
# ---------
# 1. Classify today's past-due debts and write them to the sinks:
#    python -m collection_strategy.cli run
#    python -m collection_strategy.cli run --as-of 2026-01-15T06:00:00+00:00
#
# 2. Reports (over the stored strategy table):
#    python -m collection_strategy.cli report counts
#    python -m collection_strategy.cli report summary
#    python -m collection_strategy.cli report top --n 5
#    python -m collection_strategy.cli report critical --segment PREMIUM --min-days 60
#
# 3. Show the last run report:
#    python -m collection_strategy.cli history
#
# 4. Run the in-memory demo:
#    python -m collection_strategy.cli demo
#
# EXIT CODES:
# -----------
#   0 success, 1 source/sink/policy failure, 2 bad arguments
#
# ==============================================

import argparse
import json
import sys
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from collection_strategy.errors import CollectionStrategyError
from collection_strategy.pipeline import CollectionPipeline, demo_basic_usage


def _parse_as_of(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO-8601 timestamp: {value!r}")


def _parse_amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"not a decimal amount: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="collection_strategy",
        description="Assign collection strategies to past-due debts."
    )
    commands = parser.add_subparsers(dest="command", required=True)

    run_parser = commands.add_parser("run", help="classify past-due debts and write them to the sinks")
    run_parser.add_argument("--as-of", type=_parse_as_of, default=None,
                            help="assignment timestamp (ISO-8601); default now, UTC")

    report_parser = commands.add_parser("report", help="reports over stored assignments")
    report_parser.add_argument("kind", choices=["counts", "summary", "top", "critical"])
    report_parser.add_argument("--n", type=int, default=10, help="ranks per strategy for 'top'")
    report_parser.add_argument("--segment", default=None, help="segment for 'critical'")
    report_parser.add_argument("--min-days", type=int, default=None, help="days past due must exceed this")
    report_parser.add_argument("--min-amount", type=_parse_amount, default=None, help="amount must exceed this")

    commands.add_parser("history", help="show the last run report")
    commands.add_parser("demo", help="classify built-in sample records in memory")
    return parser


def _print_report(pipeline: CollectionPipeline, args) -> None:
    if args.kind == "counts":
        for item in pipeline.report_counts():
            print(f"{item.strategy.value:<24} {item.cases:>8} {item.percentage:>7.2f}%")
    elif args.kind == "summary":
        for item in pipeline.report_summary():
            print(f"{item.strategy.value:<24} {item.cases:>8} {item.total_amount:>18} "
                  f"{item.average_days_past_due:>8.2f}d")
    elif args.kind == "top":
        for strategy, ranked in pipeline.report_top(args.n).items():
            print(strategy.value)
            for item in ranked:
                print(f"  {item.rank:>3}. {item.record.debtor_id} {item.record.current_amount}")
    else:
        records = pipeline.report_critical(args.segment, args.min_days, args.min_amount)
        for record in records:
            print(f"{record.debtor_id} {record.segment} {record.days_past_due}d "
                  f"{record.current_amount} {record.collection_strategy.value}")
        print(f"{len(records)} critical cases")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "demo":
        demo_basic_usage()
        return 0

    try:
        with CollectionPipeline() as pipeline:
            if args.command == "run":
                result = pipeline.run(as_of=args.as_of)
                print(json.dumps(result.summary(), indent=2, default=str))
            elif args.command == "report":
                _print_report(pipeline, args)
            elif args.command == "history":
                report = pipeline.last_report()
                if report is None:
                    print("No runs recorded yet.")
                else:
                    print(json.dumps(report, indent=2))
    except CollectionStrategyError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
