#!/usr/bin/env python
"""Run a data pull for every linked Item from the command line.

Meant for cron: syncs transactions, optionally refreshes balances and
liabilities, and optionally records a net worth snapshot afterwards.
Exits non-zero if any Item failed.

Usage:
    python -m scripts.run_sync
    python -m scripts.run_sync --balances --liabilities --snapshot
    python -m scripts.run_sync --max-retries 0 --verbose
"""

import argparse
import sys

from database import get_session_local, init_db
from integrations.plaid_client import PlaidClient
from logging_config import setup_logging
from services.balance_service import BalanceService
from services.item_results import ItemsReport
from services.liability_service import LiabilityService
from services.networth_service import NetWorthService
from services.transaction_sync_service import SyncInProgressError, TransactionSyncService


def print_report(title: str, report: ItemsReport, with_counts: bool = False) -> None:
    """Print one line per Item plus the totals."""
    print(f"\n{title}")
    print("-" * len(title))
    if not report.items:
        print("  No linked items.")
        return

    for result in report.items:
        label = result.institution_name or result.item_id
        if result.succeeded:
            counts = (
                f" +{result.added} ~{result.modified} -{result.removed}" if with_counts else ""
            )
            print(f"  [ok]     {label}{counts}")
        else:
            category = result.error_category.value if result.error_category else "unknown"
            print(f"  [failed] {label} ({category}): {result.error}")

    if with_counts:
        print(
            f"  Total: {report.added} added, {report.modified} modified, "
            f"{report.removed} removed"
        )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync Plaid data for all linked items")
    parser.add_argument(
        "--balances", action="store_true", help="Also refresh account balances"
    )
    parser.add_argument(
        "--liabilities", action="store_true", help="Also sync liability details"
    )
    parser.add_argument(
        "--snapshot", action="store_true", help="Save a net worth snapshot at the end"
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=None,
        help="Retries for an empty first page (default: SYNC_EMPTY_PAGE_MAX_RETRIES)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable DEBUG logging"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    init_db()
    client = PlaidClient()
    if not client.is_configured():
        print("Error: Plaid is not configured. Run scripts/setup_plaid.py first.")
        return 1

    db = get_session_local()()
    failed = 0
    try:
        try:
            report = TransactionSyncService(
                client, max_empty_retries=args.max_retries
            ).sync_transactions(db)
        except SyncInProgressError:
            print("Error: a transaction sync is already running.")
            return 1
        print_report("Transactions", report, with_counts=True)
        failed += len(report.failed)

        if args.balances:
            report = BalanceService(client).refresh_balances(db)
            print_report("Balances", report)
            failed += len(report.failed)

        if args.liabilities:
            report = LiabilityService(client).sync_liabilities(db)
            print_report("Liabilities", report)
            failed += len(report.failed)

        if args.snapshot:
            snapshot = NetWorthService.save_snapshot(db)
            print(f"\nNet worth snapshot saved: {snapshot.net_worth}")
    finally:
        db.close()

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
