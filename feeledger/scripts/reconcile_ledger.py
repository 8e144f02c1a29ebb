"""
Reconcile ledger entries against the transaction audit log.
Lists transaction codes present in one store but not the other, and amount mismatches.
Exits with status 1 when anything is out of line, so it can run from cron/CI.

Usage:
  python -m feeledger.scripts.reconcile_ledger
  python -m feeledger.scripts.reconcile_ledger --since 2026-09-01
"""

import argparse
import asyncio
import sys
from datetime import date
from typing import Optional

from feeledger.core import models  # noqa: F401
from feeledger.db.repositories import SqlAlchemyUnitOfWork
from feeledger.db.session import AsyncSessionLocal
from feeledger.ledger.service import LedgerService


async def run_reconciliation(since: Optional[date] = None) -> int:
    async with AsyncSessionLocal() as session:
        ledger = LedgerService(lambda: SqlAlchemyUnitOfWork(session))
        report = await ledger.reconciliation(since=since)

    print(f"Ledger records: {report.ledger_count}")
    print(f"Audit entries:  {report.audit_count}")
    print(f"Paired:         {report.paired_count}")
    if report.is_consistent:
        print("\nLedger and audit trail agree.")
        return 0
    print(f"\n{len(report.inconsistencies)} inconsistencies:")
    for issue in report.inconsistencies:
        print(f"  {issue.transaction_code}  {issue.kind.value:<16} {issue.detail}")
    return 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Reconcile ledger entries with the transaction audit log")
    parser.add_argument("--since", type=date.fromisoformat, default=None, help="Only check records on or after this date (YYYY-MM-DD)")
    args = parser.parse_args()
    sys.exit(asyncio.run(run_reconciliation(since=args.since)))


if __name__ == "__main__":
    main()
