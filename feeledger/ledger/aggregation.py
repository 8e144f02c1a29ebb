"""Read-only rollups over every student's ledger and the audit trail."""

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from feeledger.core.enums import ArrearsPolicy, HistoryScope, InconsistencyKind, StudentStatus

from .money import ZERO, to_money
from .schemas import (
    AggregationInconsistency,
    AggregationSummary,
    AuditTrailEntry,
    DefaulterItem,
    HistoryEntry,
    ReconciliationReport,
    Student,
    WindowTotals,
)

logger = logging.getLogger(__name__)


def week_bounds(reference: date) -> Tuple[date, date]:
    """Sunday through Saturday week containing ``reference``."""
    start = reference - timedelta(days=(reference.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


def _totals(entries: Iterable[HistoryEntry]) -> WindowTotals:
    paid = bill = tax = ZERO
    count = 0
    for entry in entries:
        paid += entry.record.amount_paid
        bill += entry.record.new_bill
        tax += entry.record.tax_amount
        count += 1
    return WindowTotals(
        amount_paid=to_money(paid),
        new_bill=to_money(bill),
        tax_amount=to_money(tax),
        transaction_count=count,
    )


class AggregationService:
    """Window totals, defaulters, closing arrears, history and reconciliation.

    Works on student snapshots; nothing here writes.
    """

    def __init__(self, arrears_policy: ArrearsPolicy = ArrearsPolicy.SIGNED) -> None:
        self.arrears_policy = arrears_policy

    # --- master ledger ---
    def master_ledger(self, students: Iterable[Student]) -> List[HistoryEntry]:
        """Every record of every student, newest date first. Same-day records keep insertion order."""
        entries = [
            HistoryEntry(
                record=record,
                student_id=s.id,
                student_name=s.full_name,
                student_class=s.current_class,
                student_serial=s.serial_id,
            )
            for s in students
            for record in s.ledger
        ]
        entries.sort(key=lambda e: e.record.date, reverse=True)
        return entries

    def history(
        self,
        students: Iterable[Student],
        scope: HistoryScope = HistoryScope.SCHOOL,
        student_id: Optional[UUID] = None,
        class_name: Optional[str] = None,
    ) -> List[HistoryEntry]:
        entries = self.master_ledger(students)
        if scope == HistoryScope.INDIVIDUAL:
            return [e for e in entries if e.student_id == student_id]
        if scope == HistoryScope.CLASS:
            return [e for e in entries if e.student_class == class_name]
        return entries

    # --- windows ---
    def _window(self, entries: Sequence[HistoryEntry], predicate: Callable[[date], bool]) -> List[HistoryEntry]:
        return [e for e in entries if predicate(e.record.date)]

    def day_totals(self, students: Iterable[Student], reference: date) -> WindowTotals:
        return _totals(self._window(self.master_ledger(students), lambda d: d == reference))

    def week_totals(self, students: Iterable[Student], reference: date) -> WindowTotals:
        start, end = week_bounds(reference)
        return _totals(self._window(self.master_ledger(students), lambda d: start <= d <= end))

    def month_totals(self, students: Iterable[Student], reference: date) -> WindowTotals:
        return _totals(
            self._window(
                self.master_ledger(students),
                lambda d: (d.year, d.month) == (reference.year, reference.month),
            )
        )

    def term_totals(self, students: Iterable[Student]) -> WindowTotals:
        return _totals(self.master_ledger(students))

    def summary(
        self,
        students: Sequence[Student],
        reference: date,
        arrears_policy: Optional[ArrearsPolicy] = None,
    ) -> AggregationSummary:
        entries = self.master_ledger(students)
        start, end = week_bounds(reference)
        day = self._window(entries, lambda d: d == reference)
        return AggregationSummary(
            reference_date=reference,
            day=_totals(day),
            week=_totals(self._window(entries, lambda d: start <= d <= end)),
            month=_totals(
                self._window(entries, lambda d: (d.year, d.month) == (reference.year, reference.month))
            ),
            term=_totals(entries),
            week_start=start,
            week_end=end,
            closing_arrears=self.closing_arrears(students, arrears_policy),
            day_transactions=day,
        )

    # --- balances ---
    def closing_arrears(
        self,
        students: Iterable[Student],
        arrears_policy: Optional[ArrearsPolicy] = None,
    ) -> Decimal:
        """Sum of admitted students' latest balances. Credit balances reduce the total under the signed policy."""
        policy = arrears_policy or self.arrears_policy
        total = ZERO
        for s in students:
            if s.status != StudentStatus.ADMITTED:
                continue
            balance = s.outstanding_balance
            if policy == ArrearsPolicy.FLOOR_AT_ZERO:
                balance = max(balance, ZERO)
            total += balance
        return to_money(total)

    def defaulters(self, students: Iterable[Student]) -> List[DefaulterItem]:
        rows: List[DefaulterItem] = []
        for s in students:
            if s.status != StudentStatus.ADMITTED:
                continue
            last = s.latest_record
            owing = last is not None and last.current_balance > 0
            never_billed = last is None and not s.is_fees_cleared
            if not (owing or never_billed):
                continue
            rows.append(
                DefaulterItem(
                    student_id=s.id,
                    name=s.full_name,
                    current_class=s.current_class,
                    serial_id=s.serial_id,
                    balance=last.current_balance if last else ZERO,
                    last_category=last.category if last else "N/A",
                )
            )
        # sorted() is stable, so equal balances keep registration order
        return sorted(rows, key=lambda r: r.balance, reverse=True)

    # --- reconciliation ---
    def reconcile(
        self,
        students: Iterable[Student],
        audit_entries: Iterable[AuditTrailEntry],
    ) -> ReconciliationReport:
        records: Dict[str, Decimal] = {}
        for s in students:
            for record in s.ledger:
                records[record.transaction_code] = record.amount_paid
        audits: Dict[str, Decimal] = {e.transaction_code: e.amount for e in audit_entries}

        issues: List[AggregationInconsistency] = []
        paired = 0
        for code, amount_paid in records.items():
            if code not in audits:
                issues.append(
                    AggregationInconsistency(
                        transaction_code=code,
                        kind=InconsistencyKind.MISSING_AUDIT,
                        detail="Ledger record has no audit trail entry",
                    )
                )
                continue
            paired += 1
            if audits[code] != amount_paid:
                issues.append(
                    AggregationInconsistency(
                        transaction_code=code,
                        kind=InconsistencyKind.AMOUNT_MISMATCH,
                        detail=f"Ledger paid {amount_paid}, audit recorded {audits[code]}",
                    )
                )
        for code in audits:
            if code not in records:
                issues.append(
                    AggregationInconsistency(
                        transaction_code=code,
                        kind=InconsistencyKind.MISSING_LEDGER,
                        detail="Audit trail entry has no ledger record",
                    )
                )
        if issues:
            logger.warning("Reconciliation found %d inconsistencies", len(issues))
        return ReconciliationReport(
            paired_count=paired,
            ledger_count=len(records),
            audit_count=len(audits),
            inconsistencies=issues,
        )
