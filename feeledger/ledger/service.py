"""Ledger service: runs payments through the engine and commits the ledger and audit writes together."""

import logging
from datetime import date
from typing import Any, Callable, List, Optional
from uuid import UUID

from feeledger.core.enums import ArrearsPolicy, HistoryScope, StudentStatus
from feeledger.core.exceptions import DuplicateTransactionCode, LedgerConflict, StudentNotFound

from .aggregation import AggregationService
from .audit_trail import AuditTrail
from .billing import build_bill_sheet
from .engine import LedgerEngine
from .locks import StudentLocks
from .repositories import UnitOfWork
from .schemas import (
    ActorIdentity,
    AggregationSummary,
    AuditTrailEntry,
    BillSheetItem,
    DefaulterItem,
    FinanceConfig,
    HistoryEntry,
    PaymentResult,
    ReconciliationReport,
    Student,
)

logger = logging.getLogger(__name__)


class LedgerService:
    def __init__(
        self,
        uow_factory: Callable[[], UnitOfWork],
        engine: Optional[LedgerEngine] = None,
        aggregation: Optional[AggregationService] = None,
        locks: Optional[StudentLocks] = None,
        max_retries: int = 3,
    ) -> None:
        self.uow_factory = uow_factory
        self.engine = engine or LedgerEngine()
        self.aggregation = aggregation or AggregationService()
        self.locks = locks or StudentLocks()
        self.max_retries = max(1, max_retries)

    # --- Payments ---
    async def process_payment(
        self,
        student_id: UUID,
        category: str,
        amount_paid: Any,
        is_end_of_cycle_billing: bool,
        actor: Optional[ActorIdentity],
    ) -> PaymentResult:
        """
        Apply one payment to a student's ledger.

        Mutations for one student are serialized by a per-student lock; the ledger
        length read here is re-checked at commit, and a conflict or code collision
        re-reads the ledger and tries again up to ``max_retries`` times.
        """
        last_error: Optional[Exception] = None
        async with self.locks.hold(student_id):
            for attempt in range(1, self.max_retries + 1):
                async with self.uow_factory() as uow:
                    student = await uow.students.get(student_id)
                    if student is None:
                        raise StudentNotFound("Please select a valid learner")
                    config = await uow.config.get()
                    updated, entry = self.engine.process_payment(
                        student, category, amount_paid, is_end_of_cycle_billing, actor, config
                    )
                    record = updated.ledger[-1]
                    try:
                        await uow.students.append_record(
                            student.id, record, len(student.ledger), updated.is_fees_cleared
                        )
                        await AuditTrail(uow.audit).append(entry)
                        await uow.commit()
                    except (LedgerConflict, DuplicateTransactionCode) as exc:
                        last_error = exc
                        logger.warning(
                            "Payment for %s not committed (attempt %d/%d): %s",
                            student.serial_id, attempt, self.max_retries, exc.message,
                        )
                        continue
                logger.info(
                    "Transaction %s finalized for %s by %s: paid=%s balance=%s",
                    record.transaction_code, student.serial_id, entry.staff_id,
                    record.amount_paid, record.current_balance,
                )
                return PaymentResult(student=updated, record=record, audit_entry=entry)
        raise last_error

    # --- Student directory ---
    async def register_student(self, student: Student) -> Student:
        async with self.uow_factory() as uow:
            added = await uow.students.add(student)
            await uow.commit()
        return added

    async def get_student(self, student_id: UUID) -> Student:
        async with self.uow_factory() as uow:
            student = await uow.students.get(student_id)
        if student is None:
            raise StudentNotFound()
        return student

    async def list_students(
        self,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        status: Optional[StudentStatus] = None,
    ) -> List[Student]:
        async with self.uow_factory() as uow:
            return await uow.students.list(search=search, class_name=class_name, status=status)

    # --- Finance config ---
    async def get_config(self) -> FinanceConfig:
        async with self.uow_factory() as uow:
            return await uow.config.get()

    async def update_config(self, config: FinanceConfig) -> FinanceConfig:
        async with self.uow_factory() as uow:
            saved = await uow.config.save(config)
            await uow.commit()
        logger.info("Finance configuration updated (%d categories)", len(saved.categories))
        return saved

    # --- Audit trail ---
    async def audit_entries(
        self,
        on: Optional[date] = None,
        staff_id: Optional[str] = None,
        learner_id: Optional[str] = None,
    ) -> List[AuditTrailEntry]:
        async with self.uow_factory() as uow:
            return await AuditTrail(uow.audit).query(on=on, staff_id=staff_id, learner_id=learner_id)

    # --- Reports ---
    async def history(
        self,
        scope: HistoryScope = HistoryScope.SCHOOL,
        student_id: Optional[UUID] = None,
        class_name: Optional[str] = None,
    ) -> List[HistoryEntry]:
        students = await self.list_students()
        return self.aggregation.history(students, scope, student_id=student_id, class_name=class_name)

    async def summary(self, reference: date, arrears_policy: Optional[ArrearsPolicy] = None) -> AggregationSummary:
        students = await self.list_students()
        return self.aggregation.summary(students, reference, arrears_policy)

    async def defaulters(self) -> List[DefaulterItem]:
        return self.aggregation.defaulters(await self.list_students())

    async def reconciliation(self, since: Optional[date] = None) -> ReconciliationReport:
        """
        Pair ledger records with audit entries by transaction code.

        Ledgers and the audit trail are two reads. A payment committed between them
        looks like an audit entry with no ledger record, so such codes are checked
        against a second read of the ledgers. Records that only show up in that
        second read were committed after the audit read and are left out.
        """
        async with self.uow_factory() as uow:
            students = await uow.students.list()
            entries = await AuditTrail(uow.audit).all()
            audit_codes = {e.transaction_code for e in entries}
            ledger_codes = {r.transaction_code for s in students for r in s.ledger}
            if audit_codes - ledger_codes:
                known = audit_codes | ledger_codes
                students = [
                    s.model_copy(update={"ledger": [r for r in s.ledger if r.transaction_code in known]})
                    for s in await uow.students.list()
                ]
        if since is not None:
            students = [
                s.model_copy(update={"ledger": [r for r in s.ledger if r.date >= since]})
                for s in students
            ]
            entries = [e for e in entries if e.date >= since]
        return self.aggregation.reconcile(students, entries)

    async def bill_sheet(self, class_name: str, is_new_term: bool = False) -> List[BillSheetItem]:
        async with self.uow_factory() as uow:
            students = await uow.students.list(class_name=class_name)
            config = await uow.config.get()
        return build_bill_sheet(students, config, class_name, is_new_term)
