"""SQLAlchemy implementation of the ledger stores. One UnitOfWork is one database transaction."""

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.core import models
from feeledger.core.enums import StudentStatus
from feeledger.core.exceptions import DuplicateTransactionCode, LedgerConflict, ValidationError
from feeledger.ledger.money import to_money
from feeledger.ledger.repositories import (
    AuditRepository,
    ConfigRepository,
    StudentRepository,
    UnitOfWork,
)
from feeledger.ledger.schemas import (
    AuditTrailEntry,
    FinanceConfig,
    LedgerRecord,
    ProcessedBy,
    Student,
    TaxConfig,
)


def _entry_to_record(row: models.LedgerEntry) -> LedgerRecord:
    return LedgerRecord(
        id=row.id,
        date=row.date,
        transaction_code=row.transaction_code,
        balance_bf=to_money(row.balance_bf),
        new_bill=to_money(row.new_bill),
        tax_amount=to_money(row.tax_amount),
        total_bill=to_money(row.total_bill),
        amount_paid=to_money(row.amount_paid),
        current_balance=to_money(row.current_balance),
        status=row.status,
        category=row.category,
        processed_by=ProcessedBy(
            staff_id=row.processed_by_staff_id,
            staff_name=row.processed_by_staff_name,
            time=row.processed_time,
        ),
    )


def _student_to_schema(row: models.Student, ledger: List[LedgerRecord]) -> Student:
    return Student(
        id=row.id,
        serial_id=row.serial_id,
        first_name=row.first_name,
        surname=row.surname,
        current_class=row.current_class,
        status=row.status,
        ledger=ledger,
        is_fees_cleared=bool(row.is_fees_cleared),
    )


def _audit_to_schema(row: models.TransactionAuditLog) -> AuditTrailEntry:
    return AuditTrailEntry(
        id=row.id,
        date=row.date,
        time=row.time,
        staff_id=row.staff_id,
        staff_name=row.staff_name,
        learner_id=row.learner_id,
        learner_name=row.learner_name,
        amount=to_money(row.amount),
        category=row.category,
        transaction_code=row.transaction_code,
    )


class SqlStudentRepository(StudentRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def _ledgers(self, student_ids: List[UUID]) -> Dict[UUID, List[LedgerRecord]]:
        ledgers: Dict[UUID, List[LedgerRecord]] = defaultdict(list)
        if not student_ids:
            return ledgers
        result = await self.db.execute(
            select(models.LedgerEntry)
            .where(models.LedgerEntry.student_id.in_(student_ids))
            .order_by(models.LedgerEntry.student_id, models.LedgerEntry.sequence)
        )
        for row in result.scalars().all():
            ledgers[row.student_id].append(_entry_to_record(row))
        return ledgers

    async def get(self, student_id: UUID) -> Optional[Student]:
        row = await self.db.get(models.Student, student_id, populate_existing=True)
        if not row:
            return None
        ledgers = await self._ledgers([row.id])
        return _student_to_schema(row, ledgers[row.id])

    async def list(
        self,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        status: Optional[StudentStatus] = None,
    ) -> List[Student]:
        stmt = select(models.Student)
        if class_name:
            stmt = stmt.where(models.Student.current_class == class_name)
        if status:
            stmt = stmt.where(models.Student.status == StudentStatus(status).value)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            full_name = models.Student.first_name + " " + models.Student.surname
            stmt = stmt.where(or_(full_name.ilike(pattern), models.Student.serial_id.ilike(pattern)))
        stmt = stmt.order_by(models.Student.created_at, models.Student.serial_id)
        stmt = stmt.execution_options(populate_existing=True)
        rows = (await self.db.execute(stmt)).scalars().all()
        ledgers = await self._ledgers([r.id for r in rows])
        return [_student_to_schema(r, ledgers[r.id]) for r in rows]

    async def add(self, student: Student) -> Student:
        row = models.Student(
            id=student.id,
            serial_id=student.serial_id.strip(),
            first_name=student.first_name.strip(),
            surname=student.surname.strip(),
            current_class=student.current_class.strip(),
            status=StudentStatus(student.status).value,
            is_fees_cleared=student.is_fees_cleared,
        )
        self.db.add(row)
        try:
            await self.db.flush()
        except IntegrityError:
            raise ValidationError(f"Serial id {student.serial_id} already in use", status.HTTP_409_CONFLICT)
        return _student_to_schema(row, [])

    async def append_record(
        self,
        student_id: UUID,
        record: LedgerRecord,
        expected_length: int,
        is_fees_cleared: bool,
    ) -> None:
        current_length = (
            await self.db.execute(
                select(func.count(models.LedgerEntry.id)).where(models.LedgerEntry.student_id == student_id)
            )
        ).scalar() or 0
        if current_length != expected_length:
            raise LedgerConflict()
        code_taken = (
            await self.db.execute(
                select(models.LedgerEntry.id).where(
                    models.LedgerEntry.transaction_code == record.transaction_code
                )
            )
        ).scalar_one_or_none()
        if code_taken is not None:
            raise DuplicateTransactionCode(record.transaction_code)
        self.db.add(
            models.LedgerEntry(
                id=record.id,
                student_id=student_id,
                sequence=expected_length,
                date=record.date,
                transaction_code=record.transaction_code,
                balance_bf=record.balance_bf,
                new_bill=record.new_bill,
                tax_amount=record.tax_amount,
                total_bill=record.total_bill,
                amount_paid=record.amount_paid,
                current_balance=record.current_balance,
                status=record.status.value,
                category=record.category,
                processed_by_staff_id=record.processed_by.staff_id,
                processed_by_staff_name=record.processed_by.staff_name,
                processed_time=record.processed_by.time,
            )
        )
        try:
            await self.db.flush()
        except IntegrityError as exc:
            # Either the (student_id, sequence) or the transaction_code constraint.
            if "transaction_code" in str(exc.orig):
                raise DuplicateTransactionCode(record.transaction_code)
            raise LedgerConflict()
        await self.db.execute(
            update(models.Student)
            .where(models.Student.id == student_id)
            .values(is_fees_cleared=is_fees_cleared)
        )


class SqlAuditRepository(AuditRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def exists(self, transaction_code: str) -> bool:
        found = (
            await self.db.execute(
                select(models.TransactionAuditLog.id).where(
                    models.TransactionAuditLog.transaction_code == transaction_code
                )
            )
        ).scalar_one_or_none()
        return found is not None

    async def append(self, entry: AuditTrailEntry) -> None:
        self.db.add(
            models.TransactionAuditLog(
                id=entry.id,
                date=entry.date,
                time=entry.time,
                staff_id=entry.staff_id,
                staff_name=entry.staff_name,
                learner_id=entry.learner_id,
                learner_name=entry.learner_name,
                amount=entry.amount,
                category=entry.category,
                transaction_code=entry.transaction_code,
            )
        )
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateTransactionCode(entry.transaction_code)

    async def list(
        self,
        on: Optional[date] = None,
        staff_id: Optional[str] = None,
        learner_id: Optional[str] = None,
    ) -> List[AuditTrailEntry]:
        stmt = select(models.TransactionAuditLog)
        if on is not None:
            stmt = stmt.where(models.TransactionAuditLog.date == on)
        if staff_id:
            stmt = stmt.where(models.TransactionAuditLog.staff_id == staff_id)
        if learner_id:
            stmt = stmt.where(models.TransactionAuditLog.learner_id == learner_id)
        stmt = stmt.order_by(models.TransactionAuditLog.created_at)
        result = await self.db.execute(stmt)
        return [_audit_to_schema(r) for r in result.scalars().all()]


class SqlConfigRepository(ConfigRepository):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self) -> FinanceConfig:
        row = await self.db.get(models.FinanceSetting, 1)
        if not row:
            return FinanceConfig()
        return FinanceConfig(
            categories=list(row.categories or []),
            class_bills={
                cls: {cat: Decimal(str(amount)) for cat, amount in bills.items()}
                for cls, bills in (row.class_bills or {}).items()
            },
            tax_config=TaxConfig(
                vat_rate=Decimal(str(row.vat_rate)),
                nhil_rate=Decimal(str(row.nhil_rate)),
                get_levy_rate=Decimal(str(row.get_levy_rate)),
                covid_levy_rate=Decimal(str(row.covid_levy_rate)),
                is_tax_enabled=bool(row.is_tax_enabled),
            ),
            receipt_message=row.receipt_message or "",
        )

    async def save(self, config: FinanceConfig) -> FinanceConfig:
        row = await self.db.get(models.FinanceSetting, 1)
        if not row:
            row = models.FinanceSetting(id=1)
            self.db.add(row)
        row.categories = list(config.categories)
        row.class_bills = {
            cls: {cat: str(amount) for cat, amount in bills.items()}
            for cls, bills in config.class_bills.items()
        }
        tax = config.tax_config
        row.vat_rate = tax.vat_rate
        row.nhil_rate = tax.nhil_rate
        row.get_levy_rate = tax.get_levy_rate
        row.covid_levy_rate = tax.covid_levy_rate
        row.is_tax_enabled = tax.is_tax_enabled
        row.receipt_message = config.receipt_message
        await self.db.flush()
        return config


class SqlAlchemyUnitOfWork(UnitOfWork):
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.students = SqlStudentRepository(db)
        self.audit = SqlAuditRepository(db)
        self.config = SqlConfigRepository(db)

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
