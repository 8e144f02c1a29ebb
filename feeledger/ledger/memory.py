"""In-process implementation of the ledger stores, for embedding and tests."""

import threading
from datetime import date
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import status

from feeledger.core.enums import StudentStatus
from feeledger.core.exceptions import DuplicateTransactionCode, LedgerConflict, ValidationError

from .repositories import AuditRepository, ConfigRepository, StudentRepository, UnitOfWork
from .schemas import AuditTrailEntry, FinanceConfig, LedgerRecord, Student


def _snapshot(student: Student) -> Student:
    return student.model_copy(update={"ledger": list(student.ledger)})


def _matches(student: Student, search: Optional[str], class_name: Optional[str], status: Optional[StudentStatus]) -> bool:
    if class_name and student.current_class != class_name:
        return False
    if status and student.status != status:
        return False
    if search:
        needle = search.strip().lower()
        return needle in student.full_name.lower() or needle in student.serial_id.lower()
    return True


class InMemoryLedgerStore:
    """Committed state shared by every unit of work created from it."""

    def __init__(self, config: Optional[FinanceConfig] = None) -> None:
        self._lock = threading.Lock()
        self._students: Dict[UUID, Student] = {}
        self._audit: List[AuditTrailEntry] = []
        self._codes: set = set()
        self._config = config or FinanceConfig()

    def unit_of_work(self) -> "InMemoryUnitOfWork":
        return InMemoryUnitOfWork(self)


class _MemoryStudents(StudentRepository):
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self.uow = uow
        self.store = uow.store

    async def get(self, student_id: UUID) -> Optional[Student]:
        with self.store._lock:
            student = self.store._students.get(student_id)
            return _snapshot(student) if student else None

    async def list(self, search=None, class_name=None, status=None) -> List[Student]:
        with self.store._lock:
            return [
                _snapshot(s)
                for s in self.store._students.values()
                if _matches(s, search, class_name, status)
            ]

    async def add(self, student: Student) -> Student:
        with self.store._lock:
            if student.id in self.store._students:
                raise ValidationError("Student already registered")
            if any(s.serial_id == student.serial_id for s in self.store._students.values()):
                raise ValidationError(f"Serial id {student.serial_id} already in use", status.HTTP_409_CONFLICT)
        self.uow._new_students.append(student)
        return student

    async def append_record(self, student_id, record, expected_length, is_fees_cleared) -> None:
        with self.store._lock:
            current = self.store._students.get(student_id)
            if current is None:
                raise ValidationError("Please select a valid learner")
            if len(current.ledger) != expected_length:
                raise LedgerConflict()
        self.uow._appends.append((student_id, record, expected_length, is_fees_cleared))


class _MemoryAudit(AuditRepository):
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self.uow = uow
        self.store = uow.store

    async def exists(self, transaction_code: str) -> bool:
        if any(e.transaction_code == transaction_code for e in self.uow._entries):
            return True
        with self.store._lock:
            return transaction_code in self.store._codes

    async def append(self, entry: AuditTrailEntry) -> None:
        self.uow._entries.append(entry)

    async def list(self, on: Optional[date] = None, staff_id=None, learner_id=None) -> List[AuditTrailEntry]:
        with self.store._lock:
            entries = list(self.store._audit)
        if on is not None:
            entries = [e for e in entries if e.date == on]
        if staff_id:
            entries = [e for e in entries if e.staff_id == staff_id]
        if learner_id:
            entries = [e for e in entries if e.learner_id == learner_id]
        return entries


class _MemoryConfig(ConfigRepository):
    def __init__(self, uow: "InMemoryUnitOfWork") -> None:
        self.uow = uow
        self.store = uow.store

    async def get(self) -> FinanceConfig:
        if self.uow._config is not None:
            return self.uow._config
        with self.store._lock:
            return self.store._config.model_copy(deep=True)

    async def save(self, config: FinanceConfig) -> FinanceConfig:
        self.uow._config = config
        return config


class InMemoryUnitOfWork(UnitOfWork):
    def __init__(self, store: InMemoryLedgerStore) -> None:
        self.store = store
        self._new_students: List[Student] = []
        self._appends: List[Tuple[UUID, LedgerRecord, int, bool]] = []
        self._entries: List[AuditTrailEntry] = []
        self._config: Optional[FinanceConfig] = None
        self.students = _MemoryStudents(self)
        self.audit = _MemoryAudit(self)
        self.config = _MemoryConfig(self)

    async def commit(self) -> None:
        store = self.store
        with store._lock:
            # Check everything before touching anything so the batch applies whole or not at all.
            lengths: Dict[UUID, int] = {}
            for student_id, _, expected_length, _ in self._appends:
                current = store._students.get(student_id)
                if current is None:
                    raise ValidationError("Please select a valid learner")
                length = lengths.get(student_id, len(current.ledger))
                if length != expected_length:
                    raise LedgerConflict()
                lengths[student_id] = length + 1
            codes = set()
            for entry in self._entries:
                if entry.transaction_code in store._codes or entry.transaction_code in codes:
                    raise DuplicateTransactionCode(entry.transaction_code)
                codes.add(entry.transaction_code)

            for student in self._new_students:
                store._students[student.id] = _snapshot(student)
            for student_id, record, _, is_fees_cleared in self._appends:
                current = store._students[student_id]
                store._students[student_id] = current.model_copy(
                    update={"ledger": [*current.ledger, record], "is_fees_cleared": is_fees_cleared}
                )
            store._audit.extend(self._entries)
            store._codes.update(codes)
            if self._config is not None:
                store._config = self._config
        await self.rollback()

    async def rollback(self) -> None:
        self._new_students = []
        self._appends = []
        self._entries = []
        self._config = None
