"""Store interfaces the ledger is written against. Implementations live in
``feeledger.ledger.memory`` (embedded) and ``feeledger.db.repositories`` (SQLAlchemy)."""

from abc import ABC, abstractmethod
from datetime import date
from typing import List, Optional
from uuid import UUID

from feeledger.core.enums import StudentStatus

from .schemas import AuditTrailEntry, FinanceConfig, LedgerRecord, Student


class StudentRepository(ABC):
    @abstractmethod
    async def get(self, student_id: UUID) -> Optional[Student]:
        """Snapshot of a student with its full ledger, or None."""

    @abstractmethod
    async def list(
        self,
        search: Optional[str] = None,
        class_name: Optional[str] = None,
        status: Optional[StudentStatus] = None,
    ) -> List[Student]:
        """Snapshots in registration order. ``search`` matches name or serial id."""

    @abstractmethod
    async def add(self, student: Student) -> Student:
        ...

    @abstractmethod
    async def append_record(
        self,
        student_id: UUID,
        record: LedgerRecord,
        expected_length: int,
        is_fees_cleared: bool,
    ) -> None:
        """Append one record. Raises LedgerConflict if the ledger no longer has ``expected_length`` records."""


class AuditRepository(ABC):
    @abstractmethod
    async def exists(self, transaction_code: str) -> bool:
        ...

    @abstractmethod
    async def append(self, entry: AuditTrailEntry) -> None:
        ...

    @abstractmethod
    async def list(
        self,
        on: Optional[date] = None,
        staff_id: Optional[str] = None,
        learner_id: Optional[str] = None,
    ) -> List[AuditTrailEntry]:
        ...


class ConfigRepository(ABC):
    @abstractmethod
    async def get(self) -> FinanceConfig:
        ...

    @abstractmethod
    async def save(self, config: FinanceConfig) -> FinanceConfig:
        ...


class UnitOfWork(ABC):
    """One logical transaction over all three stores.

    Writes staged through ``students``/``audit``/``config`` become visible together
    on ``commit``; leaving the context without committing discards them.
    """

    students: StudentRepository
    audit: AuditRepository
    config: ConfigRepository

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...
