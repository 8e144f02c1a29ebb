"""Append-only audit trail of processed transactions."""

from datetime import date
from typing import List, Optional

from feeledger.core.exceptions import DuplicateTransactionCode

from .repositories import AuditRepository
from .schemas import AuditTrailEntry


class AuditTrail:
    """Write-once log over an AuditRepository. There is no update or delete."""

    def __init__(self, repository: AuditRepository) -> None:
        self.repository = repository

    async def append(self, entry: AuditTrailEntry) -> AuditTrailEntry:
        if await self.repository.exists(entry.transaction_code):
            raise DuplicateTransactionCode(entry.transaction_code)
        await self.repository.append(entry)
        return entry

    async def query(
        self,
        on: Optional[date] = None,
        staff_id: Optional[str] = None,
        learner_id: Optional[str] = None,
    ) -> List[AuditTrailEntry]:
        """Entries in recording order. Filters combine; none given returns the whole trail."""
        return await self.repository.list(on=on, staff_id=staff_id, learner_id=learner_id)

    async def all(self) -> List[AuditTrailEntry]:
        return await self.query()

    async def query_by_date(self, on: date) -> List[AuditTrailEntry]:
        return await self.query(on=on)

    async def query_by_staff(self, staff_id: str) -> List[AuditTrailEntry]:
        return await self.query(staff_id=staff_id)

    async def query_by_learner(self, learner_id: str) -> List[AuditTrailEntry]:
        return await self.query(learner_id=learner_id)
