import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from uuid import UUID


class StudentLocks:
    """One asyncio.Lock per student id, dropped once nobody holds or waits on it."""

    def __init__(self) -> None:
        self._locks: Dict[UUID, asyncio.Lock] = {}
        self._holders: Dict[UUID, int] = {}

    @asynccontextmanager
    async def hold(self, student_id: UUID) -> AsyncIterator[None]:
        lock = self._locks.setdefault(student_id, asyncio.Lock())
        self._holders[student_id] = self._holders.get(student_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[student_id] -= 1
            if not self._holders[student_id]:
                del self._holders[student_id]
                del self._locks[student_id]

    def __len__(self) -> int:
        return len(self._locks)
