import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")

from datetime import datetime
from decimal import Decimal
from typing import AsyncGenerator, Callable, Dict, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from feeledger.auth.schemas import CurrentUser
from feeledger.auth.security import create_staff_token
from feeledger.core import models  # noqa: F401
from feeledger.db.session import Base, get_db
from feeledger.ledger.engine import LedgerEngine
from feeledger.ledger.memory import InMemoryLedgerStore
from feeledger.ledger.schemas import ActorIdentity, FinanceConfig, Student, TaxConfig
from feeledger.ledger.service import LedgerService
from feeledger.ledger.transaction_code import TransactionCodeGenerator
from feeledger.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FixedClock:
    """Settable clock for the ledger engine."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class ScriptedCodes(TransactionCodeGenerator):
    """Hands out a fixed list of transaction codes, to force collisions."""

    def __init__(self, codes: List[str]) -> None:
        super().__init__()
        self.codes = list(codes)

    def next_code(self, on=None) -> str:
        return self.codes.pop(0)


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Provide a fresh in-memory database session and override the FastAPI dependency."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture()
def make_headers() -> Callable[..., Dict[str, str]]:
    def _make(
        staff_id: str = "STF-001",
        name: str = "Ama Mensah",
        role: str = "ACCOUNTANT",
        permissions: Optional[Dict[str, Dict[str, bool]]] = None,
        finance_authorized: bool = True,
    ) -> Dict[str, str]:
        if permissions is None:
            permissions = {
                "finance": {"create": True, "read": True, "update": True},
                "students": {"create": True, "read": True},
            }
        token = create_staff_token(
            CurrentUser(
                staff_id=staff_id,
                name=name,
                role=role,
                permissions=permissions,
                finance_authorized=finance_authorized,
            )
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def actor() -> ActorIdentity:
    return ActorIdentity(staff_id="STF-001", staff_name="Ama Mensah")


@pytest.fixture()
def finance_config() -> FinanceConfig:
    return FinanceConfig(
        categories=["School Fees", "Feeding Fees"],
        class_bills={"Basic 1": {"School Fees": Decimal("500"), "Feeding Fees": Decimal("120")}},
        tax_config=TaxConfig(),
    )


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 10, 19, 9, 30, 0))


@pytest.fixture()
def memory_store(finance_config: FinanceConfig) -> InMemoryLedgerStore:
    return InMemoryLedgerStore(config=finance_config)


@pytest.fixture()
def ledger_service(memory_store: InMemoryLedgerStore, clock: FixedClock) -> LedgerService:
    return LedgerService(memory_store.unit_of_work, engine=LedgerEngine(clock=clock))


@pytest.fixture()
def make_student() -> Callable[..., Student]:
    def _make(serial_id: str = "UBA-001", current_class: str = "Basic 1", **kwargs) -> Student:
        kwargs.setdefault("first_name", "Kofi")
        kwargs.setdefault("surname", "Owusu")
        return Student(serial_id=serial_id, current_class=current_class, **kwargs)

    return _make


@pytest.fixture()
def scripted_codes() -> Callable[[List[str]], ScriptedCodes]:
    return ScriptedCodes
