from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from feeledger.core.config import settings


def _engine_options(database_url: str) -> Dict[str, Any]:
    if database_url.startswith("sqlite"):
        # aiosqlite runs each connection on its own thread
        return {"connect_args": {"check_same_thread": False}}
    # pool_pre_ping/pool_recycle: drop connections the server closed while idle.
    return {"pool_pre_ping": True, "pool_recycle": 300}


engine = create_async_engine(
    settings.database_url,
    echo=False,
    future=True,
    **_engine_options(settings.database_url),
)

# expire_on_commit=False: ledger snapshots are built from rows after the payment commit.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """One session per request. Each ledger unit of work commits or rolls back on it."""
    async with AsyncSessionLocal() as session:
        yield session
