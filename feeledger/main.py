import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feeledger.api.v1.finance.router import router as finance_router
from feeledger.api.v1.students.router import router as students_router
from feeledger.core import models  # noqa: F401  registers tables on Base.metadata
from feeledger.core.config import settings
from feeledger.db.session import Base, engine
from feeledger.ledger.locks import StudentLocks

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Ledger tables ready")
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Fee Ledger Service", lifespan=lifespan)

    # CORS: allow the dashboard frontend to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Shared per-student write locks for every request served by this process
    app.state.student_locks = StudentLocks()

    # Routers
    app.include_router(students_router)
    app.include_router(finance_router)

    return app


app = create_app()
