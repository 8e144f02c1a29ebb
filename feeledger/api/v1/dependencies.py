from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from feeledger.core.config import settings
from feeledger.core.enums import ArrearsPolicy
from feeledger.db.repositories import SqlAlchemyUnitOfWork
from feeledger.db.session import get_db
from feeledger.ledger.aggregation import AggregationService
from feeledger.ledger.engine import LedgerEngine
from feeledger.ledger.locks import StudentLocks
from feeledger.ledger.service import LedgerService
from feeledger.ledger.transaction_code import TransactionCodeGenerator


def get_ledger_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> LedgerService:
    """LedgerService bound to this request's session. Per-student locks are shared app-wide."""
    locks = getattr(request.app.state, "student_locks", None)
    if locks is None:
        locks = request.app.state.student_locks = StudentLocks()
    return LedgerService(
        lambda: SqlAlchemyUnitOfWork(db),
        engine=LedgerEngine(
            code_generator=TransactionCodeGenerator(settings.transaction_code_prefix),
            strict_categories=settings.strict_category_billing,
        ),
        aggregation=AggregationService(ArrearsPolicy(settings.arrears_policy)),
        locks=locks,
        max_retries=settings.ledger_max_retries,
    )
