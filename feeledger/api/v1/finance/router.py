"""Finance router: configuration, payment terminal, statements, audit trail, reports."""

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from feeledger.api.v1.dependencies import get_ledger_service
from feeledger.auth.dependencies import get_finance_actor
from feeledger.auth.rbac import check_permission
from feeledger.core.enums import ArrearsPolicy, HistoryScope
from feeledger.core.exceptions import ServiceError
from feeledger.ledger.schemas import (
    ActorIdentity,
    AggregationSummary,
    AuditTrailEntry,
    BillSheetItem,
    DefaulterItem,
    FinanceConfig,
    HistoryEntry,
    ReconciliationReport,
)
from feeledger.ledger.service import LedgerService

from .schemas import LedgerStatementResponse, PaymentCreate, PaymentReceipt
from . import service

router = APIRouter(prefix="/api/v1/finance", tags=["finance"])


# --- Finance Config ---
@router.get(
    "/config",
    response_model=FinanceConfig,
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def read_finance_config(
    ledger: LedgerService = Depends(get_ledger_service),
) -> FinanceConfig:
    return await ledger.get_config()


@router.put(
    "/config",
    response_model=FinanceConfig,
    dependencies=[Depends(check_permission("finance", "update"))],
)
async def update_finance_config(
    payload: FinanceConfig,
    ledger: LedgerService = Depends(get_ledger_service),
) -> FinanceConfig:
    """Replace the bill schedule and tax rates. Only future transactions are affected."""
    try:
        return await ledger.update_config(payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


# --- Payment ---
@router.post(
    "/payments",
    response_model=PaymentReceipt,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("finance", "create"))],
)
async def process_payment(
    payload: PaymentCreate,
    ledger: LedgerService = Depends(get_ledger_service),
    actor: ActorIdentity = Depends(get_finance_actor),
) -> PaymentReceipt:
    try:
        return await service.record_payment(ledger, payload, actor)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/students/{student_id}/ledger",
    response_model=LedgerStatementResponse,
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_student_ledger(
    student_id: UUID,
    ledger: LedgerService = Depends(get_ledger_service),
) -> LedgerStatementResponse:
    try:
        return await service.get_statement(ledger, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/history",
    response_model=List[HistoryEntry],
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_history(
    scope: HistoryScope = Query(HistoryScope.SCHOOL),
    student_id: Optional[UUID] = Query(None),
    class_name: Optional[str] = Query(None),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[HistoryEntry]:
    if scope == HistoryScope.INDIVIDUAL and student_id is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="student_id is required for individual history")
    if scope == HistoryScope.CLASS and not class_name:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="class_name is required for class history")
    return await ledger.history(scope, student_id=student_id, class_name=class_name)


@router.get(
    "/bill-sheet",
    response_model=List[BillSheetItem],
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_bill_sheet(
    class_name: str,
    new_term: bool = Query(False, description="End of term: add every category's bill"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[BillSheetItem]:
    return await ledger.bill_sheet(class_name, is_new_term=new_term)


# --- Audit Trail ---
@router.get(
    "/audit",
    response_model=List[AuditTrailEntry],
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_audit_trail(
    on: Optional[date] = Query(None, description="Only entries recorded on this date"),
    staff_id: Optional[str] = Query(None),
    learner_id: Optional[str] = Query(None, description="Learner serial id"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[AuditTrailEntry]:
    return await ledger.audit_entries(on=on, staff_id=staff_id, learner_id=learner_id)


# --- Reports ---
@router.get(
    "/reports/summary",
    response_model=AggregationSummary,
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_summary(
    reference_date: Optional[date] = Query(None, description="Defaults to today"),
    arrears_policy: Optional[ArrearsPolicy] = Query(None),
    ledger: LedgerService = Depends(get_ledger_service),
) -> AggregationSummary:
    return await ledger.summary(reference_date or date.today(), arrears_policy)


@router.get(
    "/reports/defaulters",
    response_model=List[DefaulterItem],
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_defaulters(
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[DefaulterItem]:
    return await ledger.defaulters()


@router.get(
    "/reports/reconciliation",
    response_model=ReconciliationReport,
    dependencies=[Depends(check_permission("finance", "read"))],
)
async def get_reconciliation(
    ledger: LedgerService = Depends(get_ledger_service),
) -> ReconciliationReport:
    return await ledger.reconciliation()
