from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from feeledger.api.v1.dependencies import get_ledger_service
from feeledger.auth.rbac import check_permission
from feeledger.core.enums import StudentStatus
from feeledger.core.exceptions import ServiceError
from feeledger.ledger.service import LedgerService

from .schemas import StudentCreate, StudentResponse
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(check_permission("students", "create"))],
)
async def create_student(
    payload: StudentCreate,
    ledger: LedgerService = Depends(get_ledger_service),
) -> StudentResponse:
    try:
        return await service.create_student(ledger, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[StudentResponse],
    dependencies=[Depends(check_permission("students", "read"))],
)
async def list_students(
    search: Optional[str] = Query(None, description="Matches name or serial id"),
    class_name: Optional[str] = Query(None),
    student_status: Optional[StudentStatus] = Query(None, alias="status"),
    ledger: LedgerService = Depends(get_ledger_service),
) -> List[StudentResponse]:
    return await service.list_students(ledger, search=search, class_name=class_name, status=student_status)


@router.get(
    "/{student_id}",
    response_model=StudentResponse,
    dependencies=[Depends(check_permission("students", "read"))],
)
async def get_student(
    student_id: UUID,
    ledger: LedgerService = Depends(get_ledger_service),
) -> StudentResponse:
    try:
        return await service.get_student(ledger, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
