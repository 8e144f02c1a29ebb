"""Student directory schemas. The registry owns these records; finance only reads them."""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from feeledger.core.enums import StudentStatus


class StudentCreate(BaseModel):
    serial_id: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    surname: str = Field(..., min_length=1, max_length=100)
    current_class: str = Field(..., min_length=1, max_length=50)
    status: StudentStatus = StudentStatus.ADMITTED


class StudentResponse(BaseModel):
    id: UUID
    serial_id: str
    first_name: str
    surname: str
    full_name: str
    current_class: str
    status: StudentStatus
    is_fees_cleared: bool
    outstanding_balance: Decimal
    last_category: Optional[str] = None
