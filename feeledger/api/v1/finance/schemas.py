"""Finance schemas."""

from datetime import date
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from feeledger.core.enums import PaymentStatus
from feeledger.ledger.schemas import LedgerRecord, ProcessedBy


# --- Payment ---
class PaymentCreate(BaseModel):
    student_id: UUID
    category: str = Field(..., min_length=1, max_length=100)
    amount_paid: Decimal = Field(..., ge=0)
    is_end_of_cycle_billing: bool = Field(
        True, description="Add the class bill for this category; false for arrears-only payments"
    )


class PaymentReceipt(BaseModel):
    """Everything printed on a receipt: the ledger record plus learner details."""

    id: UUID
    date: date
    transaction_code: str
    balance_bf: Decimal
    new_bill: Decimal
    tax_amount: Decimal
    total_bill: Decimal
    amount_paid: Decimal
    current_balance: Decimal
    status: PaymentStatus
    category: str
    processed_by: ProcessedBy
    student_id: UUID
    learner_name: str
    serial_id: str
    current_class: str
    is_fees_cleared: bool
    receipt_message: Optional[str] = None


# --- Statement ---
class LedgerStatementResponse(BaseModel):
    student_id: UUID
    learner_name: str
    serial_id: str
    current_class: str
    is_fees_cleared: bool
    outstanding_balance: Decimal
    ledger: List[LedgerRecord]
