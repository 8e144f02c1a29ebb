"""Ledger domain types: students, ledger records, audit entries and finance configuration."""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field, field_validator

from feeledger.core.enums import InconsistencyKind, PaymentStatus, StudentStatus

DEFAULT_CATEGORIES = ["School Fees", "Feeding Fees", "Transport Fees", "Books & Stationery"]


class ActorIdentity(BaseModel):
    """Resolved, authorized staff member handed to the ledger."""

    staff_id: str
    staff_name: str

    class Config:
        frozen = True


class ProcessedBy(BaseModel):
    staff_id: str
    staff_name: str
    time: str

    class Config:
        frozen = True


class LedgerRecord(BaseModel):
    """One immutable ledger line. Balances chain from the previous record of the same student."""

    id: UUID = Field(default_factory=uuid4)
    date: date
    transaction_code: str
    balance_bf: Decimal
    new_bill: Decimal
    tax_amount: Decimal
    total_bill: Decimal
    amount_paid: Decimal = Field(..., ge=0)
    current_balance: Decimal
    status: PaymentStatus
    category: str
    processed_by: ProcessedBy

    class Config:
        frozen = True


class AuditTrailEntry(BaseModel):
    """Who did what and when. Paired with a LedgerRecord by transaction_code only."""

    id: UUID = Field(default_factory=uuid4)
    date: date
    time: str
    staff_id: str
    staff_name: str
    learner_id: str
    learner_name: str
    amount: Decimal
    category: str
    transaction_code: str

    class Config:
        frozen = True


class Student(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    serial_id: str
    first_name: str
    surname: str
    current_class: str
    status: StudentStatus = StudentStatus.ADMITTED
    ledger: List[LedgerRecord] = Field(default_factory=list)
    is_fees_cleared: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.surname}"

    @property
    def latest_record(self) -> Optional[LedgerRecord]:
        return self.ledger[-1] if self.ledger else None

    @property
    def outstanding_balance(self) -> Decimal:
        last = self.latest_record
        return last.current_balance if last else Decimal("0.00")


class TaxConfig(BaseModel):
    vat_rate: Decimal = Field(Decimal("0"), ge=0)
    nhil_rate: Decimal = Field(Decimal("0"), ge=0)
    get_levy_rate: Decimal = Field(Decimal("0"), ge=0)
    covid_levy_rate: Decimal = Field(Decimal("0"), ge=0)
    is_tax_enabled: bool = False

    @property
    def total_rate(self) -> Decimal:
        return self.vat_rate + self.nhil_rate + self.get_levy_rate + self.covid_levy_rate


class FinanceConfig(BaseModel):
    categories: List[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    class_bills: Dict[str, Dict[str, Decimal]] = Field(default_factory=dict)
    tax_config: TaxConfig = Field(default_factory=TaxConfig)
    receipt_message: str = "Thank you for your payment."

    @field_validator("categories")
    @classmethod
    def dedupe_categories(cls, value: List[str]) -> List[str]:
        seen: List[str] = []
        for name in value:
            name = name.strip()
            if name and name not in seen:
                seen.append(name)
        return seen

    @field_validator("class_bills")
    @classmethod
    def non_negative_bills(cls, value: Dict[str, Dict[str, Decimal]]) -> Dict[str, Dict[str, Decimal]]:
        for class_name, bills in value.items():
            for category, amount in bills.items():
                if amount < 0:
                    raise ValueError(f"Bill for {class_name}/{category} cannot be negative")
        return value

    def schedule_for(self, class_name: str) -> Dict[str, Decimal]:
        return self.class_bills.get(class_name, {})


# --- Aggregation views ---
class WindowTotals(BaseModel):
    amount_paid: Decimal = Decimal("0.00")
    new_bill: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    transaction_count: int = 0


class HistoryEntry(BaseModel):
    """A ledger record joined with its learner, as shown in statements."""

    record: LedgerRecord
    student_id: UUID
    student_name: str
    student_class: str
    student_serial: str


class AggregationSummary(BaseModel):
    reference_date: date
    day: WindowTotals
    week: WindowTotals
    month: WindowTotals
    term: WindowTotals
    week_start: date
    week_end: date
    closing_arrears: Decimal
    day_transactions: List[HistoryEntry] = Field(default_factory=list)


class DefaulterItem(BaseModel):
    student_id: UUID
    name: str
    current_class: str
    serial_id: str
    balance: Decimal
    last_category: str


class AggregationInconsistency(BaseModel):
    transaction_code: str
    kind: InconsistencyKind
    detail: str


class ReconciliationReport(BaseModel):
    paired_count: int
    ledger_count: int
    audit_count: int
    inconsistencies: List[AggregationInconsistency] = Field(default_factory=list)

    @computed_field
    @property
    def is_consistent(self) -> bool:
        return not self.inconsistencies


class BillSheetItem(BaseModel):
    student_id: UUID
    name: str
    serial_id: str
    arrears: Decimal
    items: Dict[str, Decimal] = Field(default_factory=dict)
    tax_amount: Decimal
    total: Decimal


class PaymentResult(BaseModel):
    """Outcome of one processed payment: the updated student plus the paired writes."""

    student: Student
    record: LedgerRecord
    audit_entry: AuditTrailEntry
