from enum import Enum


class StudentStatus(str, Enum):
    PENDING = "Pending"
    SCHEDULED = "Scheduled"
    RESULTS_READY = "Results Ready"
    ADMITTED = "Admitted"
    WITHDRAWN = "Withdrawn"


class PaymentStatus(str, Enum):
    FULL = "Full"
    PARTIAL = "Partial"


class ArrearsPolicy(str, Enum):
    SIGNED = "signed"
    FLOOR_AT_ZERO = "floor_at_zero"


class HistoryScope(str, Enum):
    INDIVIDUAL = "individual"
    CLASS = "class"
    SCHOOL = "school"


class InconsistencyKind(str, Enum):
    MISSING_AUDIT = "missing_audit"
    MISSING_LEDGER = "missing_ledger"
    AMOUNT_MISMATCH = "amount_mismatch"
