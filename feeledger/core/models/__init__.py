from feeledger.core.models.student import Student
from feeledger.core.models.ledger_entry import LedgerEntry
from feeledger.core.models.transaction_audit_log import TransactionAuditLog
from feeledger.core.models.finance_setting import FinanceSetting

__all__ = [
    "Student",
    "LedgerEntry",
    "TransactionAuditLog",
    "FinanceSetting",
]
