"""Ledger engine: the single authority for appending to a student's ledger."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Tuple

from feeledger.core.enums import PaymentStatus
from feeledger.core.exceptions import ValidationError

from .billing import compute_charge
from .money import ZERO, parse_amount, to_money
from .schemas import (
    ActorIdentity,
    AuditTrailEntry,
    FinanceConfig,
    LedgerRecord,
    ProcessedBy,
    Student,
)
from .transaction_code import TransactionCodeGenerator

logger = logging.getLogger(__name__)


def derive_status(current_balance: Decimal) -> PaymentStatus:
    return PaymentStatus.FULL if current_balance <= 0 else PaymentStatus.PARTIAL


def _validate_actor(actor: Optional[ActorIdentity]) -> ActorIdentity:
    if actor is None:
        raise ValidationError("An authorized staff member is required")
    if not (actor.staff_id or "").strip() or not (actor.staff_name or "").strip():
        raise ValidationError("An authorized staff member is required")
    return actor


class LedgerEngine:
    """Turns one payment into a new ledger record and its paired audit entry.

    The engine is pure with respect to storage: it returns a new Student with the
    record appended and leaves persisting both results to the caller.
    """

    def __init__(
        self,
        code_generator: Optional[TransactionCodeGenerator] = None,
        clock: Callable[[], datetime] = datetime.now,
        strict_categories: bool = False,
    ) -> None:
        self.code_generator = code_generator or TransactionCodeGenerator()
        self.clock = clock
        self.strict_categories = strict_categories

    def _validate_category(
        self, student: Student, category: str, is_end_of_cycle_billing: bool, config: FinanceConfig
    ) -> str:
        category = (category or "").strip()
        if not category:
            raise ValidationError("A billing category is required")
        if self.strict_categories:
            if category not in config.categories:
                raise ValidationError(f"Unknown billing category: {category}")
            if is_end_of_cycle_billing and category not in config.schedule_for(student.current_class):
                raise ValidationError(
                    f"No {category} bill is configured for {student.current_class}"
                )
        return category

    def process_payment(
        self,
        student: Optional[Student],
        category: str,
        amount_paid: Any,
        is_end_of_cycle_billing: bool,
        actor: Optional[ActorIdentity],
        config: FinanceConfig,
    ) -> Tuple[Student, AuditTrailEntry]:
        if student is None:
            raise ValidationError("Please select a valid learner")
        paid = parse_amount(amount_paid, "amount_paid")
        actor = _validate_actor(actor)
        category = self._validate_category(student, category, is_end_of_cycle_billing, config)

        balance_bf = student.latest_record.current_balance if student.ledger else ZERO
        new_bill, tax_amount = compute_charge(
            config.schedule_for(student.current_class),
            category,
            is_end_of_cycle_billing,
            config.tax_config,
        )
        total_bill = to_money(balance_bf + new_bill + tax_amount)
        current_balance = to_money(total_bill - paid)

        now = self.clock()
        on = now.date()
        time_str = now.strftime("%H:%M:%S")
        code = self.code_generator.next_code(on)

        record = LedgerRecord(
            date=on,
            transaction_code=code,
            balance_bf=balance_bf,
            new_bill=new_bill,
            tax_amount=tax_amount,
            total_bill=total_bill,
            amount_paid=paid,
            current_balance=current_balance,
            status=derive_status(current_balance),
            category=category,
            processed_by=ProcessedBy(staff_id=actor.staff_id, staff_name=actor.staff_name, time=time_str),
        )
        updated = student.model_copy(
            update={
                "ledger": [*student.ledger, record],
                "is_fees_cleared": current_balance <= 0,
            }
        )
        entry = AuditTrailEntry(
            date=on,
            time=time_str,
            staff_id=actor.staff_id,
            staff_name=actor.staff_name,
            learner_id=student.serial_id,
            learner_name=student.full_name,
            amount=paid,
            category=category,
            transaction_code=code,
        )
        logger.debug(
            "Prepared %s for %s: bf=%s bill=%s tax=%s paid=%s balance=%s",
            code, student.serial_id, balance_bf, new_bill, tax_amount, paid, current_balance,
        )
        return updated, entry
