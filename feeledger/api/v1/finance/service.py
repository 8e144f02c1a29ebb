"""Finance service: payment terminal and statements on top of the LedgerService."""

from uuid import UUID

from feeledger.ledger.schemas import ActorIdentity, PaymentResult, Student
from feeledger.ledger.service import LedgerService

from .schemas import LedgerStatementResponse, PaymentCreate, PaymentReceipt


def _result_to_receipt(result: PaymentResult, receipt_message: str) -> PaymentReceipt:
    record = result.record
    student = result.student
    return PaymentReceipt(
        **record.model_dump(),
        student_id=student.id,
        learner_name=student.full_name,
        serial_id=student.serial_id,
        current_class=student.current_class,
        is_fees_cleared=student.is_fees_cleared,
        receipt_message=receipt_message or None,
    )


def _student_to_statement(student: Student) -> LedgerStatementResponse:
    return LedgerStatementResponse(
        student_id=student.id,
        learner_name=student.full_name,
        serial_id=student.serial_id,
        current_class=student.current_class,
        is_fees_cleared=student.is_fees_cleared,
        outstanding_balance=student.outstanding_balance,
        ledger=student.ledger,
    )


async def record_payment(
    ledger: LedgerService,
    payload: PaymentCreate,
    actor: ActorIdentity,
) -> PaymentReceipt:
    result = await ledger.process_payment(
        payload.student_id,
        payload.category,
        payload.amount_paid,
        payload.is_end_of_cycle_billing,
        actor,
    )
    config = await ledger.get_config()
    return _result_to_receipt(result, config.receipt_message)


async def get_statement(ledger: LedgerService, student_id: UUID) -> LedgerStatementResponse:
    return _student_to_statement(await ledger.get_student(student_id))
