from typing import List, Optional
from uuid import UUID

from feeledger.core.enums import StudentStatus
from feeledger.ledger.schemas import Student
from feeledger.ledger.service import LedgerService

from .schemas import StudentCreate, StudentResponse


def _student_to_response(student: Student) -> StudentResponse:
    last = student.latest_record
    return StudentResponse(
        id=student.id,
        serial_id=student.serial_id,
        first_name=student.first_name,
        surname=student.surname,
        full_name=student.full_name,
        current_class=student.current_class,
        status=student.status,
        is_fees_cleared=student.is_fees_cleared,
        outstanding_balance=student.outstanding_balance,
        last_category=last.category if last else None,
    )


async def create_student(ledger: LedgerService, payload: StudentCreate) -> StudentResponse:
    student = Student(
        serial_id=payload.serial_id.strip(),
        first_name=payload.first_name.strip(),
        surname=payload.surname.strip(),
        current_class=payload.current_class.strip(),
        status=payload.status,
    )
    return _student_to_response(await ledger.register_student(student))


async def list_students(
    ledger: LedgerService,
    search: Optional[str] = None,
    class_name: Optional[str] = None,
    status: Optional[StudentStatus] = None,
) -> List[StudentResponse]:
    students = await ledger.list_students(search=search, class_name=class_name, status=status)
    return [_student_to_response(s) for s in students]


async def get_student(ledger: LedgerService, student_id: UUID) -> StudentResponse:
    return _student_to_response(await ledger.get_student(student_id))
