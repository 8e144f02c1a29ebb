from datetime import date, datetime
from decimal import Decimal

import pytest

from feeledger.core.enums import ArrearsPolicy, HistoryScope, InconsistencyKind, StudentStatus
from feeledger.ledger.aggregation import AggregationService, week_bounds
from feeledger.ledger.engine import LedgerEngine
from feeledger.ledger.schemas import AuditTrailEntry


@pytest.fixture()
def engine(clock) -> LedgerEngine:
    return LedgerEngine(clock=clock)


@pytest.fixture()
def pay(engine, clock, actor, finance_config):
    """Apply a payment on a given day, returning the updated student and its audit entry."""

    def _pay(student, amount, on: date, category="School Fees", billing=True):
        clock.now = datetime(on.year, on.month, on.day, 10, 0, 0)
        return engine.process_payment(student, category, amount, billing, actor, finance_config)

    return _pay


@pytest.fixture()
def service() -> AggregationService:
    return AggregationService()


def test_week_bounds_sunday_to_saturday() -> None:
    assert week_bounds(date(2026, 10, 19)) == (date(2026, 10, 18), date(2026, 10, 24))
    assert week_bounds(date(2026, 10, 18)) == (date(2026, 10, 18), date(2026, 10, 24))
    assert week_bounds(date(2026, 10, 24)) == (date(2026, 10, 18), date(2026, 10, 24))


def test_week_window_spans_month_boundary(service, pay, make_student) -> None:
    reference = date(2026, 10, 1)
    a, _ = pay(make_student(), 100, date(2026, 9, 28))
    a, _ = pay(a, 50, reference, billing=False)
    b, _ = pay(make_student(serial_id="UBA-002"), 25, date(2026, 9, 20))
    students = [a, b]

    assert week_bounds(reference) == (date(2026, 9, 27), date(2026, 10, 3))
    assert service.day_totals(students, reference).amount_paid == Decimal("50.00")
    assert service.week_totals(students, reference).amount_paid == Decimal("150.00")
    assert service.week_totals(students, reference).transaction_count == 2
    assert service.month_totals(students, reference).amount_paid == Decimal("50.00")
    assert service.term_totals(students).amount_paid == Decimal("175.00")
    assert service.term_totals(students).new_bill == Decimal("1000.00")


def test_window_totals_are_monotonic(service, pay, make_student) -> None:
    days = [date(2026, 10, 1), date(2026, 10, 17), date(2026, 10, 18), date(2026, 10, 19), date(2026, 9, 30)]
    students = []
    for i, on in enumerate(days):
        s, _ = pay(make_student(serial_id=f"UBA-{i:03d}"), 10 * (i + 1), on)
        students.append(s)

    for reference in days + [date(2026, 11, 2)]:
        summary = service.summary(students, reference)
        assert summary.day.amount_paid <= summary.week.amount_paid
        assert summary.week.amount_paid <= summary.month.amount_paid
        assert summary.month.amount_paid <= summary.term.amount_paid
        assert summary.day.transaction_count == len(summary.day_transactions)


def test_master_ledger_newest_first(service, pay, make_student) -> None:
    s, _ = pay(make_student(), 10, date(2026, 10, 1))
    s, _ = pay(s, 20, date(2026, 10, 19), billing=False)
    s, _ = pay(s, 30, date(2026, 10, 19), billing=False)

    entries = service.master_ledger([s])
    assert [e.record.amount_paid for e in entries] == [Decimal("20.00"), Decimal("30.00"), Decimal("10.00")]
    assert entries[0].student_name == "Kofi Owusu"


def test_history_scopes(service, pay, make_student) -> None:
    a, _ = pay(make_student(), 10, date(2026, 10, 19))
    b, _ = pay(make_student(serial_id="UBA-002", current_class="Basic 2"), 20, date(2026, 10, 19))

    assert len(service.history([a, b], HistoryScope.SCHOOL)) == 2
    individual = service.history([a, b], HistoryScope.INDIVIDUAL, student_id=b.id)
    assert [e.student_serial for e in individual] == ["UBA-002"]
    by_class = service.history([a, b], HistoryScope.CLASS, class_name="Basic 1")
    assert [e.student_serial for e in by_class] == ["UBA-001"]


def test_defaulters(service, pay, make_student) -> None:
    today = date(2026, 10, 19)
    owing_small, _ = pay(make_student(serial_id="UBA-001"), 400, today)  # owes 100
    owing_big, _ = pay(make_student(serial_id="UBA-002"), 100, today)  # owes 400
    overpaid, _ = pay(make_student(serial_id="UBA-003"), 550, today)  # credit 50
    never_billed = make_student(serial_id="UBA-004")
    withdrawn, _ = pay(make_student(serial_id="UBA-005", status=StudentStatus.WITHDRAWN), 0, today)
    applicant = make_student(serial_id="UBA-006", status=StudentStatus.PENDING)

    rows = service.defaulters([owing_small, owing_big, overpaid, never_billed, withdrawn, applicant])

    assert [r.serial_id for r in rows] == ["UBA-002", "UBA-001", "UBA-004"]
    assert rows[0].balance == Decimal("400.00")
    assert rows[0].last_category == "School Fees"
    assert rows[2].balance == Decimal("0.00")
    assert rows[2].last_category == "N/A"


def test_defaulters_ties_keep_input_order(service, pay, make_student) -> None:
    today = date(2026, 10, 19)
    students = [pay(make_student(serial_id=f"UBA-{i}"), 300, today)[0] for i in range(4)]
    assert [r.serial_id for r in service.defaulters(students)] == [s.serial_id for s in students]


def test_closing_arrears_policies(pay, make_student) -> None:
    today = date(2026, 10, 19)
    owing, _ = pay(make_student(serial_id="UBA-001"), 300, today)  # 200
    overpaid, _ = pay(make_student(serial_id="UBA-002"), 550, today)  # -50
    withdrawn, _ = pay(make_student(serial_id="UBA-003", status=StudentStatus.WITHDRAWN), 0, today)
    students = [owing, overpaid, withdrawn, make_student(serial_id="UBA-004")]

    assert AggregationService().closing_arrears(students) == Decimal("150.00")
    assert AggregationService(ArrearsPolicy.FLOOR_AT_ZERO).closing_arrears(students) == Decimal("200.00")
    assert AggregationService().closing_arrears(students, ArrearsPolicy.FLOOR_AT_ZERO) == Decimal("200.00")
    assert AggregationService().summary(students, today).closing_arrears == Decimal("150.00")


def test_reconcile_consistent(service, pay, make_student) -> None:
    s, e1 = pay(make_student(), 100, date(2026, 10, 19))
    s, e2 = pay(s, 50, date(2026, 10, 19), billing=False)

    report = service.reconcile([s], [e1, e2])
    assert report.is_consistent
    assert report.paired_count == 2
    assert report.ledger_count == report.audit_count == 2


def test_reconcile_reports_each_inconsistency(service, pay, make_student) -> None:
    s, e1 = pay(make_student(), 100, date(2026, 10, 19))
    s, e2 = pay(s, 50, date(2026, 10, 19), billing=False)
    s, _ = pay(s, 25, date(2026, 10, 19), billing=False)
    tampered = e2.model_copy(update={"amount": Decimal("55.00")})
    orphan = AuditTrailEntry(
        date=date(2026, 10, 19),
        time="10:00:00",
        staff_id="STF-001",
        staff_name="Ama Mensah",
        learner_id="UBA-001",
        learner_name="Kofi Owusu",
        amount=Decimal("10.00"),
        category="School Fees",
        transaction_code="UBA-PY-261019-99999ZZ",
    )

    report = service.reconcile([s], [e1, tampered, orphan])

    kinds = {i.kind for i in report.inconsistencies}
    assert kinds == {
        InconsistencyKind.MISSING_AUDIT,
        InconsistencyKind.AMOUNT_MISMATCH,
        InconsistencyKind.MISSING_LEDGER,
    }
    assert not report.is_consistent
    assert report.paired_count == 2
    assert report.ledger_count == 3
    assert report.audit_count == 3
