from datetime import date

import pytest

from feeledger.core.exceptions import DuplicateTransactionCode
from feeledger.ledger.audit_trail import AuditTrail
from feeledger.ledger.schemas import ActorIdentity


@pytest.fixture()
async def recorded(ledger_service, make_student, actor, clock):
    """Three payments: two learners, two staff members, two days."""
    kofi = await ledger_service.register_student(make_student())
    esi = await ledger_service.register_student(make_student(serial_id="UBA-002", first_name="Esi"))
    cashier = ActorIdentity(staff_id="STF-002", staff_name="Yaw Boateng")

    first = await ledger_service.process_payment(kofi.id, "School Fees", "100", True, actor)
    clock.now = clock.now.replace(day=20)
    second = await ledger_service.process_payment(esi.id, "School Fees", "200", True, cashier)
    third = await ledger_service.process_payment(kofi.id, "Feeding Fees", "50", True, actor)
    return [first.audit_entry, second.audit_entry, third.audit_entry]


@pytest.fixture()
def trail(memory_store) -> AuditTrail:
    return AuditTrail(memory_store.unit_of_work().audit)


async def test_all_returns_entries_in_recording_order(trail, recorded) -> None:
    assert await trail.all() == recorded


async def test_query_by_date(trail, recorded) -> None:
    assert await trail.query_by_date(date(2026, 10, 19)) == recorded[:1]
    assert await trail.query_by_date(date(2026, 10, 20)) == recorded[1:]
    assert await trail.query_by_date(date(2026, 10, 21)) == []


async def test_query_by_staff(trail, recorded) -> None:
    assert await trail.query_by_staff("STF-001") == [recorded[0], recorded[2]]
    assert await trail.query_by_staff("STF-002") == [recorded[1]]


async def test_query_by_learner(trail, recorded) -> None:
    assert await trail.query_by_learner("UBA-001") == [recorded[0], recorded[2]]
    assert await trail.query_by_learner("UBA-002") == [recorded[1]]


async def test_filters_combine(ledger_service, recorded) -> None:
    entries = await ledger_service.audit_entries(on=date(2026, 10, 20), learner_id="UBA-001")
    assert entries == [recorded[2]]


async def test_append_rejects_recorded_code(trail, recorded) -> None:
    with pytest.raises(DuplicateTransactionCode):
        await trail.append(recorded[0])
