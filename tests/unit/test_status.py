from datetime import date, datetime, time

import pytest

from workorders.errors import AccessDenied, ValidationError
from workorders.services import signatures, status
from workorders.services.access import Caller
from workorders.services.status import check_transition

DONE = datetime(2024, 6, 1, 18, 0, 42)
STAFF = Caller(id="staff-1", role="staff")


async def test_forward_path_stamps_completion(db, people, make_work_order):
    wo = await make_work_order()
    assert wo.work_completed == "pending"

    wo = await status.set_status(db, people.staff, wo.id, "in_progress")
    assert wo.work_completed == "in_progress"
    assert wo.completed_date is None

    wo = await status.set_status(db, people.staff, wo.id, "completed", now=DONE)
    assert wo.work_completed == "completed"
    assert wo.completed_date == date(2024, 6, 1)
    assert wo.completed_time == time(18, 0)
    assert wo.updated_at == DONE


async def test_repeated_completion_keeps_original_stamp(db, people, make_work_order):
    wo = await make_work_order()
    await status.set_status(db, people.admin, wo.id, "completed", now=DONE)
    wo = await status.set_status(db, people.admin, wo.id, "completed", now=datetime(2024, 6, 3, 7, 15))
    assert wo.completed_date == date(2024, 6, 1)
    assert wo.completed_time == time(18, 0)


async def test_admin_reopen_clears_completion(db, people, make_work_order):
    wo = await make_work_order()
    await status.set_status(db, people.admin, wo.id, "completed", now=DONE)
    wo = await status.set_status(db, people.admin, wo.id, "in_progress")
    assert wo.work_completed == "in_progress"
    assert wo.completed_date is None
    assert wo.completed_time is None


async def test_staff_cannot_reopen_or_move_backwards(db, people, make_work_order):
    wo = await make_work_order()
    await status.set_status(db, people.staff, wo.id, "in_progress")
    with pytest.raises(AccessDenied):
        await status.set_status(db, people.staff, wo.id, "pending")

    await status.set_status(db, people.staff, wo.id, "completed", now=DONE)
    with pytest.raises(AccessDenied):
        await status.set_status(db, people.staff, wo.id, "in_progress")


async def test_staff_can_cancel_open_work_order(db, people, make_work_order):
    wo = await make_work_order()
    wo = await status.set_status(db, people.staff, wo.id, "cancelled")
    assert wo.work_completed == "cancelled"
    assert wo.completed_date is None


async def test_unassigned_staff_and_clients_cannot_change_status(db, people, make_work_order):
    wo = await make_work_order()
    with pytest.raises(AccessDenied):
        await status.set_status(db, people.other_staff, wo.id, "in_progress")
    with pytest.raises(AccessDenied):
        await status.set_status(db, people.client, wo.id, "in_progress")
    await db.refresh(wo)
    assert wo.work_completed == "pending"


async def test_unknown_status_is_rejected(db, people, make_work_order):
    wo = await make_work_order()
    with pytest.raises(ValidationError):
        await status.set_status(db, people.admin, wo.id, "on_hold")


async def test_signatures_required_for_completion_when_configured(db, people, make_work_order, monkeypatch):
    monkeypatch.setattr(status._settings.status_policy, "require_signatures_for_completion", True)
    wo = await make_work_order()

    with pytest.raises(ValidationError):
        await status.set_status(db, people.staff, wo.id, "completed", now=DONE)

    await signatures.record_signature(db, people.staff, wo.id, "tl_corp_rep", "Dana Lee", "sig")
    await signatures.record_signature(db, people.staff, wo.id, "building_rep", "Sam Ortiz", "sig")
    wo = await status.set_status(db, people.staff, wo.id, "completed", now=DONE)
    assert wo.work_completed == "completed"


def test_staff_moves_are_free_when_policy_is_off(monkeypatch):
    monkeypatch.setattr(status._settings.status_policy, "staff_forward_only", False)
    check_transition(STAFF, "completed", "pending")


@pytest.mark.parametrize("current,new", [
    ("pending", "in_progress"),
    ("pending", "completed"),
    ("in_progress", "completed"),
    ("in_progress", "cancelled"),
    ("pending", "pending"),
])
def test_staff_allowed_transitions(current, new):
    check_transition(STAFF, current, new)


@pytest.mark.parametrize("current,new", [
    ("in_progress", "pending"),
    ("completed", "in_progress"),
    ("cancelled", "pending"),
    ("completed", "cancelled"),
])
def test_staff_denied_transitions(current, new):
    with pytest.raises(AccessDenied):
        check_transition(STAFF, current, new)


def _snapshot(wo):
    return {c.key: getattr(wo, c.key) for c in wo.__table__.columns}


@pytest.mark.parametrize("current", ["pending", "in_progress", "completed", "cancelled"])
async def test_setting_current_status_only_touches_updated_at(db, people, make_work_order, current):
    wo = await make_work_order(time_received=time(7, 45), location="Bldg 4")
    wo = await status.set_status(db, people.admin, wo.id, current, now=DONE)
    before = _snapshot(wo)

    wo = await status.set_status(db, people.admin, wo.id, current, now=datetime(2024, 6, 2, 11, 5))
    after = _snapshot(wo)

    assert {k for k in before if before[k] != after[k]} == {"updated_at"}
