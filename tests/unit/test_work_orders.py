from datetime import date, datetime, time

import pytest

from workorders.errors import AccessDenied, NotFound, ValidationError
from workorders.models import WorkOrder
from workorders.services import materials, signatures, status, work_orders

NOW = datetime(2024, 6, 1, 9, 0)


async def test_create_defaults(db, people, make_work_order):
    wo = await make_work_order(priority="high", location="Bldg 4", unit="210")
    assert wo.work_order_number == "WO-20240601-001"
    assert wo.work_completed == "pending"
    assert wo.priority == "high"
    assert wo.service_type == "maintenance"
    assert wo.date == date(2024, 6, 1)
    assert wo.created_by == people.admin.id
    assert wo.assigned_to == people.staff.id
    assert wo.total_labor_hours is None
    assert wo.created_at == NOW


async def test_staff_can_create(db, people):
    wo = await work_orders.create_work_order(db, people.staff, "Replace light fixture", now=NOW)
    assert wo.created_by == people.staff.id
    assert wo.assigned_to is None


async def test_client_cannot_create(db, people):
    with pytest.raises(AccessDenied):
        await work_orders.create_work_order(db, people.client, "Replace light fixture", now=NOW)


async def test_create_validation(db, people):
    with pytest.raises(ValidationError):
        await work_orders.create_work_order(db, people.admin, "   ", now=NOW)
    with pytest.raises(ValidationError):
        await work_orders.create_work_order(db, people.admin, "Fix door", priority="whenever", now=NOW)
    with pytest.raises(ValidationError):
        await work_orders.create_work_order(db, people.admin, "Fix door", work_completed="completed", now=NOW)
    with pytest.raises(ValidationError):
        await work_orders.create_work_order(db, people.admin, "Fix door", assigned_to=people.client.id, now=NOW)
    with pytest.raises(ValidationError):
        await work_orders.create_work_order(db, people.admin, "Fix door", assigned_to="nobody", now=NOW)


async def test_labor_recomputed_on_update(db, people, make_work_order):
    wo = await make_work_order()
    wo = await work_orders.update_work_order(db, people.staff, wo.id, {"time_in": time(8, 0)})
    assert wo.total_labor_hours is None

    wo = await work_orders.update_work_order(db, people.staff, wo.id, {"time_out": time(17, 30)})
    assert wo.total_labor_hours == 9.5

    wo = await work_orders.update_work_order(db, people.staff, wo.id, {"time_out": None})
    assert wo.total_labor_hours is None


async def test_overnight_shift(db, people, make_work_order):
    wo = await make_work_order()
    wo = await work_orders.update_work_order(
        db, people.staff, wo.id, {"time_in": time(22, 0), "time_out": time(2, 0)},
    )
    assert wo.total_labor_hours == 4.0


async def test_labor_total_cannot_be_written(db, people, make_work_order):
    wo = await make_work_order()
    with pytest.raises(ValidationError):
        await work_orders.update_work_order(db, people.admin, wo.id, {"total_labor_hours": 99})
    with pytest.raises(ValidationError):
        await work_orders.update_work_order(db, people.admin, wo.id, {"work_completed": "completed"})


async def test_required_fields_cannot_be_cleared(db, people, make_work_order):
    wo = await make_work_order()
    with pytest.raises(ValidationError):
        await work_orders.update_work_order(db, people.admin, wo.id, {"description": None})
    with pytest.raises(ValidationError):
        await work_orders.update_work_order(db, people.admin, wo.id, {"priority": None})


async def test_update_access(db, people, make_work_order):
    wo = await make_work_order()
    with pytest.raises(AccessDenied):
        await work_orders.update_work_order(db, people.other_staff, wo.id, {"work_summary": "done"})
    with pytest.raises(AccessDenied):
        await work_orders.update_work_order(db, people.client, wo.id, {"work_summary": "done"})
    wo = await work_orders.update_work_order(db, people.admin, wo.id, {"assigned_to": people.other_staff.id})
    wo = await work_orders.update_work_order(db, people.other_staff, wo.id, {"work_summary": "done"})
    assert wo.work_summary == "done"


async def test_read_access(db, people, make_work_order):
    wo = await make_work_order()
    assert (await work_orders.get_work_order(db, people.other_staff, wo.id)).id == wo.id
    with pytest.raises(AccessDenied):
        await work_orders.get_work_order(db, people.client, wo.id)
    with pytest.raises(NotFound):
        await work_orders.get_work_order(db, people.admin, "missing")


async def test_delete_is_admin_only_and_cascades(db, people, make_work_order):
    wo = await make_work_order()
    wo_id = wo.id
    await materials.add_material(db, people.admin, wo_id, "Pipe", quantity=1, unit_cost=5)
    await signatures.record_signature(db, people.admin, wo_id, "tl_corp_rep", "Dana Lee", "sig")

    with pytest.raises(AccessDenied):
        await work_orders.delete_work_order(db, people.staff, wo_id)

    await work_orders.delete_work_order(db, people.admin, wo_id)
    with pytest.raises(NotFound):
        await work_orders.get_work_order(db, people.admin, wo_id)
    with pytest.raises(NotFound):
        await materials.list_materials(db, people.admin, wo_id)


async def test_stats_are_admin_only(db, people, make_work_order):
    await make_work_order(priority="emergency")
    done = await make_work_order(priority="emergency")
    await status.set_status(db, people.admin, done.id, "completed", now=NOW)
    await make_work_order()

    stats = await work_orders.work_order_stats(db, people.admin)
    assert stats == {
        "total": 3, "pending": 2, "in_progress": 0,
        "completed": 1, "cancelled": 0, "emergency": 1,
    }
    with pytest.raises(AccessDenied):
        await work_orders.work_order_stats(db, people.staff)


async def test_full_lifecycle(db, people):
    wo = await work_orders.create_work_order(
        db, people.admin, "Leaking pipe under sink",
        priority="high", service_type="repair", company="Acme",
        assigned_to=people.staff.id, now=NOW,
    )
    assert wo.work_order_number == "WO-20240601-001"

    pipe = await materials.add_material(db, people.staff, wo.id, "Pipe", quantity=2, unit="ft", unit_cost=15)
    assert pipe.total_cost == 30

    await status.set_status(db, people.staff, wo.id, "in_progress")
    wo = await work_orders.update_work_order(
        db, people.staff, wo.id,
        {"time_in": time(8, 0), "time_out": time(17, 30), "work_summary": "Replaced trap"},
    )
    assert wo.total_labor_hours == 9.5

    await signatures.record_signature(db, people.staff, wo.id, "tl_corp_rep", "Dana Lee", "sig-a")
    await signatures.record_signature(db, people.staff, wo.id, "building_rep", "Sam Ortiz", "sig-b")
    assert await signatures.is_fully_signed(db, wo.id)

    wo = await status.set_status(db, people.staff, wo.id, "completed", now=datetime(2024, 6, 1, 18, 0))
    assert wo.completed_date == date(2024, 6, 1)
    assert wo.completed_time == time(18, 0)
    assert await materials.total_materials_cost(db, people.admin, wo.id) == 30


async def test_date_comes_from_the_injected_clock(db, people):
    assert WorkOrder.__table__.c.date.default is None
    wo = await work_orders.create_work_order(db, people.admin, "Night call", now=datetime(2031, 1, 2, 23, 59))
    assert wo.date == date(2031, 1, 2)
    assert wo.work_order_number == "WO-20310102-001"
