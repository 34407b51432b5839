"""Work order record operations: create, read, update, delete, search, stats."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db import crud
from workorders.errors import NotFound, ValidationError
from workorders.models import WorkOrder
from workorders.models.work_order import PRIORITIES, SERVICE_TYPES
from workorders.services import clock
from workorders.services.access import Action, Caller, authorize
from workorders.services.labor import compute_labor_hours
from workorders.services.numbering import insert_numbered

logger = logging.getLogger(__name__)

INTAKE_FIELDS = {
    "date", "time_received", "phone", "email", "company", "department",
    "location", "unit", "area", "access_needed", "preferred_entry_time",
    "priority", "service_type", "description", "assigned_to",
    "scheduled_date", "scheduled_time", "project_id",
}
EXECUTION_FIELDS = {"time_in", "time_out", "work_summary"}
UPDATABLE_FIELDS = INTAKE_FIELDS | EXECUTION_FIELDS

# Columns that may not be cleared once set
_REQUIRED = {"description", "priority", "service_type", "date"}


async def load_work_order(db: AsyncSession, work_order_id: str) -> WorkOrder:
    wo = await crud.get_work_order(db, work_order_id)
    if wo is None:
        raise NotFound("Work order not found")
    return wo


async def _validate_fields(db: AsyncSession, fields: dict) -> None:
    for name in _REQUIRED & fields.keys():
        if fields[name] is None:
            raise ValidationError(f"{name} is required")
    if "description" in fields and not fields["description"].strip():
        raise ValidationError("Description is required")
    if "priority" in fields and fields["priority"] not in PRIORITIES:
        raise ValidationError(f"Invalid priority: {fields['priority']}")
    if "service_type" in fields and fields["service_type"] not in SERVICE_TYPES:
        raise ValidationError(f"Invalid service type: {fields['service_type']}")
    assignee_id = fields.get("assigned_to")
    if assignee_id is not None:
        assignee = await crud.get_user(db, assignee_id)
        if assignee is None or not assignee.is_active or assignee.role not in ("admin", "staff"):
            raise ValidationError("Work orders can only be assigned to active staff")


async def create_work_order(
    db: AsyncSession,
    caller: Caller,
    description: str,
    now: datetime | None = None,
    **fields,
) -> WorkOrder:
    """Create a pending work order numbered for the current day."""
    authorize(caller, Action.CREATE)
    unknown = set(fields) - INTAKE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown fields: {', '.join(sorted(unknown))}")
    fields = {k: v for k, v in fields.items() if v is not None}
    fields["description"] = description
    await _validate_fields(db, fields)

    now = clock.resolve(now)
    fields["description"] = description.strip()
    fields.setdefault("date", now.date())
    wo = await insert_numbered(
        db, now.date(),
        work_completed="pending",
        created_by=caller.id,
        created_at=now,
        updated_at=now,
        **fields,
    )
    logger.info("Work order %s created by %s", wo.work_order_number, caller.id)
    return wo


async def get_work_order(db: AsyncSession, caller: Caller, work_order_id: str) -> WorkOrder:
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.READ, wo)
    return wo


async def list_work_orders(db: AsyncSession, caller: Caller, **filters) -> list[WorkOrder]:
    authorize(caller, Action.READ)
    return await crud.search_work_orders(db, **filters)


async def update_work_order(
    db: AsyncSession,
    caller: Caller,
    work_order_id: str,
    changes: dict,
    now: datetime | None = None,
) -> WorkOrder:
    """Apply intake/execution field changes.

    total_labor_hours is recomputed in the same write whenever time_in or
    time_out is part of the change.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.UPDATE, wo)
    await _validate_fields(db, changes)

    changes = dict(changes)
    if "description" in changes:
        changes["description"] = changes["description"].strip()
    if "time_in" in changes or "time_out" in changes:
        changes["total_labor_hours"] = compute_labor_hours(
            changes.get("time_in", wo.time_in),
            changes.get("time_out", wo.time_out),
        )
    changes["updated_at"] = clock.resolve(now)
    return await crud.update_work_order(db, wo, **changes)


async def delete_work_order(db: AsyncSession, caller: Caller, work_order_id: str) -> None:
    """Admin-only corrective delete; materials and signatures go with it."""
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.DELETE, wo)
    number = wo.work_order_number
    await crud.delete_work_order(db, wo)
    logger.info("Work order %s deleted by %s", number, caller.id)


async def work_order_stats(db: AsyncSession, caller: Caller) -> dict[str, int]:
    authorize(caller, Action.VIEW_STATS)
    return await crud.get_work_order_stats(db)
