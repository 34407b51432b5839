"""Materials ledger: cost line items attached to a work order."""

from __future__ import annotations

import logging
import math
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db import crud
from workorders.errors import NotFound, ValidationError
from workorders.models import WorkOrderMaterial
from workorders.services import clock
from workorders.services.access import Action, Caller, authorize
from workorders.services.work_orders import load_work_order

logger = logging.getLogger(__name__)

_UPDATABLE = {"material_name", "quantity", "unit", "unit_cost", "notes"}


def line_total(quantity: float, unit_cost: float | None) -> float | None:
    """quantity * unit_cost, or None when the unit cost is unknown."""
    if unit_cost is None:
        return None
    return quantity * unit_cost


def _check_name(name: str | None) -> str:
    if name is None or not name.strip():
        raise ValidationError("Material name is required")
    return name.strip()


def _check_quantity(quantity: float | None) -> float:
    if quantity is None or not math.isfinite(quantity) or quantity <= 0:
        raise ValidationError("Quantity must be greater than zero")
    return quantity


def _check_unit_cost(unit_cost: float | None) -> float | None:
    if unit_cost is not None and (not math.isfinite(unit_cost) or unit_cost < 0):
        raise ValidationError("Unit cost cannot be negative")
    return unit_cost


async def add_material(
    db: AsyncSession,
    caller: Caller,
    work_order_id: str,
    material_name: str,
    quantity: float = 1.0,
    unit: str | None = None,
    unit_cost: float | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> WorkOrderMaterial:
    name = _check_name(material_name)
    quantity = _check_quantity(quantity)
    unit_cost = _check_unit_cost(unit_cost)

    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.MANAGE_MATERIALS, wo)

    wo.updated_at = clock.resolve(now)
    material = await crud.create_material(
        db, work_order_id=wo.id, material_name=name, quantity=quantity,
        unit=unit, unit_cost=unit_cost, total_cost=line_total(quantity, unit_cost),
        notes=notes,
    )
    logger.info("Material %s added to %s", material.id, wo.work_order_number)
    return material


async def _load_material(db: AsyncSession, material_id: str, work_order_id: str | None) -> WorkOrderMaterial:
    material = await crud.get_material(db, material_id)
    if material is None or (work_order_id is not None and material.work_order_id != work_order_id):
        raise NotFound("Material not found")
    return material


async def update_material(
    db: AsyncSession,
    caller: Caller,
    material_id: str,
    changes: dict,
    work_order_id: str | None = None,
    now: datetime | None = None,
) -> WorkOrderMaterial:
    """Edit a line item; total_cost is always recomputed from the result."""
    unknown = set(changes) - _UPDATABLE
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
    changes = dict(changes)
    if "material_name" in changes:
        changes["material_name"] = _check_name(changes["material_name"])
    if "quantity" in changes:
        changes["quantity"] = _check_quantity(changes["quantity"])
    if "unit_cost" in changes:
        changes["unit_cost"] = _check_unit_cost(changes["unit_cost"])

    material = await _load_material(db, material_id, work_order_id)
    wo = await load_work_order(db, material.work_order_id)
    authorize(caller, Action.MANAGE_MATERIALS, wo)

    quantity = changes.get("quantity", material.quantity)
    unit_cost = changes.get("unit_cost", material.unit_cost)
    changes["total_cost"] = line_total(quantity, unit_cost)

    wo.updated_at = clock.resolve(now)
    return await crud.update_material(db, material, **changes)


async def remove_material(
    db: AsyncSession,
    caller: Caller,
    material_id: str,
    work_order_id: str | None = None,
    now: datetime | None = None,
) -> None:
    """Hard-delete a line item. ``work_order_id``, when given, must own it."""
    material = await _load_material(db, material_id, work_order_id)
    wo = await load_work_order(db, material.work_order_id)
    authorize(caller, Action.MANAGE_MATERIALS, wo)

    wo.updated_at = clock.resolve(now)
    await crud.delete_material(db, material)
    logger.info("Material %s removed from %s", material_id, wo.work_order_number)


async def list_materials(db: AsyncSession, caller: Caller, work_order_id: str) -> list[WorkOrderMaterial]:
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.READ, wo)
    return await crud.list_materials(db, wo.id)


async def total_materials_cost(db: AsyncSession, caller: Caller, work_order_id: str) -> float:
    """Sum of line totals; lines without a unit cost contribute 0."""
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.READ, wo)
    return await crud.sum_material_costs(db, wo.id)
