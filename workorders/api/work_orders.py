"""Work order API: intake, execution updates, status, materials, signatures, invitations."""

from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db.engine import get_db
from workorders.dependencies import require_caller, require_role, client_ip
from workorders.schemas import (
    WorkOrderCreate, WorkOrderUpdate, WorkOrderRead, WorkOrderDetail, WorkOrderStats,
    StatusChange, NextNumber, MaterialCreate, MaterialUpdate, MaterialRead,
    MaterialsSummary, SignatureCreate, SignatureRead, InvitationCreate, InvitationRead,
)
from workorders.schemas.work_order import Priority, ServiceType, WorkStatus
from workorders.services import clock, email, invitations, materials, numbering, signatures, work_orders
from workorders.services import status as status_machine
from workorders.services.access import Action, Caller, authorize

router = APIRouter(prefix="/api/work-orders", tags=["work_orders"])


@router.get("", response_model=list[WorkOrderRead])
async def list_work_orders(
    status: WorkStatus | None = None,
    priority: Priority | None = None,
    service_type: ServiceType | None = None,
    assigned_to: str | None = None,
    project_id: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
    search: str | None = None,
    mine: bool = False,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    if mine:
        assigned_to = caller.id
    return await work_orders.list_work_orders(
        db, caller,
        status=status, priority=priority, service_type=service_type,
        assigned_to=assigned_to, project_id=project_id,
        date_from=date_from, date_to=date_to, search=search,
    )


@router.post("", status_code=201, response_model=WorkOrderRead)
async def create_work_order(
    body: WorkOrderCreate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    wo = await work_orders.create_work_order(db, caller, **body.model_dump())
    await email.notify_work_order_change(db, wo, "created", caller.name)
    return wo


@router.get("/next-number", response_model=NextNumber)
async def preview_next_number(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    """Best-effort preview; the number is only fixed when the work order is created."""
    authorize(caller, Action.CREATE)
    number = await numbering.next_work_order_number(db, clock.now().date())
    return NextNumber(work_order_number=number)


@router.get("/stats", response_model=WorkOrderStats, dependencies=[Depends(require_role("admin"))])
async def get_stats(
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return WorkOrderStats(**await work_orders.work_order_stats(db, caller))


@router.get("/{wo_id}", response_model=WorkOrderDetail)
async def get_work_order(
    wo_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    wo = await work_orders.get_work_order(db, caller, wo_id)
    items = await materials.list_materials(db, caller, wo_id)
    sigs = await signatures.list_signatures(db, caller, wo_id)
    return WorkOrderDetail(
        **WorkOrderRead.model_validate(wo).model_dump(),
        materials=[MaterialRead.model_validate(m) for m in items],
        signatures=[SignatureRead.model_validate(s) for s in sigs],
        materials_total=await materials.total_materials_cost(db, caller, wo_id),
        fully_signed=await signatures.is_fully_signed(db, wo_id),
    )


@router.patch("/{wo_id}", response_model=WorkOrderRead)
async def update_work_order(
    wo_id: str,
    body: WorkOrderUpdate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return await work_orders.update_work_order(db, caller, wo_id, body.model_dump(exclude_unset=True))


@router.delete("/{wo_id}", status_code=204)
async def delete_work_order(
    wo_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    await work_orders.delete_work_order(db, caller, wo_id)
    return Response(status_code=204)


@router.post("/{wo_id}/status", response_model=WorkOrderRead)
async def change_status(
    wo_id: str,
    body: StatusChange,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    previous = (await work_orders.get_work_order(db, caller, wo_id)).work_completed
    wo = await status_machine.set_status(db, caller, wo_id, body.status)
    if wo.work_completed != previous:
        action = "completed" if wo.work_completed == "completed" else "status_changed"
        await email.notify_work_order_change(db, wo, action, caller.name)
    return wo


# ── Materials ─────────────────────────────────────────────

@router.get("/{wo_id}/materials", response_model=MaterialsSummary)
async def list_materials(
    wo_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    items = await materials.list_materials(db, caller, wo_id)
    total = await materials.total_materials_cost(db, caller, wo_id)
    return MaterialsSummary(materials=[MaterialRead.model_validate(m) for m in items], total_cost=total)


@router.post("/{wo_id}/materials", status_code=201, response_model=MaterialRead)
async def add_material(
    wo_id: str,
    body: MaterialCreate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return await materials.add_material(db, caller, wo_id, **body.model_dump())


@router.patch("/{wo_id}/materials/{material_id}", response_model=MaterialRead)
async def update_material(
    wo_id: str,
    material_id: str,
    body: MaterialUpdate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return await materials.update_material(
        db, caller, material_id, body.model_dump(exclude_unset=True), work_order_id=wo_id,
    )


@router.delete("/{wo_id}/materials/{material_id}", status_code=204)
async def remove_material(
    wo_id: str,
    material_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    await materials.remove_material(db, caller, material_id, work_order_id=wo_id)
    return Response(status_code=204)


# ── Signatures ────────────────────────────────────────────

@router.get("/{wo_id}/signatures", response_model=list[SignatureRead])
async def list_signatures(
    wo_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return await signatures.list_signatures(db, caller, wo_id)


@router.post("/{wo_id}/signatures", status_code=201, response_model=SignatureRead)
async def record_signature(
    wo_id: str,
    body: SignatureCreate,
    request: Request,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    sig = await signatures.record_signature(
        db, caller, wo_id, **body.model_dump(), ip_address=client_ip(request),
    )
    wo = await work_orders.load_work_order(db, wo_id)
    await email.notify_signature(db, wo, sig)
    return sig


# ── Invitations ───────────────────────────────────────────

@router.get("/{wo_id}/invitations", response_model=list[InvitationRead])
async def list_invitations(
    wo_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    return await invitations.list_invitations(db, caller, wo_id)


@router.post("/{wo_id}/invitations", status_code=201, response_model=InvitationRead)
async def invite_customer(
    wo_id: str,
    body: InvitationCreate,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    invitation = await invitations.invite_customer(db, caller, wo_id, body.customer_name, body.email)
    wo = await work_orders.load_work_order(db, wo_id)
    email.send_work_order_invitation(wo, invitation, caller.name)
    return invitation


@router.delete("/{wo_id}/invitations/{invitation_id}", status_code=204)
async def revoke_invitation(
    wo_id: str,
    invitation_id: str,
    caller: Caller = Depends(require_caller),
    db: AsyncSession = Depends(get_db),
):
    await invitations.revoke_invitation(db, caller, invitation_id, work_order_id=wo_id)
    return Response(status_code=204)
