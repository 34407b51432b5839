"""Row-level CRUD for users, sessions, work orders, materials, signatures and invitations.

These helpers commit; the services apply validation, authorization and any
parent-row changes (such as ``updated_at``) before calling them so that one
commit carries the whole operation.
"""

from __future__ import annotations

import datetime as dt

from sqlalchemy import select, func, case, or_, delete
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.models import (
    User, UserSession, WorkOrder, WorkOrderMaterial, WorkOrderSignature, WorkOrderInvitation,
)


# ── Users ─────────────────────────────────────────────────

async def create_user(
    db: AsyncSession, email: str, password_hash: str,
    role: str = "staff", display_name: str = "",
) -> User:
    user = User(
        email=email.lower(), password_hash=password_hash,
        role=role, display_name=display_name,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def get_user(db: AsyncSession, user_id: str) -> User | None:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    return result.scalars().first()


async def list_user_emails(db: AsyncSession, user_ids: list[str] | None = None, role: str | None = None) -> list[str]:
    """Emails of active users, filtered by id list and/or role."""
    stmt = select(User.email).where(User.is_active == True)
    if user_ids is not None:
        stmt = stmt.where(User.id.in_(user_ids))
    if role is not None:
        stmt = stmt.where(User.role == role)
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── Work orders ───────────────────────────────────────────

async def get_latest_work_order_number(db: AsyncSession, prefix: str) -> str | None:
    """Highest work order number starting with ``prefix``.

    Ordered by length first so that 1000 sorts after 999.
    """
    col = WorkOrder.work_order_number
    result = await db.execute(
        select(col)
        .where(col.like(f"{prefix}%"))
        .order_by(func.length(col).desc(), col.desc())
        .limit(1)
    )
    return result.scalars().first()


async def work_order_number_exists(db: AsyncSession, number: str) -> bool:
    result = await db.execute(
        select(WorkOrder.id).where(WorkOrder.work_order_number == number)
    )
    return result.first() is not None


async def create_work_order(db: AsyncSession, **fields) -> WorkOrder:
    wo = WorkOrder(**fields)
    db.add(wo)
    await db.commit()
    await db.refresh(wo)
    return wo


async def get_work_order(db: AsyncSession, work_order_id: str) -> WorkOrder | None:
    return await db.get(WorkOrder, work_order_id)


async def update_work_order(db: AsyncSession, wo: WorkOrder, **kwargs) -> WorkOrder:
    # None is a real value here: it clears the field.
    for k, v in kwargs.items():
        setattr(wo, k, v)
    await db.commit()
    await db.refresh(wo)
    return wo


async def delete_work_order(db: AsyncSession, wo: WorkOrder) -> None:
    await db.delete(wo)
    await db.commit()


async def search_work_orders(
    db: AsyncSession,
    status: str | None = None,
    priority: str | None = None,
    service_type: str | None = None,
    assigned_to: str | None = None,
    project_id: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
    search: str | None = None,
) -> list[WorkOrder]:
    stmt = select(WorkOrder)
    if status:
        stmt = stmt.where(WorkOrder.work_completed == status)
    if priority:
        stmt = stmt.where(WorkOrder.priority == priority)
    if service_type:
        stmt = stmt.where(WorkOrder.service_type == service_type)
    if assigned_to:
        stmt = stmt.where(WorkOrder.assigned_to == assigned_to)
    if project_id:
        stmt = stmt.where(WorkOrder.project_id == project_id)
    if date_from:
        stmt = stmt.where(WorkOrder.date >= date_from)
    if date_to:
        stmt = stmt.where(WorkOrder.date <= date_to)
    if search:
        term = f"%{search}%"
        stmt = stmt.where(or_(
            WorkOrder.work_order_number.like(term),
            WorkOrder.company.like(term),
            WorkOrder.location.like(term),
            WorkOrder.description.like(term),
        ))
    result = await db.execute(stmt.order_by(WorkOrder.created_at.desc(), WorkOrder.id.desc()))
    return list(result.scalars().all())


def _count_where(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


async def get_work_order_stats(db: AsyncSession) -> dict[str, int]:
    status = WorkOrder.work_completed
    result = await db.execute(
        select(
            func.count(WorkOrder.id).label("total"),
            _count_where(status == "pending").label("pending"),
            _count_where(status == "in_progress").label("in_progress"),
            _count_where(status == "completed").label("completed"),
            _count_where(status == "cancelled").label("cancelled"),
            _count_where(
                (WorkOrder.priority == "emergency")
                & status.not_in(("completed", "cancelled"))
            ).label("emergency"),
        )
    )
    row = result.one()
    return {k: int(v or 0) for k, v in row._mapping.items()}


# ── Materials ─────────────────────────────────────────────

async def create_material(
    db: AsyncSession, work_order_id: str, material_name: str, quantity: float,
    unit: str | None = None, unit_cost: float | None = None,
    total_cost: float | None = None, notes: str | None = None,
) -> WorkOrderMaterial:
    material = WorkOrderMaterial(
        work_order_id=work_order_id, material_name=material_name,
        quantity=quantity, unit=unit, unit_cost=unit_cost,
        total_cost=total_cost, notes=notes,
    )
    db.add(material)
    await db.commit()
    await db.refresh(material)
    return material


async def get_material(db: AsyncSession, material_id: str) -> WorkOrderMaterial | None:
    return await db.get(WorkOrderMaterial, material_id)


async def update_material(db: AsyncSession, material: WorkOrderMaterial, **kwargs) -> WorkOrderMaterial:
    for k, v in kwargs.items():
        setattr(material, k, v)
    await db.commit()
    await db.refresh(material)
    return material


async def delete_material(db: AsyncSession, material: WorkOrderMaterial) -> None:
    await db.delete(material)
    await db.commit()


async def list_materials(db: AsyncSession, work_order_id: str) -> list[WorkOrderMaterial]:
    result = await db.execute(
        select(WorkOrderMaterial)
        .where(WorkOrderMaterial.work_order_id == work_order_id)
        .order_by(WorkOrderMaterial.created_at, WorkOrderMaterial.id)
    )
    return list(result.scalars().all())


async def sum_material_costs(db: AsyncSession, work_order_id: str) -> float:
    """Sum of non-null total_cost; an empty ledger sums to 0."""
    result = await db.execute(
        select(func.coalesce(func.sum(WorkOrderMaterial.total_cost), 0.0))
        .where(WorkOrderMaterial.work_order_id == work_order_id)
    )
    return float(result.scalar_one())


# ── Signatures ────────────────────────────────────────────

async def create_signature(
    db: AsyncSession, work_order_id: str, signer_type: str, signer_name: str,
    signature_data: str, signed_at: dt.datetime,
    signer_title: str | None = None, ip_address: str | None = None,
) -> WorkOrderSignature:
    sig = WorkOrderSignature(
        work_order_id=work_order_id, signer_type=signer_type,
        signer_name=signer_name, signer_title=signer_title,
        signature_data=signature_data, signed_date=signed_at.date(),
        signed_at=signed_at, ip_address=ip_address,
    )
    db.add(sig)
    await db.commit()
    await db.refresh(sig)
    return sig


async def get_signature(db: AsyncSession, work_order_id: str, signer_type: str) -> WorkOrderSignature | None:
    result = await db.execute(
        select(WorkOrderSignature).where(
            WorkOrderSignature.work_order_id == work_order_id,
            WorkOrderSignature.signer_type == signer_type,
        )
    )
    return result.scalars().first()


async def list_signatures(db: AsyncSession, work_order_id: str) -> list[WorkOrderSignature]:
    result = await db.execute(
        select(WorkOrderSignature)
        .where(WorkOrderSignature.work_order_id == work_order_id)
        .order_by(WorkOrderSignature.created_at, WorkOrderSignature.id)
    )
    return list(result.scalars().all())


async def list_signer_types(db: AsyncSession, work_order_id: str) -> set[str]:
    result = await db.execute(
        select(WorkOrderSignature.signer_type)
        .where(WorkOrderSignature.work_order_id == work_order_id)
    )
    return set(result.scalars().all())


# ── Invitations ───────────────────────────────────────────

async def create_invitation(
    db: AsyncSession, work_order_id: str, customer_name: str, email: str,
    token: str, expires_at: dt.datetime, invited_by: str | None = None,
) -> WorkOrderInvitation:
    invitation = WorkOrderInvitation(
        work_order_id=work_order_id, customer_name=customer_name, email=email,
        token=token, expires_at=expires_at, invited_by=invited_by,
    )
    db.add(invitation)
    await db.commit()
    await db.refresh(invitation)
    return invitation


async def get_invitation(db: AsyncSession, invitation_id: str) -> WorkOrderInvitation | None:
    return await db.get(WorkOrderInvitation, invitation_id)


async def list_invitations(db: AsyncSession, work_order_id: str) -> list[WorkOrderInvitation]:
    result = await db.execute(
        select(WorkOrderInvitation)
        .where(WorkOrderInvitation.work_order_id == work_order_id)
        .order_by(WorkOrderInvitation.created_at.desc(), WorkOrderInvitation.id.desc())
    )
    return list(result.scalars().all())


async def delete_invitation(db: AsyncSession, invitation: WorkOrderInvitation) -> None:
    await db.delete(invitation)
    await db.commit()


# ── Sessions ──────────────────────────────────────────────

async def create_user_session(
    db: AsyncSession, user_id: str, token_hash: str, expires_at: dt.datetime, ip_address: str = "",
) -> UserSession:
    row = UserSession(user_id=user_id, token_hash=token_hash, expires_at=expires_at, ip_address=ip_address)
    db.add(row)
    await db.commit()
    return row


async def get_live_session(db: AsyncSession, token_hash: str, now: dt.datetime) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(UserSession.token_hash == token_hash, UserSession.expires_at > now)
    )
    return result.scalars().first()


async def delete_user_session(db: AsyncSession, token_hash: str) -> None:
    await db.execute(delete(UserSession).where(UserSession.token_hash == token_hash))
    await db.commit()
