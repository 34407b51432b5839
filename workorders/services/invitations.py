"""Customer invitations on a work order.

An invitation carries a random token the customer uses to view the work
order. Assigned staff may list and send them; only admins revoke.
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db import crud
from workorders.errors import NotFound, ValidationError
from workorders.models import WorkOrderInvitation
from workorders.services import clock
from workorders.services.access import Action, Caller, authorize
from workorders.services.work_orders import load_work_order

logger = logging.getLogger(__name__)

INVITATION_TTL_DAYS = 7

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str | None) -> str:
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("Email is required")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Invalid email format")
    return email


async def invite_customer(
    db: AsyncSession,
    caller: Caller,
    work_order_id: str,
    customer_name: str,
    email: str,
    now: datetime | None = None,
) -> WorkOrderInvitation:
    """Create a pending invitation; the caller sends the email."""
    if customer_name is None or not customer_name.strip():
        raise ValidationError("Customer name is required")
    email = normalize_email(email)

    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.MANAGE_INVITATIONS, wo)

    now = clock.resolve(now)
    invitation = await crud.create_invitation(
        db, work_order_id=wo.id, customer_name=customer_name.strip(), email=email,
        token=secrets.token_urlsafe(32), expires_at=now + timedelta(days=INVITATION_TTL_DAYS),
        invited_by=caller.id,
    )
    logger.info("Invitation %s for %s created on %s", invitation.id, email, wo.work_order_number)
    return invitation


async def list_invitations(db: AsyncSession, caller: Caller, work_order_id: str) -> list[WorkOrderInvitation]:
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.MANAGE_INVITATIONS, wo)
    return await crud.list_invitations(db, wo.id)


async def revoke_invitation(
    db: AsyncSession, caller: Caller, invitation_id: str, work_order_id: str | None = None,
) -> None:
    """Admin-only hard delete. ``work_order_id``, when given, must own the invitation."""
    invitation = await crud.get_invitation(db, invitation_id)
    if invitation is None or (work_order_id is not None and invitation.work_order_id != work_order_id):
        raise NotFound("Invitation not found")
    wo = await load_work_order(db, invitation.work_order_id)
    authorize(caller, Action.DELETE_INVITATION, wo)
    await crud.delete_invitation(db, invitation)
    logger.info("Invitation %s revoked by %s", invitation_id, caller.id)
