"""Signature gate: one durable sign-off per signer type per work order."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from workorders.db import crud
from workorders.errors import DuplicateSignatureError, ValidationError
from workorders.models import WorkOrderSignature
from workorders.models.signature import SIGNER_TYPES
from workorders.services import clock
from workorders.services.access import Action, Caller, authorize
from workorders.services.work_orders import load_work_order

logger = logging.getLogger(__name__)

SIGNER_LABELS = {
    "tl_corp_rep": "TL Corp Representative",
    "building_rep": "Building Representative",
}


async def record_signature(
    db: AsyncSession,
    caller: Caller,
    work_order_id: str,
    signer_type: str,
    signer_name: str,
    signature_data: str,
    signer_title: str | None = None,
    ip_address: str | None = None,
    now: datetime | None = None,
) -> WorkOrderSignature:
    """Record a signature. A second one for the same signer type is rejected, never overwritten."""
    if signer_type not in SIGNER_TYPES:
        raise ValidationError(f"Invalid signer type: {signer_type}")
    if signer_name is None or not signer_name.strip():
        raise ValidationError("Signer name is required")
    if not signature_data:
        raise ValidationError("Signature data is required")

    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.RECORD_SIGNATURE, wo)

    if await crud.get_signature(db, wo.id, signer_type) is not None:
        raise DuplicateSignatureError(
            f"{SIGNER_LABELS[signer_type]} has already signed {wo.work_order_number}"
        )

    now = clock.resolve(now)
    wo.updated_at = now
    title = signer_title.strip() if signer_title and signer_title.strip() else None
    try:
        sig = await crud.create_signature(
            db, work_order_id=wo.id, signer_type=signer_type,
            signer_name=signer_name.strip(), signer_title=title,
            signature_data=signature_data, signed_at=now, ip_address=ip_address,
        )
    except IntegrityError:
        # Lost a race with a concurrent signer of the same type.
        await db.rollback()
        raise DuplicateSignatureError(f"{SIGNER_LABELS[signer_type]} has already signed this work order")

    logger.info("Signature %s recorded on %s by %s", signer_type, wo.work_order_number, caller.id)
    return sig


async def has_signature(db: AsyncSession, work_order_id: str, signer_type: str) -> bool:
    return await crud.get_signature(db, work_order_id, signer_type) is not None


async def is_fully_signed(db: AsyncSession, work_order_id: str) -> bool:
    """True once both the TL Corp and the building representative have signed."""
    return set(SIGNER_TYPES) <= await crud.list_signer_types(db, work_order_id)


async def list_signatures(db: AsyncSession, caller: Caller, work_order_id: str) -> list[WorkOrderSignature]:
    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.READ, wo)
    return await crud.list_signatures(db, wo.id)
