"""Work order status state machine.

pending -> in_progress -> completed, with cancelled reachable from any
non-terminal state. Administrators may set any status from any status
(manual correction, re-opening). Staff are held to forward moves and
cancellation unless status_policy.staff_forward_only is off.
"""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from workorders.config import get_settings
from workorders.db import crud
from workorders.errors import AccessDenied, ValidationError
from workorders.models import WorkOrder
from workorders.models.work_order import STATUSES, TERMINAL_STATUSES
from workorders.services import clock
from workorders.services.access import Action, Caller, authorize
from workorders.services.signatures import is_fully_signed
from workorders.services.work_orders import load_work_order

logger = logging.getLogger(__name__)

_settings = get_settings()

_FORWARD_RANK = {"pending": 0, "in_progress": 1, "completed": 2}


def check_transition(caller: Caller, current: str, new: str) -> None:
    """Raise AccessDenied if ``caller`` may not move a work order from current to new."""
    if current == new or caller.is_admin or not _settings.status_policy.staff_forward_only:
        return
    if current in TERMINAL_STATUSES:
        raise AccessDenied(f"Only an administrator can reopen a {current} work order")
    if new == "cancelled":
        return
    if _FORWARD_RANK[new] < _FORWARD_RANK[current]:
        raise AccessDenied(f"Staff cannot move a work order back from {current} to {new}")


async def set_status(
    db: AsyncSession,
    caller: Caller,
    work_order_id: str,
    new_status: str,
    now: datetime | None = None,
) -> WorkOrder:
    """Move a work order to ``new_status``.

    Entering completed stamps completed_date/completed_time from ``now``;
    leaving it clears them. Setting the current status again only bumps
    updated_at, so repeated calls never re-stamp completion.
    """
    if new_status not in STATUSES:
        raise ValidationError(f"Invalid status: {new_status}")

    wo = await load_work_order(db, work_order_id)
    authorize(caller, Action.CHANGE_STATUS, wo)
    current = wo.work_completed
    check_transition(caller, current, new_status)

    now = clock.resolve(now)
    changes: dict = {"updated_at": now}

    if new_status != current:
        if new_status == "completed":
            if (
                _settings.status_policy.require_signatures_for_completion
                and not await is_fully_signed(db, wo.id)
            ):
                raise ValidationError("Both signatures are required before completion")
            changes["completed_date"] = now.date()
            changes["completed_time"] = now.time().replace(second=0, microsecond=0)
        else:
            changes["completed_date"] = None
            changes["completed_time"] = None
        changes["work_completed"] = new_status

    wo = await crud.update_work_order(db, wo, **changes)
    if new_status != current:
        logger.info(
            "Work order %s: %s -> %s by %s", wo.work_order_number, current, new_status, caller.id
        )
    return wo
