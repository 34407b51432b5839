"""Role-based capability checks for every work order operation.

The caller is always passed in explicitly; nothing here reads request or
session state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from workorders.errors import AccessDenied

logger = logging.getLogger(__name__)


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    CHANGE_STATUS = "change_status"
    MANAGE_MATERIALS = "manage_materials"
    RECORD_SIGNATURE = "record_signature"
    DELETE = "delete"
    VIEW_STATS = "view_stats"
    MANAGE_INVITATIONS = "manage_invitations"
    DELETE_INVITATION = "delete_invitation"


@dataclass(frozen=True)
class Caller:
    id: str
    role: str  # admin | staff | client
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def is_staff(self) -> bool:
        return self.role == "staff"


# Actions staff may perform only on work orders assigned to them
_ASSIGNED_STAFF_ACTIONS = {
    Action.UPDATE,
    Action.CHANGE_STATUS,
    Action.MANAGE_MATERIALS,
    Action.RECORD_SIGNATURE,
    Action.MANAGE_INVITATIONS,
}

# Actions any staff member may perform
_STAFF_ACTIONS = {Action.CREATE, Action.READ}


def is_allowed(caller: Caller, action: Action, work_order=None) -> bool:
    if caller.is_admin:
        return True
    if not caller.is_staff:
        return False
    if action in _STAFF_ACTIONS:
        return True
    if action in _ASSIGNED_STAFF_ACTIONS:
        return work_order is not None and work_order.assigned_to == caller.id
    return False


def authorize(caller: Caller, action: Action, work_order=None) -> None:
    """Raise AccessDenied unless ``caller`` may perform ``action``."""
    if is_allowed(caller, action, work_order):
        return
    target = f" on {work_order.work_order_number}" if work_order is not None else ""
    logger.info("Denied %s for user %s (%s)%s", action.value, caller.id, caller.role, target)
    if caller.is_staff and action in _ASSIGNED_STAFF_ACTIONS:
        raise AccessDenied("Work order is not assigned to you")
    raise AccessDenied("Insufficient permissions")
