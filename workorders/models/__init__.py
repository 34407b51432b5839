"""SQLAlchemy ORM models."""

from workorders.models.base import Base
from workorders.models.user import User, UserSession
from workorders.models.work_order import WorkOrder
from workorders.models.material import WorkOrderMaterial
from workorders.models.signature import WorkOrderSignature
from workorders.models.invitation import WorkOrderInvitation

__all__ = [
    "Base", "User", "UserSession",
    "WorkOrder", "WorkOrderMaterial", "WorkOrderSignature", "WorkOrderInvitation",
]
