"""Pydantic request/response schemas."""

from workorders.schemas.material import MaterialCreate, MaterialUpdate, MaterialRead, MaterialsSummary
from workorders.schemas.signature import SignatureCreate, SignatureRead
from workorders.schemas.invitation import InvitationCreate, InvitationRead
from workorders.schemas.work_order import (
    WorkOrderCreate, WorkOrderUpdate, WorkOrderRead, WorkOrderDetail,
    WorkOrderStats, StatusChange, NextNumber,
)

__all__ = [
    "MaterialCreate", "MaterialUpdate", "MaterialRead", "MaterialsSummary",
    "SignatureCreate", "SignatureRead",
    "InvitationCreate", "InvitationRead",
    "WorkOrderCreate", "WorkOrderUpdate", "WorkOrderRead", "WorkOrderDetail",
    "WorkOrderStats", "StatusChange", "NextNumber",
]
