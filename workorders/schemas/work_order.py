from __future__ import annotations
import datetime as dt
from typing import Literal
from pydantic import BaseModel
from workorders.schemas.material import MaterialRead
from workorders.schemas.signature import SignatureRead

Priority = Literal["emergency", "high", "normal", "low"]
ServiceType = Literal["maintenance", "repair", "replace", "inspection", "preventive", "cleaning", "other"]
WorkStatus = Literal["pending", "in_progress", "completed", "cancelled"]


class WorkOrderCreate(BaseModel):
    description: str
    date: dt.date | None = None
    time_received: dt.time | None = None
    phone: str | None = None
    email: str | None = None
    company: str | None = None
    department: str | None = None
    location: str | None = None
    unit: str | None = None
    area: str | None = None
    access_needed: str | None = None
    preferred_entry_time: str | None = None
    priority: Priority = "normal"
    service_type: ServiceType = "maintenance"
    assigned_to: str | None = None
    scheduled_date: dt.date | None = None
    scheduled_time: dt.time | None = None
    project_id: str | None = None


class WorkOrderUpdate(BaseModel):
    """Partial update; only fields present in the request body are applied.

    Status and completion stamps go through the status endpoint and
    total_labor_hours is derived, so none of them appear here.
    """

    description: str | None = None
    date: dt.date | None = None
    time_received: dt.time | None = None
    phone: str | None = None
    email: str | None = None
    company: str | None = None
    department: str | None = None
    location: str | None = None
    unit: str | None = None
    area: str | None = None
    access_needed: str | None = None
    preferred_entry_time: str | None = None
    priority: Priority | None = None
    service_type: ServiceType | None = None
    assigned_to: str | None = None
    scheduled_date: dt.date | None = None
    scheduled_time: dt.time | None = None
    time_in: dt.time | None = None
    time_out: dt.time | None = None
    work_summary: str | None = None
    project_id: str | None = None


class StatusChange(BaseModel):
    status: WorkStatus


class WorkOrderRead(BaseModel):
    id: str
    work_order_number: str
    date: dt.date
    time_received: dt.time | None = None
    phone: str | None = None
    email: str | None = None
    company: str | None = None
    department: str | None = None
    location: str | None = None
    unit: str | None = None
    area: str | None = None
    access_needed: str | None = None
    preferred_entry_time: str | None = None
    priority: str
    service_type: str
    description: str
    assigned_to: str | None = None
    project_id: str | None = None
    scheduled_date: dt.date | None = None
    scheduled_time: dt.time | None = None
    time_in: dt.time | None = None
    time_out: dt.time | None = None
    total_labor_hours: float | None = None
    work_completed: str
    completed_date: dt.date | None = None
    completed_time: dt.time | None = None
    work_summary: str | None = None
    created_by: str | None = None
    created_at: dt.datetime
    updated_at: dt.datetime

    model_config = {"from_attributes": True}


class WorkOrderDetail(WorkOrderRead):
    materials: list[MaterialRead] = []
    signatures: list[SignatureRead] = []
    materials_total: float = 0.0
    fully_signed: bool = False


class WorkOrderStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    emergency: int = 0  # open emergencies only


class NextNumber(BaseModel):
    work_order_number: str
