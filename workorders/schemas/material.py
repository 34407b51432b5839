from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class MaterialCreate(BaseModel):
    material_name: str
    quantity: float = 1.0
    unit: str | None = None
    unit_cost: float | None = None
    notes: str | None = None


class MaterialUpdate(BaseModel):
    material_name: str | None = None
    quantity: float | None = None
    unit: str | None = None
    unit_cost: float | None = None
    notes: str | None = None


class MaterialRead(BaseModel):
    id: str
    work_order_id: str
    material_name: str
    quantity: float
    unit: str | None = None
    unit_cost: float | None = None
    total_cost: float | None = None
    notes: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class MaterialsSummary(BaseModel):
    materials: list[MaterialRead]
    total_cost: float
