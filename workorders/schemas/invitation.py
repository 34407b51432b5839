from __future__ import annotations
from datetime import datetime
from pydantic import BaseModel


class InvitationCreate(BaseModel):
    customer_name: str
    email: str


class InvitationRead(BaseModel):
    """The token is only ever sent to the invitee, never returned by the API."""

    id: str
    work_order_id: str
    customer_name: str
    email: str
    invited_by: str | None = None
    status: str
    expires_at: datetime
    accepted_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
