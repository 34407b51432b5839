from __future__ import annotations
from datetime import date, datetime
from typing import Literal
from pydantic import BaseModel

SignerType = Literal["tl_corp_rep", "building_rep"]


class SignatureCreate(BaseModel):
    signer_type: SignerType
    signer_name: str
    signer_title: str | None = None
    signature_data: str


class SignatureRead(BaseModel):
    id: str
    work_order_id: str
    signer_type: str
    signer_name: str
    signer_title: str | None = None
    signature_data: str
    signed_date: date
    signed_at: datetime
    ip_address: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
