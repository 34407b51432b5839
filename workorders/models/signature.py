"""Signature model — append-once sign-off by one of the two signer roles."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import String, ForeignKey, Text, Date, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorders.models.base import Base, ULIDMixin

SIGNER_TYPES = ("tl_corp_rep", "building_rep")


class WorkOrderSignature(Base, ULIDMixin):
    __tablename__ = "work_order_signatures"
    __table_args__ = (
        UniqueConstraint("work_order_id", "signer_type", name="uq_work_order_signer_type"),
        CheckConstraint(
            "signer_type IN ('tl_corp_rep', 'building_rep')", name="ck_work_order_signatures_signer_type"
        ),
    )

    work_order_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("work_orders.id", ondelete="CASCADE"), index=True
    )
    signer_type: Mapped[str] = mapped_column(String(20))  # tl_corp_rep | building_rep
    signer_name: Mapped[str] = mapped_column(String(255))
    signer_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    signature_data: Mapped[str] = mapped_column(Text)  # opaque image payload or blob URL
    signed_date: Mapped[dt.date] = mapped_column(Date)
    signed_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)

    work_order = relationship("WorkOrder", back_populates="signatures")
