"""Work order invitation: a tokenized link that adds a customer contact."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import String, ForeignKey, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorders.models.base import Base, ULIDMixin

INVITATION_STATUSES = ("pending", "accepted", "expired")


class WorkOrderInvitation(Base, ULIDMixin):
    __tablename__ = "work_order_invitations"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired')", name="ck_work_order_invitations_status"
        ),
    )

    work_order_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("work_orders.id", ondelete="CASCADE"), index=True
    )
    customer_name: Mapped[str] = mapped_column(String(255))
    email: Mapped[str] = mapped_column(String(255), index=True)
    token: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    invited_by: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), default="pending")
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True))
    accepted_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    work_order = relationship("WorkOrder", back_populates="invitations")
