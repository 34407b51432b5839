"""Work order model — a unit of requested field work from intake to completion."""

from __future__ import annotations

import datetime as dt

from sqlalchemy import String, Float, ForeignKey, Date, Time, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorders.models.base import Base, ULIDMixin, UpdatedAtMixin

PRIORITIES = ("emergency", "high", "normal", "low")
SERVICE_TYPES = ("maintenance", "repair", "replace", "inspection", "preventive", "cleaning", "other")
STATUSES = ("pending", "in_progress", "completed", "cancelled")
TERMINAL_STATUSES = ("completed", "cancelled")


def _in(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class WorkOrder(Base, ULIDMixin, UpdatedAtMixin):
    __tablename__ = "work_orders"
    __table_args__ = (
        CheckConstraint(_in("priority", PRIORITIES), name="ck_work_orders_priority"),
        CheckConstraint(_in("service_type", SERVICE_TYPES), name="ck_work_orders_service_type"),
        CheckConstraint(_in("work_completed", STATUSES), name="ck_work_orders_status"),
    )

    work_order_number: Mapped[str] = mapped_column(String(32), unique=True, index=True)

    # Intake
    # Set by the service from the configured clock
    date: Mapped[dt.date] = mapped_column(Date)
    time_received: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    unit: Mapped[str | None] = mapped_column(String(100), nullable=True)
    area: Mapped[str | None] = mapped_column(String(255), nullable=True)
    access_needed: Mapped[str | None] = mapped_column(Text, nullable=True)
    preferred_entry_time: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Classification
    priority: Mapped[str] = mapped_column(String(20), default="normal", index=True)
    service_type: Mapped[str] = mapped_column(String(20), default="maintenance")
    description: Mapped[str] = mapped_column(Text)

    # Assignment; project_id is an opaque reference owned by the projects collaborator
    assigned_to: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    project_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)

    # Scheduling / execution
    scheduled_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    scheduled_time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    time_in: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    time_out: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    total_labor_hours: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Lifecycle
    work_completed: Mapped[str] = mapped_column(String(20), default="pending", index=True)
    completed_date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    completed_time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    work_summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_by: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    materials = relationship(
        "WorkOrderMaterial", back_populates="work_order", cascade="all, delete-orphan"
    )
    signatures = relationship(
        "WorkOrderSignature", back_populates="work_order", cascade="all, delete-orphan"
    )
    invitations = relationship(
        "WorkOrderInvitation", back_populates="work_order", cascade="all, delete-orphan"
    )
