"""Material line item — one cost entry on a work order's ledger."""

from __future__ import annotations

from sqlalchemy import String, Float, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from workorders.models.base import Base, ULIDMixin


class WorkOrderMaterial(Base, ULIDMixin):
    __tablename__ = "work_order_materials"

    work_order_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("work_orders.id", ondelete="CASCADE"), index=True
    )
    material_name: Mapped[str] = mapped_column(String(255))
    quantity: Mapped[float] = mapped_column(Float, default=1.0)
    unit: Mapped[str | None] = mapped_column(String(50), nullable=True)
    unit_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    # Cached quantity * unit_cost; rewritten on every write path
    total_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    work_order = relationship("WorkOrder", back_populates="materials")
