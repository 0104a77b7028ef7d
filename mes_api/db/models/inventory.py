from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mes_api.db.base import Base, UUIDPkMixin, TimestampMixin, TenantMixin


class Lot(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Traceable batch of a product."""
    __tablename__ = "lots"
    __table_args__ = (
        UniqueConstraint("tenant_id", "lot_no", name="uq_lots_tenant_lot_no"),
    )

    lot_no: Mapped[str] = mapped_column(String(100), nullable=False)
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    lot_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # RAW/WIP/FINISHED
    initial_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    current_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    reserved_quantity: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="EA")
    manufacturing_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    expiry_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    # PENDING/PASSED/FAILED/HOLD
    quality_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    supplier_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True
    )
    supplier_lot_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    work_order_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("work_orders.id", ondelete="SET NULL"), nullable=True
    )
    parent_lot_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("lots.id", ondelete="SET NULL"), nullable=True
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
