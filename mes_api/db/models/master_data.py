from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Boolean, Date, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mes_api.db.base import Base, UUIDPkMixin, TimestampMixin, TenantMixin


class Product(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Finished good, semi-finished good or raw material."""
    __tablename__ = "products"
    __table_args__ = (
        UniqueConstraint("tenant_id", "product_code", name="uq_products_tenant_product_code"),
    )

    product_code: Mapped[str] = mapped_column(String(50), nullable=False)
    product_name: Mapped[str] = mapped_column(Text, nullable=False)
    product_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # FINISHED/SEMI/RAW
    specification: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    unit: Mapped[str] = mapped_column(String(20), nullable=False, default="EA")
    standard_cycle_time: Mapped[Optional[Decimal]] = mapped_column(Numeric(18, 6), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Process(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Manufacturing process (operation) master."""
    __tablename__ = "processes"
    __table_args__ = (
        UniqueConstraint("tenant_id", "process_code", name="uq_processes_tenant_process_code"),
    )

    process_code: Mapped[str] = mapped_column(String(50), nullable=False)
    process_name: Mapped[str] = mapped_column(Text, nullable=False)
    process_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Bom(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Bill of materials header; one row per (bom_code, version)."""
    __tablename__ = "boms"
    __table_args__ = (
        UniqueConstraint("tenant_id", "bom_code", "version", name="uq_boms_tenant_code_version"),
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    bom_code: Mapped[str] = mapped_column(String(50), nullable=False)
    bom_name: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[str] = mapped_column(String(20), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    details: Mapped[List["BomDetail"]] = relationship(
        back_populates="bom",
        cascade="all, delete-orphan",
        order_by="BomDetail.sequence",
        lazy="selectin",
    )


class BomDetail(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Material line of a BOM."""
    __tablename__ = "bom_details"

    bom_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("boms.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence: Mapped[int] = mapped_column(nullable=False)
    material_product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    process_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("processes.id", ondelete="SET NULL"), nullable=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    unit: Mapped[str] = mapped_column(String(20), nullable=False)
    usage_rate: Mapped[Decimal] = mapped_column(Numeric(9, 4), nullable=False, default=Decimal("100"))
    scrap_rate: Mapped[Decimal] = mapped_column(Numeric(9, 4), nullable=False, default=Decimal("0"))
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    bom: Mapped[Bom] = relationship(back_populates="details")


class ProcessRouting(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Process routing header; one row per (routing_code, version)."""
    __tablename__ = "process_routings"
    __table_args__ = (
        UniqueConstraint("tenant_id", "routing_code", "version", name="uq_process_routings_tenant_code_version"),
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    routing_code: Mapped[str] = mapped_column(String(50), nullable=False)
    routing_name: Mapped[str] = mapped_column(Text, nullable=False)
    version: Mapped[str] = mapped_column(String(20), nullable=False)
    effective_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    steps: Mapped[List["ProcessRoutingStep"]] = relationship(
        back_populates="routing",
        cascade="all, delete-orphan",
        order_by="ProcessRoutingStep.sequence_order",
        lazy="selectin",
    )


class ProcessRoutingStep(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Ordered step of a process routing."""
    __tablename__ = "process_routing_steps"

    routing_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("process_routings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sequence_order: Mapped[int] = mapped_column(nullable=False)
    process_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("processes.id", ondelete="RESTRICT"), nullable=False
    )
    standard_time: Mapped[Optional[int]] = mapped_column(nullable=True)  # minutes
    setup_time: Mapped[Optional[int]] = mapped_column(nullable=True)
    wait_time: Mapped[Optional[int]] = mapped_column(nullable=True)
    required_workers: Mapped[Optional[int]] = mapped_column(nullable=True)
    equipment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("equipments.id", ondelete="SET NULL"), nullable=True
    )
    is_parallel: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    parallel_group: Mapped[Optional[int]] = mapped_column(nullable=True)
    is_optional: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="0")
    alternate_process_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("processes.id", ondelete="SET NULL"), nullable=True
    )
    quality_check_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    quality_standard: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    routing: Mapped[ProcessRouting] = relationship(back_populates="steps")
