from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Enum, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mes_api.core.workflow import InspectionActionStatus
from mes_api.db.base import Base, UUIDPkMixin, TimestampMixin, TenantMixin


class Equipment(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Production equipment (machine, line, tool)."""
    __tablename__ = "equipments"
    __table_args__ = (
        UniqueConstraint("tenant_id", "equipment_code", name="uq_equipments_tenant_equipment_code"),
    )

    equipment_code: Mapped[str] = mapped_column(String(50), nullable=False)
    equipment_name: Mapped[str] = mapped_column(Text, nullable=False)
    equipment_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    site_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("sites.id", ondelete="SET NULL"), nullable=True
    )
    manufacturer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    model_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serial_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    install_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPERATIONAL")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class EquipmentInspection(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Inspection performed on a piece of equipment."""
    __tablename__ = "equipment_inspections"
    __table_args__ = (
        UniqueConstraint("tenant_id", "inspection_no", name="uq_equipment_inspections_tenant_inspection_no"),
    )

    equipment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("equipments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inspection_no: Mapped[str] = mapped_column(String(50), nullable=False)
    inspection_type: Mapped[str] = mapped_column(String(30), nullable=False)  # DAILY/PERIODIC/SPECIAL
    inspection_date: Mapped[date] = mapped_column(nullable=False)
    inspector_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    result: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)  # PASS/FAIL/CONDITIONAL
    findings: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class InspectionAction(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Corrective action raised from an equipment inspection."""
    __tablename__ = "inspection_actions"

    inspection_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("equipment_inspections.id", ondelete="CASCADE"), nullable=False, index=True
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[InspectionActionStatus] = mapped_column(
        Enum(InspectionActionStatus, native_enum=False, length=20, name="inspection_action_status"),
        nullable=False,
        default=InspectionActionStatus.OPEN,
    )
    assigned_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    due_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    completed_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    result: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Gauge(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Measuring instrument subject to periodic calibration."""
    __tablename__ = "gauges"
    __table_args__ = (
        UniqueConstraint("tenant_id", "gauge_code", name="uq_gauges_tenant_gauge_code"),
    )

    gauge_code: Mapped[str] = mapped_column(String(50), nullable=False)
    gauge_name: Mapped[str] = mapped_column(Text, nullable=False)
    gauge_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    manufacturer: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    model_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    serial_no: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    measurement_range: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    accuracy: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    calibration_cycle_days: Mapped[Optional[int]] = mapped_column(nullable=True)
    last_calibration_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    next_calibration_date: Mapped[Optional[date]] = mapped_column(nullable=True)
    calibration_status: Mapped[str] = mapped_column(String(20), nullable=False, default="VALID")
    department_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True
    )
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
