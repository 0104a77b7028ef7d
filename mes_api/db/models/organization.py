from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mes_api.db.base import Base, UUIDPkMixin, TimestampMixin, TenantMixin


class Site(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Plant, warehouse or office location of a tenant."""
    __tablename__ = "sites"
    __table_args__ = (
        UniqueConstraint("tenant_id", "site_code", name="uq_sites_tenant_site_code"),
    )

    site_code: Mapped[str] = mapped_column(String(50), nullable=False)
    site_name: Mapped[str] = mapped_column(Text, nullable=False)
    site_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)  # FACTORY/WAREHOUSE/OFFICE
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    fax: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    manager_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    manager_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    manager_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Department(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Organizational unit within a tenant."""
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("tenant_id", "department_code", name="uq_departments_tenant_department_code"),
    )

    department_code: Mapped[str] = mapped_column(String(50), nullable=False)
    department_name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sort_order: Mapped[int] = mapped_column(nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
