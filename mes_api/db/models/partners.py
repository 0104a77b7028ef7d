from __future__ import annotations

from typing import Optional

from sqlalchemy import Boolean, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from mes_api.db.base import Base, UUIDPkMixin, TimestampMixin, TenantMixin


class Supplier(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Supplier/vendor master."""
    __tablename__ = "suppliers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "supplier_code", name="uq_suppliers_tenant_supplier_code"),
    )

    supplier_code: Mapped[str] = mapped_column(String(50), nullable=False)
    supplier_name: Mapped[str] = mapped_column(Text, nullable=False)
    supplier_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    business_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    representative_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_person: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    lead_time_days: Mapped[Optional[int]] = mapped_column(nullable=True)
    rating: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Customer(UUIDPkMixin, TenantMixin, TimestampMixin, Base):
    """Customer master."""
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("tenant_id", "customer_code", name="uq_customers_tenant_customer_code"),
    )

    customer_code: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    customer_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    business_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    representative_name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_person: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    payment_terms: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    credit_limit: Mapped[Optional[float]] = mapped_column(nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
