from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class _PartnerBase(BaseModel):
    business_number: Optional[str] = None
    representative_name: Optional[str] = None
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    payment_terms: Optional[str] = None
    remarks: Optional[str] = None


class SupplierRead(_PartnerBase):
    id: UUID
    supplier_code: str
    supplier_name: str
    supplier_type: Optional[str] = None
    lead_time_days: Optional[int] = None
    rating: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SupplierCreate(_PartnerBase):
    supplier_code: str = Field(..., min_length=1, max_length=50)
    supplier_name: str = Field(..., min_length=1)
    supplier_type: Optional[str] = None
    lead_time_days: Optional[int] = Field(None, ge=0)
    rating: Optional[str] = None
    is_active: bool = True


class SupplierUpdate(_PartnerBase):
    supplier_code: Optional[str] = Field(None, min_length=1, max_length=50)
    supplier_name: Optional[str] = None
    supplier_type: Optional[str] = None
    lead_time_days: Optional[int] = Field(None, ge=0)
    rating: Optional[str] = None
    is_active: Optional[bool] = None


class CustomerRead(_PartnerBase):
    id: UUID
    customer_code: str
    customer_name: str
    customer_type: Optional[str] = None
    credit_limit: Optional[float] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CustomerCreate(_PartnerBase):
    customer_code: str = Field(..., min_length=1, max_length=50)
    customer_name: str = Field(..., min_length=1)
    customer_type: Optional[str] = None
    credit_limit: Optional[float] = Field(None, ge=0)
    is_active: bool = True


class CustomerUpdate(_PartnerBase):
    customer_code: Optional[str] = Field(None, min_length=1, max_length=50)
    customer_name: Optional[str] = None
    customer_type: Optional[str] = None
    credit_limit: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
