from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class SiteRead(BaseModel):
    """Site read model."""
    id: UUID
    site_code: str
    site_name: str
    site_type: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[str] = None
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = None
    manager_email: Optional[str] = None
    is_active: bool
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SiteCreate(BaseModel):
    site_code: str = Field(..., min_length=1, max_length=50)
    site_name: str = Field(..., min_length=1)
    site_type: Optional[str] = Field(None, description="FACTORY | WAREHOUSE | OFFICE")
    address: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[str] = None
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = None
    manager_email: Optional[str] = None
    is_active: bool = True
    remarks: Optional[str] = None


class SiteUpdate(BaseModel):
    site_code: Optional[str] = Field(None, min_length=1, max_length=50)
    site_name: Optional[str] = None
    site_type: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    fax: Optional[str] = None
    email: Optional[str] = None
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = None
    manager_email: Optional[str] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class DepartmentRead(BaseModel):
    id: UUID
    department_code: str
    department_name: str
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DepartmentCreate(BaseModel):
    department_code: str = Field(..., min_length=1, max_length=50)
    department_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True


class DepartmentUpdate(BaseModel):
    department_code: Optional[str] = Field(None, min_length=1, max_length=50)
    department_name: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
