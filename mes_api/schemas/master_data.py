from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ProductRead(BaseModel):
    """Product read model."""
    id: UUID
    product_code: str
    product_name: str
    product_type: Optional[str] = None
    specification: Optional[str] = None
    unit: str
    standard_cycle_time: Optional[Decimal] = None
    is_active: bool
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProductCreate(BaseModel):
    product_code: str = Field(..., min_length=1, max_length=50)
    product_name: str = Field(..., min_length=1)
    product_type: Optional[str] = Field(None, description="FINISHED | SEMI | RAW")
    specification: Optional[str] = None
    unit: str = Field("EA")
    standard_cycle_time: Optional[Decimal] = Field(None, ge=0)
    is_active: bool = True
    remarks: Optional[str] = None


class ProductUpdate(BaseModel):
    product_code: Optional[str] = Field(None, min_length=1, max_length=50)
    product_name: Optional[str] = None
    product_type: Optional[str] = None
    specification: Optional[str] = None
    unit: Optional[str] = None
    standard_cycle_time: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class ProcessRead(BaseModel):
    id: UUID
    process_code: str
    process_name: str
    process_type: Optional[str] = None
    description: Optional[str] = None
    sort_order: int
    is_active: bool
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProcessCreate(BaseModel):
    process_code: str = Field(..., min_length=1, max_length=50)
    process_name: str = Field(..., min_length=1)
    process_type: Optional[str] = None
    description: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    remarks: Optional[str] = None


class ProcessUpdate(BaseModel):
    process_code: Optional[str] = Field(None, min_length=1, max_length=50)
    process_name: Optional[str] = None
    process_type: Optional[str] = None
    description: Optional[str] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class BomDetailIn(BaseModel):
    """BOM line; sequence is assigned by position when omitted."""
    sequence: Optional[int] = Field(None, ge=1)
    material_product_id: UUID
    process_id: Optional[UUID] = None
    quantity: Decimal = Field(..., gt=0)
    unit: str = Field("EA")
    usage_rate: Decimal = Field(Decimal("100"), ge=0)
    scrap_rate: Decimal = Field(Decimal("0"), ge=0)
    remarks: Optional[str] = None


class BomDetailRead(BaseModel):
    id: UUID
    sequence: int
    material_product_id: UUID
    process_id: Optional[UUID] = None
    quantity: Decimal
    unit: str
    usage_rate: Decimal
    scrap_rate: Decimal
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class BomRead(BaseModel):
    """BOM header with its lines ordered by sequence."""
    id: UUID
    product_id: UUID
    bom_code: str
    bom_name: str
    version: str
    effective_date: date
    expiry_date: Optional[date] = None
    is_active: bool
    remarks: Optional[str] = None
    details: List[BomDetailRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BomCreate(BaseModel):
    product_id: UUID
    bom_code: str = Field(..., min_length=1, max_length=50)
    bom_name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1, max_length=20)
    effective_date: date
    expiry_date: Optional[date] = None
    is_active: bool = True
    remarks: Optional[str] = None
    details: List[BomDetailIn] = Field(default_factory=list)


class BomUpdate(BaseModel):
    """Patch payload; `details`, when given, replaces every line."""
    product_id: Optional[UUID] = None
    bom_code: Optional[str] = Field(None, min_length=1, max_length=50)
    bom_name: Optional[str] = None
    version: Optional[str] = Field(None, min_length=1, max_length=20)
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None
    details: Optional[List[BomDetailIn]] = None


class RoutingStepIn(BaseModel):
    """Routing step; sequence_order is assigned by position when omitted."""
    sequence_order: Optional[int] = Field(None, ge=1)
    process_id: UUID
    standard_time: Optional[int] = Field(None, ge=0, description="Minutes")
    setup_time: Optional[int] = Field(None, ge=0)
    wait_time: Optional[int] = Field(None, ge=0)
    required_workers: Optional[int] = Field(None, ge=0)
    equipment_id: Optional[UUID] = None
    is_parallel: bool = False
    parallel_group: Optional[int] = None
    is_optional: bool = False
    alternate_process_id: Optional[UUID] = None
    quality_check_required: bool = False
    quality_standard: Optional[str] = None
    remarks: Optional[str] = None


class RoutingStepRead(BaseModel):
    id: UUID
    sequence_order: int
    process_id: UUID
    standard_time: Optional[int] = None
    setup_time: Optional[int] = None
    wait_time: Optional[int] = None
    required_workers: Optional[int] = None
    equipment_id: Optional[UUID] = None
    is_parallel: bool
    parallel_group: Optional[int] = None
    is_optional: bool
    alternate_process_id: Optional[UUID] = None
    quality_check_required: bool
    quality_standard: Optional[str] = None
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class ProcessRoutingRead(BaseModel):
    id: UUID
    product_id: UUID
    routing_code: str
    routing_name: str
    version: str
    effective_date: date
    expiry_date: Optional[date] = None
    is_active: bool
    remarks: Optional[str] = None
    steps: List[RoutingStepRead] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProcessRoutingCreate(BaseModel):
    product_id: UUID
    routing_code: str = Field(..., min_length=1, max_length=50)
    routing_name: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1, max_length=20)
    effective_date: date
    expiry_date: Optional[date] = None
    is_active: bool = True
    remarks: Optional[str] = None
    steps: List[RoutingStepIn] = Field(default_factory=list)


class ProcessRoutingUpdate(BaseModel):
    """Patch payload; `steps`, when given, replaces every step."""
    product_id: Optional[UUID] = None
    routing_code: Optional[str] = Field(None, min_length=1, max_length=50)
    routing_name: Optional[str] = None
    version: Optional[str] = Field(None, min_length=1, max_length=20)
    effective_date: Optional[date] = None
    expiry_date: Optional[date] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None
    steps: Optional[List[RoutingStepIn]] = None


class CopyVersionRequest(BaseModel):
    """Target version for a BOM or routing copy."""
    new_version: str = Field(..., min_length=1, max_length=20)
