from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LotRead(BaseModel):
    """Lot read model."""
    id: UUID
    lot_no: str
    product_id: UUID
    lot_type: Optional[str] = None
    initial_quantity: Decimal
    current_quantity: Decimal
    reserved_quantity: Decimal
    unit: str
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    quality_status: str
    supplier_id: Optional[UUID] = None
    supplier_lot_no: Optional[str] = None
    work_order_id: Optional[UUID] = None
    parent_lot_id: Optional[UUID] = None
    is_active: bool
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class LotCreate(BaseModel):
    lot_no: str = Field(..., min_length=1, max_length=100)
    product_id: UUID
    lot_type: Optional[str] = Field(None, description="RAW | WIP | FINISHED")
    initial_quantity: Decimal = Field(..., ge=0)
    current_quantity: Optional[Decimal] = Field(None, ge=0, description="Defaults to initial_quantity")
    unit: str = Field("EA")
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    quality_status: Optional[str] = Field(None, description="Defaults to PENDING")
    supplier_id: Optional[UUID] = None
    supplier_lot_no: Optional[str] = None
    work_order_id: Optional[UUID] = None
    remarks: Optional[str] = None


class LotUpdate(BaseModel):
    lot_type: Optional[str] = None
    current_quantity: Optional[Decimal] = Field(None, ge=0)
    reserved_quantity: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = None
    manufacturing_date: Optional[date] = None
    expiry_date: Optional[date] = None
    supplier_lot_no: Optional[str] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class LotSplitRequest(BaseModel):
    quantity: Decimal = Field(..., description="Quantity moved to the new child lot")


class QualityStatusRequest(BaseModel):
    quality_status: str = Field(..., description="PENDING | PASSED | FAILED | HOLD")
