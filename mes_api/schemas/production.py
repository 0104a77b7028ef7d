from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from mes_api.core.workflow import WorkOrderStatus


class WorkOrderRead(BaseModel):
    """Work order read model."""
    id: UUID = Field(..., description="Work order id")
    work_order_no: str = Field(..., description="Work order number")
    product_id: UUID
    process_id: UUID
    status: WorkOrderStatus
    planned_quantity: Decimal
    actual_quantity: Decimal = Field(..., description="Sum of result quantities")
    good_quantity: Decimal = Field(..., description="Sum of result good quantities")
    defect_quantity: Decimal = Field(..., description="Sum of result defect quantities")
    planned_start_date: datetime
    planned_end_date: datetime
    actual_start_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None
    priority: int
    assigned_user_id: Optional[UUID] = None
    remarks: Optional[str] = None
    created_at: datetime = Field(..., description="Created at")
    updated_at: datetime = Field(..., description="Updated at")

    class Config:
        from_attributes = True


class WorkOrderCreate(BaseModel):
    """Create work order payload. Status starts PENDING and produced quantities at 0."""
    work_order_no: str = Field(..., min_length=1, max_length=50)
    product_id: UUID
    process_id: UUID
    planned_quantity: Decimal = Field(..., gt=0)
    planned_start_date: datetime
    planned_end_date: datetime
    priority: int = Field(5, ge=1, le=10)
    assigned_user_id: Optional[UUID] = None
    remarks: Optional[str] = None


class WorkOrderUpdate(BaseModel):
    """Patch of planning fields."""
    product_id: Optional[UUID] = None
    process_id: Optional[UUID] = None
    planned_quantity: Optional[Decimal] = Field(None, gt=0)
    planned_start_date: Optional[datetime] = None
    planned_end_date: Optional[datetime] = None
    priority: Optional[int] = Field(None, ge=1, le=10)
    assigned_user_id: Optional[UUID] = None
    remarks: Optional[str] = None


class WorkResultRead(BaseModel):
    """Work result read model."""
    id: UUID
    work_order_id: UUID
    result_date: date
    quantity: Decimal
    good_quantity: Decimal
    defect_quantity: Decimal
    worker_id: Optional[UUID] = None
    work_start_time: Optional[datetime] = None
    work_end_time: Optional[datetime] = None
    defect_reason: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class WorkResultCreate(BaseModel):
    work_order_id: UUID
    result_date: date
    quantity: Decimal = Field(..., ge=0)
    good_quantity: Decimal = Field(..., ge=0)
    defect_quantity: Decimal = Field(Decimal("0"), ge=0)
    worker_id: Optional[UUID] = None
    work_start_time: Optional[datetime] = None
    work_end_time: Optional[datetime] = None
    defect_reason: Optional[str] = None
    remarks: Optional[str] = None


class WorkResultUpdate(BaseModel):
    """Patch payload; changing work_order_id moves the result to another order."""
    work_order_id: Optional[UUID] = None
    result_date: Optional[date] = None
    quantity: Optional[Decimal] = Field(None, ge=0)
    good_quantity: Optional[Decimal] = Field(None, ge=0)
    defect_quantity: Optional[Decimal] = Field(None, ge=0)
    worker_id: Optional[UUID] = None
    work_start_time: Optional[datetime] = None
    work_end_time: Optional[datetime] = None
    defect_reason: Optional[str] = None
    remarks: Optional[str] = None
