from __future__ import annotations

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from mes_api.core.workflow import InspectionActionStatus


class EquipmentRead(BaseModel):
    """Equipment read model."""
    id: UUID
    equipment_code: str
    equipment_name: str
    equipment_type: Optional[str] = None
    site_id: Optional[UUID] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    install_date: Optional[date] = None
    location: Optional[str] = None
    status: str
    is_active: bool
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EquipmentCreate(BaseModel):
    equipment_code: str = Field(..., min_length=1, max_length=50)
    equipment_name: str = Field(..., min_length=1)
    equipment_type: Optional[str] = None
    site_id: Optional[UUID] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    install_date: Optional[date] = None
    location: Optional[str] = None
    status: str = Field("OPERATIONAL")
    is_active: bool = True
    remarks: Optional[str] = None


class EquipmentUpdate(BaseModel):
    equipment_code: Optional[str] = Field(None, min_length=1, max_length=50)
    equipment_name: Optional[str] = None
    equipment_type: Optional[str] = None
    site_id: Optional[UUID] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    install_date: Optional[date] = None
    location: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None
    remarks: Optional[str] = None


class InspectionRead(BaseModel):
    id: UUID
    equipment_id: UUID
    inspection_no: str
    inspection_type: str
    inspection_date: date
    inspector_user_id: Optional[UUID] = None
    result: Optional[str] = None
    findings: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InspectionCreate(BaseModel):
    equipment_id: UUID
    inspection_no: str = Field(..., min_length=1, max_length=50)
    inspection_type: str = Field(..., description="DAILY | PERIODIC | SPECIAL")
    inspection_date: date
    inspector_user_id: Optional[UUID] = None
    result: Optional[str] = Field(None, description="PASS | FAIL | CONDITIONAL")
    findings: Optional[str] = None
    remarks: Optional[str] = None


class InspectionUpdate(BaseModel):
    equipment_id: Optional[UUID] = None
    inspection_type: Optional[str] = None
    inspection_date: Optional[date] = None
    inspector_user_id: Optional[UUID] = None
    result: Optional[str] = None
    findings: Optional[str] = None
    remarks: Optional[str] = None


class InspectionActionRead(BaseModel):
    id: UUID
    inspection_id: UUID
    description: str
    status: InspectionActionStatus
    assigned_user_id: Optional[UUID] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    result: Optional[str] = None
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class InspectionActionCreate(BaseModel):
    """New actions always start OPEN."""
    inspection_id: UUID
    description: str = Field(..., min_length=1)
    assigned_user_id: Optional[UUID] = None
    due_date: Optional[date] = None
    remarks: Optional[str] = None


class InspectionActionUpdate(BaseModel):
    """Patch payload; a supplied status must be a forward move (or the current one)."""
    description: Optional[str] = None
    status: Optional[InspectionActionStatus] = None
    assigned_user_id: Optional[UUID] = None
    due_date: Optional[date] = None
    completed_date: Optional[date] = None
    result: Optional[str] = None
    remarks: Optional[str] = None


class GaugeRead(BaseModel):
    id: UUID
    gauge_code: str
    gauge_name: str
    gauge_type: Optional[str] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    measurement_range: Optional[str] = None
    accuracy: Optional[str] = None
    calibration_cycle_days: Optional[int] = None
    last_calibration_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    calibration_status: str
    department_id: Optional[UUID] = None
    location: Optional[str] = None
    status: str
    remarks: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class GaugeCreate(BaseModel):
    gauge_code: str = Field(..., min_length=1, max_length=50)
    gauge_name: str = Field(..., min_length=1)
    gauge_type: Optional[str] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    measurement_range: Optional[str] = None
    accuracy: Optional[str] = None
    calibration_cycle_days: Optional[int] = Field(None, gt=0)
    last_calibration_date: Optional[date] = None
    next_calibration_date: Optional[date] = None
    department_id: Optional[UUID] = None
    location: Optional[str] = None
    remarks: Optional[str] = None


class GaugeUpdate(BaseModel):
    gauge_code: Optional[str] = Field(None, min_length=1, max_length=50)
    gauge_name: Optional[str] = None
    gauge_type: Optional[str] = None
    manufacturer: Optional[str] = None
    model_name: Optional[str] = None
    serial_no: Optional[str] = None
    measurement_range: Optional[str] = None
    accuracy: Optional[str] = None
    calibration_cycle_days: Optional[int] = Field(None, gt=0)
    next_calibration_date: Optional[date] = None
    calibration_status: Optional[str] = None
    department_id: Optional[UUID] = None
    location: Optional[str] = None
    status: Optional[str] = None
    remarks: Optional[str] = None


class CalibrationRecord(BaseModel):
    calibrated_on: date = Field(..., description="Date the calibration was performed")
