from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AuditLogRead(BaseModel):
    """Audit entry read model."""
    id: UUID
    user_id: Optional[UUID] = None
    username: Optional[str] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    description: Optional[str] = None
    old_value: Optional[Dict[str, Any]] = None
    new_value: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    success: bool
    error_message: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogPage(BaseModel):
    items: List[AuditLogRead]
    total: int = Field(..., description="Total matching entries")
    limit: int
    offset: int


class ActionCount(BaseModel):
    action: str
    count: int


class UserActivityCount(BaseModel):
    username: Optional[str] = None
    count: int


class TenantStats(BaseModel):
    """Headline numbers for the admin dashboard."""
    total_users: int
    active_users: int
    total_roles: int
    total_permissions: int
    today_logins: int
    active_sessions: int = Field(..., description="Users who logged in within the last 30 minutes")


class UserStatusCounts(BaseModel):
    active: int
    inactive: int
    locked: int


class LoginTrendPoint(BaseModel):
    login_date: date
    count: int


class RoleDistribution(BaseModel):
    role_code: str
    role_name: str
    user_count: int


class ProductionSummary(BaseModel):
    work_orders_by_status: Dict[str, int]
    total_good_quantity: Decimal
    total_defect_quantity: Decimal
