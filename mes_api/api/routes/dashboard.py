from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import get_current_active_user, get_session, get_tenant_id
from mes_api.schemas.audit import (
    LoginTrendPoint,
    ProductionSummary,
    RoleDistribution,
    TenantStats,
    UserStatusCounts,
)
from mes_api.services.dashboard import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(get_current_active_user)],
)


# PUBLIC_INTERFACE
@router.get("/stats", response_model=TenantStats, summary="Tenant headline statistics")
async def tenant_stats(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> TenantStats:
    return TenantStats(**await DashboardService(session).tenant_stats(tenant_id))


# PUBLIC_INTERFACE
@router.get("/user-status", response_model=UserStatusCounts, summary="Users per status")
async def user_status_counts(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserStatusCounts:
    return UserStatusCounts(**await DashboardService(session).user_status_counts(tenant_id))


# PUBLIC_INTERFACE
@router.get(
    "/login-trend",
    response_model=List[LoginTrendPoint],
    summary="Daily successful logins",
    description="One point per day, oldest first; days without logins report zero.",
)
async def login_trend(
    days: int = Query(7, ge=1, le=90),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[LoginTrendPoint]:
    return [LoginTrendPoint(**p) for p in await DashboardService(session).login_trend(tenant_id, days)]


# PUBLIC_INTERFACE
@router.get("/role-distribution", response_model=List[RoleDistribution], summary="Users per role")
async def role_distribution(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[RoleDistribution]:
    return [RoleDistribution(**r) for r in await DashboardService(session).role_distribution(tenant_id)]


# PUBLIC_INTERFACE
@router.get("/production-summary", response_model=ProductionSummary, summary="Work order totals")
async def production_summary(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> ProductionSummary:
    return ProductionSummary(**await DashboardService(session).production_summary(tenant_id))
