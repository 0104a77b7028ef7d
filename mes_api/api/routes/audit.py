from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import ADMIN_ROLES, get_session, get_tenant_id, require_roles
from mes_api.db.base import utcnow
from mes_api.schemas.audit import ActionCount, AuditLogPage, AuditLogRead, UserActivityCount
from mes_api.services.audit import AuditLogService

router = APIRouter(
    prefix="/audit-logs",
    tags=["Audit"],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)


def _window(start: Optional[datetime], end: Optional[datetime]):
    end = end or utcnow()
    return start or end - timedelta(days=30), end


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=AuditLogPage,
    summary="Search audit log",
    description="Filter by user, action, entity type, outcome and time window. Newest entries first.",
)
async def search_audit_logs(
    user_id: Optional[UUID] = Query(None),
    action: Optional[str] = Query(None),
    entity_type: Optional[str] = Query(None),
    success: Optional[bool] = Query(None),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> AuditLogPage:
    page = await AuditLogService(session).search(
        tenant_id,
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        success=success,
        start=start,
        end=end,
        limit=limit,
        offset=offset,
    )
    return AuditLogPage(
        items=[AuditLogRead.model_validate(x) for x in page["items"]],
        total=page["total"],
        limit=page["limit"],
        offset=page["offset"],
    )


# PUBLIC_INTERFACE
@router.get(
    "/stats/actions",
    response_model=List[ActionCount],
    summary="Audit entries per action",
    description="Defaults to the last 30 days when no window is given.",
)
async def audit_action_statistics(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[ActionCount]:
    start, end = _window(start, end)
    rows = await AuditLogService(session).action_statistics(tenant_id, start, end)
    return [ActionCount(**r) for r in rows]


# PUBLIC_INTERFACE
@router.get(
    "/stats/users",
    response_model=List[UserActivityCount],
    summary="Audit entries per user",
)
async def audit_user_statistics(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[UserActivityCount]:
    start, end = _window(start, end)
    rows = await AuditLogService(session).user_statistics(tenant_id, start, end)
    return [UserActivityCount(**r) for r in rows]


# PUBLIC_INTERFACE
@router.get("/{log_id}", response_model=AuditLogRead, summary="Get audit entry")
async def get_audit_log(
    log_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> AuditLogRead:
    return AuditLogRead.model_validate(await AuditLogService(session).find_by_id(tenant_id, log_id))
