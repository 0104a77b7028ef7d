from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import ADMIN_ROLES, get_current_active_user, get_session, get_tenant_id
from mes_api.schemas.organization import (
    DepartmentCreate,
    DepartmentRead,
    DepartmentUpdate,
    SiteCreate,
    SiteRead,
    SiteUpdate,
)
from mes_api.services.organization import DepartmentService, SiteService

router = APIRouter(tags=["Organization"])


# PUBLIC_INTERFACE
@router.get(
    "/sites/type/{site_type}",
    response_model=List[SiteRead],
    summary="List sites by type",
    dependencies=[Depends(get_current_active_user)],
)
async def list_sites_by_type(
    site_type: str = Path(..., description="FACTORY | WAREHOUSE | OFFICE"),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[SiteRead]:
    return [SiteRead.model_validate(s) for s in await SiteService(session).find_by_type(tenant_id, site_type)]


register_crud_routes(
    router,
    path="/sites",
    service_class=SiteService,
    read_model=SiteRead,
    create_model=SiteCreate,
    update_model=SiteUpdate,
    label="site",
    write_roles=ADMIN_ROLES,
    with_toggle=True,
)
register_crud_routes(
    router,
    path="/departments",
    service_class=DepartmentService,
    read_model=DepartmentRead,
    create_model=DepartmentCreate,
    update_model=DepartmentUpdate,
    label="department",
    write_roles=ADMIN_ROLES,
    with_toggle=True,
)
