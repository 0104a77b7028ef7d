from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import ADMIN_ROLES, get_session, get_tenant_id, require_roles
from mes_api.schemas.auth import (
    PermissionCreate,
    PermissionRead,
    PermissionUpdate,
    RoleCreate,
    RoleRead,
    RoleUpdate,
)
from mes_api.schemas.common import MessageResponse
from mes_api.services.security import PermissionService, RoleService

router = APIRouter(tags=["Roles"], dependencies=[Depends(require_roles(*ADMIN_ROLES))])

register_crud_routes(
    router,
    path="/roles",
    service_class=RoleService,
    read_model=RoleRead,
    create_model=RoleCreate,
    update_model=RoleUpdate,
    label="role",
    write_roles=ADMIN_ROLES,
    with_toggle=True,
)


# PUBLIC_INTERFACE
@router.get("/roles-active", response_model=List[RoleRead], summary="List active roles")
async def list_active_roles(
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[RoleRead]:
    return [RoleRead.model_validate(r) for r in await RoleService(session).find_active(tenant_id)]


# PUBLIC_INTERFACE
@router.get("/roles/{role_id}/permissions", response_model=List[PermissionRead], summary="List role permissions")
async def list_role_permissions(
    role_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[PermissionRead]:
    items = await RoleService(session).find_permissions(tenant_id, role_id)
    return [PermissionRead.model_validate(p) for p in items]


# PUBLIC_INTERFACE
@router.post(
    "/roles/{role_id}/permissions/{permission_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Grant permission to role",
)
async def assign_permission(
    role_id: UUID = Path(...),
    permission_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await RoleService(session).assign_permission(tenant_id, role_id, permission_id)
    return MessageResponse(message="Permission granted")


# PUBLIC_INTERFACE
@router.delete(
    "/roles/{role_id}/permissions/{permission_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke permission from role",
)
async def remove_permission(
    role_id: UUID = Path(...),
    permission_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> None:
    await RoleService(session).remove_permission(tenant_id, role_id, permission_id)


# PUBLIC_INTERFACE
@router.get("/permissions", response_model=List[PermissionRead], summary="List permissions")
async def list_permissions(
    module: str | None = None,
    session: AsyncSession = Depends(get_session),
) -> List[PermissionRead]:
    service = PermissionService(session)
    items = await (service.find_by_module(module) if module else service.find_all())
    return [PermissionRead.model_validate(p) for p in items]


# PUBLIC_INTERFACE
@router.get("/permissions/{permission_id}", response_model=PermissionRead, summary="Get permission")
async def get_permission(
    permission_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> PermissionRead:
    return PermissionRead.model_validate(await PermissionService(session).find_by_id(permission_id))


# PUBLIC_INTERFACE
@router.post(
    "/permissions",
    response_model=PermissionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create permission",
)
async def create_permission(
    payload: PermissionCreate,
    session: AsyncSession = Depends(get_session),
) -> PermissionRead:
    return PermissionRead.model_validate(await PermissionService(session).create(payload))


# PUBLIC_INTERFACE
@router.patch("/permissions/{permission_id}", response_model=PermissionRead, summary="Update permission")
async def update_permission(
    payload: PermissionUpdate,
    permission_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> PermissionRead:
    return PermissionRead.model_validate(await PermissionService(session).update(permission_id, payload))


# PUBLIC_INTERFACE
@router.delete("/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete permission")
async def delete_permission(
    permission_id: UUID = Path(...),
    session: AsyncSession = Depends(get_session),
) -> None:
    await PermissionService(session).delete(permission_id)
