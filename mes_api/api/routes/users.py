from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import ADMIN_ROLES, get_session, get_tenant_id, require_roles
from mes_api.schemas.auth import ResetPasswordRequest, UserCreate, UserRead, UserUpdate
from mes_api.schemas.common import MessageResponse
from mes_api.services.security import UserService

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    dependencies=[Depends(require_roles(*ADMIN_ROLES))],
)


async def _to_read(service: UserService, user) -> UserRead:
    roles = await service.role_codes(user.id)
    return UserRead.model_validate(user).model_copy(update={"roles": roles})


# PUBLIC_INTERFACE
@router.get("", response_model=List[UserRead], summary="List users", description="List users of the tenant.")
async def list_users(
    active_only: bool = False,
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[UserRead]:
    service = UserService(session)
    users = await (service.find_active(tenant_id) if active_only else service.find_by_tenant(tenant_id))
    return [await _to_read(service, u) for u in users]


# PUBLIC_INTERFACE
@router.get("/username/{username}", response_model=UserRead, summary="Get user by username")
async def get_user_by_username(
    username: str = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.find_by_username(tenant_id, username))


# PUBLIC_INTERFACE
@router.get("/{user_id}", response_model=UserRead, summary="Get user")
async def get_user(
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.find_by_id(tenant_id, user_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
    description="Create a user. Username must be unique in the tenant and email globally.",
)
async def create_user(
    payload: UserCreate,
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.create(tenant_id, payload))


# PUBLIC_INTERFACE
@router.patch("/{user_id}", response_model=UserRead, summary="Update user")
async def update_user(
    payload: UserUpdate,
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.update(tenant_id, user_id, payload))


# PUBLIC_INTERFACE
@router.post("/{user_id}/activate", response_model=UserRead, summary="Activate user")
async def activate_user(
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.activate(tenant_id, user_id))


# PUBLIC_INTERFACE
@router.post("/{user_id}/deactivate", response_model=UserRead, summary="Deactivate user")
async def deactivate_user(
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    service = UserService(session)
    return await _to_read(service, await service.deactivate(tenant_id, user_id))


# PUBLIC_INTERFACE
@router.post("/{user_id}/reset-password", response_model=MessageResponse, summary="Reset password")
async def reset_password(
    payload: ResetPasswordRequest,
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await UserService(session).reset_password(tenant_id, user_id, payload.new_password)
    return MessageResponse(message="Password reset")


# PUBLIC_INTERFACE
@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete user")
async def delete_user(
    user_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> None:
    await UserService(session).delete(tenant_id, user_id)
