from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import get_current_active_user, get_session, get_tenant_id
from mes_api.schemas.auth import ChangePasswordRequest, RefreshRequest, TokenPair, UserRead
from mes_api.schemas.common import MessageResponse
from mes_api.services.security import AuthService, UserService

router = APIRouter(prefix="/auth", tags=["Auth"])


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate with the OAuth2 password form (username within the tenant) and receive tokens.",
)
async def login_for_tokens(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    """Authenticate user and issue tokens."""
    tokens = await AuthService(session).login(
        tenant_id,
        form_data.username,
        form_data.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )
    return TokenPair(**tokens)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> TokenPair:
    return TokenPair(**await AuthService(session).refresh(tenant_id, payload.refresh_token))


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Stateless logout. Clients should discard tokens. No server state maintained.",
)
async def logout() -> MessageResponse:
    return MessageResponse(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user and their role codes.",
)
async def read_current_user(
    user=Depends(get_current_active_user),
    session: AsyncSession = Depends(get_session),
) -> UserRead:
    roles = await UserService(session).role_codes(user.id)
    return UserRead.model_validate(user).model_copy(update={"roles": roles})


# PUBLIC_INTERFACE
@router.post(
    "/change-password",
    response_model=MessageResponse,
    summary="Change own password",
    description="Change the current user's password; the current password must match.",
)
async def change_password(
    payload: ChangePasswordRequest,
    user=Depends(get_current_active_user),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await UserService(session).change_password(
        tenant_id, user.id, payload.current_password, payload.new_password
    )
    return MessageResponse(message="Password changed")
