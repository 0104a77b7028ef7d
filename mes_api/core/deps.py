from __future__ import annotations

import logging
from typing import AsyncGenerator
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.logging import tenant_id_var
from mes_api.core.security import ACCESS, decode_token
from mes_api.db.session import get_async_session
from mes_api.repositories.security import RoleRepository, UserRepository

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# PUBLIC_INTERFACE
async def get_tenant_id(x_tenant_id: str | None = Header(default=None, alias="X-Tenant-ID")) -> str:
    """
    Extract the tenant id from the X-Tenant-ID header.

    Raises:
        HTTPException: 400 Bad Request if the header is missing or blank.
    Returns:
        str: tenant identifier
    """
    if not x_tenant_id or not x_tenant_id.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Tenant-ID header is required.",
        )
    tenant_id = x_tenant_id.strip()
    tenant_id_var.set(tenant_id)
    return tenant_id


# PUBLIC_INTERFACE
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield the request-scoped AsyncSession."""
    async for session in get_async_session():
        yield session


# PUBLIC_INTERFACE
async def get_current_user(
    tenant_id: str = Depends(get_tenant_id),
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session),
):
    """
    Resolve and return the current user from the Authorization bearer token.

    Validates the token, ensures the tenant claim matches the incoming tenant
    header, and loads the user within that tenant.
    """
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    tok_tenant = payload.get("tenant_id")
    if not tok_tenant or str(tok_tenant) != tenant_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Tenant mismatch")

    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    user = await UserRepository(session).get(tenant_id, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


# PUBLIC_INTERFACE
async def get_current_active_user(user=Depends(get_current_user)):
    """Ensure user is active."""
    if user.status != "active":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """
    Create a dependency that requires the current user to hold at least one
    of the given role codes.
    """

    async def _dep(user=Depends(get_current_active_user), session: AsyncSession = Depends(get_session)):
        role_codes = {r.role_code for r in await RoleRepository(session).list_for_user(user.id)}
        if role_codes.isdisjoint(required):
            logger.warning("User %s lacks roles %s", user.username, ",".join(required))
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return _dep


# Role code groups used by the routers.
ADMIN_ROLES = ("ADMIN",)
MANAGER_ROLES = ("ADMIN", "MANAGER")
OPERATOR_ROLES = ("ADMIN", "MANAGER", "OPERATOR")
