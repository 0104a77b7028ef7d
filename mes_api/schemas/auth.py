from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class TokenPair(BaseModel):
    """Access and refresh tokens."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class RefreshRequest(BaseModel):
    """Request to refresh an access token."""
    refresh_token: str = Field(..., description="Refresh token")


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., description="Current password")
    new_password: str = Field(..., min_length=6, description="New password")


class ResetPasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6, description="New password")


class UserRead(BaseModel):
    """User read model."""
    id: UUID
    username: str
    email: str
    full_name: Optional[str] = None
    status: str = Field(..., description="active | inactive | locked")
    department_id: Optional[UUID] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    roles: List[str] = Field(default_factory=list, description="Assigned role codes")

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    """Create user payload."""
    username: str = Field(..., min_length=1, max_length=100)
    email: EmailStr = Field(..., description="User email (unique)")
    password: str = Field(..., min_length=6, description="Plain password; stored hashed")
    full_name: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    status: Optional[str] = Field(None, description="Defaults to active")
    role_ids: Optional[List[UUID]] = Field(None, description="Roles to assign")


class UserUpdate(BaseModel):
    """Patch user payload; only supplied fields change."""
    email: Optional[EmailStr] = Field(None)
    full_name: Optional[str] = Field(None)
    department_id: Optional[UUID] = Field(None)
    status: Optional[str] = Field(None)
    role_ids: Optional[List[UUID]] = Field(None, description="Replaces the user's roles when given")


class RoleRead(BaseModel):
    id: UUID
    role_code: str
    role_name: str
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoleCreate(BaseModel):
    role_code: str = Field(..., min_length=1, max_length=50)
    role_name: str = Field(..., min_length=1)
    description: Optional[str] = Field(None)
    is_active: bool = Field(True)


class RoleUpdate(BaseModel):
    role_code: Optional[str] = Field(None, min_length=1, max_length=50)
    role_name: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
    is_active: Optional[bool] = Field(None)


class PermissionRead(BaseModel):
    id: UUID
    permission_code: str
    permission_name: str
    module: Optional[str] = None
    description: Optional[str] = None

    class Config:
        from_attributes = True


class PermissionCreate(BaseModel):
    permission_code: str = Field(..., min_length=1, max_length=100)
    permission_name: str = Field(..., min_length=1)
    module: Optional[str] = Field(None)
    description: Optional[str] = Field(None)


class PermissionUpdate(BaseModel):
    permission_code: Optional[str] = Field(None, min_length=1, max_length=100)
    permission_name: Optional[str] = Field(None)
    module: Optional[str] = Field(None)
    description: Optional[str] = Field(None)
