from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select

from mes_api.db.models import Permission, Role, RolePermission, User, UserRole
from mes_api.repositories.base import BaseRepository, TenantRepository


class UserRepository(TenantRepository[User]):
    """Users within a tenant; username is the business key."""
    model = User
    code_field = "username"
    default_order = ("username",)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Email is unique across tenants."""
        return await self.scalar_one_or_none(select(User).where(User.email == email))

    async def list_active(self, tenant_id: str) -> List[User]:
        return await self.list_where(tenant_id, User.status == "active")


class RoleRepository(TenantRepository[Role]):
    model = Role
    code_field = "role_code"
    default_order = ("role_code",)

    async def list_active(self, tenant_id: str) -> List[Role]:
        return await self.list_where(tenant_id, Role.is_active.is_(True))

    async def list_for_user(self, user_id: uuid.UUID) -> List[Role]:
        """Roles assigned to a user."""
        stmt = (
            select(Role)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.role_code)
        )
        return list(await self.scalars(stmt))

    async def assign_to_user(self, user_id: uuid.UUID, role_id: uuid.UUID) -> None:
        existing = await self.scalar_one_or_none(
            select(UserRole).where(UserRole.user_id == user_id, UserRole.role_id == role_id)
        )
        if existing is None:
            self.session.add(UserRole(user_id=user_id, role_id=role_id))
            await self.session.flush()

    async def clear_user_roles(self, user_id: uuid.UUID) -> None:
        await self.execute(delete(UserRole).where(UserRole.user_id == user_id))

    async def remove_mappings(self, role_id: uuid.UUID) -> None:
        """Drop every user and permission mapping of a role."""
        await self.execute(delete(UserRole).where(UserRole.role_id == role_id))
        await self.execute(delete(RolePermission).where(RolePermission.role_id == role_id))


class PermissionRepository(BaseRepository):
    """Permissions are shared by all tenants."""

    async def list_all(self) -> List[Permission]:
        return list(await self.scalars(select(Permission).order_by(Permission.module, Permission.permission_code)))

    async def get(self, permission_id: uuid.UUID) -> Optional[Permission]:
        return await self.scalar_one_or_none(select(Permission).where(Permission.id == permission_id))

    async def get_by_code(self, code: str) -> Optional[Permission]:
        return await self.scalar_one_or_none(select(Permission).where(Permission.permission_code == code))

    async def list_by_module(self, module: str) -> List[Permission]:
        stmt = select(Permission).where(Permission.module == module).order_by(Permission.permission_code)
        return list(await self.scalars(stmt))

    async def list_for_role(self, role_id: uuid.UUID) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role_id == role_id)
            .order_by(Permission.permission_code)
        )
        return list(await self.scalars(stmt))

    async def get_mapping(self, role_id: uuid.UUID, permission_id: uuid.UUID) -> Optional[RolePermission]:
        stmt = select(RolePermission).where(
            RolePermission.role_id == role_id, RolePermission.permission_id == permission_id
        )
        return await self.scalar_one_or_none(stmt)

    async def count(self) -> int:
        result = await self.execute(select(func.count()).select_from(Permission))
        return int(result.scalar_one())

    async def save(self, entity):
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity) -> None:
        await self.session.delete(entity)
        await self.session.flush()
