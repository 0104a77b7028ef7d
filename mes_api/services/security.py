from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, List, Optional, Sequence

from jose import JWTError

from mes_api.core.errors import AlreadyExistsError, AuthenticationError, NotFoundError, ValidationError
from mes_api.core.security import REFRESH, decode_token, get_password_hash, issue_token_pair, verify_password
from mes_api.db.base import utcnow
from mes_api.db.models import Permission, Role, RolePermission, User
from mes_api.repositories.security import PermissionRepository, RoleRepository, UserRepository
from mes_api.services.audit import AuditLogService
from mes_api.services.base import BaseService, CrudService, Payload, apply_values, payload_values

logger = logging.getLogger(__name__)

USER_STATUSES = ("active", "inactive", "locked")


class UserService(CrudService[User]):
    """
    Tenant users. Passwords are hashed before storage; username is unique
    per tenant and email is unique across tenants.
    """

    repository_class = UserRepository
    entity_name = "User"

    def __init__(self, session) -> None:
        super().__init__(session)
        self.roles = RoleRepository(session)

    async def find_by_username(self, tenant_id: str, username: str) -> User:
        return await self.find_by_code(tenant_id, username)

    async def find_active(self, tenant_id: str) -> List[User]:
        return await self.repo.list_active(tenant_id)

    async def role_codes(self, user_id: uuid.UUID) -> List[str]:
        return [r.role_code for r in await self.roles.list_for_user(user_id)]

    async def _ensure_email_free(self, email: str) -> None:
        if await self.repo.get_by_email(email) is not None:
            raise AlreadyExistsError("User", email)

    async def _assign_roles(self, tenant_id: str, user_id: uuid.UUID, role_ids: Sequence[uuid.UUID]) -> None:
        for role_id in role_ids:
            if await self.roles.get(tenant_id, role_id) is None:
                raise NotFoundError("Role", role_id)
            await self.roles.assign_to_user(user_id, role_id)

    async def create(self, tenant_id: str, data: Payload) -> User:
        values = payload_values(data)
        password = values.pop("password")
        role_ids = values.pop("role_ids", None) or []
        async with self.transaction():
            await self._ensure_code_free(tenant_id, values["username"])
            await self._ensure_email_free(values["email"])
            if values.get("status") not in (None, *USER_STATUSES):
                raise ValidationError(f"Unknown user status: {values['status']}")
            values["status"] = values.get("status") or "active"
            user = User(tenant_id=tenant_id, password_hash=get_password_hash(password), **values)
            await self.repo.save(user)
            await self._assign_roles(tenant_id, user.id, role_ids)
        logger.info("Created user %s", user.username)
        return user

    async def _prepare_update(self, tenant_id: str, entity: User, values: Dict[str, Any]) -> Dict[str, Any]:
        values.pop("password", None)
        if values.get("email") and values["email"] != entity.email:
            await self._ensure_email_free(values["email"])
        if "status" in values and values["status"] not in USER_STATUSES:
            raise ValidationError(f"Unknown user status: {values['status']}")
        role_ids = values.pop("role_ids", None)
        if role_ids is not None:
            await self.roles.clear_user_roles(entity.id)
            await self._assign_roles(tenant_id, entity.id, role_ids)
        return values

    # PUBLIC_INTERFACE
    async def change_password(
        self, tenant_id: str, user_id: uuid.UUID, current_password: str, new_password: str
    ) -> None:
        """Replace the password after verifying the current one."""
        async with self.transaction():
            user = await self.find_by_id(tenant_id, user_id)
            if not verify_password(current_password, user.password_hash):
                logger.warning("Password change rejected for %s: current password mismatch", user.username)
                raise ValidationError("Current password is incorrect")
            user.password_hash = get_password_hash(new_password)
            await self.repo.save(user)
        logger.info("Password changed for %s", user.username)

    async def reset_password(self, tenant_id: str, user_id: uuid.UUID, new_password: str) -> None:
        """Administrative reset; no current password required."""
        async with self.transaction():
            user = await self.find_by_id(tenant_id, user_id)
            user.password_hash = get_password_hash(new_password)
            await self.repo.save(user)
        logger.info("Password reset for %s", user.username)

    async def _set_status(self, tenant_id: str, user_id: uuid.UUID, status: str) -> User:
        async with self.transaction():
            user = await self.find_by_id(tenant_id, user_id)
            user.status = status
            await self.repo.save(user)
        logger.info("User %s status -> %s", user.username, status)
        return user

    async def activate(self, tenant_id: str, user_id: uuid.UUID) -> User:
        return await self._set_status(tenant_id, user_id, "active")

    async def deactivate(self, tenant_id: str, user_id: uuid.UUID) -> User:
        return await self._set_status(tenant_id, user_id, "inactive")

    async def record_last_login(self, tenant_id: str, user_id: uuid.UUID) -> User:
        async with self.transaction():
            user = await self.find_by_id(tenant_id, user_id)
            user.last_login_at = utcnow()
            await self.repo.save(user)
        return user


class RoleService(CrudService[Role]):
    """Roles and their permission mappings."""

    repository_class = RoleRepository
    entity_name = "Role"

    def __init__(self, session) -> None:
        super().__init__(session)
        self.permissions = PermissionRepository(session)

    async def find_active(self, tenant_id: str) -> List[Role]:
        return await self.repo.list_active(tenant_id)

    async def find_permissions(self, tenant_id: str, role_id: uuid.UUID) -> List[Permission]:
        await self.find_by_id(tenant_id, role_id)
        return await self.permissions.list_for_role(role_id)

    async def _load_pair(self, tenant_id: str, role_id: uuid.UUID, permission_id: uuid.UUID):
        role = await self.find_by_id(tenant_id, role_id)
        permission = await self.permissions.get(permission_id)
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return role, permission

    async def assign_permission(self, tenant_id: str, role_id: uuid.UUID, permission_id: uuid.UUID) -> None:
        async with self.transaction():
            role, permission = await self._load_pair(tenant_id, role_id, permission_id)
            if await self.permissions.get_mapping(role_id, permission_id) is not None:
                raise AlreadyExistsError("RolePermission", f"{role.role_code}:{permission.permission_code}")
            await self.permissions.save(RolePermission(role_id=role_id, permission_id=permission_id))
        logger.info("Granted %s to role %s", permission.permission_code, role.role_code)

    async def remove_permission(self, tenant_id: str, role_id: uuid.UUID, permission_id: uuid.UUID) -> None:
        async with self.transaction():
            role, permission = await self._load_pair(tenant_id, role_id, permission_id)
            mapping = await self.permissions.get_mapping(role_id, permission_id)
            if mapping is None:
                raise NotFoundError("RolePermission", f"{role.role_code}:{permission.permission_code}")
            await self.permissions.delete(mapping)
        logger.info("Revoked %s from role %s", permission.permission_code, role.role_code)

    async def delete(self, tenant_id: str, entity_id: uuid.UUID) -> None:
        async with self.transaction():
            role = await self.find_by_id(tenant_id, entity_id)
            await self.repo.remove_mappings(role.id)
            await self.repo.delete(role)
        logger.info("Deleted role %s", entity_id)


class PermissionService(BaseService):
    """Permission catalogue shared by all tenants."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = PermissionRepository(session)

    async def find_all(self) -> List[Permission]:
        return await self.repo.list_all()

    async def find_by_module(self, module: str) -> List[Permission]:
        return await self.repo.list_by_module(module)

    async def find_by_id(self, permission_id: uuid.UUID) -> Permission:
        permission = await self.repo.get(permission_id)
        if permission is None:
            raise NotFoundError("Permission", permission_id)
        return permission

    async def find_by_code(self, code: str) -> Permission:
        permission = await self.repo.get_by_code(code)
        if permission is None:
            raise NotFoundError("Permission", code)
        return permission

    async def create(self, data: Payload) -> Permission:
        values = payload_values(data)
        async with self.transaction():
            if await self.repo.get_by_code(values["permission_code"]) is not None:
                raise AlreadyExistsError("Permission", values["permission_code"])
            permission = await self.repo.save(Permission(**values))
        logger.info("Created permission %s", permission.permission_code)
        return permission

    async def update(self, permission_id: uuid.UUID, data: Payload) -> Permission:
        values = payload_values(data, partial=True)
        async with self.transaction():
            permission = await self.find_by_id(permission_id)
            code = values.get("permission_code")
            if code and code != permission.permission_code and await self.repo.get_by_code(code) is not None:
                raise AlreadyExistsError("Permission", code)
            apply_values(permission, values)
            await self.repo.save(permission)
        return permission

    async def delete(self, permission_id: uuid.UUID) -> None:
        async with self.transaction():
            permission = await self.find_by_id(permission_id)
            await self.repo.delete(permission)
        logger.info("Deleted permission %s", permission_id)


class AuthService(BaseService):
    """
    Credential verification and token issuance.

    The tenant id arrives with every call; tokens carry it as a claim and
    refresh only succeeds for the tenant the token was issued to.
    """

    def __init__(self, session) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)
        self.audit = AuditLogService(session)

    async def _issue(self, tenant_id: str, user: User) -> Dict[str, str]:
        roles = [r.role_code for r in await self.roles.list_for_user(user.id)]
        return issue_token_pair(str(user.id), tenant_id, roles)

    # PUBLIC_INTERFACE
    async def login(
        self,
        tenant_id: str,
        username: str,
        password: str,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Verify credentials, stamp last_login_at and return an access/refresh pair.

        Failed attempts are written to the audit log before AuthenticationError
        is raised.
        """
        user = await self.users.get_by_code(tenant_id, username)
        reason = None
        if user is None or not verify_password(password, user.password_hash):
            reason = "Invalid username or password"
        elif user.status != "active":
            reason = f"User is {user.status}"
        if reason is not None:
            logger.warning("Login failed for %s: %s", username, reason)
            await self.audit.record(
                tenant_id,
                action="LOGIN",
                username=username,
                user_id=user.id if user is not None else None,
                success=False,
                error_message=reason,
                ip_address=ip_address,
                user_agent=user_agent,
            )
            raise AuthenticationError(reason)

        async with self.transaction():
            user.last_login_at = utcnow()
            await self.users.save(user)
        await self.audit.record(
            tenant_id,
            action="LOGIN",
            username=user.username,
            user_id=user.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("User %s logged in", user.username)
        return await self._issue(tenant_id, user)

    # PUBLIC_INTERFACE
    async def refresh(self, tenant_id: str, refresh_token: str) -> Dict[str, str]:
        """Issue a new token pair from a valid refresh token of an active user."""
        try:
            claims = decode_token(refresh_token, expected_type=REFRESH)
        except JWTError:
            raise AuthenticationError("Invalid refresh token")
        if str(claims.get("tenant_id")) != tenant_id:
            raise AuthenticationError("Tenant mismatch")
        try:
            user_id = uuid.UUID(str(claims.get("sub")))
        except ValueError:
            raise AuthenticationError("Invalid refresh token")
        user = await self.users.get(tenant_id, user_id)
        if user is None or user.status != "active":
            raise AuthenticationError("User not found or inactive")
        return await self._issue(tenant_id, user)
