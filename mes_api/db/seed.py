"""
Database seeding utilities for minimal reference data.

Seeds:
- Default tenant
- ADMIN / MANAGER / OPERATOR roles
- Base permissions, all granted to ADMIN
- Admin user (password from DEFAULT_ADMIN_PASSWORD)
- Sample product and process

Every step looks up what already exists first, so running the seed twice
leaves the database unchanged.

Usage:
  python -m mes_api.db.run_migrations upgrade head
  python -m mes_api.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.security import get_password_hash
from mes_api.core.settings import get_app_settings
from mes_api.db.models import Permission, Process, Product, Role, RolePermission, Tenant, User
from mes_api.db.session import get_async_session
from mes_api.repositories.master_data import ProcessRepository, ProductRepository
from mes_api.repositories.security import PermissionRepository, RoleRepository, UserRepository

logger = logging.getLogger(__name__)

ROLES: List[Tuple[str, str, str]] = [
    ("ADMIN", "Administrator", "Full access to every module"),
    ("MANAGER", "Production Manager", "Maintains master data and plans production"),
    ("OPERATOR", "Operator", "Executes work orders and reports results"),
]

PERMISSIONS: List[Tuple[str, str, str]] = [
    ("USER_MANAGE", "Manage users", "ADMIN"),
    ("ROLE_MANAGE", "Manage roles", "ADMIN"),
    ("AUDIT_VIEW", "View audit log", "ADMIN"),
    ("MASTER_VIEW", "View master data", "MASTER_DATA"),
    ("MASTER_MANAGE", "Manage master data", "MASTER_DATA"),
    ("PRODUCTION_VIEW", "View production", "PRODUCTION"),
    ("PRODUCTION_MANAGE", "Manage production", "PRODUCTION"),
    ("INVENTORY_VIEW", "View inventory", "INVENTORY"),
    ("INVENTORY_MANAGE", "Manage inventory", "INVENTORY"),
    ("EQUIPMENT_VIEW", "View equipment", "EQUIPMENT"),
    ("EQUIPMENT_MANAGE", "Manage equipment", "EQUIPMENT"),
    ("REPORT_VIEW", "Export reports", "REPORTS"),
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """Seed the configured default tenant using a fresh session."""
    settings = get_app_settings()
    async for session in get_async_session():
        await seed_tenant(session, settings.DEFAULT_TENANT_ID, admin_password=settings.DEFAULT_ADMIN_PASSWORD)


# PUBLIC_INTERFACE
async def seed_tenant(session: AsyncSession, tenant_id: str, *, admin_password: str) -> None:
    """
    Create the reference data for one tenant and commit.

    Parameters:
        session: open AsyncSession
        tenant_id: tenant to create or complete
        admin_password: plain password given to a newly created admin user
    """
    await _ensure_tenant(session, tenant_id)
    permissions = await _seed_permissions(session)
    roles = await _seed_roles(session, tenant_id)
    await _grant_all(session, roles["ADMIN"], permissions)
    await _seed_admin(session, tenant_id, roles["ADMIN"], admin_password)
    await _seed_master_data(session, tenant_id)
    await session.commit()
    logger.info("Seeded tenant %s", tenant_id)


async def _ensure_tenant(session: AsyncSession, tenant_id: str) -> None:
    if await session.get(Tenant, tenant_id) is None:
        session.add(Tenant(tenant_id=tenant_id, tenant_name=f"{tenant_id.title()} Tenant", status="active"))
        await session.flush()


async def _seed_permissions(session: AsyncSession) -> List[Permission]:
    repo = PermissionRepository(session)
    result: List[Permission] = []
    for code, name, module in PERMISSIONS:
        permission = await repo.get_by_code(code)
        if permission is None:
            permission = await repo.save(Permission(permission_code=code, permission_name=name, module=module))
        result.append(permission)
    return result


async def _seed_roles(session: AsyncSession, tenant_id: str) -> Dict[str, Role]:
    repo = RoleRepository(session)
    roles: Dict[str, Role] = {}
    for code, name, description in ROLES:
        role = await repo.get_by_code(tenant_id, code)
        if role is None:
            role = await repo.save(
                Role(tenant_id=tenant_id, role_code=code, role_name=name, description=description, is_active=True)
            )
        roles[code] = role
    return roles


async def _grant_all(session: AsyncSession, role: Role, permissions: List[Permission]) -> None:
    repo = PermissionRepository(session)
    for permission in permissions:
        if await repo.get_mapping(role.id, permission.id) is None:
            session.add(RolePermission(role_id=role.id, permission_id=permission.id))
    await session.flush()


async def _seed_admin(session: AsyncSession, tenant_id: str, admin_role: Role, password: str) -> None:
    users = UserRepository(session)
    admin = await users.get_by_code(tenant_id, "admin")
    if admin is None:
        admin = await users.save(
            User(
                tenant_id=tenant_id,
                username="admin",
                email=f"admin@{tenant_id.lower()}.local",
                full_name="System Administrator",
                password_hash=get_password_hash(password),
                status="active",
            )
        )
    roles = RoleRepository(session)
    if admin_role.id not in {r.id for r in await roles.list_for_user(admin.id)}:
        await roles.assign_to_user(admin.id, admin_role.id)


async def _seed_master_data(session: AsyncSession, tenant_id: str) -> None:
    products = ProductRepository(session)
    if not await products.exists_by_code(tenant_id, "FG-100"):
        await products.save(
            Product(
                tenant_id=tenant_id,
                product_code="FG-100",
                product_name="Sample Widget",
                product_type="FINISHED",
                unit="EA",
            )
        )
    if not await products.exists_by_code(tenant_id, "RM-100"):
        await products.save(
            Product(
                tenant_id=tenant_id,
                product_code="RM-100",
                product_name="Aluminum Rod",
                product_type="RAW",
                unit="KG",
            )
        )
    processes = ProcessRepository(session)
    if not await processes.exists_by_code(tenant_id, "P-MILL"):
        await processes.save(
            Process(tenant_id=tenant_id, process_code="P-MILL", process_name="Milling", process_type="MACHINING")
        )


# PUBLIC_INTERFACE
def main() -> None:
    """Entrypoint to run the asynchronous seeding."""
    asyncio.run(seed_all())


if __name__ == "__main__":
    main()
