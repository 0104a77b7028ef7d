"""
Reference data seeding.
"""

import pytest
from sqlalchemy import func, select

from mes_api.db.models import Permission, Product, Role, RolePermission, User, UserRole
from mes_api.db.seed import PERMISSIONS, ROLES, seed_tenant
from mes_api.services.security import AuthService


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.mark.asyncio
async def test_seed_is_idempotent(db_session):
    """Seeding twice creates each row exactly once."""
    await seed_tenant(db_session, "SEEDED", admin_password="admin123")
    await seed_tenant(db_session, "SEEDED", admin_password="other-password")

    assert await _count(db_session, Permission) == len(PERMISSIONS)
    assert await _count(db_session, Role) == len(ROLES)
    assert await _count(db_session, RolePermission) == len(PERMISSIONS)
    assert await _count(db_session, User) == 1
    assert await _count(db_session, UserRole) == 1
    assert await _count(db_session, Product) == 2


@pytest.mark.asyncio
async def test_seeded_admin_can_log_in(db_session):
    """The seeded admin authenticates with the configured password and holds ADMIN."""
    await seed_tenant(db_session, "SEEDED", admin_password="admin123")
    tokens = await AuthService(db_session).login("SEEDED", "admin", "admin123")
    assert tokens["access_token"]


@pytest.mark.asyncio
async def test_permissions_are_shared_between_seeded_tenants(db_session):
    """A second tenant reuses the global permission catalogue."""
    await seed_tenant(db_session, "NORTH", admin_password="admin123")
    await seed_tenant(db_session, "SOUTH", admin_password="admin123")
    assert await _count(db_session, Permission) == len(PERMISSIONS)
    assert await _count(db_session, Role) == 2 * len(ROLES)
