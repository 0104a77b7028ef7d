"""
Shared fixtures: an in-memory SQLite database per test, a session bound to
it, two tenants, master-data factories and an HTTP client whose requests run
against the same session.
"""

import os

os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("AUTO_SEED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable, Dict, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from mes_api.api.main import app
from mes_api.core.deps import get_session
from mes_api.core.security import create_access_token, get_password_hash
from mes_api.core.workflow import WorkOrderStatus
from mes_api.db import models
from mes_api.db.base import Base
from mes_api.db.session import make_session_maker
from mes_api.repositories.security import RoleRepository

TENANT = "ACME"
OTHER_TENANT = "GLOBEX"


async def _persist(session: AsyncSession, entity):
    session.add(entity)
    await session.commit()
    return entity


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    """Session with both test tenants already present."""
    async with make_session_maker(engine)() as session:
        session.add_all(
            [
                models.Tenant(tenant_id=TENANT, tenant_name="Acme Manufacturing"),
                models.Tenant(tenant_id=OTHER_TENANT, tenant_name="Globex"),
            ]
        )
        await session.commit()
        yield session


# --- master data ---


@pytest_asyncio.fixture
async def product(db_session: AsyncSession) -> models.Product:
    return await _persist(
        db_session,
        models.Product(
            tenant_id=TENANT, product_code="FG-100", product_name="Widget", product_type="FINISHED", unit="EA"
        ),
    )


@pytest_asyncio.fixture
async def material(db_session: AsyncSession) -> models.Product:
    return await _persist(
        db_session,
        models.Product(
            tenant_id=TENANT, product_code="RM-100", product_name="Aluminum Rod", product_type="RAW", unit="KG"
        ),
    )


@pytest_asyncio.fixture
async def process(db_session: AsyncSession) -> models.Process:
    return await _persist(
        db_session,
        models.Process(tenant_id=TENANT, process_code="P-MILL", process_name="Milling"),
    )


@pytest.fixture
def work_order_factory(
    db_session: AsyncSession, product: models.Product, process: models.Process
) -> Callable[..., Awaitable[models.WorkOrder]]:
    """Insert work orders directly, bypassing the service defaults."""

    async def _create(work_order_no: str = "WO-001", **kwargs) -> models.WorkOrder:
        values = {
            "tenant_id": TENANT,
            "work_order_no": work_order_no,
            "product_id": product.id,
            "process_id": process.id,
            "status": WorkOrderStatus.PENDING,
            "planned_quantity": Decimal("100"),
            "planned_start_date": datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc),
            "planned_end_date": datetime(2026, 3, 2, 17, 0, tzinfo=timezone.utc),
            **kwargs,
        }
        return await _persist(db_session, models.WorkOrder(**values))

    return _create


@pytest_asyncio.fixture
async def work_order(work_order_factory) -> models.WorkOrder:
    return await work_order_factory()


# --- security ---


@pytest_asyncio.fixture
async def roles(db_session: AsyncSession) -> Dict[str, models.Role]:
    result = {}
    for code, name in (("ADMIN", "Administrator"), ("MANAGER", "Manager"), ("OPERATOR", "Operator")):
        result[code] = await _persist(db_session, models.Role(tenant_id=TENANT, role_code=code, role_name=name))
    return result


@pytest.fixture
def user_factory(
    db_session: AsyncSession, roles: Dict[str, models.Role]
) -> Callable[..., Awaitable[models.User]]:
    """Create a user in TENANT holding the given role codes."""

    async def _create(
        username: str, password: str = "secret123", role_codes: Sequence[str] = (), **kwargs
    ) -> models.User:
        user = await _persist(
            db_session,
            models.User(
                tenant_id=TENANT,
                username=username,
                email=f"{username}@acme.test",
                password_hash=get_password_hash(password),
                status=kwargs.pop("status", "active"),
                **kwargs,
            ),
        )
        repo = RoleRepository(db_session)
        for code in role_codes:
            await repo.assign_to_user(user.id, roles[code].id)
        await db_session.commit()
        return user

    return _create


@pytest_asyncio.fixture
async def admin_user(user_factory) -> models.User:
    return await user_factory("admin", "admin123", role_codes=["ADMIN"])


@pytest_asyncio.fixture
async def operator_user(user_factory) -> models.User:
    return await user_factory("operator", "operator123", role_codes=["OPERATOR"])


# --- HTTP ---


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Client sending the ACME tenant header; endpoints share the test session."""

    async def _override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-Tenant-ID": TENANT}) as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(user: models.User, tenant_id: str = TENANT) -> Dict[str, str]:
    token = create_access_token(subject=str(user.id), tenant_id=tenant_id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def admin_headers(admin_user: models.User) -> Dict[str, str]:
    return bearer(admin_user)


@pytest_asyncio.fixture
async def operator_headers(operator_user: models.User) -> Dict[str, str]:
    return bearer(operator_user)


TODAY = date(2026, 3, 1)
