from __future__ import annotations

import uuid
from typing import Any, Generic, Iterable, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import Executable, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository:
    """
    Base class for repositories providing common helpers.

    Repositories flush but never commit; the calling service owns the
    transaction boundary.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)

    async def flush(self) -> None:
        """Send pending changes to the database without committing."""
        await self.session.flush()


class TenantRepository(BaseRepository, Generic[ModelT]):
    """
    Generic data access for a tenant-owned model.

    Subclasses set `model`, and `code_field` when the entity has a business
    key unique per tenant. Every query is filtered on the tenant id passed in.
    """

    model: Type[ModelT]
    code_field: Optional[str] = None
    default_order: Sequence[str] = ("created_at",)

    def _select(self, tenant_id: str):
        return select(self.model).where(self.model.tenant_id == tenant_id)

    def _ordering(self):
        return [getattr(self.model, name) for name in self.default_order]

    async def list_by_tenant(self, tenant_id: str) -> List[ModelT]:
        """All rows of the tenant in the default order."""
        stmt = self._select(tenant_id).order_by(*self._ordering())
        return list(await self.scalars(stmt))

    async def list_where(self, tenant_id: str, *criteria: Any, order_by: Any = None) -> List[ModelT]:
        """Rows of the tenant matching additional criteria."""
        stmt = self._select(tenant_id).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(*(order_by if isinstance(order_by, (list, tuple)) else [order_by]))
        else:
            stmt = stmt.order_by(*self._ordering())
        return list(await self.scalars(stmt))

    async def get(self, tenant_id: str, entity_id: uuid.UUID) -> Optional[ModelT]:
        """Fetch by id within the tenant; None when absent or owned by another tenant."""
        stmt = self._select(tenant_id).where(self.model.id == entity_id)
        return await self.scalar_one_or_none(stmt)

    async def get_by_code(self, tenant_id: str, code: str) -> Optional[ModelT]:
        """Fetch by business key within the tenant."""
        if self.code_field is None:
            raise NotImplementedError(f"{self.model.__name__} has no business key")
        stmt = self._select(tenant_id).where(getattr(self.model, self.code_field) == code)
        return await self.scalar_one_or_none(stmt)

    async def exists_by_code(self, tenant_id: str, code: str) -> bool:
        """True when a row with the business key exists in the tenant."""
        return await self.get_by_code(tenant_id, code) is not None

    async def count(self, tenant_id: str, *criteria: Any) -> int:
        stmt = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.tenant_id == tenant_id, *criteria)
        )
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def save(self, entity: ModelT) -> ModelT:
        """Add (if new) and flush so generated values are populated."""
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.session.delete(entity)
        await self.session.flush()
