from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Generic, List, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.errors import AlreadyExistsError, NotFoundError
from mes_api.repositories.base import TenantRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")
Payload = Union[BaseModel, Mapping[str, Any]]


def payload_values(data: Payload, *, partial: bool = False) -> Dict[str, Any]:
    """
    Plain dict from a request payload.

    With partial=True only the fields the caller actually sent are returned,
    so an explicit null can be told apart from an omitted field.
    """
    if isinstance(data, BaseModel):
        return data.model_dump(exclude_unset=partial)
    return dict(data)


def apply_values(entity: Any, values: Mapping[str, Any]) -> None:
    """
    Copy patch values onto an entity. An explicit null clears a nullable
    column and is ignored for a NOT NULL one.
    """
    columns = entity.__table__.columns
    for key, value in values.items():
        if value is None and key in columns and not columns[key].nullable:
            continue
        setattr(entity, key, value)


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services keep business logic and orchestration, delegating data access to
    repositories. Every mutating operation runs inside `transaction()`.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Commit on success; roll back and re-raise on any error."""
        try:
            yield self.session
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise


class CrudService(BaseService, Generic[ModelT]):
    """
    find/create/update/delete for a tenant-owned entity with a business key.

    Subclasses set `repository_class` and `entity_name`, and may override
    `_prepare_create` and `_prepare_update` to validate or fill values.
    """

    repository_class: Type[TenantRepository]
    entity_name: str = "Entity"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = self.repository_class(session)

    @property
    def code_field(self) -> Optional[str]:
        return self.repo.code_field

    async def find_by_tenant(self, tenant_id: str) -> List[ModelT]:
        return await self.repo.list_by_tenant(tenant_id)

    async def find_by_id(self, tenant_id: str, entity_id: uuid.UUID) -> ModelT:
        entity = await self.repo.get(tenant_id, entity_id)
        if entity is None:
            raise NotFoundError(self.entity_name, entity_id)
        return entity

    async def find_by_code(self, tenant_id: str, code: str) -> ModelT:
        entity = await self.repo.get_by_code(tenant_id, code)
        if entity is None:
            raise NotFoundError(self.entity_name, code)
        return entity

    async def _ensure_code_free(self, tenant_id: str, code: Any) -> None:
        if await self.repo.exists_by_code(tenant_id, code):
            logger.warning("%s already exists: %s", self.entity_name, code)
            raise AlreadyExistsError(self.entity_name, code)

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    async def create(self, tenant_id: str, data: Payload) -> ModelT:
        values = payload_values(data)
        async with self.transaction():
            if self.code_field is not None:
                await self._ensure_code_free(tenant_id, values[self.code_field])
            values = await self._prepare_create(tenant_id, values)
            entity = self.repo.model(tenant_id=tenant_id, **values)
            await self.repo.save(entity)
        logger.info("Created %s %s", self.entity_name, entity.id)
        return entity

    async def _prepare_update(self, tenant_id: str, entity: ModelT, values: Dict[str, Any]) -> Dict[str, Any]:
        return values

    async def update(self, tenant_id: str, entity_id: uuid.UUID, data: Payload) -> ModelT:
        values = payload_values(data, partial=True)
        async with self.transaction():
            entity = await self.find_by_id(tenant_id, entity_id)
            values = await self._prepare_update(tenant_id, entity, values)
            code_field = self.code_field
            if code_field is not None and code_field in values and values[code_field] != getattr(entity, code_field):
                await self._ensure_code_free(tenant_id, values[code_field])
            apply_values(entity, values)
            await self.repo.save(entity)
        logger.info("Updated %s %s", self.entity_name, entity_id)
        return entity

    async def delete(self, tenant_id: str, entity_id: uuid.UUID) -> None:
        async with self.transaction():
            entity = await self.find_by_id(tenant_id, entity_id)
            await self.repo.delete(entity)
        logger.info("Deleted %s %s", self.entity_name, entity_id)

    async def toggle_active(self, tenant_id: str, entity_id: uuid.UUID) -> ModelT:
        """Flip `is_active`."""
        async with self.transaction():
            entity = await self.find_by_id(tenant_id, entity_id)
            entity.is_active = not entity.is_active
            await self.repo.save(entity)
        logger.info("Toggled %s %s active=%s", self.entity_name, entity_id, entity.is_active)
        return entity
