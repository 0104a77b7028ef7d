from __future__ import annotations

import uuid
from typing import List, Optional

from mes_api.db.models import Bom, Process, ProcessRouting, Product
from mes_api.repositories.base import TenantRepository


class ProductRepository(TenantRepository[Product]):
    model = Product
    code_field = "product_code"
    default_order = ("product_code",)

    async def list_by_type(self, tenant_id: str, product_type: str) -> List[Product]:
        return await self.list_where(tenant_id, Product.product_type == product_type)


class ProcessRepository(TenantRepository[Process]):
    model = Process
    code_field = "process_code"
    default_order = ("sort_order", "process_code")


class VersionedDocumentRepository(TenantRepository):
    """
    Documents keyed by (code, version) within a tenant. Children are loaded
    with the header through the selectin relationship.

    Version labels are opaque strings, so versions are ordered by creation
    time rather than by label ("10" sorts before "9" as text).
    """

    code_field: str
    default_order = ("created_at", "version")

    async def get_by_code_and_version(self, tenant_id: str, code: str, version: str):
        stmt = self._select(tenant_id).where(
            getattr(self.model, self.code_field) == code, self.model.version == version
        )
        return await self.scalar_one_or_none(stmt)

    async def exists_by_code_and_version(self, tenant_id: str, code: str, version: str) -> bool:
        return await self.get_by_code_and_version(tenant_id, code, version) is not None

    async def list_versions(self, tenant_id: str, code: str) -> list:
        """All versions of a document code, oldest first."""
        return await self.list_where(tenant_id, getattr(self.model, self.code_field) == code)

    async def list_by_product(self, tenant_id: str, product_id: uuid.UUID) -> list:
        return await self.list_where(
            tenant_id,
            self.model.product_id == product_id,
            order_by=[getattr(self.model, self.code_field), self.model.created_at],
        )

    async def get_by_code(self, tenant_id: str, code: str) -> Optional[object]:
        """Most recently created active version of a code, if any."""
        versions = [doc for doc in await self.list_versions(tenant_id, code) if doc.is_active]
        return versions[-1] if versions else None


class BomRepository(VersionedDocumentRepository):
    model = Bom
    code_field = "bom_code"


class ProcessRoutingRepository(VersionedDocumentRepository):
    model = ProcessRouting
    code_field = "routing_code"
