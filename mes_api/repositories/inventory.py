from __future__ import annotations

import uuid
from typing import List

from mes_api.db.models import Lot
from mes_api.repositories.base import TenantRepository


class LotRepository(TenantRepository[Lot]):
    model = Lot
    code_field = "lot_no"
    default_order = ("lot_no",)

    async def list_by_quality_status(self, tenant_id: str, quality_status: str) -> List[Lot]:
        return await self.list_where(tenant_id, Lot.quality_status == quality_status)

    async def list_by_product(self, tenant_id: str, product_id: uuid.UUID) -> List[Lot]:
        return await self.list_where(tenant_id, Lot.product_id == product_id)

    async def list_children(self, tenant_id: str, parent_lot_id: uuid.UUID) -> List[Lot]:
        return await self.list_where(tenant_id, Lot.parent_lot_id == parent_lot_id)
