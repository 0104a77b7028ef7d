from __future__ import annotations

import logging
import uuid
from decimal import Decimal
from typing import Any, Dict, List

from mes_api.core.errors import NotFoundError, ValidationError
from mes_api.db.models import Lot
from mes_api.repositories.inventory import LotRepository
from mes_api.repositories.master_data import ProductRepository
from mes_api.services.base import CrudService

logger = logging.getLogger(__name__)

QUALITY_STATUSES = ("PENDING", "PASSED", "FAILED", "HOLD")
MAX_SPLITS = 99


class LotService(CrudService[Lot]):
    """Lot master with quality status tracking and lot splitting."""

    repository_class = LotRepository
    entity_name = "Lot"

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        if await ProductRepository(self.session).get(tenant_id, values["product_id"]) is None:
            raise NotFoundError("Product", values["product_id"])
        if values.get("current_quantity") is None:
            values["current_quantity"] = values["initial_quantity"]
        values["quality_status"] = values.get("quality_status") or "PENDING"
        return values

    async def find_by_lot_no(self, tenant_id: str, lot_no: str) -> Lot:
        return await self.find_by_code(tenant_id, lot_no)

    async def find_by_quality_status(self, tenant_id: str, quality_status: str) -> List[Lot]:
        return await self.repo.list_by_quality_status(tenant_id, quality_status)

    async def update_quality_status(self, tenant_id: str, lot_id: uuid.UUID, quality_status: str) -> Lot:
        if quality_status not in QUALITY_STATUSES:
            raise ValidationError(f"Unknown quality status: {quality_status}")
        async with self.transaction():
            lot = await self.find_by_id(tenant_id, lot_id)
            lot.quality_status = quality_status
            await self.repo.save(lot)
        logger.info("Lot %s quality status -> %s", lot.lot_no, quality_status)
        return lot

    # PUBLIC_INTERFACE
    async def split(self, tenant_id: str, lot_id: uuid.UUID, quantity: Decimal) -> Lot:
        """
        Move `quantity` out of a lot into a new child lot.

        The child is numbered <lot_no>-S01, -S02, ... using the first free
        suffix and inherits product, unit, dates and quality status.

        Raises:
            ValidationError: quantity not strictly between 0 and the current quantity.
        """
        quantity = Decimal(quantity)
        async with self.transaction():
            parent = await self.find_by_id(tenant_id, lot_id)
            if quantity <= 0 or quantity >= parent.current_quantity:
                raise ValidationError(
                    f"Split quantity must be greater than 0 and less than {parent.current_quantity}",
                    details={"quantity": str(quantity), "current_quantity": str(parent.current_quantity)},
                )
            child_no = None
            for n in range(1, MAX_SPLITS + 1):
                candidate = f"{parent.lot_no}-S{n:02d}"
                if not await self.repo.exists_by_code(tenant_id, candidate):
                    child_no = candidate
                    break
            if child_no is None:
                raise ValidationError(f"Lot {parent.lot_no} has no free split suffix")
            child = Lot(
                tenant_id=tenant_id,
                lot_no=child_no,
                product_id=parent.product_id,
                lot_type=parent.lot_type,
                initial_quantity=quantity,
                current_quantity=quantity,
                unit=parent.unit,
                manufacturing_date=parent.manufacturing_date,
                expiry_date=parent.expiry_date,
                quality_status=parent.quality_status,
                supplier_id=parent.supplier_id,
                supplier_lot_no=parent.supplier_lot_no,
                work_order_id=parent.work_order_id,
                parent_lot_id=parent.id,
            )
            parent.current_quantity = Decimal(parent.current_quantity) - quantity
            await self.repo.save(parent)
            await self.repo.save(child)
        logger.info("Split lot %s into %s (%s)", parent.lot_no, child_no, quantity)
        return child
