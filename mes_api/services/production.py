from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List

from mes_api.core.errors import InvalidStateError, NotFoundError
from mes_api.core.workflow import WorkOrderOperation, WorkOrderStatus, next_work_order_status
from mes_api.db.base import utcnow
from mes_api.db.models import WorkOrder, WorkResult
from mes_api.repositories.master_data import ProcessRepository, ProductRepository
from mes_api.repositories.production import WorkOrderRepository, WorkResultRepository
from mes_api.repositories.security import UserRepository
from mes_api.services.base import CrudService, Payload, apply_values, payload_values

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class WorkOrderService(CrudService[WorkOrder]):
    """
    Work order lifecycle.

    Orders are created PENDING with zero produced quantities and move through
    ready/start/complete/cancel. Produced quantities are owned by
    WorkResultService and never accepted from callers here.
    """

    repository_class = WorkOrderRepository
    entity_name = "WorkOrder"
    # Written only by the recomputation or the status operations.
    _protected_fields = frozenset(
        {"status", "actual_quantity", "good_quantity", "defect_quantity", "actual_start_date", "actual_end_date"}
    )

    async def _check_references(self, tenant_id: str, values: Dict[str, Any]) -> None:
        if values.get("product_id") is not None:
            if await ProductRepository(self.session).get(tenant_id, values["product_id"]) is None:
                raise NotFoundError("Product", values["product_id"])
        if values.get("process_id") is not None:
            if await ProcessRepository(self.session).get(tenant_id, values["process_id"]) is None:
                raise NotFoundError("Process", values["process_id"])
        if values.get("assigned_user_id") is not None:
            if await UserRepository(self.session).get(tenant_id, values["assigned_user_id"]) is None:
                raise NotFoundError("User", values["assigned_user_id"])

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        await self._check_references(tenant_id, values)
        values = {k: v for k, v in values.items() if k not in self._protected_fields}
        values.update(
            status=WorkOrderStatus.PENDING,
            actual_quantity=ZERO,
            good_quantity=ZERO,
            defect_quantity=ZERO,
        )
        return values

    async def _prepare_update(self, tenant_id: str, entity: WorkOrder, values: Dict[str, Any]) -> Dict[str, Any]:
        """Only planning fields are patchable; status and produced quantities are dropped."""
        values = {k: v for k, v in values.items() if k not in self._protected_fields}
        await self._check_references(tenant_id, values)
        return values

    async def find_by_status(self, tenant_id: str, status: WorkOrderStatus) -> List[WorkOrder]:
        return await self.repo.list_by_status(tenant_id, WorkOrderStatus(status))

    async def find_by_date_range(self, tenant_id: str, start: datetime, end: datetime) -> List[WorkOrder]:
        return await self.repo.list_by_planned_start(tenant_id, start, end)

    async def _apply(self, tenant_id: str, work_order_id: uuid.UUID, operation: WorkOrderOperation) -> WorkOrder:
        async with self.transaction():
            work_order = await self.find_by_id(tenant_id, work_order_id)
            try:
                target = next_work_order_status(work_order.status, operation)
            except InvalidStateError:
                logger.warning(
                    "Rejected %s on work order %s in status %s",
                    operation.value, work_order.work_order_no, work_order.status.value,
                )
                raise
            previous = work_order.status
            work_order.status = target
            if operation is WorkOrderOperation.START:
                work_order.actual_start_date = utcnow()
            elif operation is WorkOrderOperation.COMPLETE:
                work_order.actual_end_date = utcnow()
            await self.repo.save(work_order)
        logger.info(
            "Work order %s %s -> %s", work_order.work_order_no, previous.value, target.value
        )
        return work_order

    # PUBLIC_INTERFACE
    async def ready(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        """PENDING -> READY."""
        return await self._apply(tenant_id, work_order_id, WorkOrderOperation.READY)

    # PUBLIC_INTERFACE
    async def start(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        """PENDING/READY -> IN_PROGRESS; stamps actual_start_date."""
        return await self._apply(tenant_id, work_order_id, WorkOrderOperation.START)

    # PUBLIC_INTERFACE
    async def complete(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        """IN_PROGRESS -> COMPLETED; stamps actual_end_date."""
        return await self._apply(tenant_id, work_order_id, WorkOrderOperation.COMPLETE)

    # PUBLIC_INTERFACE
    async def cancel(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        """Any status except COMPLETED -> CANCELLED."""
        return await self._apply(tenant_id, work_order_id, WorkOrderOperation.CANCEL)


class WorkResultService(CrudService[WorkResult]):
    """
    Production results reported against work orders.

    Every create, update and delete recomputes the parent work order's
    actual/good/defect quantities from all of its results in the same
    transaction as the result write.
    """

    repository_class = WorkResultRepository
    entity_name = "WorkResult"

    def __init__(self, session) -> None:
        super().__init__(session)
        self.work_orders = WorkOrderRepository(session)

    async def _recompute(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        work_order = await self.work_orders.get(tenant_id, work_order_id)
        if work_order is None:
            raise NotFoundError("WorkOrder", work_order_id)
        await self.repo.flush()
        results = await self.repo.list_by_work_order(tenant_id, work_order_id)
        work_order.actual_quantity = sum((Decimal(r.quantity) for r in results), ZERO)
        work_order.good_quantity = sum((Decimal(r.good_quantity) for r in results), ZERO)
        work_order.defect_quantity = sum((Decimal(r.defect_quantity) for r in results), ZERO)
        await self.work_orders.save(work_order)
        logger.info(
            "Recomputed work order %s from %d results: actual=%s good=%s defect=%s",
            work_order.work_order_no, len(results),
            work_order.actual_quantity, work_order.good_quantity, work_order.defect_quantity,
        )
        return work_order

    # PUBLIC_INTERFACE
    async def recompute_work_order(self, tenant_id: str, work_order_id: uuid.UUID) -> WorkOrder:
        """Rebuild a work order's produced quantities from its current results."""
        async with self.transaction():
            return await self._recompute(tenant_id, work_order_id)

    async def create(self, tenant_id: str, data: Payload) -> WorkResult:
        values = payload_values(data)
        async with self.transaction():
            if await self.work_orders.get(tenant_id, values["work_order_id"]) is None:
                raise NotFoundError("WorkOrder", values["work_order_id"])
            values.setdefault("defect_quantity", ZERO)
            if values["defect_quantity"] is None:
                values["defect_quantity"] = ZERO
            result = WorkResult(tenant_id=tenant_id, **values)
            await self.repo.save(result)
            await self._recompute(tenant_id, result.work_order_id)
        logger.info("Created work result %s for work order %s", result.id, result.work_order_id)
        return result

    async def update(self, tenant_id: str, entity_id: uuid.UUID, data: Payload) -> WorkResult:
        values = payload_values(data, partial=True)
        async with self.transaction():
            result = await self.find_by_id(tenant_id, entity_id)
            previous_order_id = result.work_order_id
            new_order_id = values.get("work_order_id") or previous_order_id
            if new_order_id != previous_order_id and await self.work_orders.get(tenant_id, new_order_id) is None:
                raise NotFoundError("WorkOrder", new_order_id)
            apply_values(result, values)
            await self.repo.save(result)
            await self._recompute(tenant_id, new_order_id)
            if new_order_id != previous_order_id:
                await self._recompute(tenant_id, previous_order_id)
        logger.info("Updated work result %s", entity_id)
        return result

    async def delete(self, tenant_id: str, entity_id: uuid.UUID) -> None:
        async with self.transaction():
            result = await self.find_by_id(tenant_id, entity_id)
            work_order_id = result.work_order_id
            await self.repo.delete(result)
            await self._recompute(tenant_id, work_order_id)
        logger.info("Deleted work result %s", entity_id)

    async def find_by_work_order(self, tenant_id: str, work_order_id: uuid.UUID) -> List[WorkResult]:
        return await self.repo.list_by_work_order(tenant_id, work_order_id)

    async def find_by_worker(self, tenant_id: str, worker_id: uuid.UUID) -> List[WorkResult]:
        return await self.repo.list_by_worker(tenant_id, worker_id)

    async def find_by_date_range(self, tenant_id: str, start: date, end: date) -> List[WorkResult]:
        return await self.repo.list_by_result_date(tenant_id, start, end)

    async def count_by_work_order(self, tenant_id: str, work_order_id: uuid.UUID) -> int:
        return await self.repo.count_by_work_order(tenant_id, work_order_id)
