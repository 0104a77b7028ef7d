from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Dict, List

from sqlalchemy import func, select

from mes_api.core.workflow import WorkOrderStatus
from mes_api.db.models import WorkOrder, WorkResult
from mes_api.repositories.base import TenantRepository


class WorkOrderRepository(TenantRepository[WorkOrder]):
    model = WorkOrder
    code_field = "work_order_no"
    default_order = ("planned_start_date", "work_order_no")

    async def list_by_status(self, tenant_id: str, status: WorkOrderStatus) -> List[WorkOrder]:
        return await self.list_where(tenant_id, WorkOrder.status == status)

    async def list_by_planned_start(self, tenant_id: str, start: datetime, end: datetime) -> List[WorkOrder]:
        """Orders whose planned start falls within [start, end]."""
        return await self.list_where(
            tenant_id,
            WorkOrder.planned_start_date >= start,
            WorkOrder.planned_start_date <= end,
        )

    async def count_by_status(self, tenant_id: str) -> Dict[str, int]:
        stmt = (
            select(WorkOrder.status, func.count())
            .where(WorkOrder.tenant_id == tenant_id)
            .group_by(WorkOrder.status)
        )
        result = await self.execute(stmt)
        return {WorkOrderStatus(status).value: int(n) for status, n in result.all()}


class WorkResultRepository(TenantRepository[WorkResult]):
    model = WorkResult
    default_order = ("result_date", "created_at")

    async def list_by_work_order(self, tenant_id: str, work_order_id: uuid.UUID) -> List[WorkResult]:
        return await self.list_where(tenant_id, WorkResult.work_order_id == work_order_id)

    async def list_by_worker(self, tenant_id: str, worker_id: uuid.UUID) -> List[WorkResult]:
        return await self.list_where(tenant_id, WorkResult.worker_id == worker_id)

    async def list_by_result_date(self, tenant_id: str, start: date, end: date) -> List[WorkResult]:
        return await self.list_where(
            tenant_id, WorkResult.result_date >= start, WorkResult.result_date <= end
        )

    async def count_by_work_order(self, tenant_id: str, work_order_id: uuid.UUID) -> int:
        return await self.count(tenant_id, WorkResult.work_order_id == work_order_id)
