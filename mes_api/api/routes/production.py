from __future__ import annotations

from datetime import date, datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import OPERATOR_ROLES, get_current_active_user, get_session, get_tenant_id, require_roles
from mes_api.core.workflow import WorkOrderStatus
from mes_api.schemas.production import (
    WorkOrderCreate,
    WorkOrderRead,
    WorkOrderUpdate,
    WorkResultCreate,
    WorkResultRead,
    WorkResultUpdate,
)
from mes_api.services.production import WorkOrderService, WorkResultService

router = APIRouter(prefix="/production", tags=["Production"])

_read = [Depends(get_current_active_user)]
_operate = [Depends(require_roles(*OPERATOR_ROLES))]


# PUBLIC_INTERFACE
@router.get(
    "/work-orders/status/{status}",
    response_model=List[WorkOrderRead],
    summary="List work orders by status",
    dependencies=_read,
)
async def list_work_orders_by_status(
    status: WorkOrderStatus = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[WorkOrderRead]:
    items = await WorkOrderService(session).find_by_status(tenant_id, status)
    return [WorkOrderRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/work-orders/date-range",
    response_model=List[WorkOrderRead],
    summary="List work orders by planned start",
    description="Work orders whose planned start date falls within [start, end].",
    dependencies=_read,
)
async def list_work_orders_by_date_range(
    start: datetime = Query(...),
    end: datetime = Query(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[WorkOrderRead]:
    items = await WorkOrderService(session).find_by_date_range(tenant_id, start, end)
    return [WorkOrderRead.model_validate(x) for x in items]


register_crud_routes(
    router,
    path="/work-orders",
    service_class=WorkOrderService,
    read_model=WorkOrderRead,
    create_model=WorkOrderCreate,
    update_model=WorkOrderUpdate,
    label="work order",
)


def _transition_route(operation: str, summary: str):
    async def endpoint(
        item_id: UUID = Path(...),
        tenant_id: str = Depends(get_tenant_id),
        session: AsyncSession = Depends(get_session),
    ) -> WorkOrderRead:
        service = WorkOrderService(session)
        work_order = await getattr(service, operation)(tenant_id, item_id)
        return WorkOrderRead.model_validate(work_order)

    router.add_api_route(
        f"/work-orders/{{item_id}}/{operation}",
        endpoint,
        methods=["POST"],
        response_model=WorkOrderRead,
        summary=summary,
        dependencies=_operate,
        name=f"{operation}_work_order",
    )


_transition_route("ready", "Mark work order ready (PENDING -> READY)")
_transition_route("start", "Start work order (PENDING/READY -> IN_PROGRESS)")
_transition_route("complete", "Complete work order (IN_PROGRESS -> COMPLETED)")
_transition_route("cancel", "Cancel work order (any status except COMPLETED)")


# PUBLIC_INTERFACE
@router.get(
    "/work-orders/{item_id}/results",
    response_model=List[WorkResultRead],
    summary="List results of a work order",
    dependencies=_read,
)
async def list_results_of_work_order(
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[WorkResultRead]:
    items = await WorkResultService(session).find_by_work_order(tenant_id, item_id)
    return [WorkResultRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/work-orders/{item_id}/recompute",
    response_model=WorkOrderRead,
    summary="Recompute produced quantities",
    description="Rebuild actual/good/defect quantities from the order's current results.",
    dependencies=_operate,
)
async def recompute_work_order(
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> WorkOrderRead:
    work_order = await WorkResultService(session).recompute_work_order(tenant_id, item_id)
    return WorkOrderRead.model_validate(work_order)


# PUBLIC_INTERFACE
@router.get(
    "/work-results/worker/{worker_id}",
    response_model=List[WorkResultRead],
    summary="List results by worker",
    dependencies=_read,
)
async def list_results_by_worker(
    worker_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[WorkResultRead]:
    items = await WorkResultService(session).find_by_worker(tenant_id, worker_id)
    return [WorkResultRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/work-results/date-range",
    response_model=List[WorkResultRead],
    summary="List results by result date",
    dependencies=_read,
)
async def list_results_by_date_range(
    start: date = Query(...),
    end: date = Query(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[WorkResultRead]:
    items = await WorkResultService(session).find_by_date_range(tenant_id, start, end)
    return [WorkResultRead.model_validate(x) for x in items]


register_crud_routes(
    router,
    path="/work-results",
    service_class=WorkResultService,
    read_model=WorkResultRead,
    create_model=WorkResultCreate,
    update_model=WorkResultUpdate,
    label="work result",
    write_roles=OPERATOR_ROLES,
    with_code_lookup=False,
)


# PUBLIC_INTERFACE
@router.get(
    "/work-orders/{item_id}/results/count",
    response_model=int,
    summary="Count results of a work order",
    dependencies=_read,
)
async def count_results_of_work_order(
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> int:
    return await WorkResultService(session).count_by_work_order(tenant_id, item_id)
