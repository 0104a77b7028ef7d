from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import MANAGER_ROLES, get_current_active_user, get_session, get_tenant_id, require_roles
from mes_api.schemas.inventory import LotCreate, LotRead, LotSplitRequest, LotUpdate, QualityStatusRequest
from mes_api.services.inventory import LotService

router = APIRouter(prefix="/inventory", tags=["Inventory"])


# PUBLIC_INTERFACE
@router.get(
    "/lots/quality-status/{quality_status}",
    response_model=List[LotRead],
    summary="List lots by quality status",
    dependencies=[Depends(get_current_active_user)],
)
async def list_lots_by_quality_status(
    quality_status: str = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[LotRead]:
    return [LotRead.model_validate(x) for x in await LotService(session).find_by_quality_status(tenant_id, quality_status)]


register_crud_routes(
    router,
    path="/lots",
    service_class=LotService,
    read_model=LotRead,
    create_model=LotCreate,
    update_model=LotUpdate,
    label="lot",
    with_toggle=True,
)


# PUBLIC_INTERFACE
@router.post(
    "/lots/{item_id}/quality-status",
    response_model=LotRead,
    summary="Set lot quality status",
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)
async def update_lot_quality_status(
    payload: QualityStatusRequest,
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> LotRead:
    lot = await LotService(session).update_quality_status(tenant_id, item_id, payload.quality_status)
    return LotRead.model_validate(lot)


# PUBLIC_INTERFACE
@router.post(
    "/lots/{item_id}/split",
    response_model=LotRead,
    status_code=status.HTTP_201_CREATED,
    summary="Split lot",
    description="Move part of a lot's quantity into a new child lot numbered <lot_no>-Snn.",
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)
async def split_lot(
    payload: LotSplitRequest,
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> LotRead:
    return LotRead.model_validate(await LotService(session).split(tenant_id, item_id, payload.quantity))
