from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import (
    MANAGER_ROLES,
    OPERATOR_ROLES,
    get_current_active_user,
    get_session,
    get_tenant_id,
    require_roles,
)
from mes_api.core.workflow import InspectionActionStatus
from mes_api.schemas.equipment import (
    CalibrationRecord,
    EquipmentCreate,
    EquipmentRead,
    EquipmentUpdate,
    GaugeCreate,
    GaugeRead,
    GaugeUpdate,
    InspectionActionCreate,
    InspectionActionRead,
    InspectionActionUpdate,
    InspectionCreate,
    InspectionRead,
    InspectionUpdate,
)
from mes_api.services.equipment import (
    EquipmentInspectionService,
    EquipmentService,
    GaugeService,
    InspectionActionService,
)

router = APIRouter(prefix="/equipment", tags=["Equipment"])

_read = [Depends(get_current_active_user)]

register_crud_routes(
    router,
    path="/equipments",
    service_class=EquipmentService,
    read_model=EquipmentRead,
    create_model=EquipmentCreate,
    update_model=EquipmentUpdate,
    label="equipment",
    with_toggle=True,
)


# PUBLIC_INTERFACE
@router.get(
    "/equipments/{item_id}/inspections",
    response_model=List[InspectionRead],
    summary="List inspections of an equipment",
    dependencies=_read,
)
async def list_inspections_of_equipment(
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[InspectionRead]:
    items = await EquipmentInspectionService(session).find_by_equipment(tenant_id, item_id)
    return [InspectionRead.model_validate(x) for x in items]


register_crud_routes(
    router,
    path="/inspections",
    service_class=EquipmentInspectionService,
    read_model=InspectionRead,
    create_model=InspectionCreate,
    update_model=InspectionUpdate,
    label="inspection",
    write_roles=OPERATOR_ROLES,
)


# PUBLIC_INTERFACE
@router.get(
    "/inspections/{item_id}/actions",
    response_model=List[InspectionActionRead],
    summary="List actions of an inspection",
    dependencies=_read,
)
async def list_actions_of_inspection(
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[InspectionActionRead]:
    items = await InspectionActionService(session).find_by_inspection(tenant_id, item_id)
    return [InspectionActionRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/inspection-actions/status/{status}",
    response_model=List[InspectionActionRead],
    summary="List inspection actions by status",
    dependencies=_read,
)
async def list_actions_by_status(
    status: InspectionActionStatus = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[InspectionActionRead]:
    items = await InspectionActionService(session).find_by_status(tenant_id, status)
    return [InspectionActionRead.model_validate(x) for x in items]


register_crud_routes(
    router,
    path="/inspection-actions",
    service_class=InspectionActionService,
    read_model=InspectionActionRead,
    create_model=InspectionActionCreate,
    update_model=InspectionActionUpdate,
    label="inspection action",
    write_roles=OPERATOR_ROLES,
    with_code_lookup=False,
)


# PUBLIC_INTERFACE
@router.get(
    "/gauges/calibration-due",
    response_model=List[GaugeRead],
    summary="List gauges due for calibration",
    description="Active gauges whose next calibration date is on or before `on` (default today).",
    dependencies=_read,
)
async def list_gauges_calibration_due(
    on: Optional[date] = Query(None),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[GaugeRead]:
    items = await GaugeService(session).find_calibration_due(tenant_id, on or date.today())
    return [GaugeRead.model_validate(x) for x in items]


register_crud_routes(
    router,
    path="/gauges",
    service_class=GaugeService,
    read_model=GaugeRead,
    create_model=GaugeCreate,
    update_model=GaugeUpdate,
    label="gauge",
)


# PUBLIC_INTERFACE
@router.post(
    "/gauges/{item_id}/calibrations",
    response_model=GaugeRead,
    summary="Record calibration",
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)
async def record_gauge_calibration(
    payload: CalibrationRecord,
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> GaugeRead:
    gauge = await GaugeService(session).record_calibration(tenant_id, item_id, payload.calibrated_on)
    return GaugeRead.model_validate(gauge)
