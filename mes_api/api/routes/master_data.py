from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.api.routes.crud import register_crud_routes
from mes_api.core.deps import MANAGER_ROLES, get_current_active_user, get_session, get_tenant_id, require_roles
from mes_api.schemas.master_data import (
    BomCreate,
    BomRead,
    BomUpdate,
    CopyVersionRequest,
    ProcessCreate,
    ProcessRead,
    ProcessRoutingCreate,
    ProcessRoutingRead,
    ProcessRoutingUpdate,
    ProcessUpdate,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from mes_api.services.master_data import BomService, ProcessRoutingService, ProcessService, ProductService

router = APIRouter(tags=["Master Data"])


# PUBLIC_INTERFACE
@router.get(
    "/products/type/{product_type}",
    response_model=List[ProductRead],
    summary="List products by type",
    dependencies=[Depends(get_current_active_user)],
)
async def list_products_by_type(
    product_type: str = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[ProductRead]:
    items = await ProductService(session).find_by_type(tenant_id, product_type)
    return [ProductRead.model_validate(p) for p in items]


register_crud_routes(
    router,
    path="/products",
    service_class=ProductService,
    read_model=ProductRead,
    create_model=ProductCreate,
    update_model=ProductUpdate,
    label="product",
    with_toggle=True,
)
register_crud_routes(
    router,
    path="/processes",
    service_class=ProcessService,
    read_model=ProcessRead,
    create_model=ProcessCreate,
    update_model=ProcessUpdate,
    label="process",
    with_toggle=True,
)


# PUBLIC_INTERFACE
@router.get(
    "/boms/product/{product_id}",
    response_model=List[BomRead],
    summary="List BOMs of a product",
    dependencies=[Depends(get_current_active_user)],
)
async def list_boms_by_product(
    product_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[BomRead]:
    return [BomRead.model_validate(b) for b in await BomService(session).find_by_product(tenant_id, product_id)]


# PUBLIC_INTERFACE
@router.post(
    "/boms/{item_id}/copy",
    response_model=BomRead,
    status_code=status.HTTP_201_CREATED,
    summary="Copy BOM to a new version",
    description="Clone a BOM and its lines under a new version; the copy is active.",
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)
async def copy_bom(
    payload: CopyVersionRequest,
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> BomRead:
    return BomRead.model_validate(await BomService(session).copy(tenant_id, item_id, payload.new_version))


register_crud_routes(
    router,
    path="/boms",
    service_class=BomService,
    read_model=BomRead,
    create_model=BomCreate,
    update_model=BomUpdate,
    label="BOM",
    with_toggle=True,
)


# PUBLIC_INTERFACE
@router.get(
    "/routings/product/{product_id}",
    response_model=List[ProcessRoutingRead],
    summary="List routings of a product",
    dependencies=[Depends(get_current_active_user)],
)
async def list_routings_by_product(
    product_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> List[ProcessRoutingRead]:
    items = await ProcessRoutingService(session).find_by_product(tenant_id, product_id)
    return [ProcessRoutingRead.model_validate(r) for r in items]


# PUBLIC_INTERFACE
@router.post(
    "/routings/{item_id}/copy",
    response_model=ProcessRoutingRead,
    status_code=status.HTTP_201_CREATED,
    summary="Copy routing to a new version",
    description="Clone a routing and its steps under a new version; the copy is active.",
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)
async def copy_routing(
    payload: CopyVersionRequest,
    item_id: UUID = Path(...),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> ProcessRoutingRead:
    routing = await ProcessRoutingService(session).copy(tenant_id, item_id, payload.new_version)
    return ProcessRoutingRead.model_validate(routing)


register_crud_routes(
    router,
    path="/routings",
    service_class=ProcessRoutingService,
    read_model=ProcessRoutingRead,
    create_model=ProcessRoutingCreate,
    update_model=ProcessRoutingUpdate,
    label="routing",
    with_toggle=True,
)
