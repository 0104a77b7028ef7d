from __future__ import annotations

from fastapi import APIRouter

from mes_api.api.routes.crud import register_crud_routes
from mes_api.schemas.partners import (
    CustomerCreate,
    CustomerRead,
    CustomerUpdate,
    SupplierCreate,
    SupplierRead,
    SupplierUpdate,
)
from mes_api.services.organization import CustomerService, SupplierService

router = APIRouter(tags=["Partners"])

register_crud_routes(
    router,
    path="/suppliers",
    service_class=SupplierService,
    read_model=SupplierRead,
    create_model=SupplierCreate,
    update_model=SupplierUpdate,
    label="supplier",
    with_toggle=True,
)
register_crud_routes(
    router,
    path="/customers",
    service_class=CustomerService,
    read_model=CustomerRead,
    create_model=CustomerCreate,
    update_model=CustomerUpdate,
    label="customer",
    with_toggle=True,
)
