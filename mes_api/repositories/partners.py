from __future__ import annotations

from mes_api.db.models import Customer, Supplier
from mes_api.repositories.base import TenantRepository


class SupplierRepository(TenantRepository[Supplier]):
    model = Supplier
    code_field = "supplier_code"
    default_order = ("supplier_code",)


class CustomerRepository(TenantRepository[Customer]):
    model = Customer
    code_field = "customer_code"
    default_order = ("customer_code",)
