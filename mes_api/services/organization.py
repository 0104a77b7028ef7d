from __future__ import annotations

from typing import List

from mes_api.db.models import Customer, Department, Site, Supplier
from mes_api.repositories.organization import DepartmentRepository, SiteRepository
from mes_api.repositories.partners import CustomerRepository, SupplierRepository
from mes_api.services.base import CrudService


class SiteService(CrudService[Site]):
    repository_class = SiteRepository
    entity_name = "Site"

    async def find_by_type(self, tenant_id: str, site_type: str) -> List[Site]:
        return await self.repo.list_by_type(tenant_id, site_type)


class DepartmentService(CrudService[Department]):
    """Departments are listed by sort_order, then code."""
    repository_class = DepartmentRepository
    entity_name = "Department"


class SupplierService(CrudService[Supplier]):
    repository_class = SupplierRepository
    entity_name = "Supplier"


class CustomerService(CrudService[Customer]):
    repository_class = CustomerRepository
    entity_name = "Customer"
