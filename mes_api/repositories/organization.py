from __future__ import annotations

from typing import List

from mes_api.db.models import Department, Site
from mes_api.repositories.base import TenantRepository


class SiteRepository(TenantRepository[Site]):
    model = Site
    code_field = "site_code"
    default_order = ("site_code",)

    async def list_by_type(self, tenant_id: str, site_type: str) -> List[Site]:
        return await self.list_where(tenant_id, Site.site_type == site_type)


class DepartmentRepository(TenantRepository[Department]):
    model = Department
    code_field = "department_code"
    default_order = ("sort_order", "department_code")
