from __future__ import annotations

import uuid
from datetime import date
from typing import List

from mes_api.core.workflow import InspectionActionStatus
from mes_api.db.models import Equipment, EquipmentInspection, Gauge, InspectionAction
from mes_api.repositories.base import TenantRepository


class EquipmentRepository(TenantRepository[Equipment]):
    model = Equipment
    code_field = "equipment_code"
    default_order = ("equipment_code",)


class EquipmentInspectionRepository(TenantRepository[EquipmentInspection]):
    model = EquipmentInspection
    code_field = "inspection_no"
    default_order = ("inspection_date", "inspection_no")

    async def list_by_equipment(self, tenant_id: str, equipment_id: uuid.UUID) -> List[EquipmentInspection]:
        return await self.list_where(tenant_id, EquipmentInspection.equipment_id == equipment_id)


class InspectionActionRepository(TenantRepository[InspectionAction]):
    model = InspectionAction

    async def list_by_inspection(self, tenant_id: str, inspection_id: uuid.UUID) -> List[InspectionAction]:
        return await self.list_where(tenant_id, InspectionAction.inspection_id == inspection_id)

    async def list_by_status(self, tenant_id: str, status: InspectionActionStatus) -> List[InspectionAction]:
        return await self.list_where(tenant_id, InspectionAction.status == status)


class GaugeRepository(TenantRepository[Gauge]):
    model = Gauge
    code_field = "gauge_code"
    default_order = ("gauge_code",)

    async def list_calibration_due(self, tenant_id: str, on_or_before: date) -> List[Gauge]:
        """Active gauges whose next calibration date is on or before the given date."""
        return await self.list_where(
            tenant_id,
            Gauge.status == "ACTIVE",
            Gauge.next_calibration_date.is_not(None),
            Gauge.next_calibration_date <= on_or_before,
            order_by=Gauge.next_calibration_date,
        )
