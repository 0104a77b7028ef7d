from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from mes_api.core.errors import InvalidStatusTransitionError, NotFoundError
from mes_api.core.workflow import InspectionActionStatus, validate_inspection_action_transition
from mes_api.db.models import Equipment, EquipmentInspection, Gauge, InspectionAction
from mes_api.repositories.equipment import (
    EquipmentInspectionRepository,
    EquipmentRepository,
    GaugeRepository,
    InspectionActionRepository,
)
from mes_api.repositories.security import UserRepository
from mes_api.services.base import CrudService

logger = logging.getLogger(__name__)


class EquipmentService(CrudService[Equipment]):
    repository_class = EquipmentRepository
    entity_name = "Equipment"


class EquipmentInspectionService(CrudService[EquipmentInspection]):
    """Inspections recorded against equipment."""

    repository_class = EquipmentInspectionRepository
    entity_name = "EquipmentInspection"

    async def _check_equipment(self, tenant_id: str, equipment_id: uuid.UUID) -> None:
        if await EquipmentRepository(self.session).get(tenant_id, equipment_id) is None:
            raise NotFoundError("Equipment", equipment_id)

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        await self._check_equipment(tenant_id, values["equipment_id"])
        return values

    async def _prepare_update(
        self, tenant_id: str, entity: EquipmentInspection, values: Dict[str, Any]
    ) -> Dict[str, Any]:
        if values.get("equipment_id") is not None and values["equipment_id"] != entity.equipment_id:
            await self._check_equipment(tenant_id, values["equipment_id"])
        return values

    async def find_by_equipment(self, tenant_id: str, equipment_id: uuid.UUID) -> List[EquipmentInspection]:
        return await self.repo.list_by_equipment(tenant_id, equipment_id)


class InspectionActionService(CrudService[InspectionAction]):
    """
    Corrective actions raised from equipment inspections.

    Status only moves forward (OPEN -> IN_PROGRESS -> COMPLETED). An update
    that names the current status again is accepted as a no-op for the
    status; other supplied fields are still applied.
    """

    repository_class = InspectionActionRepository
    entity_name = "InspectionAction"

    async def _check_user(self, tenant_id: str, user_id: Optional[uuid.UUID]) -> None:
        if user_id is not None and await UserRepository(self.session).get(tenant_id, user_id) is None:
            raise NotFoundError("User", user_id)

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        inspection = await EquipmentInspectionRepository(self.session).get(tenant_id, values["inspection_id"])
        if inspection is None:
            raise NotFoundError("EquipmentInspection", values["inspection_id"])
        await self._check_user(tenant_id, values.get("assigned_user_id"))
        # New actions always start OPEN; later states are reached only through update.
        values.pop("completed_date", None)
        values["status"] = InspectionActionStatus.OPEN
        return values

    async def _prepare_update(
        self, tenant_id: str, entity: InspectionAction, values: Dict[str, Any]
    ) -> Dict[str, Any]:
        values.pop("inspection_id", None)
        requested = values.get("status")
        if requested is None:
            values.pop("status", None)
        else:
            requested = InspectionActionStatus(requested)
            try:
                validate_inspection_action_transition(entity.status, requested)
            except InvalidStatusTransitionError:
                logger.warning(
                    "Rejected inspection action %s transition %s -> %s",
                    entity.id, entity.status.value, requested.value,
                )
                raise
            values["status"] = requested
            if requested is InspectionActionStatus.COMPLETED and values.get("completed_date") is None:
                values["completed_date"] = entity.completed_date or date.today()
        if "assigned_user_id" in values:
            await self._check_user(tenant_id, values["assigned_user_id"])
        return values

    async def find_by_inspection(self, tenant_id: str, inspection_id: uuid.UUID) -> List[InspectionAction]:
        return await self.repo.list_by_inspection(tenant_id, inspection_id)

    async def find_by_status(self, tenant_id: str, status: InspectionActionStatus) -> List[InspectionAction]:
        return await self.repo.list_by_status(tenant_id, InspectionActionStatus(status))


class GaugeService(CrudService[Gauge]):
    """Measuring instruments and their calibration schedule."""

    repository_class = GaugeRepository
    entity_name = "Gauge"

    @staticmethod
    def _next_date(last: Optional[date], cycle_days: Optional[int]) -> Optional[date]:
        if last is None or not cycle_days:
            return None
        return last + timedelta(days=cycle_days)

    async def _prepare_create(self, tenant_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        values["status"] = values.get("status") or "ACTIVE"
        values["calibration_status"] = values.get("calibration_status") or "VALID"
        if values.get("next_calibration_date") is None:
            values["next_calibration_date"] = self._next_date(
                values.get("last_calibration_date"), values.get("calibration_cycle_days")
            )
        return values

    async def find_calibration_due(self, tenant_id: str, on_or_before: date) -> List[Gauge]:
        return await self.repo.list_calibration_due(tenant_id, on_or_before)

    # PUBLIC_INTERFACE
    async def record_calibration(self, tenant_id: str, gauge_id: uuid.UUID, calibrated_on: date) -> Gauge:
        """Store a completed calibration and schedule the next one from the cycle."""
        async with self.transaction():
            gauge = await self.find_by_id(tenant_id, gauge_id)
            gauge.last_calibration_date = calibrated_on
            gauge.next_calibration_date = self._next_date(calibrated_on, gauge.calibration_cycle_days)
            gauge.calibration_status = "VALID"
            await self.repo.save(gauge)
        logger.info("Gauge %s calibrated on %s; next %s", gauge.gauge_code, calibrated_on, gauge.next_calibration_date)
        return gauge
