from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Sequence, Type

from mes_api.core.errors import AlreadyExistsError, NotFoundError
from mes_api.db.models import BomDetail, Process, ProcessRoutingStep, Product
from mes_api.repositories.master_data import (
    BomRepository,
    ProcessRepository,
    ProcessRoutingRepository,
    ProductRepository,
)
from mes_api.services.base import CrudService, Payload, apply_values, payload_values

logger = logging.getLogger(__name__)


class ProductService(CrudService[Product]):
    repository_class = ProductRepository
    entity_name = "Product"

    async def find_by_type(self, tenant_id: str, product_type: str) -> List[Product]:
        return await self.repo.list_by_type(tenant_id, product_type)


class ProcessService(CrudService[Process]):
    repository_class = ProcessRepository
    entity_name = "Process"


class VersionedDocumentService(CrudService):
    """
    Header + ordered lines, identified by (code, version) within a tenant.

    Lines arriving without a sequence number are numbered by position
    (1, 2, ...). An update that carries lines replaces the whole collection.
    `copy` clones a document under a new version.
    """

    line_model: Type
    lines_attr: str
    sequence_attr: str
    # Line columns cloned by value on copy (besides the sequence number).
    line_fields: Sequence[str] = ()

    @property
    def name_field(self) -> str:
        return self.code_field.replace("_code", "_name")

    async def _ensure_version_free(self, tenant_id: str, code: str, version: str) -> None:
        if await self.repo.exists_by_code_and_version(tenant_id, code, version):
            logger.warning("%s %s version %s already exists", self.entity_name, code, version)
            raise AlreadyExistsError(self.entity_name, f"{code}:{version}")

    async def _check_product(self, tenant_id: str, product_id: uuid.UUID) -> None:
        if await ProductRepository(self.session).get(tenant_id, product_id) is None:
            raise NotFoundError("Product", product_id)

    def _build_lines(self, tenant_id: str, lines: Iterable[Dict[str, Any]]) -> List[Any]:
        built = []
        for position, line in enumerate(lines, start=1):
            line = dict(line)
            if line.get(self.sequence_attr) is None:
                line[self.sequence_attr] = position
            built.append(self.line_model(tenant_id=tenant_id, **line))
        return built

    async def find_by_code_and_version(self, tenant_id: str, code: str, version: str):
        document = await self.repo.get_by_code_and_version(tenant_id, code, version)
        if document is None:
            raise NotFoundError(self.entity_name, f"{code}:{version}")
        return document

    async def find_versions(self, tenant_id: str, code: str) -> list:
        return await self.repo.list_versions(tenant_id, code)

    async def find_by_product(self, tenant_id: str, product_id: uuid.UUID) -> list:
        return await self.repo.list_by_product(tenant_id, product_id)

    async def create(self, tenant_id: str, data: Payload):
        values = payload_values(data)
        lines = values.pop(self.lines_attr, None) or []
        async with self.transaction():
            await self._ensure_version_free(tenant_id, values[self.code_field], values["version"])
            await self._check_product(tenant_id, values["product_id"])
            document = self.repo.model(tenant_id=tenant_id, **values)
            setattr(document, self.lines_attr, self._build_lines(tenant_id, lines))
            await self.repo.save(document)
        logger.info(
            "Created %s %s v%s with %d lines",
            self.entity_name, values[self.code_field], values["version"], len(lines),
        )
        return document

    async def update(self, tenant_id: str, entity_id: uuid.UUID, data: Payload):
        values = payload_values(data, partial=True)
        lines = values.pop(self.lines_attr, None)
        async with self.transaction():
            document = await self.find_by_id(tenant_id, entity_id)
            code = values.get(self.code_field) or getattr(document, self.code_field)
            version = values.get("version") or document.version
            if (code, version) != (getattr(document, self.code_field), document.version):
                await self._ensure_version_free(tenant_id, code, version)
            if values.get("product_id") is not None:
                await self._check_product(tenant_id, values["product_id"])
            apply_values(document, values)
            if lines is not None:
                setattr(document, self.lines_attr, self._build_lines(tenant_id, lines))
            await self.repo.save(document)
        logger.info("Updated %s %s", self.entity_name, entity_id)
        return document

    # PUBLIC_INTERFACE
    async def copy(self, tenant_id: str, source_id: uuid.UUID, new_version: str):
        """
        Clone a document and its lines under `new_version`.

        The copy is always active and keeps every line's sequence number.

        Raises:
            NotFoundError: source document missing in the tenant.
            AlreadyExistsError: (code, new_version) already taken; nothing is written.
        """
        async with self.transaction():
            source = await self.find_by_id(tenant_id, source_id)
            code = getattr(source, self.code_field)
            await self._ensure_version_free(tenant_id, code, new_version)
            document = self.repo.model(
                tenant_id=tenant_id,
                product_id=source.product_id,
                version=new_version,
                effective_date=source.effective_date,
                expiry_date=source.expiry_date,
                remarks=source.remarks,
                is_active=True,
            )
            setattr(document, self.code_field, code)
            setattr(document, self.name_field, getattr(source, self.name_field))
            clones = []
            for line in getattr(source, self.lines_attr):
                clone = self.line_model(tenant_id=tenant_id)
                setattr(clone, self.sequence_attr, getattr(line, self.sequence_attr))
                for field in self.line_fields:
                    setattr(clone, field, getattr(line, field))
                clones.append(clone)
            setattr(document, self.lines_attr, clones)
            await self.repo.save(document)
        logger.info(
            "Copied %s %s v%s -> v%s (%d lines)",
            self.entity_name, code, source.version, new_version, len(clones),
        )
        return document


class BomService(VersionedDocumentService):
    repository_class = BomRepository
    entity_name = "Bom"
    line_model = BomDetail
    lines_attr = "details"
    sequence_attr = "sequence"
    line_fields = (
        "material_product_id",
        "process_id",
        "quantity",
        "unit",
        "usage_rate",
        "scrap_rate",
        "remarks",
    )


class ProcessRoutingService(VersionedDocumentService):
    repository_class = ProcessRoutingRepository
    entity_name = "ProcessRouting"
    line_model = ProcessRoutingStep
    lines_attr = "steps"
    sequence_attr = "sequence_order"
    line_fields = (
        "process_id",
        "standard_time",
        "setup_time",
        "wait_time",
        "required_workers",
        "equipment_id",
        "is_parallel",
        "parallel_group",
        "is_optional",
        "alternate_process_id",
        "quality_check_required",
        "quality_standard",
        "remarks",
    )
