from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from mes_api.core.errors import NotFoundError
from mes_api.db.models import AuditLog
from mes_api.repositories.audit import AuditLogRepository
from mes_api.services.base import BaseService

logger = logging.getLogger(__name__)


class AuditLogService(BaseService):
    """Append-only audit trail with search and simple statistics."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.repo = AuditLogRepository(session)

    # PUBLIC_INTERFACE
    async def record(
        self,
        tenant_id: str,
        *,
        action: str,
        username: Optional[str] = None,
        user_id: Optional[uuid.UUID] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        description: Optional[str] = None,
        old_value: Optional[Dict[str, Any]] = None,
        new_value: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ) -> AuditLog:
        """Write one audit entry in its own unit of work."""
        entry = AuditLog(
            tenant_id=tenant_id,
            action=action,
            username=username,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description,
            old_value=old_value,
            new_value=new_value,
            ip_address=ip_address,
            user_agent=user_agent,
            success=success,
            error_message=error_message,
        )
        async with self.transaction():
            await self.repo.save(entry)
        logger.debug("Audit %s by %s success=%s", action, username, success)
        return entry

    async def find_by_id(self, tenant_id: str, log_id: uuid.UUID) -> AuditLog:
        entry = await self.repo.get(tenant_id, log_id)
        if entry is None:
            raise NotFoundError("AuditLog", log_id)
        return entry

    async def search(
        self,
        tenant_id: str,
        *,
        user_id: Optional[uuid.UUID] = None,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        success: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> Dict[str, Any]:
        """One page of entries, newest first, plus the total match count."""
        items, total = await self.repo.search(
            tenant_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            success=success,
            start=start,
            end=end,
            limit=limit,
            offset=offset,
        )
        return {"items": items, "total": total, "limit": limit, "offset": offset}

    async def action_statistics(self, tenant_id: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        return [{"action": a, "count": n} for a, n in await self.repo.action_counts(tenant_id, start, end)]

    async def user_statistics(self, tenant_id: str, start: datetime, end: datetime) -> List[Dict[str, Any]]:
        return [{"username": u, "count": n} for u, n in await self.repo.user_counts(tenant_id, start, end)]
