from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, select

from mes_api.db.models import AuditLog
from mes_api.repositories.base import TenantRepository


class AuditLogRepository(TenantRepository[AuditLog]):
    model = AuditLog

    def _filtered(
        self,
        stmt,
        tenant_id: str,
        *,
        user_id: Optional[uuid.UUID] = None,
        action: Optional[str] = None,
        entity_type: Optional[str] = None,
        success: Optional[bool] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ):
        stmt = stmt.where(AuditLog.tenant_id == tenant_id)
        if user_id is not None:
            stmt = stmt.where(AuditLog.user_id == user_id)
        if action:
            stmt = stmt.where(AuditLog.action == action)
        if entity_type:
            stmt = stmt.where(AuditLog.entity_type == entity_type)
        if success is not None:
            stmt = stmt.where(AuditLog.success.is_(success))
        if start is not None:
            stmt = stmt.where(AuditLog.created_at >= start)
        if end is not None:
            stmt = stmt.where(AuditLog.created_at <= end)
        return stmt

    async def search(
        self, tenant_id: str, *, limit: int = 100, offset: int = 0, **filters
    ) -> Tuple[List[AuditLog], int]:
        """Return one page of matching entries (newest first) and the total match count."""
        count_stmt = self._filtered(select(func.count()).select_from(AuditLog), tenant_id, **filters)
        total = int((await self.execute(count_stmt)).scalar_one())
        stmt = (
            self._filtered(select(AuditLog), tenant_id, **filters)
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(await self.scalars(stmt)), total

    async def action_counts(self, tenant_id: str, start: datetime, end: datetime) -> List[Tuple[str, int]]:
        stmt = self._filtered(
            select(AuditLog.action, func.count()), tenant_id, start=start, end=end
        ).group_by(AuditLog.action).order_by(func.count().desc())
        result = await self.execute(stmt)
        return [(action, int(n)) for action, n in result.all()]

    async def user_counts(
        self, tenant_id: str, start: datetime, end: datetime
    ) -> List[Tuple[Optional[str], int]]:
        stmt = self._filtered(
            select(AuditLog.username, func.count()), tenant_id, start=start, end=end
        ).group_by(AuditLog.username).order_by(func.count().desc())
        result = await self.execute(stmt)
        return [(username, int(n)) for username, n in result.all()]

    async def list_created_at(self, tenant_id: str, action: str, start: datetime) -> List[datetime]:
        """Timestamps of successful entries for an action since `start`."""
        stmt = self._filtered(
            select(AuditLog.created_at), tenant_id, action=action, success=True, start=start
        )
        return list(await self.scalars(stmt))
