from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import func, select

from mes_api.core.workflow import WorkOrderStatus
from mes_api.db.base import utcnow
from mes_api.db.models import Role, User, UserRole, WorkOrder
from mes_api.repositories.audit import AuditLogRepository
from mes_api.repositories.production import WorkOrderRepository
from mes_api.repositories.security import PermissionRepository, RoleRepository, UserRepository
from mes_api.services.base import BaseService

SESSION_WINDOW = timedelta(minutes=30)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class DashboardService(BaseService):
    """Read-only aggregates for the tenant dashboard."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.roles = RoleRepository(session)
        self.permissions = PermissionRepository(session)
        self.audit = AuditLogRepository(session)
        self.work_orders = WorkOrderRepository(session)

    async def tenant_stats(self, tenant_id: str) -> Dict[str, int]:
        now = utcnow()
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        logins_today = await self.audit.list_created_at(tenant_id, "LOGIN", start_of_day)
        return {
            "total_users": await self.users.count(tenant_id),
            "active_users": await self.users.count(tenant_id, User.status == "active"),
            "total_roles": await self.roles.count(tenant_id),
            "total_permissions": await self.permissions.count(),
            "today_logins": len(logins_today),
            "active_sessions": await self.users.count(
                tenant_id, User.last_login_at >= now - SESSION_WINDOW
            ),
        }

    async def user_status_counts(self, tenant_id: str) -> Dict[str, int]:
        return {
            status: await self.users.count(tenant_id, User.status == status)
            for status in ("active", "inactive", "locked")
        }

    async def login_trend(self, tenant_id: str, days: int = 7) -> List[Dict[str, Any]]:
        """Successful logins per day for the last `days` days, oldest first, zero-filled."""
        today = utcnow().date()
        first_day = today - timedelta(days=days - 1)
        since = datetime.combine(first_day, datetime.min.time(), tzinfo=timezone.utc)
        buckets: Dict[date, int] = {first_day + timedelta(days=i): 0 for i in range(days)}
        for ts in await self.audit.list_created_at(tenant_id, "LOGIN", since):
            day = _as_utc(ts).date()
            if day in buckets:
                buckets[day] += 1
        return [{"login_date": day, "count": n} for day, n in buckets.items()]

    async def role_distribution(self, tenant_id: str) -> List[Dict[str, Any]]:
        stmt = (
            select(Role.role_code, Role.role_name, func.count(UserRole.id))
            .outerjoin(UserRole, UserRole.role_id == Role.id)
            .where(Role.tenant_id == tenant_id)
            .group_by(Role.role_code, Role.role_name)
            .order_by(Role.role_code)
        )
        result = await self.session.execute(stmt)
        return [
            {"role_code": code, "role_name": name, "user_count": int(n)}
            for code, name, n in result.all()
        ]

    async def production_summary(self, tenant_id: str) -> Dict[str, Any]:
        by_status = await self.work_orders.count_by_status(tenant_id)
        totals = await self.session.execute(
            select(
                func.coalesce(func.sum(WorkOrder.good_quantity), 0),
                func.coalesce(func.sum(WorkOrder.defect_quantity), 0),
            ).where(WorkOrder.tenant_id == tenant_id)
        )
        good, defect = totals.one()
        return {
            "work_orders_by_status": {s.value: by_status.get(s.value, 0) for s in WorkOrderStatus},
            "total_good_quantity": Decimal(str(good)),
            "total_defect_quantity": Decimal(str(defect)),
        }
