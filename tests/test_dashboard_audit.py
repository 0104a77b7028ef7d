"""
Dashboard aggregates and audit trail search / statistics.
"""

from datetime import timedelta
from decimal import Decimal

import pytest

from mes_api.core.workflow import WorkOrderStatus
from mes_api.db.base import utcnow
from mes_api.services.audit import AuditLogService
from mes_api.services.dashboard import DashboardService

from .conftest import OTHER_TENANT, TENANT


@pytest.mark.asyncio
async def test_login_trend_is_zero_filled(db_session, roles):
    """Seven consecutive days, oldest first, even with no logins."""
    trend = await DashboardService(db_session).login_trend(TENANT)
    assert len(trend) == 7
    assert all(day["count"] == 0 for day in trend)
    days = [day["login_date"] for day in trend]
    assert days == sorted(days)
    assert days[-1] == utcnow().date()
    assert days[-1] - days[0] == timedelta(days=6)


@pytest.mark.asyncio
async def test_login_trend_counts_successful_logins_today(db_session, admin_user):
    """Only successful LOGIN entries are counted."""
    audit = AuditLogService(db_session)
    await audit.record(TENANT, action="LOGIN", username="admin", user_id=admin_user.id)
    await audit.record(TENANT, action="LOGIN", username="admin", user_id=admin_user.id)
    await audit.record(TENANT, action="LOGIN", username="admin", success=False, error_message="bad password")
    await audit.record(OTHER_TENANT, action="LOGIN", username="stranger")

    trend = await DashboardService(db_session).login_trend(TENANT, days=3)
    assert [day["count"] for day in trend] == [0, 0, 2]


@pytest.mark.asyncio
async def test_tenant_stats(db_session, admin_user, operator_user, user_factory):
    """Counts are scoped to the tenant."""
    await user_factory("retired", status="inactive")
    await AuditLogService(db_session).record(TENANT, action="LOGIN", username="admin", user_id=admin_user.id)

    stats = await DashboardService(db_session).tenant_stats(TENANT)
    assert stats["total_users"] == 3
    assert stats["active_users"] == 2
    assert stats["total_roles"] == 3
    assert stats["total_permissions"] == 0
    assert stats["today_logins"] == 1
    assert stats["active_sessions"] == 0

    other = await DashboardService(db_session).tenant_stats(OTHER_TENANT)
    assert other["total_users"] == 0


@pytest.mark.asyncio
async def test_user_status_and_role_distribution(db_session, admin_user, operator_user, user_factory):
    """Users are grouped by status and by role."""
    await user_factory("frozen", status="locked")
    service = DashboardService(db_session)

    assert await service.user_status_counts(TENANT) == {"active": 2, "inactive": 0, "locked": 1}
    distribution = {row["role_code"]: row["user_count"] for row in await service.role_distribution(TENANT)}
    assert distribution == {"ADMIN": 1, "MANAGER": 0, "OPERATOR": 1}


@pytest.mark.asyncio
async def test_production_summary(db_session, work_order_factory):
    """Orders are counted per status and produced quantities are totalled."""
    await work_order_factory("WO-1", good_quantity=Decimal("8"), defect_quantity=Decimal("2"))
    await work_order_factory("WO-2", status=WorkOrderStatus.IN_PROGRESS, good_quantity=Decimal("5"))

    summary = await DashboardService(db_session).production_summary(TENANT)
    assert summary["work_orders_by_status"]["PENDING"] == 1
    assert summary["work_orders_by_status"]["IN_PROGRESS"] == 1
    assert summary["work_orders_by_status"]["COMPLETED"] == 0
    assert summary["total_good_quantity"] == 13
    assert summary["total_defect_quantity"] == 2


@pytest.mark.asyncio
async def test_audit_search_filters_and_paging(db_session, admin_user):
    """Search filters by action and outcome and pages newest first."""
    audit = AuditLogService(db_session)
    for n in range(3):
        await audit.record(TENANT, action="CREATE", username="admin", entity_type="Product", entity_id=str(n))
    await audit.record(TENANT, action="DELETE", username="admin", entity_type="Product", entity_id="0")
    await audit.record(TENANT, action="LOGIN", username="admin", success=False)

    creates = await audit.search(TENANT, action="CREATE", limit=2)
    assert creates["total"] == 3
    assert len(creates["items"]) == 2
    assert creates["limit"] == 2

    failures = await audit.search(TENANT, success=False)
    assert [e.action for e in failures["items"]] == ["LOGIN"]

    assert (await audit.search(OTHER_TENANT))["total"] == 0

    entry = creates["items"][0]
    assert (await audit.find_by_id(TENANT, entry.id)).action == "CREATE"


@pytest.mark.asyncio
async def test_audit_statistics(db_session):
    """Entries are counted per action and per user over a window."""
    audit = AuditLogService(db_session)
    await audit.record(TENANT, action="CREATE", username="kim")
    await audit.record(TENANT, action="CREATE", username="lee")
    await audit.record(TENANT, action="UPDATE", username="kim")

    now = utcnow()
    start, end = now - timedelta(days=1), now + timedelta(days=1)
    assert await audit.action_statistics(TENANT, start, end) == [
        {"action": "CREATE", "count": 2},
        {"action": "UPDATE", "count": 1},
    ]
    by_user = {row["username"]: row["count"] for row in await audit.user_statistics(TENANT, start, end)}
    assert by_user == {"kim": 2, "lee": 1}
