"""
Work order lifecycle and work result bookkeeping.

- Status operations follow the transition table and leave the order untouched on rejection.
- Produced quantities are always the sum of the order's results.
- Callers cannot write status or produced quantities directly.
"""

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from mes_api.core.errors import InvalidStateError, NotFoundError
from mes_api.core.workflow import WorkOrderStatus
from mes_api.db.models import WorkResult
from mes_api.services.production import WorkOrderService, WorkResultService

from .conftest import TENANT, OTHER_TENANT


def _result(work_order_id, quantity, good, defect, day=date(2026, 3, 1), **extra):
    return {
        "work_order_id": work_order_id,
        "result_date": day,
        "quantity": Decimal(quantity),
        "good_quantity": Decimal(good),
        "defect_quantity": Decimal(defect),
        **extra,
    }


@pytest.mark.asyncio
async def test_create_forces_pending_and_zero_quantities(db_session, product, process):
    """A new order starts PENDING with nothing produced, whatever the payload says."""
    service = WorkOrderService(db_session)
    wo = await service.create(
        TENANT,
        {
            "work_order_no": "WO-NEW",
            "product_id": product.id,
            "process_id": process.id,
            "planned_quantity": Decimal("50"),
            "planned_start_date": datetime(2026, 3, 1, 8, tzinfo=timezone.utc),
            "planned_end_date": datetime(2026, 3, 1, 17, tzinfo=timezone.utc),
            "status": "IN_PROGRESS",
            "actual_quantity": Decimal("7"),
        },
    )
    assert wo.status is WorkOrderStatus.PENDING
    assert wo.actual_quantity == 0
    assert wo.good_quantity == 0
    assert wo.defect_quantity == 0


@pytest.mark.asyncio
async def test_create_rejects_unknown_product(db_session, process):
    """References are resolved inside the tenant."""
    with pytest.raises(NotFoundError) as exc_info:
        await WorkOrderService(db_session).create(
            TENANT,
            {
                "work_order_no": "WO-BAD",
                "product_id": uuid.uuid4(),
                "process_id": process.id,
                "planned_quantity": Decimal("1"),
                "planned_start_date": datetime(2026, 3, 1, tzinfo=timezone.utc),
                "planned_end_date": datetime(2026, 3, 2, tzinfo=timezone.utc),
            },
        )
    assert exc_info.value.entity == "Product"


@pytest.mark.asyncio
async def test_full_lifecycle(db_session, work_order):
    """PENDING -> READY -> IN_PROGRESS -> COMPLETED stamps the actual dates."""
    service = WorkOrderService(db_session)
    wo = await service.ready(TENANT, work_order.id)
    assert wo.status is WorkOrderStatus.READY
    wo = await service.start(TENANT, work_order.id)
    assert wo.status is WorkOrderStatus.IN_PROGRESS
    assert wo.actual_start_date is not None
    wo = await service.complete(TENANT, work_order.id)
    assert wo.status is WorkOrderStatus.COMPLETED
    assert wo.actual_end_date is not None


@pytest.mark.asyncio
async def test_start_directly_from_pending(db_session, work_order):
    """READY is optional."""
    wo = await WorkOrderService(db_session).start(TENANT, work_order.id)
    assert wo.status is WorkOrderStatus.IN_PROGRESS


@pytest.mark.asyncio
async def test_rejected_operation_leaves_status_unchanged(db_session, work_order):
    """Completing a PENDING order fails and the order stays PENDING."""
    service = WorkOrderService(db_session)
    work_order_id = work_order.id
    with pytest.raises(InvalidStateError):
        await service.complete(TENANT, work_order_id)
    reloaded = await service.find_by_id(TENANT, work_order_id)
    assert reloaded.status is WorkOrderStatus.PENDING
    assert reloaded.actual_end_date is None


@pytest.mark.asyncio
async def test_completed_order_cannot_be_cancelled(db_session, work_order_factory):
    """COMPLETED is terminal."""
    wo = await work_order_factory("WO-DONE", status=WorkOrderStatus.COMPLETED)
    service = WorkOrderService(db_session)
    wo_id = wo.id
    with pytest.raises(InvalidStateError):
        await service.cancel(TENANT, wo_id)
    assert (await service.find_by_id(TENANT, wo_id)).status is WorkOrderStatus.COMPLETED


@pytest.mark.asyncio
async def test_cancel_from_in_progress(db_session, work_order_factory):
    """Running orders can be cancelled."""
    wo = await work_order_factory("WO-RUN", status=WorkOrderStatus.IN_PROGRESS)
    cancelled = await WorkOrderService(db_session).cancel(TENANT, wo.id)
    assert cancelled.status is WorkOrderStatus.CANCELLED


@pytest.mark.asyncio
async def test_operation_on_other_tenant_order_is_not_found(db_session, work_order):
    """Orders are invisible outside their tenant."""
    with pytest.raises(NotFoundError):
        await WorkOrderService(db_session).start(OTHER_TENANT, work_order.id)


@pytest.mark.asyncio
async def test_update_ignores_status_and_produced_quantities(db_session, work_order):
    """Only planning fields are patchable."""
    service = WorkOrderService(db_session)
    updated = await service.update(
        TENANT,
        work_order.id,
        {"status": "COMPLETED", "actual_quantity": Decimal("99"), "good_quantity": Decimal("99"), "remarks": "rush"},
    )
    assert updated.status is WorkOrderStatus.PENDING
    assert updated.actual_quantity == 0
    assert updated.good_quantity == 0
    assert updated.remarks == "rush"


@pytest.mark.asyncio
async def test_find_by_status(db_session, work_order_factory):
    """Listing by status only returns matching orders."""
    await work_order_factory("WO-A")
    await work_order_factory("WO-B", status=WorkOrderStatus.IN_PROGRESS)
    running = await WorkOrderService(db_session).find_by_status(TENANT, WorkOrderStatus.IN_PROGRESS)
    assert [wo.work_order_no for wo in running] == ["WO-B"]


@pytest.mark.asyncio
async def test_results_drive_work_order_quantities(db_session, work_order):
    """Quantities follow creates and deletes of results."""
    results = WorkResultService(db_session)
    orders = WorkOrderService(db_session)

    first = await results.create(TENANT, _result(work_order.id, "10", "9", "1"))
    wo = await orders.find_by_id(TENANT, work_order.id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (10, 9, 1)

    await results.create(TENANT, _result(work_order.id, "5", "5", "0"))
    wo = await orders.find_by_id(TENANT, work_order.id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (15, 14, 1)
    assert await results.count_by_work_order(TENANT, work_order.id) == 2

    await results.delete(TENANT, first.id)
    wo = await orders.find_by_id(TENANT, work_order.id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (5, 5, 0)


@pytest.mark.asyncio
async def test_updating_result_recomputes(db_session, work_order):
    """Changing a result's quantities updates the order totals."""
    results = WorkResultService(db_session)
    result = await results.create(TENANT, _result(work_order.id, "10", "9", "1"))
    await results.update(TENANT, result.id, {"good_quantity": Decimal("7"), "defect_quantity": Decimal("3")})
    wo = await WorkOrderService(db_session).find_by_id(TENANT, work_order.id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (10, 7, 3)


@pytest.mark.asyncio
async def test_moving_result_recomputes_both_orders(db_session, work_order_factory):
    """A result moved to another order is taken off the first and added to the second."""
    source = await work_order_factory("WO-SRC")
    target = await work_order_factory("WO-DST")
    results = WorkResultService(db_session)
    result = await results.create(TENANT, _result(source.id, "4", "4", "0"))

    await results.update(TENANT, result.id, {"work_order_id": target.id})

    orders = WorkOrderService(db_session)
    src = await orders.find_by_id(TENANT, source.id)
    dst = await orders.find_by_id(TENANT, target.id)
    assert src.actual_quantity == 0
    assert dst.actual_quantity == 4
    assert dst.good_quantity == 4


@pytest.mark.asyncio
async def test_result_for_missing_work_order_writes_nothing(db_session, work_order):
    """An unknown work order id raises NotFound and no result row is stored."""
    with pytest.raises(NotFoundError) as exc_info:
        await WorkResultService(db_session).create(TENANT, _result(uuid.uuid4(), "1", "1", "0"))
    assert exc_info.value.entity == "WorkOrder"
    count = (await db_session.execute(select(func.count()).select_from(WorkResult))).scalar_one()
    assert count == 0


@pytest.mark.asyncio
async def test_moving_result_to_missing_work_order_changes_nothing(db_session, work_order):
    """A rejected update leaves the result on its order and the order's totals intact."""
    results = WorkResultService(db_session)
    work_order_id = work_order.id
    result = await results.create(TENANT, _result(work_order_id, "10", "9", "1"))
    result_id = result.id

    with pytest.raises(NotFoundError) as exc_info:
        await results.update(
            TENANT,
            result_id,
            {"work_order_id": uuid.uuid4(), "quantity": Decimal("99"), "good_quantity": Decimal("99")},
        )
    assert exc_info.value.entity == "WorkOrder"

    stored = await results.find_by_id(TENANT, result_id)
    assert stored.work_order_id == work_order_id
    assert (stored.quantity, stored.good_quantity, stored.defect_quantity) == (10, 9, 1)
    wo = await WorkOrderService(db_session).find_by_id(TENANT, work_order_id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (10, 9, 1)


@pytest.mark.asyncio
async def test_deleting_missing_result_changes_nothing(db_session, work_order):
    """Deleting an unknown result raises NotFound and keeps existing rows and totals."""
    results = WorkResultService(db_session)
    work_order_id = work_order.id
    await results.create(TENANT, _result(work_order_id, "4", "4", "0"))

    with pytest.raises(NotFoundError):
        await results.delete(TENANT, uuid.uuid4())

    assert len(await results.find_by_work_order(TENANT, work_order_id)) == 1
    wo = await WorkOrderService(db_session).find_by_id(TENANT, work_order_id)
    assert (wo.actual_quantity, wo.good_quantity, wo.defect_quantity) == (4, 4, 0)


@pytest.mark.asyncio
async def test_recompute_repairs_drifted_totals(db_session, work_order):
    """Explicit recompute rebuilds totals from stored results."""
    results = WorkResultService(db_session)
    await results.create(TENANT, _result(work_order.id, "8", "6", "2"))
    wo = await WorkOrderService(db_session).find_by_id(TENANT, work_order.id)
    wo.actual_quantity = Decimal("1000")
    await db_session.commit()

    repaired = await results.recompute_work_order(TENANT, work_order.id)
    assert (repaired.actual_quantity, repaired.good_quantity, repaired.defect_quantity) == (8, 6, 2)


@pytest.mark.asyncio
async def test_result_finders(db_session, work_order, operator_user):
    """Results can be listed by order, worker and date range."""
    results = WorkResultService(db_session)
    await results.create(TENANT, _result(work_order.id, "1", "1", "0", day=date(2026, 3, 1), worker_id=operator_user.id))
    await results.create(TENANT, _result(work_order.id, "2", "2", "0", day=date(2026, 3, 5)))

    assert len(await results.find_by_work_order(TENANT, work_order.id)) == 2
    by_worker = await results.find_by_worker(TENANT, operator_user.id)
    assert [r.quantity for r in by_worker] == [1]
    in_range = await results.find_by_date_range(TENANT, date(2026, 3, 4), date(2026, 3, 6))
    assert [r.result_date for r in in_range] == [date(2026, 3, 5)]
