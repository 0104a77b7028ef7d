"""
Lot service: creation defaults, quality status changes and lot splitting.
"""

from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio

from mes_api.core.errors import ValidationError
from mes_api.services.inventory import LotService

from .conftest import TENANT


@pytest_asyncio.fixture
async def lot(db_session, material):
    return await LotService(db_session).create(
        TENANT,
        {
            "lot_no": "L-2026-001",
            "product_id": material.id,
            "lot_type": "RAW",
            "initial_quantity": Decimal("100"),
            "unit": "KG",
            "manufacturing_date": date(2026, 2, 20),
        },
    )


@pytest.mark.asyncio
async def test_new_lot_defaults(lot):
    """Current quantity starts at the initial quantity and quality is pending."""
    assert lot.current_quantity == 100
    assert lot.quality_status == "PENDING"


@pytest.mark.asyncio
async def test_split_numbers_children_sequentially(db_session, lot):
    """Children are <lot_no>-S01, -S02 and the parent shrinks accordingly."""
    service = LotService(db_session)
    first = await service.split(TENANT, lot.id, Decimal("30"))
    second = await service.split(TENANT, lot.id, Decimal("20"))

    assert first.lot_no == "L-2026-001-S01"
    assert second.lot_no == "L-2026-001-S02"
    assert first.parent_lot_id == lot.id
    assert first.current_quantity == 30
    assert first.unit == "KG"
    assert first.manufacturing_date == date(2026, 2, 20)

    parent = await service.find_by_id(TENANT, lot.id)
    assert parent.current_quantity == 50
    assert parent.initial_quantity == 100


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", ["0", "-1", "100", "150"])
async def test_split_quantity_must_be_inside_the_lot(db_session, lot, quantity):
    """Zero, negative and whole-lot (or larger) splits are rejected without changes."""
    service = LotService(db_session)
    lot_id = lot.id
    with pytest.raises(ValidationError):
        await service.split(TENANT, lot_id, Decimal(quantity))
    parent = await service.find_by_id(TENANT, lot_id)
    assert parent.current_quantity == 100
    assert len(await service.find_by_tenant(TENANT)) == 1


@pytest.mark.asyncio
async def test_split_inherits_quality_status(db_session, lot):
    """A held lot produces held children."""
    service = LotService(db_session)
    await service.update_quality_status(TENANT, lot.id, "HOLD")
    child = await service.split(TENANT, lot.id, Decimal("10"))
    assert child.quality_status == "HOLD"


@pytest.mark.asyncio
async def test_quality_status_values(db_session, lot):
    """Only the known quality statuses are accepted."""
    service = LotService(db_session)
    passed = await service.update_quality_status(TENANT, lot.id, "PASSED")
    assert passed.quality_status == "PASSED"
    assert [x.lot_no for x in await service.find_by_quality_status(TENANT, "PASSED")] == ["L-2026-001"]

    with pytest.raises(ValidationError):
        await service.update_quality_status(TENANT, lot.id, "SCRAPPED")
    assert (await service.find_by_lot_no(TENANT, "L-2026-001")).quality_status == "PASSED"
