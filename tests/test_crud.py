"""
Generic tenant-scoped CRUD behaviour shared by the master data services.
"""

import pytest

from mes_api.core.errors import AlreadyExistsError, NotFoundError
from mes_api.schemas.master_data import ProductCreate, ProductUpdate
from mes_api.services.organization import SiteService, SupplierService
from mes_api.services.master_data import ProductService

from .conftest import OTHER_TENANT, TENANT


@pytest.mark.asyncio
async def test_code_unique_per_tenant(db_session, product):
    """A business key repeats across tenants but never inside one."""
    service = ProductService(db_session)
    with pytest.raises(AlreadyExistsError) as exc_info:
        await service.create(TENANT, ProductCreate(product_code="FG-100", product_name="Clone"))
    assert exc_info.value.key == "FG-100"

    other = await service.create(OTHER_TENANT, ProductCreate(product_code="FG-100", product_name="Globex widget"))
    assert other.tenant_id == OTHER_TENANT
    assert len(await service.find_by_tenant(TENANT)) == 1


@pytest.mark.asyncio
async def test_lookups_do_not_cross_tenants(db_session, product):
    """Ids and codes of another tenant resolve to NotFound."""
    service = ProductService(db_session)
    with pytest.raises(NotFoundError):
        await service.find_by_id(OTHER_TENANT, product.id)
    with pytest.raises(NotFoundError):
        await service.find_by_code(OTHER_TENANT, "FG-100")
    assert (await service.find_by_code(TENANT, "FG-100")).id == product.id


@pytest.mark.asyncio
async def test_update_and_delete_do_not_cross_tenants(db_session, product):
    """Writes through another tenant never touch the row."""
    service = ProductService(db_session)
    product_id = product.id
    with pytest.raises(NotFoundError):
        await service.update(OTHER_TENANT, product_id, ProductUpdate(product_name="hijacked"))
    with pytest.raises(NotFoundError):
        await service.delete(OTHER_TENANT, product_id)
    assert (await service.find_by_id(TENANT, product_id)).product_name == "Widget"


@pytest.mark.asyncio
async def test_rename_onto_existing_code_rejected(db_session, product, material):
    """Changing a code to one already taken fails."""
    service = ProductService(db_session)
    material_id = material.id
    with pytest.raises(AlreadyExistsError):
        await service.update(TENANT, material_id, ProductUpdate(product_code="FG-100"))
    assert (await service.find_by_id(TENANT, material_id)).product_code == "RM-100"


@pytest.mark.asyncio
async def test_patch_semantics(db_session, product):
    """Omitted fields stay; explicit null clears nullable columns and is ignored for required ones."""
    service = ProductService(db_session)
    await service.update(TENANT, product.id, ProductUpdate(remarks="fragile", specification="M6"))

    updated = await service.update(TENANT, product.id, ProductUpdate(remarks=None, product_name=None))
    assert updated.remarks is None
    assert updated.specification == "M6"
    assert updated.product_name == "Widget"


@pytest.mark.asyncio
async def test_toggle_active(db_session, product):
    """Toggling flips the flag each time."""
    service = ProductService(db_session)
    assert (await service.toggle_active(TENANT, product.id)).is_active is False
    assert (await service.toggle_active(TENANT, product.id)).is_active is True


@pytest.mark.asyncio
async def test_delete(db_session, product):
    """Deleted rows are gone."""
    service = ProductService(db_session)
    await service.delete(TENANT, product.id)
    assert await service.find_by_tenant(TENANT) == []


@pytest.mark.asyncio
async def test_organization_and_partner_services(db_session):
    """Sites and suppliers share the same code rules."""
    sites = SiteService(db_session)
    site = await sites.create(TENANT, {"site_code": "PLANT-1", "site_name": "Main plant", "site_type": "FACTORY"})
    assert [s.id for s in await sites.find_by_type(TENANT, "FACTORY")] == [site.id]

    suppliers = SupplierService(db_session)
    await suppliers.create(TENANT, {"supplier_code": "SUP-1", "supplier_name": "Acme Metals"})
    with pytest.raises(AlreadyExistsError):
        await suppliers.create(TENANT, {"supplier_code": "SUP-1", "supplier_name": "Again"})
