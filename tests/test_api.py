"""
HTTP surface: tenant header handling, authentication, role checks, the error
envelope and an end-to-end work order flow.
"""

import json
from decimal import Decimal

import pytest
from httpx import AsyncClient

from mes_api.api import generate_openapi

from .conftest import OTHER_TENANT, bearer

API = "/api/v1"


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    """Liveness endpoint answers without authentication."""
    response = await client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["message"] == "Healthy"
    assert response.headers["X-Correlation-ID"]


@pytest.mark.asyncio
async def test_tenant_echo_and_missing_header(client: AsyncClient):
    """The tenant header is echoed; a blank one is rejected with the error envelope."""
    response = await client.get(f"{API}/health/tenant")
    assert response.json() == {"tenant_id": "ACME"}

    response = await client.get(f"{API}/health/tenant", headers={"X-Tenant-ID": ""})
    assert response.status_code == 400
    body = response.json()
    assert body["status"] == 400
    assert body["error"]["type"] == "http_error"
    assert body["path"] == f"{API}/health/tenant"
    assert body["method"] == "GET"


@pytest.mark.asyncio
async def test_correlation_id_is_propagated(client: AsyncClient):
    """A caller-supplied correlation id comes back on the response."""
    response = await client.get(f"{API}/health", headers={"X-Correlation-ID": "abc-123"})
    assert response.headers["X-Correlation-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_login_form_and_me(client: AsyncClient, admin_user):
    """The OAuth2 password form returns a token usable on /auth/me."""
    response = await client.post(f"{API}/auth/login", data={"username": "admin", "password": "admin123"})
    assert response.status_code == 200
    tokens = response.json()
    assert tokens["token_type"] == "bearer"

    me = await client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "admin"
    assert me.json()["roles"] == ["ADMIN"]

    refreshed = await client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200


@pytest.mark.asyncio
async def test_bad_credentials_return_401(client: AsyncClient, admin_user):
    """Authentication failures map to 401 with the domain error code."""
    response = await client.post(f"{API}/auth/login", data={"username": "admin", "password": "wrong"})
    assert response.status_code == 401
    assert response.json()["error"]["type"] == "AUTHENTICATION_FAILED"
    assert response.json()["tenant_id"] == "ACME"


@pytest.mark.asyncio
async def test_protected_endpoint_requires_token(client: AsyncClient):
    """No bearer token means 401."""
    response = await client.get(f"{API}/products")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_token_of_other_tenant_is_forbidden(client: AsyncClient, admin_user):
    """A token issued for another tenant is refused with 403."""
    response = await client.get(f"{API}/products", headers=bearer(admin_user, OTHER_TENANT))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_operator_cannot_write_master_data(client: AsyncClient, operator_headers):
    """Writes need a manager role."""
    response = await client.post(
        f"{API}/products",
        json={"product_code": "FG-200", "product_name": "Gadget"},
        headers=operator_headers,
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_product_create_and_duplicate(client: AsyncClient, admin_headers):
    """Create answers 201; a duplicate code answers 409 ALREADY_EXISTS."""
    payload = {"product_code": "FG-200", "product_name": "Gadget", "product_type": "FINISHED"}
    created = await client.post(f"{API}/products", json=payload, headers=admin_headers)
    assert created.status_code == 201
    assert created.json()["product_code"] == "FG-200"
    assert created.json()["is_active"] is True

    duplicate = await client.post(f"{API}/products", json=payload, headers=admin_headers)
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["type"] == "ALREADY_EXISTS"

    by_code = await client.get(f"{API}/products/code/FG-200", headers=admin_headers)
    assert by_code.status_code == 200
    assert by_code.json()["id"] == created.json()["id"]


@pytest.mark.asyncio
async def test_unknown_id_returns_404(client: AsyncClient, admin_headers):
    """Missing entities map to 404 NOT_FOUND."""
    response = await client.get(
        f"{API}/products/00000000-0000-0000-0000-000000000000", headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["error"]["type"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_request_validation_returns_422(client: AsyncClient, admin_headers):
    """Malformed bodies produce the validation envelope."""
    response = await client.post(f"{API}/products", json={"product_name": "No code"}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "validation_error"


@pytest.mark.asyncio
async def test_work_order_flow(client: AsyncClient, admin_headers, operator_headers, product, process):
    """Plan, release, run and complete an order while reporting output."""
    created = await client.post(
        f"{API}/production/work-orders",
        json={
            "work_order_no": "WO-API-1",
            "product_id": str(product.id),
            "process_id": str(process.id),
            "planned_quantity": "20",
            "planned_start_date": "2026-03-01T08:00:00Z",
            "planned_end_date": "2026-03-01T17:00:00Z",
        },
        headers=admin_headers,
    )
    assert created.status_code == 201
    wo = created.json()
    assert wo["status"] == "PENDING"
    base = f"{API}/production/work-orders/{wo['id']}"

    assert (await client.post(f"{base}/ready", headers=operator_headers)).json()["status"] == "READY"
    assert (await client.post(f"{base}/start", headers=operator_headers)).json()["status"] == "IN_PROGRESS"

    result = await client.post(
        f"{API}/production/work-results",
        json={
            "work_order_id": wo["id"],
            "result_date": "2026-03-01",
            "quantity": "12",
            "good_quantity": "11",
            "defect_quantity": "1",
        },
        headers=operator_headers,
    )
    assert result.status_code == 201

    current = (await client.get(base, headers=operator_headers)).json()
    assert Decimal(current["actual_quantity"]) == 12
    assert Decimal(current["good_quantity"]) == 11
    assert Decimal(current["defect_quantity"]) == 1

    results = await client.get(f"{base}/results", headers=operator_headers)
    assert len(results.json()) == 1

    completed = await client.post(f"{base}/complete", headers=operator_headers)
    assert completed.json()["status"] == "COMPLETED"

    again = await client.post(f"{base}/complete", headers=operator_headers)
    assert again.status_code == 409
    assert again.json()["error"]["type"] == "INVALID_STATE"

    cancelled = await client.post(f"{base}/cancel", headers=operator_headers)
    assert cancelled.status_code == 409


@pytest.mark.asyncio
async def test_work_orders_by_status(client: AsyncClient, admin_headers, work_order):
    """Literal sub-paths are not swallowed by the id route."""
    response = await client.get(f"{API}/production/work-orders/status/PENDING", headers=admin_headers)
    assert response.status_code == 200
    assert [wo["work_order_no"] for wo in response.json()] == ["WO-001"]


@pytest.mark.asyncio
async def test_inspection_action_transition_error_is_400(client: AsyncClient, admin_headers):
    """Invalid action transitions map to 400 INVALID_STATUS_TRANSITION."""
    equipment = await client.post(
        f"{API}/equipment/equipments",
        json={"equipment_code": "PRESS-1", "equipment_name": "Press"},
        headers=admin_headers,
    )
    inspection = await client.post(
        f"{API}/equipment/inspections",
        json={
            "equipment_id": equipment.json()["id"],
            "inspection_no": "INS-100",
            "inspection_type": "DAILY",
            "inspection_date": "2026-03-01",
        },
        headers=admin_headers,
    )
    action = await client.post(
        f"{API}/equipment/inspection-actions",
        json={"inspection_id": inspection.json()["id"], "description": "Tighten guard"},
        headers=admin_headers,
    )
    assert action.json()["status"] == "OPEN"

    response = await client.patch(
        f"{API}/equipment/inspection-actions/{action.json()['id']}",
        json={"status": "COMPLETED"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["type"] == "INVALID_STATUS_TRANSITION"


@pytest.mark.asyncio
async def test_lot_split_endpoint(client: AsyncClient, admin_headers, material):
    """Splitting through the API returns the new child lot."""
    lot = await client.post(
        f"{API}/inventory/lots",
        json={"lot_no": "L-API", "product_id": str(material.id), "initial_quantity": "40", "unit": "KG"},
        headers=admin_headers,
    )
    assert lot.status_code == 201

    child = await client.post(
        f"{API}/inventory/lots/{lot.json()['id']}/split", json={"quantity": "15"}, headers=admin_headers
    )
    assert child.status_code == 201
    assert child.json()["lot_no"] == "L-API-S01"

    too_much = await client.post(
        f"{API}/inventory/lots/{lot.json()['id']}/split", json={"quantity": "25"}, headers=admin_headers
    )
    assert too_much.status_code == 400
    assert too_much.json()["error"]["type"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_dashboard_and_audit_endpoints(client: AsyncClient, admin_headers, operator_headers):
    """Dashboard is open to any active user; audit search needs ADMIN."""
    trend = await client.get(f"{API}/dashboard/login-trend", headers=operator_headers)
    assert trend.status_code == 200
    assert len(trend.json()) == 7

    assert (await client.get(f"{API}/audit-logs", headers=operator_headers)).status_code == 403
    page = await client.get(f"{API}/audit-logs", headers=admin_headers)
    assert page.status_code == 200
    assert page.json()["total"] == 0


@pytest.mark.asyncio
async def test_csv_report_download(client: AsyncClient, admin_headers, work_order):
    """Reports stream as attachments."""
    response = await client.get(f"{API}/reports/work-orders", params={"format": "csv"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="work_orders.csv"' in response.headers["content-disposition"]
    assert response.text.splitlines()[0].startswith("work_order_no,status,")

    bad = await client.get(f"{API}/reports/work-orders", params={"format": "docx"}, headers=admin_headers)
    assert bad.status_code == 400


def test_openapi_document_is_written(tmp_path):
    """The exported schema lists the versioned routes and documents the tenant header."""
    path = generate_openapi.main(str(tmp_path))
    with open(path) as f:
        schema = json.load(f)
    assert "/api/v1/production/work-orders/{item_id}/start" in schema["paths"]
    assert schema["x-tenant-header"]["name"] == "X-Tenant-ID"
