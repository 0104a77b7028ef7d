from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from mes_api.core.deps import get_tenant_id
from mes_api.core.errors import DomainError
from mes_api.core.logging import configure_logging, correlation_id_var, tenant_id_var
from mes_api.core.settings import get_app_settings
from mes_api.db.run_migrations import main as run_alembic
from mes_api.db.seed import seed_all
from mes_api.schemas.common import ErrorInfo, ErrorResponse, MessageResponse, TenantEcho

# Routers
from mes_api.api.routes.auth import router as auth_router
from mes_api.api.routes.users import router as users_router
from mes_api.api.routes.roles import router as roles_router
from mes_api.api.routes.organization import router as organization_router
from mes_api.api.routes.partners import router as partners_router
from mes_api.api.routes.master_data import router as masterdata_router
from mes_api.api.routes.production import router as production_router
from mes_api.api.routes.inventory import router as inventory_router
from mes_api.api.routes.equipment import router as equipment_router
from mes_api.api.routes.audit import router as audit_router
from mes_api.api.routes.dashboard import router as dashboard_router
from mes_api.api.routes.reports import router as reports_router

settings = get_app_settings()

# Configure structured logging once at import
configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "Health", "description": "Liveness and tenant header probes."},
    {"name": "Auth", "description": "Authentication and token endpoints."},
    {"name": "Users", "description": "User administration endpoints."},
    {"name": "Roles", "description": "Roles and permissions."},
    {"name": "Organization", "description": "Sites and departments."},
    {"name": "Partners", "description": "Suppliers and customers."},
    {"name": "Master Data", "description": "Products, processes, BOMs and process routings."},
    {"name": "Production", "description": "Work orders and work results."},
    {"name": "Inventory", "description": "Lots and quality status."},
    {"name": "Equipment", "description": "Equipment, inspections, corrective actions and gauges."},
    {"name": "Audit", "description": "Audit trail search and statistics."},
    {"name": "Dashboard", "description": "Tenant statistics."},
    {"name": "Reports", "description": "Exportable business reports (CSV/Excel/PDF)."},
]

app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    openapi_tags=openapi_tags,
)

# CORS - avoid wildcard with credentials
cors_allow_credentials = settings.CORS_ALLOW_CREDENTIALS
if settings.CORS_ORIGINS == ["*"] and cors_allow_credentials:
    logger.warning("CORS_ALLOW_CREDENTIALS=True with '*' origins is not permitted; disabling credentials.")
    cors_allow_credentials = False

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=cors_allow_credentials,
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=settings.CORS_ALLOW_HEADERS,
)


CORRELATION_HEADER = "X-Correlation-ID"


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """
    Bind the correlation id and raw tenant header to the log context for the
    duration of the request and echo the correlation id on the response.
    """
    correlation_id = request.headers.get(CORRELATION_HEADER) or request.headers.get("X-Request-ID") or str(uuid4())
    raw_tenant = request.headers.get("X-Tenant-ID")
    corr_token = correlation_id_var.set(correlation_id)
    tenant_token = tenant_id_var.set(raw_tenant)
    request.state.correlation_id = correlation_id
    request.state.tenant_id = raw_tenant

    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        logger.info(
            "%s %s -> %s (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
    finally:
        correlation_id_var.reset(corr_token)
        tenant_id_var.reset(tenant_token)


def _error_json(request: Request, status_code: int, error_type: str, message: str, details: Any = None) -> JSONResponse:
    """Render the ErrorResponse envelope shared by every handler below."""
    body = ErrorResponse(
        status=status_code,
        error=ErrorInfo(type=error_type, message=message, details=details),
        correlation_id=getattr(request.state, "correlation_id", None),
        tenant_id=getattr(request.state, "tenant_id", None),
        path=request.url.path,
        method=request.method,
        timestamp=datetime.now(tz=timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """
    Map service-layer errors to their HTTP status.

    NotFound -> 404, AlreadyExists/InvalidState -> 409,
    InvalidStatusTransition/Validation -> 400, Authentication -> 401.
    """
    logger.info("Domain error %s: %s", exc.code, exc.message)
    return _error_json(request, exc.http_status, exc.code, exc.message, exc.details)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    if isinstance(exc.detail, str):
        return _error_json(request, exc.status_code, "http_error", exc.detail)
    return _error_json(request, exc.status_code, "http_error", "HTTP Error", exc.detail)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error_json(request, 422, "validation_error", "Request validation failed", exc.errors())


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last resort: log the traceback, return an opaque 500."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error_json(request, 500, "internal_error", "An unexpected error occurred")


@app.on_event("startup")
async def on_startup() -> None:
    """
    Bring the schema to head and load seed data when enabled.

    Alembic's env drives its own event loop, hence the worker thread.
    Failures are logged and the service keeps serving.
    """
    if settings.RUN_MIGRATIONS_ON_STARTUP:
        try:
            await asyncio.to_thread(run_alembic, ["upgrade", "head"])
            logger.info("Schema upgraded to head")
        except Exception:
            logger.exception("Startup migration failed")

    if settings.AUTO_SEED:
        try:
            await seed_all()
            logger.info("Seed data loaded")
        except Exception:
            logger.exception("Startup seeding failed")


# Build API v1 router and include sub-routers
api_v1 = APIRouter(prefix="/api/v1")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health",
    response_model=MessageResponse,
    summary="Health Check",
    tags=["Health"],
)
def health_check() -> MessageResponse:
    """
    Basic liveness health check endpoint.

    Returns:
        MessageResponse: Simple confirmation that the service is running.
    """
    return MessageResponse(message="Healthy")


# PUBLIC_INTERFACE
@api_v1.get(
    "/health/tenant",
    response_model=TenantEcho,
    summary="Tenant Health Echo",
    description="Echoes the tenant context to verify header handling.",
    tags=["Health"],
)
async def tenant_health_echo(tenant_id: str = Depends(get_tenant_id)) -> TenantEcho:
    """
    Echo the provided tenant ID to verify multi-tenant request handling.

    Parameters:
        X-Tenant-ID (header): tenant identifier.
    """
    return TenantEcho(tenant_id=tenant_id)


for domain_router in (
    auth_router,
    users_router,
    roles_router,
    organization_router,
    partners_router,
    masterdata_router,
    production_router,
    inventory_router,
    equipment_router,
    audit_router,
    dashboard_router,
    reports_router,
):
    api_v1.include_router(domain_router)

app.include_router(api_v1)
