from __future__ import annotations

import io

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from mes_api.core.deps import MANAGER_ROLES, get_session, get_tenant_id, require_roles
from mes_api.services.reports import ReportService, export_dataframe

# PUBLIC_INTERFACE
router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(require_roles(*MANAGER_ROLES))],
)


def _stream(content: bytes, media_type: str, filename: str) -> StreamingResponse:
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    return StreamingResponse(io.BytesIO(content), media_type=media_type, headers=headers)


# PUBLIC_INTERFACE
@router.get(
    "/work-orders",
    summary="Work orders export",
    description="Export all work orders of the tenant. Formats: csv, xlsx, pdf.",
    response_class=StreamingResponse,
)
async def export_work_orders(
    format: str = Query("csv", description="csv | xlsx | pdf"),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> StreamingResponse:
    df = await ReportService(session).work_orders_frame(tenant_id)
    return _stream(*export_dataframe(df, "work_orders", format))


# PUBLIC_INTERFACE
@router.get(
    "/lots",
    summary="Lots export",
    description="Export lot quantities and quality status. Formats: csv, xlsx, pdf.",
    response_class=StreamingResponse,
)
async def export_lots(
    format: str = Query("csv", description="csv | xlsx | pdf"),
    tenant_id: str = Depends(get_tenant_id),
    session: AsyncSession = Depends(get_session),
) -> StreamingResponse:
    df = await ReportService(session).lots_frame(tenant_id)
    return _stream(*export_dataframe(df, "lots", format))
