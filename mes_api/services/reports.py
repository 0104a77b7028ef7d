"""
Tabular exports of tenant data as CSV, Excel or PDF.

Rows are collected into a pandas DataFrame and rendered to bytes; the API
layer streams the result back with the returned media type and file name.
"""
from __future__ import annotations

import io
from datetime import datetime, timezone
from typing import List, Tuple

import pandas as pd

from mes_api.core.errors import ValidationError
from mes_api.repositories.inventory import LotRepository
from mes_api.repositories.production import WorkOrderRepository
from mes_api.services.base import BaseService

EXPORT_FORMATS = ("csv", "xlsx", "pdf")

WORK_ORDER_COLUMNS: List[str] = [
    "work_order_no",
    "status",
    "planned_quantity",
    "actual_quantity",
    "good_quantity",
    "defect_quantity",
    "planned_start_date",
    "planned_end_date",
    "actual_start_date",
    "actual_end_date",
    "priority",
]

LOT_COLUMNS: List[str] = [
    "lot_no",
    "lot_type",
    "initial_quantity",
    "current_quantity",
    "unit",
    "quality_status",
    "manufacturing_date",
    "expiry_date",
]


def _render_pdf(df: pd.DataFrame, title: str) -> bytes:
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import landscape, letter
    from reportlab.lib.styles import getSampleStyleSheet
    from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter), leftMargin=18, rightMargin=18, topMargin=18, bottomMargin=18
    )
    styles = getSampleStyleSheet()
    stamp = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    table = Table([list(df.columns)] + df.astype(str).values.tolist(), repeatRows=1)
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("ALIGN", (0, 0), (-1, -1), "LEFT"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 8),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ]
        )
    )
    doc.build([Paragraph(f"{title} ({stamp})", styles["Title"]), table])
    return buffer.getvalue()


# PUBLIC_INTERFACE
def export_dataframe(df: pd.DataFrame, filename_base: str, export_format: str) -> Tuple[bytes, str, str]:
    """
    Render a DataFrame in the requested format.

    Returns:
        (content, media_type, filename)
    Raises:
        ValidationError: unsupported format.
    """
    export_format = (export_format or "csv").lower()
    if export_format == "csv":
        return df.to_csv(index=False).encode("utf-8"), "text/csv", f"{filename_base}.csv"
    if export_format in ("xlsx", "excel"):
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Report")
        return (
            buffer.getvalue(),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            f"{filename_base}.xlsx",
        )
    if export_format == "pdf":
        title = filename_base.replace("_", " ").title()
        return _render_pdf(df, title), "application/pdf", f"{filename_base}.pdf"
    raise ValidationError(f"Unsupported export format: {export_format}", details={"supported": EXPORT_FORMATS})


class ReportService(BaseService):
    """Builds report DataFrames from tenant data."""

    async def work_orders_frame(self, tenant_id: str) -> pd.DataFrame:
        rows = [
            {col: getattr(wo, col) for col in WORK_ORDER_COLUMNS}
            for wo in await WorkOrderRepository(self.session).list_by_tenant(tenant_id)
        ]
        df = pd.DataFrame(rows, columns=WORK_ORDER_COLUMNS)
        df["status"] = df["status"].map(lambda s: getattr(s, "value", s))
        return df

    async def lots_frame(self, tenant_id: str) -> pd.DataFrame:
        rows = [
            {col: getattr(lot, col) for col in LOT_COLUMNS}
            for lot in await LotRepository(self.session).list_by_tenant(tenant_id)
        ]
        return pd.DataFrame(rows, columns=LOT_COLUMNS)
