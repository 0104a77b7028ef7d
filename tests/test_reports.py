"""
Report rendering in every supported export format.
"""

import io
from decimal import Decimal

import pandas as pd
import pytest

from mes_api.core.errors import ValidationError
from mes_api.services.reports import WORK_ORDER_COLUMNS, ReportService, export_dataframe

from .conftest import TENANT


@pytest.fixture
def frame():
    return pd.DataFrame(
        [{"lot_no": "L-1", "current_quantity": Decimal("12.5")}, {"lot_no": "L-2", "current_quantity": Decimal("3")}]
    )


def test_csv_export(frame):
    """CSV carries a header row and no index column."""
    content, media_type, filename = export_dataframe(frame, "lots", "csv")
    assert media_type == "text/csv"
    assert filename == "lots.csv"
    lines = content.decode("utf-8").splitlines()
    assert lines[0] == "lot_no,current_quantity"
    assert lines[1] == "L-1,12.5"


def test_xlsx_export(frame):
    """Excel output is a zip container readable back into the same rows."""
    content, media_type, filename = export_dataframe(frame, "lots", "xlsx")
    assert content[:2] == b"PK"
    assert filename == "lots.xlsx"
    assert media_type.endswith("spreadsheetml.sheet")
    assert list(pd.read_excel(io.BytesIO(content))["lot_no"]) == ["L-1", "L-2"]


def test_pdf_export(frame):
    """PDF output starts with the PDF signature."""
    content, media_type, filename = export_dataframe(frame, "lots", "pdf")
    assert content.startswith(b"%PDF")
    assert media_type == "application/pdf"
    assert filename == "lots.pdf"


def test_unknown_format_rejected(frame):
    """Only csv, xlsx and pdf are supported."""
    with pytest.raises(ValidationError) as exc_info:
        export_dataframe(frame, "lots", "docx")
    assert exc_info.value.details == {"supported": ("csv", "xlsx", "pdf")}


@pytest.mark.asyncio
async def test_work_orders_frame(db_session, work_order):
    """Work orders are flattened with plain status strings."""
    df = await ReportService(db_session).work_orders_frame(TENANT)
    assert list(df.columns) == WORK_ORDER_COLUMNS
    assert df.loc[0, "work_order_no"] == "WO-001"
    assert df.loc[0, "status"] == "PENDING"


@pytest.mark.asyncio
async def test_empty_lots_frame_keeps_columns(db_session):
    """An empty tenant still exports a header."""
    df = await ReportService(db_session).lots_frame(TENANT)
    assert df.empty
    content, _, _ = export_dataframe(df, "lots", "csv")
    assert content.decode("utf-8").startswith("lot_no,lot_type,")
