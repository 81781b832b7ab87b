"""
Spreadsheet export of cleaned transactions (openpyxl).
"""

import io
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

import structlog
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

logger = structlog.get_logger()

SHEET_TITLE = "Transactions"
HEADERS = ("Date", "clean transactions", "amount", "original transactions")
ROW_KEYS = ("date", "clean", "amount", "original")

DATE_FORMAT = "m/d/yyyy"
AMOUNT_FORMAT = "0.00;-0.00"
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 120

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def parse_us_date(value: Any) -> Optional[datetime]:
    """MM/DD/YYYY -> datetime; None for anything else."""
    try:
        return datetime.strptime(str(value or "").strip(), "%m/%d/%Y")
    except ValueError:
        return None


def build_workbook_bytes(rows: Iterable[Dict[str, Any]]) -> bytes:
    """
    Build the export workbook.

    Rows are dicts with date, clean, amount, original. Dates that parse
    become real date cells; anything else is written as text.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(HEADERS)

    count = 0
    for row in rows:
        date_value = parse_us_date(row.get("date"))
        sheet.append([
            date_value or row.get("date"),
            row.get("clean"),
            row.get("amount"),
            row.get("original"),
        ])
        count += 1

    last_column = get_column_letter(len(HEADERS))
    sheet.freeze_panes = "A2"
    sheet.auto_filter.ref = f"A1:{last_column}1"

    header_font = Font(name="Arial", size=10, bold=True)
    body_font = Font(name="Arial", size=10)
    top = Alignment(vertical="top")

    for row_cells in sheet.iter_rows():
        for cell in row_cells:
            cell.font = header_font if cell.row == 1 else body_font
            cell.alignment = top
            if cell.row == 1:
                continue
            if cell.column == 1 and isinstance(cell.value, datetime):
                cell.number_format = DATE_FORMAT
            elif cell.column == 3:
                cell.number_format = AMOUNT_FORMAT

    _autosize_columns(sheet)

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.debug("Workbook built", rows=count)
    return buffer.getvalue()


def _autosize_columns(sheet) -> None:
    for index in range(1, len(HEADERS) + 1):
        width = MIN_COLUMN_WIDTH
        for (cell,) in sheet.iter_rows(min_col=index, max_col=index):
            text = "" if cell.value is None else str(cell.value)
            width = max(width, min(MAX_COLUMN_WIDTH, len(text) + 2))
        sheet.column_dimensions[get_column_letter(index)].width = width
