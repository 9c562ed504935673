"""
Export service — generate CSV and Excel files from assignment logs.

All export functions return a BytesIO buffer ready to be sent as
a Flask response with the appropriate content type.  Both formats
share the same columns, built from ``assignment_log_service.describe_logs``.
"""

import csv
import io
import logging

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

# Excel header styling constants.
_HEADER_FONT = Font(bold=True, color="FFFFFF")
_HEADER_FILL = PatternFill(start_color="2B579A", end_color="2B579A", fill_type="solid")
_HEADER_ALIGN = Alignment(horizontal="center", wrap_text=True)

LOG_EXPORT_HEADERS = [
    "Log ID",
    "Changed At",
    "Action",
    "Staff ID",
    "Staff Name",
    "Software ID",
    "Software",
    "Changed By",
]


def _log_row(row: dict) -> list:
    """Flatten one ``describe_logs`` entry into export column order."""
    return [
        row["id"],
        row["changed_at"],
        row["action"],
        row["staff_id"],
        row["staff_name"] or "",
        row["software_id"],
        row["software_name"] or "",
        row["changed_by_name"] or row["changed_by"],
    ]


# =========================================================================
# CSV Exports
# =========================================================================

def export_logs_csv(rows: list[dict]) -> io.BytesIO:
    """
    Export assignment log rows to CSV.

    Args:
        rows: Serialized log entries from ``describe_logs``.

    Returns:
        BytesIO buffer containing the CSV data.
    """
    output = io.StringIO()
    writer = csv.writer(output)

    writer.writerow(LOG_EXPORT_HEADERS)
    for row in rows:
        writer.writerow(_log_row(row))

    # utf-8-sig so Excel detects the encoding when opening the CSV.
    buffer = io.BytesIO()
    buffer.write(output.getvalue().encode("utf-8-sig"))
    buffer.seek(0)

    logger.info("Exported %d assignment log rows to CSV", len(rows))
    return buffer


# =========================================================================
# Excel Exports
# =========================================================================

def export_logs_excel(rows: list[dict]) -> io.BytesIO:
    """
    Export assignment log rows to an Excel workbook.

    Args:
        rows: Serialized log entries from ``describe_logs``.

    Returns:
        BytesIO buffer containing the .xlsx data.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Assignment Logs"

    _write_header_row(ws, LOG_EXPORT_HEADERS)

    for row_idx, row in enumerate(rows, start=2):
        for col_idx, value in enumerate(_log_row(row), start=1):
            ws.cell(row=row_idx, column=col_idx, value=value)

    _auto_fit_columns(ws)

    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)

    logger.info("Exported %d assignment log rows to Excel", len(rows))
    return buffer


# =========================================================================
# Internal helpers
# =========================================================================

def _write_header_row(ws, headers: list[str]) -> None:
    """Write a styled header row to an Excel worksheet."""
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = _HEADER_ALIGN


def _auto_fit_columns(ws) -> None:
    """Auto-fit column widths based on content (approximate)."""
    for col in ws.columns:
        max_length = 0
        col_letter = get_column_letter(col[0].column)
        for cell in col:
            if cell.value:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[col_letter].width = min(max_length + 4, 40)
