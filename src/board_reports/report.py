"""Excel report writer — one receivables workbook per board member."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from pathlib import Path
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from board_reports.models import EventRecord
from board_reports.utils import display_name, report_filename

# ── Style constants ──────────────────────────────────────────────

TITLE_FONT = Font(name="Calibri", bold=True, size=14)
SUBTITLE_FONT = Font(name="Calibri", bold=True, size=12)
HEADER_FONT = Font(name="Calibri", bold=True, size=11)
TOTAL_FONT = Font(name="Calibri", bold=True, size=11)
CENTER = Alignment(horizontal="center")

THIN = Side(style="thin")
THIN_BORDER = Border(left=THIN, right=THIN, top=THIN, bottom=THIN)

INT_FMT = '#,##0'
CURRENCY_FMT = '#,##0.00'

SHEET_TITLE = "Report"
HEADERS: list[str] = ["籌款項目", "", "節目贊助", "總額", "節目定額", "購劵定額", "應收款"]
COLUMN_WIDTHS: list[int] = [10, 20, 15, 15, 15, 15, 15]

TITLE_ROW = 1
YEAR_ROW = 2
DATE_ROW = 4
HEADER_ROW = 5
FIRST_DATA_ROW = 6

# Column numbers (1-based) in the report sheet
COL_INDEX, COL_NAME, COL_SPONSORSHIP, COL_TOTAL, COL_PROGRAM, COL_TICKET, COL_RECEIVABLE = range(1, 8)

_EXCEL_FORMULA_PREFIXES = ("=", "+", "-", "@")


# ── Helpers ──────────────────────────────────────────────────────


def _excel_text(val: str) -> str:
    """Keep event names that look like formulas as literal text."""
    stripped = val.lstrip()
    if stripped and stripped[0] in _EXCEL_FORMULA_PREFIXES:
        return f"'{val}"
    return val


def _write_header(ws: Worksheet, member: str, year: str, generated: date) -> None:
    ws.cell(row=TITLE_ROW, column=1, value=_excel_text(display_name(member))).font = TITLE_FONT
    ws.cell(row=YEAR_ROW, column=1, value=f"{year} 籌款活動應收款頂").font = SUBTITLE_FONT
    ws.cell(
        row=DATE_ROW, column=1,
        value=f"製作日期：{generated.day:02d}/{generated.month}/{generated.year}",
    )

    for c_idx, label in enumerate(HEADERS, 1):
        cell = ws.cell(row=HEADER_ROW, column=c_idx, value=label or None)
        if label:
            cell.font = HEADER_FONT
            cell.alignment = CENTER


def _quota_value(value: float) -> float | None:
    return value if value > 0 else None


def _row_values(record: EventRecord, row: int, live: bool) -> dict[int, Any]:
    values: dict[int, Any] = {
        COL_INDEX: record.index,
        COL_NAME: _excel_text(record.name),
        COL_SPONSORSHIP: record.sponsorship,
        COL_TOTAL: record.total,
        COL_PROGRAM: _quota_value(record.program_quota),
        COL_TICKET: _quota_value(record.ticket_quota),
        COL_RECEIVABLE: record.receivable,
    }
    refs = record.references
    if live and refs is not None:
        sponsorship = get_column_letter(COL_SPONSORSHIP)
        total = get_column_letter(COL_TOTAL)
        ticket = get_column_letter(COL_TICKET)
        if refs.sponsorship:
            values[COL_SPONSORSHIP] = f"={refs.sponsorship}"
        if refs.program_quota and record.program_quota > 0:
            values[COL_PROGRAM] = f"={refs.program_quota}"
        if refs.ticket_quota and record.ticket_quota > 0:
            values[COL_TICKET] = f"={refs.ticket_quota}"
        values[COL_TOTAL] = f"={sponsorship}{row}"
        values[COL_RECEIVABLE] = f"={total}{row}-{ticket}{row}"
    return values


def _write_records(
    ws: Worksheet, records: Sequence[EventRecord], *, live: bool, number_format: str
) -> None:
    for offset, record in enumerate(records):
        row = FIRST_DATA_ROW + offset
        for c_idx, value in _row_values(record, row, live).items():
            cell = ws.cell(row=row, column=c_idx, value=value)
            if c_idx != COL_NAME:
                cell.number_format = number_format
                cell.alignment = CENTER


def _write_summary(ws: Worksheet, n_records: int, *, number_format: str) -> int:
    row = FIRST_DATA_ROW + n_records
    last = row - 1
    for c_idx in range(COL_SPONSORSHIP, COL_RECEIVABLE + 1):
        letter = get_column_letter(c_idx)
        value: Any = f"=SUM({letter}{FIRST_DATA_ROW}:{letter}{last})" if n_records else 0
        cell = ws.cell(row=row, column=c_idx, value=value)
        cell.font = TOTAL_FONT
        cell.alignment = CENTER
        cell.number_format = number_format
    return row


def _apply_layout(ws: Worksheet, summary_row: int) -> None:
    for c_idx, width in enumerate(COLUMN_WIDTHS, 1):
        ws.column_dimensions[get_column_letter(c_idx)].width = width
    for row in ws.iter_rows(min_row=HEADER_ROW, max_row=summary_row - 1, max_col=len(HEADERS)):
        for cell in row:
            cell.border = THIN_BORDER
    for row in ws.iter_rows(
        min_row=summary_row, max_row=summary_row,
        min_col=COL_SPONSORSHIP, max_col=COL_RECEIVABLE,
    ):
        for cell in row:
            cell.border = THIN_BORDER


# ── Public API ───────────────────────────────────────────────────


def build_member_workbook(
    member: str,
    records: Sequence[EventRecord],
    year: str,
    *,
    generated: date | None = None,
    live: bool = False,
    number_format: str = INT_FMT,
) -> Workbook:
    """Lay out one member's report in a new single-sheet workbook."""
    wb = Workbook()
    ws = wb.active
    if ws is None:
        ws = wb.create_sheet()
    ws.title = SHEET_TITLE

    _write_header(ws, member, year, generated or date.today())
    _write_records(ws, records, live=live, number_format=number_format)
    summary_row = _write_summary(ws, len(records), number_format=number_format)
    _apply_layout(ws, summary_row)
    return wb


def write_member_report(
    out_dir: Path,
    member: str,
    records: Sequence[EventRecord],
    year: str,
    *,
    generated: date | None = None,
    live: bool = False,
    number_format: str = INT_FMT,
) -> Path:
    """Write the report for *member* into *out_dir* and return its path.

    The workbook is saved to a temporary file first and renamed into place,
    so an interrupted run never leaves a partial report behind.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    report_path = out_dir / report_filename(year, member)

    wb = build_member_workbook(
        member, records, year, generated=generated, live=live, number_format=number_format
    )
    tmp_path = report_path.with_name(f".{report_path.stem}.tmp.xlsx")
    try:
        wb.save(tmp_path)
        tmp_path.replace(report_path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
    return report_path
