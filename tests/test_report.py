"""Tests for the member report layout and formatting contracts."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest
from openpyxl import load_workbook

from board_reports import report as report_mod
from board_reports.models import EventRecord, SourceReferences
from board_reports.report import (
    CURRENCY_FMT,
    HEADERS,
    INT_FMT,
    build_member_workbook,
    write_member_report,
)

GENERATED = date(2024, 9, 5)


def _records() -> list[EventRecord]:
    return [
        EventRecord.derive(1, "Gala", 100, 0, 0),
        EventRecord.derive(2, "Concert", 0, 50, 0),
        EventRecord.derive(3, "=Raffle", 0, 0, 20),
    ]


def _row(ws, row: int) -> list[object]:  # type: ignore[no-untyped-def]
    return [ws.cell(row=row, column=c).value for c in range(1, 8)]


def test_write_member_report_path_and_title_block(tmp_path: Path) -> None:
    path = write_member_report(tmp_path, "1.Jane Doe", _records(), "2024/25", generated=GENERATED)

    assert path == tmp_path / "202425籌款活動應收款_1.Jane Doe.xlsx"
    wb = load_workbook(path)
    assert wb.sheetnames == ["Report"]
    ws = wb["Report"]
    assert ws["A1"].value == "Jane Doe"
    assert ws["A1"].font.bold
    assert ws["A2"].value == "2024/25 籌款活動應收款頂"
    assert ws["A4"].value == "製作日期：05/9/2024"
    assert _row(ws, 5) == [h or None for h in HEADERS]


def test_data_rows_hold_values_and_blank_zero_quotas(tmp_path: Path) -> None:
    path = write_member_report(tmp_path, "Jane", _records(), "2024/25", generated=GENERATED)
    ws = load_workbook(path)["Report"]

    assert _row(ws, 6) == [1, "Gala", 100, 100, None, None, 100]
    assert _row(ws, 7) == [2, "Concert", 0, 0, 50, None, 0]
    # names that look like formulas stay literal text
    assert _row(ws, 8) == [3, "'=Raffle", 0, 0, None, 20, -20]
    assert ws["C6"].number_format == INT_FMT


def test_summary_row_sums_data_rows(tmp_path: Path) -> None:
    path = write_member_report(tmp_path, "Jane", _records(), "2024/25", generated=GENERATED)
    ws = load_workbook(path)["Report"]

    assert _row(ws, 9) == [
        None, None, "=SUM(C6:C8)", "=SUM(D6:D8)", "=SUM(E6:E8)", "=SUM(F6:F8)", "=SUM(G6:G8)",
    ]
    assert ws["C9"].font.bold
    assert ws["C9"].border.top.style == "thin"
    assert ws["A9"].border.top.style is None
    assert ws["E6"].border.left.style == "thin"


def test_empty_member_report_has_zero_summary(tmp_path: Path) -> None:
    path = write_member_report(tmp_path, "Bob", [], "2024/25", generated=GENERATED)
    ws = load_workbook(path)["Report"]

    assert _row(ws, 6) == [None, None, 0, 0, 0, 0, 0]


def test_decimal_number_format_option() -> None:
    wb = build_member_workbook(
        "Jane", _records(), "2024/25", generated=GENERATED, number_format=CURRENCY_FMT
    )
    ws = wb["Report"]

    assert ws["C6"].number_format == CURRENCY_FMT
    assert ws["G9"].number_format == CURRENCY_FMT


def test_live_reference_rows_use_formulas() -> None:
    refs = SourceReferences(
        sponsorship="'../[overview.xlsx]節目贊助'!$B$4",
        program_quota=None,
        ticket_quota="'../[overview.xlsx]購劵定額'!$B$4",
    )
    record = EventRecord.derive(1, "Gala", 100, 0, 20, references=refs)

    ws = build_member_workbook("Jane", [record], "2024/25", generated=GENERATED, live=True)["Report"]

    assert _row(ws, 6) == [
        1,
        "Gala",
        "='../[overview.xlsx]節目贊助'!$B$4",
        "=C6",
        None,
        "='../[overview.xlsx]購劵定額'!$B$4",
        "=D6-F6",
    ]


def test_column_widths_are_fixed() -> None:
    ws = build_member_workbook("Jane", _records(), "2024/25", generated=GENERATED)["Report"]

    assert ws.column_dimensions["A"].width == 10
    assert ws.column_dimensions["B"].width == 20
    assert ws.column_dimensions["G"].width == 15


def test_failed_save_leaves_no_partial_file(tmp_path: Path, monkeypatch) -> None:  # type: ignore[no-untyped-def]
    real_build = report_mod.build_member_workbook

    def _broken_build(*args, **kwargs):  # type: ignore[no-untyped-def]
        wb = real_build(*args, **kwargs)

        def _boom(path: Path) -> None:
            Path(path).write_bytes(b"partial")
            raise OSError("disk full")

        wb.save = _boom  # type: ignore[method-assign]
        return wb

    monkeypatch.setattr(report_mod, "build_member_workbook", _broken_build)

    with pytest.raises(OSError, match="disk full"):
        write_member_report(tmp_path, "Jane", _records(), "2024/25")

    assert list(tmp_path.iterdir()) == []
