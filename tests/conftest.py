from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

MARKER_HEADER = "編號\n姓名"

TableSpec = tuple[list[str], dict[str, list[Any]]]

# Events differ per sheet: {A, B} / {B, C} / {C}.
SCENARIO: dict[str, TableSpec] = {
    "節目贊助": (["A", "B"], {
        "1.Alice": [100, 0],
        "2.Bob": [0, 0],
        "3.Carol": ["250", 30],
    }),
    "節目定額": (["B", "C"], {
        "1.Alice": [50, 0],
        "2.Bob": [0, 0],
        "3.Carol": [None, 10],
    }),
    "購劵定額": (["C"], {
        "1.Alice": [20],
        "2.Bob": [0],
        "3.Carol": [5],
    }),
}


def fill_table(
    ws: Worksheet,
    events: list[str],
    rows: dict[str, list[Any]],
    *,
    anchor_row: int = 3,
    anchor_col: int = 1,
    marker: str = MARKER_HEADER,
) -> None:
    """Lay out a table with its marker at (anchor_row, anchor_col), 1-based."""
    ws.cell(row=1, column=1, value="董事會成員定額紀錄 2024")
    ws.cell(row=anchor_row, column=anchor_col, value=marker)
    for offset, event in enumerate(events, 1):
        ws.cell(row=anchor_row, column=anchor_col + offset, value=event)
    for r_offset, (member, values) in enumerate(rows.items(), 1):
        ws.cell(row=anchor_row + r_offset, column=anchor_col, value=member)
        for c_offset, value in enumerate(values, 1):
            if value is not None:
                ws.cell(row=anchor_row + r_offset, column=anchor_col + c_offset, value=value)


@pytest.fixture
def build_overview(tmp_path: Path) -> Callable[..., Path]:
    def _build(
        tables: dict[str, TableSpec] | None = None,
        name: str = "overview.xlsx",
        **layout: Any,
    ) -> Path:
        wb = Workbook()
        active = wb.active
        if active is not None:
            wb.remove(active)
        for sheet, (events, rows) in (tables or SCENARIO).items():
            fill_table(wb.create_sheet(sheet), events, rows, **layout)
        path = tmp_path / name
        wb.save(path)
        return path

    return _build


@pytest.fixture
def overview_path(build_overview: Callable[..., Path]) -> Path:
    return build_overview()


@pytest.fixture(autouse=True)
def _reset_package_logging() -> Any:
    yield
    logger = logging.getLogger("board_reports")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
