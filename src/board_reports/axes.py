"""Build name -> position indexes along a table's member rows and event columns."""

from __future__ import annotations

import logging
import re
from enum import Enum

from board_reports.cells import cell_text
from board_reports.io import SheetTable
from board_reports.models import AnchorRef, AxisIndex

logger = logging.getLogger(__name__)

DEFAULT_LOOKAHEAD = 20

_NUMBERED_ENTRY_RE = re.compile(r"^\d+\.")


class RowPolicy(str, Enum):
    unconditional = "unconditional"
    numbered = "numbered"


class ColumnStop(str, Enum):
    last_populated = "last_populated"
    first_blank = "first_blank"


def _add_entry(index: AxisIndex, name: str, position: int, table: SheetTable, axis: str) -> None:
    if name in index:
        logger.warning(
            "Duplicate %s %r in %r at %d (keeping %d)",
            axis, name, table.name, position, index[name],
        )
        return
    index[name] = position


def build_row_axis(
    table: SheetTable,
    anchor: AnchorRef,
    *,
    policy: RowPolicy = RowPolicy.unconditional,
    lookahead: int = DEFAULT_LOOKAHEAD,
) -> AxisIndex:
    """Index the entries listed below *anchor* in the anchor's column.

    ``unconditional`` accepts every non-blank cell until the last row of the
    sheet.  ``numbered`` accepts only ``"<digits>."`` entries and scans at most
    *lookahead* rows past the anchor; rows that don't match are logged and
    skipped rather than ending the scan.
    """
    index: AxisIndex = {}
    start = anchor.row + 1
    stop = table.n_rows
    if policy is RowPolicy.numbered:
        stop = min(stop, anchor.row + 1 + lookahead)

    for row in range(start, stop):
        name = cell_text(table.cell(row, anchor.col))
        if not name:
            continue
        if policy is RowPolicy.numbered and not _NUMBERED_ENTRY_RE.match(name):
            logger.debug(
                "Row %d of %r (%r) is not numbered; possible end of list", row, table.name, name
            )
            continue
        _add_entry(index, name, row, table, "row")
    return index


def build_column_axis(
    table: SheetTable,
    anchor: AnchorRef,
    *,
    start_col: int | None = None,
    stop: ColumnStop = ColumnStop.last_populated,
) -> AxisIndex:
    """Index the header cells to the right of *anchor* on the anchor's row.

    Returns an empty index when the anchor row doesn't exist.
    """
    index: AxisIndex = {}
    if not table.has_row(anchor.row):
        return index

    first = anchor.col + 1 if start_col is None else start_col
    for col in range(first, table.row_width(anchor.row)):
        name = cell_text(table.cell(anchor.row, col))
        if not name:
            if stop is ColumnStop.first_blank:
                break
            continue
        _add_entry(index, name, col, table, "column")
    return index
