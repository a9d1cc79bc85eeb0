"""Locate the marker cell that anchors a table's member and event axes."""

from __future__ import annotations

import logging
from enum import Enum

from board_reports.cells import Text
from board_reports.errors import AnchorNotFound
from board_reports.io import SheetTable
from board_reports.models import AnchorRef

logger = logging.getLogger(__name__)

DEFAULT_SCAN_ROWS = 21


class MatchMode(str, Enum):
    contains = "contains"
    exact = "exact"


def normalize_marker_text(text: str) -> str:
    """Drop line breaks (wrapped header cells) and surrounding whitespace."""
    return text.replace("\r", "").replace("\n", "").strip()


def _matches(text: str, marker: str, match: MatchMode) -> bool:
    normalized = normalize_marker_text(text)
    if match is MatchMode.exact:
        return normalized == marker
    return marker in normalized


def locate_anchor(
    table: SheetTable,
    marker: str,
    *,
    match: MatchMode = MatchMode.contains,
    max_rows: int | None = DEFAULT_SCAN_ROWS,
) -> AnchorRef:
    """Return the first text cell (row-major) matching *marker*.

    Only the first *max_rows* rows are scanned; ``None`` scans the whole sheet.

    Raises
    ------
    AnchorNotFound
        If no cell in the scanned window matches.
    """
    marker = normalize_marker_text(marker)
    last_row = table.n_rows if max_rows is None else min(max_rows, table.n_rows)
    for row in range(last_row):
        for col in range(table.row_width(row)):
            cell = table.cell(row, col)
            if isinstance(cell, Text) and _matches(cell.text, marker, match):
                anchor = AnchorRef(row=row, col=col)
                logger.debug("Anchor %r in %r at %s", marker, table.name, anchor)
                return anchor
    raise AnchorNotFound(table.name, marker)
