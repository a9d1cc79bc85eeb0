"""Per-member extraction of event figures from the three source tables."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from openpyxl.utils import get_column_letter

from board_reports import PROGRAM_QUOTA, SPONSORSHIP, TICKET_QUOTA
from board_reports.cells import coerce_number
from board_reports.models import EventRecord, SourceReferences, TableSource

logger = logging.getLogger(__name__)


def external_reference(source_path: Path, report_dir: Path, sheet: str, row: int, col: int) -> str:
    """Excel locator for a zero-based cell of *source_path*, relative to *report_dir*.

    >>> external_reference(Path("/d/in.xlsx"), Path("/d/out"), "S", 5, 2)
    "'../[in.xlsx]S'!$C$6"
    """
    source_path = Path(source_path).resolve()
    try:
        rel_dir = os.path.relpath(source_path.parent, Path(report_dir).resolve())
    except ValueError:
        # different drive on Windows
        rel_dir = str(source_path.parent)
    prefix = "" if rel_dir == os.curdir else rel_dir.replace(os.sep, "/") + "/"
    book_ref = f"{prefix}[{source_path.name}]{sheet}".replace("'", "''")
    return f"'{book_ref}'!${get_column_letter(col + 1)}${row + 1}"


def _read_value(
    source: TableSource,
    member_row: int,
    event: str,
    *,
    source_path: Path | None,
    report_dir: Path | None,
) -> tuple[float, str | None]:
    col = source.events.get(event)
    if col is None or not source.table.has_row(member_row):
        return 0.0, None

    try:
        value = coerce_number(source.table.cell(member_row, col))
    except Exception as exc:
        logger.warning(
            "Error reading %r row %d column %d: %s; using 0",
            source.table.name, member_row, col, exc,
        )
        value = 0.0

    reference = None
    if source_path is not None:
        reference = external_reference(
            source_path, report_dir or Path.cwd(), source.table.name, member_row, col
        )
    return value, reference


def extract_member_events(
    member_row: int,
    sources: Mapping[str, TableSource],
    event_names: Iterable[str],
    *,
    source_path: Path | None = None,
    report_dir: Path | None = None,
) -> list[EventRecord]:
    """Return the non-zero event records for the member at *member_row*.

    *sources* maps the sponsorship, program-quota and ticket-quota keys to
    their located tables; all three share the member's row.  When
    *source_path* is given each value also carries a live reference back into
    that workbook, relative to *report_dir*.
    """
    for source in sources.values():
        if not source.table.has_row(member_row):
            logger.warning(
                "Row %d missing from %r; its values count as 0", member_row, source.table.name
            )

    records: list[EventRecord] = []
    for event in event_names:
        values: dict[str, float] = {}
        references: dict[str, str | None] = {}
        for key in (SPONSORSHIP, PROGRAM_QUOTA, TICKET_QUOTA):
            source = sources.get(key)
            if source is None:
                values[key], references[key] = 0.0, None
                continue
            values[key], references[key] = _read_value(
                source, member_row, event, source_path=source_path, report_dir=report_dir
            )

        if not any(value > 0 for value in values.values()):
            continue

        refs = None
        if source_path is not None:
            refs = SourceReferences(
                sponsorship=references[SPONSORSHIP],
                program_quota=references[PROGRAM_QUOTA],
                ticket_quota=references[TICKET_QUOTA],
            )
        records.append(
            EventRecord.derive(
                index=len(records) + 1,
                name=event,
                sponsorship=values[SPONSORSHIP],
                program_quota=values[PROGRAM_QUOTA],
                ticket_quota=values[TICKET_QUOTA],
                references=refs,
            )
        )
    return records
