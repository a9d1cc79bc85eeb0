"""Discovery + report generation — the run from overview workbook to member reports."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from board_reports import SPONSORSHIP, TABLE_KEYS
from board_reports.anchor import locate_anchor
from board_reports.axes import build_column_axis, build_row_axis
from board_reports.config import ReportConfig
from board_reports.errors import PerMemberReportFailure
from board_reports.events import merge_event_names
from board_reports.extract import extract_member_events
from board_reports.io import SourceWorkbook, open_workbook
from board_reports.models import AxisIndex, TableSource
from board_reports.report import INT_FMT, write_member_report
from board_reports.utils import report_filename

logger = logging.getLogger(__name__)


@dataclass
class Discovery:
    """Everything located in the overview workbook; read-only once built."""

    source_path: Path
    sources: dict[str, TableSource]
    members: AxisIndex
    events: list[str]


@dataclass
class RunResult:
    total: int = 0
    written: list[Path] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return len(self.written)

    def summary(self) -> str:
        return f"{self.succeeded}/{self.total} reports generated"


# ── Discovery ────────────────────────────────────────────────────


def discover_workbook(workbook: SourceWorkbook, config: ReportConfig | None = None) -> Discovery:
    """Locate anchors, members and events in an opened overview workbook.

    Raises
    ------
    TableMissing
        If one of the three configured sheets is absent.
    AnchorNotFound
        If a sheet has no marker cell.
    """
    config = config or ReportConfig()

    # All sheets and anchors are checked before any axis is built.
    located = []
    for key in TABLE_KEYS:
        layout = config.layout(key)
        table = workbook.table(layout.sheet)
        anchor = locate_anchor(table, config.marker, match=config.match, max_rows=config.scan_rows)
        located.append((key, layout, table, anchor))

    sources: dict[str, TableSource] = {}
    for key, layout, table, anchor in located:
        events = build_column_axis(
            table,
            anchor,
            start_col=anchor.col + layout.start_offset,
            stop=layout.column_stop,
        )
        logger.debug("%s: %d event columns in %r", key, len(events), table.name)
        sources[key] = TableSource(key=key, table=table, anchor=anchor, events=events)

    roster_source = sources[SPONSORSHIP]
    members = build_row_axis(
        roster_source.table,
        roster_source.anchor,
        policy=config.member_policy,
        lookahead=config.lookahead,
    )
    events = merge_event_names(*(sources[key].events for key in TABLE_KEYS))

    logger.info("Found %d board members in overview file", len(members))
    logger.info("Found %d unique events across all sheets", len(events))
    return Discovery(source_path=workbook.path, sources=sources, members=members, events=events)


def discover(path: Path, config: ReportConfig | None = None) -> Discovery:
    """Open the workbook at *path* and run :func:`discover_workbook` on it."""
    logger.info("Reading overview file: %s", path)
    return discover_workbook(open_workbook(path), config)


# ── Generation ───────────────────────────────────────────────────


def generate_member_report(
    discovery: Discovery,
    member: str,
    member_row: int,
    out_dir: Path,
    year: str,
    *,
    live_references: bool = False,
    number_format: str = INT_FMT,
    generated: date | None = None,
) -> Path:
    """Extract and write one member's report.

    Raises
    ------
    PerMemberReportFailure
        Wrapping whatever went wrong for this member.
    """
    logger.info("Generating report for: %s", member)
    try:
        records = extract_member_events(
            member_row,
            discovery.sources,
            discovery.events,
            source_path=discovery.source_path if live_references else None,
            report_dir=out_dir,
        )
        path = write_member_report(
            out_dir,
            member,
            records,
            year,
            generated=generated,
            live=live_references,
            number_format=number_format,
        )
    except Exception as exc:
        raise PerMemberReportFailure(member, exc) from exc
    logger.debug("Created report for %r with %d events at %s", member, len(records), path)
    return path


def generate_reports(
    discovery: Discovery,
    out_dir: Path,
    year: str,
    *,
    live_references: bool = False,
    number_format: str = INT_FMT,
    generated: date | None = None,
) -> RunResult:
    """Write a report for every member; one member failing never stops the rest."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    result = RunResult(total=len(discovery.members))
    claimed: dict[Path, str] = {}

    for member, member_row in discovery.members.items():
        # Distinct names can sanitize to the same file; the first member keeps it.
        target = out_dir / report_filename(year, member)
        owner = claimed.setdefault(target, member)
        if owner != member:
            reason = f"Report file {target.name!r} is already used by {owner!r}"
            logger.error("Skipping board member %r: %s", member, reason)
            result.failures[member] = reason
            continue

        try:
            path = generate_member_report(
                discovery,
                member,
                member_row,
                out_dir,
                year,
                live_references=live_references,
                number_format=number_format,
                generated=generated,
            )
        except PerMemberReportFailure as exc:
            logger.error("Error generating report for board member %r", member, exc_info=exc.cause)
            result.failures[member] = str(exc.cause)
            continue
        result.written.append(path)

    logger.info("Finished: %s", result.summary())
    return result
