"""Data models shared across discovery, extraction and reporting."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral, Real
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from board_reports.io import SheetTable

AxisIndex = dict[str, int]


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_float(value: Any, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{field_name} must be a number")
    return float(value)


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass(frozen=True)
class AnchorRef:
    """Zero-based position of the marker cell in one source table."""

    row: int
    col: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "row", _to_non_negative_int(self.row, "row"))
        object.__setattr__(self, "col", _to_non_negative_int(self.col, "col"))


@dataclass(frozen=True)
class SourceReferences:
    """External-reference locators pointing back into the overview workbook."""

    sponsorship: str | None = None
    program_quota: str | None = None
    ticket_quota: str | None = None


@dataclass(frozen=True)
class EventRecord:
    """One member's figures for one event.

    Contract invariants: ``total == sponsorship`` and
    ``receivable == total - ticket_quota``.
    """

    index: int
    name: str
    sponsorship: float
    program_quota: float
    ticket_quota: float
    total: float
    receivable: float
    references: SourceReferences | None = None

    def __post_init__(self) -> None:
        index = _to_non_negative_int(self.index, "index")
        if index < 1:
            raise ValueError("index must be >= 1")
        for name in ("sponsorship", "program_quota", "ticket_quota", "total", "receivable"):
            object.__setattr__(self, name, _to_float(getattr(self, name), name))
        if self.total != self.sponsorship:
            raise ValueError("total must equal sponsorship")
        if self.receivable != self.total - self.ticket_quota:
            raise ValueError("receivable must equal total - ticket_quota")

    @classmethod
    def derive(
        cls,
        index: int,
        name: str,
        sponsorship: float,
        program_quota: float,
        ticket_quota: float,
        references: SourceReferences | None = None,
    ) -> EventRecord:
        sponsorship = _to_float(sponsorship, "sponsorship")
        program_quota = _to_float(program_quota, "program_quota")
        ticket_quota = _to_float(ticket_quota, "ticket_quota")
        total = sponsorship
        return cls(
            index=index,
            name=name,
            sponsorship=sponsorship,
            program_quota=program_quota,
            ticket_quota=ticket_quota,
            total=total,
            receivable=total - ticket_quota,
            references=references,
        )

    @property
    def is_degenerate(self) -> bool:
        return not (self.sponsorship > 0 or self.program_quota > 0 or self.ticket_quota > 0)


@dataclass(frozen=True)
class TableSource:
    """A located source table: the sheet, its anchor and its event columns."""

    key: str
    table: SheetTable
    anchor: AnchorRef
    events: AxisIndex


@dataclass
class RunManifest:
    """Audit-trail manifest for a single report run."""

    tool: str = "board-member-reports"
    version: str = ""
    input_path: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    year: str = ""
    sha256: str = ""
    members_found: int = 0
    events_found: int = 0
    reports_written: int = 0
    failed_members: list[str] = field(default_factory=list)
    status: str = "success"
    error_code: int | None = None
    error_message: str = ""

    def __post_init__(self) -> None:
        self.members_found = _to_non_negative_int(self.members_found, "members_found")
        self.events_found = _to_non_negative_int(self.events_found, "events_found")
        self.reports_written = _to_non_negative_int(self.reports_written, "reports_written")
        self.failed_members = _to_string_list(self.failed_members, "failed_members")
        if self.reports_written > self.members_found:
            raise ValueError("reports_written must be <= members_found")
        if self.status not in {"success", "failed"}:
            raise ValueError(f"Invalid status: {self.status!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "year": self.year,
            "sha256": self.sha256,
            "members_found": self.members_found,
            "events_found": self.events_found,
            "reports_written": self.reports_written,
            "failed_members": list(self.failed_members),
            "status": self.status,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
