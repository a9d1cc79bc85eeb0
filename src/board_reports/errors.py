"""Exceptions raised while discovering the overview layout or writing reports."""

from __future__ import annotations


class ReportError(Exception):
    """Base class for board-member-reports errors."""


class TableMissing(ReportError):
    def __init__(self, sheet: str) -> None:
        super().__init__(f"Sheet {sheet!r} not found in overview file")
        self.sheet = sheet


class AnchorNotFound(ReportError):
    def __init__(self, sheet: str, marker: str) -> None:
        super().__init__(f"Marker cell {marker!r} not found in sheet {sheet!r}")
        self.sheet = sheet
        self.marker = marker


class PerMemberReportFailure(ReportError):
    """Wraps whatever went wrong while building one member's report."""

    def __init__(self, member: str, cause: BaseException) -> None:
        super().__init__(f"Report for {member!r} failed: {cause}")
        self.member = member
        self.cause = cause
