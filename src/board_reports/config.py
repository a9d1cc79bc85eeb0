"""Layout configuration — sheet names, marker text and axis policies."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

from board_reports import PROGRAM_QUOTA, SPONSORSHIP, TABLE_KEYS, TICKET_QUOTA
from board_reports.anchor import DEFAULT_SCAN_ROWS, MatchMode
from board_reports.axes import DEFAULT_LOOKAHEAD, ColumnStop, RowPolicy

DEFAULT_MARKER = "編號"


@dataclass(frozen=True)
class TableLayout:
    """Where one source table lives and how its event header row is read.

    ``start_offset`` is the number of columns after the anchor column where
    event headers begin (1 = the column right of the anchor).
    """

    key: str
    sheet: str
    start_offset: int = 1
    column_stop: ColumnStop = ColumnStop.last_populated


def _default_tables() -> dict[str, TableLayout]:
    return {
        SPONSORSHIP: TableLayout(SPONSORSHIP, "節目贊助"),
        PROGRAM_QUOTA: TableLayout(PROGRAM_QUOTA, "節目定額"),
        TICKET_QUOTA: TableLayout(TICKET_QUOTA, "購劵定額"),
    }


@dataclass(frozen=True)
class ReportConfig:
    marker: str = DEFAULT_MARKER
    match: MatchMode = MatchMode.contains
    scan_rows: int | None = DEFAULT_SCAN_ROWS
    member_policy: RowPolicy = RowPolicy.unconditional
    lookahead: int = DEFAULT_LOOKAHEAD
    tables: dict[str, TableLayout] = field(default_factory=_default_tables)

    def layout(self, key: str) -> TableLayout:
        return self.tables[key]


def _parse_positive_int(key: str, raw: str, *, minimum: int = 0) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ValueError(f"{key} must be >= {minimum}, got {value}")
    return value


def _parse_enum(key: str, raw: str, enum_cls: type) -> object:
    try:
        return enum_cls(raw.strip().lower())
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValueError(f"{key} must be one of: {choices} (got {raw!r})") from exc


def apply_overrides(config: ReportConfig, lines: list[str]) -> ReportConfig:
    """Apply ``key=value`` override lines to *config*; later lines win.

    Raises
    ------
    ValueError
        On malformed lines, unknown keys or invalid values.
    """
    tables = dict(config.tables)
    changes: dict[str, object] = {}

    for item in lines:
        if "=" not in item:
            raise ValueError(f"Invalid setting: {item!r}  (expected key=value)")
        key, raw = (part.strip() for part in item.split("=", 1))
        if not key or not raw:
            raise ValueError(f"Settings must have a non-empty key and value: {item!r}")

        if key == "marker":
            changes["marker"] = raw
        elif key == "match":
            changes["match"] = _parse_enum(key, raw, MatchMode)
        elif key == "scan_rows":
            changes["scan_rows"] = (
                None if raw.lower() == "all" else _parse_positive_int(key, raw, minimum=1)
            )
        elif key == "member_policy":
            changes["member_policy"] = _parse_enum(key, raw, RowPolicy)
        elif key == "lookahead":
            changes["lookahead"] = _parse_positive_int(key, raw, minimum=1)
        elif "." in key:
            table_key, attr = key.split(".", 1)
            if table_key not in TABLE_KEYS:
                raise ValueError(
                    f"Unknown table {table_key!r} in {key!r}; use one of: {', '.join(TABLE_KEYS)}"
                )
            layout = tables[table_key]
            if attr == "sheet":
                layout = replace(layout, sheet=raw)
            elif attr == "start_offset":
                layout = replace(layout, start_offset=_parse_positive_int(key, raw, minimum=1))
            elif attr == "column_stop":
                layout = replace(layout, column_stop=_parse_enum(key, raw, ColumnStop))
            else:
                raise ValueError(f"Unknown setting: {key!r}")
            tables[table_key] = layout
        else:
            raise ValueError(f"Unknown setting: {key!r}")

    return replace(config, tables=tables, **changes)


def load_profile(profile: Path | None) -> list[str]:
    """Return the ``key=value`` lines of a profile file (blank lines and ``#`` comments skipped)."""
    if not profile:
        return []
    if not profile.exists():
        raise ValueError(f"Profile not found: {profile} (expected lines like marker=編號)")
    if profile.is_dir():
        raise ValueError(f"Profile is a directory, not a file: {profile}")
    try:
        text = profile.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"Cannot read profile {profile}: {exc}") from exc

    lines: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        lines.append(stripped)
    return lines
