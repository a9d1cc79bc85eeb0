"""CLI entry point for board-member-reports."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table as RichTable

from board_reports import TABLE_KEYS, __version__
from board_reports.anchor import MatchMode
from board_reports.config import ReportConfig, apply_overrides, load_profile
from board_reports.errors import ReportError
from board_reports.io import write_json
from board_reports.logs import configure_logging
from board_reports.models import RunManifest
from board_reports.pipeline import Discovery, RunResult, discover, generate_reports
from board_reports.report import CURRENCY_FMT, INT_FMT
from board_reports.utils import sha256_file, utcnow_iso

app = typer.Typer(
    name="bmreports",
    help="board-member-reports — Split an overview workbook into per-member receivable reports.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {escape(msg)}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"board-member-reports v{__version__}")
        raise typer.Exit()


def _build_config(
    profile: Path | None, marker: str | None, match: MatchMode | None
) -> ReportConfig:
    """Defaults, then profile lines, then explicit CLI options."""
    lines = load_profile(profile)
    if marker:
        lines.append(f"marker={marker}")
    if match is not None:
        lines.append(f"match={match.value}")
    return apply_overrides(ReportConfig(), lines)


def _write_manifest(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    year: str,
    *,
    discovery: Discovery | None = None,
    result: RunResult | None = None,
    status: str = "success",
    error_code: int | None = None,
    error_message: str = "",
) -> Path:
    sha256 = ""
    try:
        sha256 = sha256_file(input_file)
    except OSError:
        pass

    manifest = RunManifest(
        version=__version__,
        input_path=str(input_file.resolve()),
        output_dir=str(out_dir.resolve()),
        created_at_utc=created_at,
        year=year,
        sha256=sha256,
        members_found=len(discovery.members) if discovery else 0,
        events_found=len(discovery.events) if discovery else 0,
        reports_written=result.succeeded if result else 0,
        failed_members=sorted(result.failures) if result else [],
        status=status,
        error_code=error_code,
        error_message=error_message,
    )
    return write_json(out_dir / "run_manifest.json", manifest.to_dict())


def _fail(
    out_dir: Path,
    input_file: Path,
    created_at: str,
    year: str,
    *,
    message: str,
    error_code: int,
) -> typer.Exit:
    manifest_path = _write_manifest(
        out_dir,
        input_file,
        created_at,
        year,
        status="failed",
        error_code=error_code,
        error_message=message,
    )
    _err(message)
    console.print(f"  Manifest -> {manifest_path}")
    return typer.Exit(code=error_code)


def _discovery_table(discovery: Discovery) -> RichTable:
    tbl = RichTable(title="Overview Layout", show_lines=True)
    tbl.add_column("Table", style="bold")
    tbl.add_column("Sheet")
    tbl.add_column("Anchor")
    tbl.add_column("Events", justify="right")
    for key in TABLE_KEYS:
        source = discovery.sources[key]
        tbl.add_row(
            key,
            source.table.name,
            f"row {source.anchor.row + 1}, col {source.anchor.col + 1}",
            str(len(source.events)),
        )
    return tbl


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """board-member-reports CLI."""


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the overview workbook (.xlsx).",
        exists=True, readable=True,
    ),
    out_dir: Path = typer.Option(
        Path("board_member_reports"), "--out-dir", "-o",
        help="Output directory for member reports + manifest.",
    ),
    year: str = typer.Option(
        "2024/25", "--year", "-y",
        help="Reporting year shown in titles and file names, e.g. 2024/25.",
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with layout settings (key=value lines).",
    ),
    marker: str | None = typer.Option(
        None, "--marker",
        help="Marker text of the anchor cell in each sheet.",
    ),
    match: MatchMode | None = typer.Option(
        None, "--match",
        help="Marker matching: contains or exact.",
    ),
    live_references: bool = typer.Option(
        False, "--live-references",
        help="Write formulas that re-read the overview file instead of fixed values.",
    ),
    decimals: bool = typer.Option(
        False, "--decimals/--integers",
        help="Number format for amounts: two decimals or grouped integers.",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q",
        help="Suppress informational output; still writes all artifacts.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging on the console.",
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file",
        help="Also write a debug log to this file.",
    ),
) -> None:
    """Generate one receivables report per board member."""
    configure_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    echo = _printer(quiet)
    created_at = utcnow_iso()
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        config = _build_config(profile, marker, match)
    except ValueError as exc:
        raise _fail(out_dir, input_file, created_at, year, message=str(exc), error_code=2)

    if not quiet:
        console.print(Panel(
            f"[bold]board-member-reports[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}\nYear:   {year}",
            title="Report Generation", border_style="blue",
        ))
        if profile:
            console.print(f"  Using profile: {profile}")

    # ── Discover ─────────────────────────────────────────────────
    echo("[blue]>[/blue] Reading overview file …")
    try:
        discovery = discover(input_file, config)
    except (ReportError, FileNotFoundError, ValueError, OSError) as exc:
        logger.error("Cannot read overview layout: %s", exc)
        raise _fail(out_dir, input_file, created_at, year, message=str(exc), error_code=2)

    echo(f"  {len(discovery.members)} members x {len(discovery.events)} events")

    # ── Generate ─────────────────────────────────────────────────
    try:
        echo("[blue]>[/blue] Writing member reports …")
        result = generate_reports(
            discovery,
            out_dir,
            year,
            live_references=live_references,
            number_format=CURRENCY_FMT if decimals else INT_FMT,
        )
        manifest_path = _write_manifest(
            out_dir, input_file, created_at, year, discovery=discovery, result=result
        )
        echo(f"  Manifest -> {manifest_path}")
    except Exception as exc:
        message = f"Unexpected internal error: {exc}"
        logger.exception("Unexpected internal error")
        raise _fail(out_dir, input_file, created_at, year, message=message, error_code=1)

    if not quiet:
        for member, reason in sorted(result.failures.items()):
            console.print(f"  [yellow]![/yellow] {escape(member)}: {escape(reason)}")
        style = "green" if not result.failures else "yellow"
        console.print(Panel(
            f"[{style}]Done[/{style}] — {result.summary()} -> {out_dir}",
            title="Generation Complete", border_style=style,
        ))
    else:
        console.print(result.summary())


# ── inspect command ──────────────────────────────────────────────


@app.command()
def inspect(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the overview workbook (.xlsx).",
        exists=True, readable=True,
    ),
    profile: Path | None = typer.Option(
        None, "--profile",
        help="Profile file with layout settings (key=value lines).",
    ),
    marker: str | None = typer.Option(
        None, "--marker",
        help="Marker text of the anchor cell in each sheet.",
    ),
    match: MatchMode | None = typer.Option(
        None, "--match",
        help="Marker matching: contains or exact.",
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Show debug logging on the console.",
    ),
) -> None:
    """Show the members and events found in the overview file without writing reports.

    Exit 0 = layout found, exit 2 = missing sheet, marker or bad settings.
    """
    configure_logging(verbose=verbose, quiet=not verbose)
    try:
        config = _build_config(profile, marker, match)
        discovery = discover(input_file, config)
    except (ReportError, FileNotFoundError, ValueError, OSError) as exc:
        _err(str(exc))
        raise typer.Exit(code=2)

    console.print(_discovery_table(discovery))

    members = RichTable(title=f"Members ({len(discovery.members)})")
    members.add_column("Row", justify="right")
    members.add_column("Name")
    for name, row in discovery.members.items():
        members.add_row(str(row + 1), name)
    console.print(members)

    events = RichTable(title=f"Events ({len(discovery.events)})")
    events.add_column("#", justify="right")
    events.add_column("Event")
    for idx, name in enumerate(discovery.events, 1):
        events.add_row(str(idx), name)
    console.print(events)
