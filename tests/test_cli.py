"""CLI integration tests for board-member-reports."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

from board_reports import __version__
from board_reports import pipeline as pipeline_mod
from board_reports.cli import app
from board_reports.report import CURRENCY_FMT

runner = CliRunner()


def _manifest(out_dir: Path) -> dict[str, object]:
    return json.loads((out_dir / "run_manifest.json").read_text(encoding="utf-8"))


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"v{__version__}" in result.output


def test_run_success_writes_reports_and_manifest(overview_path: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--input", str(overview_path), "--out-dir", str(out_dir), "--year", "2024/25", "--quiet"],
    )

    assert result.exit_code == 0, result.output
    assert "3/3 reports generated" in result.output
    assert len(list(out_dir.glob("*.xlsx"))) == 3
    manifest = _manifest(out_dir)
    assert manifest["status"] == "success"
    assert manifest["members_found"] == 3
    assert manifest["events_found"] == 3
    assert manifest["reports_written"] == 3
    assert manifest["failed_members"] == []
    assert manifest["year"] == "2024/25"
    assert len(str(manifest["sha256"])) == 64


def test_run_nonquiet_shows_panels(overview_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(
        app, ["run", "--input", str(overview_path), "--out-dir", str(tmp_path / "out")]
    )

    assert result.exit_code == 0, result.output
    assert "Report Generation" in result.output
    assert "Generation Complete" in result.output
    assert "3 members x 3 events" in result.output


def test_run_missing_anchor_aborts_before_any_report(overview_path: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--input", str(overview_path), "--out-dir", str(out_dir), "--marker", "Nope", "--quiet"],
    )

    assert result.exit_code == 2
    assert list(out_dir.glob("*.xlsx")) == []
    manifest = _manifest(out_dir)
    assert manifest["status"] == "failed"
    assert manifest["error_code"] == 2
    assert "Nope" in str(manifest["error_message"])


def test_run_missing_sheet_exits_2(build_overview: Callable[..., Path], tmp_path: Path) -> None:
    path = build_overview({"節目贊助": (["A"], {"Alice": [1]})})
    out_dir = tmp_path / "out"

    result = runner.invoke(app, ["run", "--input", str(path), "--out-dir", str(out_dir), "--quiet"])

    assert result.exit_code == 2
    assert "節目定額" in str(_manifest(out_dir)["error_message"])


def test_run_bad_profile_exits_2(overview_path: Path, tmp_path: Path) -> None:
    profile = tmp_path / "bad.profile"
    profile.write_text("colour=red\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        ["run", "--input", str(overview_path), "--out-dir", str(out_dir), "--profile", str(profile), "--quiet"],
    )

    assert result.exit_code == 2
    assert "Unknown setting" in str(_manifest(out_dir)["error_message"])


def test_run_profile_and_match_option(build_overview: Callable[..., Path], tmp_path: Path) -> None:
    path = build_overview(marker="ID")
    profile = tmp_path / "layout.profile"
    profile.write_text("# custom marker\nmarker=ID\n", encoding="utf-8")
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "run", "--input", str(path), "--out-dir", str(out_dir),
            "--profile", str(profile), "--match", "exact", "--quiet",
        ],
    )

    assert result.exit_code == 0, result.output
    assert len(list(out_dir.glob("*.xlsx"))) == 3


def test_run_live_references_and_decimals(overview_path: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app,
        [
            "run", "--input", str(overview_path), "--out-dir", str(out_dir),
            "--live-references", "--decimals", "--quiet",
        ],
    )

    assert result.exit_code == 0, result.output
    ws = load_workbook(out_dir / "202425籌款活動應收款_1.Alice.xlsx")["Report"]
    assert ws["C6"].value == "='../[overview.xlsx]節目贊助'!$B$4"
    assert ws["D6"].number_format == CURRENCY_FMT


def test_run_member_failure_is_reported_but_exit_code_is_0(
    overview_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_write = pipeline_mod.write_member_report

    def _write(out_dir: Path, member: str, *args: object, **kwargs: object) -> Path:
        if member == "3.Carol":
            raise RuntimeError("locked file")
        return real_write(out_dir, member, *args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(pipeline_mod, "write_member_report", _write)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app, ["run", "--input", str(overview_path), "--out-dir", str(out_dir), "--quiet"]
    )

    assert result.exit_code == 0, result.output
    assert "2/3 reports generated" in result.output
    manifest = _manifest(out_dir)
    assert manifest["reports_written"] == 2
    assert manifest["failed_members"] == ["3.Carol"]


def test_run_unexpected_error_exits_1(
    overview_path: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    import board_reports.cli as cli_mod

    def _broken(*_args: object, **_kwargs: object) -> None:
        raise RuntimeError("kaboom")

    monkeypatch.setattr(cli_mod, "generate_reports", _broken)
    out_dir = tmp_path / "out"

    result = runner.invoke(
        app, ["run", "--input", str(overview_path), "--out-dir", str(out_dir), "--quiet"]
    )

    assert result.exit_code == 1
    manifest = _manifest(out_dir)
    assert manifest["error_code"] == 1
    assert "kaboom" in str(manifest["error_message"])


def test_run_log_file(overview_path: Path, tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"

    result = runner.invoke(
        app,
        [
            "run", "--input", str(overview_path), "--out-dir", str(tmp_path / "out"),
            "--log-file", str(log_file), "--quiet",
        ],
    )

    assert result.exit_code == 0, result.output
    text = log_file.read_text(encoding="utf-8")
    assert "Found 3 board members in overview file" in text
    assert "Finished: 3/3 reports generated" in text


def test_inspect_lists_members_and_events(overview_path: Path, tmp_path: Path) -> None:
    result = runner.invoke(app, ["inspect", "--input", str(overview_path)])

    assert result.exit_code == 0, result.output
    assert "Overview Layout" in result.output
    assert "Members (3)" in result.output
    assert "Events (3)" in result.output
    assert "3.Carol" in result.output
    assert list(tmp_path.glob("**/*.json")) == []


def test_inspect_missing_anchor_exits_2(overview_path: Path) -> None:
    result = runner.invoke(app, ["inspect", "--input", str(overview_path), "--marker", "Nope"])

    assert result.exit_code == 2
    assert "Nope" in result.output
