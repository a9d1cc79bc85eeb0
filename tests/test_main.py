from __future__ import annotations

import runpy

import pytest

import board_reports.cli as cli_mod


def test_module_run_dispatches_to_typer_app(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []
    monkeypatch.setattr(cli_mod, "app", lambda: calls.append("bmreports"))

    runpy.run_module("board_reports.__main__", run_name="__main__")

    assert calls == ["bmreports"]
