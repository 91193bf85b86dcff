"""Tests for the workmode-tui entry point."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from workmode_tui import __version__
from workmode_tui.cli import main as cli_main
from workmode_tui.cli.tui import app as app_module


class _FakeApp:
    instances: list["_FakeApp"] = []

    def __init__(self, client) -> None:  # type: ignore[no-untyped-def]
        self.client = client
        self.ran = False
        _FakeApp.instances.append(self)

    def run(self) -> None:
        self.ran = True


@pytest.fixture(autouse=True)
def _no_real_app(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    _FakeApp.instances = []
    monkeypatch.setattr(app_module, "WorkmodeApp", _FakeApp)
    monkeypatch.setattr(cli_main, "setup_logging", lambda level=None: tmp_path / "tui.log")


@pytest.mark.unit
def test_version_flag(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli_main.main(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


@pytest.mark.unit
def test_runs_app_with_configured_client(tmp_path: Path) -> None:
    config = tmp_path / "config.toml"
    config.write_text(f'[general]\nstate_dir = "{tmp_path / "wm"}"\n', encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        cli_main.main(["--config", str(config), "--cli", f"{sys.executable} -m workmode"])

    assert exc_info.value.code == 0
    (app,) = _FakeApp.instances
    assert app.ran is True
    assert app.client.cli_command == [sys.executable, "-m", "workmode"]
    assert app.client.state_dir == str(tmp_path / "wm")


@pytest.mark.unit
def test_empty_cli_is_rejected(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli_main.main(["--cli", "  "])

    assert exc_info.value.code == 2
    assert "--cli" in capsys.readouterr().err
    assert _FakeApp.instances == []
