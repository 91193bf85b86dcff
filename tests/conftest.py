"""Pytest configuration for workmode console tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

# Tests must never write into the user's log file
logging.getLogger("workmode_tui").handlers.clear()


def pytest_collection_modifyitems(config, items):
    """Set per-marker timeouts: unit=1s, integration=5s."""
    for item in items:
        if "unit" in item.keywords:
            item.add_marker(pytest.mark.timeout(1))
        elif "integration" in item.keywords:
            item.add_marker(pytest.mark.timeout(5))


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep config, state and log lookups inside the test's tmp dir."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    monkeypatch.delenv("WORKMODE_CONFIG", raising=False)
    monkeypatch.delenv("CLAUDECODE", raising=False)
