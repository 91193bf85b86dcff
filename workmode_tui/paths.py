"""Filesystem locations used by workmode."""

from __future__ import annotations

import os
from pathlib import Path

from workmode_tui.constants import APP_NAME, CONFIG_ENV, HISTORY_FILENAME, LOG_SUFFIX, LOGS_DIRNAME

DEFAULT_STATE_DIR = "~/.local/share/workmode"


def expand_home(path: str) -> str:
    """Expand a leading ``~/`` (or bare ``~``) to the user's home directory."""
    if path == "~" or path.startswith("~/"):
        return str(Path(path).expanduser())
    return path


def default_config_path() -> Path:
    """Resolve the config file: ``$WORKMODE_CONFIG``, then the XDG config dir."""
    explicit = os.environ.get(CONFIG_ENV)
    if explicit:
        return Path(expand_home(explicit))
    xdg = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(xdg) / APP_NAME / "config.toml"


def history_path(state_dir: str | Path) -> Path:
    return Path(state_dir) / HISTORY_FILENAME


def log_path(state_dir: str | Path, short_id: str) -> Path:
    return Path(state_dir) / LOGS_DIRNAME / f"{short_id}{LOG_SUFFIX}"


def default_log_file() -> Path:
    state_home = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(state_home) / APP_NAME / "tui.log"
