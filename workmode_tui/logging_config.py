"""Logging setup for the console.

Textual owns the terminal, so records go to a file only.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from workmode_tui.constants import LOG_FILE_ENV, LOG_LEVEL_ENV
from workmode_tui.paths import default_log_file

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging(level: str | None = None, log_file: str | Path | None = None) -> Path:
    """Configure the ``workmode_tui`` logger once and return the log file path."""
    global _configured

    target = Path(log_file or os.environ.get(LOG_FILE_ENV) or default_log_file())
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    root = logging.getLogger("workmode_tui")
    root.setLevel(getattr(logging, level_name, logging.INFO))

    if _configured:
        return target

    target.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(target, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    _configured = True
    return target
