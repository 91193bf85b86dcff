"""Formatting utilities for console display."""

from __future__ import annotations

from datetime import datetime

from workmode_tui.constants import ELLIPSIS

_STATUS_ICONS = {
    "completed": "✓",
    "running": "●",
    "error": "✗",
    "stuck": "!",
    "stopped": "■",
    "killed": "†",
}


def status_icon(status: str) -> str:
    """Single-character indicator for a session status; blank when unknown."""
    return _STATUS_ICONS.get(status, " ")


def format_duration(seconds: int | None) -> str:
    """Render seconds as ``42s``, ``5m``, ``2h`` or ``2h5m``.

    Returns empty string if unavailable.
    """
    if not seconds or seconds <= 0:
        return ""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    hours, minutes = seconds // 3600, (seconds % 3600) // 60
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h{minutes}m"


def format_time(iso_timestamp: str | None, now: datetime | None = None) -> str:
    """Short local time: ``15:04`` today, ``Mon 15:04`` this week, else ``Jan 02``.

    Unparseable input is returned unchanged.
    """
    if not iso_timestamp:
        return ""
    try:
        dt = datetime.fromisoformat(iso_timestamp.replace("Z", "+00:00")).astimezone()
    except (ValueError, OSError):
        return iso_timestamp
    local_now = (now or datetime.now()).astimezone()
    if dt.date() == local_now.date():
        return dt.strftime("%H:%M")
    if (local_now - dt).days < 7:
        return dt.strftime("%a %H:%M")
    return dt.strftime("%b %d")


def truncate_text(text: str, max_len: int) -> str:
    """Truncate text to ``max_len`` characters, ending in an ellipsis when cut."""
    if max_len <= 0:
        return ""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + ELLIPSIS
