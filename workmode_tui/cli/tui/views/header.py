"""Header bar and error banner."""

from __future__ import annotations

from rich.console import Group
from rich.style import Style
from rich.text import Text

from workmode_tui.cli.tui.state import AppState
from workmode_tui.constants import APP_NAME


def render_header(state: AppState) -> Group:
    theme = state.theme
    status = state.status
    dim = Style(color=theme.dim)
    up = Style(color=theme.green, bold=True)
    down = Style(color=theme.red, bold=True)

    line = Text()
    line.append(f" {APP_NAME} ", Style(color=theme.bright_white, bold=True))
    line.append("   ")
    line.append("● ACTIVE" if status.active else "○ INACTIVE", up if status.active else down)
    line.append("   ")
    line.append("watcher: ", dim)
    line.append("up" if status.watcher else "down", up if status.watcher else down)
    line.append("   ")
    line.append(
        f"timers: {status.timers}/{status.triggers}   running: {status.running}   today: {status.today}",
        dim,
    )
    bar = Text("━" * max(state.width, 1), dim)
    return Group(line, bar)


def render_errors(state: AppState) -> Text | None:
    """One line per failed source, or None when everything loaded."""
    if not state.errors:
        return None
    style = Style(color=state.theme.red)
    text = Text()
    for source, message in sorted(state.errors.items()):
        if text:
            text.append("\n")
        text.append(f" {source}: {message}", style)
    return text
