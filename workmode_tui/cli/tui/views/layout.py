"""Compose the header, body and footer regions from state."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.style import Style
from rich.text import Text

from workmode_tui.cli.tui.state import AppState, ViewMode
from workmode_tui.cli.tui.views.command import has_result_pane, render_input, render_result
from workmode_tui.cli.tui.views.header import render_errors, render_header
from workmode_tui.cli.tui.views.help import render_help
from workmode_tui.cli.tui.views.log_view import render_log, render_log_footer
from workmode_tui.cli.tui.views.sessions import render_sessions
from workmode_tui.cli.tui.views.triggers import render_triggers

_HINTS = {
    ViewMode.SESSIONS: ("↑↓ navigate", "enter open", "ctrl+r resume", "/ command", "tab triggers", "q quit"),
    ViewMode.TRIGGERS: ("↑↓ navigate", "enter run", "tab sessions", "/ command", "q quit"),
}

HEADER_LINES = 2


def full_screen(state: AppState) -> bool:
    return state.show_help or state.mode is ViewMode.LOG


def render_top(state: AppState) -> RenderableType:
    if full_screen(state):
        return Text("")
    return render_header(state)


def body_height(state: AppState) -> int:
    """Rows left for the list views once header, footer and menu are drawn."""
    return max(5, state.height - HEADER_LINES - 1 - state.command.menu_height - len(state.errors))


def render_body(state: AppState) -> RenderableType:
    if state.show_help:
        return render_help(state)
    if state.mode is ViewMode.LOG:
        return render_log(state)

    if has_result_pane(state.command):
        main: RenderableType = render_result(state)
    elif state.base_mode is ViewMode.TRIGGERS:
        main = render_triggers(state, body_height(state))
    else:
        main = render_sessions(state, body_height(state))

    errors = render_errors(state)
    if errors is None:
        return main
    return Group(errors, main)


def render_footer(state: AppState) -> RenderableType:
    if state.show_help:
        return Text("")
    if state.mode is ViewMode.LOG:
        return render_log_footer(state)
    if state.mode is ViewMode.COMMAND:
        return render_input(state)
    hints = _HINTS.get(state.base_mode, ())
    return Text(" " + "  │  ".join(hints), Style(color=state.theme.dim))
