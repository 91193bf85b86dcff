"""Full-screen session log."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from workmode_tui.cli.tui.state import LOG_RULE, NO_LOG_DATA, AppState


def render_log(state: AppState) -> Text:
    """The visible slice of the log view's lines."""
    theme = state.theme
    log_view = state.log_view
    dim = Style(color=theme.dim)
    if not log_view.shown:
        return Text("Loading log…", dim)

    viewport = log_view.viewport
    visible = log_view.lines[viewport.offset : viewport.offset + viewport.height]
    header_len = 0
    if log_view.session is not None:
        # short/status line, optional working dir, rule, blank
        header_len = 3 + (1 if log_view.session.working_dir else 0)

    text = Text()
    for i, line in enumerate(visible):
        index = viewport.offset + i
        if i:
            text.append("\n")
        if index == 0 and log_view.session is not None:
            text.append(log_view.session.short, Style(color=theme.accent))
            text.append(line[len(log_view.session.short) :], dim)
        elif index < header_len or line in (LOG_RULE, NO_LOG_DATA):
            text.append(line, dim)
        else:
            text.append(line)
    return text


def render_log_footer(state: AppState) -> Text:
    hint = " esc back  │  ctrl+r resume  │  j/k scroll  │  q quit"
    return Text(hint, Style(color=state.theme.dim))
