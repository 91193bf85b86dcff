"""Command line, completion menu and result pane."""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.style import Style
from rich.table import Table
from rich.text import Text

from workmode_tui.cli.tui.state import AppState, CommandLineState
from workmode_tui.constants import CLI_BINARY, MAX_COMPLETIONS_SHOWN

PROMPT = "> "
PLACEHOLDER = "type a command or ask a question..."


def render_menu(state: AppState) -> Panel | None:
    cmd = state.command
    if cmd.menu_height == 0:
        return None
    theme = state.theme
    table = Table.grid(padding=(0, 2))
    table.add_column(no_wrap=True)
    table.add_column(no_wrap=True)
    selected_style = Style(bold=True, color=theme.background, bgcolor=theme.accent)
    for i, candidate in enumerate(cmd.candidates[:MAX_COMPLETIONS_SHOWN]):
        if i == cmd.selected:
            table.add_row(candidate.value, candidate.description, style=selected_style)
        else:
            table.add_row(
                Text(candidate.value, Style(color=theme.foreground)),
                Text(candidate.description, Style(color=theme.dim)),
            )
    return Panel(table, border_style=Style(color=theme.border), padding=(0, 1), width=max(40, state.width - 4))


def render_input(state: AppState) -> RenderableType:
    cmd = state.command
    theme = state.theme
    line = Text(PROMPT, Style(color=theme.accent))
    if cmd.text:
        line.append(cmd.text)
    else:
        line.append(PLACEHOLDER, Style(color=theme.dim))
    menu = render_menu(state)
    if menu is None:
        return line
    return Group(menu, line)


def has_result_pane(cmd: CommandLineState) -> bool:
    return cmd.has_result or bool(cmd.pending)


def render_result(state: AppState) -> Text:
    """Result pane: pending command, streamed answer, or command output."""
    cmd = state.command
    theme = state.theme
    dim = Style(color=theme.dim)
    if cmd.pending and not cmd.has_result:
        return Text(f"Running {CLI_BINARY} {cmd.pending}…", dim)
    if cmd.streaming and not cmd.chunks:
        return Text("Thinking...", dim)

    lines = (cmd.result or "").splitlines()
    viewport = cmd.viewport
    visible = "\n".join(lines[viewport.offset : viewport.offset + viewport.height])
    if cmd.result_is_error:
        return Text(f"Error: {visible}", Style(color=theme.red))
    return Text(visible)
