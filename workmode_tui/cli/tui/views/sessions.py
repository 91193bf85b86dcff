"""Sessions table with a preview pane for the selected session."""

from __future__ import annotations

from rich.console import RenderableType
from rich.style import Style
from rich.table import Table
from rich.text import Text

from workmode_tui.cli.tui.state import AppState, ViewMode
from workmode_tui.cli.tui.utils.formatters import format_duration, format_time, status_icon
from workmode_tui.core.models import Session, StreamEvent
from workmode_tui.core.parser import format_log

PREVIEW_WIDTH_FRAC = 0.45
MIN_PREVIEW_WIDTH = 30


def visible_window(cursor: int, total: int, rows: int) -> range:
    """Indices of list rows to draw so the cursor stays visible."""
    rows = max(1, rows)
    start = max(0, cursor - rows + 1)
    return range(start, min(total, start + rows))


def clip_lines(text: Text, height: int) -> Text:
    """Keep the first ``height`` lines of ``text``."""
    lines = text.split("\n", allow_blank=True)
    return Text("\n").join(lines[: max(height, 1)])


def preview_width(width: int) -> int:
    return max(int(width * PREVIEW_WIDTH_FRAC), MIN_PREVIEW_WIDTH)


def split_layout(state: AppState, left: RenderableType, right: RenderableType) -> Table:
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(width=preview_width(state.width))
    grid.add_row(left, right)
    return grid


def _session_table(state: AppState, height: int) -> Table:
    theme = state.theme
    lst = state.session_list
    table = Table(
        expand=True,
        box=None,
        show_edge=False,
        pad_edge=False,
        header_style=Style(bold=True, color=theme.foreground),
    )
    table.add_column(" ", width=2, no_wrap=True)
    table.add_column("trigger", width=14, no_wrap=True)
    table.add_column("time", width=10, no_wrap=True)
    table.add_column("dur", width=5, no_wrap=True)
    table.add_column("id", width=18, no_wrap=True)
    table.add_column("summary", ratio=1, no_wrap=True, overflow="ellipsis")

    for idx in visible_window(lst.cursor, len(lst.sessions), height - 1):
        session = lst.sessions[idx]
        selected = idx == lst.cursor and state.base_mode is ViewMode.SESSIONS
        row_style = Style(color=theme.accent, bold=True) if selected else None
        table.add_row(
            Text(status_icon(session.status), Style(color=theme.status_color(session.status))),
            session.trigger,
            format_time(session.started),
            format_duration(session.duration),
            session.short,
            lst.summaries.get(session.short, ""),
            style=row_style,
        )
    if not lst.sessions:
        table.add_row("", Text("no sessions yet", Style(color=theme.dim)), "", "", "", "")
    return table


def render_preview(state: AppState, session: Session | None, events: list[StreamEvent]) -> Text:
    theme = state.theme
    dim = Style(color=theme.dim)
    text = Text()
    if session is None:
        text.append("No session selected", dim)
        return text

    def field(label: str, value: str) -> None:
        text.append(label, dim)
        text.append(f"{value}\n")

    text.append("Session: ", Style(color=theme.accent))
    text.append(f"{session.short}\n")
    field("Full ID: ", session.id)
    field("Status:  ", session.status)
    field("Trigger: ", session.trigger)
    if session.label and session.label != session.trigger:
        field("Label:   ", session.label)
    field("Started: ", format_time(session.started))
    if session.duration:
        field("Duration: ", format_duration(session.duration))
    field("Dir:     ", session.working_dir)
    if session.session_id:
        field("Claude:  ", session.session_id)
    if session.error:
        text.append(f"Error:   {session.error}\n", Style(color=theme.red))

    text.append("\n")
    text.append("─── Log output ───", dim)
    text.append("\n\n")
    if events:
        text.append(format_log(events))
    else:
        text.append("(no log data)", dim)
    return text


def render_sessions(state: AppState, height: int) -> Table:
    lst = state.session_list
    selected = lst.selected
    events = lst.preview_events if selected is not None and lst.preview_id == selected.short else []
    preview = render_preview(state, selected, events)
    return split_layout(state, _session_table(state, height), clip_lines(preview, height))
