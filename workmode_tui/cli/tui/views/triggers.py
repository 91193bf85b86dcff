"""Triggers table with details and recent sessions of the selected trigger."""

from __future__ import annotations

from rich.style import Style
from rich.table import Table
from rich.text import Text

from workmode_tui.cli.tui.state import AppState, ViewMode
from workmode_tui.cli.tui.utils.formatters import format_duration, format_time, status_icon, truncate_text
from workmode_tui.cli.tui.views.sessions import clip_lines, split_layout, visible_window
from workmode_tui.core.models import Trigger

RECENT_SESSIONS = 5


def _one_line(text: str, max_len: int) -> str:
    return truncate_text(text.replace("\n", " "), max_len)


def trigger_label(trigger: Trigger) -> str:
    if trigger.skill:
        return trigger.skill
    return _one_line(trigger.prompt, 20) if trigger.prompt else ""


def retry_policy(trigger: Trigger) -> str:
    """``on-failure (max 3, delay 60s)``; empty when retries are off."""
    if not trigger.retry or trigger.retry == "never":
        return ""
    policy = trigger.retry
    if trigger.retry_max > 0:
        policy += f" (max {trigger.retry_max}"
        if trigger.retry_delay > 0:
            policy += f", delay {trigger.retry_delay}s"
        policy += ")"
    return policy


def _trigger_table(state: AppState, height: int) -> Table:
    theme = state.theme
    lst = state.trigger_list
    table = Table(expand=True, box=None, show_edge=False, pad_edge=False, header_style=Style(bold=True))
    table.add_column("name", width=16, no_wrap=True)
    table.add_column("type", width=6, no_wrap=True)
    table.add_column("schedule", width=24, no_wrap=True, overflow="ellipsis")
    table.add_column("permissions", width=11, no_wrap=True)
    table.add_column("label", ratio=1, no_wrap=True, overflow="ellipsis")

    for idx in visible_window(lst.cursor, len(lst.triggers), height - 1):
        trigger = lst.triggers[idx]
        selected = idx == lst.cursor and state.base_mode is ViewMode.TRIGGERS
        style = Style(color=theme.bright_white, bgcolor=theme.accent, bold=True) if selected else None
        table.add_row(
            trigger.name, trigger.type, trigger.schedule(), trigger.permissions, trigger_label(trigger), style=style
        )
    if not lst.triggers:
        table.add_row(Text("no triggers configured", Style(color=theme.dim)), "", "", "", "")
    return table


def render_trigger_preview(state: AppState, trigger: Trigger | None) -> Text:
    theme = state.theme
    dim = Style(color=theme.dim)
    text = Text()
    if trigger is None:
        text.append("No trigger selected", dim)
        return text

    def field(label: str, value: str) -> None:
        text.append(label, dim)
        text.append(f"{value}\n")

    text.append("Trigger: ", Style(color=theme.accent))
    text.append(f"{trigger.name}\n")
    field("Type:    ", trigger.type)
    field("Schedule: ", trigger.schedule())
    if trigger.permissions:
        field("Perms:   ", trigger.permissions)
    if trigger.working_dir:
        field("Dir:     ", trigger.working_dir)
    if trigger.skill:
        field("Skill:   ", trigger.skill)
    if trigger.prompt:
        field("Prompt:  ", _one_line(trigger.prompt, 60))
    if trigger.cooldown > 0:
        field("Cooldown: ", f"{trigger.cooldown}s")
    if trigger.check:
        field("Check:   ", trigger.check)
    if policy := retry_policy(trigger):
        field("Retry:   ", policy)

    text.append("\n")
    text.append("─── Recent sessions ───", dim)
    text.append("\n\n")
    recent = [s for s in state.sessions if s.trigger == trigger.name][:RECENT_SESSIONS]
    for session in recent:
        text.append(status_icon(session.status), Style(color=theme.status_color(session.status)))
        text.append(f"  {format_time(session.started)}  {format_duration(session.duration)}  {session.short}\n")
    if not recent:
        text.append("(no sessions)", dim)
    return text


def render_triggers(state: AppState, height: int) -> Table:
    preview = render_trigger_preview(state, state.trigger_list.selected)
    return split_layout(state, _trigger_table(state, height), clip_lines(preview, height))
