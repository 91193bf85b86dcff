"""Console state model and reducer.

``AppState`` is owned by the controller and mutated only on the app's
message loop, one event at a time. Background work never touches it; it
reports back with an event and the reducer decides what changes.

The reducer never assumes earlier requests have resolved: loads may complete
in any order, so every result is checked against the state it lands in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from workmode_tui.cli.tui.completer import Candidate, Completer, accept_candidate
from workmode_tui.cli.tui.effects import (
    RELOAD_ALL,
    CancelStream,
    Effect,
    LoadLog,
    LoadSessions,
    LoadStatus,
    RunCommand,
    ScheduleTick,
    StartStream,
    WatchLog,
)
from workmode_tui.cli.tui.router import RouteKind, route
from workmode_tui.cli.tui.theme import DEFAULT_THEME, Theme
from workmode_tui.cli.tui.utils.formatters import format_duration
from workmode_tui.constants import MAX_COMPLETIONS_SHOWN, STATUS_POLL_INTERVAL_S, SUMMARY_MAX_LEN
from workmode_tui.core.events import (
    ActionResult,
    ConsoleEvent,
    LogLoaded,
    ResumeExited,
    Resized,
    SessionsLoaded,
    Started,
    StatusLoaded,
    StatusTick,
    StreamChunk,
    StreamDone,
    ThemeLoaded,
    TriggersLoaded,
    WatcherFailed,
    WatchEvent,
    WatchKind,
)
from workmode_tui.core.models import Session, Status, StreamEvent, Trigger
from workmode_tui.core.parser import extract_summary, format_log

logger = logging.getLogger(__name__)

LOG_RULE = "─" * 40
NO_LOG_DATA = "(no log data)"


class ViewMode(str, Enum):
    SESSIONS = "sessions"
    TRIGGERS = "triggers"
    LOG = "log"
    COMMAND = "command"


LIST_MODES = (ViewMode.SESSIONS, ViewMode.TRIGGERS)


@dataclass
class Viewport:
    """Scroll position over a block of text lines."""

    offset: int = 0
    height: int = 10
    line_count: int = 0

    @property
    def max_offset(self) -> int:
        return max(0, self.line_count - self.height)

    @property
    def at_bottom(self) -> bool:
        return self.offset >= self.max_offset

    def scroll(self, delta: int) -> None:
        self.offset = min(max(0, self.offset + delta), self.max_offset)

    def goto_top(self) -> None:
        self.offset = 0

    def goto_bottom(self) -> None:
        self.offset = self.max_offset

    def resize(self, height: int) -> None:
        self.height = max(1, height)
        self.offset = min(self.offset, self.max_offset)

    def set_line_count(self, count: int) -> None:
        self.line_count = count
        self.offset = min(self.offset, self.max_offset)


@dataclass
class SessionListState:
    sessions: list[Session] = field(default_factory=list)
    cursor: int = 0
    # Short id and events currently shown in the preview pane
    preview_id: str = ""
    preview_session: Session | None = None
    preview_events: list[StreamEvent] = field(default_factory=list)
    summaries: dict[str, str] = field(default_factory=dict)

    @property
    def selected(self) -> Session | None:
        if 0 <= self.cursor < len(self.sessions):
            return self.sessions[self.cursor]
        return None

    def find(self, short_id: str) -> Session | None:
        return next((s for s in self.sessions if s.short == short_id), None)


@dataclass
class TriggerListState:
    triggers: list[Trigger] = field(default_factory=list)
    cursor: int = 0

    @property
    def selected(self) -> Trigger | None:
        if 0 <= self.cursor < len(self.triggers):
            return self.triggers[self.cursor]
        return None


@dataclass
class LogViewState:
    session: Session | None = None
    # False until the initial load for ``session`` lands
    shown: bool = False
    events: list[StreamEvent] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)
    viewport: Viewport = field(default_factory=Viewport)


@dataclass
class CommandLineState:
    focused: bool = False
    text: str = ""
    candidates: list[Candidate] = field(default_factory=list)
    selected: int = -1
    completer: Completer = field(default_factory=Completer)
    # Structured command waiting on the CLI
    pending: str = ""
    result: str | None = None
    result_is_error: bool = False
    viewport: Viewport = field(default_factory=Viewport)
    streaming: bool = False
    stream_id: int | None = None
    chunks: list[str] = field(default_factory=list)

    @property
    def has_result(self) -> bool:
        return self.result is not None

    @property
    def menu_height(self) -> int:
        """Rows used by the completion menu, including its border."""
        if not self.focused or self.has_result or not self.candidates:
            return 0
        return min(len(self.candidates), MAX_COMPLETIONS_SHOWN) + 2


@dataclass
class AppState:
    """Everything the console shows."""

    mode: ViewMode = ViewMode.SESSIONS
    prev_mode: ViewMode = ViewMode.SESSIONS
    status: Status = field(default_factory=Status)
    session_list: SessionListState = field(default_factory=SessionListState)
    trigger_list: TriggerListState = field(default_factory=TriggerListState)
    log_view: LogViewState = field(default_factory=LogViewState)
    command: CommandLineState = field(default_factory=CommandLineState)
    show_help: bool = False
    # Load failures by source; cleared when that source loads again
    errors: dict[str, str] = field(default_factory=dict)
    width: int = 80
    height: int = 24
    watch_available: bool = True
    theme: Theme = DEFAULT_THEME
    next_stream_id: int = 1

    @property
    def base_mode(self) -> ViewMode:
        """The view under the command line overlay."""
        return self.prev_mode if self.mode is ViewMode.COMMAND else self.mode

    @property
    def sessions(self) -> list[Session]:
        return self.session_list.sessions


# --- Layout ---


def apply_layout(state: AppState) -> None:
    """Recompute viewport heights from the terminal size."""
    state.log_view.viewport.resize(state.height - 1)
    state.command.viewport.resize(max(5, state.height - 3 - state.command.menu_height))


# --- Log view ---


def build_log_lines(session: Session | None, events: list[StreamEvent]) -> list[str]:
    """Plain text lines of the full-screen log view: session header, then the log."""
    lines: list[str] = []
    if session is not None:
        head = f"{session.short}  {session.status}"
        if session.duration and session.duration > 0:
            head += f"  {format_duration(session.duration)}"
        lines.append(head)
        if session.working_dir:
            lines.append(session.working_dir)
        lines.append(LOG_RULE)
        lines.append("")
    if events:
        lines.extend(format_log(events).splitlines())
    else:
        lines.append(NO_LOG_DATA)
    return lines


def _set_log_content(log_view: LogViewState, events: list[StreamEvent]) -> None:
    log_view.events = events
    log_view.lines = build_log_lines(log_view.session, events)
    log_view.viewport.set_line_count(len(log_view.lines))


def open_log(state: AppState, session: Session) -> list[Effect]:
    """Switch to the full-screen log for ``session``; content arrives with the load."""
    state.prev_mode = state.mode
    state.mode = ViewMode.LOG
    state.log_view = LogViewState(session=session, viewport=Viewport(height=max(1, state.height - 1)))
    effects: list[Effect] = [LoadLog(session.short)]
    if session.is_running:
        effects.append(WatchLog(session.short))
    return effects


def close_log(state: AppState) -> list[Effect]:
    state.log_view = LogViewState(viewport=Viewport(height=max(1, state.height - 1)))
    state.mode = state.prev_mode if state.prev_mode in LIST_MODES else ViewMode.SESSIONS
    return [WatchLog("")]


# --- Lists ---


def preview_effects(state: AppState) -> list[Effect]:
    selected = state.session_list.selected
    if selected is None:
        return []
    return [LoadLog(selected.short)]


def move_cursor(state: AppState, delta: int = 0, to: int | None = None) -> list[Effect]:
    """Move the active list's cursor by ``delta`` or to index ``to`` (negative counts from the end).

    Selecting a different session loads its preview.
    """
    if state.mode is ViewMode.SESSIONS:
        lst = state.session_list
        count = len(lst.sessions)
    else:
        lst = state.trigger_list
        count = len(lst.triggers)
    if count == 0:
        return []
    before = lst.cursor
    if to is None:
        target = before + delta
    else:
        target = to if to >= 0 else count + to
    lst.cursor = min(max(0, target), count - 1)
    if state.mode is ViewMode.SESSIONS and lst.cursor != before:
        return preview_effects(state)
    return []


# --- Command line ---


def refresh_candidates(cmd: CommandLineState) -> None:
    cmd.candidates = [] if cmd.has_result else cmd.completer.complete(cmd.text)
    cmd.selected = -1


def set_result(state: AppState, text: str, is_error: bool = False) -> None:
    cmd = state.command
    cmd.pending = ""
    cmd.result = text
    cmd.result_is_error = is_error
    cmd.candidates = []
    cmd.selected = -1
    cmd.viewport.set_line_count(len(text.splitlines()))
    cmd.viewport.goto_top()


def clear_result(state: AppState) -> list[Effect]:
    """Drop the result pane and kill any stream feeding it."""
    cmd = state.command
    effects: list[Effect] = []
    if cmd.streaming:
        effects.append(CancelStream())
    cmd.result = None
    cmd.result_is_error = False
    cmd.streaming = False
    cmd.stream_id = None
    cmd.chunks = []
    cmd.viewport = Viewport(height=cmd.viewport.height)
    return effects


def focus_command(state: AppState) -> None:
    state.prev_mode = state.mode
    state.mode = ViewMode.COMMAND
    cmd = state.command
    cmd.focused = True
    # Hidden while typing; a running stream re-shows it with its next chunk
    cmd.result = None
    refresh_candidates(cmd)
    apply_layout(state)


def blur_command(state: AppState) -> None:
    cmd = state.command
    cmd.focused = False
    cmd.candidates = []
    cmd.selected = -1
    state.mode = state.prev_mode if state.prev_mode in LIST_MODES else ViewMode.SESSIONS
    apply_layout(state)


def accept_selected(cmd: CommandLineState, index: int) -> None:
    if 0 <= index < len(cmd.candidates):
        cmd.text = accept_candidate(cmd.text, cmd.candidates[index].value)
        refresh_candidates(cmd)


def submit_command(state: AppState) -> list[Effect]:
    """Send the input line to the CLI or the assistant."""
    cmd = state.command
    if not cmd.text.strip():
        return []
    routed = route(cmd.text)
    cmd.text = ""
    cmd.candidates = []
    cmd.selected = -1
    if routed.kind is RouteKind.STRUCTURED:
        effects = clear_result(state)
        cmd.pending = " ".join(routed.tokens)
        return [*effects, RunCommand(tuple(routed.tokens))]
    return start_stream(state, routed.raw)


def start_stream(state: AppState, text: str) -> list[Effect]:
    clear_result(state)
    cmd = state.command
    stream_id = state.next_stream_id
    state.next_stream_id += 1
    cmd.pending = ""
    cmd.streaming = True
    cmd.stream_id = stream_id
    cmd.chunks = []
    cmd.result = ""
    cmd.result_is_error = False
    # The stream reader kills its previous process before starting this one
    return [StartStream(stream_id=stream_id, text=text)]


def run_action(state: AppState, *args: str) -> list[Effect]:
    effects = clear_result(state)
    state.command.pending = " ".join(args)
    return [*effects, RunCommand(tuple(args))]


# --- Reducer ---


def _on_sessions_loaded(state: AppState, event: SessionsLoaded) -> list[Effect]:
    if event.error is not None:
        state.errors["sessions"] = event.error
        return []
    state.errors.pop("sessions", None)

    lst = state.session_list
    previous = lst.selected
    lst.sessions = list(event.sessions)
    if previous is not None:
        idx = next((i for i, s in enumerate(lst.sessions) if s.short == previous.short), None)
        if idx is not None:
            lst.cursor = idx
    lst.cursor = min(lst.cursor, max(0, len(lst.sessions) - 1))

    state.command.completer.set_session_ids(s.short for s in lst.sessions)
    state.status = state.status.with_session_counts(lst.sessions)

    if state.log_view.session is not None:
        fresh = lst.find(state.log_view.session.short)
        if fresh is not None and fresh != state.log_view.session:
            state.log_view.session = fresh
            if state.log_view.shown:
                _update_log_preserving_bottom(state.log_view, state.log_view.events)

    selected = lst.selected
    if selected is None:
        return []
    # Reload the preview when it shows another session or a stale record
    if lst.preview_id != selected.short or lst.preview_session != selected:
        return [LoadLog(selected.short)]
    return []


def _update_log_preserving_bottom(log_view: LogViewState, events: list[StreamEvent]) -> None:
    was_at_bottom = log_view.viewport.at_bottom
    offset = log_view.viewport.offset
    _set_log_content(log_view, events)
    if was_at_bottom:
        log_view.viewport.goto_bottom()
    else:
        log_view.viewport.offset = min(offset, log_view.viewport.max_offset)


def _on_log_loaded(state: AppState, event: LogLoaded) -> list[Effect]:
    lst = state.session_list
    if event.error is not None:
        logger.warning("Log %s failed to load: %s", event.short_id, event.error)
        state.errors["log"] = event.error
    else:
        state.errors.pop("log", None)
        if event.events:
            lst.summaries[event.short_id] = extract_summary(event.events, SUMMARY_MAX_LEN)

    base = state.base_mode
    if base is ViewMode.SESSIONS:
        selected = lst.selected
        if selected is not None and selected.short == event.short_id:
            lst.preview_id = event.short_id
            lst.preview_session = selected
            lst.preview_events = list(event.events)
        return []

    if base is ViewMode.LOG:
        log_view = state.log_view
        if log_view.session is None or log_view.session.short != event.short_id:
            return []
        if not log_view.shown:
            fresh = lst.find(event.short_id)
            if fresh is not None:
                log_view.session = fresh
            log_view.shown = True
            _set_log_content(log_view, list(event.events))
            return []
        if event.error is None:
            _update_log_preserving_bottom(log_view, list(event.events))
    return []


def _on_watch(state: AppState, event: WatchEvent) -> list[Effect]:
    if event.kind is WatchKind.HISTORY:
        return [LoadSessions()]
    if state.base_mode is ViewMode.LOG:
        session = state.log_view.session
        if session is not None and state.log_view.shown:
            return [LoadLog(session.short)]
        return []
    return preview_effects(state)


def _on_stream_chunk(state: AppState, event: StreamChunk) -> list[Effect]:
    cmd = state.command
    if not cmd.streaming or event.stream_id != cmd.stream_id:
        return []
    cmd.chunks.append(event.text)
    cmd.result = "\n".join(cmd.chunks)
    cmd.candidates = []
    cmd.selected = -1
    cmd.viewport.set_line_count(len(cmd.result.splitlines()))
    cmd.viewport.goto_bottom()
    return []


def _on_stream_done(state: AppState, event: StreamDone) -> list[Effect]:
    cmd = state.command
    if event.stream_id != cmd.stream_id:
        return []
    cmd.streaming = False
    cmd.stream_id = None
    if not cmd.chunks and event.error:
        set_result(state, event.error, is_error=True)
    return []


def reduce_state(state: AppState, event: ConsoleEvent) -> list[Effect]:
    """Apply one non-key event to state and return follow-up work."""
    if isinstance(event, Started):
        apply_layout(state)
        return [*RELOAD_ALL, ScheduleTick(STATUS_POLL_INTERVAL_S)]

    if isinstance(event, StatusLoaded):
        if event.error is not None or event.status is None:
            state.errors["status"] = event.error or "no status"
            return []
        state.errors.pop("status", None)
        status = event.status.with_session_counts(state.sessions)
        if not state.watch_available:
            status = status.model_copy(update={"watcher": False})
        state.status = status
        return []

    if isinstance(event, SessionsLoaded):
        return _on_sessions_loaded(state, event)

    if isinstance(event, TriggersLoaded):
        if event.error is not None:
            state.errors["triggers"] = event.error
            return []
        state.errors.pop("triggers", None)
        lst = state.trigger_list
        previous = lst.selected
        lst.triggers = list(event.triggers)
        if previous is not None:
            idx = next((i for i, t in enumerate(lst.triggers) if t.name == previous.name), None)
            if idx is not None:
                lst.cursor = idx
        lst.cursor = min(lst.cursor, max(0, len(lst.triggers) - 1))
        state.command.completer.set_trigger_names(t.name for t in lst.triggers)
        return []

    if isinstance(event, LogLoaded):
        return _on_log_loaded(state, event)

    if isinstance(event, WatchEvent):
        return _on_watch(state, event)

    if isinstance(event, WatcherFailed):
        state.watch_available = False
        state.status = state.status.model_copy(update={"watcher": False})
        state.errors["watcher"] = event.error
        return []

    if isinstance(event, ActionResult):
        effects: list[Effect] = []
        if state.command.streaming:
            effects.append(CancelStream())
            state.command.streaming = False
            state.command.stream_id = None
            state.command.chunks = []
        if event.error is not None:
            set_result(state, event.error, is_error=True)
        else:
            set_result(state, event.output)
        # Any command may have changed agent state
        return [*effects, *RELOAD_ALL]

    if isinstance(event, StreamChunk):
        return _on_stream_chunk(state, event)

    if isinstance(event, StreamDone):
        return _on_stream_done(state, event)

    if isinstance(event, StatusTick):
        return [LoadStatus(), ScheduleTick(STATUS_POLL_INTERVAL_S)]

    if isinstance(event, ResumeExited):
        if event.error:
            state.errors["resume"] = event.error
        else:
            state.errors.pop("resume", None)
        return list(RELOAD_ALL)

    if isinstance(event, ThemeLoaded):
        state.theme = event.theme
        return []

    if isinstance(event, Resized):
        state.width = event.width
        state.height = event.height
        apply_layout(state)
        return []

    logger.debug("Unhandled event %r", event)
    return []
