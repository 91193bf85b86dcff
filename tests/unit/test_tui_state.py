"""Unit tests for the console reducer."""

from __future__ import annotations

import pytest

from workmode_tui.cli.tui.effects import (
    RELOAD_ALL,
    CancelStream,
    LoadLog,
    LoadSessions,
    LoadStatus,
    RunCommand,
    ScheduleTick,
    StartStream,
    WatchLog,
)
from workmode_tui.cli.tui.state import (
    NO_LOG_DATA,
    AppState,
    ViewMode,
    close_log,
    focus_command,
    open_log,
    reduce_state,
    start_stream,
    submit_command,
)
from workmode_tui.cli.tui.theme import Theme
from workmode_tui.core.events import (
    ActionResult,
    LogLoaded,
    Resized,
    ResumeExited,
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
from workmode_tui.core.models import ResultEvent, Session, Status, Trigger


def _session(short: str, status: str = "completed", **kwargs: object) -> Session:
    return Session(id=f"id-{short}", short=short, status=status, **kwargs)  # type: ignore[arg-type]


def _result(text: str) -> ResultEvent:
    return ResultEvent(type="result", result=text)


def _numbered(count: int) -> ResultEvent:
    return _result("\n".join(f"line {i}" for i in range(count)))


def _loaded(state: AppState, *sessions: Session) -> list:
    return reduce_state(state, SessionsLoaded(sessions=list(sessions)))


# --- Startup and polling ---


@pytest.mark.unit
def test_started_loads_everything_and_schedules_poll() -> None:
    state = AppState()

    effects = reduce_state(state, Started())

    assert effects == [*RELOAD_ALL, ScheduleTick(3.0)]


@pytest.mark.unit
def test_status_tick_reloads_status_and_reschedules() -> None:
    assert reduce_state(AppState(), StatusTick()) == [LoadStatus(), ScheduleTick(3.0)]


@pytest.mark.unit
def test_status_loaded_applies_session_counts() -> None:
    state = AppState()
    _loaded(state, _session("a1", "running"), _session("b2", "running"))

    reduce_state(state, StatusLoaded(status=Status(active=True, watcher=True, timers=1, triggers=3)))

    assert state.status.active is True
    assert state.status.running == 2
    assert state.status.timers == 1


@pytest.mark.unit
def test_status_error_keeps_previous_status() -> None:
    state = AppState(status=Status(active=True))

    reduce_state(state, StatusLoaded(error="workmode status --json: exit status 1: boom"))

    assert state.status.active is True
    assert "boom" in state.errors["status"]


@pytest.mark.unit
def test_status_success_clears_previous_error() -> None:
    state = AppState(errors={"status": "old failure"})

    reduce_state(state, StatusLoaded(status=Status()))

    assert "status" not in state.errors


@pytest.mark.unit
def test_watcher_failure_forces_watcher_down() -> None:
    state = AppState()

    reduce_state(state, WatcherFailed(error="inotify limit"))
    reduce_state(state, StatusLoaded(status=Status(watcher=True)))

    assert state.watch_available is False
    assert state.status.watcher is False
    assert state.errors["watcher"] == "inotify limit"


# --- Session list reconciliation ---


@pytest.mark.unit
def test_session_reload_keeps_selection_by_short_id() -> None:
    state = AppState()
    _loaded(state, _session("a1"), _session("b2"), _session("c3"))
    state.session_list.cursor = 1

    effects = _loaded(state, _session("new"), _session("a1"), _session("b2"), _session("c3"))

    assert state.session_list.selected is not None
    assert state.session_list.selected.short == "b2"
    assert state.session_list.cursor == 2
    assert effects == [LoadLog("b2")]


@pytest.mark.unit
def test_session_reload_clamps_cursor_when_selection_disappears() -> None:
    state = AppState()
    _loaded(state, _session("a1"), _session("b2"), _session("c3"))
    state.session_list.cursor = 2

    _loaded(state, _session("a1"))

    assert state.session_list.cursor == 0


@pytest.mark.unit
def test_empty_session_list_requests_nothing() -> None:
    state = AppState()

    assert _loaded(state) == []
    assert state.session_list.selected is None


@pytest.mark.unit
def test_session_load_error_keeps_list() -> None:
    state = AppState()
    _loaded(state, _session("a1"))

    effects = reduce_state(state, SessionsLoaded(error="read history: permission denied"))

    assert effects == []
    assert [s.short for s in state.sessions] == ["a1"]
    assert state.errors["sessions"] == "read history: permission denied"


@pytest.mark.unit
def test_session_reload_feeds_completer() -> None:
    state = AppState()
    _loaded(state, _session("a1"), _session("b2"))

    assert [c.value for c in state.command.completer.complete("session stop ")] == ["a1", "b2"]


@pytest.mark.unit
def test_unchanged_preview_is_not_reloaded() -> None:
    state = AppState()
    _loaded(state, _session("a1"))
    reduce_state(state, LogLoaded(short_id="a1", events=[_result("done")]))

    assert _loaded(state, _session("a1")) == []


@pytest.mark.unit
def test_changed_record_reloads_preview() -> None:
    state = AppState()
    _loaded(state, _session("a1", "running"))
    reduce_state(state, LogLoaded(short_id="a1", events=[_result("working")]))

    effects = _loaded(state, _session("a1", "completed", duration=30))

    assert effects == [LoadLog("a1")]


# --- Preview ---


@pytest.mark.unit
def test_preview_applies_only_to_selected_session() -> None:
    state = AppState()
    _loaded(state, _session("a1"), _session("b2"))
    state.session_list.cursor = 1

    reduce_state(state, LogLoaded(short_id="a1", events=[_result("stale answer")]))

    assert state.session_list.preview_id == ""
    assert state.session_list.preview_events == []
    assert state.session_list.summaries["a1"] == "stale answer"


@pytest.mark.unit
def test_preview_for_selected_session_is_shown() -> None:
    state = AppState()
    _loaded(state, _session("a1"))

    reduce_state(state, LogLoaded(short_id="a1", events=[_result("fresh")]))

    assert state.session_list.preview_id == "a1"
    assert state.session_list.preview_events == [_result("fresh")]


@pytest.mark.unit
def test_log_load_error_is_reported() -> None:
    state = AppState()
    _loaded(state, _session("a1"))

    reduce_state(state, LogLoaded(short_id="a1", error="read log: denied"))

    assert state.errors["log"] == "read log: denied"


# --- Log view ---


@pytest.mark.unit
def test_open_log_of_running_session_tails_it() -> None:
    state = AppState()
    session = _session("a1", "running")

    effects = open_log(state, session)

    assert state.mode is ViewMode.LOG
    assert state.prev_mode is ViewMode.SESSIONS
    assert effects == [LoadLog("a1"), WatchLog("a1")]


@pytest.mark.unit
def test_open_log_of_finished_session_loads_once() -> None:
    state = AppState()

    assert open_log(state, _session("a1")) == [LoadLog("a1")]


@pytest.mark.unit
def test_close_log_restores_previous_mode_and_stops_tailing() -> None:
    state = AppState(mode=ViewMode.TRIGGERS)
    open_log(state, _session("a1", "running"))

    effects = close_log(state)

    assert state.mode is ViewMode.TRIGGERS
    assert state.log_view.session is None
    assert effects == [WatchLog("")]


@pytest.mark.unit
def test_initial_log_load_shows_content() -> None:
    state = AppState(height=10)
    open_log(state, _session("a1", working_dir="/tmp/work"))
    assert state.log_view.shown is False

    reduce_state(state, LogLoaded(short_id="a1", events=[_result("hello")]))

    log_view = state.log_view
    assert log_view.shown is True
    assert log_view.lines[0].startswith("a1  completed")
    assert log_view.lines[1] == "/tmp/work"
    assert log_view.lines[-1] == "hello"


@pytest.mark.unit
def test_empty_log_shows_placeholder() -> None:
    state = AppState()
    open_log(state, _session("a1"))

    reduce_state(state, LogLoaded(short_id="a1"))

    assert state.log_view.lines[-1] == NO_LOG_DATA


@pytest.mark.unit
def test_log_for_another_session_is_ignored() -> None:
    state = AppState()
    open_log(state, _session("a1"))

    reduce_state(state, LogLoaded(short_id="b2", events=[_result("other")]))

    assert state.log_view.shown is False


@pytest.mark.unit
def test_log_update_follows_bottom() -> None:
    state = AppState(height=10)
    open_log(state, _session("a1", "running"))
    reduce_state(state, LogLoaded(short_id="a1", events=[_numbered(20)]))
    viewport = state.log_view.viewport
    viewport.goto_bottom()

    reduce_state(state, LogLoaded(short_id="a1", events=[_numbered(30)]))

    assert viewport.line_count == 33
    assert viewport.offset == viewport.max_offset


@pytest.mark.unit
def test_log_update_keeps_scroll_position_when_scrolled_up() -> None:
    state = AppState(height=10)
    open_log(state, _session("a1", "running"))
    reduce_state(state, LogLoaded(short_id="a1", events=[_numbered(20)]))
    viewport = state.log_view.viewport
    viewport.offset = 3

    reduce_state(state, LogLoaded(short_id="a1", events=[_numbered(30)]))

    assert viewport.offset == 3


@pytest.mark.unit
def test_failed_incremental_load_keeps_log() -> None:
    state = AppState()
    open_log(state, _session("a1", "running"))
    reduce_state(state, LogLoaded(short_id="a1", events=[_result("kept")]))

    reduce_state(state, LogLoaded(short_id="a1", error="read log: gone"))

    assert state.log_view.lines[-1] == "kept"


@pytest.mark.unit
def test_session_reload_refreshes_log_view_record() -> None:
    state = AppState()
    _loaded(state, _session("a1", "running"))
    open_log(state, state.sessions[0])
    reduce_state(state, LogLoaded(short_id="a1", events=[_result("x")]))

    _loaded(state, _session("a1", "completed", duration=90))

    assert state.log_view.session is not None
    assert state.log_view.session.status == "completed"
    assert state.log_view.lines[0] == "a1  completed  1m"


# --- Watch events ---


@pytest.mark.unit
def test_history_change_reloads_sessions() -> None:
    assert reduce_state(AppState(), WatchEvent(kind=WatchKind.HISTORY, path="/h")) == [LoadSessions()]


@pytest.mark.unit
def test_log_change_reloads_tailed_log() -> None:
    state = AppState()
    open_log(state, _session("a1", "running"))
    reduce_state(state, LogLoaded(short_id="a1"))

    effects = reduce_state(state, WatchEvent(kind=WatchKind.LOG, path="/l", short_id="a1"))

    assert effects == [LoadLog("a1")]


@pytest.mark.unit
def test_log_change_before_initial_load_waits() -> None:
    state = AppState()
    open_log(state, _session("a1", "running"))

    assert reduce_state(state, WatchEvent(kind=WatchKind.LOG, path="/l", short_id="a1")) == []


@pytest.mark.unit
def test_log_change_in_list_refreshes_preview() -> None:
    state = AppState()
    _loaded(state, _session("a1", "running"))

    effects = reduce_state(state, WatchEvent(kind=WatchKind.LOG, path="/l", short_id="a1"))

    assert effects == [LoadLog("a1")]


# --- Commands and streams ---


@pytest.mark.unit
def test_structured_submit_runs_cli_command() -> None:
    state = AppState()
    focus_command(state)
    state.command.text = "trigger run daily"

    effects = submit_command(state)

    assert effects == [RunCommand(("trigger", "run", "daily"))]
    assert state.command.pending == "trigger run daily"
    assert state.command.text == ""


@pytest.mark.unit
def test_blank_submit_is_noop() -> None:
    state = AppState()
    focus_command(state)
    state.command.text = "   "

    assert submit_command(state) == []


@pytest.mark.unit
def test_natural_language_submit_starts_stream() -> None:
    state = AppState()
    focus_command(state)
    state.command.text = "what ran today?"

    effects = submit_command(state)

    assert effects == [StartStream(stream_id=1, text="what ran today?")]
    assert state.command.streaming is True
    assert state.command.stream_id == 1


@pytest.mark.unit
def test_action_result_shows_output_and_reloads() -> None:
    state = AppState()
    state.command.pending = "on"

    effects = reduce_state(state, ActionResult(output="workmode enabled\n"))

    assert effects == list(RELOAD_ALL)
    assert state.command.result == "workmode enabled\n"
    assert state.command.pending == ""


@pytest.mark.unit
def test_action_error_is_flagged() -> None:
    state = AppState()

    reduce_state(state, ActionResult(error="workmode trigger run x: exit status 1: no such trigger"))

    assert state.command.result_is_error is True
    assert "no such trigger" in (state.command.result or "")


@pytest.mark.unit
def test_action_result_cancels_active_stream() -> None:
    state = AppState()
    start_stream(state, "question")

    effects = reduce_state(state, ActionResult(output="ok"))

    assert effects == [CancelStream(), *RELOAD_ALL]
    assert state.command.streaming is False
    assert state.command.result == "ok"


@pytest.mark.unit
def test_stream_chunks_accumulate() -> None:
    state = AppState()
    start_stream(state, "question")

    reduce_state(state, StreamChunk(stream_id=1, text="first"))
    reduce_state(state, StreamChunk(stream_id=1, text="second"))

    assert state.command.result == "first\nsecond"


@pytest.mark.unit
def test_chunks_from_superseded_stream_are_dropped() -> None:
    state = AppState()
    start_stream(state, "old question")
    start_stream(state, "new question")

    reduce_state(state, StreamChunk(stream_id=1, text="late"))
    reduce_state(state, StreamDone(stream_id=1, error="killed"))

    assert state.command.stream_id == 2
    assert state.command.streaming is True
    assert state.command.chunks == []


@pytest.mark.unit
def test_stream_done_with_error_and_no_output_shows_error() -> None:
    state = AppState()
    start_stream(state, "question")

    reduce_state(state, StreamDone(stream_id=1, error="exit status 1: not logged in"))

    assert state.command.streaming is False
    assert state.command.result_is_error is True
    assert state.command.result == "exit status 1: not logged in"


@pytest.mark.unit
def test_stream_done_keeps_partial_answer() -> None:
    state = AppState()
    start_stream(state, "question")
    reduce_state(state, StreamChunk(stream_id=1, text="partial"))

    reduce_state(state, StreamDone(stream_id=1, error="killed"))

    assert state.command.result == "partial"
    assert state.command.result_is_error is False


@pytest.mark.unit
def test_chunks_after_done_are_dropped() -> None:
    state = AppState()
    start_stream(state, "question")
    reduce_state(state, StreamDone(stream_id=1))

    reduce_state(state, StreamChunk(stream_id=1, text="late"))

    assert state.command.chunks == []


# --- Misc ---


@pytest.mark.unit
def test_triggers_loaded_keeps_selection_and_feeds_completer() -> None:
    state = AppState()
    reduce_state(state, TriggersLoaded(triggers=[Trigger(name="a"), Trigger(name="b")]))
    state.trigger_list.cursor = 1

    reduce_state(state, TriggersLoaded(triggers=[Trigger(name="b"), Trigger(name="c")]))

    assert state.trigger_list.cursor == 0
    assert [c.value for c in state.command.completer.complete("trigger run ")] == ["b", "c"]


@pytest.mark.unit
def test_trigger_load_error_is_reported() -> None:
    state = AppState()

    reduce_state(state, TriggersLoaded(error="invalid config"))

    assert state.errors["triggers"] == "invalid config"


@pytest.mark.unit
def test_resume_exit_reloads_and_reports_failure() -> None:
    state = AppState()

    effects = reduce_state(state, ResumeExited(error="exit status 1"))

    assert effects == list(RELOAD_ALL)
    assert state.errors["resume"] == "exit status 1"


@pytest.mark.unit
def test_resize_updates_viewports() -> None:
    state = AppState()

    reduce_state(state, Resized(width=120, height=40))

    assert (state.width, state.height) == (120, 40)
    assert state.log_view.viewport.height == 39
    assert state.command.viewport.height == 37


@pytest.mark.unit
def test_theme_loaded_replaces_theme() -> None:
    state = AppState()
    theme = Theme(accent="#ff0000")

    reduce_state(state, ThemeLoaded(theme=theme))

    assert state.theme is theme
