"""Key dispatch for the console.

Handlers are tried in order. Each either claims the key, returning its
effects, or passes it on to the next handler. The command line passes a key
on after it gives up focus, so the list underneath sees the same key press.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from workmode_tui.cli.tui.effects import RELOAD_ALL, Effect, Quit, ReloadTheme, ResumeSession
from workmode_tui.cli.tui.state import (
    LIST_MODES,
    AppState,
    ViewMode,
    accept_selected,
    blur_command,
    clear_result,
    close_log,
    focus_command,
    move_cursor,
    open_log,
    refresh_candidates,
    run_action,
    submit_command,
)
from workmode_tui.core.events import KeyPressed
from workmode_tui.core.models import Session

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyOutcome:
    claimed: bool
    effects: tuple[Effect, ...] = ()


PASS = KeyOutcome(claimed=False)


def _claim(*effects: Effect) -> KeyOutcome:
    return KeyOutcome(claimed=True, effects=effects)


def _is(event: KeyPressed, *names: str) -> bool:
    """Match by key name, or by typed character for printable keys."""
    return event.key in names or (event.printable is not None and event.printable in names)


def _resume(state: AppState, session: Session | None) -> KeyOutcome:
    if session is None:
        return _claim()
    if not session.session_id:
        state.errors["resume"] = f"session {session.short} has no conversation to resume"
        return _claim()
    return _claim(ResumeSession(session))


# --- Handlers, highest priority first ---


def handle_help(state: AppState, event: KeyPressed) -> KeyOutcome:
    if not state.show_help:
        return PASS
    state.show_help = False
    if _is(event, "ctrl+c"):
        return _claim(Quit())
    return _claim()


def handle_command_line(state: AppState, event: KeyPressed) -> KeyOutcome:
    if state.mode is not ViewMode.COMMAND:
        return PASS
    cmd = state.command
    if _is(event, "ctrl+c"):
        return PASS

    if cmd.candidates:
        if _is(event, "down"):
            cmd.selected = (cmd.selected + 1) % len(cmd.candidates)
            return _claim()
        if _is(event, "up"):
            cmd.selected = len(cmd.candidates) - 1 if cmd.selected <= 0 else cmd.selected - 1
            return _claim()
        if _is(event, "tab"):
            accept_selected(cmd, max(cmd.selected, 0))
            return _claim()

    if _is(event, "enter"):
        if 0 <= cmd.selected < len(cmd.candidates):
            accept_selected(cmd, cmd.selected)
            return _claim()
        return _claim(*submit_command(state))

    if _is(event, "escape"):
        effects = clear_result(state)
        cmd.text = ""
        cmd.pending = ""
        blur_command(state)
        # Focus lost: the list underneath gets this key too
        return KeyOutcome(claimed=False, effects=tuple(effects))

    if cmd.has_result and _is(event, "pageup", "pagedown", "up", "down"):
        step = cmd.viewport.height if _is(event, "pageup", "pagedown") else 1
        cmd.viewport.scroll(-step if _is(event, "pageup", "up") else step)
        return _claim()

    effects: list[Effect] = []
    if cmd.has_result and not _is(event, "up", "down", "tab"):
        effects = clear_result(state)

    if event.printable is not None:
        cmd.text += event.printable
    elif _is(event, "backspace"):
        cmd.text = cmd.text[:-1]
    elif _is(event, "ctrl+u"):
        cmd.text = ""
    refresh_candidates(cmd)
    return _claim(*effects)


def handle_log_view(state: AppState, event: KeyPressed) -> KeyOutcome:
    if state.mode is not ViewMode.LOG:
        return PASS
    viewport = state.log_view.viewport
    if _is(event, "ctrl+c"):
        return _claim(Quit())
    if _is(event, "q", "escape"):
        return _claim(*close_log(state))
    if _is(event, "ctrl+r"):
        return _resume(state, state.log_view.session)
    if _is(event, "up", "k"):
        viewport.scroll(-1)
    elif _is(event, "down", "j"):
        viewport.scroll(1)
    elif _is(event, "pageup", "b"):
        viewport.scroll(-viewport.height)
    elif _is(event, "pagedown", "space", " "):
        viewport.scroll(viewport.height)
    elif _is(event, "home", "g"):
        viewport.goto_top()
    elif _is(event, "end", "G"):
        viewport.goto_bottom()
    return _claim()


def handle_global(state: AppState, event: KeyPressed) -> KeyOutcome:
    if _is(event, "ctrl+c"):
        return _claim(Quit())
    if state.mode not in LIST_MODES:
        return PASS
    if _is(event, "q"):
        return _claim(Quit())
    if _is(event, "tab"):
        state.mode = ViewMode.TRIGGERS if state.mode is ViewMode.SESSIONS else ViewMode.SESSIONS
        return _claim()
    if _is(event, "/"):
        focus_command(state)
        return _claim()
    if _is(event, "?"):
        state.show_help = True
        return _claim()
    if _is(event, "ctrl+l"):
        return _claim(*RELOAD_ALL)
    if _is(event, "ctrl+t"):
        return _claim(ReloadTheme())
    if _is(event, "escape"):
        return _claim(*clear_result(state))
    return PASS


def handle_lists(state: AppState, event: KeyPressed) -> KeyOutcome:
    if state.mode not in LIST_MODES:
        return PASS
    if _is(event, "up", "k"):
        return _claim(*move_cursor(state, delta=-1))
    if _is(event, "down", "j"):
        return _claim(*move_cursor(state, delta=1))
    if _is(event, "home", "g"):
        return _claim(*move_cursor(state, to=0))
    if _is(event, "end", "G"):
        return _claim(*move_cursor(state, to=-1))

    if state.mode is ViewMode.TRIGGERS:
        trigger = state.trigger_list.selected
        if _is(event, "enter", "ctrl+x"):
            if trigger is None:
                return _claim()
            return _claim(*run_action(state, "trigger", "run", trigger.name))
        return PASS

    session = state.session_list.selected
    if _is(event, "enter"):
        if session is None:
            return _claim()
        return _claim(*open_log(state, session))
    if _is(event, "ctrl+r"):
        return _resume(state, session)
    if _is(event, "ctrl+s", "ctrl+k"):
        if session is None or not session.is_running:
            return _claim()
        verb = "stop" if _is(event, "ctrl+s") else "kill"
        return _claim(*run_action(state, "session", verb, session.short))
    if _is(event, "ctrl+x"):
        if session is None or not session.trigger:
            return _claim()
        return _claim(*run_action(state, "trigger", "run", session.trigger))
    return PASS


KeyHandler = Callable[[AppState, KeyPressed], KeyOutcome]

KEY_HANDLERS: tuple[KeyHandler, ...] = (
    handle_help,
    handle_command_line,
    handle_log_view,
    handle_global,
    handle_lists,
)


def dispatch_key(state: AppState, event: KeyPressed) -> list[Effect]:
    """Offer the key to each handler in priority order until one claims it."""
    effects: list[Effect] = []
    for handler in KEY_HANDLERS:
        outcome = handler(state, event)
        effects.extend(outcome.effects)
        if outcome.claimed:
            break
    else:
        logger.debug("Key %s not handled in %s mode", event.key, state.mode.value)
    return effects
