"""Textual app hosting the workmode console.

The app's message queue is the console's inbox. Every source (keys, resize,
background loads, the filesystem watcher, the assistant stream, timers)
posts an ``EventPosted`` message; the handler feeds it to the controller,
runs the returned effects as workers, then redraws.
"""

from __future__ import annotations

import asyncio
import logging
import subprocess
from typing import Callable, Protocol

from textual import events
from textual.app import App, ComposeResult, SuspendNotSupported
from textual.css.query import NoMatches
from textual.screen import Screen
from textual.widgets import Static

from workmode_tui.cli.tui.controller import ConsoleController
from workmode_tui.cli.tui.effects import (
    CancelStream,
    Effect,
    LoadLog,
    LoadSessions,
    LoadStatus,
    LoadTriggers,
    Quit,
    ReloadTheme,
    ResumeSession,
    RunCommand,
    ScheduleTick,
    StartStream,
    WatchLog,
)
from workmode_tui.cli.tui.messages import EventPosted
from workmode_tui.cli.tui.state import AppState
from workmode_tui.cli.tui.theme import Theme, load_theme
from workmode_tui.cli.tui.views.layout import render_body, render_footer, render_top
from workmode_tui.config import ConfigError
from workmode_tui.core.client import ClientError, WorkmodeClient
from workmode_tui.core.events import (
    ActionResult,
    ConsoleEvent,
    KeyPressed,
    LogLoaded,
    Resized,
    ResumeExited,
    SessionsLoaded,
    Started,
    StatusLoaded,
    StatusTick,
    ThemeLoaded,
    TriggersLoaded,
    WatcherFailed,
)
from workmode_tui.core.models import Session
from workmode_tui.core.stream import AssistantStream
from workmode_tui.core.watcher import LogWatcher, Sink, WatchError

logger = logging.getLogger(__name__)


class Watcher(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...

    def watch_log(self, short_id: str) -> None: ...


class ConsoleScreen(Screen[None], inherit_bindings=False):
    """Single screen: header, body and footer regions, all keys forwarded to the inbox."""

    DEFAULT_CSS = """
    ConsoleScreen {
        layout: vertical;
    }
    #header {
        height: auto;
    }
    #body {
        height: 1fr;
        overflow: hidden;
    }
    #footer {
        height: auto;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        yield Static(id="body")
        yield Static(id="footer")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        app = self.app
        if isinstance(app, WorkmodeApp):
            app.post_event(KeyPressed(key=event.key, character=event.character))

    def on_resize(self, event: events.Resize) -> None:
        app = self.app
        if isinstance(app, WorkmodeApp):
            app.post_event(Resized(width=event.size.width, height=event.size.height))


class WorkmodeApp(App[None], inherit_bindings=False):
    """Interactive console for the workmode agent."""

    ENABLE_COMMAND_PALETTE = False
    TITLE = "workmode"

    def __init__(
        self,
        client: WorkmodeClient,
        *,
        watcher_factory: Callable[[Sink], Watcher] | None = None,
        stream: AssistantStream | None = None,
        theme_loader: Callable[[], Theme] = load_theme,
        **kwargs: object,
    ) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.client = client
        self._theme_loader = theme_loader
        self.controller = ConsoleController(AppState(theme=theme_loader()))
        factory = watcher_factory or self._default_watcher
        self.watcher = factory(self.post_event)
        self.assistant = stream or AssistantStream(self.post_event)

    def _default_watcher(self, sink: Sink) -> Watcher:
        return LogWatcher(self.client.history_path, self.client.log_path, sink)

    @property
    def console_state(self) -> AppState:
        return self.controller.state

    def get_default_screen(self) -> Screen[None]:
        return ConsoleScreen()

    def post_event(self, event: ConsoleEvent) -> None:
        """Deliver an event to the inbox; safe to call from any thread."""
        self.post_message(EventPosted(event))

    # --- Lifecycle ---

    def on_mount(self) -> None:
        try:
            self.watcher.start()
        except WatchError as e:
            logger.warning("File watcher unavailable, relying on polling: %s", e)
            self.post_event(WatcherFailed(error=str(e)))
        self.post_event(Resized(width=self.size.width, height=self.size.height))
        self.post_event(Started())

    async def on_unmount(self) -> None:
        self.watcher.stop()
        await self.assistant.cancel()

    # --- Inbox ---

    def on_event_posted(self, message: EventPosted) -> None:
        message.stop()
        for effect in self.controller.dispatch(message.event):
            self._run_effect(effect)
        self.refresh_view()

    def refresh_view(self) -> None:
        state = self.console_state
        try:
            screen = self.screen
            screen.query_one("#header", Static).update(render_top(state))
            screen.query_one("#body", Static).update(render_body(state))
            screen.query_one("#footer", Static).update(render_footer(state))
        except NoMatches:
            # Not composed yet; the next event redraws
            return

    # --- Effects ---

    def _run_effect(self, effect: Effect) -> None:
        if isinstance(effect, LoadStatus):
            self.run_worker(self._load_status(), group="status", exit_on_error=False)
        elif isinstance(effect, LoadSessions):
            self.run_worker(self._load_sessions(), group="sessions", exit_on_error=False)
        elif isinstance(effect, LoadTriggers):
            self.run_worker(self._load_triggers(), group="triggers", exit_on_error=False)
        elif isinstance(effect, LoadLog):
            self.run_worker(self._load_log(effect.short_id), group="log", exit_on_error=False)
        elif isinstance(effect, RunCommand):
            self.run_worker(self._run_command(effect.args), group="command", exit_on_error=False)
        elif isinstance(effect, StartStream):
            self.run_worker(self.assistant.start(effect.text, effect.stream_id), group="stream", exit_on_error=False)
        elif isinstance(effect, CancelStream):
            self.run_worker(self.assistant.cancel(), group="stream", exit_on_error=False)
        elif isinstance(effect, WatchLog):
            self.watcher.watch_log(effect.short_id)
        elif isinstance(effect, ResumeSession):
            self._resume(effect.session)
        elif isinstance(effect, ScheduleTick):
            self.set_timer(effect.delay, lambda: self.post_event(StatusTick()))
        elif isinstance(effect, ReloadTheme):
            self.run_worker(self._reload_theme(), group="theme", exit_on_error=False)
        elif isinstance(effect, Quit):
            self.exit()

    async def _load_status(self) -> None:
        try:
            status = await self.client.status()
        except ClientError as e:
            self.post_event(StatusLoaded(error=str(e)))
            return
        self.post_event(StatusLoaded(status=status))

    async def _load_sessions(self) -> None:
        try:
            sessions = await asyncio.to_thread(self.client.read_sessions)
        except OSError as e:
            self.post_event(SessionsLoaded(error=f"read history: {e}"))
            return
        self.post_event(SessionsLoaded(sessions=sessions))

    async def _load_triggers(self) -> None:
        try:
            triggers = await self.client.triggers()
        except ClientError as e:
            # The config file lists the same triggers when the CLI is unusable
            logger.info("Listing triggers from config: %s", e)
            try:
                triggers = await asyncio.to_thread(self.client.read_triggers)
            except ConfigError as ce:
                self.post_event(TriggersLoaded(error=str(ce)))
                return
        self.post_event(TriggersLoaded(triggers=triggers))

    async def _load_log(self, short_id: str) -> None:
        try:
            log_events = await asyncio.to_thread(self.client.read_log, short_id)
        except OSError as e:
            self.post_event(LogLoaded(short_id=short_id, error=f"read log: {e}"))
            return
        self.post_event(LogLoaded(short_id=short_id, events=log_events))

    async def _run_command(self, args: tuple[str, ...]) -> None:
        try:
            output = await self.client.run_command(*args)
        except ClientError as e:
            self.post_event(ActionResult(error=str(e)))
            return
        self.post_event(ActionResult(output=output))

    async def _reload_theme(self) -> None:
        palette = await asyncio.to_thread(self._theme_loader)
        self.post_event(ThemeLoaded(theme=palette))

    def _resume(self, session: Session) -> None:
        """Hand the terminal to ``claude --resume`` until it exits."""
        try:
            spec = self.client.resume_command(session)
            logger.info("Resuming %s in %s", session.short, spec.cwd)
            with self.suspend():
                code = subprocess.call(spec.argv, cwd=spec.cwd, env=spec.env)
        except (ClientError, OSError) as e:
            self.post_event(ResumeExited(error=str(e)))
            return
        except SuspendNotSupported as e:
            logger.warning("Cannot suspend for resume: %s", e)
            self.post_event(ResumeExited(error=str(e) or "terminal cannot be suspended"))
            return
        self.post_event(ResumeExited(error=f"exit status {code}" if code else None))
