"""Filesystem watcher for the history file and the currently tailed session log.

Only creates and writes matter; deletes, moves and metadata changes are
ignored. Events carry no payload, they just tell the console to reload from
disk, so coalesced or dropped OS notifications are harmless.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from workmode_tui.core.events import ConsoleEvent, WatchEvent, WatchKind

logger = logging.getLogger(__name__)

Sink = Callable[[ConsoleEvent], None]


class WatchError(Exception):
    """The history watch could not be established."""


def _norm(path: str | bytes | Path) -> str:
    return os.path.normpath(os.fsdecode(path))


class _WatchHandler(FileSystemEventHandler):
    """Watchdog handler forwarding create/modify events to the owning watcher."""

    def __init__(self, watcher: LogWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        self._watcher._on_fs_event(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._watcher._on_fs_event(event)


class LogWatcher:
    """Watches the history directory permanently and at most one log directory."""

    def __init__(
        self,
        history_path: Path,
        log_path_for: Callable[[str], Path],
        sink: Sink,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self._history_path = _norm(history_path)
        self._history_dir = os.path.dirname(self._history_path)
        self._log_path_for = log_path_for
        self._sink = sink
        self._observer = observer_factory()
        self._observer.daemon = True
        self.handler = _WatchHandler(self)
        self._history_watch: ObservedWatch | None = None

        # Serializes watch_log callers. The observer thread never takes it:
        # schedule/unschedule lock the observer, which holds its own lock
        # while dispatching to the handler.
        self._control_lock = threading.Lock()
        self._log_watch: ObservedWatch | None = None
        # (path, short id) of the tailed log, replaced as a whole and read
        # without locking from the observer thread
        self._target: tuple[str, str] | None = None

    @property
    def log_path(self) -> str | None:
        target = self._target
        return target[0] if target is not None else None

    def start(self) -> None:
        """Watch the history directory and start the observer thread.

        Raises:
            WatchError: The directory cannot be created or watched.
        """
        try:
            os.makedirs(self._history_dir, exist_ok=True)
            self._history_watch = self._observer.schedule(self.handler, self._history_dir, recursive=False)
            self._observer.start()
        except OSError as e:
            raise WatchError(f"watch {self._history_dir}: {e}") from e
        logger.info("Watching %s", self._history_dir)

    def stop(self) -> None:
        self._observer.stop()
        if self._observer.is_alive():
            self._observer.join(timeout=2)
        logger.debug("Watcher stopped")

    def watch_log(self, short_id: str) -> None:
        """Replace the watched log with the one for ``short_id``; empty stops log watching."""
        with self._control_lock:
            self._target = None
            if self._log_watch is not None:
                self._observer.unschedule(self._log_watch)
                self._log_watch = None

            if not short_id:
                return

            path = _norm(self._log_path_for(short_id))
            log_dir = os.path.dirname(path)
            try:
                os.makedirs(log_dir, exist_ok=True)
                # Same directory as history: the permanent watch already covers it
                if log_dir != self._history_dir:
                    self._log_watch = self._observer.schedule(self.handler, log_dir, recursive=False)
            except OSError as e:
                logger.warning("Cannot watch log dir %s: %s", log_dir, e)
                return
            self._target = (path, short_id)
            logger.debug("Tailing log %s", path)

    def _on_fs_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        path = _norm(event.src_path)
        if path == self._history_path:
            self._sink(WatchEvent(kind=WatchKind.HISTORY, path=path))
            return
        target = self._target
        if target is not None and path == target[0]:
            self._sink(WatchEvent(kind=WatchKind.LOG, path=path, short_id=target[1]))
