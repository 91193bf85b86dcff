"""Events delivered to the console's single inbox.

Every background operation (CLI call, file read, watcher callback, stream
reader, timer) reports back with exactly one of these, or a sequence of
``StreamChunk`` followed by one ``StreamDone``. The reducer consumes them one
at a time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Union

from workmode_tui.core.models import Session, Status, StreamEvent, Trigger

if TYPE_CHECKING:
    from workmode_tui.cli.tui.theme import Theme


@dataclass(frozen=True)
class Started:
    """App mounted; kick off the initial loads."""


@dataclass(frozen=True)
class StatusLoaded:
    status: Status | None = None
    error: str | None = None


@dataclass(frozen=True)
class SessionsLoaded:
    sessions: list[Session] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class TriggersLoaded:
    triggers: list[Trigger] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class LogLoaded:
    short_id: str
    events: list[StreamEvent] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class ActionResult:
    """Output of a structured command run through the workmode CLI."""

    output: str = ""
    error: str | None = None


@dataclass(frozen=True)
class StatusTick:
    """Periodic status poll."""


class WatchKind(str, Enum):
    HISTORY = "history"
    LOG = "log"


@dataclass(frozen=True)
class WatchEvent:
    kind: WatchKind
    path: str
    short_id: str = ""


@dataclass(frozen=True)
class WatcherFailed:
    error: str


@dataclass(frozen=True)
class StreamChunk:
    stream_id: int
    text: str


@dataclass(frozen=True)
class StreamDone:
    stream_id: int
    error: str | None = None


@dataclass(frozen=True)
class ResumeExited:
    error: str | None = None


@dataclass(frozen=True)
class KeyPressed:
    key: str
    character: str | None = None

    @property
    def printable(self) -> str | None:
        """The typed character when the key produces one."""
        if self.character and self.character.isprintable() and len(self.character) == 1:
            return self.character
        return None


@dataclass(frozen=True)
class Resized:
    width: int
    height: int


@dataclass(frozen=True)
class ThemeLoaded:
    theme: Theme


ConsoleEvent = Union[
    Started,
    StatusLoaded,
    SessionsLoaded,
    TriggersLoaded,
    LogLoaded,
    ActionResult,
    StatusTick,
    WatchEvent,
    WatcherFailed,
    StreamChunk,
    StreamDone,
    ResumeExited,
    KeyPressed,
    Resized,
    ThemeLoaded,
]
