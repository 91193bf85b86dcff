"""Follow-up work requested by the reducer.

The app executes each effect in the background; every effect delivers its
outcome back to the inbox as an event, never synchronously.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from workmode_tui.core.models import Session


@dataclass(frozen=True)
class LoadStatus:
    pass


@dataclass(frozen=True)
class LoadSessions:
    pass


@dataclass(frozen=True)
class LoadTriggers:
    pass


@dataclass(frozen=True)
class LoadLog:
    short_id: str


@dataclass(frozen=True)
class RunCommand:
    """Run a structured command through the workmode CLI."""

    args: tuple[str, ...]


@dataclass(frozen=True)
class StartStream:
    stream_id: int
    text: str


@dataclass(frozen=True)
class CancelStream:
    pass


@dataclass(frozen=True)
class WatchLog:
    """Tail ``short_id``'s log; empty stops log watching."""

    short_id: str


@dataclass(frozen=True)
class ResumeSession:
    session: Session


@dataclass(frozen=True)
class ScheduleTick:
    delay: float


@dataclass(frozen=True)
class ReloadTheme:
    pass


@dataclass(frozen=True)
class Quit:
    pass


Effect = Union[
    LoadStatus,
    LoadSessions,
    LoadTriggers,
    LoadLog,
    RunCommand,
    StartStream,
    CancelStream,
    WatchLog,
    ResumeSession,
    ScheduleTick,
    ReloadTheme,
    Quit,
]

RELOAD_ALL: tuple[Effect, ...] = (LoadStatus(), LoadSessions(), LoadTriggers())
