"""Custom Textual messages for the console."""

from __future__ import annotations

from textual.message import Message

from workmode_tui.core.events import ConsoleEvent


class EventPosted(Message):
    """A console event delivered to the app's inbox.

    Posted from workers, timers, the watcher thread and key handlers alike;
    the app's message queue keeps them in arrival order.
    """

    def __init__(self, event: ConsoleEvent) -> None:
        super().__init__()
        self.event = event
