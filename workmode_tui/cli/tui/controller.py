"""Console controller: the single writer of ``AppState``."""

from __future__ import annotations

import logging

from workmode_tui.cli.tui.effects import Effect
from workmode_tui.cli.tui.keys import dispatch_key
from workmode_tui.cli.tui.state import AppState, ViewMode, reduce_state
from workmode_tui.core.events import ConsoleEvent, KeyPressed

logger = logging.getLogger(__name__)


class ConsoleController:
    """Applies inbox events to state, one at a time, and returns follow-up work."""

    def __init__(self, state: AppState | None = None) -> None:
        self.state = state or AppState()

    def dispatch(self, event: ConsoleEvent) -> list[Effect]:
        before: ViewMode = self.state.mode
        if isinstance(event, KeyPressed):
            effects = dispatch_key(self.state, event)
        else:
            effects = reduce_state(self.state, event)
        if self.state.mode is not before:
            logger.debug("Mode %s -> %s", before.value, self.state.mode.value)
        if effects:
            logger.debug("%s -> %s", type(event).__name__, [type(e).__name__ for e in effects])
        return effects
