"""Access to workmode: the ``workmode`` CLI plus direct reads of its state files.

File reads are used for live updates because they are cheap. The CLI is used
for daemon status and every action that changes agent state.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from pydantic import ValidationError

from workmode_tui.config import ConfigError, load_config
from workmode_tui.constants import ASSISTANT_BINARY, CLI_BINARY, NESTED_SESSION_ENV
from workmode_tui.core.models import Session, Status, StreamEvent, Trigger
from workmode_tui.core.parser import parse_log, parse_ndjson, parse_sessions
from workmode_tui.paths import DEFAULT_STATE_DIR, default_config_path, expand_home, history_path, log_path

logger = logging.getLogger(__name__)


class ClientError(Exception):
    """A workmode CLI call failed or returned output that could not be parsed."""


def child_env(base: Mapping[str, str] | None = None) -> dict[str, str]:
    """Environment for child processes, without the nested-assistant marker."""
    env = dict(os.environ if base is None else base)
    env.pop(NESTED_SESSION_ENV, None)
    return env


@dataclass(frozen=True)
class ProcessSpec:
    """A fully resolved command line for an interactive child process."""

    argv: list[str]
    cwd: str | None
    env: dict[str, str]


class WorkmodeClient:
    """Wraps the workmode CLI and the files under its state directory."""

    def __init__(
        self,
        cli_command: Sequence[str] = (CLI_BINARY,),
        config_path: Path | None = None,
        state_dir: str | None = None,
    ) -> None:
        self.cli_command = list(cli_command)
        self.config_path = config_path or default_config_path()
        self.state_dir = expand_home(state_dir) if state_dir else self._state_dir_from_config()

    def _state_dir_from_config(self) -> str:
        try:
            return load_config(self.config_path).state_dir
        except ConfigError as e:
            logger.warning("Using default state dir: %s", e)
            return expand_home(DEFAULT_STATE_DIR)

    @property
    def history_path(self) -> Path:
        return history_path(self.state_dir)

    def log_path(self, short_id: str) -> Path:
        return log_path(self.state_dir, short_id)

    # --- Direct file access ---

    def read_sessions(self) -> list[Session]:
        return parse_sessions(self.history_path)

    def read_log(self, short_id: str) -> list[StreamEvent]:
        return parse_log(self.log_path(short_id))

    def read_triggers(self) -> list[Trigger]:
        """Triggers straight from the config file, no subprocess."""
        return load_config(self.config_path).triggers

    # --- CLI queries ---

    async def status(self) -> Status:
        out = await self._run("status", "--json")
        try:
            return Status.model_validate_json(out)
        except ValidationError as e:
            raise ClientError(f"parse status: {e}") from e

    async def triggers(self) -> list[Trigger]:
        return parse_ndjson(await self._run("trigger", "list", "--json"), Trigger)

    # --- Actions ---

    async def run_command(self, *args: str) -> str:
        """Pass an arbitrary structured command through to the CLI."""
        return await self._run(*args)

    def resume_command(self, session: Session) -> ProcessSpec:
        """``claude --resume`` for the session's conversation, in its working dir."""
        if not session.session_id:
            raise ClientError(f"session {session.short or session.id} has no conversation to resume")
        cwd = expand_home(session.working_dir) or None
        return ProcessSpec(argv=[ASSISTANT_BINARY, "--resume", session.session_id], cwd=cwd, env=child_env())

    # --- internal ---

    async def _run(self, *args: str) -> str:
        argv = [*self.cli_command, *args]
        label = " ".join(argv)
        logger.debug("Running %s", label)
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=child_env(),
            )
        except OSError as e:
            raise ClientError(f"{label}: {e}") from e

        stdout, stderr = await proc.communicate()
        out = stdout.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            msg = stderr.decode("utf-8", errors="replace") or out
            logger.info("%s exited with %s", label, proc.returncode)
            raise ClientError(f"{label}: exit status {proc.returncode}: {msg.strip()}")
        return out
