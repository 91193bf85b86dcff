"""Streams natural-language requests through the assistant CLI.

The assistant is run with ``--output-format stream-json``; stdout is read line
by line so partial answers show up while the process is still working. Each
run ends with exactly one ``StreamDone``, including runs that were killed.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Callable, Sequence

from workmode_tui.constants import ASSISTANT_BINARY, ASSISTANT_SKILL
from workmode_tui.core.client import child_env
from workmode_tui.core.events import ConsoleEvent, StreamChunk, StreamDone
from workmode_tui.core.parser import extract_text, parse_stream_line

logger = logging.getLogger(__name__)

DEFAULT_COMMAND = (ASSISTANT_BINARY, "-p", "--output-format", "stream-json", "--skill", ASSISTANT_SKILL)

# Matches the largest single event line the assistant emits in practice
_LINE_LIMIT = 1024 * 1024


def _kill_group(proc: asyncio.subprocess.Process) -> None:
    """Kill the assistant together with anything it started in its session."""
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


class AssistantStream:
    """Owns at most one running assistant process."""

    def __init__(self, sink: Callable[[ConsoleEvent], None], command: Sequence[str] = DEFAULT_COMMAND) -> None:
        self._sink = sink
        self._command = list(command)
        self._lock = asyncio.Lock()
        self._proc: asyncio.subprocess.Process | None = None
        self._task: asyncio.Task[None] | None = None
        self._killed = False

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self, text: str, stream_id: int) -> None:
        """Kill any running request, then run ``text`` as a new one."""
        async with self._lock:
            await self._cancel_locked()
            try:
                proc = await asyncio.create_subprocess_exec(
                    *self._command,
                    text,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    env=child_env(),
                    limit=_LINE_LIMIT,
                    start_new_session=True,
                )
            except OSError as e:
                logger.warning("Cannot start assistant: %s", e)
                self._sink(StreamDone(stream_id=stream_id, error=str(e)))
                return
            logger.info("Assistant stream %d started (pid %s)", stream_id, proc.pid)
            self._proc = proc
            self._killed = False
            self._task = asyncio.create_task(self._read(proc, stream_id))

    async def cancel(self) -> None:
        """Kill the running request and wait until its completion event is sent."""
        async with self._lock:
            await self._cancel_locked()

    async def _cancel_locked(self) -> None:
        task, proc = self._task, self._proc
        if task is None:
            return
        if not task.done() and proc is not None and proc.returncode is None:
            self._killed = True
            _kill_group(proc)
            await proc.wait()
            # A grandchild outside the group may still hold stdout open
            task.cancel()
        await asyncio.wait([task])
        self._task = None
        self._proc = None

    async def _read(self, proc: asyncio.subprocess.Process, stream_id: int) -> None:
        assert proc.stdout is not None and proc.stderr is not None
        stderr_task = asyncio.create_task(proc.stderr.read())
        # Overwritten on normal completion
        error: str | None = "cancelled"
        try:
            while True:
                try:
                    raw = await proc.stdout.readline()
                except ValueError:
                    logger.debug("Skipping oversized stream line")
                    continue
                if not raw:
                    break
                event = parse_stream_line(raw.decode("utf-8", errors="replace"))
                if event is None:
                    continue
                chunk = extract_text(event)
                if chunk:
                    self._sink(StreamChunk(stream_id=stream_id, text=chunk))

            returncode = await proc.wait()
            stderr = (await stderr_task).decode("utf-8", errors="replace").strip()
            error = None
            if self._killed:
                error = "killed"
            elif returncode < 0:
                error = f"signal {-returncode}"
            elif returncode != 0:
                error = f"exit status {returncode}"
                if stderr:
                    error = f"{error}: {stderr}"
        except asyncio.CancelledError:
            if self._killed:
                error = "killed"
            raise
        finally:
            if not stderr_task.done():
                stderr_task.cancel()
            logger.info("Assistant stream %d finished: %s", stream_id, error or "ok")
            self._sink(StreamDone(stream_id=stream_id, error=error))
