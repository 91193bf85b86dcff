"""Parsers for the workmode history file and per-session stream-json logs.

Both files are append-only JSON lines written by concurrent processes, so a
reader must tolerate blank lines, malformed lines and a partially written
trailing line. None of these are errors; the line is skipped.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from workmode_tui.constants import ELLIPSIS
from workmode_tui.core.models import (
    AssistantEvent,
    ResultEvent,
    Session,
    StreamEvent,
    ToolUseEvent,
    stream_event_adapter,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def _read_lines(path: str | Path) -> Iterator[str]:
    """Yield stripped non-blank lines; yields nothing when the file is missing."""
    try:
        handle = open(path, "r", encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return
    with handle:
        for raw in handle:
            line = raw.strip()
            if line:
                yield line


def parse_stream_line(line: str) -> StreamEvent | None:
    """Decode one stream-json line; None for blank or malformed input."""
    line = line.strip()
    if not line:
        return None
    try:
        return stream_event_adapter.validate_json(line)
    except ValidationError:
        return None


def parse_ndjson(data: str, model: type[M]) -> list[M]:
    """Decode newline-delimited JSON objects, skipping lines that fail validation."""
    records: list[M] = []
    for raw in data.splitlines():
        line = raw.strip()
        if not line:
            continue
        try:
            records.append(model.model_validate_json(line))
        except ValidationError:
            logger.debug("Skipping malformed %s line: %.80s", model.__name__, line)
    return records


def parse_sessions(path: str | Path) -> list[Session]:
    """Read the history file into unique sessions.

    A later line for an id replaces the earlier record in place, so each
    session keeps the position where its id first appeared. The result is
    newest-introduced first.
    """
    by_id: dict[str, Session] = {}
    for line in _read_lines(path):
        try:
            session = Session.model_validate_json(line)
        except ValidationError:
            continue
        if not session.id:
            continue
        # dict keeps first-insertion order on overwrite
        by_id[session.id] = session
    return list(reversed(by_id.values()))


def parse_log(path: str | Path) -> list[StreamEvent]:
    """Read a session log into events in file order."""
    events: list[StreamEvent] = []
    for line in _read_lines(path):
        event = parse_stream_line(line)
        if event is not None:
            events.append(event)
    return events


def extract_summary(events: Sequence[StreamEvent], max_len: int) -> str:
    """One-line summary: the last non-empty result, else the last assistant text."""
    last_text = ""
    result = ""
    for event in events:
        if isinstance(event, AssistantEvent):
            for block in event.blocks:
                if block.type == "text" and block.text:
                    last_text = block.text
        elif isinstance(event, ResultEvent) and event.result:
            result = event.result

    summary = result or last_text
    if not summary or max_len <= 0:
        return ""
    summary = summary.split("\n", 1)[0].strip()
    if len(summary) > max_len:
        summary = summary[: max_len - 1] + ELLIPSIS
    return summary


def format_log(events: Sequence[StreamEvent]) -> str:
    """Render events as plain text, one line per text block, tool call or result."""
    parts: list[str] = []
    for event in events:
        if isinstance(event, AssistantEvent):
            for block in event.blocks:
                if block.type == "text":
                    parts.append(block.text + "\n")
                elif block.type == "tool_use":
                    parts.append(f"[tool: {block.name}]\n")
        elif isinstance(event, ToolUseEvent):
            parts.append(f"[tool: {event.name}]\n")
        elif isinstance(event, ResultEvent) and event.result:
            parts.append(event.result + "\n")
    return "".join(parts)


def extract_text(event: StreamEvent) -> str:
    """Text a streamed event contributes to the live result pane."""
    if isinstance(event, AssistantEvent):
        pieces: list[str] = []
        for block in event.blocks:
            if block.type == "text":
                pieces.append(block.text)
            elif block.type == "tool_use":
                pieces.append(f"[tool: {block.name}]")
        return "\n".join(pieces)
    if isinstance(event, ToolUseEvent):
        return f"[tool: {event.name}]"
    if isinstance(event, ResultEvent):
        return event.result
    return ""
