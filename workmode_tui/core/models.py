"""Typed records for workmode history, triggers, status and stream output."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

SESSION_STATUSES = ("pending", "running", "completed", "error", "stuck", "stopped", "killed")


class Session(BaseModel):
    """One line of ``history.jsonl`` or ``workmode session list --json``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = ""
    short: str = ""
    trigger: str = ""
    label: str = ""
    working_dir: str = ""
    started: str = ""
    status: str = ""
    duration: int | None = None
    pid: int | None = None
    session_id: str | None = None
    file: str | None = None
    attempt: int | None = None
    exit_code: int | None = None
    error: str | None = None

    def started_at(self) -> datetime | None:
        """Parse ``started`` as an RFC3339 timestamp; None when unparseable."""
        if not self.started:
            return None
        try:
            parsed = datetime.fromisoformat(self.started.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return parsed

    @property
    def is_running(self) -> bool:
        return self.status == "running"


class Trigger(BaseModel):
    """A trigger declaration from the config file or ``trigger list --json``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    type: str = ""
    permissions: str = ""
    skill: str = ""
    prompt: str = ""
    working_dir: str = ""
    cooldown: int = 0
    check: str = ""
    # timer
    interval: str = ""
    cron: str = ""
    # file
    watch: str = ""
    pattern: str = ""
    settle: int = 0
    # retry policy
    retry: str = ""
    retry_max: int = 0
    retry_delay: int = 0

    def schedule(self) -> str:
        """Human-readable schedule: cron or interval for timers, watch path for file triggers."""
        if self.type == "timer":
            return self.cron or self.interval
        if self.type == "file":
            if self.pattern:
                return f"{self.watch} ({self.pattern})"
            return self.watch
        return ""


class Status(BaseModel):
    """Output of ``workmode status --json`` plus counts derived from sessions."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    active: bool = False
    watcher: bool = False
    timers: int = 0
    triggers: int = 0
    running: int = Field(default=0, exclude=True)
    today: int = Field(default=0, exclude=True)

    def with_session_counts(self, sessions: Iterable[Session], now: datetime | None = None) -> Status:
        """Return a copy whose running/today counts are computed from scratch."""
        local_now = (now or datetime.now()).astimezone()
        midnight = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        running = 0
        today = 0
        for session in sessions:
            if session.is_running:
                running += 1
            started = session.started_at()
            if started is not None and started > midnight:
                today += 1
        return self.model_copy(update={"running": running, "today": today})


# --- Stream events ---


class ContentBlock(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = ""
    text: str = ""
    name: str = ""
    id: str = ""


class MessageBody(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    content: list[ContentBlock] = Field(default_factory=list)


class AssistantEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["assistant"]
    message: MessageBody | None = None

    @property
    def blocks(self) -> list[ContentBlock]:
        return self.message.content if self.message is not None else []


class ToolUseEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["tool_use"]
    id: str = ""
    name: str = ""
    input: Any = None


class ResultEvent(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    type: Literal["result"]
    result: str = ""


class OtherEvent(BaseModel):
    """Any event kind the console does not render (system, user, ...)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str = ""


def _event_kind(value: Any) -> str:
    kind = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
    if kind in ("assistant", "tool_use", "result"):
        return kind
    return "other"


StreamEvent = Annotated[
    Union[
        Annotated[AssistantEvent, Tag("assistant")],
        Annotated[ToolUseEvent, Tag("tool_use")],
        Annotated[ResultEvent, Tag("result")],
        Annotated[OtherEvent, Tag("other")],
    ],
    Discriminator(_event_kind),
]

stream_event_adapter: TypeAdapter[StreamEvent] = TypeAdapter(StreamEvent)
