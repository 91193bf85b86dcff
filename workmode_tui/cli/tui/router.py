"""Classify command-line input as a workmode CLI command or a natural-language request."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Subcommand:
    name: str
    description: str
    # Third slot completes from a dynamic list ("trigger" or "session")
    argument: str | None = None


@dataclass(frozen=True)
class CommandSpec:
    description: str
    subcommands: tuple[Subcommand, ...] = ()


COMMAND_TREE: dict[str, CommandSpec] = {
    "on": CommandSpec("Enable workmode triggers"),
    "off": CommandSpec("Disable workmode triggers"),
    "status": CommandSpec("Show workmode status"),
    "trigger": CommandSpec(
        "Manage triggers",
        (
            Subcommand("list", "List all triggers"),
            Subcommand("show", "Show trigger details", "trigger"),
            Subcommand("run", "Run a trigger now", "trigger"),
            Subcommand("enable", "Enable a trigger", "trigger"),
            Subcommand("disable", "Disable a trigger", "trigger"),
        ),
    ),
    "session": CommandSpec(
        "Manage sessions",
        (
            Subcommand("list", "List all sessions"),
            Subcommand("logs", "View session log", "session"),
            Subcommand("tail", "Tail session log", "session"),
            Subcommand("resume", "Resume session in Claude", "session"),
            Subcommand("stop", "Stop running session", "session"),
            Subcommand("kill", "Kill running session", "session"),
        ),
    ),
    "config": CommandSpec(
        "Manage configuration",
        (
            Subcommand("show", "Show current config"),
            Subcommand("edit", "Edit config file"),
            Subcommand("validate", "Validate config"),
            Subcommand("apply", "Apply config changes"),
            Subcommand("path", "Show config file path"),
        ),
    ),
    "help": CommandSpec("Show help"),
    "version": CommandSpec("Show version"),
}


class RouteKind(str, Enum):
    STRUCTURED = "structured"
    NATURAL_LANGUAGE = "natural_language"


@dataclass(frozen=True)
class Route:
    kind: RouteKind
    tokens: list[str] = field(default_factory=list)
    # Untrimmed input; the payload for natural-language requests
    raw: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.tokens


def route(text: str) -> Route:
    """Route input by its first whitespace-separated token.

    Blank input routes to natural language with an empty payload, which
    callers treat as a no-op.
    """
    tokens = text.split()
    if not tokens:
        return Route(kind=RouteKind.NATURAL_LANGUAGE, tokens=[], raw="")
    if tokens[0] in COMMAND_TREE:
        return Route(kind=RouteKind.STRUCTURED, tokens=tokens, raw=text)
    return Route(kind=RouteKind.NATURAL_LANGUAGE, tokens=tokens, raw=text)
