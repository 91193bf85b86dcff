"""Completion candidates for the command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from workmode_tui.cli.tui.router import COMMAND_TREE, Subcommand


@dataclass(frozen=True)
class Candidate:
    value: str
    description: str = ""


class Completer:
    """Completes ``command [subcommand [argument]]`` by exact, case-sensitive prefix.

    Top-level commands are offered alphabetically, subcommands in declaration
    order, and arguments in the order the dynamic lists were supplied.
    """

    def __init__(self) -> None:
        self._trigger_names: list[str] = []
        self._session_ids: list[str] = []

    def set_trigger_names(self, names: Iterable[str]) -> None:
        self._trigger_names = list(names)

    def set_session_ids(self, ids: Iterable[str]) -> None:
        self._session_ids = list(ids)

    def complete(self, text: str) -> list[Candidate]:
        parts = text.split()
        trailing = text.endswith(" ")

        if not parts or (len(parts) == 1 and not trailing):
            prefix = parts[0] if parts else ""
            return [
                Candidate(name, spec.description)
                for name, spec in sorted(COMMAND_TREE.items())
                if name.startswith(prefix)
            ]

        spec = COMMAND_TREE.get(parts[0])
        if spec is None:
            return []

        if len(parts) == 1:
            return self._subcommands(spec.subcommands, "")
        if len(parts) == 2 and not trailing:
            return self._subcommands(spec.subcommands, parts[1])

        if (len(parts) == 2 and trailing) or (len(parts) == 3 and not trailing):
            sub = next((s for s in spec.subcommands if s.name == parts[1]), None)
            if sub is None or sub.argument is None:
                return []
            prefix = parts[2] if len(parts) == 3 else ""
            items = self._trigger_names if sub.argument == "trigger" else self._session_ids
            return [Candidate(item, sub.argument) for item in items if item.startswith(prefix)]

        return []

    @staticmethod
    def _subcommands(subs: tuple[Subcommand, ...], prefix: str) -> list[Candidate]:
        return [Candidate(s.name, s.description) for s in subs if s.name.startswith(prefix)]


def accept_candidate(text: str, value: str) -> str:
    """Insert ``value`` into the input, replacing a partial last word."""
    parts = text.split()
    if text.endswith(" ") or not parts:
        return f"{text}{value} "
    parts[-1] = value
    return " ".join(parts) + " "
