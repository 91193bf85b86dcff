"""Workmode client against a scripted stand-in for the ``workmode`` CLI."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

from workmode_tui.core.client import ClientError, WorkmodeClient

FAKE_CLI = textwrap.dedent(
    """
    import json, os, sys

    args = sys.argv[1:]
    if os.environ.get("FAKE_WORKMODE_BROKEN"):
        print("{not json")
    elif args == ["status", "--json"]:
        print(json.dumps({"active": True, "watcher": True, "timers": 2, "triggers": 3}))
    elif args == ["trigger", "list", "--json"]:
        print(json.dumps({"name": "daily", "type": "timer", "interval": "24h"}))
        print("junk")
        print(json.dumps({"name": "inbox", "type": "file", "watch": "~/inbox"}))
    elif args[:2] == ["trigger", "run"] and args[2] == "missing":
        sys.stderr.write("no such trigger: missing\\n")
        sys.exit(2)
    elif args[:1] in (["trigger"], ["session"], ["on"], ["off"]):
        print("ok " + " ".join(args))
    elif args == ["env"]:
        print(os.environ.get("CLAUDECODE", "unset"))
    else:
        print("usage: workmode COMMAND")
        sys.exit(1)
    """
)


@pytest.fixture
def cli(tmp_path: Path) -> list[str]:
    script = tmp_path / "workmode_fake.py"
    script.write_text(FAKE_CLI, encoding="utf-8")
    return [sys.executable, str(script)]


@pytest.fixture
def client(cli: list[str], tmp_path: Path) -> WorkmodeClient:
    return WorkmodeClient(cli_command=cli, config_path=tmp_path / "missing.toml", state_dir=str(tmp_path))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_status(client: WorkmodeClient) -> None:
    status = await client.status()

    assert status.active is True
    assert (status.timers, status.triggers) == (2, 3)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_trigger_list_skips_bad_lines(client: WorkmodeClient) -> None:
    triggers = await client.triggers()

    assert [t.name for t in triggers] == ["daily", "inbox"]
    assert triggers[0].schedule() == "24h"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_actions_return_stdout(client: WorkmodeClient) -> None:
    assert await client.run_command("trigger", "run", "daily") == "ok trigger run daily\n"
    assert await client.run_command("session", "stop", "aa") == "ok session stop aa\n"
    assert await client.run_command("on") == "ok on\n"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_failure_message_carries_stderr(client: WorkmodeClient, cli: list[str]) -> None:
    with pytest.raises(ClientError) as exc_info:
        await client.run_command("trigger", "run", "missing")

    label = " ".join([*cli, "trigger", "run", "missing"])
    assert str(exc_info.value) == f"{label}: exit status 2: no such trigger: missing"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_failure_falls_back_to_stdout(client: WorkmodeClient) -> None:
    with pytest.raises(ClientError, match="exit status 1: usage: workmode COMMAND$"):
        await client.run_command("bogus")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_unparseable_status_is_client_error(client: WorkmodeClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAKE_WORKMODE_BROKEN", "1")

    with pytest.raises(ClientError, match="parse status"):
        await client.status()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_missing_cli_is_client_error(tmp_path: Path) -> None:
    client = WorkmodeClient(
        cli_command=["/nonexistent/workmode"], config_path=tmp_path / "missing.toml", state_dir=str(tmp_path)
    )

    with pytest.raises(ClientError, match="/nonexistent/workmode status --json"):
        await client.status()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_nested_marker_removed(client: WorkmodeClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLAUDECODE", "1")

    assert await client.run_command("env") == "unset\n"
