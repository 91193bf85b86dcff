"""Command-line entry point: ``workmode-tui``."""

from __future__ import annotations

import argparse
import logging
import shlex
import sys
from pathlib import Path
from typing import Sequence

from workmode_tui import __version__
from workmode_tui.constants import CLI_BINARY
from workmode_tui.logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workmode-tui",
        description="Interactive console for the workmode automation agent.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="log level for the console's log file (default: $WORKMODE_TUI_LOG_LEVEL or INFO)",
    )
    parser.add_argument("--config", type=Path, metavar="PATH", help="workmode config file")
    parser.add_argument(
        "--cli",
        default=CLI_BINARY,
        metavar="COMMAND",
        help=f"workmode CLI command, split like a shell would (default: {CLI_BINARY})",
    )
    return parser


def _main_impl(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log_file = setup_logging(args.log_level)

    cli_command = shlex.split(args.cli)
    if not cli_command:
        sys.stderr.write("workmode-tui error: --cli must not be empty\n")
        return 2

    # Imported late so --help and --version do not pay for Textual
    from workmode_tui.cli.tui.app import WorkmodeApp
    from workmode_tui.core.client import WorkmodeClient

    client = WorkmodeClient(cli_command=cli_command, config_path=args.config)
    logger.info("Starting console (state dir %s, log %s)", client.state_dir, log_file)
    WorkmodeApp(client).run()
    logger.info("Console exited")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    try:
        sys.exit(_main_impl(argv))
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
