"""Help overlay."""

from __future__ import annotations

from rich.console import Group
from rich.style import Style
from rich.text import Text

from workmode_tui.cli.tui.state import AppState
from workmode_tui.constants import APP_NAME

HELP_TEXT = """
  Navigation
    ↑/↓, j/k        Navigate list
    tab             Switch sessions ↔ triggers
    enter           Open session log / run trigger
    esc             Back to previous view
    q, ctrl+c       Quit

  Session Actions
    ctrl+r          Resume session in Claude
    ctrl+s          Stop running session
    ctrl+k          Kill running session
    ctrl+x          Run the selected trigger

  Command Line
    /               Open command line
    enter           Execute command
    tab             Tab completion
    esc             Close command line

  Commands
    on / off        Enable/disable workmode
    status          Show status
    trigger run X   Run trigger X
    session logs X  View session X logs
    <anything>      Ask Claude (natural language)

  Other
    ctrl+l          Refresh all data
    ctrl+t          Reload theme
    ?               Toggle this help
"""


def render_help(state: AppState) -> Group:
    theme = state.theme
    title = Text(f" {APP_NAME} help ", Style(color=theme.bright_white, bold=True))
    return Group(title, Text(HELP_TEXT), Text("  Press any key to close", Style(color=theme.dim)))
