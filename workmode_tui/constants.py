"""Shared constants for the workmode console."""

APP_NAME = "workmode"

# External binaries
CLI_BINARY = "workmode"
ASSISTANT_BINARY = "claude"
ASSISTANT_SKILL = "workmode"

# Unset in every child environment so the assistant does not detect a nested run
NESTED_SESSION_ENV = "CLAUDECODE"

CONFIG_ENV = "WORKMODE_CONFIG"
LOG_LEVEL_ENV = "WORKMODE_TUI_LOG_LEVEL"
LOG_FILE_ENV = "WORKMODE_TUI_LOG_FILE"

HISTORY_FILENAME = "history.jsonl"
LOGS_DIRNAME = "logs"
LOG_SUFFIX = ".log"

STATUS_POLL_INTERVAL_S = 3.0

# Preview summaries in the sessions list
SUMMARY_MAX_LEN = 60

# Completion menu height
MAX_COMPLETIONS_SHOWN = 10

ELLIPSIS = "…"
