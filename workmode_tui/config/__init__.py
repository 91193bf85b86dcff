"""Configuration loading for the workmode console."""

from workmode_tui.config.loader import ConfigError, load_config
from workmode_tui.config.schema import GeneralConfig, WorkmodeConfig

__all__ = ["ConfigError", "GeneralConfig", "WorkmodeConfig", "load_config"]
