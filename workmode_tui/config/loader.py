import logging
import tomllib
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from workmode_tui.config.schema import WorkmodeConfig
from workmode_tui.paths import default_config_path

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """The config file exists but cannot be read or validated."""


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))
    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_config(path: Optional[Path] = None) -> WorkmodeConfig:
    """Load and validate the workmode TOML config.

    Args:
        path: Config file; defaults to ``$WORKMODE_CONFIG`` or the XDG location.

    Returns:
        The validated config. A missing file yields the defaults.

    Raises:
        ConfigError: The file is unreadable, not TOML, or fails validation.
    """
    if path is None:
        path = default_config_path()
    if not path.exists():
        logger.debug("Config file %s not found, using defaults", path)
        return WorkmodeConfig()

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"read config {path}: {e}") from e

    try:
        model = WorkmodeConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(f"invalid config {path}: {e}") from e
    _warn_unknown_keys(model, "root", path)
    return model
