"""Console color palette.

Colors come from the Omarchy desktop theme when present, over a built-in
default. A theme is an immutable value; reloading builds a new one.
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from pathlib import Path

from rich.color import Color, ColorParseError

logger = logging.getLogger(__name__)

OMARCHY_COLORS_PATH = Path("~/.config/omarchy/current/theme/colors.toml")

# colors.toml key -> Theme field
_COLOR_KEYS = {
    "foreground": "foreground",
    "background": "background",
    "accent": "accent",
    "selection_foreground": "selection_foreground",
    "selection_background": "selection_background",
    "color0": "dim",
    "color1": "red",
    "color2": "green",
    "color3": "yellow",
    "color4": "blue",
    "color8": "border",
    "color15": "bright_white",
}


@dataclass(frozen=True)
class Theme:
    foreground: str = "#e5e7eb"
    background: str = "#1a1b26"
    accent: str = "#8b5cf6"
    selection_foreground: str = "#e5e7eb"
    selection_background: str = "#8b5cf6"
    dim: str = "#6b7280"
    red: str = "#ef4444"
    green: str = "#22c55e"
    yellow: str = "#eab308"
    blue: str = "#3b82f6"
    border: str = "#374151"
    bright_white: str = "#f9fafb"

    def status_color(self, status: str) -> str:
        if status == "completed":
            return self.green
        if status == "running":
            return self.blue
        if status == "error":
            return self.red
        if status == "stuck":
            return self.yellow
        return self.dim


DEFAULT_THEME = Theme()


def load_theme(path: Path | None = None) -> Theme:
    """Read the desktop palette, falling back to the defaults on any problem."""
    colors_path = (path or OMARCHY_COLORS_PATH).expanduser()
    try:
        with open(colors_path, "rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        return DEFAULT_THEME
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring theme %s: %s", colors_path, e)
        return DEFAULT_THEME

    overrides: dict[str, str] = {}
    for key, field_name in _COLOR_KEYS.items():
        value = raw.get(key)
        if not isinstance(value, str) or not value:
            continue
        try:
            Color.parse(value)
        except ColorParseError:
            logger.warning("Ignoring %s = %r in %s: not a color", key, value, colors_path)
            continue
        overrides[field_name] = value
    return replace(DEFAULT_THEME, **overrides)
