"""Configuration for the octomap server, read from environment variables."""

import os
from dataclasses import dataclass, field, replace
from typing import Optional

from color_map import ColorConfig

# Map settings
FRAME_ID = os.getenv("OCTOMAP_FRAME_ID", "/map")
HEIGHT_MAP = os.getenv("OCTOMAP_HEIGHT_MAP", "true")
COLOR_FACTOR = os.getenv("OCTOMAP_COLOR_FACTOR", "0.8")
COLOR = os.getenv("OCTOMAP_COLOR", "0,0,1,1")

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")


def parse_color(text):
    """Parse "r,g,b,a" into a 4-tuple of floats."""
    try:
        rgba = tuple(float(c) for c in text.split(","))
    except ValueError:
        raise ValueError(f"invalid color {text!r}, expected r,g,b,a") from None
    if len(rgba) != 4:
        raise ValueError(f"invalid color {text!r}, expected r,g,b,a")
    return rgba


TRUE_STRINGS = ("true", "1", "yes", "on")
FALSE_STRINGS = ("false", "0", "no", "off")


def parse_bool(name, text):
    value = text.strip().lower()
    if value in TRUE_STRINGS:
        return True
    if value in FALSE_STRINGS:
        return False
    raise ValueError(f"invalid {name} {text!r}, expected true or false")


def parse_float(name, text):
    try:
        return float(text)
    except ValueError:
        raise ValueError(f"invalid {name} {text!r}, expected a number") from None


@dataclass(frozen=True)
class ServerConfig:
    """Settings frozen into a snapshot when it is built."""
    frame_id: str = "/map"
    color: ColorConfig = field(default_factory=ColorConfig)

    @classmethod
    def from_env(cls):
        return cls(
            frame_id=FRAME_ID,
            color=ColorConfig(
                use_height_map=parse_bool("height map flag", HEIGHT_MAP),
                color_factor=parse_float("color factor", COLOR_FACTOR),
                fixed_color=parse_color(COLOR),
            ),
        )

    def with_overrides(
        self,
        frame_id: Optional[str] = None,
        use_height_map: Optional[bool] = None,
        color_factor: Optional[float] = None,
        fixed_color: Optional[tuple] = None,
    ) -> "ServerConfig":
        """Copy of this config with every argument that is not None replaced."""
        color = self.color
        color_changes = {
            "use_height_map": use_height_map,
            "color_factor": color_factor,
            "fixed_color": fixed_color,
        }
        color_changes = {k: v for k, v in color_changes.items() if v is not None}
        if color_changes:
            color = replace(color, **color_changes)
        return replace(self, frame_id=frame_id if frame_id is not None else self.frame_id, color=color)


__all__ = [
    "FRAME_ID",
    "HEIGHT_MAP",
    "COLOR_FACTOR",
    "COLOR",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "ServerConfig",
    "parse_bool",
    "parse_color",
    "parse_float",
]
