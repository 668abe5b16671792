import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

RGBA = Tuple[float, float, float, float]

# Returned for a hue sextant outside 0..6, which floor() of a fractional part never yields.
SENTINEL_COLOR = (1.0, 0.5, 0.5, 1.0)

DEFAULT_FIXED_COLOR = (0.0, 0.0, 1.0, 1.0)
DEFAULT_COLOR_FACTOR = 0.8


# ---------------------- HSV Height Gradient ----------------------
def height_color(h):
    """
    Map a height value to an RGBA color by sweeping the hue (saturation = value = 1).

    Only the fractional part of h is used, so the gradient repeats with period 1.
    This is not the textbook HSV conversion: inside even sextants the blend factor
    is inverted, which yields a saw-tooth ramp between the primary and secondary
    hues. Do not swap in a textbook conversion; map viewers expect this gradient.
    """
    s = 1.0
    v = 1.0

    h -= math.floor(h)
    h *= 6
    i = math.floor(h)
    f = h - i
    if not (i & 1):
        f = 1 - f  # if i is even
    m = v * (1 - s)
    n = v * (1 - s * f)

    if i in (0, 6):
        return (v, n, m, 1.0)
    elif i == 1:
        return (n, v, m, 1.0)
    elif i == 2:
        return (m, v, n, 1.0)
    elif i == 3:
        return (m, n, v, 1.0)
    elif i == 4:
        return (n, m, v, 1.0)
    elif i == 5:
        return (v, m, n, 1.0)
    return SENTINEL_COLOR


def height_colors(h):
    """
    Vectorized height_color.
    h: (N,) array of heights
    Returns: (N, 4) float array of RGBA colors, row k == height_color(h[k])
    """
    h = np.asarray(h, dtype=float)
    h = (h - np.floor(h)) * 6
    i = np.floor(h).astype(int)
    f = h - i
    f = np.where(i % 2 == 0, 1 - f, f)
    v = np.ones_like(f)
    m = np.zeros_like(f)
    n = 1 - f

    sextants = [(i == 0) | (i == 6), i == 1, i == 2, i == 3, i == 4, i == 5]
    r = np.select(sextants, [v, n, m, m, n, v], default=SENTINEL_COLOR[0])
    g = np.select(sextants, [n, v, v, n, m, m], default=SENTINEL_COLOR[1])
    b = np.select(sextants, [m, m, n, v, v, n], default=SENTINEL_COLOR[2])
    return np.column_stack([r, g, b, np.ones_like(f)])


def normalize_heights(z, z_min, z_max):
    """
    Scale heights into [0, 1] relative to the map's vertical extent.
    A flat map (z_min == z_max) has no extent to scale by; every height maps to 0.5.
    """
    z = np.asarray(z, dtype=float)
    if z_max <= z_min:
        return np.full(z.shape, 0.5)
    return np.clip((z - z_min) / (z_max - z_min), 0.0, 1.0)


# ---------------------- Color Configuration ----------------------
def _check_rgba(rgba):
    rgba = tuple(float(c) for c in rgba)
    if len(rgba) != 4:
        raise ValueError(f"expected 4 color channels (r, g, b, a), got {len(rgba)}")
    if not all(0.0 <= c <= 1.0 for c in rgba):
        raise ValueError(f"color channels must lie in [0, 1], got {rgba}")
    return rgba


@dataclass(frozen=True)
class ColorConfig:
    """How occupied cells are colored: one fixed color, or a gradient over their height."""
    use_height_map: bool = True
    color_factor: float = DEFAULT_COLOR_FACTOR
    fixed_color: RGBA = DEFAULT_FIXED_COLOR

    def __post_init__(self):
        object.__setattr__(self, "fixed_color", _check_rgba(self.fixed_color))
        object.__setattr__(self, "color_factor", float(self.color_factor))

    @classmethod
    def fixed(cls, rgba=DEFAULT_FIXED_COLOR):
        return cls(use_height_map=False, fixed_color=rgba)

    @classmethod
    def height_mapped(cls, color_factor=DEFAULT_COLOR_FACTOR, rgba=DEFAULT_FIXED_COLOR):
        return cls(use_height_map=True, color_factor=color_factor, fixed_color=rgba)

    def colorize(self, z, z_min, z_max):
        """
        Per-point colors for heights z.
        Returns an (N, 4) array, or an empty (0, 4) array when the fixed color is used.
        """
        if not self.use_height_map:
            return np.empty((0, 4))
        return height_colors(normalize_heights(z, z_min, z_max) * self.color_factor)
