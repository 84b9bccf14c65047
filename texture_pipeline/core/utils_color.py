"""Color utility helpers used across the pipeline."""
from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np
from PIL import ImageColor

ColorTuple = Tuple[int, int, int]

# Rec. 601 weights, used for saturation and stencil luminance.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def clamp(value: float, min_value: float, max_value: float) -> float:
    """Clamp *value* between *min_value* and *max_value*."""

    return max(min_value, min(max_value, value))


def parse_color(value: str | Sequence[int]) -> ColorTuple:
    """Parse arbitrary color input into an RGB tuple.

    Raises :class:`ValueError` for strings Pillow cannot interpret.
    """

    if isinstance(value, str):
        rgb = ImageColor.getrgb(value)
        return rgb[:3]  # type: ignore[return-value]
    if len(value) < 3:
        raise ValueError(f"Color needs three channels: {value!r}")
    return tuple(int(clamp(int(c), 0, 255)) for c in value[:3])  # type: ignore[return-value]


def is_white(value: str | Sequence[int]) -> bool:
    return parse_color(value) == (255, 255, 255)


def luma(rgb: np.ndarray) -> np.ndarray:
    """Weighted luma of an ``(..., 3)`` array, in the array's own scale."""

    return rgb[..., 0] * LUMA_WEIGHTS[0] + rgb[..., 1] * LUMA_WEIGHTS[1] + rgb[..., 2] * LUMA_WEIGHTS[2]


def rgb_to_hsv(rgb: np.ndarray) -> np.ndarray:
    """Convert normalized ``(..., 3)`` RGB values to HSV, all channels in [0, 1]."""

    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]
    maxc = rgb.max(axis=-1)
    minc = rgb.min(axis=-1)
    delta = maxc - minc
    mask = delta > 0

    denom = np.where(mask, delta, 1.0)
    hr = np.mod((g - b) / denom, 6.0)
    hg = (b - r) / denom + 2.0
    hb = (r - g) / denom + 4.0

    hue = np.zeros_like(maxc)
    hue = np.where(mask & (maxc == b), hb, hue)
    hue = np.where(mask & (maxc == g), hg, hue)
    hue = np.where(mask & (maxc == r), hr, hue)
    hue = np.mod(hue / 6.0, 1.0)

    sat = np.where(maxc > 0, delta / np.where(maxc > 0, maxc, 1.0), 0.0)
    return np.stack([hue, sat, maxc], axis=-1)


def hsv_to_rgb(hsv: np.ndarray) -> np.ndarray:
    """Inverse of :func:`rgb_to_hsv`."""

    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]
    c = v * s
    x = c * (1.0 - np.abs(np.mod(h * 6.0, 2.0) - 1.0))
    m = v - c
    sector = np.clip(np.floor(h * 6.0), 0, 5).astype(np.int8)
    zeros = np.zeros_like(c)

    r = np.choose(sector, [c, x, zeros, zeros, x, c])
    g = np.choose(sector, [x, c, c, x, zeros, zeros])
    b = np.choose(sector, [zeros, zeros, x, c, c, x])
    return np.stack([r + m, g + m, b + m], axis=-1)


__all__ = ["ColorTuple", "LUMA_WEIGHTS", "clamp", "hsv_to_rgb", "is_white", "luma", "parse_color", "rgb_to_hsv"]
