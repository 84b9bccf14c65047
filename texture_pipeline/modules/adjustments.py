"""Brightness, contrast, hue, saturation and invert filter for material rasters."""
from __future__ import annotations

import logging

import numpy as np
from PIL import Image

from ..core.config import Adjustments
from ..core.utils_color import clamp, hsv_to_rgb, luma, rgb_to_hsv

LOGGER = logging.getLogger("texture_pipeline.adjustments")

CONTRAST_RANGE = (0.0, 2.0)
_CONTRAST_POLE = 259.0


def contrast_factor(contrast: float) -> float:
    """Return the per-channel contrast gain for a user contrast value.

    The user value in [0, 2] (identity 1) is mapped to the classic offset
    ``(contrast - 1) * 255`` in [-255, 255]. The input is clamped, so the
    offset never reaches the pole at 259 and the denominator stays >= 4.
    """

    value = clamp(float(contrast), *CONTRAST_RANGE)
    if value != contrast:
        LOGGER.debug("Contrast %s clamped to %s", contrast, value)
    offset = (value - 1.0) * 255.0
    return (_CONTRAST_POLE * (offset + 255.0)) / (255.0 * (_CONTRAST_POLE - offset))


def _clip(rgb: np.ndarray) -> np.ndarray:
    return np.clip(rgb, 0.0, 255.0)


def adjust(
    image: Image.Image,
    brightness: float = 1.0,
    contrast: float = 1.0,
    hue: float = 0.0,
    saturation: float = 1.0,
    invert: bool = False,
) -> Image.Image:
    """Apply the five adjustments in their fixed order and return a new RGBA image.

    Alpha is preserved. Each step clamps to [0, 255] before the next one, and
    the result is rounded to 8 bits once at the end.
    """

    rgba = np.asarray(image.convert("RGBA"))
    rgb = rgba[..., :3].astype(np.float64)

    rgb = _clip(rgb * brightness)

    rgb = _clip(contrast_factor(contrast) * (rgb - 128.0) + 128.0)

    shift = (hue % 360.0) / 360.0
    if shift:
        hsv = rgb_to_hsv(rgb / 255.0)
        hsv[..., 0] = np.mod(hsv[..., 0] + shift, 1.0)
        rgb = _clip(hsv_to_rgb(hsv) * 255.0)

    gray = luma(rgb)[..., None]
    rgb = _clip(gray + (rgb - gray) * saturation)

    if invert:
        rgb = 255.0 - rgb

    out = rgba.copy()
    out[..., :3] = np.rint(rgb).astype(np.uint8)
    return Image.fromarray(out, mode="RGBA")


def apply_adjustments(image: Image.Image, adjustments: Adjustments) -> Image.Image:
    if adjustments.is_identity:
        return image.convert("RGBA")
    return adjust(
        image,
        brightness=adjustments.brightness,
        contrast=adjustments.contrast,
        hue=adjustments.hue,
        saturation=adjustments.saturation,
        invert=adjustments.invert,
    )


__all__ = ["CONTRAST_RANGE", "adjust", "apply_adjustments", "contrast_factor"]
