"""Image utility helpers shared by the map builders."""
from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np
from PIL import Image

from .errors import SurfaceAllocationFailure
from .utils_color import luma

LOGGER = logging.getLogger("texture_pipeline.image")

BILINEAR = Image.Resampling.BILINEAR


def allocate_surface(width: int, height: int, channels: int = 4, fill: float | Sequence[float] = 0.0) -> np.ndarray:
    """Allocate a float surface of ``(height, width, channels)`` filled with *fill*.

    Raises :class:`SurfaceAllocationFailure` when the buffer cannot be created.
    """

    shape: Tuple[int, ...] = (height, width) if channels == 1 else (height, width, channels)
    try:
        if width <= 0 or height <= 0:
            raise ValueError(f"non-positive surface size {width}x{height}")
        surface = np.empty(shape, dtype=np.float32)
        surface[...] = fill
    except (MemoryError, ValueError) as exc:
        raise SurfaceAllocationFailure(f"Cannot allocate {width}x{height}x{channels} surface: {exc}") from exc
    return surface


def to_float_rgba(image: Image.Image) -> np.ndarray:
    """Return an RGBA float array with color in [0, 255] and alpha in [0, 1]."""

    array = np.asarray(image.convert("RGBA"), dtype=np.float32)
    array[..., 3] /= 255.0
    return array


def from_float_rgba(array: np.ndarray) -> Image.Image:
    """Inverse of :func:`to_float_rgba`, rounding to the nearest 8-bit value."""

    out = np.empty(array.shape, dtype=np.uint8)
    out[..., :3] = np.clip(np.rint(array[..., :3]), 0, 255)
    out[..., 3] = np.clip(np.rint(array[..., 3] * 255.0), 0, 255)
    return Image.fromarray(out, mode="RGBA")


def from_float_gray(array: np.ndarray) -> Image.Image:
    channel = np.clip(np.rint(array), 0, 255).astype(np.uint8)
    return Image.fromarray(channel, mode="L")


def stencil_weight(tile: Image.Image) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(luminance, alpha)`` of a stencil tile, both normalized to [0, 1]."""

    array = np.asarray(tile.convert("RGBA"), dtype=np.float32) / 255.0
    return luma(array[..., :3]), array[..., 3]


def composite_over_white(tile: Image.Image) -> np.ndarray:
    """Luminance in [0, 1] of *tile* drawn onto an opaque white canvas."""

    lum, alpha = stencil_weight(tile)
    return lum * alpha + (1.0 - alpha)


def fill_over(surface: np.ndarray, rect: Tuple[int, int, int, int], color: Sequence[float], alpha: float) -> None:
    """Source-over a solid *color* at *alpha* into ``rect`` of an RGBA float surface."""

    x0, y0, x1, y1 = rect
    region = surface[y0:y1, x0:x1]
    if region.size == 0:
        return
    dst_alpha = region[..., 3:4]
    out_alpha = alpha + dst_alpha * (1.0 - alpha)
    src = np.asarray(color, dtype=np.float32)[:3]
    premult = src * alpha + region[..., :3] * dst_alpha * (1.0 - alpha)
    region[..., :3] = np.where(out_alpha > 0, premult / np.maximum(out_alpha, 1e-8), 0.0)
    region[..., 3:4] = out_alpha


def fill_gray_over(surface: np.ndarray, rect: Tuple[int, int, int, int], value: float, alpha: float) -> None:
    """Blend a gray *value* at *alpha* into ``rect`` of an opaque single-channel surface."""

    x0, y0, x1, y1 = rect
    region = surface[y0:y1, x0:x1]
    region[...] = value * alpha + region * (1.0 - alpha)


__all__ = [
    "BILINEAR",
    "allocate_surface",
    "composite_over_white",
    "fill_gray_over",
    "fill_over",
    "from_float_gray",
    "from_float_rgba",
    "stencil_weight",
    "to_float_rgba",
]
