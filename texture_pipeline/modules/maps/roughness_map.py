"""Build roughness maps; darker pixels are rougher."""
from __future__ import annotations

from typing import Optional

import numpy as np
from PIL import Image

from ...core.config import JointSettings, PatternSettings
from ...core.utils_image import allocate_surface, fill_gray_over, from_float_gray, stencil_weight
from ..noise import add_uniform_noise, ensure_rng
from ..stencil import StencilImage
from ..tile_grid import TileGrid, joint_bands
from ._stencil_tiles import for_each_tile

BASE_VALUE = 128.0
JOINT_VALUE = 64.0
JOINT_ALPHA = 0.8
STENCIL_ROUGHNESS_BAND = (0.3, 0.7)


def generate(
    stencil: StencilImage,
    pattern_settings: PatternSettings,
    joint_settings: JointSettings,
    output_w: int,
    output_h: int,
    *,
    stencil_coverage: bool = True,
    noise: float = 0.1,
    rng: Optional[np.random.Generator] = None,
) -> Image.Image:
    """Create a single-channel roughness map.

    A mid-gray base is darkened under the joint bands, optionally pulled
    toward the 30-70% roughness band where the stencil is drawn, and finished
    with ``±noise / 2`` uniform noise.
    """

    grid = TileGrid.from_settings(pattern_settings, output_w, output_h)
    surface = allocate_surface(output_w, output_h, channels=1, fill=BASE_VALUE)

    for rect in joint_bands(grid, pattern_settings, joint_settings):
        fill_gray_over(surface, rect, JOINT_VALUE, JOINT_ALPHA)

    if stencil_coverage:
        low, high = STENCIL_ROUGHNESS_BAND

        def draw(rect, tile):
            x0, y0, x1, y1 = rect
            lum, alpha = stencil_weight(tile)
            weight = alpha * (1.0 - lum)
            target = (1.0 - (low + (high - low) * weight)) * 255.0
            region = surface[y0:y1, x0:x1]
            region[...] = region * (1.0 - weight) + target * weight

        for_each_tile(stencil, grid, draw, label="roughness")

    add_uniform_noise(surface, noise, ensure_rng(rng))
    return from_float_gray(surface)


__all__ = ["BASE_VALUE", "JOINT_VALUE", "generate"]
