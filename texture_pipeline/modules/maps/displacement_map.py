"""Build height maps where stencil geometry is recessed below raised tiles."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from ...core.config import JointSettings, PatternSettings
from ...core.utils_image import allocate_surface, from_float_gray, stencil_weight
from ..noise import add_uniform_noise, ensure_rng
from ..stencil import StencilImage
from ..tile_grid import TileGrid, joint_bands
from ._stencil_tiles import for_each_tile

LOGGER = logging.getLogger("texture_pipeline.maps.displacement")

RAISED = 255.0
# Stencil luminance at or above this counts as background.
NEAR_WHITE = 0.95


def generate(
    stencil: StencilImage,
    pattern_settings: PatternSettings,
    joint_settings: JointSettings,
    output_w: int,
    output_h: int,
    *,
    max_recess: float = 0.75,
    noise: float = 0.05,
    joint_grid: bool = False,
    rng: Optional[np.random.Generator] = None,
) -> Image.Image:
    """Create a single-channel height map (0 deepest, 255 most raised).

    Every tile starts fully raised. Drawn stencil pixels are recessed by
    ``(1 - luminance) * alpha * max_recess`` of the full range, then uniform
    noise of ``±noise / 2`` is added. With *joint_grid* the joint bands are
    first carved to full depth as a flat grid.
    """

    grid = TileGrid.from_settings(pattern_settings, output_w, output_h)
    height = allocate_surface(output_w, output_h, channels=1, fill=RAISED)

    if joint_grid:
        for x0, y0, x1, y1 in joint_bands(grid, pattern_settings, joint_settings):
            height[y0:y1, x0:x1] = 0.0

    depth = float(np.clip(max_recess, 0.0, 1.0)) * RAISED

    def draw(rect, tile):
        x0, y0, x1, y1 = rect
        lum, alpha = stencil_weight(tile)
        weight = np.where(lum < NEAR_WHITE, (1.0 - lum) * alpha, 0.0)
        region = height[y0:y1, x0:x1]
        np.maximum(region - weight * depth, 0.0, out=region)

    for_each_tile(stencil, grid, draw, label="displacement")
    add_uniform_noise(height, noise, ensure_rng(rng))
    return from_float_gray(height)


__all__ = ["NEAR_WHITE", "generate"]
