"""Compose the base color map from material, tint, stencil mask and joints."""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from ...core.config import JointSettings, MaterialSettings, PatternSettings
from ...core.utils_color import is_white, parse_color
from ...core.utils_image import (
    BILINEAR,
    allocate_surface,
    composite_over_white,
    fill_over,
    from_float_rgba,
    to_float_rgba,
)
from ..stencil import StencilImage
from ..tile_grid import TileGrid, joint_bands
from ._stencil_tiles import for_each_tile

LOGGER = logging.getLogger("texture_pipeline.maps.color")

MATERIAL_RESAMPLE = BILINEAR
BACKGROUND = "#f0f0f0"
PLACEHOLDER_BACKGROUND = "#f5f5f5"
PLACEHOLDER_STENCIL = "#333333"
PLACEHOLDER_GRID = "#cccccc"
GRID_LINE_WIDTH = 2
JOINT_ALPHA = 0.8
# Composited stencil luminance below this marks material as visible.
DARK_THRESHOLD = 0.5


def build_mask(stencil: StencilImage, grid: TileGrid) -> np.ndarray:
    """Binary ``(height, width)`` visibility mask of the stencil tiled over *grid*.

    An all-hidden result is replaced by a fully visible mask.
    """

    mask = allocate_surface(grid.output_width, grid.output_height, channels=1, fill=0.0)

    def draw(rect, tile):
        x0, y0, x1, y1 = rect
        mask[y0:y1, x0:x1] = composite_over_white(tile) < DARK_THRESHOLD

    for_each_tile(stencil, grid, draw, label="mask")
    if not mask.any():
        LOGGER.warning("Stencil mask has no visible pixels; showing full material instead")
        mask[...] = 1.0
    return mask


def _draw_joints(surface: np.ndarray, grid: TileGrid, pattern: PatternSettings, joints: JointSettings) -> None:
    bands = joint_bands(grid, pattern, joints)
    if not bands:
        return
    tint = parse_color(joints.tint)
    for rect in bands:
        fill_over(surface, rect, tint, JOINT_ALPHA)
    LOGGER.debug("Drew %d joint bands", len(bands))


def _placeholder(
    stencil: StencilImage,
    grid: TileGrid,
    pattern: PatternSettings,
    joints: JointSettings,
) -> Image.Image:
    surface = allocate_surface(grid.output_width, grid.output_height, fill=(*parse_color(PLACEHOLDER_BACKGROUND), 1.0))
    if not stencil.is_fallback:
        visible = build_mask(stencil, grid) > 0
        surface[visible, :3] = parse_color(PLACEHOLDER_STENCIL)
    else:
        line = parse_color(PLACEHOLDER_GRID)
        half = GRID_LINE_WIDTH // 2
        for row in range(1, grid.rows):
            y = grid.row_edge(row)
            surface[max(0, y - half) : y - half + GRID_LINE_WIDTH, :, :3] = line
        for col in range(1, grid.columns):
            x = grid.column_edge(col)
            surface[:, max(0, x - half) : x - half + GRID_LINE_WIDTH, :3] = line
    _draw_joints(surface, grid, pattern, joints)
    return from_float_rgba(surface)


def compose(
    stencil: StencilImage,
    material: Optional[Image.Image],
    pattern_settings: PatternSettings,
    material_settings: MaterialSettings,
    joint_settings: JointSettings,
    output_w: int,
    output_h: int,
) -> Image.Image:
    """Build the RGBA color map.

    *material* is the already adjusted material raster. Without one a
    placeholder preview is rendered instead. Layers are applied in a fixed
    order: background, material, tint (multiply), stencil mask
    (destination-in), joints (source-over at 80%).
    """

    grid = TileGrid.from_settings(pattern_settings, output_w, output_h)
    if material is None:
        return _placeholder(stencil, grid, pattern_settings, joint_settings)

    surface = allocate_surface(output_w, output_h, fill=(*parse_color(BACKGROUND), 1.0))

    layer = to_float_rgba(material.convert("RGBA").resize((output_w, output_h), MATERIAL_RESAMPLE))
    src_alpha = layer[..., 3:4]
    surface[..., :3] = layer[..., :3] * src_alpha + surface[..., :3] * (1.0 - src_alpha)

    if not is_white(material_settings.tint):
        surface[..., :3] *= np.asarray(parse_color(material_settings.tint), dtype=np.float32) / 255.0

    surface[..., 3] *= build_mask(stencil, grid)

    _draw_joints(surface, grid, pattern_settings, joint_settings)
    return from_float_rgba(surface)


def flatten(color_map: Image.Image, background: str = BACKGROUND) -> Image.Image:
    """Flatten the color map onto an opaque background for download."""

    base = Image.new("RGBA", color_map.size, (*parse_color(background), 255))
    return Image.alpha_composite(base, color_map.convert("RGBA")).convert("RGB")


__all__ = ["BACKGROUND", "DARK_THRESHOLD", "JOINT_ALPHA", "MATERIAL_RESAMPLE", "build_mask", "compose", "flatten"]
