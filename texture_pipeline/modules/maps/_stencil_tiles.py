"""Per-cell stencil rasterization shared by the map builders."""
from __future__ import annotations

import logging
from typing import Callable, Dict, Tuple

from PIL import Image

from ...core.utils_image import BILINEAR
from ..stencil import StencilImage
from ..tile_grid import Rect, TileGrid

LOGGER = logging.getLogger("texture_pipeline.maps.tiles")

TileDrawer = Callable[[Rect, Image.Image], None]


def for_each_tile(stencil: StencilImage, grid: TileGrid, draw: TileDrawer, *, label: str) -> int:
    """Call *draw* with the stencil scaled into every grid cell.

    A failing cell is logged and skipped. Returns the number of cells drawn.
    """

    scaled: Dict[Tuple[int, int], Image.Image] = {}
    drawn = 0
    for row, col, rect in grid.cells():
        x0, y0, x1, y1 = rect
        size = (x1 - x0, y1 - y0)
        if size[0] <= 0 or size[1] <= 0:
            continue
        try:
            tile = scaled.get(size)
            if tile is None:
                tile = stencil.image.resize(size, BILINEAR)
                scaled[size] = tile
            draw(rect, tile)
        except Exception as exc:
            LOGGER.warning("Failed to draw %s stencil tile (%d, %d): %s", label, row, col, exc)
            continue
        drawn += 1
    return drawn
