"""Tests for color map composition: tiling, masking, tint and joints."""
from __future__ import annotations

import logging

import pytest

np = pytest.importorskip("numpy")
from PIL import Image

from texture_pipeline.core.config import JointSettings, MaterialSettings, PatternSettings
from texture_pipeline.modules.maps import build_mask, compose, flatten
from texture_pipeline.modules.maps._stencil_tiles import for_each_tile
from texture_pipeline.modules.maps.color_map import BACKGROUND, MATERIAL_RESAMPLE
from texture_pipeline.modules.stencil import StencilImage, fallback_stencil
from texture_pipeline.modules.tile_grid import TileGrid

NO_JOINTS = JointSettings(enabled=False)


def _inset_square_stencil() -> StencilImage:
    data = np.zeros((100, 100, 4), dtype=np.uint8)
    data[10:90, 10:90] = (0, 0, 0, 255)
    return StencilImage(Image.fromarray(data, mode="RGBA"), "inset.png", False)


def _gradient_material(size: int = 64) -> Image.Image:
    ramp = np.linspace(0, 255, size, dtype=np.float32)
    data = np.zeros((size, size, 3), dtype=np.uint8)
    data[..., 0] = ramp[None, :]
    data[..., 1] = ramp[:, None]
    data[..., 2] = 90
    return Image.fromarray(data, mode="RGB")


def test_six_by_four_grid_at_full_resolution() -> None:
    stencil = _inset_square_stencil()
    material = _gradient_material()
    pattern = PatternSettings(rows=6, columns=4)
    grid = TileGrid.from_settings(pattern, 2048, 2048)

    drawn = for_each_tile(stencil, grid, lambda rect, tile: None, label="count")
    assert drawn == 24

    color = compose(stencil, material, pattern, MaterialSettings(), NO_JOINTS, 2048, 2048)
    assert color.size == (2048, 2048)
    pixels = np.asarray(color)
    expected = np.asarray(material.convert("RGBA").resize((2048, 2048), MATERIAL_RESAMPLE))

    for row, col, (x0, y0, x1, y1) in grid.cells():
        cx, cy = (x0 + x1) // 2, (y0 + y1) // 2
        assert pixels[cy, cx, 3] == 255
        np.testing.assert_array_equal(pixels[cy, cx, :3], expected[cy, cx, :3])
        assert pixels[y0 + 2, x0 + 2, 3] == 0

    visible = (pixels[..., 3] > 0).mean()
    assert 0.6 < visible < 0.68


def test_mask_fallback_shows_full_material() -> None:
    blank = StencilImage(Image.new("RGBA", (50, 50), (255, 255, 255, 255)), "blank.png", False)
    grid = TileGrid(64, 64, rows=2, columns=2)
    assert build_mask(blank, grid).all()

    color = compose(blank, _gradient_material(), PatternSettings(rows=2, columns=2), MaterialSettings(), NO_JOINTS, 64, 64)
    assert (np.asarray(color)[..., 3] == 255).all()


def test_transparent_stencil_also_falls_back() -> None:
    clear = StencilImage(Image.new("RGBA", (10, 10), (0, 0, 0, 0)), "clear.png", False)
    assert build_mask(clear, TileGrid(32, 32, rows=1, columns=1)).all()


def test_white_tint_leaves_material_unchanged() -> None:
    material = Image.new("RGB", (8, 8), (200, 100, 50))
    color = compose(fallback_stencil(), material, PatternSettings(rows=1, columns=1), MaterialSettings(), NO_JOINTS, 16, 16)
    assert color.getpixel((8, 8)) == (200, 100, 50, 255)


def test_tint_multiplies_material() -> None:
    material = Image.new("RGB", (8, 8), (200, 100, 50))
    settings = MaterialSettings(tint="#808080")
    color = compose(fallback_stencil(), material, PatternSettings(rows=1, columns=1), settings, NO_JOINTS, 16, 16)
    r, g, b, a = color.getpixel((8, 8))
    assert (r, g, b) == (100, 50, 25)
    assert a == 255


def test_joints_blend_tint_over_boundaries() -> None:
    material = Image.new("RGB", (8, 8), (0, 0, 255))
    pattern = PatternSettings(rows=2, columns=2, width=100, height=100)
    joints = JointSettings(tint="#ff0000", horizontal=10, vertical=10)
    color = compose(fallback_stencil(), material, pattern, MaterialSettings(), joints, 200, 200)
    assert color.getpixel((50, 100)) == (204, 0, 51, 255)
    assert color.getpixel((100, 50)) == (204, 0, 51, 255)
    assert color.getpixel((50, 50)) == (0, 0, 255, 255)


def test_sub_pixel_joints_draw_nothing() -> None:
    material = Image.new("RGB", (8, 8), (0, 0, 255))
    pattern = PatternSettings(rows=6, columns=4, width=100, height=100)
    joints = JointSettings(tint="#ff0000", horizontal=5, vertical=5)
    color = np.asarray(compose(fallback_stencil(), material, pattern, MaterialSettings(), joints, 40, 60))
    assert (color[..., 0] == 0).all()


def test_placeholder_without_material_draws_grid() -> None:
    color = compose(fallback_stencil(), None, PatternSettings(rows=2, columns=2), MaterialSettings(), NO_JOINTS, 40, 40)
    assert color.getpixel((5, 5)) == (245, 245, 245, 255)
    assert color.getpixel((20, 5)) == (204, 204, 204, 255)
    assert color.getpixel((5, 20)) == (204, 204, 204, 255)


def test_placeholder_without_material_draws_stencil() -> None:
    color = compose(_inset_square_stencil(), None, PatternSettings(rows=1, columns=1), MaterialSettings(), NO_JOINTS, 100, 100)
    assert color.getpixel((50, 50)) == (51, 51, 51, 255)
    assert color.getpixel((2, 2)) == (245, 245, 245, 255)


def test_flatten_composites_onto_background() -> None:
    color = compose(_inset_square_stencil(), Image.new("RGB", (4, 4), (10, 20, 30)), PatternSettings(rows=1, columns=1), MaterialSettings(), NO_JOINTS, 100, 100)
    flat = flatten(color)
    assert flat.mode == "RGB"
    assert flat.getpixel((50, 50)) == (10, 20, 30)
    assert flat.getpixel((2, 2)) == Image.new("RGB", (1, 1), BACKGROUND).getpixel((0, 0))


def test_failing_tile_is_logged_and_skipped(caplog) -> None:
    grid = TileGrid(40, 40, rows=2, columns=2)
    visited = []

    def draw(rect, tile):
        visited.append(rect)
        if len(visited) == 2:
            raise RuntimeError("corrupt tile")

    with caplog.at_level(logging.WARNING, logger="texture_pipeline.maps.tiles"):
        drawn = for_each_tile(fallback_stencil(), grid, draw, label="mask")

    assert drawn == 3
    assert len(visited) == 4
    assert any("corrupt tile" in record.getMessage() for record in caplog.records)
