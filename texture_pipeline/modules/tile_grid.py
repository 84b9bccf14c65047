"""Pixel-space geometry of the pattern tile grid and its joints."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple

from ..core.config import JointSettings, PatternSettings
from ..core.errors import InvalidConfiguration

Rect = Tuple[int, int, int, int]


def tile_units(output_w: int, output_h: int, rows: int, cols: int) -> Tuple[float, float]:
    """Return the ``(unit_w, unit_h)`` pixel size of one pattern unit."""

    if rows < 1 or cols < 1:
        raise InvalidConfiguration(f"rows and columns must be >= 1, got {rows}x{cols}")
    return output_w / cols, output_h / rows


def mm_to_pixels(m: float, ref_mm: float, unit_pixels: float) -> float:
    """Convert a millimeter measurement relative to *ref_mm* into pixels."""

    if ref_mm == 0:
        raise InvalidConfiguration("reference millimeter dimension must be non-zero")
    return (m / ref_mm) * unit_pixels


@dataclass(frozen=True)
class TileGrid:
    output_width: int
    output_height: int
    rows: int
    columns: int

    @classmethod
    def from_settings(cls, settings: PatternSettings, output_width: int, output_height: int) -> "TileGrid":
        tile_units(output_width, output_height, settings.rows, settings.columns)
        return cls(output_width, output_height, settings.rows, settings.columns)

    @property
    def unit_width(self) -> float:
        return self.output_width / self.columns

    @property
    def unit_height(self) -> float:
        return self.output_height / self.rows

    def column_edge(self, col: int) -> int:
        return int(round(col * self.unit_width))

    def row_edge(self, row: int) -> int:
        return int(round(row * self.unit_height))

    def cell_rect(self, row: int, col: int) -> Rect:
        """Integer ``(x0, y0, x1, y1)`` of a cell; neighbouring cells share edges exactly."""

        return self.column_edge(col), self.row_edge(row), self.column_edge(col + 1), self.row_edge(row + 1)

    def cells(self) -> Iterator[Tuple[int, int, Rect]]:
        for row in range(self.rows):
            for col in range(self.columns):
                yield row, col, self.cell_rect(row, col)


def _band(center: float, thickness: float, limit: int) -> Tuple[int, int]:
    start = int(round(center - thickness / 2.0))
    end = start + int(round(thickness))
    return max(0, start), min(limit, end)


def joint_bands(grid: TileGrid, pattern: PatternSettings, joints: JointSettings) -> List[Rect]:
    """Rectangles of the joint bands centered on every interior tile boundary.

    Bands thinner than one pixel are skipped.
    """

    if not joints.enabled:
        return []
    bands: List[Rect] = []
    if joints.horizontal > 0:
        thickness = mm_to_pixels(joints.horizontal, pattern.height, grid.unit_height)
        if thickness >= 1.0:
            for row in range(1, grid.rows):
                y0, y1 = _band(row * grid.unit_height, thickness, grid.output_height)
                if y1 > y0:
                    bands.append((0, y0, grid.output_width, y1))
    if joints.vertical > 0:
        thickness = mm_to_pixels(joints.vertical, pattern.width, grid.unit_width)
        if thickness >= 1.0:
            for col in range(1, grid.columns):
                x0, x1 = _band(col * grid.unit_width, thickness, grid.output_width)
                if x1 > x0:
                    bands.append((x0, 0, x1, grid.output_height))
    return bands


__all__ = ["Rect", "TileGrid", "joint_bands", "mm_to_pixels", "tile_units"]
