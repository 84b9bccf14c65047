"""Raster builders for the color, displacement, normal and roughness maps."""
from __future__ import annotations

from .color_map import build_mask, compose, flatten
from .displacement_map import generate as generate_displacement
from .normal_map import generate as generate_normal
from .roughness_map import generate as generate_roughness

__all__ = [
    "build_mask",
    "compose",
    "flatten",
    "generate_displacement",
    "generate_normal",
    "generate_roughness",
]
