"""Built-in material catalog and pattern stencil locations."""
from __future__ import annotations

from typing import Optional, Tuple
from urllib.parse import quote

from .config import Material, Pattern

PLACEHOLDER_BASE = "https://picsum.photos/seed"
PATTERN_CDN = "https://cdn.architextures.org/patterns"

MATERIAL_SIZE = 800
THUMBNAIL_SIZE = 200

_MATERIAL_ENTRIES: Tuple[Tuple[str, str, str], ...] = (
    ("granite-1", "Granite", "Stone"),
    ("limestone-1", "Limestone", "Stone"),
    ("marble-1", "White Marble", "Stone"),
    ("slate-1", "Slate", "Stone"),
    ("travertine-1", "Travertine", "Stone"),
    ("brick-red-1", "Red Brick", "Brick"),
    ("brick-white-1", "White Brick", "Brick"),
    ("wood-oak-1", "Oak", "Wood"),
    ("wood-walnut-1", "Walnut", "Wood"),
    ("concrete-1", "Concrete", "Concrete"),
    ("concrete-2", "Polished Concrete", "Concrete"),
    ("tile-ceramic-1", "Ceramic Tile", "Tile"),
    ("tile-mosaic-1", "Mosaic Tile", "Tile"),
)


def _placeholder_material(material_id: str, name: str, category: str) -> Material:
    return Material(
        id=material_id,
        name=name,
        category=category,
        image_url=f"{PLACEHOLDER_BASE}/{material_id}/{MATERIAL_SIZE}/{MATERIAL_SIZE}",
        thumbnail_url=f"{PLACEHOLDER_BASE}/{material_id}/{THUMBNAIL_SIZE}/{THUMBNAIL_SIZE}",
    )


MATERIALS: Tuple[Material, ...] = tuple(_placeholder_material(*entry) for entry in _MATERIAL_ENTRIES)


def find_material(material_id: str) -> Optional[Material]:
    for material in MATERIALS:
        if material.id == material_id:
            return material
    return None


def materials_in_category(category: str) -> Tuple[Material, ...]:
    return tuple(material for material in MATERIALS if material.category == category)


def pattern_svg_url(name: str) -> str:
    """Return the CDN location of the stencil for pattern *name*."""

    if not name or "/" in name:
        raise ValueError(f"Invalid pattern name: {name!r}")
    return f"{PATTERN_CDN}/{quote(name)}.svg"


def pattern_from_name(
    name: str,
    *,
    display_name: Optional[str] = None,
    category: str = "All",
    default_rows: Optional[int] = None,
    default_columns: Optional[int] = None,
) -> Pattern:
    return Pattern(
        id=name,
        name=display_name or name.replace("-", " ").title(),
        category=category,
        stencil_url=pattern_svg_url(name),
        default_rows=default_rows,
        default_columns=default_columns,
    )
