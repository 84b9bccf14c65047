"""Load pattern stencils and normalize them to filled-region rasters.

A stencil is the vector (or raster) drawing of a single pattern unit. The
pipeline reads dark/opaque stencil pixels as "material visible" and
light/transparent pixels as background. Source SVGs frequently describe tile
regions as bare outline paths with no fill, which a rasterizer would render
as empty shapes, so every shape element without an explicit fill is given a
solid black fill before rasterization.

Any failure while fetching, parsing or rasterizing yields the fallback
stencil, a fully opaque square, so later stages never see a missing stencil.
"""
from __future__ import annotations

import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional

from PIL import Image

from ..core.config import Pattern
from .assets import AssetResolver

LOGGER = logging.getLogger("texture_pipeline.stencil")

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
SHAPE_TAGS = frozenset({"path", "rect", "circle", "ellipse", "polygon", "polyline"})
# Geometry in these containers is never painted with its own fill.
UNPAINTED_CONTAINERS = frozenset({"clipPath", "mask"})
SOLID_FILL = "#000000"
FALLBACK_SIZE = (100, 100)

_STYLE_FILL = re.compile(r"(?:^|;)\s*fill\s*:\s*([^;]+)", re.IGNORECASE)  # not fill-opacity
# Optional BOM, XML declaration, comments, processing instructions and doctype before the root.
_SVG_START = re.compile(
    rb"^(?:\xef\xbb\xbf)?(?:\s|<\?.*?\?>|<!--.*?-->|<!DOCTYPE(?:[^>\[]|\[.*?\])*>)*<(?:\w+:)?svg[\s>/]",
    re.DOTALL | re.IGNORECASE,
)

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


@dataclass(frozen=True)
class StencilImage:
    """A rasterized stencil ready to be tiled."""

    image: Image.Image
    source_url: Optional[str] = None
    is_fallback: bool = False

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


def fallback_stencil() -> StencilImage:
    """Return the deterministic single opaque square stencil."""

    return StencilImage(Image.new("RGBA", FALLBACK_SIZE, (0, 0, 0, 255)), None, True)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _style_fill(style: str) -> Optional[str]:
    match = _STYLE_FILL.search(style)
    return match.group(1).strip() if match else None


def _without_style_fill(style: str) -> str:
    declarations = [
        part for part in style.split(";") if part.strip() and part.split(":", 1)[0].strip().lower() != "fill"
    ]
    return ";".join(declarations)


def _own_fill(element: ET.Element) -> Optional[str]:
    style_fill = _style_fill(element.get("style", ""))
    return style_fill if style_fill is not None else element.get("fill")


def _is_none(fill: Optional[str]) -> bool:
    return fill is None or fill.strip().lower() == "none"


def _force_fills(element: ET.Element, inherited: Optional[str]) -> int:
    if not isinstance(element.tag, str):
        return 0
    tag = _local_name(element.tag)
    if tag in UNPAINTED_CONTAINERS:
        return 0
    own = _own_fill(element)
    effective = own if own is not None and own.strip().lower() != "inherit" else inherited
    forced = 0
    if tag in SHAPE_TAGS and _is_none(effective):
        style = element.get("style", "")
        element.set("fill", SOLID_FILL)
        if _style_fill(style) is not None:
            element.set("style", _without_style_fill(style))
        forced += 1
        effective = SOLID_FILL
    for child in element:
        forced += _force_fills(child, effective)
    return forced


def normalize_svg(source: bytes | str) -> bytes:
    """Force a solid fill onto shape elements that would otherwise be hollow.

    A shape keeps a real fill of its own or one inherited from an ancestor
    group. Missing and ``none`` fills are rewritten, while ``fill-opacity``
    and ``fill-rule`` are left untouched. Clip paths and masks are skipped.
    """

    root = ET.fromstring(source)
    forced = _force_fills(root, None)
    if forced:
        LOGGER.debug("Forced solid fill on %d stencil shapes", forced)
    return ET.tostring(root, encoding="utf-8")


def _is_svg(source: bytes) -> bool:
    return _SVG_START.match(source) is not None


def _rasterize_svg(source: bytes) -> Image.Image:
    import cairosvg

    png = cairosvg.svg2png(bytestring=normalize_svg(source))
    with Image.open(io.BytesIO(png)) as image:
        return image.convert("RGBA")


def rasterize_stencil(source: bytes) -> Image.Image:
    """Rasterize stencil *source* at its native resolution as RGBA."""

    if _is_svg(source):
        image = _rasterize_svg(source)
    else:
        with Image.open(io.BytesIO(source)) as raster:
            image = raster.convert("RGBA")
    if image.width == 0 or image.height == 0:
        raise ValueError("stencil rasterized to an empty image")
    return image


def load_stencil(pattern: Optional[Pattern], resolver: AssetResolver) -> StencilImage:
    """Resolve and rasterize the stencil of *pattern*, never raising."""

    if pattern is None or not pattern.stencil_url:
        return fallback_stencil()
    url = pattern.stencil_url
    try:
        image = rasterize_stencil(resolver.fetch_stencil(url))
    except Exception as exc:
        LOGGER.warning("Stencil for pattern %s unavailable (%s); using fallback square", pattern.id, exc)
        return fallback_stencil()
    LOGGER.debug("Loaded stencil %s at %dx%d", url, image.width, image.height)
    return StencilImage(image, url, False)


__all__ = ["StencilImage", "fallback_stencil", "load_stencil", "normalize_svg", "rasterize_stencil"]
