"""Primary orchestration: one configuration snapshot in, four PBR maps out."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from PIL import Image

from ..core.config import RenderOptions, TextureConfig, validate_config
from ..core.utils_io import save_images
from ..core.utils_parallel import run_parallel
from .adjustments import apply_adjustments
from .assets import AssetResolver, load_material
from .maps import compose, flatten, generate_displacement, generate_normal, generate_roughness
from .maps.color_map import BACKGROUND
from .noise import spawn_generators
from .stencil import StencilImage, load_stencil

LOGGER = logging.getLogger("texture_pipeline.pipeline")

MAP_NAMES = ("color", "displacement", "normal", "roughness")


@dataclass
class TextureMaps:
    """The four rasters of one render, all of identical size."""

    color: Image.Image
    displacement: Image.Image
    normal: Image.Image
    roughness: Image.Image

    @property
    def size(self) -> Tuple[int, int]:
        return self.color.size

    def as_dict(self) -> Dict[str, Image.Image]:
        return {name: getattr(self, name) for name in MAP_NAMES}

    def flattened(self, background: str = BACKGROUND) -> Image.Image:
        """The color map alone, flattened for download."""

        return flatten(self.color, background)

    def close(self) -> None:
        for image in self.as_dict().values():
            image.close()


def resolve_assets(
    config: TextureConfig, resolver: AssetResolver
) -> Tuple[StencilImage, Optional[Image.Image]]:
    """Fetch the stencil and material raster; unavailable assets fall back."""

    stencil = load_stencil(config.pattern, resolver)
    material = load_material(config.material, resolver)
    return stencil, material


def generate_texture_maps(
    config: TextureConfig,
    stencil: StencilImage,
    material: Optional[Image.Image],
    options: Optional[RenderOptions] = None,
) -> TextureMaps:
    """Rasterize every map for *config* from already resolved assets.

    Color, displacement and roughness run concurrently against the shared
    read-only stencil and material; the normal map follows the displacement
    map. Noise generators are spawned per map from ``options.seed``.
    """

    options = options or RenderOptions()
    validate_config(config, options)
    width, height = options.size
    started = time.perf_counter()

    adjusted = apply_adjustments(material, config.adjustments) if material is not None else None
    rngs = spawn_generators(options.seed, ("displacement", "roughness"))

    tasks = {
        "color": lambda: compose(
            stencil,
            adjusted,
            config.pattern_settings,
            config.material_settings,
            config.joint_settings,
            width,
            height,
        ),
        "displacement": lambda: generate_displacement(
            stencil,
            config.pattern_settings,
            config.joint_settings,
            width,
            height,
            max_recess=options.max_recess,
            noise=options.displacement_noise,
            joint_grid=options.joint_grid_displacement,
            rng=rngs["displacement"],
        ),
        "roughness": lambda: generate_roughness(
            stencil,
            config.pattern_settings,
            config.joint_settings,
            width,
            height,
            stencil_coverage=options.stencil_roughness,
            noise=options.roughness_noise,
            rng=rngs["roughness"],
        ),
    }
    results = run_parallel(tasks, max_workers=options.threads)
    normal = generate_normal(results["displacement"], options.normal_strength)

    LOGGER.info(
        "Generated %dx%d maps (%dx%d grid, material=%s, fallback stencil=%s) in %.2fs",
        width,
        height,
        config.pattern_settings.rows,
        config.pattern_settings.columns,
        config.material.id if config.material else None,
        stencil.is_fallback,
        time.perf_counter() - started,
    )
    return TextureMaps(results["color"], results["displacement"], normal, results["roughness"])


def render_texture_maps(
    config: TextureConfig,
    resolver: Optional[AssetResolver] = None,
    options: Optional[RenderOptions] = None,
) -> TextureMaps:
    """Validate *config*, resolve its assets and generate all maps."""

    options = options or RenderOptions()
    validate_config(config, options)
    stencil, material = resolve_assets(config, resolver or AssetResolver())
    return generate_texture_maps(config, stencil, material, options)


def save_texture_maps(maps: TextureMaps, directory: Path | str) -> Dict[str, Path]:
    """Write each map plus the flattened ``texture.png`` into *directory*."""

    images = dict(maps.as_dict())
    images["texture"] = maps.flattened()
    return save_images(images, directory)


__all__ = [
    "MAP_NAMES",
    "TextureMaps",
    "generate_texture_maps",
    "render_texture_maps",
    "resolve_assets",
    "save_texture_maps",
]
