"""Configuration module for the tile texture synthesis pipeline."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConfiguration
from .utils_color import parse_color

LOGGER = logging.getLogger("texture_pipeline.config")

BASE_DIR = Path(__file__).resolve().parent.parent

PATH_OUTPUT = BASE_DIR / "output"
LOG_FILE = BASE_DIR / "render.log"

OUTPUT_WIDTH = 2048
OUTPUT_HEIGHT = 2048
DEFAULT_TINT = "#FFFFFF"


RENDER_DEFAULTS: Dict[str, object] = {
    "output_width": OUTPUT_WIDTH,
    "output_height": OUTPUT_HEIGHT,
    "normal_strength": 1.0,
    "displacement_noise": 0.05,
    "roughness_noise": 0.1,
    "max_recess": 0.75,
    "stencil_roughness": True,
    "joint_grid_displacement": False,
    "seed": None,
    "threads": 3,
}


class EdgeStyle(str, Enum):
    NONE = "None"
    HANDMADE = "Handmade"
    ROUGH = "Rough"
    GROOVED = "Grooved"
    VOIDS = "Voids"


@dataclass(frozen=True)
class Pattern:
    """A selectable tile pattern backed by a vector stencil."""

    id: str
    name: str
    category: str = "All"
    stencil_url: Optional[str] = None
    default_rows: Optional[int] = None
    default_columns: Optional[int] = None


@dataclass(frozen=True)
class Material:
    """A selectable material photo."""

    id: str
    name: str
    category: str = "Surfaces"
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None


@dataclass(frozen=True)
class PatternSettings:
    rows: int = 6
    columns: int = 4
    width: float = 400.0
    height: float = 100.0
    angle: Optional[float] = None


@dataclass(frozen=True)
class MaterialSettings:
    # width, height, edge_style and tone_variation are carried but not rendered.
    width: float = 400.0
    height: float = 100.0
    tint: str = DEFAULT_TINT
    edge_style: EdgeStyle = EdgeStyle.HANDMADE
    tone_variation: float = 0.25
    profile: Optional[str] = None
    finish: Optional[str] = None


@dataclass(frozen=True)
class JointSettings:
    material: str = "Mortar"
    tint: str = DEFAULT_TINT
    horizontal: float = 5.0
    vertical: float = 5.0
    recess: bool = True
    concave: bool = False
    enabled: bool = True


@dataclass(frozen=True)
class Adjustments:
    brightness: float = 1.0
    contrast: float = 1.0
    hue: float = 0.0
    saturation: float = 1.0
    invert: bool = False

    @property
    def is_identity(self) -> bool:
        return (
            self.brightness == 1.0
            and self.contrast == 1.0
            and self.hue % 360 == 0
            and self.saturation == 1.0
            and not self.invert
        )


@dataclass(frozen=True)
class TextureConfig:
    """Immutable snapshot describing one texture render."""

    pattern: Optional[Pattern] = None
    material: Optional[Material] = None
    pattern_settings: PatternSettings = field(default_factory=PatternSettings)
    material_settings: MaterialSettings = field(default_factory=MaterialSettings)
    joint_settings: JointSettings = field(default_factory=JointSettings)
    adjustments: Adjustments = field(default_factory=Adjustments)


@dataclass(frozen=True)
class RenderOptions:
    """Runtime options for a render pass."""

    output_width: int = OUTPUT_WIDTH
    output_height: int = OUTPUT_HEIGHT
    normal_strength: float = 1.0
    displacement_noise: float = 0.05
    roughness_noise: float = 0.1
    max_recess: float = 0.75
    stencil_roughness: bool = True
    joint_grid_displacement: bool = False
    seed: Optional[int] = None
    threads: int = 3

    @property
    def size(self) -> tuple[int, int]:
        return self.output_width, self.output_height


def build_options(overrides: Optional[Mapping[str, object]] = None) -> RenderOptions:
    """Create render options with optional overrides; unknown keys are ignored."""

    values = dict(RENDER_DEFAULTS)
    if overrides:
        for key, value in overrides.items():
            if key in values:
                values[key] = value
            else:
                LOGGER.debug("Ignoring unknown render option %r", key)
    return RenderOptions(**values)  # type: ignore[arg-type]


# Immutable edits -----------------------------------------------------------


def select_pattern(config: TextureConfig, pattern: Pattern) -> TextureConfig:
    """Return a new config using *pattern* and its default grid, when it has one."""

    settings = replace(
        config.pattern_settings,
        rows=pattern.default_rows or config.pattern_settings.rows,
        columns=pattern.default_columns or config.pattern_settings.columns,
    )
    return replace(config, pattern=pattern, pattern_settings=settings)


def select_material(config: TextureConfig, material: Optional[Material]) -> TextureConfig:
    return replace(config, material=material)


def update_settings(config: TextureConfig, **changes: Any) -> TextureConfig:
    """Return a new config with individual fields of the settings blocks replaced.

    ``changes`` maps a block name (``pattern_settings``, ``material_settings``,
    ``joint_settings`` or ``adjustments``) to a mapping of field updates.
    """

    blocks: Dict[str, object] = {}
    for block_name, updates in changes.items():
        current = getattr(config, block_name, None)
        if current is None or block_name in {"pattern", "material"}:
            raise InvalidConfiguration(f"Unknown settings block: {block_name}")
        blocks[block_name] = replace(current, **dict(updates))
    return replace(config, **blocks)


# Mapping input -------------------------------------------------------------

_KEY_ALIASES = {"svg_url": "stencil_url"}


def _snake_case(key: str) -> str:
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()
    return _KEY_ALIASES.get(snake, snake)


def _build_record(cls, data: Optional[Mapping[str, Any]]):
    if data is None:
        return None
    if isinstance(data, cls):
        return data
    if not isinstance(data, Mapping):
        raise InvalidConfiguration(f"{cls.__name__} must be an object, got {type(data).__name__}")
    known = {f.name for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        name = _snake_case(str(key))
        if name in known:
            kwargs[name] = value
        else:
            LOGGER.debug("Ignoring unknown %s field %r", cls.__name__, key)
    if "edge_style" in kwargs:
        try:
            kwargs["edge_style"] = EdgeStyle(kwargs["edge_style"])
        except ValueError as exc:
            raise InvalidConfiguration(f"Unknown edge style: {kwargs['edge_style']!r}") from exc
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise InvalidConfiguration(f"Invalid {cls.__name__}: {exc}") from exc


def config_from_mapping(data: Mapping[str, Any]) -> TextureConfig:
    """Build a :class:`TextureConfig` from a JSON-style mapping.

    Both the editor's camelCase keys (``patternSettings``, ``svgUrl``) and
    snake_case keys are accepted. Missing blocks take their defaults.
    """

    normalized = {_snake_case(str(key)): value for key, value in data.items()}
    blocks = {
        "pattern_settings": PatternSettings,
        "material_settings": MaterialSettings,
        "joint_settings": JointSettings,
        "adjustments": Adjustments,
    }
    kwargs: Dict[str, Any] = {
        "pattern": _build_record(Pattern, normalized.get("pattern")),
        "material": _build_record(Material, normalized.get("material")),
    }
    for name, cls in blocks.items():
        if normalized.get(name) is not None:
            kwargs[name] = _build_record(cls, normalized[name])
    return TextureConfig(**kwargs)


# Validation ----------------------------------------------------------------


def _require_count(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidConfiguration(f"{name} must be an integer >= 1, got {value!r}")


def _require_number(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfiguration(f"{name} must be a number, got {value!r}")
    return float(value)


def _require_positive(name: str, value: object) -> None:
    if not _require_number(name, value) > 0:
        raise InvalidConfiguration(f"{name} must be > 0, got {value!r}")


def _require_color(name: str, value: object) -> None:
    if not isinstance(value, str):
        raise InvalidConfiguration(f"{name} must be a color string, got {value!r}")
    try:
        parse_color(value)
    except ValueError as exc:
        raise InvalidConfiguration(f"{name} is not a valid color: {value!r}") from exc


def validate_config(config: TextureConfig, options: Optional[RenderOptions] = None) -> None:
    """Reject configurations that cannot be rendered, before any raster work."""

    pattern = config.pattern_settings
    _require_count("rows", pattern.rows)
    _require_count("columns", pattern.columns)
    _require_positive("pattern width", pattern.width)
    _require_positive("pattern height", pattern.height)

    material = config.material_settings
    _require_color("material tint", material.tint)
    if not 0.0 <= _require_number("tone variation", material.tone_variation) <= 1.0:
        raise InvalidConfiguration(f"tone variation must be within [0, 1], got {material.tone_variation!r}")

    joints = config.joint_settings
    _require_color("joint tint", joints.tint)
    horizontal = _require_number("horizontal joint width", joints.horizontal)
    vertical = _require_number("vertical joint width", joints.vertical)
    if horizontal < 0 or vertical < 0:
        raise InvalidConfiguration("joint widths must be >= 0 mm")

    adjustments = config.adjustments
    _require_number("contrast", adjustments.contrast)
    _require_number("hue", adjustments.hue)
    brightness = _require_number("brightness", adjustments.brightness)
    saturation = _require_number("saturation", adjustments.saturation)
    if brightness < 0 or saturation < 0:
        raise InvalidConfiguration("brightness and saturation must be >= 0")

    if options is not None:
        _require_count("output width", options.output_width)
        _require_count("output height", options.output_height)
        _require_count("threads", options.threads)
        _require_positive("normal strength", options.normal_strength)


__all__ = [
    "Adjustments",
    "EdgeStyle",
    "JointSettings",
    "Material",
    "MaterialSettings",
    "Pattern",
    "PatternSettings",
    "RenderOptions",
    "TextureConfig",
    "build_options",
    "config_from_mapping",
    "select_material",
    "select_pattern",
    "update_settings",
    "validate_config",
]
