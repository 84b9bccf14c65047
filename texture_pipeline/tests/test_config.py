"""Tests for configuration records, mapping input, validation and catalog."""
from __future__ import annotations

import dataclasses

import pytest

from texture_pipeline.core import catalog
from texture_pipeline.core.config import (
    EdgeStyle,
    JointSettings,
    Pattern,
    PatternSettings,
    RenderOptions,
    TextureConfig,
    build_options,
    config_from_mapping,
    select_material,
    select_pattern,
    update_settings,
    validate_config,
)
from texture_pipeline.core.errors import InvalidConfiguration

EDITOR_CONFIG = {
    "pattern": {"id": "herringbone", "name": "Herringbone", "svgUrl": "https://example.com/h.svg"},
    "material": None,
    "patternSettings": {"rows": 8, "columns": 2, "width": 300, "height": 75},
    "materialSettings": {"tint": "#ffeedd", "edgeStyle": "Rough", "toneVariation": 0.5},
    "jointSettings": {"material": "Mortar", "tint": "#999999", "horizontal": 3, "vertical": 2},
    "adjustments": {"brightness": 1.2, "contrast": 0.8, "hue": 30, "saturation": 1.1, "invert": True},
}


def test_defaults() -> None:
    config = TextureConfig()
    assert config.pattern is None and config.material is None
    assert (config.pattern_settings.rows, config.pattern_settings.columns) == (6, 4)
    assert (config.pattern_settings.width, config.pattern_settings.height) == (400, 100)
    assert config.joint_settings.material == "Mortar"
    assert config.joint_settings.horizontal == config.joint_settings.vertical == 5
    assert config.adjustments.is_identity
    validate_config(config, RenderOptions())


def test_config_is_immutable() -> None:
    with pytest.raises(dataclasses.FrozenInstanceError):
        TextureConfig().pattern_settings.rows = 3  # type: ignore[misc]


def test_config_from_editor_mapping() -> None:
    config = config_from_mapping(EDITOR_CONFIG)
    assert config.pattern.stencil_url == "https://example.com/h.svg"
    assert config.material is None
    assert config.pattern_settings == PatternSettings(rows=8, columns=2, width=300, height=75)
    assert config.material_settings.edge_style is EdgeStyle.ROUGH
    assert config.material_settings.tone_variation == 0.5
    assert config.joint_settings.vertical == 2
    assert config.adjustments.invert
    validate_config(config)


def test_config_from_mapping_rejects_unknown_edge_style() -> None:
    with pytest.raises(InvalidConfiguration):
        config_from_mapping({"materialSettings": {"edgeStyle": "Jagged"}})


def test_select_pattern_applies_default_grid() -> None:
    base = TextureConfig()
    pattern = Pattern("stack", "Stack", default_rows=3, default_columns=5)
    updated = select_pattern(base, pattern)
    assert updated.pattern is pattern
    assert (updated.pattern_settings.rows, updated.pattern_settings.columns) == (3, 5)
    assert base.pattern is None and base.pattern_settings.rows == 6


def test_select_material_and_update_settings() -> None:
    material = catalog.find_material("slate-1")
    config = update_settings(
        select_material(TextureConfig(), material),
        joint_settings={"horizontal": 0},
        adjustments={"hue": 90},
    )
    assert config.material is material
    assert config.joint_settings == JointSettings(horizontal=0)
    assert config.adjustments.hue == 90
    with pytest.raises(InvalidConfiguration):
        update_settings(config, pattern={"id": "x"})


@pytest.mark.parametrize(
    "changes",
    [
        {"pattern_settings": {"rows": 0}},
        {"pattern_settings": {"columns": 2.5}},
        {"pattern_settings": {"width": 0}},
        {"material_settings": {"tint": "not-a-color"}},
        {"material_settings": {"tone_variation": 1.5}},
        {"joint_settings": {"vertical": -1}},
        {"adjustments": {"saturation": -0.1}},
        {"pattern_settings": {"width": "400"}},
        {"joint_settings": {"horizontal": "5"}},
        {"adjustments": {"brightness": "1.2"}},
        {"adjustments": {"hue": None}},
        {"material_settings": {"tint": 255}},
        {"material_settings": {"tone_variation": True}},
    ],
)
def test_validate_rejects_unrenderable_values(changes) -> None:
    with pytest.raises(InvalidConfiguration):
        validate_config(update_settings(TextureConfig(), **changes))


def test_validate_rejects_bad_options() -> None:
    with pytest.raises(InvalidConfiguration):
        validate_config(TextureConfig(), RenderOptions(output_width=0))
    with pytest.raises(InvalidConfiguration):
        validate_config(TextureConfig(), RenderOptions(normal_strength=0))


@pytest.mark.parametrize("block", [5, "rows", [6, 4]])
def test_config_from_mapping_rejects_non_object_blocks(block) -> None:
    with pytest.raises(InvalidConfiguration):
        config_from_mapping({"patternSettings": block})


def test_string_numbers_from_json_are_configuration_errors() -> None:
    config = config_from_mapping({"patternSettings": {"width": "400"}})
    with pytest.raises(InvalidConfiguration, match="pattern width"):
        validate_config(config)


def test_build_options_ignores_unknown_keys() -> None:
    options = build_options({"seed": 5, "output_width": 512, "colour": "red"})
    assert options.seed == 5
    assert options.size == (512, 2048)


def test_catalog_materials() -> None:
    assert len(catalog.MATERIALS) == 13
    granite = catalog.find_material("granite-1")
    assert granite.image_url == "https://picsum.photos/seed/granite-1/800/800"
    assert granite.thumbnail_url.endswith("/200/200")
    assert {m.id for m in catalog.materials_in_category("Wood")} == {"wood-oak-1", "wood-walnut-1"}
    assert catalog.find_material("unobtainium") is None


def test_pattern_urls() -> None:
    assert catalog.pattern_svg_url("herringbone") == "https://cdn.architextures.org/patterns/herringbone.svg"
    pattern = catalog.pattern_from_name("basket-weave", default_rows=4)
    assert pattern.name == "Basket Weave"
    assert pattern.default_rows == 4
    with pytest.raises(ValueError):
        catalog.pattern_svg_url("../etc")
