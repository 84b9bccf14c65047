"""Tests for the material adjustment filter."""
from __future__ import annotations

import math

import pytest

np = pytest.importorskip("numpy")
from PIL import Image

from texture_pipeline.core.config import Adjustments
from texture_pipeline.modules.adjustments import adjust, apply_adjustments, contrast_factor


def _random_image(size: int = 24, seed: int = 3) -> Image.Image:
    rng = np.random.default_rng(seed)
    data = rng.integers(0, 256, size=(size, size, 4), dtype=np.uint8)
    return Image.fromarray(data, mode="RGBA")


def test_identity_parameters_return_input_exactly() -> None:
    image = _random_image()
    result = adjust(image, brightness=1, contrast=1, hue=0, saturation=1, invert=False)
    np.testing.assert_array_equal(np.asarray(result), np.asarray(image))


def test_invert_is_self_inverse() -> None:
    image = _random_image(seed=11)
    twice = adjust(adjust(image, invert=True), invert=True)
    np.testing.assert_array_equal(np.asarray(twice), np.asarray(image))


def test_alpha_is_preserved() -> None:
    image = _random_image(seed=5)
    result = adjust(image, brightness=1.4, contrast=1.3, hue=90, saturation=0.5, invert=True)
    np.testing.assert_array_equal(np.asarray(result)[..., 3], np.asarray(image)[..., 3])


def test_contrast_factor_is_finite_over_domain() -> None:
    assert contrast_factor(1.0) == 1.0
    assert contrast_factor(0.0) == 0.0
    for value in np.linspace(0.0, 2.0, 401):
        factor = contrast_factor(float(value))
        assert math.isfinite(factor) and factor >= 0.0
    assert contrast_factor(5.0) == contrast_factor(2.0)


def test_zero_contrast_flattens_to_mid_gray() -> None:
    result = np.asarray(adjust(_random_image(), contrast=0.0))
    assert (result[..., :3] == 128).all()


def test_hue_rotation_moves_red_to_green() -> None:
    red = Image.new("RGBA", (2, 2), (255, 0, 0, 255))
    assert adjust(red, hue=120).getpixel((0, 0)) == (0, 255, 0, 255)
    assert adjust(red, hue=-240).getpixel((0, 0)) == (0, 255, 0, 255)


def test_zero_saturation_produces_gray() -> None:
    result = np.asarray(adjust(_random_image(), saturation=0.0)).astype(int)
    assert (result[..., 0] == result[..., 1]).all()
    assert (result[..., 1] == result[..., 2]).all()


def test_brightness_clamps_to_channel_range() -> None:
    image = Image.new("RGBA", (1, 1), (200, 100, 0, 255))
    assert adjust(image, brightness=2.0).getpixel((0, 0)) == (255, 200, 0, 255)
    assert adjust(image, brightness=0.0).getpixel((0, 0)) == (0, 0, 0, 255)


def test_apply_adjustments_uses_settings_block() -> None:
    image = _random_image(seed=8)
    result = apply_adjustments(image, Adjustments(invert=True))
    expected = 255 - np.asarray(image)[..., :3].astype(int)
    np.testing.assert_array_equal(np.asarray(result)[..., :3], expected)
