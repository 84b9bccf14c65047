"""Tests for the asset cache, resolver and material fallback."""
from __future__ import annotations

import pytest

pytest.importorskip("PIL")
from PIL import Image

from texture_pipeline.core.config import Material
from texture_pipeline.core.errors import AssetUnavailable
from texture_pipeline.modules.assets import (
    FALLBACK_MATERIAL_COLOR,
    FALLBACK_MATERIAL_SIZE,
    AssetCache,
    AssetResolver,
    load_material,
)


def test_cache_is_append_only() -> None:
    cache = AssetCache()
    assert cache.put("a", b"first") == b"first"
    assert cache.put("a", b"second") == b"first"
    assert cache.get("a") == b"first"
    assert "a" in cache
    assert len(cache) == 1


def test_resolver_reads_local_files_once(tmp_path) -> None:
    path = tmp_path / "asset.bin"
    path.write_bytes(b"payload")
    resolver = AssetResolver()
    assert resolver.fetch_bytes(str(path)) == b"payload"
    path.write_bytes(b"changed")
    assert resolver.fetch_bytes(str(path)) == b"payload"


def test_resolver_shares_cache_between_instances(tmp_path) -> None:
    path = tmp_path / "shared.bin"
    path.write_bytes(b"shared")
    cache = AssetCache()
    AssetResolver(cache).fetch_bytes(path.as_uri())
    assert path.as_uri() in cache


@pytest.mark.parametrize("url", ["", "ftp://example.com/pattern.svg"])
def test_resolver_rejects_unusable_urls(url: str) -> None:
    with pytest.raises(AssetUnavailable):
        AssetResolver().fetch_bytes(url)


def test_resolver_reports_missing_file(tmp_path) -> None:
    missing = str(tmp_path / "nope.png")
    with pytest.raises(AssetUnavailable) as excinfo:
        AssetResolver().fetch_bytes(missing)
    assert excinfo.value.url == missing


def test_fetch_raster_decodes_rgba(tmp_path) -> None:
    path = tmp_path / "material.png"
    Image.new("RGB", (12, 7), (10, 20, 30)).save(path)
    image = AssetResolver().fetch_raster(str(path))
    assert image.mode == "RGBA"
    assert image.size == (12, 7)
    assert image.getpixel((0, 0)) == (10, 20, 30, 255)


def test_fetch_raster_rejects_undecodable_bytes(tmp_path) -> None:
    path = tmp_path / "material.jpg"
    path.write_bytes(b"not a jpeg")
    with pytest.raises(AssetUnavailable):
        AssetResolver().fetch_raster(str(path))


def test_load_material_without_selection_returns_none() -> None:
    assert load_material(None, AssetResolver()) is None


def test_load_material_falls_back_to_gray(tmp_path) -> None:
    material = Material("ghost", "Ghost", image_url=str(tmp_path / "ghost.png"))
    image = load_material(material, AssetResolver())
    assert image.size == FALLBACK_MATERIAL_SIZE
    assert image.getpixel((0, 0)) == FALLBACK_MATERIAL_COLOR
