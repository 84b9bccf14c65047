"""Resolution of stencil and material assets by URL."""
from __future__ import annotations

import io
import logging
import threading
import urllib.error
import urllib.request
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import unquote, urlparse

from PIL import Image, UnidentifiedImageError

from ..core.config import Material
from ..core.errors import AssetUnavailable

LOGGER = logging.getLogger("texture_pipeline.assets")

USER_AGENT = "Mozilla/5.0"
FALLBACK_MATERIAL_SIZE = (200, 200)
FALLBACK_MATERIAL_COLOR = (204, 204, 204, 255)


class AssetCache:
    """Append-only cache of resolved asset bytes keyed by URL."""

    def __init__(self) -> None:
        self._entries: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def get(self, url: str) -> Optional[bytes]:
        with self._lock:
            return self._entries.get(url)

    def put(self, url: str, content: bytes) -> bytes:
        """Store *content* unless *url* is already cached; return the cached value."""

        with self._lock:
            return self._entries.setdefault(url, content)

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class AssetResolver:
    """Fetch raw asset bytes from HTTP(S) URLs or the local filesystem."""

    def __init__(self, cache: Optional[AssetCache] = None, *, timeout: float = 10.0) -> None:
        self.cache = cache if cache is not None else AssetCache()
        self.timeout = timeout

    def _http_get(self, url: str) -> bytes:
        request = urllib.request.Request(url, headers={"User-Agent": USER_AGENT}, method="GET")
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                status = getattr(response, "status", 200)
                if status != 200:
                    raise AssetUnavailable(url, f"HTTP {status}")
                return response.read()
        except urllib.error.HTTPError as exc:
            raise AssetUnavailable(url, f"HTTP {exc.code}") from exc
        except (urllib.error.URLError, OSError, ValueError) as exc:
            raise AssetUnavailable(url, str(exc)) from exc

    @staticmethod
    def _read_local(url: str) -> bytes:
        parsed = urlparse(url)
        path = Path(unquote(parsed.path)) if parsed.scheme == "file" else Path(url)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise AssetUnavailable(url, str(exc)) from exc

    def fetch_bytes(self, url: str) -> bytes:
        if not url:
            raise AssetUnavailable(str(url), "empty URL")
        cached = self.cache.get(url)
        if cached is not None:
            return cached
        scheme = urlparse(url).scheme.lower()
        if scheme in {"http", "https"}:
            content = self._http_get(url)
        elif scheme in {"", "file"} or len(scheme) == 1:  # single letter: Windows drive
            content = self._read_local(url)
        else:
            raise AssetUnavailable(url, f"unsupported scheme {scheme!r}")
        if not content:
            raise AssetUnavailable(url, "empty response")
        LOGGER.debug("Resolved %s (%d bytes)", url, len(content))
        return self.cache.put(url, content)

    def fetch_stencil(self, url: str) -> bytes:
        """Return the raw stencil source (SVG text or raster bytes)."""

        return self.fetch_bytes(url)

    def fetch_raster(self, url: str) -> Image.Image:
        """Return the decoded raster at *url* as a fully loaded RGBA image."""

        content = self.fetch_bytes(url)
        try:
            with Image.open(io.BytesIO(content)) as image:
                return image.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError) as exc:
            raise AssetUnavailable(url, f"undecodable raster: {exc}") from exc


def fallback_material() -> Image.Image:
    """Neutral gray raster used when a material photo cannot be resolved."""

    return Image.new("RGBA", FALLBACK_MATERIAL_SIZE, FALLBACK_MATERIAL_COLOR)


def load_material(material: Optional[Material], resolver: AssetResolver) -> Optional[Image.Image]:
    """Resolve the raster for *material*, substituting the fallback when unavailable."""

    if material is None:
        return None
    if not material.image_url:
        LOGGER.warning("Material %s has no image URL; using fallback raster", material.id)
        return fallback_material()
    try:
        return resolver.fetch_raster(material.image_url)
    except AssetUnavailable as exc:
        LOGGER.warning("Material %s unavailable (%s); using fallback raster", material.id, exc.reason)
        return fallback_material()


__all__ = ["AssetCache", "AssetResolver", "fallback_material", "load_material"]
