"""Error taxonomy for the texture synthesis pipeline."""
from __future__ import annotations


class TexturePipelineError(Exception):
    """Base class for every error raised by the pipeline."""


class AssetUnavailable(TexturePipelineError):
    """A stencil or material asset could not be resolved."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Asset unavailable: {url} ({reason})")
        self.url = url
        self.reason = reason


class InvalidConfiguration(TexturePipelineError):
    """The texture configuration cannot be rendered."""


class SurfaceAllocationFailure(TexturePipelineError):
    """An output raster of the requested size could not be allocated."""


__all__ = [
    "AssetUnavailable",
    "InvalidConfiguration",
    "SurfaceAllocationFailure",
    "TexturePipelineError",
]
