"""Generate tangent-space normal maps from height maps."""
from __future__ import annotations

import numpy as np
from PIL import Image
from scipy import ndimage

_CENTRAL_DIFFERENCE = np.array([-0.5, 0.0, 0.5])


def generate(height_map: Image.Image, strength: float = 1.0) -> Image.Image:
    """Create an RGBA normal map (R=X, G=Y, B=Z) from *height_map*.

    Gradients are central differences of the height normalized to [0, 1],
    with border pixels repeated rather than wrapped. *strength* is the Z
    component before normalization; lower values give steeper-looking
    surfaces. A flat height map yields ``(128, 128, 255, 255)`` everywhere.
    """
    if strength <= 0:
        raise ValueError(f"strength must be positive, got {strength!r}")

    heights = np.asarray(height_map.convert("L"), dtype=np.float64) / 255.0

    dx = ndimage.correlate1d(heights, _CENTRAL_DIFFERENCE, axis=1, mode="nearest")
    dy = ndimage.correlate1d(heights, _CENTRAL_DIFFERENCE, axis=0, mode="nearest")
    dz = np.full_like(heights, float(strength))

    length = np.sqrt(dx**2 + dy**2 + dz**2)
    vectors = np.stack([dx / length, dy / length, dz / length], axis=-1)

    # remap from [-1,1] → [0,255]
    rgb = np.clip(np.rint((vectors * 0.5 + 0.5) * 255.0), 0, 255).astype(np.uint8)
    alpha = np.full(heights.shape, 255, dtype=np.uint8)
    return Image.fromarray(np.dstack([rgb, alpha]), mode="RGBA")


if __name__ == "__main__":  # pragma: no cover - manual smoke test
    sample = Image.linear_gradient("L").resize((64, 64))
    generate(sample).show()
