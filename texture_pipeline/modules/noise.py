"""Random surface noise shared by the displacement and roughness builders."""
from __future__ import annotations

import random
from typing import Dict, Optional, Sequence

import numpy as np


def ensure_rng(rng: Optional[random.Random | np.random.Generator | int] = None) -> np.random.Generator:
    """Normalise RNG input (seed, stdlib Random, numpy Generator or None) to a numpy Generator."""

    if isinstance(rng, np.random.Generator):
        return rng
    if isinstance(rng, random.Random):
        return np.random.default_rng(rng.randint(0, 2**32 - 1))
    if rng is None or isinstance(rng, (int, np.integer)):
        return np.random.default_rng(rng)
    raise TypeError(f"Unsupported RNG type: {type(rng)!r}")


def spawn_generators(seed: Optional[int], names: Sequence[str]) -> Dict[str, np.random.Generator]:
    """Independent generators per name, so results do not depend on execution order."""

    children = np.random.SeedSequence(seed).spawn(len(names))
    return {name: np.random.default_rng(child) for name, child in zip(names, children)}


def add_uniform_noise(surface: np.ndarray, intensity: float, rng: np.random.Generator) -> np.ndarray:
    """Add ``(u - 0.5) * intensity * 255`` per pixel in place and clamp to [0, 255].

    An *intensity* of 0.05 perturbs each pixel by at most ±2.5% of the range.
    """

    if intensity > 0:
        noise = (rng.random(surface.shape[:2], dtype=np.float32) - 0.5) * (intensity * 255.0)
        if surface.ndim == 3:
            noise = noise[..., None]
        surface += noise
    np.clip(surface, 0.0, 255.0, out=surface)
    return surface


__all__ = ["add_uniform_noise", "ensure_rng", "spawn_generators"]
