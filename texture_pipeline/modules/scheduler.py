"""Render job scheduling where the newest configuration always wins.

Each submitted configuration becomes a job holding its own
:class:`RenderToken`. Submitting a new configuration supersedes every
earlier token. Jobs are never interrupted; a superseded job that finishes
has its maps closed and discarded instead of being applied.
"""
from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from ..core.config import RenderOptions, TextureConfig, validate_config
from .assets import AssetResolver
from .pipeline import TextureMaps, generate_texture_maps, resolve_assets

LOGGER = logging.getLogger("texture_pipeline.scheduler")

ResultCallback = Callable[[TextureMaps], None]


class RenderToken:
    """Cancellation token owned by one render job."""

    def __init__(self, generation: int) -> None:
        self.generation = generation
        self._superseded = threading.Event()

    def supersede(self) -> None:
        self._superseded.set()

    @property
    def superseded(self) -> bool:
        return self._superseded.is_set()

    def __repr__(self) -> str:
        return f"RenderToken(generation={self.generation}, superseded={self.superseded})"


@dataclass
class RenderJob:
    config: TextureConfig
    token: RenderToken
    future: concurrent.futures.Future

    def result(self, timeout: Optional[float] = None) -> Optional[TextureMaps]:
        """Maps applied by this job, ``None`` if it was discarded.

        Configuration and allocation errors are re-raised here.
        """

        return self.future.result(timeout=timeout)

    def done(self) -> bool:
        return self.future.done()


class RenderScheduler:
    """Run render jobs in the background and apply only the newest result."""

    def __init__(
        self,
        resolver: Optional[AssetResolver] = None,
        options: Optional[RenderOptions] = None,
        *,
        on_result: Optional[ResultCallback] = None,
        max_workers: int = 2,
    ) -> None:
        self.resolver = resolver or AssetResolver()
        self.options = options or RenderOptions()
        self.on_result = on_result
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="texture-render"
        )
        self._lock = threading.RLock()
        self._callback_lock = threading.Lock()
        self._generation = 0
        self._latest: Optional[RenderToken] = None
        self._current: Optional[TextureMaps] = None
        self._current_generation = 0

    @property
    def current(self) -> Optional[TextureMaps]:
        with self._lock:
            return self._current

    @property
    def current_generation(self) -> int:
        with self._lock:
            return self._current_generation

    def submit(self, config: TextureConfig) -> RenderJob:
        """Start a render for *config*, superseding every job still in flight."""

        with self._lock:
            self._generation += 1
            token = RenderToken(self._generation)
            if self._latest is not None:
                self._latest.supersede()
            self._latest = token
        LOGGER.debug("Submitting render generation %d", token.generation)
        future = self._executor.submit(self._run, config, token)
        return RenderJob(config, token, future)

    def _run(self, config: TextureConfig, token: RenderToken) -> Optional[TextureMaps]:
        validate_config(config, self.options)
        stencil, material = resolve_assets(config, self.resolver)
        try:
            if token.superseded:
                LOGGER.debug("Generation %d superseded after asset resolution; skipping rasterization", token.generation)
                return None
            maps = generate_texture_maps(config, stencil, material, self.options)
        finally:
            stencil.image.close()
            if material is not None:
                material.close()
        return self._apply(token, maps)

    def _apply(self, token: RenderToken, maps: TextureMaps) -> Optional[TextureMaps]:
        with self._lock:
            applied = token is self._latest and not token.superseded
            if applied:
                self._current = maps
                self._current_generation = token.generation
        if not applied:
            LOGGER.debug("Discarding stale render generation %d", token.generation)
            maps.close()
            return None
        if self.on_result is not None:
            # Callbacks run outside the state lock; a newer result may land first.
            with self._callback_lock:
                if self.current_generation == token.generation:
                    self.on_result(maps)
        return maps

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RenderScheduler":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


__all__ = ["RenderJob", "RenderScheduler", "RenderToken"]
