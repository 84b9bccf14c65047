"""Export helpers that write rendered maps to disk atomically."""
from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional

from PIL import Image

LOGGER = logging.getLogger("texture_pipeline.io")

TEMP_DIR_NAME = ".tmp_maps"

_DESTINATION_LOCKS: Dict[Path, threading.Lock] = {}
_DESTINATION_GUARD = threading.Lock()


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def _destination_lock(target: Path) -> threading.Lock:
    with _DESTINATION_GUARD:
        return _DESTINATION_LOCKS.setdefault(target.resolve(), threading.Lock())


class MapWriter:
    """Write map images into one export directory.

    Each image is saved to a scratch file under ``.tmp_maps`` first and then
    moved over the destination, so a reader never sees a half written PNG.
    Concurrent writers targeting the same file are serialized.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = ensure_dir(Path(directory))
        self._scratch = self.directory / TEMP_DIR_NAME

    def path_for(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid map name: {name!r}")
        return self.directory / f"{name}.png"

    def write(self, name: str, image: Image.Image, *, format: Optional[str] = None) -> Path:
        destination = self.path_for(name)
        ensure_dir(self._scratch)
        scratch = self._scratch / f"{destination.name}.{threading.get_ident()}.tmp"
        with _destination_lock(destination):
            try:
                image.save(scratch, format=format or "PNG")
                os.replace(scratch, destination)
            finally:
                if scratch.exists():
                    scratch.unlink()
        LOGGER.debug("Saved %s (%dx%d %s)", destination, image.width, image.height, image.mode)
        return destination

    def cleanup(self) -> None:
        """Remove the scratch directory when nothing is left in it."""

        try:
            self._scratch.rmdir()
        except OSError:
            pass


def save_images(images: Mapping[str, Image.Image], directory: Path | str) -> Dict[str, Path]:
    """Persist each named image as ``<name>.png`` inside *directory*."""

    writer = MapWriter(directory)
    try:
        return {name: writer.write(name, image) for name, image in images.items()}
    finally:
        writer.cleanup()


__all__ = ["MapWriter", "ensure_dir", "save_images"]
