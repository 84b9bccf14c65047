"""Command line interface for rendering texture maps from a configuration file."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Sequence

from .core import config
from .core.errors import InvalidConfiguration, SurfaceAllocationFailure

LOGGER = logging.getLogger("texture_pipeline.main_render")


class BoolAction(argparse.Action):
    """Robust boolean flag parser supporting affirmative and negative forms."""

    def __call__(self, parser, namespace, values, option_string=None):  # type: ignore[override]
        if values is None:
            setattr(namespace, self.dest, True)
            return
        normalized = str(values).strip().lower()
        if normalized in {"1", "y", "yes", "t", "true", "on"}:
            setattr(namespace, self.dest, True)
        elif normalized in {"0", "n", "no", "f", "false", "off"}:
            setattr(namespace, self.dest, False)
        else:
            raise argparse.ArgumentTypeError(f"Invalid boolean for {option_string}: {values!r}")


def _configure_logging(log_path: Path) -> None:
    log_path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S")
    file_handler = logging.FileHandler(log_path, encoding="utf-8", delay=True)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    logging.basicConfig(level=logging.INFO, handlers=[file_handler, console_handler])


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tile texture and PBR map generator")
    parser.add_argument("--config", type=Path, default=None, help="JSON texture configuration (editor format)")
    parser.add_argument("--output", type=Path, default=config.PATH_OUTPUT, help="Directory to write the maps")
    parser.add_argument("--width", type=int, default=config.OUTPUT_WIDTH, help="Output width in pixels")
    parser.add_argument("--height", type=int, default=config.OUTPUT_HEIGHT, help="Output height in pixels")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for the surface noise")
    parser.add_argument("--threads", type=int, default=3, help="Number of map worker threads")
    parser.add_argument("--normal-strength", type=float, default=1.0, help="Z component used for normals")
    parser.add_argument(
        "--joint-grid",
        nargs="?",
        default=False,
        action=BoolAction,
        help="Carve joint bands into the displacement map as a flat grid (default: false)",
    )
    parser.add_argument(
        "--no-joint-grid",
        dest="joint_grid",
        action="store_false",
        help="Let displacement follow the stencil only",
    )
    parser.add_argument("--log-file", type=Path, default=config.LOG_FILE, help="Log file location")
    return parser.parse_args(argv)


def build_render_options(args: argparse.Namespace) -> config.RenderOptions:
    overrides: Dict[str, object] = {
        "output_width": args.width,
        "output_height": args.height,
        "seed": args.seed,
        "threads": args.threads,
        "normal_strength": args.normal_strength,
        "joint_grid_displacement": args.joint_grid,
    }
    return config.build_options(overrides)


def load_texture_config(path: Optional[Path]) -> config.TextureConfig:
    if path is None:
        return config.TextureConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfiguration(f"Cannot read configuration {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfiguration(f"Configuration {path} must be a JSON object")
    return config.config_from_mapping(data)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    _configure_logging(args.log_file)
    from .modules.pipeline import render_texture_maps, save_texture_maps

    try:
        texture_config = load_texture_config(args.config)
        options = build_render_options(args)
        maps = render_texture_maps(texture_config, options=options)
    except (InvalidConfiguration, SurfaceAllocationFailure) as exc:
        LOGGER.error("Render failed: %s", exc)
        return 2
    written = save_texture_maps(maps, args.output)
    for name, path in written.items():
        LOGGER.info("Wrote %s map -> %s", name, path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
