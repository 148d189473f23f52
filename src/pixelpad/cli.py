"""Command line palette tools over PNG files."""

from __future__ import annotations

import argparse
import json
import os
import random
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import pygame

from pixelpad.buffer import PixelBuffer, color_to_hex
from pixelpad.config import load_config
from pixelpad.logging_setup import configure_logging, get_logger
from pixelpad.paths import ensure_directories, get_data_root
from pixelpad.quantize.extract import ALGORITHMS, ReducerOptions, count_unique_colors, extract_palette
from pixelpad.quantize.remap import reduce_image_palette
from pixelpad.session import MAX_COLOR_COUNT, MIN_COLOR_COUNT, clamp


logger = get_logger(__name__)


def _load_buffer(path: Path) -> Optional[PixelBuffer]:
    try:
        surface = pygame.image.load(str(path))
    except (pygame.error, OSError):
        logger.warning("could not load %s", path, extra={"event": "load_failed"})
        return None
    return PixelBuffer.from_surface(surface)


def _save_buffer_atomic(buffer: PixelBuffer, path: Path) -> None:
    # pygame picks the encoder from the extension; default to PNG.
    tmp_path = path.with_name(path.name + ".tmp" + (path.suffix or ".png"))
    pygame.image.save(buffer.to_surface(), str(tmp_path))
    os.replace(tmp_path, path)


def _options(args: argparse.Namespace, reducer_cfg: Dict[str, Any]) -> ReducerOptions:
    color_count = args.colors if args.colors is not None else reducer_cfg.get("color_count", 16)
    dithering = bool(getattr(args, "dither", False) or reducer_cfg.get("dithering", False))
    return ReducerOptions(
        color_count=clamp(int(color_count), MIN_COLOR_COUNT, MAX_COLOR_COUNT),
        algorithm=args.algorithm or reducer_cfg.get("algorithm", "median-cut"),
        dithering=dithering,
    )


def _rng(args: argparse.Namespace) -> random.Random:
    return random.Random(args.seed)


def cmd_reduce(args: argparse.Namespace) -> int:
    buffer = _load_buffer(Path(args.input))
    if buffer is None:
        print(f"error: cannot read image {args.input}", file=sys.stderr)
        return 1
    options = _options(args, args.config.get("reducer", {}))
    reduced = reduce_image_palette(buffer, options, rng=_rng(args))
    output = Path(args.output)
    _save_buffer_atomic(reduced, output)
    logger.info(
        "reduced %s to %d colors",
        args.input,
        count_unique_colors(reduced),
        extra={"event": "reduce"},
    )
    return 0


def cmd_palette(args: argparse.Namespace) -> int:
    buffer = _load_buffer(Path(args.input))
    if buffer is None:
        print(f"error: cannot read image {args.input}", file=sys.stderr)
        return 1
    options = _options(args, args.config.get("reducer", {}))
    palette = extract_palette(buffer, options, rng=_rng(args))
    print(json.dumps([color_to_hex(color) for color in palette]))
    return 0


def cmd_count(args: argparse.Namespace) -> int:
    buffer = _load_buffer(Path(args.input))
    if buffer is None:
        print(f"error: cannot read image {args.input}", file=sys.stderr)
        return 1
    print(count_unique_colors(buffer))
    return 0


def _add_palette_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--colors", type=int, default=None, help="Target palette size (2-256)")
    parser.add_argument("--algorithm", choices=ALGORITHMS, default=None)
    parser.add_argument("--seed", type=int, default=None, help="Seed for k-means initialisation")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pixelpad", description="Pixel art palette tools")
    sub = parser.add_subparsers(dest="command", required=True)

    reduce_cmd = sub.add_parser("reduce", help="Reduce an image to a smaller palette")
    reduce_cmd.add_argument("input")
    reduce_cmd.add_argument("output")
    _add_palette_args(reduce_cmd)
    reduce_cmd.add_argument("--dither", action="store_true", help="Apply Floyd-Steinberg dithering")
    reduce_cmd.set_defaults(func=cmd_reduce)

    palette_cmd = sub.add_parser("palette", help="Print the extracted palette as hex colors")
    palette_cmd.add_argument("input")
    _add_palette_args(palette_cmd)
    palette_cmd.set_defaults(func=cmd_palette)

    count_cmd = sub.add_parser("count", help="Count unique opaque colors")
    count_cmd.add_argument("input")
    count_cmd.set_defaults(func=cmd_count)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    config = load_config()
    log_cfg = config.get("logging", {})
    data_root = get_data_root(config)
    try:
        dirs = ensure_directories(data_root)
    except OSError as exc:
        print(f"error: cannot create data directory {data_root}: {exc}", file=sys.stderr)
        return 1
    configure_logging(
        dirs["logs"],
        level=log_cfg.get("level", "INFO"),
        keep_files=int(log_cfg.get("keep_files", 7)),
        console=bool(log_cfg.get("console", False)),
    )
    args.config = config
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
