from __future__ import annotations

import random
from typing import List, Optional, Sequence

from pixelpad.buffer import Color, PixelBuffer, round_half_up
from pixelpad.logging_setup import get_logger
from pixelpad.quantize.extract import ReducerOptions, extract_palette
from pixelpad.quantize.nearest import find_nearest_color


logger = get_logger(__name__)

# (dx, dy, weight out of 16)
_DIFFUSION = ((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1))


def remap_colors(buffer: PixelBuffer, palette: Sequence[Color]) -> PixelBuffer:
    """Snap every opaque pixel's RGB to the nearest palette entry, keeping its alpha."""
    result = PixelBuffer(buffer.width, buffer.height)
    src = buffer.data
    out = result.data
    cache = {}
    for i in range(0, len(src), 4):
        a = src[i + 3]
        if a == 0:
            continue
        rgb = (src[i], src[i + 1], src[i + 2])
        nearest = cache.get(rgb)
        if nearest is None:
            nearest = find_nearest_color(rgb, palette)
            cache[rgb] = nearest
        out[i] = nearest[0]
        out[i + 1] = nearest[1]
        out[i + 2] = nearest[2]
        out[i + 3] = a
    return result


def floyd_steinberg(buffer: PixelBuffer, palette: Sequence[Color]) -> PixelBuffer:
    """Remap with Floyd-Steinberg error diffusion.

    Error is pushed into float working values of the right (7/16),
    bottom-left (3/16), bottom (5/16) and bottom-right (1/16) neighbours.
    Alpha is carried over untouched and transparent pixels stay zeroed.
    """
    width, height = buffer.width, buffer.height
    src = buffer.data
    working: List[List[float]] = [
        [float(src[i]), float(src[i + 1]), float(src[i + 2])] for i in range(0, len(src), 4)
    ]
    result = PixelBuffer(width, height)
    out = result.data

    for y in range(height):
        for x in range(width):
            idx = y * width + x
            i = idx * 4
            a = src[i + 3]
            if a == 0:
                continue

            clamped = [max(0, min(255, round_half_up(v))) for v in working[idx]]
            chosen = find_nearest_color(clamped, palette)
            out[i] = chosen[0]
            out[i + 1] = chosen[1]
            out[i + 2] = chosen[2]
            out[i + 3] = a

            error = [clamped[ch] - chosen[ch] for ch in range(3)]
            if error == [0, 0, 0]:
                continue
            for dx, dy, weight in _DIFFUSION:
                nx = x + dx
                ny = y + dy
                if nx < 0 or nx >= width or ny >= height:
                    continue
                target = working[ny * width + nx]
                for ch in range(3):
                    target[ch] += error[ch] * weight / 16
    return result


def reduce_image_palette(
    buffer: PixelBuffer,
    options: ReducerOptions,
    *,
    rng: Optional[random.Random] = None,
    palette: Optional[Sequence[Color]] = None,
) -> PixelBuffer:
    """Return a new buffer remapped onto a palette extracted from ``buffer``.

    Pass ``palette`` to skip extraction and remap onto a known palette.
    """
    if palette is None:
        palette = extract_palette(buffer, options, rng=rng)
    if not palette:
        return buffer.copy()
    logger.debug(
        "reducing %dx%d buffer to %d colors (%s, dithering=%s)",
        buffer.width,
        buffer.height,
        len(palette),
        options.algorithm,
        options.dithering,
    )
    if options.dithering:
        return floyd_steinberg(buffer, palette)
    return remap_colors(buffer, palette)
