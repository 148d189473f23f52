from __future__ import annotations

import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple

from pixelpad.buffer import Color, PixelBuffer, round_half_up, to_color


Offset = Tuple[int, int]

BRUSH_SHAPES = ("square", "circle", "diamond", "horizontal", "vertical", "slash", "backslash")
MIN_BRUSH_SIZE = 1
MAX_BRUSH_SIZE = 32


@dataclass(frozen=True)
class Brush:
    shape: str = "square"
    size: int = 1
    color: Color = (0, 0, 0, 255)
    opacity: float = 1.0

    def __post_init__(self) -> None:
        if self.shape not in BRUSH_SHAPES:
            raise ValueError(f"Unknown brush shape: {self.shape}")
        object.__setattr__(self, "color", to_color(self.color))

    @property
    def alpha(self) -> int:
        return round_half_up(self.opacity * 255)

    @property
    def footprint(self) -> Tuple[Offset, ...]:
        return brush_footprint(self.shape, self.size)


@lru_cache(maxsize=None)
def brush_footprint(shape: str, size: int) -> Tuple[Offset, ...]:
    """Resolve a brush to its offsets around the stamp centre.

    Both axes span ``range(-half, size - half)``. Callers clamp ``size`` to
    [1, 32] before asking; nothing here re-validates it.
    """
    half = size // 2
    span = range(-half, size - half)
    # Continuous centre of the span, measured against pixel centres (d + 0.5).
    # Odd sizes centre on pixel 0, even sizes on the corner between -1 and 0.
    center = size / 2 - half

    if shape == "square":
        offsets = [(dx, dy) for dy in span for dx in span]
    elif shape == "circle":
        radius = size / 2
        offsets = [
            (dx, dy)
            for dy in span
            for dx in span
            if math.hypot(dx + 0.5 - center, dy + 0.5 - center) <= radius
        ]
    elif shape == "diamond":
        offsets = [
            (dx, dy)
            for dy in span
            for dx in span
            if abs(dx + 0.5 - center) + abs(dy + 0.5 - center) <= half
        ]
    elif shape == "horizontal":
        offsets = [(dx, 0) for dx in span]
    elif shape == "vertical":
        offsets = [(0, dy) for dy in span]
    elif shape == "slash":
        offsets = [(i, -i) for i in span]
    elif shape == "backslash":
        offsets = [(i, i) for i in span]
    else:
        raise ValueError(f"Unknown brush shape: {shape}")
    return tuple(offsets)


def stamp_brush(buffer: PixelBuffer, brush: Brush, x: int, y: int, *, erase: bool = False) -> None:
    # Overwrite, not composite: opacity only sets the alpha that gets written,
    # so overlapping stamps never build up.
    if erase:
        value = bytes(4)
    else:
        r, g, b, _ = brush.color
        value = bytes((r, g, b, brush.alpha))
    width, height = buffer.width, buffer.height
    data = buffer.data
    for dx, dy in brush.footprint:
        px = x + dx
        py = y + dy
        if px < 0 or py < 0 or px >= width or py >= height:
            continue
        i = (py * width + px) * 4
        data[i:i + 4] = value
