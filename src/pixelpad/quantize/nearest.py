from __future__ import annotations

from typing import Sequence

from pixelpad.buffer import Color


def color_distance(a: Sequence[int], b: Sequence[int]) -> int:
    """Squared RGB distance; alpha is ignored."""
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return dr * dr + dg * dg + db * db


def rgba_distance(a: Sequence[int], b: Sequence[int]) -> int:
    da = a[3] - b[3]
    return color_distance(a, b) + da * da


def find_nearest_color(color: Sequence[int], palette: Sequence[Color]) -> Color:
    """Closest palette entry by RGB distance; the first entry wins ties."""
    best = palette[0]
    best_dist = color_distance(color, best)
    for candidate in palette[1:]:
        dist = color_distance(color, candidate)
        if dist < best_dist:
            best_dist = dist
            best = candidate
    return best
