from __future__ import annotations

from typing import Optional, Sequence, Set

from pixelpad.buffer import Color, PixelBuffer, Point, to_color


def flood_fill(buffer: PixelBuffer, x: int, y: int, color: Sequence[int]) -> int:
    """Fill the 4-connected region of the seed's colour and return how many pixels changed."""
    if not buffer.in_bounds(x, y):
        return 0
    fill = to_color(color)
    target = buffer.get_pixel(x, y)
    if target == fill:
        return 0

    width, height = buffer.width, buffer.height
    data = buffer.data
    target_bytes = bytes(target)
    fill_bytes = bytes(fill)
    visited: Set[Point] = set()
    stack = [(x, y)]
    while stack:
        cx, cy = stack.pop()
        if (cx, cy) in visited:
            continue
        if cx < 0 or cy < 0 or cx >= width or cy >= height:
            continue
        i = (cy * width + cx) * 4
        if data[i:i + 4] != target_bytes:
            continue
        visited.add((cx, cy))
        data[i:i + 4] = fill_bytes
        stack.append((cx + 1, cy))
        stack.append((cx - 1, cy))
        stack.append((cx, cy + 1))
        stack.append((cx, cy - 1))
    return len(visited)


def pick_color(buffer: PixelBuffer, x: int, y: int) -> Optional[Color]:
    if not buffer.in_bounds(x, y):
        return None
    return buffer.get_pixel(x, y)
