from __future__ import annotations

from typing import Iterator, List, Sequence

from pixelpad.buffer import PixelBuffer, Point, round_half_up
from pixelpad.raster.brush import Brush, stamp_brush


def line_points(x0: int, y0: int, x1: int, y1: int) -> Iterator[Point]:
    """Integer Bresenham walk from (x0, y0) to (x1, y1), both ends included."""
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy
    x, y = x0, y0
    while True:
        yield x, y
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x += sx
        if e2 < dx:
            err += dx
            y += sy


def stroke_to(
    buffer: PixelBuffer,
    brush: Brush,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    *,
    erase: bool = False,
) -> None:
    for x, y in line_points(x0, y0, x1, y1):
        stamp_brush(buffer, brush, x, y, erase=erase)


def stroke(buffer: PixelBuffer, brush: Brush, points: Sequence[Point], *, erase: bool = False) -> None:
    """Stamp a sampled freehand stroke with no gaps between samples."""
    if not points:
        return
    if len(points) == 1:
        stamp_brush(buffer, brush, points[0][0], points[0][1], erase=erase)
        return
    for start, end in zip(points, points[1:]):
        stroke_to(buffer, brush, start[0], start[1], end[0], end[1], erase=erase)


def draw_line(buffer: PixelBuffer, brush: Brush, p0: Point, p1: Point, *, erase: bool = False) -> None:
    stroke_to(buffer, brush, p0[0], p0[1], p1[0], p1[1], erase=erase)


def draw_rectangle_outline(buffer: PixelBuffer, brush: Brush, p0: Point, p1: Point) -> None:
    min_x, max_x = min(p0[0], p1[0]), max(p0[0], p1[0])
    min_y, max_y = min(p0[1], p1[1]), max(p0[1], p1[1])
    stroke_to(buffer, brush, min_x, min_y, max_x, min_y)
    stroke_to(buffer, brush, min_x, max_y, max_x, max_y)
    stroke_to(buffer, brush, min_x, min_y, min_x, max_y)
    stroke_to(buffer, brush, max_x, min_y, max_x, max_y)


def ellipse_points(p0: Point, p1: Point) -> List[Point]:
    """Boundary points of the ellipse inscribed in the box p0-p1.

    Two-region midpoint algorithm, four reflected points per step. Points may
    repeat where quadrants meet. A box thinner than 2px collapses to its centre.
    """
    x0, y0 = p0
    x1, y1 = p1
    cx = (x0 + x1) // 2
    cy = (y0 + y1) // 2
    rx = abs(x1 - x0) / 2
    ry = abs(y1 - y0) / 2

    if rx < 1 or ry < 1:
        return [(cx, cy)]

    points: List[Point] = []

    def plot(x: int, y: float) -> None:
        yi = round_half_up(y)
        points.extend(((cx + x, cy + yi), (cx - x, cy + yi), (cx + x, cy - yi), (cx - x, cy - yi)))

    rx2 = rx * rx
    ry2 = ry * ry
    x = 0
    y = ry
    px = 0.0
    py = 2 * rx2 * y

    plot(x, y)

    # Region 1: slope shallower than -1.
    p1 = ry2 - rx2 * ry + 0.25 * rx2
    while px < py:
        x += 1
        px += 2 * ry2
        if p1 < 0:
            p1 += ry2 + px
        else:
            y -= 1
            py -= 2 * rx2
            p1 += ry2 + px - py
        plot(x, y)

    # Region 2
    p2 = ry2 * (x + 0.5) ** 2 + rx2 * (y - 1) ** 2 - rx2 * ry2
    while y > 0:
        y -= 1
        py -= 2 * rx2
        if p2 > 0:
            p2 += rx2 - py
        else:
            x += 1
            px += 2 * ry2
            p2 += rx2 - py + px
        plot(x, y)

    return points


def draw_ellipse_outline(buffer: PixelBuffer, brush: Brush, p0: Point, p1: Point) -> None:
    for x, y in ellipse_points(p0, p1):
        stamp_brush(buffer, brush, x, y)

