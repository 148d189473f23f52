import math
import random

from pixelpad.buffer import PixelBuffer
from pixelpad.raster.brush import Brush
from pixelpad.raster.shapes import (
    draw_ellipse_outline,
    draw_line,
    draw_rectangle_outline,
    ellipse_points,
    line_points,
    stroke,
    stroke_to,
)


def _painted(buffer):
    return {(x, y) for y in range(buffer.height) for x in range(buffer.width) if buffer.get_pixel(x, y)[3]}


def test_horizontal_line_with_one_pixel_brush():
    buffer = PixelBuffer(6, 3)
    draw_line(buffer, Brush(color=(0, 0, 0)), (0, 0), (3, 0))
    assert _painted(buffer) == {(0, 0), (1, 0), (2, 0), (3, 0)}


def test_line_points_are_eight_connected_and_include_endpoints():
    rng = random.Random(7)
    for _ in range(200):
        x0, y0, x1, y1 = (rng.randint(-20, 20) for _ in range(4))
        path = list(line_points(x0, y0, x1, y1))
        assert path[0] == (x0, y0)
        assert path[-1] == (x1, y1)
        for (ax, ay), (bx, by) in zip(path, path[1:]):
            assert max(abs(ax - bx), abs(ay - by)) == 1


def test_line_to_same_point_is_single_point():
    assert list(line_points(4, 4, 4, 4)) == [(4, 4)]


def test_steep_line_visits_every_row():
    path = list(line_points(0, 0, 2, 6))
    assert [y for _, y in path] == list(range(7))


def test_stroke_has_no_gaps_between_samples():
    buffer = PixelBuffer(8, 8)
    stroke(buffer, Brush(), [(0, 0), (5, 0), (5, 3)])
    assert _painted(buffer) == {(x, 0) for x in range(6)} | {(5, y) for y in range(4)}


def test_single_sample_stroke_stamps_once():
    buffer = PixelBuffer(4, 4)
    stroke(buffer, Brush(size=2), [(2, 2)])
    assert _painted(buffer) == {(1, 1), (2, 1), (1, 2), (2, 2)}


def test_stroke_to_can_erase():
    buffer = PixelBuffer.blank(5, 1, (9, 9, 9))
    stroke_to(buffer, Brush(), 1, 0, 3, 0, erase=True)
    assert [buffer.get_pixel(x, 0)[3] for x in range(5)] == [255, 0, 0, 0, 255]


def test_stroke_partly_off_canvas_is_clipped():
    buffer = PixelBuffer(4, 4)
    stroke_to(buffer, Brush(), -3, 1, 6, 1)
    assert _painted(buffer) == {(x, 1) for x in range(4)}


def test_rectangle_outline_from_either_corner():
    for p0, p1 in (((0, 0), (3, 2)), ((3, 2), (0, 0)), ((0, 2), (3, 0))):
        buffer = PixelBuffer(5, 5)
        draw_rectangle_outline(buffer, Brush(), p0, p1)
        expected = {(x, y) for x in range(4) for y in range(3) if x in (0, 3) or y in (0, 2)}
        assert _painted(buffer) == expected


def test_rectangle_uses_brush_footprint():
    buffer = PixelBuffer(10, 10)
    draw_rectangle_outline(buffer, Brush(size=3), (2, 2), (7, 7))
    painted = _painted(buffer)
    assert (1, 1) in painted and (8, 8) in painted
    assert (4, 4) not in painted


def test_circle_outline_stays_within_one_pixel_of_radius():
    for radius in range(1, 11):
        box = (0, 0), (2 * radius, 2 * radius)
        for x, y in ellipse_points(*box):
            assert abs(math.hypot(x - radius, y - radius) - radius) <= 1


def test_radius_five_circle_points():
    points = set(ellipse_points((0, 0), (10, 10)))
    quadrant = {(x - 5, y - 5) for x, y in points if x >= 5 and y >= 5}
    assert quadrant == {(0, 5), (1, 5), (2, 5), (3, 4), (4, 3), (5, 2), (5, 1), (5, 0)}


def test_ellipse_points_are_symmetric():
    points = set(ellipse_points((0, 0), (12, 6)))
    assert {(12 - x, y) for x, y in points} == points
    assert {(x, 6 - y) for x, y in points} == points


def test_ellipse_respects_bounding_box():
    points = ellipse_points((0, 0), (12, 6))
    assert min(x for x, _ in points) == 0
    assert max(x for x, _ in points) == 12
    assert min(y for _, y in points) == 0
    assert max(y for _, y in points) == 6


def test_degenerate_ellipse_stamps_center():
    assert ellipse_points((3, 3), (3, 8)) == [(3, 5)]
    buffer = PixelBuffer(10, 10)
    draw_ellipse_outline(buffer, Brush(), (2, 2), (3, 9))
    assert _painted(buffer) == {(2, 5)}
