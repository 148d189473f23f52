from __future__ import annotations

from typing import Tuple

from pixelpad.buffer import PixelBuffer


ANCHORS = (
    "top-left",
    "top-center",
    "top-right",
    "middle-left",
    "middle-center",
    "middle-right",
    "bottom-left",
    "bottom-center",
    "bottom-right",
)


def _copy_pixel(src: PixelBuffer, sx: int, sy: int, dst: PixelBuffer, dx: int, dy: int) -> None:
    si = (sy * src.width + sx) * 4
    di = (dy * dst.width + dx) * 4
    dst.data[di:di + 4] = src.data[si:si + 4]


def flip_horizontal(buffer: PixelBuffer) -> PixelBuffer:
    result = PixelBuffer(buffer.width, buffer.height)
    for y in range(buffer.height):
        for x in range(buffer.width):
            _copy_pixel(buffer, x, y, result, buffer.width - 1 - x, y)
    return result


def flip_vertical(buffer: PixelBuffer) -> PixelBuffer:
    result = PixelBuffer(buffer.width, buffer.height)
    row = buffer.width * 4
    for y in range(buffer.height):
        dst = (buffer.height - 1 - y) * row
        result.data[dst:dst + row] = buffer.data[y * row:(y + 1) * row]
    return result


def rotate_cw(buffer: PixelBuffer) -> PixelBuffer:
    result = PixelBuffer(buffer.height, buffer.width)
    for y in range(buffer.height):
        for x in range(buffer.width):
            _copy_pixel(buffer, x, y, result, buffer.height - 1 - y, x)
    return result


def rotate_ccw(buffer: PixelBuffer) -> PixelBuffer:
    result = PixelBuffer(buffer.height, buffer.width)
    for y in range(buffer.height):
        for x in range(buffer.width):
            _copy_pixel(buffer, x, y, result, y, buffer.width - 1 - x)
    return result


def anchor_offset(old_size: Tuple[int, int], new_size: Tuple[int, int], anchor: str) -> Tuple[int, int]:
    if anchor not in ANCHORS:
        raise ValueError(f"Unknown resize anchor: {anchor}")
    vertical, horizontal = anchor.split("-")
    dw = new_size[0] - old_size[0]
    dh = new_size[1] - old_size[1]
    offset_x = {"left": 0, "center": dw // 2, "right": dw}[horizontal]
    offset_y = {"top": 0, "middle": dh // 2, "bottom": dh}[vertical]
    return offset_x, offset_y


def resize_canvas(buffer: PixelBuffer, width: int, height: int, anchor: str = "top-left") -> PixelBuffer:
    """Place the old pixels on a transparent canvas of the new size; overflow is cropped."""
    offset_x, offset_y = anchor_offset(buffer.size, (width, height), anchor)
    result = PixelBuffer(width, height)
    for y in range(buffer.height):
        ny = y + offset_y
        if ny < 0 or ny >= height:
            continue
        for x in range(buffer.width):
            nx = x + offset_x
            if 0 <= nx < width:
                _copy_pixel(buffer, x, y, result, nx, ny)
    return result
