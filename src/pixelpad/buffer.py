from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterator, Sequence, Tuple, Union

import pygame


Color = Tuple[int, int, int, int]
Point = Tuple[int, int]

TRANSPARENT: Color = (0, 0, 0, 0)


def round_half_up(value: float) -> int:
    # Python's round() is banker's rounding; pixel maths needs .5 to go up.
    return int(math.floor(value + 0.5))


def to_color(value: Union[Sequence[int], str]) -> Color:
    """Normalise an RGB/RGBA sequence or a ``#rrggbb[aa]`` string into an RGBA tuple."""
    if isinstance(value, str):
        text = value.lstrip("#")
        if len(text) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        channels = [int(text[i:i + 2], 16) for i in range(0, len(text), 2)]
    else:
        channels = [int(c) for c in value]
    if len(channels) == 3:
        channels.append(255)
    if len(channels) != 4:
        raise ValueError(f"Color needs 3 or 4 channels, got {len(channels)}")
    return tuple(max(0, min(255, c)) for c in channels)  # type: ignore[return-value]


def color_to_hex(color: Sequence[int]) -> str:
    return "#" + "".join(f"{c:02x}" for c in color[:3])


@dataclass
class PixelBuffer:
    """Dense row-major RGBA raster, four bytes per pixel."""

    width: int
    height: int
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Buffer dimensions must be positive, got {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if not self.data:
            self.data = bytearray(expected)
        elif len(self.data) != expected:
            raise ValueError(f"Buffer data has {len(self.data)} bytes, expected {expected}")
        else:
            self.data = bytearray(self.data)

    @classmethod
    def blank(cls, width: int, height: int, color: Sequence[int] = TRANSPARENT) -> "PixelBuffer":
        buffer = cls(width, height)
        fill = bytes(to_color(color))
        if fill != bytes(4):
            buffer.data[:] = fill * (width * height)
        return buffer

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Sequence[int]]]) -> "PixelBuffer":
        height = len(rows)
        width = len(rows[0]) if rows else 0
        buffer = cls(width, height)
        for y, row in enumerate(rows):
            for x, color in enumerate(row):
                buffer.set_pixel(x, y, to_color(color))
        return buffer

    @classmethod
    def from_surface(cls, surface: pygame.Surface) -> "PixelBuffer":
        width, height = surface.get_size()
        return cls(width, height, bytearray(pygame.image.tobytes(surface, "RGBA")))

    def to_surface(self) -> pygame.Surface:
        return pygame.image.frombytes(bytes(self.data), (self.width, self.height), "RGBA")

    @property
    def size(self) -> Point:
        return self.width, self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_pixel(self, x: int, y: int) -> Color:
        i = (y * self.width + x) * 4
        d = self.data
        return d[i], d[i + 1], d[i + 2], d[i + 3]

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        if not self.in_bounds(x, y):
            return
        i = (y * self.width + x) * 4
        self.data[i:i + 4] = bytes(color)

    def pixels(self) -> Iterator[Color]:
        d = self.data
        for i in range(0, len(d), 4):
            yield d[i], d[i + 1], d[i + 2], d[i + 3]

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, bytearray(self.data))
