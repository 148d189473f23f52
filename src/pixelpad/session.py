"""Host-side adapter around the raster and quantize cores.

The cores trust their inputs: brush size must already sit in [1, 32],
opacity in [0, 1] and palette colour counts in [2, 256]. EditorSession is the
boundary that clamps UI values into those ranges before calling them.
"""

from __future__ import annotations

import random
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence

from pixelpad.buffer import Color, PixelBuffer, Point, to_color
from pixelpad.logging_setup import get_logger
from pixelpad.quantize.extract import ReducerOptions, count_unique_colors, extract_palette
from pixelpad.quantize.remap import reduce_image_palette
from pixelpad.raster.brush import MAX_BRUSH_SIZE, MIN_BRUSH_SIZE, Brush, stamp_brush
from pixelpad.raster.fill import flood_fill, pick_color
from pixelpad.raster.shapes import draw_ellipse_outline, draw_line, draw_rectangle_outline, stroke_to
from pixelpad import transform


TOOLS = ("pencil", "eraser", "fill", "eyedropper", "line", "rectangle", "ellipse")
SHAPE_TOOLS = {
    "line": draw_line,
    "rectangle": draw_rectangle_outline,
    "ellipse": draw_ellipse_outline,
}
MIN_COLOR_COUNT = 2
MAX_COLOR_COUNT = 256
DEFAULT_MAX_HISTORY = 50

logger = get_logger(__name__)

Listener = Callable[["EditEvent"], None]


def clamp(value, lo, hi):
    return max(lo, min(hi, value))


@dataclass
class EditEvent:
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Stroke:
    tool: str
    brush: Brush
    points: List[Point]


class History:
    """Capped list of buffer snapshots with a cursor for undo/redo."""

    def __init__(self, initial: PixelBuffer, limit: int = DEFAULT_MAX_HISTORY) -> None:
        self.limit = max(1, int(limit))
        self._entries: List[PixelBuffer] = [initial.copy()]
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def push(self, buffer: PixelBuffer) -> None:
        del self._entries[self._index + 1:]
        self._entries.append(buffer.copy())
        if len(self._entries) > self.limit:
            self._entries.pop(0)
        self._index = len(self._entries) - 1

    def undo(self) -> Optional[PixelBuffer]:
        if not self.can_undo:
            return None
        self._index -= 1
        return self._entries[self._index].copy()

    def redo(self) -> Optional[PixelBuffer]:
        if not self.can_redo:
            return None
        self._index += 1
        return self._entries[self._index].copy()


class EditorSession:
    def __init__(
        self,
        buffer: PixelBuffer,
        *,
        config: Optional[Dict[str, Any]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        config = config or {}
        editor_cfg = config.get("editor", {})
        brush_cfg = editor_cfg.get("brush", {})
        reducer_cfg = config.get("reducer", {})

        self.buffer = buffer
        self.rng = rng or random.Random()
        self.history = History(buffer, int(editor_cfg.get("max_history", DEFAULT_MAX_HISTORY)))
        self.current_tool = "pencil"
        self.brush = Brush(shape=str(brush_cfg.get("shape", "square")), color=to_color(brush_cfg.get("color", (0, 0, 0))))
        self.set_brush_size(brush_cfg.get("size", 1))
        self.set_opacity(brush_cfg.get("opacity", 1.0))
        self.reducer = ReducerOptions(
            color_count=clamp(int(reducer_cfg.get("color_count", 16)), MIN_COLOR_COUNT, MAX_COLOR_COUNT),
            algorithm=str(reducer_cfg.get("algorithm", "median-cut")),
            dithering=bool(reducer_cfg.get("dithering", False)),
        )

        self.current_stroke: Optional[Stroke] = None
        self.shape_start: Optional[Point] = None
        self.preview: Optional[PixelBuffer] = None

        self._events: Deque[EditEvent] = deque()
        self._listeners: List[Listener] = []

    # --- events ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def poll_events(self) -> List[EditEvent]:
        events = list(self._events)
        self._events.clear()
        return events

    def _publish(self, kind: str, **payload: Any) -> None:
        event = EditEvent(kind, payload)
        self._events.append(event)
        for listener in list(self._listeners):
            listener(event)

    # --- tool state ---

    def set_tool(self, tool: str) -> None:
        if tool not in TOOLS:
            raise ValueError(f"Unknown tool: {tool}")
        self.current_tool = tool
        self._publish("tool_changed", tool=tool)

    def set_color(self, color: Sequence[int]) -> None:
        self.brush = replace(self.brush, color=to_color(color))
        self._publish("color_changed", color=self.brush.color)

    def set_brush_shape(self, shape: str) -> None:
        self.brush = replace(self.brush, shape=shape)

    def set_brush_size(self, size: int) -> None:
        self.brush = replace(self.brush, size=clamp(int(size), MIN_BRUSH_SIZE, MAX_BRUSH_SIZE))

    def set_opacity(self, opacity: float) -> None:
        self.brush = replace(self.brush, opacity=clamp(float(opacity), 0.0, 1.0))

    def view(self) -> PixelBuffer:
        """What the display pipeline should upload right now."""
        return self.preview if self.preview is not None else self.buffer

    # --- pointer protocol (image coordinates) ---

    def pointer_down(self, x: int, y: int) -> None:
        tool = self.current_tool
        if tool == "eyedropper":
            picked = pick_color(self.buffer, x, y)
            if picked is not None:
                self.set_color(picked)
                self.set_tool("pencil")
            return
        if tool == "fill":
            r, g, b, _ = self.brush.color
            if flood_fill(self.buffer, x, y, (r, g, b, 255)):
                self._commit("fill", seed=(x, y))
            return
        if tool in SHAPE_TOOLS:
            self.shape_start = (x, y)
            self.preview = None
            return
        self.current_stroke = Stroke(tool=tool, brush=self.brush, points=[(x, y)])
        stamp_brush(self.buffer, self.brush, x, y, erase=tool == "eraser")

    def pointer_move(self, x: int, y: int) -> None:
        if self.current_stroke is not None:
            stroke = self.current_stroke
            last = stroke.points[-1]
            stroke_to(self.buffer, stroke.brush, last[0], last[1], x, y, erase=stroke.tool == "eraser")
            stroke.points.append((x, y))
            return
        if self.shape_start is not None:
            preview = self.buffer.copy()
            SHAPE_TOOLS[self.current_tool](preview, self.brush, self.shape_start, (x, y))
            self.preview = preview

    def pointer_up(self, x: int, y: int) -> None:
        if self.current_stroke is not None:
            stroke = self.current_stroke
            self.current_stroke = None
            self._commit(stroke.tool, points=len(stroke.points))
            return
        if self.shape_start is not None:
            start = self.shape_start
            self.shape_start = None
            self.preview = None
            SHAPE_TOOLS[self.current_tool](self.buffer, self.brush, start, (x, y))
            self._commit(self.current_tool, start=start, end=(x, y))

    def cancel(self) -> None:
        """Pointer left the canvas mid-gesture: keep freehand work, drop shape previews."""
        if self.current_stroke is not None:
            stroke = self.current_stroke
            self.current_stroke = None
            self._commit(stroke.tool, points=len(stroke.points))
        self.shape_start = None
        self.preview = None

    # --- whole-buffer operations ---

    def flip_horizontal(self) -> None:
        self._replace(transform.flip_horizontal(self.buffer), "flip_horizontal")

    def flip_vertical(self) -> None:
        self._replace(transform.flip_vertical(self.buffer), "flip_vertical")

    def rotate_cw(self) -> None:
        self._replace(transform.rotate_cw(self.buffer), "rotate_cw")

    def rotate_ccw(self) -> None:
        self._replace(transform.rotate_ccw(self.buffer), "rotate_ccw")

    def resize(self, width: int, height: int, anchor: str = "top-left") -> None:
        resized = transform.resize_canvas(self.buffer, max(1, int(width)), max(1, int(height)), anchor)
        self._replace(resized, "resize", anchor=anchor)

    def reducer_options(
        self,
        color_count: Optional[int] = None,
        algorithm: Optional[str] = None,
        dithering: Optional[bool] = None,
    ) -> ReducerOptions:
        return ReducerOptions(
            color_count=clamp(
                int(color_count if color_count is not None else self.reducer.color_count),
                MIN_COLOR_COUNT,
                MAX_COLOR_COUNT,
            ),
            algorithm=algorithm or self.reducer.algorithm,
            dithering=self.reducer.dithering if dithering is None else bool(dithering),
        )

    def preview_palette(self, color_count: Optional[int] = None, algorithm: Optional[str] = None) -> List[Color]:
        options = self.reducer_options(color_count, algorithm)
        return extract_palette(self.buffer, options, rng=self.rng)

    def reduce_palette(
        self,
        color_count: Optional[int] = None,
        algorithm: Optional[str] = None,
        dithering: Optional[bool] = None,
    ) -> None:
        options = self.reducer_options(color_count, algorithm, dithering)
        reduced = reduce_image_palette(self.buffer, options, rng=self.rng)
        self._replace(
            reduced,
            "reduce_palette",
            color_count=options.color_count,
            algorithm=options.algorithm,
            dithering=options.dithering,
        )

    def count_unique_colors(self) -> int:
        return count_unique_colors(self.buffer)

    # --- history ---

    def undo(self) -> bool:
        snapshot = self.history.undo()
        if snapshot is None:
            return False
        self.buffer = snapshot
        self._publish("undo", can_undo=self.history.can_undo, can_redo=self.history.can_redo)
        return True

    def redo(self) -> bool:
        snapshot = self.history.redo()
        if snapshot is None:
            return False
        self.buffer = snapshot
        self._publish("redo", can_undo=self.history.can_undo, can_redo=self.history.can_redo)
        return True

    def _replace(self, buffer: PixelBuffer, kind: str, **payload: Any) -> None:
        self.buffer = buffer
        self._commit(kind, **payload)

    def _commit(self, kind: str, **payload: Any) -> None:
        self.history.push(self.buffer)
        logger.info(
            "committed %s on %dx%d buffer",
            kind,
            self.buffer.width,
            self.buffer.height,
            extra={"event": f"edit_{kind}"},
        )
        self._publish("edit", action=kind, **payload)
