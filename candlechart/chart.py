from __future__ import annotations

from typing import Iterable, Protocol, Sequence

import numpy as np

from candlechart.compile import compile_full_rewrite_batch
from candlechart.geometry import DrawCommand, DrawText, FillRect, StrokeLine, build_geometry
from candlechart.input import ZOOM_BUTTON, EventStatus, InputEvent, handle_event
from candlechart.models import RGBA, Bounds, Candle, ChartStyle, ViewportState
from candlechart.raster import RasterFrame
from candlechart_host.window_matrix import WriteBatch


class Frame(Protocol):
    def fill_rectangle(self, origin: tuple[float, float], size: tuple[float, float], color: RGBA) -> None:
        ...

    def stroke_line(self, a: tuple[float, float], b: tuple[float, float], color: RGBA, width: float = 1.0) -> None:
        ...

    def draw_text(self, content: str, position: tuple[float, float], color: RGBA, size: float) -> None:
        ...


class ChartProgram(Protocol):
    def draw(self, state: ViewportState, bounds: Bounds) -> list[DrawCommand]:
        ...

    def update(self, state: ViewportState, event: InputEvent) -> tuple[ViewportState, EventStatus]:
        ...


def render(
    candles: Sequence[Candle],
    state: ViewportState,
    bounds: Bounds,
    style: ChartStyle | None = None,
) -> list[DrawCommand]:
    return build_geometry(candles, state, bounds, style)


def paint(commands: Iterable[DrawCommand], frame: Frame) -> None:
    for cmd in commands:
        if isinstance(cmd, FillRect):
            frame.fill_rectangle((cmd.x, cmd.y), (cmd.width, cmd.height), cmd.color)
        elif isinstance(cmd, StrokeLine):
            frame.stroke_line((cmd.x0, cmd.y0), (cmd.x1, cmd.y1), cmd.color, cmd.width)
        elif isinstance(cmd, DrawText):
            frame.draw_text(cmd.content, (cmd.x, cmd.y), cmd.color, cmd.size)
        else:
            raise TypeError(f"Unsupported draw command: {type(cmd)!r}")


class CandleChart:
    """Candlestick chart program: immutable candle snapshot plus render/update entry points."""

    def __init__(
        self,
        candles: Iterable[Candle],
        *,
        style: ChartStyle | None = None,
        zoom_button: int = ZOOM_BUTTON,
    ) -> None:
        self.candles: tuple[Candle, ...] = tuple(candles)
        self.style = style or ChartStyle()
        self.zoom_button = zoom_button

    def draw(self, state: ViewportState, bounds: Bounds) -> list[DrawCommand]:
        return render(self.candles, state, bounds, self.style)

    def update(self, state: ViewportState, event: InputEvent) -> tuple[ViewportState, EventStatus]:
        return handle_event(state, event, zoom_button=self.zoom_button)

    def to_rgba(self, state: ViewportState, bounds: Bounds) -> np.ndarray:
        frame = RasterFrame(
            max(1, int(round(bounds.width))),
            max(1, int(round(bounds.height))),
            clear_color=self.style.background,
        )
        paint(self.draw(state, bounds), frame)
        return frame.to_rgba()

    def compile_write_batch(self, state: ViewportState, bounds: Bounds) -> WriteBatch:
        return compile_full_rewrite_batch(self.to_rgba(state, bounds))
