from __future__ import annotations

import numpy as np

from candlechart.models import RGBA
from candlechart.raster.canvas import fill_rect, new_canvas
from candlechart.raster.draw_lines import draw_line
from candlechart.raster.draw_text import DEFAULT_FONT_FAMILY, draw_text


class RasterFrame:
    """numpy RGBA frame implementing the chart drawing capability."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        clear_color: RGBA = (0, 0, 0, 255),
        font_family: str = DEFAULT_FONT_FAMILY,
    ) -> None:
        self.width = int(width)
        self.height = int(height)
        self.font_family = font_family
        self._canvas = new_canvas(self.width, self.height, color=clear_color)

    def fill_rectangle(self, origin: tuple[float, float], size: tuple[float, float], color: RGBA) -> None:
        fill_rect(self._canvas, origin[0], origin[1], size[0], size[1], color)

    def stroke_line(self, a: tuple[float, float], b: tuple[float, float], color: RGBA, width: float = 1.0) -> None:
        draw_line(self._canvas, a[0], a[1], b[0], b[1], color, width=width)

    def draw_text(self, content: str, position: tuple[float, float], color: RGBA, size: float) -> None:
        x, y = position
        if not (np.isfinite(x) and np.isfinite(y)):
            return
        draw_text(
            self._canvas,
            int(round(x)),
            int(round(y)),
            content,
            color,
            font_family=self.font_family,
            font_size_px=size,
        )

    def to_rgba(self) -> np.ndarray:
        return self._canvas.copy()
