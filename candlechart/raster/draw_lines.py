from __future__ import annotations

import math

import numpy as np

from candlechart.models import RGBA
from candlechart.raster.canvas import draw_hline, draw_vline, fill_rect


def draw_line(dst: np.ndarray, x0: float, y0: float, x1: float, y1: float, color: RGBA, width: float = 1.0) -> None:
    if not all(math.isfinite(v) for v in (x0, y0, x1, y1)):
        return
    brush = max(1, int(round(width)))
    ix0, iy0, ix1, iy1 = (int(math.floor(v)) for v in (x0, y0, x1, y1))
    if brush == 1 and ix0 == ix1:
        draw_vline(dst, ix0, iy0, iy1, color)
        return
    if brush == 1 and iy0 == iy1:
        draw_hline(dst, ix0, ix1, iy0, color)
        return
    _draw_line_segment(dst, ix0, iy0, ix1, iy1, color=color, width=brush)


def _draw_line_segment(dst: np.ndarray, x0: int, y0: int, x1: int, y1: int, color: RGBA, width: int) -> None:
    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    radius = width // 2

    while True:
        fill_rect(dst, x0 - radius, y0 - radius, width, width, color)
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy
