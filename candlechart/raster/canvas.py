from __future__ import annotations

import math

import numpy as np

from candlechart.models import RGBA


def new_canvas(width: int, height: int, color: RGBA = (0, 0, 0, 255)) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.zeros((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def draw_hline(dst: np.ndarray, x0: int, x1: int, y: int, color: RGBA) -> None:
    if y < 0 or y >= dst.shape[0]:
        return
    xa = max(0, min(x0, x1))
    xb = min(dst.shape[1] - 1, max(x0, x1))
    if xa > xb:
        return
    _blend(dst[y : y + 1, xa : xb + 1], color)


def draw_vline(dst: np.ndarray, x: int, y0: int, y1: int, color: RGBA) -> None:
    if x < 0 or x >= dst.shape[1]:
        return
    ya = max(0, min(y0, y1))
    yb = min(dst.shape[0] - 1, max(y0, y1))
    if ya > yb:
        return
    _blend(dst[ya : yb + 1, x : x + 1], color)


def fill_rect(dst: np.ndarray, x: float, y: float, width: float, height: float, color: RGBA) -> None:
    """Fill the pixels covered by [x, x + width) x [y, y + height)."""
    if not all(math.isfinite(v) for v in (x, y, width, height)):
        return
    if width <= 0 or height <= 0:
        return
    left = max(0, int(math.floor(x)))
    top = max(0, int(math.floor(y)))
    right = min(dst.shape[1], int(math.ceil(x + width)))
    bottom = min(dst.shape[0], int(math.ceil(y + height)))
    if right <= left or bottom <= top:
        return
    _blend(dst[top:bottom, left:right], color)


def _blend(view: np.ndarray, color: RGBA) -> None:
    a = color[3] / 255.0
    if a >= 1.0:
        view[:, :, :3] = np.asarray(color[:3], dtype=np.uint8)
        view[:, :, 3] = 255
        return
    inv = 1.0 - a
    src = np.asarray(color[:3], dtype=np.float32) * a
    view[:, :, :3] = (src + view[:, :, :3].astype(np.float32) * inv).astype(np.uint8)
    view[:, :, 3] = 255
