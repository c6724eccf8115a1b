from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence, TypeAlias

from candlechart.mapper import CoordinateMapper, build_mapper
from candlechart.models import RGBA, Bounds, Candle, ChartStyle, ViewportState

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FillRect:
    x: float
    y: float
    width: float
    height: float
    color: RGBA


@dataclass(frozen=True)
class StrokeLine:
    x0: float
    y0: float
    x1: float
    y1: float
    color: RGBA
    width: float = 1.0


@dataclass(frozen=True)
class DrawText:
    content: str
    x: float
    y: float
    color: RGBA
    size: float


DrawCommand: TypeAlias = FillRect | StrokeLine | DrawText


def build_geometry(
    candles: Sequence[Candle],
    state: ViewportState,
    bounds: Bounds,
    style: ChartStyle | None = None,
) -> list[DrawCommand]:
    style = style or ChartStyle()
    commands: list[DrawCommand] = [FillRect(0.0, 0.0, float(bounds.width), float(bounds.height), style.background)]
    if not candles:
        return commands

    mapper = build_mapper(candles, bounds, state, body_ratio=style.body_ratio)
    if not (math.isfinite(mapper.limits.scaled_min) and math.isfinite(mapper.limits.scaled_max)):
        LOGGER.debug(
            "non-finite price bounds; min=%s max=%s candles=%d",
            mapper.limits.min_price,
            mapper.limits.max_price,
            len(candles),
        )

    for idx, candle in enumerate(candles):
        commands.extend(_candle_commands(mapper, idx, candle, style))
    commands.extend(_price_axis_commands(mapper, bounds, style))
    commands.extend(_time_axis_commands(mapper, candles, bounds, style))
    return commands


def _candle_commands(mapper: CoordinateMapper, idx: int, candle: Candle, style: ChartStyle) -> list[DrawCommand]:
    x = mapper.index_to_x(idx)
    wick = StrokeLine(
        x,
        mapper.price_to_y(candle.high),
        x,
        mapper.price_to_y(candle.low),
        color=style.wick_color,
        width=style.wick_width,
    )
    open_y = mapper.price_to_y(candle.open)
    close_y = mapper.price_to_y(candle.close)
    top, bottom = (close_y, open_y) if close_y < open_y else (open_y, close_y)
    body = FillRect(
        x - mapper.candle_width / 2.0,
        top,
        mapper.candle_width,
        bottom - top,
        style.up_color if candle.is_up else style.down_color,
    )
    return [wick, body]


def _price_axis_commands(mapper: CoordinateMapper, bounds: Bounds, style: ChartStyle) -> list[DrawCommand]:
    out: list[DrawCommand] = []
    lo = mapper.limits.scaled_min
    hi = mapper.limits.scaled_max
    for j in range(style.label_count + 1):
        price = lo + (j / style.label_count) * (hi - lo)
        y = mapper.price_to_y(price)
        out.append(DrawText(f"{price:.2f}", style.label_x, y - style.font_size / 2.0, style.text_color, style.font_size))
        out.append(StrokeLine(0.0, y, float(bounds.width), y, color=style.price_grid_color, width=style.grid_width))
    return out


def _time_axis_commands(
    mapper: CoordinateMapper,
    candles: Sequence[Candle],
    bounds: Bounds,
    style: ChartStyle,
) -> list[DrawCommand]:
    out: list[DrawCommand] = []
    last = len(candles) - 1
    for k in range(style.label_count + 1):
        idx = int((k / style.label_count) * last)
        x = mapper.index_to_x(idx)
        label = candles[idx].time_utc().strftime(style.timestamp_format)
        half_w = (len(label) * style.font_size * style.text_width_ratio) / 2.0
        out.append(
            DrawText(
                label,
                x - half_w,
                float(bounds.height) - style.time_label_offset,
                style.text_color,
                style.font_size,
            )
        )
        out.append(StrokeLine(x, 0.0, x, float(bounds.height), color=style.time_grid_color, width=style.grid_width))
    return out
