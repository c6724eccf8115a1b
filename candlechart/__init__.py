from candlechart.chart import CandleChart, ChartProgram, Frame, paint, render
from candlechart.errors import CandleDataError
from candlechart.geometry import DrawCommand, DrawText, FillRect, StrokeLine, build_geometry
from candlechart.input import InputEvent, handle_event
from candlechart.mapper import CoordinateMapper, PriceLimits, build_mapper
from candlechart.models import MAX_SCALE, MIN_SCALE, Bounds, Candle, ChartStyle, ViewportState, clamp_scale, validate_candles

__all__ = [
    "Bounds",
    "Candle",
    "CandleChart",
    "CandleDataError",
    "ChartProgram",
    "ChartStyle",
    "CoordinateMapper",
    "DrawCommand",
    "DrawText",
    "FillRect",
    "Frame",
    "InputEvent",
    "MAX_SCALE",
    "MIN_SCALE",
    "PriceLimits",
    "StrokeLine",
    "ViewportState",
    "build_geometry",
    "build_mapper",
    "clamp_scale",
    "handle_event",
    "paint",
    "render",
    "validate_candles",
]
