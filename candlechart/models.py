from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Sequence

from candlechart.errors import CandleDataError


RGBA = tuple[int, int, int, int]

MIN_SCALE = 0.1
MAX_SCALE = 10.0


@dataclass(frozen=True)
class Candle:
    open: float
    high: float
    low: float
    close: float
    time: datetime
    volume: float | None = None

    @property
    def is_up(self) -> bool:
        # Equal open/close counts as a down candle.
        return self.close > self.open

    def time_utc(self) -> datetime:
        if self.time.tzinfo is None:
            return self.time.replace(tzinfo=timezone.utc)
        return self.time.astimezone(timezone.utc)


def clamp_scale(value: float) -> float:
    """Pin a zoom scale to [MIN_SCALE, MAX_SCALE]; NaN falls back to MIN_SCALE."""
    if math.isnan(value) or value < MIN_SCALE:
        return MIN_SCALE
    if value > MAX_SCALE:
        return MAX_SCALE
    return value


@dataclass(frozen=True)
class ViewportState:
    button_held: bool = False
    price_scale: float = 1.0
    time_scale: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "price_scale", clamp_scale(float(self.price_scale)))
        object.__setattr__(self, "time_scale", clamp_scale(float(self.time_scale)))


@dataclass(frozen=True)
class Bounds:
    width: float
    height: float

    def __post_init__(self) -> None:
        if not self.width > 0 or not self.height > 0:
            raise ValueError("chart width/height must be > 0")


@dataclass(frozen=True)
class ChartStyle:
    background: RGBA = (240, 240, 240, 255)
    wick_color: RGBA = (0, 0, 0, 255)
    wick_width: float = 1.0
    up_color: RGBA = (0, 179, 0, 255)
    down_color: RGBA = (179, 0, 0, 255)
    text_color: RGBA = (0, 0, 0, 255)
    price_grid_color: RGBA = (200, 200, 200, 255)
    time_grid_color: RGBA = (220, 220, 220, 255)
    grid_width: float = 1.0
    font_size: float = 14.0
    label_count: int = 5
    label_x: float = 5.0
    time_label_offset: float = 20.0
    text_width_ratio: float = 0.3
    body_ratio: float = 0.7
    timestamp_format: str = "%Y-%m-%d %H:%M"


def validate_candles(candles: Sequence[Candle]) -> None:
    """Reject input the renderer would otherwise draw meaninglessly.

    Rendering never calls this; hosts opt in before handing data to a chart.
    """
    if not candles:
        raise CandleDataError("candle sequence is empty")
    previous: datetime | None = None
    for idx, candle in enumerate(candles):
        prices = (candle.open, candle.high, candle.low, candle.close)
        if not all(math.isfinite(p) for p in prices):
            raise CandleDataError(f"candle {idx} has non-finite prices")
        if not (candle.low <= min(candle.open, candle.close) and max(candle.open, candle.close) <= candle.high):
            raise CandleDataError(f"candle {idx} violates low <= open/close <= high")
        if candle.volume is not None and (not math.isfinite(candle.volume) or candle.volume < 0):
            raise CandleDataError(f"candle {idx} has invalid volume: {candle.volume}")
        ts = candle.time_utc()
        if previous is not None and ts <= previous:
            raise CandleDataError(f"candle {idx} is not after the previous candle")
        previous = ts
