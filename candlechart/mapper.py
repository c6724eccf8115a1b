from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from candlechart.models import Bounds, Candle, ViewportState


PRICE_EPSILON = float(np.finfo(np.float64).eps)
DEFAULT_BODY_RATIO = 0.7


@dataclass(frozen=True)
class PriceLimits:
    min_price: float
    max_price: float
    scaled_min: float
    scaled_max: float


@dataclass(frozen=True)
class CoordinateMapper:
    """Linear price->y and index->x transforms for one frame."""

    height: float
    limits: PriceLimits
    candle_spacing: float
    candle_width: float

    def price_to_y(self, price: float) -> float:
        lo = self.limits.scaled_min
        hi = self.limits.scaled_max
        norm = (price - lo) / (hi - lo + PRICE_EPSILON)
        return self.height - norm * self.height

    def index_to_x(self, index: int) -> float:
        return index * self.candle_spacing + self.candle_spacing / 2.0


def compute_price_limits(candles: Sequence[Candle], price_scale: float) -> PriceLimits:
    lows = np.fromiter((c.low for c in candles), dtype=np.float64, count=len(candles))
    highs = np.fromiter((c.high for c in candles), dtype=np.float64, count=len(candles))
    # fmin/fmax skip NaN samples; an all-NaN input leaves the infinite seeds in place.
    min_price = float(np.fmin.reduce(lows, initial=np.inf))
    max_price = float(np.fmax.reduce(highs, initial=-np.inf))

    price_range = (max_price - min_price) / price_scale
    mid_price = (max_price + min_price) / 2.0
    return PriceLimits(
        min_price=min_price,
        max_price=max_price,
        scaled_min=mid_price - price_range / 2.0,
        scaled_max=mid_price + price_range / 2.0,
    )


def build_mapper(
    candles: Sequence[Candle],
    bounds: Bounds,
    state: ViewportState,
    *,
    body_ratio: float = DEFAULT_BODY_RATIO,
) -> CoordinateMapper:
    scaled_count = len(candles) * state.time_scale
    spacing = bounds.width / max(scaled_count, 1.0)
    return CoordinateMapper(
        height=float(bounds.height),
        limits=compute_price_limits(candles, state.price_scale),
        candle_spacing=spacing,
        candle_width=spacing * body_ratio,
    )
