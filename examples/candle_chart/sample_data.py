from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np

from candlechart import Candle


DEFAULT_START = datetime(2022, 10, 1, 0, 0, tzinfo=timezone.utc)


def generate_sample_candles(
    count: int = 24,
    *,
    seed: int | None = None,
    start: datetime = DEFAULT_START,
    step: timedelta = timedelta(hours=1),
    start_price: float = 100.0,
    max_move: float = 5.0,
) -> list[Candle]:
    """Random-walk OHLC candles; each open continues from the previous close."""
    if count < 0:
        raise ValueError("count must be >= 0")
    rng = np.random.default_rng(seed)
    candles: list[Candle] = []
    last_close = float(start_price)
    for i in range(count):
        open_price = last_close
        high = open_price + float(rng.random()) * max_move
        low = open_price - float(rng.random()) * max_move
        close = low + float(rng.random()) * (high - low)
        candles.append(
            Candle(
                open=open_price,
                high=high,
                low=low,
                close=close,
                time=start + step * i,
                volume=float(rng.random()) * 1000.0,
            )
        )
        last_close = close
    return candles
