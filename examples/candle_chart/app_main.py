from __future__ import annotations

import importlib.util
import os
from pathlib import Path
from typing import Sequence

from candlechart import Bounds, Candle, CandleChart, ViewportState, validate_candles
from candlechart.input import ZOOM_BUTTON
from candlechart_host.hdi import to_input_event


def _load_sample_data_module():
    # Loaded by path so the app folder works without being an importable package.
    path = Path(__file__).with_name("sample_data.py")
    spec = importlib.util.spec_from_file_location("candle_chart_sample_data", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"unable to load {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class CandleChartApp:
    def __init__(self, candles: Sequence[Candle], *, zoom_button: int = ZOOM_BUTTON) -> None:
        self._chart = CandleChart(candles, zoom_button=zoom_button)
        self._state = ViewportState()
        self._width = 0
        self._height = 0
        self._dirty = True
        self.frames_rendered = 0

    @property
    def state(self) -> ViewportState:
        return self._state

    @property
    def chart(self) -> CandleChart:
        return self._chart

    def init(self, ctx) -> None:
        validate_candles(self._chart.candles)
        snap = ctx.read_matrix_snapshot()
        self._height, self._width, _ = snap.shape
        self._dirty = True
        self._render(ctx)

    def loop(self, ctx, dt: float) -> None:
        for raw in ctx.poll_hdi_events(max_events=256):
            event = to_input_event(raw)
            if event is None:
                continue
            updated, _ = self._chart.update(self._state, event)
            if updated.price_scale != self._state.price_scale or updated.time_scale != self._state.time_scale:
                self._dirty = True
            self._state = updated

        snap = ctx.read_matrix_snapshot()
        h, w, _ = snap.shape
        if h != self._height or w != self._width:
            self._height = h
            self._width = w
            self._dirty = True
        if self._dirty:
            self._render(ctx)

    def stop(self, ctx) -> None:
        return None

    def _render(self, ctx) -> None:
        bounds = Bounds(width=self._width, height=self._height)
        ctx.submit_write_batch(self._chart.compile_write_batch(self._state, bounds))
        self.frames_rendered += 1
        self._dirty = False


def create() -> CandleChartApp:
    raw_seed = os.getenv("CANDLECHART_SEED", "").strip()
    seed = int(raw_seed) if raw_seed else None
    count = int(os.getenv("CANDLECHART_SAMPLE_COUNT", "24"))
    zoom_button = int(os.getenv("CANDLECHART_ZOOM_BUTTON", str(ZOOM_BUTTON)))
    sample_data = _load_sample_data_module()
    return CandleChartApp(sample_data.generate_sample_candles(count, seed=seed), zoom_button=zoom_button)
