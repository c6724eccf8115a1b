from __future__ import annotations

from datetime import datetime, timedelta, timezone
import math
import unittest

from candlechart import Bounds, Candle, ViewportState, build_mapper
from candlechart.mapper import PRICE_EPSILON, compute_price_limits


T0 = datetime(2022, 10, 1, tzinfo=timezone.utc)


def _candles(*ohlc: tuple[float, float, float, float]) -> list[Candle]:
    return [
        Candle(open=o, high=h, low=l, close=c, time=T0 + timedelta(hours=i))
        for i, (o, h, l, c) in enumerate(ohlc)
    ]


class CoordinateMapperTests(unittest.TestCase):
    def setUp(self) -> None:
        self.candles = _candles((100, 105, 98, 102), (102, 103, 99, 100))

    def test_limits_span_lows_and_highs(self) -> None:
        limits = compute_price_limits(self.candles, 1.0)
        self.assertEqual(limits.min_price, 98.0)
        self.assertEqual(limits.max_price, 105.0)
        self.assertEqual(limits.scaled_min, 98.0)
        self.assertEqual(limits.scaled_max, 105.0)

    def test_spacing_and_body_width_for_reference_example(self) -> None:
        mapper = build_mapper(self.candles, Bounds(200, 100), ViewportState())
        self.assertAlmostEqual(mapper.candle_spacing, 100.0)
        self.assertAlmostEqual(mapper.candle_width, 70.0)
        self.assertAlmostEqual(mapper.index_to_x(0), 50.0)
        self.assertAlmostEqual(mapper.index_to_x(1), 150.0)

    def test_price_to_y_maps_range_onto_height(self) -> None:
        mapper = build_mapper(self.candles, Bounds(200, 100), ViewportState())
        self.assertAlmostEqual(mapper.price_to_y(98.0), 100.0)
        self.assertAlmostEqual(mapper.price_to_y(105.0), 0.0, places=9)
        self.assertAlmostEqual(mapper.price_to_y(101.5), 50.0, places=9)

    def test_price_to_y_is_non_increasing(self) -> None:
        mapper = build_mapper(self.candles, Bounds(320, 240), ViewportState(price_scale=3.7))
        prices = [90.0 + 0.25 * i for i in range(80)]
        ys = [mapper.price_to_y(p) for p in prices]
        for a, b in zip(ys, ys[1:]):
            self.assertLessEqual(b, a)

    def test_price_scale_narrows_range_around_midpoint(self) -> None:
        limits = compute_price_limits(self.candles, 2.0)
        self.assertAlmostEqual(limits.scaled_min, 99.75)
        self.assertAlmostEqual(limits.scaled_max, 103.25)
        self.assertAlmostEqual((limits.scaled_min + limits.scaled_max) / 2.0, 101.5)

    def test_time_scale_shrinks_spacing(self) -> None:
        mapper = build_mapper(self.candles, Bounds(200, 100), ViewportState(time_scale=2.0))
        self.assertAlmostEqual(mapper.candle_spacing, 50.0)
        self.assertAlmostEqual(mapper.candle_width, 35.0)

    def test_spacing_degenerates_to_width_for_single_slot(self) -> None:
        single = _candles((10, 10, 10, 10))
        mapper = build_mapper(single, Bounds(120, 80), ViewportState())
        self.assertEqual(mapper.candle_spacing, 120.0)
        zoomed_out = build_mapper(self.candles, Bounds(120, 80), ViewportState(time_scale=0.1))
        self.assertEqual(zoomed_out.candle_spacing, 120.0)

    def test_flat_prices_stay_finite(self) -> None:
        flat = _candles((10, 10, 10, 10), (10, 10, 10, 10))
        mapper = build_mapper(flat, Bounds(120, 80), ViewportState())
        y = mapper.price_to_y(10.0)
        self.assertTrue(math.isfinite(y))
        self.assertEqual(y, 80.0)
        self.assertGreater(PRICE_EPSILON, 0.0)

    def test_nan_samples_are_skipped_when_others_are_finite(self) -> None:
        candles = _candles((100, 105, 98, 102), (float("nan"), float("nan"), float("nan"), float("nan")))
        limits = compute_price_limits(candles, 1.0)
        self.assertEqual((limits.min_price, limits.max_price), (98.0, 105.0))

    def test_all_nan_input_propagates_non_finite_positions(self) -> None:
        nan = float("nan")
        candles = _candles((nan, nan, nan, nan))
        mapper = build_mapper(candles, Bounds(100, 100), ViewportState())
        self.assertTrue(math.isinf(mapper.limits.min_price))
        self.assertTrue(math.isnan(mapper.price_to_y(1.0)))

    def test_bounds_reject_non_positive_sizes(self) -> None:
        with self.assertRaises(ValueError):
            Bounds(0, 100)
        with self.assertRaises(ValueError):
            Bounds(100, -1)


if __name__ == "__main__":
    unittest.main()
