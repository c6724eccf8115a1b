from __future__ import annotations

import importlib.util
from pathlib import Path
import unittest

from candlechart import validate_candles


def _load_sample_data():
    path = Path(__file__).resolve().parents[1] / "examples" / "candle_chart" / "sample_data.py"
    spec = importlib.util.spec_from_file_location("candle_chart_sample_data_test", path)
    assert spec is not None and spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class SampleDataTests(unittest.TestCase):
    def setUp(self) -> None:
        self.sample_data = _load_sample_data()

    def test_random_walk_is_well_formed(self) -> None:
        candles = self.sample_data.generate_sample_candles(50, seed=1)
        self.assertEqual(len(candles), 50)
        validate_candles(candles)
        self.assertEqual(candles[0].open, 100.0)
        for prev, cur in zip(candles, candles[1:]):
            self.assertEqual(cur.open, prev.close)
            self.assertEqual((cur.time - prev.time).total_seconds(), 3600.0)

    def test_seed_is_deterministic(self) -> None:
        a = self.sample_data.generate_sample_candles(10, seed=42)
        b = self.sample_data.generate_sample_candles(10, seed=42)
        c = self.sample_data.generate_sample_candles(10, seed=43)
        self.assertEqual(a, b)
        self.assertNotEqual(a, c)

    def test_count_bounds(self) -> None:
        self.assertEqual(self.sample_data.generate_sample_candles(0, seed=1), [])
        with self.assertRaises(ValueError):
            self.sample_data.generate_sample_candles(-1)


if __name__ == "__main__":
    unittest.main()
