from __future__ import annotations


class CandleDataError(ValueError):
    """Raised by opt-in validation when candle input cannot produce a meaningful chart."""
