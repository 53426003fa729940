"""Utils: candle normalization and period handling."""

from bxtrender.utils.candles import PriceArrays, candles_from_frame, to_price_arrays
from bxtrender.utils.periods import normalize_timeframe, period_key, split_closed_periods

__all__ = [
    "PriceArrays",
    "candles_from_frame",
    "to_price_arrays",
    "normalize_timeframe",
    "period_key",
    "split_closed_periods",
]
