"""
B-Xtrender oscillators (after the Pine Script by @Puppytherapy):

    short = rsi(ema(close, L1) - ema(close, L2), L3) - 50
    long  = rsi(ema(close, longL1), longL2) - 50
    signal = t3(short, 5)

Bar-for-bar parity with the Pine Script depends on the SMA seeding in
smoothing.py and on the RSI tie-breaks below.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from bxtrender.core.config import IndicatorConfig
from bxtrender.core.types import Color, IndicatorPoint, MaType, Mode
from bxtrender.indicators.smoothing import ArrayLike, ema, rma, sma
from bxtrender.utils.candles import CandleInput, PriceArrays, to_price_arrays

logger = logging.getLogger("bxtrender.indicators")

T3_B = 0.7
SIGNAL_PERIOD = 5
MIN_BARS_PADDING = 10


def rsi(data: ArrayLike, period: int) -> np.ndarray:
    """
    RSI over the first difference of `data`, smoothed with RMA.
    Undefined entries are 50.
    """
    x = np.asarray(data, dtype=float)
    n = len(x)
    out = np.full(n, 50.0)
    if n < period + 1:
        return out
    change = np.diff(x)
    gains = np.where(change > 0, change, 0.0)
    losses = np.where(change < 0, -change, 0.0)
    avg_gain = rma(gains, period)
    avg_loss = rma(losses, period)
    for i in range(period, n):
        ag = avg_gain[i - 1]
        al = avg_loss[i - 1]
        if al == 0:
            out[i] = 50.0 if ag == 0 else 100.0
        else:
            out[i] = 100.0 - 100.0 / (1.0 + ag / al)
    return out


def t3(data: ArrayLike, period: int) -> np.ndarray:
    """Tillson T3: six chained EMAs combined with b = 0.7 weights."""
    b = T3_B
    c1 = -b * b * b
    c2 = 3 * b * b + 3 * b * b * b
    c3 = -6 * b * b - 3 * b - 3 * b * b * b
    c4 = 1 + 3 * b + b * b * b + 3 * b * b
    e1 = ema(data, period)
    e2 = ema(e1, period)
    e3 = ema(e2, period)
    e4 = ema(e3, period)
    e5 = ema(e4, period)
    e6 = ema(e5, period)
    return c1 * e6 + c2 * e5 + c3 * e4 + c4 * e3


def min_bars(config: IndicatorConfig) -> int:
    """Minimum candle count for a usable oscillator."""
    return max(config.short_l2, config.long_l1) + config.short_l3 + MIN_BARS_PADDING


@dataclass
class OscillatorSeries:
    """Full-length oscillator arrays plus the index where evaluation starts."""
    prices: PriceArrays
    short: np.ndarray
    long: np.ndarray
    signal: np.ndarray
    ma: Optional[np.ndarray]
    ma_filter_on: bool
    start_index: int

    @property
    def times(self) -> List[int]:
        return self.prices.times

    @property
    def opens(self) -> np.ndarray:
        return self.prices.opens

    @property
    def closes(self) -> np.ndarray:
        return self.prices.closes

    def __len__(self) -> int:
        return len(self.prices)


def compute_series(candles: CandleInput, config: IndicatorConfig) -> Optional[OscillatorSeries]:
    """
    Compute oscillator arrays for valid candles.
    Returns None when there is not enough history (indicator unavailable).
    """
    config.validate()
    prices = to_price_arrays(candles)
    needed = min_bars(config)
    if len(prices) < needed:
        logger.debug("Insufficient data: %d valid candles, need %d", len(prices), needed)
        return None

    ma_filter_on = config.ma_filter_on
    if ma_filter_on and len(prices) < config.ma_length + config.short_l3 + MIN_BARS_PADDING:
        logger.debug("MA filter disabled: %d candles < MA length %d", len(prices), config.ma_length)
        ma_filter_on = False

    closes = prices.closes
    spread = ema(closes, config.short_l1) - ema(closes, config.short_l2)
    short = rsi(spread, config.short_l3) - 50.0
    long_ = rsi(ema(closes, config.long_l1), config.long_l2) - 50.0
    signal = t3(short, SIGNAL_PERIOD)

    ma = None
    if ma_filter_on:
        ma = sma(closes, config.ma_length) if config.ma_type == MaType.SMA else ema(closes, config.ma_length)
        start = max(config.short_l2, config.long_l1, config.ma_length) + config.short_l3
    else:
        start = max(config.short_l2, config.long_l1) + config.short_l3

    return OscillatorSeries(
        prices=prices,
        short=short,
        long=long_,
        signal=signal,
        ma=ma,
        ma_filter_on=ma_filter_on,
        start_index=start,
    )


def histogram_color(value: float, prev: float) -> Color:
    """Bright when rising, dark otherwise; green above zero, red at or below."""
    if value > 0:
        return Color.LIME if value > prev else Color.GREEN
    return Color.RED if value > prev else Color.DARKRED


def aligned_colors(short: float, short_prev: float, long_: float, long_prev: float) -> tuple:
    """Joint-alignment coloring: shared sign forces both histograms into that palette."""
    if short > 0 and long_ > 0:
        return (
            Color.LIME if short > short_prev else Color.GREEN,
            Color.LIME if long_ > long_prev else Color.GREEN,
        )
    if short < 0 and long_ < 0:
        return (
            Color.RED if short > short_prev else Color.DARKRED,
            Color.RED if long_ > long_prev else Color.DARKRED,
        )
    return histogram_color(short, short_prev), histogram_color(long_, long_prev)


def signal_color(value: float, prev: float) -> Color:
    return Color.LIME if value > prev else Color.RED


def bar_colors(series: OscillatorSeries, i: int, mode: Mode) -> tuple:
    """(short, long, signal) colors for bar i."""
    s, sp = series.short[i], series.short[i - 1]
    l, lp = series.long[i], series.long[i - 1]
    if mode in (Mode.QUANT, Mode.DITZ):
        short_c, long_c = aligned_colors(s, sp, l, lp)
    else:
        short_c, long_c = histogram_color(s, sp), histogram_color(l, lp)
    return short_c, long_c, signal_color(series.signal[i], series.signal[i - 1])


def build_points(series: Optional[OscillatorSeries], mode: Mode = Mode.DEFENSIVE) -> Dict[str, List[IndicatorPoint]]:
    """IndicatorPoint lists from the start index on; empty when the series is unavailable."""
    out: Dict[str, List[IndicatorPoint]] = {"short": [], "long": [], "signal": []}
    if series is None:
        return out
    mode = Mode(mode)
    for i in range(series.start_index, len(series)):
        t = series.times[i]
        short_c, long_c, sig_c = bar_colors(series, i, mode)
        out["short"].append(IndicatorPoint(time=t, value=float(series.short[i]), color=short_c))
        out["long"].append(IndicatorPoint(time=t, value=float(series.long[i]), color=long_c))
        out["signal"].append(IndicatorPoint(time=t, value=float(series.signal[i]), color=sig_c))
    return out


def compute_oscillators(
    candles: CandleInput,
    config: Optional[IndicatorConfig] = None,
    mode: Mode = Mode.DEFENSIVE,
) -> Dict[str, List[IndicatorPoint]]:
    """Short, long and signal IndicatorPoint series for charting."""
    return build_points(compute_series(candles, config or IndicatorConfig()), mode)
