"""Indicators: Pine Script compatible smoothing, RSI, T3 and the B-Xtrender oscillators."""

from bxtrender.indicators.smoothing import ema, rma, sma
from bxtrender.indicators.oscillators import (
    OscillatorSeries,
    compute_oscillators,
    compute_series,
    min_bars,
    rsi,
    t3,
)

__all__ = [
    "ema",
    "rma",
    "sma",
    "rsi",
    "t3",
    "min_bars",
    "OscillatorSeries",
    "compute_series",
    "compute_oscillators",
]
