"""
Pine Script compatible moving averages: EMA, RMA (Wilder) and SMA.
All take a 1-d sequence and return a float array of the same length.
A series shorter than `period` yields all zeros (insufficient data).
"""

from __future__ import annotations
from typing import Sequence, Union

import numpy as np
import pandas as pd

ArrayLike = Union[Sequence[float], np.ndarray]


def ema(data: ArrayLike, period: int) -> np.ndarray:
    """
    EMA seeded with the SMA of the first `period` values.
    Indices before the seed are back-filled with the seed value.
    """
    x = np.asarray(data, dtype=float)
    out = np.zeros(len(x))
    if period <= 0 or len(x) < period:
        return out
    out[period - 1] = x[:period].sum() / period
    k = 2.0 / (period + 1)
    for i in range(period, len(x)):
        out[i] = (x[i] - out[i - 1]) * k + out[i - 1]
    out[: period - 1] = out[period - 1]
    return out


def rma(data: ArrayLike, period: int) -> np.ndarray:
    """Wilder's moving average (alpha = 1/period). Indices before the seed stay 0."""
    x = np.asarray(data, dtype=float)
    out = np.zeros(len(x))
    if period <= 0 or len(x) < period:
        return out
    out[period - 1] = x[:period].sum() / period
    alpha = 1.0 / period
    for i in range(period, len(x)):
        out[i] = alpha * x[i] + (1 - alpha) * out[i - 1]
    return out


def sma(data: ArrayLike, period: int) -> np.ndarray:
    """Rolling mean, back-filled like ema()."""
    x = np.asarray(data, dtype=float)
    if period <= 0 or len(x) < period:
        return np.zeros(len(x))
    out = pd.Series(x).rolling(period).mean().to_numpy(copy=True)
    out[: period - 1] = out[period - 1]
    return out
