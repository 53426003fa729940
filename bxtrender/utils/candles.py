"""
Candle input normalization. Accepts Candle objects, dicts or a DataFrame
and drops rows whose close is missing, NaN or non-positive.
"""

from __future__ import annotations
import logging
import math
from dataclasses import dataclass
from typing import Any, Iterable, List, Union

import numpy as np
import pandas as pd

from bxtrender.core.types import Candle

logger = logging.getLogger("bxtrender.utils.candles")

CandleInput = Union[pd.DataFrame, Iterable[Any], None]


@dataclass(frozen=True)
class PriceArrays:
    """Column view of the valid candles. Freshly allocated; the caller's input is untouched."""
    times: List[int]
    opens: np.ndarray
    closes: np.ndarray

    def __len__(self) -> int:
        return len(self.times)


def _valid_price(value: Any) -> bool:
    if value is None:
        return False
    try:
        v = float(value)
    except (TypeError, ValueError):
        return False
    return not math.isnan(v) and v > 0


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name, None)


def candles_from_frame(df: pd.DataFrame) -> List[Candle]:
    """DataFrame with time/open/high/low/close columns -> Candle list (time as unix seconds)."""
    if df is None or df.empty:
        return []
    times = df["time"]
    if pd.api.types.is_datetime64_any_dtype(times):
        times = [int(pd.Timestamp(t).timestamp()) for t in times]
    out = []
    for t, o, h, l, c in zip(times, df["open"], df["high"], df["low"], df["close"]):
        out.append(Candle(time=int(t), open=float(o), high=float(h), low=float(l), close=float(c)))
    return out


def to_price_arrays(candles: CandleInput) -> PriceArrays:
    """
    Filter invalid candles and split into time/open/close columns.
    An invalid or missing open falls back to the close of the same bar.
    """
    if candles is None:
        rows: List[Any] = []
    elif isinstance(candles, pd.DataFrame):
        rows = candles_from_frame(candles)
    else:
        rows = list(candles)
    times: List[int] = []
    opens: List[float] = []
    closes: List[float] = []
    dropped = 0
    for row in rows:
        if row is None or not _valid_price(_field(row, "close")):
            dropped += 1
            continue
        close = float(_field(row, "close"))
        o = _field(row, "open")
        times.append(int(_field(row, "time")))
        closes.append(close)
        opens.append(float(o) if _valid_price(o) else close)
    if dropped:
        logger.debug("Dropped %d candles with invalid close", dropped)
    return PriceArrays(times=times, opens=np.array(opens, dtype=float), closes=np.array(closes, dtype=float))
