"""
Timeframe parsing and stripping of the still-forming period.
Signals are evaluated on closed periods only; the forming period supplies
the next open at which a signal on the last closed bar executes.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple

import pandas as pd

from bxtrender.core.types import NextOpen
from bxtrender.utils.candles import CandleInput, candles_from_frame

_ALIASES = {
    "1mo": "1mo", "1mth": "1mo", "month": "1mo", "monthly": "1mo",
    "1wk": "1wk", "1w": "1wk", "w": "1wk", "week": "1wk", "weekly": "1wk",
    "1d": "1d", "d": "1d", "day": "1d", "daily": "1d",
}


def normalize_timeframe(tf: str) -> str:
    """Map Yahoo/TradingView style timeframes ('1mo', '1W', 'D') to '1mo' | '1wk' | '1d'."""
    key = tf.strip().lower()
    if key not in _ALIASES:
        raise ValueError(f"Unsupported timeframe: {tf}")
    return _ALIASES[key]


def period_key(ts: int, tf: str) -> Tuple[int, ...]:
    """Calendar bucket (UTC) a unix timestamp belongs to."""
    dt = datetime.fromtimestamp(int(ts), tz=timezone.utc)
    tf = normalize_timeframe(tf)
    if tf == "1mo":
        return (dt.year, dt.month)
    if tf == "1wk":
        iso = dt.isocalendar()
        return (iso[0], iso[1])
    return (dt.year, dt.month, dt.day)


def _get(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name)


def split_closed_periods(
    candles: CandleInput,
    timeframe: str = "1mo",
    now: Optional[datetime] = None,
) -> Tuple[List[Any], Optional[NextOpen]]:
    """
    Split candles into (closed, next_open). Every candle inside the current
    period is stripped; their first open and last close form next_open.
    """
    if isinstance(candles, pd.DataFrame):
        rows: List[Any] = candles_from_frame(candles)
    else:
        rows = list(candles or [])
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    current = period_key(int(now.timestamp()), timeframe)

    closed = [r for r in rows if period_key(_get(r, "time"), timeframe) != current]
    forming = [r for r in rows if period_key(_get(r, "time"), timeframe) == current]
    if not forming:
        return closed, None
    first_open = _get(forming[0], "open")
    return closed, NextOpen(
        time=int(_get(forming[0], "time")),
        open=float(first_open) if first_open is not None else 0.0,
        close=float(_get(forming[-1], "close") or 0.0),
    )
