"""
Current BUY / HOLD / SELL / WAIT status derived from the trade ledger.

Evaluated at the second-to-last indicator bar, the last fully closed
period; the most recent bar may still be forming.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence

from bxtrender.core.types import IndicatorPoint, Mode, SignalType, Trade

# shortest series each mode will classify
MIN_POINTS = {
    Mode.DEFENSIVE: 4,
    Mode.AGGRESSIVE: 4,
    Mode.QUANT: 2,
    Mode.DITZ: 3,
    Mode.TRADER: 3,
}

FRESH_BARS = 1


@dataclass(frozen=True)
class SignalResult:
    signal: SignalType
    bars: int


def _index_of(points: Sequence[IndicatorPoint], time: Optional[int]) -> int:
    if time is None:
        return -1
    for i in range(len(points) - 1, -1, -1):
        if points[i].time == time:
            return i
    return -1


def classify_signal(
    short: Sequence[IndicatorPoint],
    long: Optional[Sequence[IndicatorPoint]],
    trades: Sequence[Trade],
    mode: Mode,
) -> SignalResult:
    """
    Open position: BUY for the first two bars after entry, then HOLD.
    Flat: SELL for the first two bars after the last exit, then WAIT.
    `bars` counts periods since that event at the evaluation bar.
    """
    mode = Mode(mode)
    if not short or len(short) < MIN_POINTS[mode]:
        return SignalResult(SignalType.NO_DATA, 0)
    if mode == Mode.QUANT and (not long or len(long) < MIN_POINTS[mode]):
        return SignalResult(SignalType.NO_DATA, 0)

    ref = len(short) - 2
    trades = trades or []
    open_trade = next((t for t in trades if t.is_open), None)

    if open_trade is not None:
        if open_trade.entry_date is None:
            return SignalResult(SignalType.HOLD, 1)
        idx = _index_of(short, open_trade.entry_date)
        bars = max(0, ref - idx) if idx >= 0 else 0
        if bars <= FRESH_BARS:
            return SignalResult(SignalType.BUY, bars)
        return SignalResult(SignalType.HOLD, bars)

    closed = [t for t in trades if not t.is_open and t.exit_date is not None]
    if closed:
        idx = _index_of(short, closed[-1].exit_date)
        if idx >= 0:
            bars = max(0, ref - idx)
            if bars <= FRESH_BARS:
                return SignalResult(SignalType.SELL, bars)
            return SignalResult(SignalType.WAIT, bars)
    return SignalResult(SignalType.WAIT, 0)


def joint_streak(short: Sequence[float], long: Sequence[float], index: int) -> int:
    """
    Consecutive bars ending at `index` on which short and long share a sign.
    Positive count for joint-positive runs, negative for joint-negative, 0 if mixed.
    """
    def side(i: int) -> int:
        if short[i] > 0 and long[i] > 0:
            return 1
        if short[i] < 0 and long[i] < 0:
            return -1
        return 0

    current = side(index)
    if current == 0:
        return 0
    count = 0
    j = index
    while j >= 0 and side(j) == current:
        count += 1
        j -= 1
    return count * current
