"""
Core data types for candles, indicator points, trades, markers and metrics.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional


class Mode(str, Enum):
    DEFENSIVE = "defensive"
    AGGRESSIVE = "aggressive"
    QUANT = "quant"
    DITZ = "ditz"
    TRADER = "trader"

    @property
    def is_quant_family(self) -> bool:
        return self in (Mode.QUANT, Mode.DITZ, Mode.TRADER)


class Color(str, Enum):
    LIME = "#00FF00"
    GREEN = "#228B22"
    RED = "#FF0000"
    DARKRED = "#8B0000"


class MaType(str, Enum):
    SMA = "SMA"
    EMA = "EMA"


class SignalType(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    WAIT = "WAIT"
    NO_DATA = "NO_DATA"


class MarkerPosition(str, Enum):
    BELOW_BAR = "belowBar"
    ABOVE_BAR = "aboveBar"


class MarkerShape(str, Enum):
    ARROW_UP = "arrowUp"
    ARROW_DOWN = "arrowDown"


@dataclass(frozen=True)
class Candle:
    """OHLC candle; time in unix seconds."""
    time: int
    open: float
    high: float
    low: float
    close: float


@dataclass(frozen=True)
class NextOpen:
    """First open and latest close of the still-forming period."""
    time: int
    open: float
    close: float


@dataclass
class IndicatorPoint:
    time: int
    value: float
    color: Color


@dataclass
class Trade:
    """Single-position trade. Open trades carry current_price instead of exit fields."""
    entry_date: int
    entry_price: float
    exit_date: Optional[int] = None
    exit_price: Optional[float] = None
    return_pct: float = 0.0
    is_open: bool = True
    current_price: Optional[float] = None
    exit_reason: Optional[str] = None  # "SIGNAL" | "TSL"

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Marker:
    """Chart annotation for a trade transition."""
    time: int
    position: MarkerPosition
    shape: MarkerShape
    text: str
    color: str = "#00FF00"


@dataclass
class Metrics:
    """Aggregate performance of the completed trades."""
    win_rate: float
    risk_reward: float
    total_return: float
    avg_return: float
    total_trades: int
    wins: int
    losses: int
