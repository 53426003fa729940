"""Abstract mode: per-bar entry/exit predicates over the oscillator state."""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from bxtrender.core.types import Mode


@dataclass(frozen=True)
class BarContext:
    """Oscillator state at bar `index`, plus the position flag carried through the pass."""
    index: int
    short: float
    short_prev: float
    long: float
    long_prev: float
    signal: float
    signal_prev: float
    open: float
    close: float
    ma: float = 0.0
    ma_filter_on: bool = False
    light_red_streak: int = 0
    in_position: bool = False
    entry_price: float = 0.0
    tsl_triggered: bool = False

    @property
    def is_light_red(self) -> bool:
        return self.short < 0 and self.short > self.short_prev

    @property
    def is_dark_red(self) -> bool:
        return self.short < 0 and self.short <= self.short_prev

    @property
    def turned_green(self) -> bool:
        return self.short > 0 and not self.short_prev > 0

    @property
    def ma_ok(self) -> bool:
        return not self.ma_filter_on or self.close > self.ma


def light_red_streak(short: Sequence[float], i: int, start: int) -> int:
    """
    Consecutive light-red bars (negative and rising) ending at i,
    walking backward no further than `start`.
    """
    if not (short[i] < 0 and short[i] > short[i - 1]):
        return 0
    count = 1
    j = i - 1
    while j >= start:
        if short[j] < 0 and short[j] > short[j - 1]:
            count += 1
            j -= 1
        else:
            break
    return count


class BaseMode(ABC):
    """One trading mode. Predicates are pure; the engine owns position state."""

    mode: Mode
    uses_trailing_stop: bool = False

    @abstractmethod
    def is_entry(self, ctx: BarContext) -> bool:
        """True when a BUY should be placed at the next bar's open."""
        pass

    @abstractmethod
    def is_exit(self, ctx: BarContext) -> bool:
        """True when the open position should be sold at the next bar's open."""
        pass
