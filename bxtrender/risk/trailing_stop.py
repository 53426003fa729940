"""
Percent trailing stop for a single long position.
Tracks the highest close since entry; breach when close <= highest * (1 - pct/100).
"""

from __future__ import annotations


class TrailingStop:
    """
    Args:
        percent: Allowed drawdown from the peak, in percent (20.0 = 20%).
        enabled: A disabled stop never triggers.
    """

    def __init__(self, percent: float, enabled: bool = True) -> None:
        self.percent = percent
        self.enabled = enabled and percent > 0
        self.highest = 0.0

    def reset(self, entry_price: float = 0.0) -> None:
        """Start tracking a new position from its fill price (0 = flat)."""
        self.highest = entry_price

    @property
    def stop_price(self) -> float:
        return self.highest * (1 - self.percent / 100.0)

    def update(self, close: float) -> bool:
        """Feed the bar close; returns True when the stop is breached."""
        if close > self.highest:
            self.highest = close
        if not self.enabled or self.highest <= 0:
            return False
        return close <= self.stop_price
