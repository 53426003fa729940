"""
Joint-alignment modes (Quant, Ditz, Trader).

All three enter on the first bar where short and long are both positive,
optionally gated by close > moving average, and honour the trailing stop.
They differ only in the exit rule:

    Quant   short <= 0 or long <= 0
    Ditz    short <= 0 and long <= 0
    Trader  short < 0 and long < 0
"""

from __future__ import annotations

from bxtrender.core.types import Mode
from bxtrender.strategies.base import BarContext, BaseMode


def joint_entry(short: float, short_prev: float, long_: float, long_prev: float) -> bool:
    """First joint-positive bar: both > 0 now, at least one <= 0 before."""
    return short > 0 and long_ > 0 and (short_prev <= 0 or long_prev <= 0)


def both_positive(short: float, long_: float) -> bool:
    return short > 0 and long_ > 0


class QuantMode(BaseMode):
    mode = Mode.QUANT
    uses_trailing_stop = True

    def is_entry(self, ctx: BarContext) -> bool:
        if ctx.in_position or ctx.open <= 0:
            return False
        return joint_entry(ctx.short, ctx.short_prev, ctx.long, ctx.long_prev) and ctx.ma_ok

    def exit_rule(self, ctx: BarContext) -> bool:
        return ctx.short <= 0 or ctx.long <= 0

    def is_exit(self, ctx: BarContext) -> bool:
        if not ctx.in_position or ctx.entry_price <= 0:
            return False
        return self.exit_rule(ctx) or ctx.tsl_triggered


class DitzMode(QuantMode):
    """Tolerates mixed signals; leaves only when both oscillators give up."""

    mode = Mode.DITZ

    def exit_rule(self, ctx: BarContext) -> bool:
        return ctx.short <= 0 and ctx.long <= 0


class TraderMode(QuantMode):
    mode = Mode.TRADER

    def exit_rule(self, ctx: BarContext) -> bool:
        return ctx.short < 0 and ctx.long < 0
