"""
Histogram modes on the short-term oscillator alone.
Both exit on the first dark-red bar (negative and not rising).
"""

from __future__ import annotations

from bxtrender.core.types import Mode
from bxtrender.strategies.base import BarContext, BaseMode


class DefensiveMode(BaseMode):
    """
    BUY on the red->green cross or on the 4th consecutive light-red bar.
    """

    mode = Mode.DEFENSIVE
    light_red_entry = 4

    def is_entry(self, ctx: BarContext) -> bool:
        if ctx.in_position or ctx.open <= 0:
            return False
        return ctx.turned_green or (ctx.is_light_red and ctx.light_red_streak == self.light_red_entry)

    def is_exit(self, ctx: BarContext) -> bool:
        return ctx.in_position and ctx.is_dark_red and ctx.open > 0 and ctx.entry_price > 0


class AggressiveMode(DefensiveMode):
    """BUY on the red->green cross or on the 1st/2nd bar of a light-red streak."""

    mode = Mode.AGGRESSIVE
    max_light_red_entry = 2

    def is_entry(self, ctx: BarContext) -> bool:
        if ctx.in_position or ctx.open <= 0:
            return False
        early_light_red = ctx.is_light_red and 1 <= ctx.light_red_streak <= self.max_light_red_entry
        return ctx.turned_green or early_light_red
