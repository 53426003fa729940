"""Strategies: one rule set per trading mode."""

from typing import Dict

from bxtrender.core.types import Mode
from bxtrender.strategies.base import BarContext, BaseMode, light_red_streak
from bxtrender.strategies.xtrender import AggressiveMode, DefensiveMode
from bxtrender.strategies.quant import DitzMode, QuantMode, TraderMode, both_positive, joint_entry

_MODES: Dict[Mode, BaseMode] = {
    Mode.DEFENSIVE: DefensiveMode(),
    Mode.AGGRESSIVE: AggressiveMode(),
    Mode.QUANT: QuantMode(),
    Mode.DITZ: DitzMode(),
    Mode.TRADER: TraderMode(),
}


def get_mode(mode) -> BaseMode:
    """Rule set for a Mode or its string value. Raises ValueError for unknown modes."""
    return _MODES[Mode(mode)]


__all__ = [
    "BarContext",
    "BaseMode",
    "DefensiveMode",
    "AggressiveMode",
    "QuantMode",
    "DitzMode",
    "TraderMode",
    "both_positive",
    "joint_entry",
    "light_red_streak",
    "get_mode",
]
