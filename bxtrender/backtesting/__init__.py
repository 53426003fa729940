"""Backtesting engine: next-bar execution replay and signal classification."""

from bxtrender.backtesting.engine import BacktestEngine, BacktestResult, simulate
from bxtrender.backtesting.signals import SignalResult, classify_signal, joint_streak

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "simulate",
    "SignalResult",
    "classify_signal",
    "joint_streak",
]
