"""B-Xtrender: oscillator, mode signals and backtest engine."""

from bxtrender.analytics.metrics import compute_metrics as metrics
from bxtrender.backtesting.engine import BacktestEngine, BacktestResult, simulate
from bxtrender.backtesting.signals import classify_signal
from bxtrender.core.config import ConfigError, IndicatorConfig, default_config
from bxtrender.core.types import Candle, Mode, NextOpen, SignalType
from bxtrender.indicators.oscillators import compute_oscillators

__all__ = [
    "BacktestEngine",
    "BacktestResult",
    "Candle",
    "ConfigError",
    "IndicatorConfig",
    "Mode",
    "NextOpen",
    "SignalType",
    "classify_signal",
    "compute_oscillators",
    "default_config",
    "metrics",
    "simulate",
]
