"""Core: config, types, logging."""

from bxtrender.core.config import load_config, Config, ConfigError, IndicatorConfig, default_config
from bxtrender.core.types import (
    Candle,
    Color,
    IndicatorPoint,
    MaType,
    Marker,
    MarkerPosition,
    MarkerShape,
    Metrics,
    Mode,
    NextOpen,
    SignalType,
    Trade,
)
from bxtrender.core.logger import setup_logging

__all__ = [
    "load_config",
    "Config",
    "ConfigError",
    "IndicatorConfig",
    "default_config",
    "Candle",
    "Color",
    "IndicatorPoint",
    "MaType",
    "Marker",
    "MarkerPosition",
    "MarkerShape",
    "Metrics",
    "Mode",
    "NextOpen",
    "SignalType",
    "Trade",
    "setup_logging",
]
