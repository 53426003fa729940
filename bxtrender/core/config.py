"""
Load configuration from config.yaml and .env. Per-mode indicator periods
live under the `modes` section; env vars override single fields.
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from bxtrender.core.types import MaType, Mode


class ConfigError(ValueError):
    """Malformed indicator configuration (missing or invalid periods)."""


_PERIOD_FIELDS = ("short_l1", "short_l2", "short_l3", "long_l1", "long_l2")

# camelCase keys as stored by the web layer
_ALIASES = {
    "shortL1": "short_l1",
    "shortL2": "short_l2",
    "shortL3": "short_l3",
    "longL1": "long_l1",
    "longL2": "long_l2",
    "maFilterOn": "ma_filter_on",
    "maLength": "ma_length",
    "maType": "ma_type",
    "tslEnabled": "tsl_enabled",
    "tslPercent": "tsl_percent",
}


@dataclass(frozen=True)
class IndicatorConfig:
    """Periods and filters for one mode. Immutable for one computation."""
    short_l1: int = 5
    short_l2: int = 20
    short_l3: int = 15
    long_l1: int = 20
    long_l2: int = 15
    ma_filter_on: bool = False
    ma_length: int = 200
    ma_type: MaType = MaType.EMA
    tsl_enabled: bool = True
    tsl_percent: float = 20.0

    def validate(self) -> "IndicatorConfig":
        for name in _PERIOD_FIELDS:
            value = getattr(self, name)
            if value is None or isinstance(value, bool) or not isinstance(value, int):
                raise ConfigError(f"{name} must be an integer period, got {value!r}")
            if value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")
        if self.ma_filter_on and (not isinstance(self.ma_length, int) or self.ma_length <= 0):
            raise ConfigError(f"ma_length must be a positive integer, got {self.ma_length!r}")
        if self.tsl_percent is None or self.tsl_percent < 0:
            raise ConfigError(f"tsl_percent must be >= 0, got {self.tsl_percent!r}")
        return self

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["IndicatorConfig"] = None) -> "IndicatorConfig":
        """Build from a dict with snake_case or camelCase keys, on top of `base`."""
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = _ALIASES.get(key, key)
            if name not in cls.__dataclass_fields__:
                continue
            values[name] = value
        raw = values.get("ma_type")
        if raw is not None and not isinstance(raw, MaType):
            try:
                values["ma_type"] = MaType(str(raw).upper())
            except ValueError as e:
                raise ConfigError(f"unknown ma_type {raw!r}") from e
        for name in _PERIOD_FIELDS + ("ma_length",):
            if name in values and isinstance(values[name], float) and values[name].is_integer():
                values[name] = int(values[name])
        if "tsl_percent" in values and values["tsl_percent"] is not None:
            values["tsl_percent"] = float(values["tsl_percent"])
        cfg = replace(base, **values) if base is not None else cls(**values)
        return cfg.validate()


def default_config(mode: Mode) -> IndicatorConfig:
    """Default periods for each mode. Quant and Ditz filter on a 200 EMA, Trader does not."""
    mode = Mode(mode)
    if mode in (Mode.QUANT, Mode.DITZ):
        return IndicatorConfig(ma_filter_on=True, ma_length=200, ma_type=MaType.EMA, tsl_percent=20.0)
    if mode == Mode.TRADER:
        return IndicatorConfig(ma_filter_on=False, ma_length=200, ma_type=MaType.EMA, tsl_percent=20.0)
    return IndicatorConfig()


def _env_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path(__file__).resolve().parents[2]
    return root / ".env"


def load_dotenv_if_exists(project_root: Optional[Path] = None) -> None:
    """Load .env from project root if present."""
    path = _env_path(project_root)
    if path.exists():
        load_dotenv(path)


def load_config(config_path: Optional[Path] = None, project_root: Optional[Path] = None) -> "Config":
    """Load config.yaml and overlay with env. Returns Config."""
    load_dotenv_if_exists(project_root)
    root = project_root or Path(__file__).resolve().parents[2]
    path = config_path or root / "config.yaml"
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

    def env(key: str, default: str = "") -> str:
        return os.getenv(key, default).strip()

    modes_section = data.get("modes", {}) or {}
    modes: Dict[Mode, IndicatorConfig] = {}
    for mode in Mode:
        cfg = IndicatorConfig.from_dict(modes_section.get(mode.value, {}) or {}, base=default_config(mode))
        modes[mode] = IndicatorConfig.from_dict(_env_overrides(mode), base=cfg)

    logging_section = data.get("logging", {}) or {}
    return Config(
        modes=modes,
        timeframe=env("BXT_TIMEFRAME", str(data.get("timeframe", "1mo"))),
        log_level=env("BXT_LOG_LEVEL", logging_section.get("level", "INFO")),
        log_dir=Path(logging_section.get("log_dir", "logs")),
        log_file=logging_section.get("log_file"),
    )


def _env_overrides(mode: Mode) -> Dict[str, Any]:
    """BXT_<MODE>_<FIELD> env vars, e.g. BXT_QUANT_TSL_PERCENT=15."""
    out: Dict[str, Any] = {}
    prefix = f"BXT_{mode.name}_"
    for name in IndicatorConfig.__dataclass_fields__:
        raw = os.getenv(prefix + name.upper())
        if raw is None or raw.strip() == "":
            continue
        raw = raw.strip()
        if name in ("ma_filter_on", "tsl_enabled"):
            out[name] = raw.lower() in ("true", "1", "yes")
        elif name == "tsl_percent":
            try:
                out[name] = float(raw)
            except ValueError:
                raise ConfigError(f"{prefix + name.upper()} must be a number, got {raw!r}")
        elif name == "ma_type":
            out[name] = raw
        else:
            try:
                out[name] = int(raw)
            except ValueError:
                raise ConfigError(f"{prefix + name.upper()} must be an integer, got {raw!r}")
    return out


@dataclass
class Config:
    """Unified configuration: per-mode indicator configs plus timeframe and logging."""
    modes: Dict[Mode, IndicatorConfig] = field(default_factory=lambda: {m: default_config(m) for m in Mode})
    timeframe: str = "1mo"
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    log_file: Optional[str] = None

    def for_mode(self, mode: Mode) -> IndicatorConfig:
        mode = Mode(mode)
        return self.modes.get(mode) or default_config(mode)
