#!/usr/bin/env python3
"""
B-Xtrender CLI: backtest | indicators
Usage:
  python main.py backtest --csv prices.csv [--mode quant|all] [--config config.yaml]
  python main.py indicators --csv prices.csv [--mode quant] [--last 12]
"""

from __future__ import annotations
import argparse
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Project root
ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bxtrender.core.config import ConfigError, load_config
from bxtrender.core.logger import setup_logging
from bxtrender.core.types import Mode
from bxtrender.backtesting.engine import BacktestEngine
from bxtrender.backtesting.signals import classify_signal, joint_streak
from bxtrender.indicators.oscillators import compute_series
from bxtrender.utils.periods import split_closed_periods

logger = logging.getLogger("bxtrender")


def load_candles_csv(path: Path) -> pd.DataFrame:
    """Read OHLC candles from CSV. Accepts a `time` (unix seconds) or `date` column."""
    df = pd.read_csv(path)
    df.columns = [c.strip().lower() for c in df.columns]
    if "time" not in df.columns and "date" in df.columns:
        df["time"] = pd.to_datetime(df["date"], utc=True)
    elif "time" in df.columns and not pd.api.types.is_numeric_dtype(df["time"]):
        df["time"] = pd.to_datetime(df["time"], utc=True)
    missing = {"time", "open", "high", "low", "close"} - set(df.columns)
    if missing:
        raise ValueError(f"CSV is missing columns: {sorted(missing)}")
    return df.sort_values("time").reset_index(drop=True)


def _modes(arg: str) -> List[Mode]:
    return list(Mode) if arg == "all" else [Mode(arg)]


def _fmt_time(ts: Optional[int]) -> str:
    if ts is None:
        return "-"
    return datetime.fromtimestamp(ts, tz=timezone.utc).strftime("%Y-%m-%d")


def _parse_now(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


def run_backtest(csv_path: Path, mode_arg: str, config_path: Path | None, now: Optional[str]) -> int:
    """Backtest each requested mode on closed candles and print metrics."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    if not csv_path.exists():
        logger.error("Candle file not found: %s", csv_path)
        return 1
    df = load_candles_csv(csv_path)
    closed, next_open = split_closed_periods(df, config.timeframe, _parse_now(now))
    logger.info("%d closed candles, forming period %s", len(closed), "present" if next_open else "absent")

    rows = []
    for mode in _modes(mode_arg):
        engine = BacktestEngine(mode, config.for_mode(mode))
        result = engine.run(closed, next_open=next_open)
        if not result.available:
            logger.warning("%s: not enough history for the indicator", mode.value)
            continue
        m = result.metrics
        sig = classify_signal(result.short, result.long, result.trades, mode)
        rows.append({
            "mode": mode.value,
            "trades": m.total_trades,
            "wins": m.wins,
            "losses": m.losses,
            "win_rate": round(m.win_rate, 1),
            "risk_reward": round(m.risk_reward, 2),
            "total_return": round(m.total_return, 2),
            "avg_return": round(m.avg_return, 2),
            "signal": sig.signal.value,
            "bars": sig.bars,
        })
        if mode_arg != "all":
            print(f"\n--- {mode.value} trades ---")
            for t in result.trades:
                status = "OPEN" if t.is_open else t.exit_reason
                print(
                    f"{_fmt_time(t.entry_date)} @ {t.entry_price:.2f} -> "
                    f"{_fmt_time(t.exit_date)} @ {(t.exit_price or t.current_price or 0):.2f} "
                    f"{t.return_pct:+.2f}% {status}"
                )
    if not rows:
        return 1
    print("\n--- Backtest Results ---")
    print(pd.DataFrame(rows).to_string(index=False))
    return 0


def run_indicators(csv_path: Path, mode_arg: str, config_path: Path | None, last: int) -> int:
    """Print the latest oscillator values."""
    config = load_config(config_path, ROOT)
    setup_logging(config.log_level, config.log_dir, config.log_file)
    if not csv_path.exists():
        logger.error("Candle file not found: %s", csv_path)
        return 1
    mode = Mode(mode_arg)
    series = compute_series(load_candles_csv(csv_path), config.for_mode(mode))
    if series is None:
        logger.warning("Not enough history for the indicator")
        return 1
    rows = []
    for i in range(max(series.start_index, len(series) - last), len(series)):
        rows.append({
            "date": _fmt_time(series.times[i]),
            "close": round(float(series.closes[i]), 2),
            "short": round(float(series.short[i]), 2),
            "long": round(float(series.long[i]), 2),
            "signal": round(float(series.signal[i]), 2),
            "streak": joint_streak(series.short, series.long, i),
        })
    print(pd.DataFrame(rows).to_string(index=False))
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="B-Xtrender CLI")
    parser.add_argument("command", choices=["backtest", "indicators"], help="Run backtest or print indicators")
    parser.add_argument("--csv", type=Path, required=True, help="OHLC candles (time|date, open, high, low, close)")
    parser.add_argument("--mode", default="all", choices=["all"] + [m.value for m in Mode], help="Trading mode")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    parser.add_argument("--now", default=None, help="ISO timestamp used to detect the forming period")
    parser.add_argument("--last", type=int, default=12, help="Bars to print for `indicators`")
    args = parser.parse_args()
    try:
        if args.command == "backtest":
            return run_backtest(args.csv, args.mode, args.config, args.now)
        mode = Mode.DEFENSIVE.value if args.mode == "all" else args.mode
        return run_indicators(args.csv, mode, args.config, args.last)
    except ConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2


if __name__ == "__main__":
    exit(main())
