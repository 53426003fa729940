"""
Logging setup. Console (stderr, so CLI tables on stdout stay clean) plus optional log file.

The CLI logs config and data problems (missing CSV, invalid config,
not enough history for a mode) at WARNING/ERROR, the closed vs forming
period split at INFO, and per-mode bar counts and dropped candles at DEBUG.
"""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional


def setup_logging(
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger: console and optional file.
    Engine modules log under bxtrender.* and inherit these handlers.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger("bxtrender")
    root.setLevel(log_level)
    root.handlers.clear()

    fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"
    formatter = logging.Formatter(fmt, datefmt=date_fmt)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_dir and log_file:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    return root
