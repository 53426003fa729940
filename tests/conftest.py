"""Shared candle builders."""

from datetime import datetime, timezone
from typing import List, Optional, Sequence

import numpy as np
import pytest

from bxtrender.core.types import Candle

MONTH = 30 * 24 * 3600
T0 = int(datetime(2015, 1, 1, tzinfo=timezone.utc).timestamp())


def build_candles(closes: Sequence[float], opens: Optional[Sequence[float]] = None, start: int = T0) -> List[Candle]:
    """Candles at a fixed 30-day spacing. Default open is the previous close."""
    if opens is None:
        opens = [closes[0]] + list(closes[:-1])
    return [
        Candle(
            time=start + i * MONTH,
            open=float(o),
            high=float(max(o, c)) * 1.01,
            low=float(min(o, c)) * 0.99,
            close=float(c),
        )
        for i, (o, c) in enumerate(zip(opens, closes))
    ]


def v_shape_closes() -> List[float]:
    """40 bars: accelerating decline, accelerating rise, accelerating decline."""
    down = [200 - 0.5 * i * i for i in range(15)]          # 200 -> 102
    up = [down[-1] + 0.5 * j * j for j in range(1, 13)]     # -> 174
    down2 = [up[-1] - 0.5 * m * m for m in range(1, 14)]    # -> 89.5
    return down + up + down2


@pytest.fixture
def make_candles():
    return build_candles


@pytest.fixture
def v_shape():
    return v_shape_closes()


@pytest.fixture
def random_walk():
    def _walk(n: int = 300, seed: int = 7) -> List[Candle]:
        rng = np.random.default_rng(seed)
        steps = rng.normal(0.004, 0.06, n)
        closes = 50.0 * np.exp(np.cumsum(steps))
        opens = np.concatenate([[closes[0]], closes[:-1] * (1 + rng.normal(0, 0.01, n - 1))])
        return build_candles(closes.tolist(), opens.tolist())
    return _walk
