"""
Performance metrics over the completed trades of a ledger.
Recomputed in full on every call; open trades are ignored.
"""

from __future__ import annotations
from typing import Iterable, List

import numpy as np

from bxtrender.core.types import Metrics, Trade


def win_rate(returns: List[float]) -> float:
    """Percent of trades with a positive return. Zero return counts as a loss."""
    if not returns:
        return 0.0
    return sum(1 for r in returns if r > 0) / len(returns) * 100.0


def compounded_return(returns: List[float]) -> float:
    """Total return in percent, reinvesting the full capital trade after trade."""
    if not returns:
        return 0.0
    return float(np.prod(1.0 + np.asarray(returns, dtype=float) / 100.0) - 1.0) * 100.0


def risk_reward(returns: List[float]) -> float:
    """|average win / average loss|; average loss is 1 when there are no losses."""
    wins = [r for r in returns if r > 0]
    losses = [r for r in returns if r <= 0]
    avg_win = sum(wins) / len(wins) if wins else 0.0
    avg_loss = abs(sum(losses) / len(losses)) if losses else 1.0
    if avg_loss <= 0:
        return avg_win
    return avg_win / avg_loss


def compute_metrics(trades: Iterable[Trade]) -> Metrics:
    """Metrics from the closed trades of a ledger."""
    returns = [t.return_pct for t in trades if not t.is_open]
    total = len(returns)
    if total == 0:
        return Metrics(
            win_rate=0.0, risk_reward=0.0, total_return=0.0, avg_return=0.0,
            total_trades=0, wins=0, losses=0,
        )
    wins = sum(1 for r in returns if r > 0)
    return Metrics(
        win_rate=win_rate(returns),
        risk_reward=risk_reward(returns),
        total_return=compounded_return(returns),
        avg_return=sum(returns) / total,
        total_trades=total,
        wins=wins,
        losses=total - wins,
    )
