"""Analytics: win rate, risk/reward, compounded and average return."""

from bxtrender.analytics.metrics import (
    compute_metrics,
    compounded_return,
    risk_reward,
    win_rate,
)

__all__ = [
    "compute_metrics",
    "compounded_return",
    "risk_reward",
    "win_rate",
]
