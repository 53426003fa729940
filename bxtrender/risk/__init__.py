"""Risk management: trailing stop."""

from bxtrender.risk.trailing_stop import TrailingStop

__all__ = ["TrailingStop"]
