"""
Backtest engine: one pass over the closed candles, signal at bar close,
fill at the next bar's open. Single position, long only.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from bxtrender.analytics.metrics import compute_metrics
from bxtrender.core.config import IndicatorConfig, default_config
from bxtrender.core.types import (
    IndicatorPoint,
    Marker,
    MarkerPosition,
    MarkerShape,
    Metrics,
    Mode,
    NextOpen,
    Trade,
)
from bxtrender.indicators.oscillators import OscillatorSeries, build_points, compute_series
from bxtrender.risk.trailing_stop import TrailingStop
from bxtrender.strategies import BarContext, both_positive, get_mode, light_red_streak
from bxtrender.utils.candles import CandleInput

logger = logging.getLogger("bxtrender.backtest")

BUY_COLOR = "#00FF00"
SELL_COLOR = "#FF0000"
TSL_COLOR = "#FFA500"


@dataclass
class BacktestResult:
    """Indicator series, trade ledger, chart markers and metrics for one symbol x mode."""
    short: List[IndicatorPoint] = field(default_factory=list)
    long: List[IndicatorPoint] = field(default_factory=list)
    signal: List[IndicatorPoint] = field(default_factory=list)
    trades: List[Trade] = field(default_factory=list)
    markers: List[Marker] = field(default_factory=list)
    metrics: Optional[Metrics] = None

    @property
    def available(self) -> bool:
        return bool(self.short)

    @property
    def open_trade(self) -> Optional[Trade]:
        return next((t for t in self.trades if t.is_open), None)


@dataclass
class _Position:
    """Accumulator threaded through the bar loop."""
    in_position: bool = False
    entry_price: float = 0.0
    entry_date: Optional[int] = None

    def enter(self, time: int, price: float) -> None:
        self.in_position = True
        self.entry_price = price
        self.entry_date = time

    def clear(self) -> None:
        self.in_position = False
        self.entry_price = 0.0
        self.entry_date = None


def _return_pct(entry: float, exit_: float) -> float:
    return (exit_ - entry) / entry * 100.0


def _buy_marker(time: int, price: float) -> Marker:
    return Marker(
        time=time,
        position=MarkerPosition.BELOW_BAR,
        shape=MarkerShape.ARROW_UP,
        text=f"BUY ${price:.2f}",
        color=BUY_COLOR,
    )


def _sell_marker(time: int, price: float, return_pct: float, tsl: bool) -> Marker:
    ret = f"+{return_pct:.1f}%" if return_pct >= 0 else f"{return_pct:.1f}%"
    label = "TSL" if tsl else "SELL"
    return Marker(
        time=time,
        position=MarkerPosition.ABOVE_BAR,
        shape=MarkerShape.ARROW_DOWN,
        text=f"{label} ${price:.2f} {ret}",
        color=TSL_COLOR if tsl else SELL_COLOR,
    )


class BacktestEngine:
    """
    Replays one mode over a candle history.
    A signal on bar i fills at open[i+1]; on the last closed bar it fills at
    `next_open` (first open of the forming period) when given, else it is dropped.
    """

    def __init__(self, mode: Mode, config: Optional[IndicatorConfig] = None):
        self.mode = Mode(mode)
        self.config = (config or default_config(self.mode)).validate()
        self.rules = get_mode(self.mode)

    def run(self, candles: CandleInput, next_open: Optional[NextOpen] = None) -> BacktestResult:
        series = compute_series(candles, self.config)
        if series is None:
            return BacktestResult(metrics=compute_metrics([]))

        points = build_points(series, self.mode)
        trades: List[Trade] = []
        markers: List[Marker] = []
        pos = _Position()
        tsl = TrailingStop(self.config.tsl_percent, enabled=self.rules.uses_trailing_stop and self.config.tsl_enabled)
        short, long_, signal = series.short, series.long, series.signal
        opens, closes, times = series.opens, series.closes, series.times
        start = series.start_index

        for i in range(start, len(series)):
            close = float(closes[i])
            tsl_triggered = tsl.update(close) if pos.in_position else False
            ctx = BarContext(
                index=i,
                short=float(short[i]),
                short_prev=float(short[i - 1]),
                long=float(long_[i]),
                long_prev=float(long_[i - 1]),
                signal=float(signal[i]),
                signal_prev=float(signal[i - 1]),
                open=float(opens[i]),
                close=close,
                ma=float(series.ma[i]) if series.ma is not None else 0.0,
                ma_filter_on=series.ma_filter_on,
                light_red_streak=light_red_streak(short, i, start),
                in_position=pos.in_position,
                entry_price=pos.entry_price,
                tsl_triggered=tsl_triggered,
            )

            # SELL wins over BUY on the same bar
            if self.rules.is_exit(ctx):
                fill = self._fill(series, i, next_open)
                if fill is None:
                    continue
                exit_time, exit_price = fill
                ret = _return_pct(pos.entry_price, exit_price)
                trades.append(Trade(
                    entry_date=pos.entry_date,
                    entry_price=pos.entry_price,
                    exit_date=exit_time,
                    exit_price=exit_price,
                    return_pct=ret,
                    is_open=False,
                    exit_reason="TSL" if tsl_triggered else "SIGNAL",
                ))
                markers.append(_sell_marker(exit_time, exit_price, ret, tsl_triggered))
                pos.clear()
                tsl.reset()
            elif self.rules.is_entry(ctx):
                fill = self._fill(series, i, next_open)
                if fill is None:
                    continue
                entry_time, entry_price = fill
                pos.enter(entry_time, entry_price)
                tsl.reset(entry_price)
                markers.append(_buy_marker(entry_time, entry_price))

        if pos.in_position and pos.entry_price > 0:
            current = next_open.close if next_open is not None and next_open.close > 0 else float(closes[-1])
            trades.append(Trade(
                entry_date=pos.entry_date,
                entry_price=pos.entry_price,
                return_pct=_return_pct(pos.entry_price, current),
                is_open=True,
                current_price=current,
            ))
        elif self.mode.is_quant_family:
            self._append_pending_entry(series, trades, markers, next_open)

        logger.debug(
            "%s: %d bars from index %d, %d trades",
            self.mode.value, len(series), start, len(trades),
        )
        return BacktestResult(
            short=points["short"],
            long=points["long"],
            signal=points["signal"],
            trades=trades,
            markers=markers,
            metrics=compute_metrics(trades),
        )

    @staticmethod
    def _fill(series: OscillatorSeries, i: int, next_open: Optional[NextOpen]) -> Optional[Tuple[int, float]]:
        """(time, price) at which a signal on bar i executes, or None."""
        if i + 1 < len(series) and series.opens[i + 1] > 0:
            return series.times[i + 1], float(series.opens[i + 1])
        if i + 1 >= len(series) and next_open is not None and next_open.open > 0:
            return next_open.time, float(next_open.open)
        return None

    def _ma_ok(self, series: OscillatorSeries, j: int) -> bool:
        return not series.ma_filter_on or series.closes[j] > series.ma[j]

    def _append_pending_entry(
        self,
        series: OscillatorSeries,
        trades: List[Trade],
        markers: List[Marker],
        next_open: Optional[NextOpen],
    ) -> None:
        """
        Flat at the end while both oscillators are positive on the last bar:
        open the position the joint-positive condition implies. Fills at
        `next_open` when known, else at the last close. A crossing earlier in
        the window would already have been filled by the bar loop.
        """
        last = len(series) - 1
        if not (both_positive(series.short[last], series.long[last]) and self._ma_ok(series, last)):
            return

        last_trade = trades[-1] if trades else None
        if last_trade is not None and next_open is not None:
            # just sold at next_open; don't buy back on the same fill
            if not last_trade.is_open and last_trade.exit_date == next_open.time:
                return

        last_close = float(series.closes[last])
        if next_open is not None and next_open.open > 0:
            entry_time, entry_price = next_open.time, float(next_open.open)
        else:
            entry_time, entry_price = series.times[last], last_close
        current = next_open.close if next_open is not None and next_open.close > 0 else last_close

        trades.append(Trade(
            entry_date=entry_time,
            entry_price=entry_price,
            return_pct=_return_pct(entry_price, current),
            is_open=True,
            current_price=current,
        ))
        markers.append(_buy_marker(entry_time, entry_price))


def simulate(
    candles: CandleInput,
    config: Optional[IndicatorConfig] = None,
    mode: Mode = Mode.DEFENSIVE,
    next_open: Optional[NextOpen] = None,
) -> BacktestResult:
    """Run one mode over a candle history. Empty result when history is insufficient."""
    return BacktestEngine(mode, config).run(candles, next_open=next_open)
