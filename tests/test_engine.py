"""Unit tests for backtesting.engine."""

from dataclasses import replace

import pytest
from bxtrender.backtesting.engine import BacktestEngine, simulate
from bxtrender.core.config import ConfigError, IndicatorConfig, default_config
from bxtrender.core.types import MaType, MarkerShape, Mode, NextOpen
from bxtrender.indicators.oscillators import compute_series
from bxtrender.strategies import joint_entry, light_red_streak

# short warm-up so a 40-bar history is enough (min bars 18, start index 8)
SMALL = IndicatorConfig(short_l1=2, short_l2=5, short_l3=3, long_l1=5, long_l2=3, tsl_percent=20.0)


def _gapped_opens(closes):
    return [closes[0]] + [c + 0.25 for c in closes[:-1]]


def test_insufficient_history_is_not_an_error(make_candles):
    result = simulate(make_candles([100.0 + i for i in range(10)]), mode=Mode.QUANT)
    assert not result.available
    assert result.trades == []
    assert result.markers == []
    assert result.metrics.total_trades == 0


def test_invalid_config_rejected():
    with pytest.raises(ConfigError):
        BacktestEngine(Mode.DEFENSIVE, IndicatorConfig(short_l1=0))


def test_single_cycle_fills_at_next_open(make_candles, v_shape):
    candles = make_candles(v_shape, _gapped_opens(v_shape))
    times = [c.time for c in candles]
    result = simulate(candles, SMALL, Mode.DEFENSIVE)

    closed = [t for t in result.trades if not t.is_open]
    assert len(closed) == 1
    assert result.open_trade is None
    trade = closed[0]

    series = compute_series(candles, SMALL)
    entry_idx = times.index(trade.entry_date)
    signal_bar = entry_idx - 1
    # entry happens during the rise, one bar after the signal
    assert 15 <= signal_bar < 27
    assert series.short[signal_bar] > 0 or light_red_streak(series.short, signal_bar, series.start_index) == 4
    assert trade.entry_price == candles[entry_idx].open
    assert trade.entry_price != candles[signal_bar].close

    exit_idx = times.index(trade.exit_date)
    assert exit_idx > 27
    assert series.short[exit_idx - 1] < 0
    assert trade.exit_price == candles[exit_idx].open
    assert trade.exit_reason == "SIGNAL"
    assert trade.return_pct == pytest.approx((trade.exit_price - trade.entry_price) / trade.entry_price * 100)
    assert result.metrics.total_trades == 1


def test_markers_follow_fills(make_candles, v_shape):
    candles = make_candles(v_shape, _gapped_opens(v_shape))
    result = simulate(candles, SMALL, Mode.DEFENSIVE)
    trade = result.trades[0]
    buy, sell = result.markers
    assert buy.shape == MarkerShape.ARROW_UP
    assert buy.time == trade.entry_date
    assert buy.text == f"BUY ${trade.entry_price:.2f}"
    assert sell.shape == MarkerShape.ARROW_DOWN
    assert sell.time == trade.exit_date
    assert sell.text.startswith("SELL $")


def test_trailing_stop_exit(make_candles, v_shape):
    closes = v_shape[:27] + [137.0, 136.0, 135.0, 134.0]
    candles = make_candles(closes)
    times = [c.time for c in candles]
    result = simulate(candles, SMALL, Mode.TRADER)

    stopped = [t for t in result.trades if t.exit_reason == "TSL"]
    assert len(stopped) == 1
    trade = stopped[0]
    # the 21% drop from the 174 peak happens on bar 27
    assert times.index(trade.entry_date) <= 27
    assert trade.exit_date == times[28]
    assert trade.exit_price == candles[28].open
    assert trade.return_pct == pytest.approx((trade.exit_price - trade.entry_price) / trade.entry_price * 100)
    assert any(m.text.startswith("TSL $") for m in result.markers)


def test_trailing_stop_ignored_by_histogram_modes(make_candles, v_shape):
    closes = v_shape[:27] + [137.0, 136.0, 135.0, 134.0]
    result = simulate(make_candles(closes), SMALL, Mode.DEFENSIVE)
    assert all(t.exit_reason != "TSL" for t in result.trades)


def _first_joint_entry(candles):
    series = compute_series(candles, SMALL)
    for j in range(series.start_index, len(series)):
        if joint_entry(series.short[j], series.short[j - 1], series.long[j], series.long[j - 1]):
            return j
    return None


def test_quant_signal_on_last_bar_enters_at_last_close_without_next_open(make_candles, v_shape):
    """
    With no forming period known there is no next open to fill at, so the
    pending entry is booked on the signal bar itself at its close.
    """
    candles = make_candles(v_shape[:27])
    k = _first_joint_entry(candles)
    assert k is not None
    candles = candles[: k + 1]

    result = simulate(candles, SMALL, Mode.QUANT)
    trade = result.open_trade
    assert trade is not None
    assert trade.entry_date == candles[-1].time
    assert trade.entry_price == candles[-1].close
    assert trade.return_pct == 0.0


def test_quant_signal_on_last_bar_fills_at_next_open(make_candles, v_shape):
    candles = make_candles(v_shape[:27])
    k = _first_joint_entry(candles)
    candles = candles[: k + 1]
    step = candles[-1].time - candles[-2].time
    nxt = NextOpen(time=candles[-1].time + step, open=candles[-1].close + 1.0, close=candles[-1].close + 3.0)

    result = simulate(candles, SMALL, Mode.QUANT, next_open=nxt)
    trade = result.open_trade
    assert trade.entry_date == nxt.time
    assert trade.entry_price == nxt.open
    assert trade.current_price == nxt.close
    assert trade.return_pct == pytest.approx(2.0 / nxt.open * 100)


def test_exit_on_last_bar_uses_next_open(make_candles, v_shape):
    candles = make_candles(v_shape)
    full = simulate(candles, SMALL, Mode.DEFENSIVE)
    times = [c.time for c in candles]
    exit_idx = times.index(full.trades[0].exit_date)
    cut = candles[:exit_idx]

    still_open = simulate(cut, SMALL, Mode.DEFENSIVE)
    assert still_open.open_trade is not None
    assert still_open.open_trade.current_price == cut[-1].close

    nxt = NextOpen(time=candles[exit_idx].time, open=candles[exit_idx].open, close=candles[exit_idx].close)
    filled = simulate(cut, SMALL, Mode.DEFENSIVE, next_open=nxt)
    assert filled.open_trade is None
    assert filled.trades[-1].exit_date == nxt.time
    assert filled.trades[-1].exit_price == nxt.open


@pytest.mark.parametrize("mode", list(Mode))
def test_ledger_invariants(random_walk, mode):
    result = BacktestEngine(mode, default_config(mode)).run(random_walk(300, seed=11))
    trades = result.trades
    open_trades = [t for t in trades if t.is_open]
    assert len(open_trades) <= 1
    if open_trades:
        assert trades[-1].is_open
    for t in trades:
        if not t.is_open:
            assert t.exit_date > t.entry_date
            assert t.exit_reason in ("SIGNAL", "TSL")
    for prev, nxt in zip(trades, trades[1:]):
        assert nxt.entry_date >= prev.exit_date
    buys = [m for m in result.markers if m.shape == MarkerShape.ARROW_UP]
    sells = [m for m in result.markers if m.shape == MarkerShape.ARROW_DOWN]
    assert len(buys) == len(trades)
    assert len(sells) == len(trades) - len(open_trades)
    assert result.metrics.total_trades == len(trades) - len(open_trades)


def test_deterministic(random_walk):
    candles = random_walk(300, seed=3)
    a = simulate(candles, mode=Mode.AGGRESSIVE)
    b = simulate(candles, mode=Mode.AGGRESSIVE)
    assert [t.to_dict() for t in a.trades] == [t.to_dict() for t in b.trades]


def test_sma_filter_blocks_quant_entry(make_candles, v_shape):
    candles = make_candles([400.0] * 30 + v_shape[:27])
    assert simulate(candles, SMALL, Mode.QUANT).trades

    filtered = replace(SMALL, ma_filter_on=True, ma_type=MaType.SMA, ma_length=40)
    series = compute_series(candles, filtered)
    assert series.ma_filter_on
    # the 40-bar mean still carries the 400 plateau through the whole rise
    assert all(series.closes[i] < series.ma[i] for i in range(45, 57))
    result = simulate(candles, filtered, Mode.QUANT)
    assert result.trades == []
    assert result.markers == []


def _stop_out_after_entry(make_candles, v_shape, bars_after_fill):
    """Rise where the entry fill gaps to twice the close, so the stop fires on the fill bar."""
    k = _first_joint_entry(make_candles(v_shape[:27]))
    assert k is not None and k + 1 + bars_after_fill < 27
    closes = v_shape[: k + 2 + bars_after_fill]
    opens = [closes[0]] + closes[:-1]
    opens[k + 1] = closes[k + 1] * 2
    return make_candles(closes, opens), k


def test_stop_on_last_bar_via_next_open_no_buy_back(make_candles, v_shape):
    candles, k = _stop_out_after_entry(make_candles, v_shape, 0)
    series = compute_series(candles, SMALL)
    assert series.short[-1] > 0 and series.long[-1] > 0
    step = candles[-1].time - candles[-2].time
    nxt = NextOpen(time=candles[-1].time + step, open=candles[-1].close, close=candles[-1].close)

    result = simulate(candles, SMALL, Mode.TRADER, next_open=nxt)
    assert len(result.trades) == 1
    trade = result.trades[0]
    assert trade.entry_date == candles[k + 1].time
    assert trade.exit_reason == "TSL"
    assert trade.exit_date == nxt.time
    assert trade.exit_price == nxt.open
    assert result.open_trade is None


def test_stop_on_last_bar_followed_by_pending_entry(make_candles, v_shape):
    candles, k = _stop_out_after_entry(make_candles, v_shape, 1)
    series = compute_series(candles, SMALL)
    assert series.short[-1] > 0 and series.long[-1] > 0

    result = simulate(candles, SMALL, Mode.TRADER)
    closed, reopened = result.trades
    assert closed.exit_reason == "TSL"
    assert closed.exit_date == candles[-1].time
    assert closed.exit_price == candles[-1].open
    assert reopened.is_open
    assert reopened.entry_date == candles[-1].time
    assert reopened.entry_price == candles[-1].close
