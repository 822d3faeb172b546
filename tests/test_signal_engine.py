"""Tests for rule priority and entry/exit conditions in the signal engine."""

from __future__ import annotations

import pytest

from scalper.live import Action, MarketSnapshot, PositionSide, PositionState, SignalEngine
from scalper.live.signal_engine import (
    REASON_STOP_LOSS,
    REASON_TAKE_PROFIT,
    REASON_TREND_REVERSAL,
)

from conftest import BEARISH_CLOSES, BULLISH_CLOSES

# pylint: disable=missing-function-docstring


def _snapshot(price=100.0, ema_fast=100.0, ema_slow=100.0, rsi=50.0, symbol="BTC"):
    return MarketSnapshot(
        symbol=symbol, closes=[price], price=price,
        ema_fast=ema_fast, ema_slow=ema_slow, rsi=rsi,
    )


def _flat(symbol="BTC"):
    return PositionState(symbol=symbol)


def _long(entry=100.0, size=1.0):
    return PositionState("BTC", PositionSide.LONG, entry, size)


def _short(entry=100.0, size=1.0):
    return PositionState("BTC", PositionSide.SHORT, entry, size)


@pytest.fixture(name="engine")
def fixture_engine():
    return SignalEngine()


def test_bullish_trend_with_rsi_in_band_opens_long(engine):
    decision = engine.evaluate(_snapshot(ema_fast=110, ema_slow=100, rsi=60), _flat())

    assert decision.action is Action.OPEN_LONG
    assert decision.price == 100.0


def test_bearish_trend_with_rsi_in_band_opens_short(engine):
    decision = engine.evaluate(_snapshot(ema_fast=90, ema_slow=100, rsi=30), _flat())

    assert decision.action is Action.OPEN_SHORT


@pytest.mark.parametrize("rsi", [50.0, 85.0, 90.0])
def test_long_entry_suppressed_outside_rsi_band(engine, rsi):
    assert engine.evaluate(_snapshot(ema_fast=110, ema_slow=100, rsi=rsi), _flat()) is None


@pytest.mark.parametrize("rsi", [50.0, 15.0, 5.0])
def test_short_entry_suppressed_outside_rsi_band(engine, rsi):
    assert engine.evaluate(_snapshot(ema_fast=90, ema_slow=100, rsi=rsi), _flat()) is None


def test_equal_emas_produce_no_entry(engine):
    assert engine.evaluate(_snapshot(ema_fast=100, ema_slow=100, rsi=60), _flat()) is None


def test_stop_loss_beats_favourable_trend(engine):
    snapshot = _snapshot(price=99.5, ema_fast=110, ema_slow=100, rsi=60)

    decision = engine.evaluate(snapshot, _long(entry=100.0))

    assert decision.action is Action.CLOSE
    assert decision.reason == REASON_STOP_LOSS
    assert decision.return_fraction == pytest.approx(-0.005)


def test_short_stop_loss_on_rising_price(engine):
    decision = engine.evaluate(_snapshot(price=100.5, ema_fast=90, ema_slow=100), _short())

    assert decision.reason == REASON_STOP_LOSS


def test_take_profit_closes_long(engine):
    decision = engine.evaluate(_snapshot(price=101.0, ema_fast=110, ema_slow=100), _long())

    assert decision.action is Action.CLOSE
    assert decision.reason == REASON_TAKE_PROFIT


def test_take_profit_beats_trend_reversal(engine):
    # Short in profit while the trend has flipped bullish
    decision = engine.evaluate(_snapshot(price=99.0, ema_fast=110, ema_slow=100), _short())

    assert decision.reason == REASON_TAKE_PROFIT


def test_long_closed_on_bearish_reversal(engine):
    decision = engine.evaluate(_snapshot(price=100.1, ema_fast=95, ema_slow=100), _long())

    assert decision.action is Action.CLOSE
    assert decision.reason == REASON_TREND_REVERSAL


def test_short_closed_on_bullish_reversal(engine):
    decision = engine.evaluate(_snapshot(price=99.9, ema_fast=105, ema_slow=100), _short())

    assert decision.reason == REASON_TREND_REVERSAL


def test_open_position_never_emits_entry(engine):
    # Trend and RSI favour a new long, but a long is already held
    snapshot = _snapshot(price=100.2, ema_fast=110, ema_slow=100, rsi=60)

    assert engine.evaluate(snapshot, _long()) is None


def test_stop_loss_and_take_profit_never_both_hold(engine):
    for side in (PositionSide.LONG, PositionSide.SHORT):
        state = PositionState("BTC", side, 100.0, 1.0)
        for tenth_bp in range(-300, 301):
            fraction = state.return_fraction(100.0 + tenth_bp * 0.01)
            stop = fraction <= -engine.stop_loss_pct
            target = fraction >= engine.take_profit_pct
            assert not (stop and target)


def test_snapshot_requires_minimum_history(engine):
    assert engine.build_snapshot("BTC", BULLISH_CLOSES[:29]) is None


def test_snapshot_from_bullish_history_opens_long(engine):
    snapshot = engine.build_snapshot("BTC", BULLISH_CLOSES)

    assert snapshot.price == BULLISH_CLOSES[-1]
    assert snapshot.ema_fast > snapshot.ema_slow
    assert snapshot.rsi == pytest.approx(100 - 100 / 3)
    assert engine.evaluate(snapshot, _flat()).action is Action.OPEN_LONG


def test_snapshot_from_bearish_history_opens_short(engine):
    snapshot = engine.build_snapshot("BTC", BEARISH_CLOSES)

    assert snapshot.ema_fast < snapshot.ema_slow
    assert engine.evaluate(snapshot, _flat()).action is Action.OPEN_SHORT


def test_history_floor_must_cover_indicator_periods():
    with pytest.raises(ValueError):
        SignalEngine(ema_slow=40, min_history=30)
