"""Shared fakes and fixtures for the test suite."""

from __future__ import annotations

from typing import Dict, List

import pandas as pd
import pytest

from scalper.live import (
    BalanceSource,
    MarketDataSource,
    OrderExecutor,
    OrderRequest,
    OrderResult,
    PositionLedger,
    Settlement,
    SimulatedAccount,
)

WEIGHTS = {"BTC": 0.4, "ETH": 0.3, "SOL": 0.3}


def trending_closes(start: float, step: float, tail: List[float]) -> List[float]:
    """34 steadily trending closes followed by ``tail`` relative moves."""
    closes = [start + i * step for i in range(34)]
    for move in tail:
        closes.append(closes[-1] + move)
    return closes


# Uptrend whose last six deltas are +1 -1 +1 +1 -1 +1 (RSI 66.7)
BULLISH_CLOSES = trending_closes(100.0, 1.0, [1, -1, 1, 1, -1, 1])
# Downtrend whose last six deltas are -1 +1 -1 -1 +1 -1 (RSI 33.3)
BEARISH_CLOSES = trending_closes(200.0, -1.0, [-1, 1, -1, -1, 1, -1])


class FakeMarketData(MarketDataSource):
    """Serves fixed close series; an Exception value is raised instead."""

    def __init__(self, series: Dict[str, object]):
        self.series = series
        self.calls: List[str] = []

    def get_candles(self, symbol, interval, start_time, end_time):
        self.calls.append(symbol)
        value = self.series.get(symbol, [])
        if isinstance(value, Exception):
            raise value
        return pd.DataFrame({"close": list(value)})


class FakeBalance(BalanceSource):
    def __init__(self, balance: float = 1000.0):
        self.balance = balance

    def get_balance(self) -> float:
        return self.balance


class FakeExecutor(OrderExecutor):
    """Records submitted orders and answers with a fixed success flag."""

    def __init__(self, success: bool = True):
        self.success = success
        self.orders: List[OrderRequest] = []

    def submit_order(self, order: OrderRequest) -> OrderResult:
        self.orders.append(order)
        if self.success:
            return OrderResult(success=True, order_id=str(len(self.orders)))
        return OrderResult(success=False, error="rejected")


@pytest.fixture(name="ledger")
def fixture_ledger():
    return PositionLedger(WEIGHTS)


@pytest.fixture(name="account")
def fixture_account():
    return SimulatedAccount(initial_balance=1000.0)


@pytest.fixture(name="sim_settlement")
def fixture_sim_settlement(ledger, account):
    return Settlement(ledger, WEIGHTS, balance_source=account, leverage=5)


@pytest.fixture(name="executor")
def fixture_executor():
    return FakeExecutor()


@pytest.fixture(name="live_settlement")
def fixture_live_settlement(ledger, executor):
    return Settlement(
        ledger, WEIGHTS, balance_source=FakeBalance(1000.0), executor=executor, leverage=5
    )


class RaisingExecutor(FakeExecutor):
    """Raises ``error`` for the listed symbols, succeeds for the rest."""

    def __init__(self, error: Exception, symbols=("BTC",)):
        super().__init__(success=True)
        self.error = error
        self.failing = set(symbols)

    def submit_order(self, order: OrderRequest) -> OrderResult:
        if order.symbol in self.failing:
            self.orders.append(order)
            raise self.error
        return super().submit_order(order)
