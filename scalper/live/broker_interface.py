"""Abstract collaborator interfaces: market data, account balance, order execution."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pandas as pd


@dataclass
class OrderRequest:
    """A marketable limit order."""
    symbol: str
    is_buy: bool
    quantity: float
    limit_price: float
    reduce_only: bool = False


@dataclass
class OrderResult:
    """Result of an order submission."""
    success: bool
    order_id: Optional[str] = None
    fill_price: Optional[float] = None
    error: Optional[str] = None


class MarketDataSource(ABC):
    """Source of historical candles."""

    @abstractmethod
    def get_candles(
        self,
        symbol: str,
        interval: str,
        start_time: datetime,
        end_time: datetime,
    ) -> pd.DataFrame:
        """Get candles for ``symbol`` between ``start_time`` and ``end_time``.

        Returns DataFrame with at least a float ``close`` column, oldest row
        first. Returns an empty DataFrame on failure instead of raising.
        """
        pass


class BalanceSource(ABC):
    """Source of the account balance used for position sizing."""

    @abstractmethod
    def get_balance(self) -> float:
        """Get current account value. Returns 0.0 on failure."""
        pass


class OrderExecutor(ABC):
    """Order execution sink. Implement for each exchange."""

    @abstractmethod
    def submit_order(self, order: OrderRequest) -> OrderResult:
        """Submit an order. Failures are reported in the result, not raised."""
        pass
