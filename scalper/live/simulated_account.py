"""Simulated account for paper trading. No real orders placed.

Holds the paper balance. Realized P&L from closed positions is credited
here; opening a position reserves no margin.
"""
from loguru import logger

from .broker_interface import BalanceSource


class SimulatedAccount(BalanceSource):
    """In-memory balance credited with realized P&L."""

    def __init__(self, initial_balance: float = 1000.0):
        if initial_balance < 0:
            raise ValueError(f"initial_balance must be non-negative, got {initial_balance}")
        self.initial_balance = initial_balance
        self.balance = initial_balance
        self.closed_trades = 0

    def get_balance(self) -> float:
        return self.balance

    def apply_pnl(self, symbol: str, pnl: float) -> float:
        """Credit (or debit) realized P&L and return the new balance."""
        self.balance += pnl
        self.closed_trades += 1
        logger.info(f"Simulated balance: ${self.balance:,.2f} ({pnl:+.2f} from {symbol})")
        return self.balance

    @property
    def total_pnl(self) -> float:
        return self.balance - self.initial_balance
