"""Position ledger: one mutable position record per configured asset.

The ledger is the only owner of position state. Every mutator leaves a
record either fully flat (NONE / 0 / 0) or fully open, never in between.
"""
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, List

from loguru import logger


class InvalidStateError(Exception):
    """Raised when opening an open position or closing a flat one."""


class PositionSide(Enum):
    """Position direction"""
    NONE = "NONE"
    LONG = "LONG"
    SHORT = "SHORT"


@dataclass
class PositionState:
    """Position record for a single asset."""
    symbol: str
    position: PositionSide = PositionSide.NONE
    entry_price: float = 0.0
    size: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.position is not PositionSide.NONE

    def return_fraction(self, current_price: float) -> float:
        """Unrealized return as a fraction of entry price (0.0 when flat)."""
        if self.position is PositionSide.LONG:
            return (current_price - self.entry_price) / self.entry_price
        if self.position is PositionSide.SHORT:
            return (self.entry_price - current_price) / self.entry_price
        return 0.0

    def unrealized_pnl(self, current_price: float) -> float:
        """Unrealized P&L in quote currency (0.0 when flat)."""
        if self.position is PositionSide.LONG:
            return (current_price - self.entry_price) * self.size
        if self.position is PositionSide.SHORT:
            return (self.entry_price - current_price) * self.size
        return 0.0


class PositionLedger:
    """Holds a PositionState per symbol for the lifetime of the process.

    ``get`` returns a snapshot copy; callers mutate only through
    ``open_long``, ``open_short`` and ``close``.
    """

    def __init__(self, symbols: Iterable[str]):
        self._lock = threading.RLock()
        self._states: Dict[str, PositionState] = {
            symbol: PositionState(symbol=symbol) for symbol in symbols
        }

    @property
    def symbols(self) -> List[str]:
        return list(self._states)

    def get(self, symbol: str) -> PositionState:
        """Return a copy of the current state for ``symbol``."""
        with self._lock:
            return replace(self._require(symbol))

    def open_long(self, symbol: str, price: float, size: float) -> PositionState:
        return self._open(symbol, PositionSide.LONG, price, size)

    def open_short(self, symbol: str, price: float, size: float) -> PositionState:
        return self._open(symbol, PositionSide.SHORT, price, size)

    def close(self, symbol: str, price: float) -> float:
        """Flatten the position at ``price`` and return the realized P&L."""
        with self._lock:
            state = self._require(symbol)
            if not state.is_open:
                raise InvalidStateError(f"{symbol}: no open position to close")

            pnl = state.unrealized_pnl(price)
            side = state.position
            state.position = PositionSide.NONE
            state.entry_price = 0.0
            state.size = 0.0

        logger.debug(f"Ledger: closed {side.value} {symbol} @ {price}, pnl={pnl:.4f}")
        return pnl

    def open_positions(self) -> Dict[str, PositionState]:
        with self._lock:
            return {s: replace(p) for s, p in self._states.items() if p.is_open}

    def _open(self, symbol: str, side: PositionSide, price: float, size: float) -> PositionState:
        if price <= 0:
            raise ValueError(f"{symbol}: entry price must be positive, got {price}")
        if size <= 0:
            raise ValueError(f"{symbol}: size must be positive, got {size}")

        with self._lock:
            state = self._require(symbol)
            if state.is_open:
                raise InvalidStateError(
                    f"{symbol}: cannot open {side.value}, already {state.position.value}"
                )
            state.position = side
            state.entry_price = price
            state.size = size
            snapshot = replace(state)

        logger.debug(f"Ledger: opened {side.value} {symbol} {size} @ {price}")
        return snapshot

    def _require(self, symbol: str) -> PositionState:
        try:
            return self._states[symbol]
        except KeyError:
            raise KeyError(f"Unknown symbol: {symbol}") from None
