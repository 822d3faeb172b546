"""Sizing and settlement: turns a decision into an order size and ledger update.

Simulation mode credits realized P&L to a SimulatedAccount and never
submits orders. Live mode submits a marketable limit order first and only
touches the ledger once the exchange accepted it.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from loguru import logger

from ..utils.helpers import truncate
from .broker_interface import BalanceSource, OrderExecutor, OrderRequest, OrderResult
from .position_ledger import InvalidStateError, PositionLedger, PositionSide
from .signal_engine import Action, Decision
from .simulated_account import SimulatedAccount


@dataclass
class SettlementResult:
    """Outcome of settling one decision."""
    action: Action
    symbol: str
    price: float
    quantity: float
    success: bool
    realized_pnl: Optional[float] = None
    order_id: Optional[str] = None
    error: Optional[str] = None


class Settlement:
    """Sizes and settles decisions against the position ledger.

    Args:
        ledger: Position ledger (sole writer is this class)
        weights: Capital fraction per symbol
        balance_source: Account balance used for OPEN sizing
        executor: Order sink; None selects simulation mode
        leverage: Notional multiplier applied at sizing time
        slippage: Limit price allowance for live orders (0.05 = 5%)
        size_decimals: Quantity precision, truncated
    """

    def __init__(
        self,
        ledger: PositionLedger,
        weights: Dict[str, float],
        balance_source: BalanceSource,
        executor: Optional[OrderExecutor] = None,
        leverage: float = 5.0,
        slippage: float = 0.05,
        size_decimals: int = 4,
    ):
        if executor is None and not isinstance(balance_source, SimulatedAccount):
            raise ValueError("Simulation mode requires a SimulatedAccount balance source")
        if leverage <= 0:
            raise ValueError(f"leverage must be positive, got {leverage}")

        self.ledger = ledger
        self.weights = dict(weights)
        self.balance_source = balance_source
        self.executor = executor
        self.leverage = leverage
        self.slippage = slippage
        self.size_decimals = size_decimals

    @property
    def live_mode(self) -> bool:
        return self.executor is not None

    def fetch_balance(self) -> float:
        """Current balance, or 0.0 if the source fails."""
        try:
            return float(self.balance_source.get_balance())
        except Exception as e:
            logger.warning(f"Balance fetch failed: {e}")
            return 0.0

    def size_for(self, action: Action, symbol: str, balance: float, price: float) -> float:
        """Order quantity for ``action``.

        OPEN: ``balance * weight * leverage / price`` truncated to
        ``size_decimals``. CLOSE: the ledger's recorded size, never
        recomputed from the balance.
        """
        if action is Action.CLOSE:
            return self.ledger.get(symbol).size

        if price <= 0 or balance <= 0:
            return 0.0
        notional = balance * self.weights[symbol] * self.leverage
        return truncate(notional / price, self.size_decimals)

    def limit_price(self, price: float, is_buy: bool) -> float:
        return price * (1 + self.slippage) if is_buy else price * (1 - self.slippage)

    def execute(self, decision: Decision) -> Optional[SettlementResult]:
        """Size and settle ``decision``. Returns None when the order is skipped."""
        balance = self.fetch_balance() if decision.action.is_open else 0.0
        quantity = self.size_for(decision.action, decision.symbol, balance, decision.price)

        if quantity <= 0:
            logger.warning(
                f"{decision.symbol}: skipping {decision.action.value}, "
                f"quantity {quantity} (balance=${balance:,.2f})"
            )
            return None

        logger.info(f"SIGNAL: {decision.describe()}, size={quantity}")
        return self.settle(decision.action, decision.symbol, decision.price, quantity)

    def settle(self, action: Action, symbol: str, price: float, quantity: float) -> SettlementResult:
        """Apply ``action`` to the ledger, submitting an order first in live mode.

        Raises:
            InvalidStateError: Opening an open position or closing a flat one
        """
        state = self.ledger.get(symbol)
        if action is Action.CLOSE and not state.is_open:
            raise InvalidStateError(f"{symbol}: no open position to close")
        if action.is_open and state.is_open:
            raise InvalidStateError(
                f"{symbol}: cannot {action.value}, already {state.position.value}"
            )
        order_id = None

        if self.live_mode:
            is_buy = self._is_buy(action, state.position)
            order = OrderRequest(
                symbol=symbol,
                is_buy=is_buy,
                quantity=quantity,
                limit_price=self.limit_price(price, is_buy),
                reduce_only=action is Action.CLOSE,
            )
            try:
                result = self.executor.submit_order(order)
            except Exception as e:
                result = OrderResult(success=False, error=str(e))
            if not result.success:
                logger.error(f"ORDER FAILED: {action.value} {symbol} {quantity} - {result.error}")
                return SettlementResult(
                    action=action, symbol=symbol, price=price, quantity=quantity,
                    success=False, error=result.error,
                )
            order_id = result.order_id

        if action is Action.CLOSE:
            pnl = self.ledger.close(symbol, price)
            if not self.live_mode:
                self.balance_source.apply_pnl(symbol, pnl)
            logger.info(f"CLOSED: {state.position.value} {symbol} {quantity} @ {price}, P&L=${pnl:,.2f}")
            return SettlementResult(
                action=action, symbol=symbol, price=price, quantity=quantity,
                success=True, realized_pnl=pnl, order_id=order_id,
            )

        if action is Action.OPEN_LONG:
            self.ledger.open_long(symbol, price, quantity)
        else:
            self.ledger.open_short(symbol, price, quantity)
        logger.info(f"OPENED: {action.value} {symbol} {quantity} @ {price}")
        return SettlementResult(
            action=action, symbol=symbol, price=price, quantity=quantity,
            success=True, order_id=order_id,
        )

    @staticmethod
    def _is_buy(action: Action, side: PositionSide) -> bool:
        if action is Action.CLOSE:
            return side is PositionSide.SHORT
        return action is Action.OPEN_LONG
