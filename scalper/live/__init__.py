"""Live trading engine for Perp Scalper.

Modules:
- position_ledger: Per-asset position state
- signal_engine: Stop-loss / take-profit / entry / reversal decisions
- settlement: Order sizing and ledger updates
- live_engine: Main trading loop
- broker_interface: Abstract market data, balance and execution APIs
- simulated_account: Paper trading balance
- tick_report: Per-tick summary
"""
from .position_ledger import PositionLedger, PositionState, PositionSide, InvalidStateError
from .signal_engine import SignalEngine, MarketSnapshot, Decision, Action
from .settlement import Settlement, SettlementResult
from .live_engine import LiveEngine
from .broker_interface import (
    MarketDataSource, BalanceSource, OrderExecutor, OrderRequest, OrderResult,
)
from .simulated_account import SimulatedAccount
from .tick_report import TickReport, AssetStatus

__all__ = [
    'PositionLedger', 'PositionState', 'PositionSide', 'InvalidStateError',
    'SignalEngine', 'MarketSnapshot', 'Decision', 'Action',
    'Settlement', 'SettlementResult',
    'LiveEngine',
    'MarketDataSource', 'BalanceSource', 'OrderExecutor', 'OrderRequest', 'OrderResult',
    'SimulatedAccount',
    'TickReport', 'AssetStatus',
]
