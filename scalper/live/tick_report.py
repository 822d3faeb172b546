"""Per-tick account and asset summary rendered to the log."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from ..utils.helpers import format_currency, format_signed
from .position_ledger import PositionSide, PositionState
from .signal_engine import MarketSnapshot
from .settlement import SettlementResult


@dataclass
class AssetStatus:
    """One asset's indicators and position at report time."""
    symbol: str
    price: float
    ema_fast: float
    ema_slow: float
    rsi: float
    position: PositionSide
    size: float
    entry_price: float
    unrealized_pnl: float
    settlement: Optional[SettlementResult] = None

    @classmethod
    def from_snapshot(cls, snapshot: MarketSnapshot, state: PositionState) -> "AssetStatus":
        return cls(
            symbol=snapshot.symbol,
            price=snapshot.price,
            ema_fast=snapshot.ema_fast,
            ema_slow=snapshot.ema_slow,
            rsi=snapshot.rsi,
            position=state.position,
            size=state.size,
            entry_price=state.entry_price,
            unrealized_pnl=state.unrealized_pnl(snapshot.price),
        )


@dataclass
class TickReport:
    """Summary of one evaluation pass over the asset basket."""
    timestamp: datetime
    balance: float
    assets: List[AssetStatus] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def unrealized_pnl(self) -> float:
        return sum(a.unrealized_pnl for a in self.assets)

    @property
    def equity(self) -> float:
        return self.balance + self.unrealized_pnl

    def render(self, ema_fast: int, ema_slow: int) -> List[str]:
        lines = [
            f"========== Tick report [{self.timestamp.strftime('%H:%M:%S')} UTC] ==========",
            f"Balance: {format_currency(self.balance)} | "
            f"Unrealized: {format_signed(self.unrealized_pnl)} | "
            f"Equity: {format_currency(self.equity)}",
        ]
        for a in self.assets:
            if a.position is PositionSide.NONE:
                pos = "[flat]"
            else:
                pos = (f"[{a.position.value} {a.size}] @{a.entry_price:.2f} "
                       f"| uPnL: {format_signed(a.unrealized_pnl)}")
            lines.append(
                f" {a.symbol:<5} ${a.price:<10.2f} | EMA({ema_fast}/{ema_slow}): "
                f"{a.ema_fast:.1f}/{a.ema_slow:.1f} | RSI: {a.rsi:.1f} {pos}"
            )
        if self.skipped:
            lines.append(f" skipped: {', '.join(self.skipped)}")
        return lines
