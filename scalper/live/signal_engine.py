"""Signal engine: per-asset entry/exit decisions from EMA/RSI indicators.

Stateless. Takes a market snapshot and the asset's current position and
returns at most one decision per tick. Rules are checked in priority order
and the first match wins:

1. Stop-loss
2. Take-profit
3. Entry (flat only)
4. Trend-reversal exit (open only)
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Sequence

from ..strategies.indicators import compute_ema, compute_rsi
from .position_ledger import PositionSide, PositionState


class Action(Enum):
    """Order intent produced by the signal engine."""
    OPEN_LONG = "OPEN_LONG"
    OPEN_SHORT = "OPEN_SHORT"
    CLOSE = "CLOSE"

    @property
    def is_open(self) -> bool:
        return self is not Action.CLOSE


REASON_STOP_LOSS = "stop-loss"
REASON_TAKE_PROFIT = "take-profit"
REASON_BULLISH_ENTRY = "bullish-entry"
REASON_BEARISH_ENTRY = "bearish-entry"
REASON_TREND_REVERSAL = "trend-reversal"


@dataclass
class MarketSnapshot:
    """Indicator view of one asset for one tick."""
    symbol: str
    closes: List[float]
    price: float
    ema_fast: float
    ema_slow: float
    rsi: float
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Decision:
    """A trading decision."""
    action: Action
    reason: str
    symbol: str
    price: float
    return_fraction: Optional[float] = None

    def describe(self) -> str:
        text = f"{self.action.value} {self.symbol} @ {self.price} ({self.reason}"
        if self.return_fraction is not None:
            text += f" {self.return_fraction * 100:+.2f}%"
        return text + ")"


class SignalEngine:
    """EMA crossover + RSI band entries under a stop-loss/take-profit overlay.

    Parameters default to the 1-minute scalping profile:
    EMA 7/21, RSI 6, 0.4% stop, 0.8% target, 30-bar history floor.
    """

    def __init__(
        self,
        ema_fast: int = 7,
        ema_slow: int = 21,
        rsi_period: int = 6,
        stop_loss_pct: float = 0.004,
        take_profit_pct: float = 0.008,
        min_history: int = 30,
        rsi_long_band: tuple = (50.0, 85.0),
        rsi_short_band: tuple = (15.0, 50.0),
    ):
        if stop_loss_pct <= 0 or take_profit_pct <= 0:
            raise ValueError("stop_loss_pct and take_profit_pct must be positive")
        if ema_fast >= ema_slow:
            raise ValueError(f"ema_fast ({ema_fast}) must be shorter than ema_slow ({ema_slow})")
        if min_history < max(ema_slow, rsi_period + 1):
            raise ValueError(
                f"min_history ({min_history}) must cover ema_slow ({ema_slow}) "
                f"and rsi_period + 1 ({rsi_period + 1})"
            )

        self.ema_fast = ema_fast
        self.ema_slow = ema_slow
        self.rsi_period = rsi_period
        self.stop_loss_pct = stop_loss_pct
        self.take_profit_pct = take_profit_pct
        self.min_history = min_history
        self.rsi_long_band = rsi_long_band
        self.rsi_short_band = rsi_short_band

    def has_enough_history(self, closes: Sequence[float]) -> bool:
        return len(closes) >= self.min_history

    def build_snapshot(self, symbol: str, closes: Sequence[float]) -> Optional[MarketSnapshot]:
        """Compute indicators for ``closes``.

        Returns None when the history is below the minimum floor, so the
        insufficient-history sentinels never reach ``evaluate``.
        """
        if not self.has_enough_history(closes):
            return None

        closes = [float(c) for c in closes]
        return MarketSnapshot(
            symbol=symbol,
            closes=closes,
            price=closes[-1],
            ema_fast=compute_ema(closes, self.ema_fast),
            ema_slow=compute_ema(closes, self.ema_slow),
            rsi=compute_rsi(closes, self.rsi_period),
        )

    def evaluate(self, snapshot: MarketSnapshot, state: PositionState) -> Optional[Decision]:
        """Return the next action for this asset, or None to hold."""
        price = snapshot.price

        if state.is_open:
            pnl_pct = state.return_fraction(price)

            if pnl_pct <= -self.stop_loss_pct:
                return Decision(Action.CLOSE, REASON_STOP_LOSS, snapshot.symbol, price, pnl_pct)
            if pnl_pct >= self.take_profit_pct:
                return Decision(Action.CLOSE, REASON_TAKE_PROFIT, snapshot.symbol, price, pnl_pct)

            if state.position is PositionSide.LONG and snapshot.ema_fast < snapshot.ema_slow:
                return Decision(Action.CLOSE, REASON_TREND_REVERSAL, snapshot.symbol, price, pnl_pct)
            if state.position is PositionSide.SHORT and snapshot.ema_fast > snapshot.ema_slow:
                return Decision(Action.CLOSE, REASON_TREND_REVERSAL, snapshot.symbol, price, pnl_pct)
            return None

        if self.is_bullish(snapshot):
            return Decision(Action.OPEN_LONG, REASON_BULLISH_ENTRY, snapshot.symbol, price)
        if self.is_bearish(snapshot):
            return Decision(Action.OPEN_SHORT, REASON_BEARISH_ENTRY, snapshot.symbol, price)
        return None

    def is_bullish(self, snapshot: MarketSnapshot) -> bool:
        low, high = self.rsi_long_band
        return snapshot.ema_fast > snapshot.ema_slow and low < snapshot.rsi < high

    def is_bearish(self, snapshot: MarketSnapshot) -> bool:
        low, high = self.rsi_short_band
        return snapshot.ema_fast < snapshot.ema_slow and low < snapshot.rsi < high
