"""Live trading engine: main loop that evaluates every asset on a fixed period.

Orchestrates, per asset and in configuration order:
- Candle fetch
- History floor check
- Indicator snapshot and decision
- Sizing and settlement (simulated or live)

Ticks never overlap. A tick requested while another is still running is
skipped, and a tick that overruns the period skips the missed firings.
"""
import threading
import time
from datetime import datetime, timedelta
from typing import Dict, Optional

import pandas as pd
from loguru import logger

from ..utils.helpers import utc_now
from .broker_interface import MarketDataSource
from .position_ledger import InvalidStateError
from .settlement import Settlement
from .signal_engine import SignalEngine
from .simulated_account import SimulatedAccount
from .tick_report import AssetStatus, TickReport


class LiveEngine:
    """Main trading engine."""

    def __init__(
        self,
        market_data: MarketDataSource,
        settlement: Settlement,
        signal_engine: Optional[SignalEngine] = None,
        timeframe: str = "1m",
        history_minutes: int = 60,
        check_interval: float = 5.0,
    ):
        if check_interval < 0:
            raise ValueError(f"check_interval must be non-negative, got {check_interval}")

        self.market_data = market_data
        self.settlement = settlement
        self.ledger = settlement.ledger
        self.signal_engine = signal_engine or SignalEngine()
        self.symbols = self.ledger.symbols
        self.timeframe = timeframe
        self.history_minutes = history_minutes
        self.check_interval = check_interval

        self.running = False
        self._stop_event = threading.Event()
        self._tick_lock = threading.Lock()

        # Stats
        self.tick_count = 0
        self.overlapping_ticks = 0
        self.total_signals = 0
        self.total_trades_opened = 0
        self.total_trades_closed = 0
        self.failed_orders = 0
        self.last_report: Optional[TickReport] = None

    def start(self, max_ticks: Optional[int] = None):
        """Run the trading loop until stopped (or ``max_ticks`` ticks have run)."""
        mode = "LIVE" if self.settlement.live_mode else "SIMULATION"
        logger.info(f"Starting engine: mode={mode}, assets={self.symbols}, "
                    f"leverage={self.settlement.leverage}x, interval={self.check_interval}s")
        logger.info(f"Strategy: EMA {self.signal_engine.ema_fast}/{self.signal_engine.ema_slow}, "
                    f"RSI {self.signal_engine.rsi_period}, "
                    f"SL={self.signal_engine.stop_loss_pct:.2%}, TP={self.signal_engine.take_profit_pct:.2%}")

        self.running = True
        self._stop_event.clear()

        try:
            self._main_loop(max_ticks)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        except Exception as e:
            logger.exception(f"Engine error: {e}")
            raise
        finally:
            self.running = False
            logger.info("Engine stopped")

    def stop(self):
        """Signal the engine to stop after the current tick."""
        self.running = False
        self._stop_event.set()

    def _main_loop(self, max_ticks: Optional[int] = None):
        ticks = 0
        next_run = time.monotonic()

        while self.running:
            self.run_tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break

            next_run += self.check_interval
            now = time.monotonic()
            if now > next_run and self.check_interval > 0:
                missed = int((now - next_run) // self.check_interval) + 1
                logger.warning(f"Tick overran the {self.check_interval}s period, skipping {missed} firing(s)")
                next_run += missed * self.check_interval

            if self._stop_event.wait(max(0.0, next_run - now)):
                break

    def run_tick(self, now: Optional[datetime] = None) -> Optional[TickReport]:
        """One evaluation pass over all assets.

        Returns the tick report, or None if another tick is still in flight.
        """
        if not self._tick_lock.acquire(blocking=False):
            self.overlapping_ticks += 1
            logger.warning("Previous tick still in progress, skipping this one")
            return None

        try:
            return self._trading_tick(now or utc_now())
        finally:
            self._tick_lock.release()

    def _trading_tick(self, now: datetime) -> TickReport:
        report = TickReport(timestamp=now, balance=0.0)

        for symbol in self.symbols:
            try:
                status = self._process_asset(symbol, now)
            except InvalidStateError as e:
                logger.error(f"{symbol}: invalid state transition, action skipped: {e}")
                status = None
            if status is None:
                report.skipped.append(symbol)
            else:
                report.assets.append(status)

        report.balance = self.settlement.fetch_balance()
        for line in report.render(self.signal_engine.ema_fast, self.signal_engine.ema_slow):
            logger.info(line)

        self.tick_count += 1
        self.last_report = report
        return report

    def _process_asset(self, symbol: str, now: datetime) -> Optional[AssetStatus]:
        candles = self._fetch_candles(symbol, now)
        try:
            closes = candles['close'].astype(float).tolist() if 'close' in candles else []
        except (TypeError, ValueError) as e:
            logger.warning(f"{symbol}: malformed candle data: {e}")
            return None

        snapshot = self.signal_engine.build_snapshot(symbol, closes)
        if snapshot is None:
            logger.warning(f"{symbol}: insufficient data ({len(closes)} bars, "
                           f"need {self.signal_engine.min_history})")
            return None

        decision = self.signal_engine.evaluate(snapshot, self.ledger.get(symbol))
        result = None
        if decision is not None:
            self.total_signals += 1
            result = self.settlement.execute(decision)
            if result is not None:
                if not result.success:
                    self.failed_orders += 1
                elif result.action.is_open:
                    self.total_trades_opened += 1
                else:
                    self.total_trades_closed += 1

        status = AssetStatus.from_snapshot(snapshot, self.ledger.get(symbol))
        status.settlement = result
        return status

    def _fetch_candles(self, symbol: str, now: datetime) -> pd.DataFrame:
        """Candles for the look-back window; empty DataFrame on any failure."""
        start = now - timedelta(minutes=self.history_minutes)
        try:
            candles = self.market_data.get_candles(symbol, self.timeframe, start, now)
        except Exception as e:
            logger.warning(f"{symbol}: candle fetch failed: {e}")
            return pd.DataFrame()
        if candles is None:
            return pd.DataFrame()
        return candles

    def status(self) -> Dict:
        """Return current engine status."""
        open_positions = self.ledger.open_positions()
        status = {
            'running': self.running,
            'live_mode': self.settlement.live_mode,
            'balance': self.settlement.fetch_balance(),
            'open_positions': len(open_positions),
            'positions_by_symbol': {
                s: {'position': p.position.value, 'size': p.size, 'entry_price': p.entry_price}
                for s, p in open_positions.items()
            },
            'ticks': self.tick_count,
            'overlapping_ticks': self.overlapping_ticks,
            'signals': self.total_signals,
            'trades_opened': self.total_trades_opened,
            'trades_closed': self.total_trades_closed,
            'failed_orders': self.failed_orders,
        }
        account = self.settlement.balance_source
        if isinstance(account, SimulatedAccount):
            status['realized_pnl'] = account.total_pnl
            status['simulated_closes'] = account.closed_trades
        return status
