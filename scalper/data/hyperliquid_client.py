"""
Hyperliquid API Client
Wrapper for the Hyperliquid SDK: candles, account value and order placement
"""

import time
from datetime import datetime
from typing import Any, Dict, Optional

import pandas as pd
from eth_account import Account
from hyperliquid.exchange import Exchange
from hyperliquid.info import Info
from hyperliquid.utils import constants
from loguru import logger

from ..live.broker_interface import (
    BalanceSource, MarketDataSource, OrderExecutor, OrderRequest, OrderResult,
)
from ..utils.helpers import round_significant, to_millis

# Hyperliquid prices: at most 5 significant figures and 6 decimals
PRICE_SIG_FIGS = 5
PRICE_MAX_DECIMALS = 6


class HyperliquidClient(MarketDataSource, BalanceSource, OrderExecutor):
    """
    Hyperliquid client for fetching market data and executing trades

    Read-only calls go through ``Info`` and need no credentials. The
    signing ``Exchange`` is created on first order, so a simulation run
    never touches the wallet.
    """

    def __init__(
        self,
        address: Optional[str] = None,
        private_key: Optional[str] = None,
        base_url: Optional[str] = None,
        info: Optional[Info] = None,
        exchange: Optional[Exchange] = None,
    ):
        """
        Initialize Hyperliquid client

        Args:
            address: Public account address (needed for balance and orders)
            private_key: Wallet private key (needed for orders)
            base_url: API URL (mainnet if not provided)
            info: Pre-built Info client
            exchange: Pre-built Exchange client
        """
        self.base_url = base_url or constants.MAINNET_API_URL
        self.address = address
        self._private_key = private_key
        self.info = info if info is not None else Info(self.base_url, skip_ws=True)
        self._exchange = exchange

        # Rate limiting
        self.last_request_time = 0.0
        self.min_request_interval = 0.1

        logger.info(f"Hyperliquid client initialized: {self.base_url}")

    @property
    def exchange(self) -> Exchange:
        if self._exchange is None:
            if not self._private_key:
                raise ValueError("A private key is required to place orders")
            wallet = Account.from_key(self._private_key)
            self._exchange = Exchange(wallet, self.base_url, account_address=self.address)
        return self._exchange

    def _rate_limit(self):
        """Enforce rate limiting"""
        elapsed = time.time() - self.last_request_time
        if elapsed < self.min_request_interval:
            time.sleep(self.min_request_interval - elapsed)
        self.last_request_time = time.time()

    def get_candles(
        self,
        symbol: str,
        interval: str,
        start_time: datetime,
        end_time: datetime,
    ) -> pd.DataFrame:
        """
        Fetch candle snapshot

        Args:
            symbol: Coin name (e.g., 'BTC')
            interval: Candle interval (e.g., '1m')
            start_time: Window start (UTC)
            end_time: Window end (UTC)

        Returns:
            DataFrame with OHLCV data indexed by candle open time,
            empty on failure
        """
        try:
            self._rate_limit()
            candles = self.info.candles_snapshot(
                symbol, interval, to_millis(start_time), to_millis(end_time)
            )
            df = self._candles_to_frame(candles)
        except Exception as e:
            logger.warning(f"Candle fetch failed for {symbol} {interval}: {e}")
            return pd.DataFrame()

        if df.empty:
            logger.warning(f"No candles returned for {symbol} {interval}")
        else:
            logger.debug(f"Fetched {len(df)} candles for {symbol} ({interval})")
        return df

    @staticmethod
    def _candles_to_frame(candles) -> pd.DataFrame:
        if not candles:
            return pd.DataFrame()

        data = []
        for candle in candles:
            data.append({
                "time": pd.to_datetime(int(candle["t"]), unit="ms", utc=True),
                "open": float(candle["o"]),
                "high": float(candle["h"]),
                "low": float(candle["l"]),
                "close": float(candle["c"]),
                "volume": float(candle["v"]),
            })

        df = pd.DataFrame(data)
        df.set_index("time", inplace=True)
        df.sort_index(inplace=True)
        return df

    def get_balance(self) -> float:
        """Account value from the clearinghouse state, 0.0 on failure"""
        if not self.address:
            logger.warning("No account address configured, balance unavailable")
            return 0.0
        try:
            self._rate_limit()
            state = self.info.user_state(self.address)
            return float(state["marginSummary"]["accountValue"])
        except Exception as e:
            logger.warning(f"Balance fetch failed: {e}")
            return 0.0

    def submit_order(self, order: OrderRequest) -> OrderResult:
        """
        Place a GTC limit order

        Args:
            order: Order request with a marketable limit price

        Returns:
            OrderResult; never raises
        """
        limit_px = round(round_significant(order.limit_price, PRICE_SIG_FIGS), PRICE_MAX_DECIMALS)
        try:
            self._rate_limit()
            response = self.exchange.order(
                order.symbol,
                order.is_buy,
                order.quantity,
                limit_px,
                {"limit": {"tif": "Gtc"}},
                reduce_only=order.reduce_only,
            )
        except Exception as e:
            logger.error(f"Order request failed for {order.symbol}: {e}")
            return OrderResult(success=False, error=str(e))

        return self._parse_order_response(response)

    @staticmethod
    def _parse_order_response(response: Dict[str, Any]) -> OrderResult:
        if not isinstance(response, dict) or response.get("status") != "ok":
            return OrderResult(success=False, error=f"Order rejected: {response!r}")

        statuses = response.get("response", {}).get("data", {}).get("statuses", [])
        if not statuses:
            return OrderResult(success=False, error="Order response carried no status")

        status = statuses[0]
        if "error" in status:
            return OrderResult(success=False, error=str(status["error"]))

        if "filled" in status:
            filled = status["filled"]
            return OrderResult(
                success=True,
                order_id=str(filled.get("oid")),
                fill_price=float(filled["avgPx"]) if "avgPx" in filled else None,
            )
        if "resting" in status:
            return OrderResult(success=True, order_id=str(status["resting"].get("oid")))

        return OrderResult(success=True)

    def test_connection(self) -> bool:
        """Test API connection"""
        try:
            self._rate_limit()
            mids = self.info.all_mids()
            logger.info(f"Connection successful. {len(mids)} markets quoted")
            return True
        except Exception as e:
            logger.error(f"Connection failed: {e}")
            return False

    def __repr__(self) -> str:
        account = f"{self.address[:8]}..." if self.address else None
        return f"HyperliquidClient(url={self.base_url}, account={account})"
