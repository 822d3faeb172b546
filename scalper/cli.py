#!/usr/bin/env python3
"""Entry point for the trading engine.

Usage:
    # Simulation (default: ENABLE_LIVE_TRADING unset)
    scalper-trade

    # Custom config file, single tick
    scalper-trade --config configs/config.yaml --once

    # Live trading: set ENABLE_LIVE_TRADING=TRUE plus wallet credentials in .env
    scalper-trade
"""
import argparse
import signal
import sys

from loguru import logger

from .data import HyperliquidClient
from .live import LiveEngine, PositionLedger, Settlement, SignalEngine, SimulatedAccount
from .utils.config import Config, ConfigurationError
from .utils.logger import setup_logger


def build_engine(config: Config, client: HyperliquidClient = None) -> LiveEngine:
    """Wire collaborators for the configured mode."""
    config.validate()
    live = config.enable_live_trading
    try:
        signal_engine = SignalEngine(**config.strategy_params)
        leverage, initial_balance = config.leverage, config.initial_balance
        slippage, size_decimals = config.slippage, config.size_decimals
        history_minutes, check_interval = config.history_minutes, config.check_interval
    except ValueError as e:
        raise ConfigurationError(str(e)) from e

    if client is None:
        client = HyperliquidClient(
            address=config.public_address if live else None,
            private_key=config.private_key if live else None,
            base_url=config.api_url,
        )

    ledger = PositionLedger(config.weights)
    if live:
        settlement = Settlement(
            ledger, config.weights, balance_source=client, executor=client,
            leverage=leverage, slippage=slippage,
            size_decimals=size_decimals,
        )
    else:
        settlement = Settlement(
            ledger, config.weights, balance_source=SimulatedAccount(initial_balance),
            leverage=leverage, slippage=slippage,
            size_decimals=size_decimals,
        )

    return LiveEngine(
        market_data=client,
        settlement=settlement,
        signal_engine=signal_engine,
        timeframe=config.timeframe,
        history_minutes=history_minutes,
        check_interval=check_interval,
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description='Perp Scalper Trading Engine')
    parser.add_argument('--config', type=str, default=None,
                        help='YAML configuration file (default: configs/config.yaml)')
    parser.add_argument('--env-file', type=str, default=None,
                        help='.env file with credentials (default: project .env)')
    parser.add_argument('--once', action='store_true',
                        help='Run a single tick and exit')
    parser.add_argument('--max-ticks', type=int, default=None,
                        help='Stop after this many ticks')
    parser.add_argument('--no-log-file', action='store_true',
                        help='Log to the console only')
    args = parser.parse_args(argv)

    try:
        config = Config(config_path=args.config, env_file=args.env_file)
        setup_logger(config.log_level, None if args.no_log_file else config.logs_dir)
        engine = build_engine(config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logger.info("=" * 60)
    logger.info("PERP SCALPER - TRADING ENGINE")
    logger.info("=" * 60)
    logger.info(f"Config: {config!r}")

    if args.once:
        engine.run_tick()
        return 0

    signal.signal(signal.SIGTERM, lambda *_: engine.stop())
    engine.start(max_ticks=args.max_ticks)
    return 0


if __name__ == '__main__':
    sys.exit(main())
