"""Tests for configuration loading, validation and engine wiring."""

from __future__ import annotations

import pytest

from scalper.cli import build_engine, main
from scalper.utils.config import AssetConfig, Config, ConfigurationError

from conftest import FakeMarketData

# pylint: disable=missing-function-docstring

ENV_VARS = (
    "ENABLE_LIVE_TRADING",
    "HYPERLIQUID_PRIVATE_KEY",
    "PUBLIC_ADDRESS",
    "LEVERAGE",
    "INITIAL_BALANCE",
    "LOG_LEVEL",
    "SCALPER_CONFIG",
)

CONFIG_YAML = """
assets:
  - symbol: BTC
    weight: 0.5
  - symbol: ETH
    weight: 0.5
trading:
  leverage: 3
  check_interval: 10
  initial_balance: 2500
strategy:
  ema_fast: 5
  stop_loss_pct: 0.01
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(name="config_file")
def fixture_config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return path


def _config(path, tmp_path):
    return Config(config_path=str(path), env_file=str(tmp_path / "missing.env"))


class FakeClient(FakeMarketData):
    def __init__(self):
        super().__init__({})

    def get_balance(self):
        return 0.0

    def submit_order(self, order):
        raise AssertionError("not expected in wiring tests")


def test_yaml_values_and_defaults(config_file, tmp_path):
    config = _config(config_file, tmp_path)

    assert config.weights == {"BTC": 0.5, "ETH": 0.5}
    assert config.leverage == 3.0
    assert config.check_interval == 10.0
    assert config.initial_balance == 2500.0
    assert config.timeframe == "1m"
    assert config.slippage == 0.05
    params = config.strategy_params
    assert params["ema_fast"] == 5
    assert params["ema_slow"] == 21
    assert params["stop_loss_pct"] == 0.01
    assert params["take_profit_pct"] == 0.008
    assert params["min_history"] == 30


def test_environment_overrides_yaml(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("LEVERAGE", "10")
    monkeypatch.setenv("INITIAL_BALANCE", "50")

    config = _config(config_file, tmp_path)

    assert config.leverage == 10.0
    assert config.initial_balance == 50.0


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        _config(tmp_path / "nope.yaml", tmp_path)


@pytest.mark.parametrize("weight", [0.0, -0.1, 1.5])
def test_asset_weight_must_be_in_unit_interval(weight):
    with pytest.raises(ConfigurationError):
        AssetConfig(symbol="BTC", weight=weight)


def test_duplicate_symbols_rejected(tmp_path):
    path = tmp_path / "dup.yaml"
    path.write_text("assets:\n  - {symbol: BTC, weight: 0.5}\n  - {symbol: BTC, weight: 0.5}\n")

    with pytest.raises(ConfigurationError):
        _config(path, tmp_path)


@pytest.mark.parametrize("value, expected", [
    ("TRUE", True), ("true", True), ("1", True), ("FALSE", False), ("", False),
])
def test_live_trading_flag(config_file, tmp_path, monkeypatch, value, expected):
    monkeypatch.setenv("ENABLE_LIVE_TRADING", value)

    assert _config(config_file, tmp_path).enable_live_trading is expected


def test_live_trading_without_credentials_fails_fast(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("ENABLE_LIVE_TRADING", "TRUE")
    monkeypatch.setenv("PUBLIC_ADDRESS", "0xabc")
    config = _config(config_file, tmp_path)

    with pytest.raises(ConfigurationError):
        config.validate()


def test_simulation_needs_no_credentials(config_file, tmp_path):
    _config(config_file, tmp_path).validate()


def test_build_engine_simulation_mode(config_file, tmp_path):
    engine = build_engine(_config(config_file, tmp_path), client=FakeClient())

    assert not engine.settlement.live_mode
    assert engine.symbols == ["BTC", "ETH"]
    assert engine.settlement.fetch_balance() == 2500.0
    assert engine.signal_engine.ema_fast == 5
    assert engine.check_interval == 10.0


def test_build_engine_live_mode(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("ENABLE_LIVE_TRADING", "TRUE")
    monkeypatch.setenv("HYPERLIQUID_PRIVATE_KEY", "0x" + "11" * 32)
    monkeypatch.setenv("PUBLIC_ADDRESS", "0xabc")
    client = FakeClient()

    engine = build_engine(_config(config_file, tmp_path), client=client)

    assert engine.settlement.live_mode
    assert engine.settlement.executor is client


def test_main_exits_non_zero_on_missing_credentials(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("ENABLE_LIVE_TRADING", "TRUE")

    code = main([
        "--config", str(config_file),
        "--env-file", str(tmp_path / "missing.env"),
        "--no-log-file",
    ])

    assert code == 1


def test_build_engine_rejects_inverted_ema_periods(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("strategy:\n  ema_fast: 21\n  ema_slow: 7\n")

    with pytest.raises(ConfigurationError):
        build_engine(_config(path, tmp_path), client=FakeClient())


@pytest.mark.parametrize("strategy", [
    "strategy:\n  ema_fast: 21\n  ema_slow: 7\n",
    "strategy:\n  min_history: 5\n",
])
def test_main_exits_non_zero_on_invalid_strategy(tmp_path, strategy):
    path = tmp_path / "bad.yaml"
    path.write_text(strategy)

    code = main(["--config", str(path), "--env-file", str(tmp_path / "missing.env"),
                 "--no-log-file"])

    assert code == 1


def test_main_exits_non_zero_on_non_numeric_leverage(config_file, tmp_path, monkeypatch):
    monkeypatch.setenv("LEVERAGE", "lots")

    code = main(["--config", str(config_file), "--env-file", str(tmp_path / "missing.env"),
                 "--no-log-file"])

    assert code == 1
