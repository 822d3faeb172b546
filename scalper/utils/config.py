"""
Configuration management for Perp Scalper
Loads and validates configuration from YAML files and environment variables
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional
import yaml
from dotenv import load_dotenv

TRUTHY = {"true", "1", "yes", "on"}

DEFAULT_ASSETS = [
    {"symbol": "BTC", "weight": 0.4},
    {"symbol": "ETH", "weight": 0.3},
    {"symbol": "SOL", "weight": 0.3},
]


class ConfigurationError(ValueError):
    """Invalid or incomplete configuration"""


@dataclass(frozen=True)
class AssetConfig:
    """A traded asset and its capital allocation"""
    symbol: str
    weight: float

    def __post_init__(self):
        if not self.symbol:
            raise ConfigurationError("Asset symbol must not be empty")
        if not 0 < self.weight <= 1:
            raise ConfigurationError(
                f"Asset {self.symbol}: weight must be in (0, 1], got {self.weight}"
            )


class Config:
    """Configuration manager for the Perp Scalper system"""

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_path: YAML configuration file (default: configs/config.yaml,
                or $SCALPER_CONFIG when set)
            env_file: .env file to load (default: .env in the project root)
        """
        self.project_root = Path(__file__).parent.parent.parent

        # Load environment variables
        load_dotenv(env_file or self.project_root / ".env")

        config_path = config_path or os.getenv("SCALPER_CONFIG")
        if config_path is None:
            self.config_path = self.project_root / "configs" / "config.yaml"
        else:
            self.config_path = Path(config_path)

        self.main_config = self._load_yaml(self.config_path)
        self._assets = self._parse_assets(self.get("assets", DEFAULT_ASSETS))

    def _load_yaml(self, config_path: Path) -> Dict[str, Any]:
        """Load YAML configuration file"""
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _parse_assets(raw: List[Dict[str, Any]]) -> List[AssetConfig]:
        if not raw:
            raise ConfigurationError("At least one asset must be configured")

        assets = []
        seen = set()
        for entry in raw:
            try:
                asset = AssetConfig(symbol=str(entry["symbol"]), weight=float(entry["weight"]))
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigurationError(f"Invalid asset entry {entry!r}: {e}") from e
            if asset.symbol in seen:
                raise ConfigurationError(f"Duplicate asset symbol: {asset.symbol}")
            seen.add(asset.symbol)
            assets.append(asset)
        return assets

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation key

        Args:
            key: Configuration key in dot notation (e.g., 'strategy.ema_fast')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self.main_config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def get_env(self, key: str, default: Any = None) -> Any:
        """Get environment variable"""
        return os.getenv(key, default)

    def validate(self):
        """Fail fast on configuration that must not reach the trading loop"""
        if self.enable_live_trading:
            # Both raise ConfigurationError when missing
            _ = (self.private_key, self.public_address)

    # Mode and credentials
    @property
    def enable_live_trading(self) -> bool:
        """Live order placement instead of simulated settlement"""
        return str(self.get_env("ENABLE_LIVE_TRADING", "false")).strip().lower() in TRUTHY

    @property
    def private_key(self) -> str:
        """Get wallet private key from environment"""
        key = self.get_env("HYPERLIQUID_PRIVATE_KEY")
        if not key or key == "your_private_key_here":
            raise ConfigurationError(
                "HYPERLIQUID_PRIVATE_KEY not set in .env file. "
                "Copy .env.example to .env and add your wallet credentials."
            )
        return key

    @property
    def public_address(self) -> str:
        """Get wallet public address from environment"""
        address = self.get_env("PUBLIC_ADDRESS")
        if not address or address == "your_public_address_here":
            raise ConfigurationError(
                "PUBLIC_ADDRESS not set in .env file. "
                "Copy .env.example to .env and add your wallet credentials."
            )
        return address

    @property
    def api_url(self) -> Optional[str]:
        """Exchange API URL override (mainnet when unset)"""
        return self.get_env("HYPERLIQUID_API_URL")

    # Assets
    @property
    def weights(self) -> Dict[str, float]:
        """Capital weight per symbol, in configuration order"""
        return {a.symbol: a.weight for a in self._assets}

    # Trading Configuration
    @property
    def leverage(self) -> float:
        return float(self.get_env("LEVERAGE", self.get("trading.leverage", 5)))

    @property
    def check_interval(self) -> float:
        """Seconds between ticks"""
        return float(self.get("trading.check_interval", 5))

    @property
    def timeframe(self) -> str:
        return str(self.get("trading.timeframe", "1m"))

    @property
    def history_minutes(self) -> int:
        return int(self.get("trading.history_minutes", 60))

    @property
    def initial_balance(self) -> float:
        """Simulation starting balance"""
        return float(self.get_env("INITIAL_BALANCE", self.get("trading.initial_balance", 1000)))

    @property
    def slippage(self) -> float:
        return float(self.get("trading.slippage", 0.05))

    @property
    def size_decimals(self) -> int:
        return int(self.get("trading.size_decimals", 4))

    # Strategy Configuration
    @property
    def strategy_params(self) -> Dict[str, Any]:
        """Keyword arguments for SignalEngine"""
        return {
            "ema_fast": int(self.get("strategy.ema_fast", 7)),
            "ema_slow": int(self.get("strategy.ema_slow", 21)),
            "rsi_period": int(self.get("strategy.rsi_period", 6)),
            "stop_loss_pct": float(self.get("strategy.stop_loss_pct", 0.004)),
            "take_profit_pct": float(self.get("strategy.take_profit_pct", 0.008)),
            "min_history": int(self.get("strategy.min_history", 30)),
        }

    # Paths
    @property
    def logs_dir(self) -> Path:
        """Get logs directory path"""
        logs_path = self.project_root / "logs"
        logs_path.mkdir(parents=True, exist_ok=True)
        return logs_path

    # Logging Configuration
    @property
    def log_level(self) -> str:
        """Get log level"""
        return self.get_env("LOG_LEVEL", self.get("logging.level", "INFO"))

    def __repr__(self) -> str:
        mode = "live" if self.enable_live_trading else "simulation"
        return f"Config(mode={mode}, assets={list(self.weights)}, leverage={self.leverage})"

