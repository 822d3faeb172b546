"""Exchange data and execution clients."""

from .hyperliquid_client import HyperliquidClient

__all__ = ['HyperliquidClient']
