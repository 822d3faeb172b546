"""
Perp Scalper
Per-asset EMA/RSI trading loop with simulated or live settlement
"""

__version__ = "0.1.0"
