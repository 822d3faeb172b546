"""Strategies module for Perp Scalper."""

from . import indicators
from .indicators import compute_ema, compute_rsi

__all__ = [
    'compute_ema',
    'compute_rsi',
    'indicators',
]
