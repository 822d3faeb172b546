"""
Technical Indicators

Scalar indicator calculations over a close-price history (most recent last).
Both functions return a sentinel instead of raising when the history is too
short; callers gate on a minimum history length before trading on them.
"""

from typing import Sequence

import numpy as np

# Returned by compute_ema when history is shorter than the period
EMA_INSUFFICIENT = 0.0
# Returned by compute_rsi when history is shorter than period + 1
RSI_NEUTRAL = 50.0


def compute_ema(prices: Sequence[float], period: int) -> float:
    """
    Exponential Moving Average of the whole series.

    Seeded with the first price, then ``ema = price * k + ema * (1 - k)``
    left to right, with ``k = 2 / (period + 1)``.

    Args:
        prices: Price history, oldest first
        period: EMA period

    Returns:
        Final EMA value, or 0.0 if fewer than ``period`` prices
    """
    if period <= 0:
        raise ValueError(f"EMA period must be positive, got {period}")

    values = np.asarray(prices, dtype=float)
    if len(values) < period:
        return EMA_INSUFFICIENT

    k = 2.0 / (period + 1)
    ema = float(values[0])
    for price in values[1:]:
        ema = float(price) * k + ema * (1 - k)

    return ema


def compute_rsi(closes: Sequence[float], period: int) -> float:
    """
    Relative Strength Index over the trailing ``period`` deltas.

    Momentum oscillator (0-100).
    - RSI >= 85: Overbought, suppresses long entries
    - RSI <= 15: Oversold, suppresses short entries

    Only the last ``period`` close-to-close changes are used, summed rather
    than smoothed. A window with no losses returns exactly 100.

    Args:
        closes: Close prices, oldest first
        period: RSI period

    Returns:
        RSI value, or 50.0 if fewer than ``period + 1`` closes
    """
    if period <= 0:
        raise ValueError(f"RSI period must be positive, got {period}")

    values = np.asarray(closes, dtype=float)
    if len(values) < period + 1:
        return RSI_NEUTRAL

    deltas = np.diff(values[-(period + 1):])
    gains = 0.0
    losses = 0.0
    for change in deltas:
        if change > 0:
            gains += float(change)
        else:
            losses += abs(float(change))

    if losses == 0:
        return 100.0

    return 100.0 - (100.0 / (1.0 + gains / losses))
