"""
Helper utilities for Perp Scalper
"""

from datetime import datetime, timezone
from decimal import Decimal, ROUND_DOWN


def format_currency(amount: float, currency: str = "USD") -> str:
    """Format amount as currency"""
    return f"${amount:,.2f}" if currency == "USD" else f"{amount:,.2f} {currency}"


def format_percentage(value: float, decimals: int = 2) -> str:
    """Format value as percentage"""
    return f"{value * 100:.{decimals}f}%"


def format_signed(value: float, decimals: int = 2) -> str:
    """Format value with an explicit sign"""
    return f"{value:+.{decimals}f}"


def utc_now() -> datetime:
    """Get current UTC time"""
    return datetime.now(timezone.utc)


def to_millis(dt: datetime) -> int:
    """Convert datetime to epoch milliseconds (naive datetimes are taken as UTC)"""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def truncate(value: float, decimals: int = 4) -> float:
    """
    Truncate toward zero to a fixed number of decimal places

    Goes through the decimal string of the float so that values such as
    20.0 or 0.3 are not pushed below their printed value by binary rounding.

    Args:
        value: Value to truncate
        decimals: Number of decimal places to keep

    Returns:
        Truncated value
    """
    quantum = Decimal(1).scaleb(-decimals)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_DOWN))


def round_significant(value: float, figures: int = 5) -> float:
    """Round to a number of significant figures"""
    if value == 0:
        return 0.0
    return float(f"{value:.{figures}g}")
