"""Text formatting helpers for CLI output."""

from decimal import Decimal
from typing import Optional


def format_money(amount: Decimal) -> str:
    """Format an amount with thousands separators and two decimals."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{abs(amount):,.2f}"


def format_percent(value: Optional[Decimal]) -> str:
    """Format a percentage, or "n/a" when it is unavailable."""
    if value is None:
        return "n/a"
    return f"{value:+.1f}%"
