"""Tanzanian Shilling formatting helpers"""

CURRENCY = "TSh"

HIGH_VALUE_AMOUNT = 500_000.0
VERY_HIGH_VALUE_AMOUNT = 1_000_000.0


def format_amount(amount: float) -> str:
    """
    Format an amount for display.

    Examples:
        1000 -> "TSh 1,000"
        850000 -> "TSh 850,000"
        2500000 -> "TSh 2.5M"
    """
    if abs(amount) >= 1_000_000:
        return f"{CURRENCY} {amount / 1_000_000:.1f}M"
    if abs(amount) >= 1000:
        return f"{CURRENCY} {amount:,.0f}"
    return f"{CURRENCY} {amount:.0f}"


def format_amount_with_decimals(amount: float) -> str:
    """Like format_amount, but keeps cents when the amount has them"""
    if amount % 1 == 0:
        return format_amount(amount)

    if abs(amount) >= 1_000_000:
        return f"{CURRENCY} {amount / 1_000_000:.2f}M"
    if abs(amount) >= 1000:
        return f"{CURRENCY} {amount:,.2f}"
    return f"{CURRENCY} {amount:.2f}"


def format_compact(amount: float) -> str:
    """Compact form for charts: 1500 -> "1.5K", 2500000 -> "2.5M" """
    if abs(amount) >= 1_000_000:
        return f"{amount / 1_000_000:.1f}M"
    if abs(amount) >= 1000:
        return f"{amount / 1000:.1f}K"
    return f"{amount:.0f}"


def is_high_value(amount: float) -> bool:
    return abs(amount) > HIGH_VALUE_AMOUNT


def is_very_high_value(amount: float) -> bool:
    return abs(amount) > VERY_HIGH_VALUE_AMOUNT
