def format_currency(amount: float, symbol: str = "$") -> str:
    """Format an amount as currency, e.g. '$1,234.56'; negatives as '-$1,234.56'."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_signed(amount: float, symbol: str = "$") -> str:
    """Format with +/- sign, as used for net totals."""
    sign = "+" if amount >= 0 else "-"
    return f"{sign}{symbol}{abs(amount):,.2f}"


def format_compact(amount: float, symbol: str = "$") -> str:
    """Short form for calendar cells: '$950', '$1.2k'."""
    value = abs(amount)
    sign = "-" if amount < 0 else ""
    if value >= 1000:
        return f"{sign}{symbol}{value / 1000:.1f}k"
    return f"{sign}{symbol}{value:,.0f}"
