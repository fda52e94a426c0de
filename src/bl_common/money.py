"""Integer arithmetic utilities for santim-based balances.

All stakes, credits and balances are int santim (100 santim = 1 birr).
No float, no Decimal.
"""


def validate_percent(percent: int) -> None:
    """Validate that a commission percentage is in the range [1, 100]."""
    if not (1 <= percent <= 100):
        raise ValueError(f"Commission must be between 1 and 100, got {percent}")


def santim_to_display(santim: int) -> str:
    """Convert santim to display string: 150000 -> '1,500.00 Br', -1200 -> '-12.00 Br'."""
    if santim < 0:
        abs_santim = -santim
        return f"-{abs_santim // 100:,}.{abs_santim % 100:02d} Br"
    return f"{santim // 100:,}.{santim % 100:02d} Br"


def calculate_commission(total: int, percent: int) -> int:
    """House commission with ceiling division (the house never loses a santim).

    commission = ceil(total * percent / 100)
    Using integer ceiling: (a + b - 1) // b
    """
    if total == 0 or percent == 0:
        return 0
    return (total * percent + 99) // 100


def balance_status_percent(balance: int, credit: int) -> int:
    """Remaining balance as a share of the last credit, clamped to 0-100."""
    if credit <= 0:
        return 0
    return max(0, min(100, round(balance * 100 / credit)))
