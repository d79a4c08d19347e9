from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a cashier does (2.5 -> 3), unlike the builtin round()."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage, 0 when there is nothing to divide by."""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))
