"""Fixed-point money and share arithmetic.

Amounts are integers in minor currency units, share counts are integers in
the fractional share unit (``config.SHARE_FACTOR`` units per share). Every
division rounds half-up (ties toward positive infinity) on exact integers so
results never depend on float precision.
"""

from __future__ import annotations

import math
from typing import Optional

from security_performance_engine import config


def _round_half_up_div(numerator: int, denominator: int) -> int:
    """Integer ``round(numerator / denominator)`` with ties toward +inf."""
    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    return (2 * numerator + denominator) // (2 * denominator)


def round_half_up(value: float) -> int:
    """Round a float the way ``Math.round`` does (ties toward +inf)."""
    return math.floor(value + 0.5)


def amount_per_share(amount: int, shares: int, share_factor: Optional[int] = None) -> int:
    """Price of one share for ``amount`` paid for ``shares``; 0 when no shares."""
    if shares == 0:
        return 0
    factor = config.SHARE_FACTOR if share_factor is None else share_factor
    return _round_half_up_div(int(amount) * factor, int(shares))


def amount_times_shares(price_per_share: int, shares: int, share_factor: Optional[int] = None) -> int:
    """Value of ``shares`` at ``price_per_share``."""
    factor = config.SHARE_FACTOR if share_factor is None else share_factor
    return _round_half_up_div(int(price_per_share) * int(shares), factor)


def to_currency_units(amount: int) -> float:
    """Convert minor units to a float currency value (IRR cash flows)."""
    return amount / config.AMOUNT_DIVIDER
