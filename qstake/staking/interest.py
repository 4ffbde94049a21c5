"""
Interest Engine

Turns (principal, APY, days) into a reward using daily compounding on top of
the fixed-point primitives. Output is always an integer number of token base
units, rounded down.
"""

import threading
from typing import Dict

from ..constants import MAX_APY_BASIS_POINTS
from ..fixed_point import compound_growth, daily_rate_from_apy
from ..logger import get_logger

logger = get_logger(__name__)


def reward(principal: int, apy_basis_points: int, days: int) -> int:
    """
    Reward accrued by *principal* over *days* at *apy_basis_points*.

    Returns 0 when any input is 0 (a zero APY gives a zero daily rate).
    """
    return compound_growth(principal, daily_rate_from_apy(apy_basis_points), days)


class InterestEngine:
    """
    Reward calculator with a per-APY daily rate cache.

    The daily rate depends only on the APY, of which there are at most
    ``MAX_APY_BASIS_POINTS + 1`` values, so the cache is unbounded.
    """

    def __init__(self):
        self._rates: Dict[int, int] = {}
        self._lock = threading.Lock()

    def daily_rate(self, apy_basis_points: int) -> int:
        if not 0 <= apy_basis_points <= MAX_APY_BASIS_POINTS:
            raise ValueError(f"APY {apy_basis_points} bp out of range")
        with self._lock:
            rate = self._rates.get(apy_basis_points)
            if rate is None:
                rate = daily_rate_from_apy(apy_basis_points)
                self._rates[apy_basis_points] = rate
        return rate

    def reward(self, principal: int, apy_basis_points: int, days: int) -> int:
        """Same result as :func:`reward`, with the daily rate taken from the cache."""
        amount = compound_growth(principal, self.daily_rate(apy_basis_points), days)
        logger.debug(
            f"Reward {amount} on {principal} at {apy_basis_points} bp over {days} days"
        )
        return amount
