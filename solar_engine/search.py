# solar_engine/search.py

from __future__ import annotations
from typing import Callable, Optional
import logging
import math

logger = logging.getLogger(__name__)


MAX_BISECTIONS = 200
MAX_EXPANSIONS = 64
RELATIVE_TOLERANCE = 1e-9


class MonotoneSearch:
    """
    Inverts a non-decreasing function by bisection.

    Used to go from a monthly amount (budget, saving, installment) back to the
    system size or value that produces it, reusing the forward formulas
    instead of deriving closed-form inverses.
    """

    @staticmethod
    def solve(
        f: Callable[[float], float],
        target: float,
        low: float = 0.0,
        high: Optional[float] = None,
        tolerance: float = RELATIVE_TOLERANCE,
    ) -> float:
        """
        Returns x in [low, high] with f(x) ≈ target.
        - target at or below f(low) → low
        - high=None → bracket grows by doubling until f(high) >= target
        - target never reached → the largest bracket tried
        """
        if not math.isfinite(target) or f(low) >= target:
            return low

        if high is None:
            high = max(low * 2.0, 1.0)
            expansions = 0
            while f(high) < target and expansions < MAX_EXPANSIONS:
                low, high = high, high * 2.0
                expansions += 1
            if f(high) < target:
                logger.debug("Target %s not reachable below %s", target, high)
                return high
        elif f(high) < target:
            return high

        for _ in range(MAX_BISECTIONS):
            mid = (low + high) / 2.0
            if f(mid) < target:
                low = mid
            else:
                high = mid
            if high - low <= tolerance * max(1.0, abs(high)):
                break

        return (low + high) / 2.0
