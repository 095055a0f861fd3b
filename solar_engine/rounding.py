# solar_engine/rounding.py

from __future__ import annotations
import math


def round_half_up(value: float, decimals: int = 0) -> float:
    """
    Rounds .5 away from zero for positive values (commercial rounding).
    Python's round() is banker's rounding, which makes 0.125 → 0.12.
    """
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def round_money(value: float) -> float:
    return round_half_up(value, 2)


def round_int(value: float) -> int:
    return int(math.floor(value + 0.5))
