# solar_engine/economy_model.py

from __future__ import annotations


DEFAULT_COMPENSATION_FACTOR = 0.85   # share of generation that offsets the bill
DEFAULT_LCOE_YEARS = 25


class EconomyModel:
    """
    Converts generation into money.

    The compensation factor is the regulatory share of self-generated energy
    that actually offsets billed consumption (e.g. 0.85 under Lei 14.300).
    It is supplied by configuration and treated as an opaque multiplier.
    """

    @staticmethod
    def monthly_saving(
        generation_kwh: float,
        tariff: float,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
    ) -> float:
        if generation_kwh <= 0 or tariff <= 0 or compensation_factor <= 0:
            return 0.0
        return generation_kwh * compensation_factor * tariff

    @staticmethod
    def monthly_growth_rate(annual_increase_percent: float) -> float:
        """Monthly rate equivalent to an annual compounding rate (in %)."""
        if annual_increase_percent <= -100:
            return -1.0
        return (1.0 + annual_increase_percent / 100.0) ** (1.0 / 12.0) - 1.0

    @staticmethod
    def roi(total_savings: float, investment: float) -> float:
        if investment <= 0:
            return 0.0
        return (total_savings - investment) / investment * 100.0

    @staticmethod
    def lcoe(
        system_value: float,
        monthly_generation_kwh: float,
        years: int = DEFAULT_LCOE_YEARS,
    ) -> float:
        """Levelized cost of energy (R$/kWh) over the system lifetime."""
        lifetime_kwh = monthly_generation_kwh * 12 * years
        if lifetime_kwh <= 0:
            return 0.0
        return system_value / lifetime_kwh
