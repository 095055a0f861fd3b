# solar_engine/solar_sizing.py

from __future__ import annotations
from typing import Union

from .locations import DEFAULT_HSP, resolve_hsp
from .rounding import round_half_up, round_int
from .types import SizingResult


SYSTEM_PERFORMANCE_FACTOR = 0.80   # losses: inverter, temperature, cabling, dirt
DAYS_PER_MONTH = 30


class SolarSizingCalculator:
    """
    consumption (kWh/month) ↔ power (kWp) ↔ expected generation (kWh/month)

        generation = kWp * HSP * performance * 30
    """

    @staticmethod
    def required_power(
        monthly_consumption_kwh: float,
        hsp: float = DEFAULT_HSP,
        performance_factor: float = SYSTEM_PERFORMANCE_FACTOR,
    ) -> float:
        """kWp needed to cover a monthly consumption, 2 decimals."""
        if monthly_consumption_kwh <= 0 or hsp <= 0 or performance_factor <= 0:
            return 0.0

        kwp = monthly_consumption_kwh / (hsp * performance_factor * DAYS_PER_MONTH)
        return round_half_up(kwp, 2)

    @staticmethod
    def expected_generation(
        power_kwp: float,
        hsp: float = DEFAULT_HSP,
        performance_factor: float = SYSTEM_PERFORMANCE_FACTOR,
    ) -> int:
        """Monthly generation in whole kWh."""
        if power_kwp <= 0 or hsp <= 0 or performance_factor <= 0:
            return 0
        return round_int(SolarSizingCalculator.raw_generation(power_kwp, hsp, performance_factor))

    @staticmethod
    def raw_generation(
        power_kwp: float,
        hsp: float = DEFAULT_HSP,
        performance_factor: float = SYSTEM_PERFORMANCE_FACTOR,
    ) -> float:
        """Unrounded forward formula (used by searches)."""
        if power_kwp <= 0 or hsp <= 0:
            return 0.0
        return power_kwp * hsp * performance_factor * DAYS_PER_MONTH

    @staticmethod
    def size_for_consumption(
        monthly_consumption_kwh: float,
        hsp_or_location: Union[float, str, None] = None,
        performance_factor: float = SYSTEM_PERFORMANCE_FACTOR,
    ) -> SizingResult:
        hsp = resolve_hsp(hsp_or_location)
        power = SolarSizingCalculator.required_power(
            monthly_consumption_kwh, hsp, performance_factor
        )
        generation = SolarSizingCalculator.expected_generation(power, hsp, performance_factor)

        return SizingResult(
            recommended_power_kwp=power,
            expected_generation_kwh=generation,
            hsp_used=hsp,
        )
