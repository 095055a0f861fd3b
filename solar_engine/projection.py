# solar_engine/projection.py

from __future__ import annotations
from typing import List, Optional
import math

from .economy_model import DEFAULT_COMPENSATION_FACTOR
from .rounding import round_money, round_int
from .types import BillComparisonRow, YearlyProjectionRow


DEFAULT_DEGRADATION_PERCENT = 0.5      # panel output loss per year
DEFAULT_MAINTENANCE_PERCENT = 0.5      # of system value, per year
CROSSOVER_MARGIN = 1.10


class ProjectionBuilder:
    """
    Year-by-year tables consumed by charts and reports.
    """

    # =================================================
    # FINANCIAL PROJECTION (25 years)
    # =================================================
    @staticmethod
    def yearly_projection(
        monthly_generation_kwh: float,
        tariff: float,
        annual_tariff_increase_percent: float,
        system_value: float,
        installment_value: float = 0.0,
        installments: int = 0,
        upfront_payment: Optional[float] = None,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
        degradation_percent: float = DEFAULT_DEGRADATION_PERCENT,
        maintenance_percent: float = DEFAULT_MAINTENANCE_PERCENT,
        years: int = 25,
    ) -> List[YearlyProjectionRow]:
        """
        Accumulated cashflow starts at -upfront_payment (the whole system
        value unless financed). Each year:
        - generation loses degradation_percent (compounded)
        - tariff grows annual_tariff_increase_percent (compounded)
        - installments are paid only inside the financing years
        - maintenance is a fixed share of the system value
        """
        rows: List[YearlyProjectionRow] = []
        accumulated = -(system_value if upfront_payment is None else upfront_payment)
        maintenance = system_value * maintenance_percent / 100.0
        financing_years = math.ceil(installments / 12) if installments > 0 else 0

        for year in range(1, years + 1):
            degradation = (1.0 - degradation_percent / 100.0) ** (year - 1)
            generation = max(monthly_generation_kwh, 0.0) * 12 * degradation
            current_tariff = tariff * (1.0 + annual_tariff_increase_percent / 100.0) ** (year - 1)
            gross = generation * current_tariff * compensation_factor

            installment_cost = 0.0
            if year <= financing_years:
                months = 12 if year < financing_years else installments - (financing_years - 1) * 12
                installment_cost = installment_value * months

            net = gross - installment_cost - maintenance
            accumulated += net

            rows.append(YearlyProjectionRow(
                year=year,
                generation_kwh=round_int(generation),
                tariff=current_tariff,
                gross_savings=round_money(gross),
                installment_cost=round_money(installment_cost),
                maintenance_cost=round_money(maintenance),
                net_cashflow=round_money(net),
                accumulated=round_money(accumulated),
            ))

        return rows

    @staticmethod
    def payback_year(rows: List[YearlyProjectionRow]) -> Optional[int]:
        for row in rows:
            if row.accumulated >= 0:
                return row.year
        return None

    # =================================================
    # BILL COMPARISON (without vs with solar)
    # =================================================
    @staticmethod
    def bill_comparison(
        monthly_bill_without_solar: float,
        monthly_bill_with_solar: float,
        installment_value: float,
        installments: int,
        annual_tariff_increase_percent: float,
        years: int = 25,
    ) -> List[BillComparisonRow]:
        """
        Year 0..years. Without solar the full bill inflates; with solar only
        the minimum bill inflates and installments are added while financing.
        """
        rows: List[BillComparisonRow] = []
        total_without = 0.0
        total_with = 0.0
        financing_years = math.ceil(installments / 12) if installments > 0 else 0

        for year in range(0, years + 1):
            multiplier = (1.0 + annual_tariff_increase_percent / 100.0) ** year
            without_solar = monthly_bill_without_solar * 12 * multiplier

            installment_cost = 0.0
            if year < financing_years:
                installment_cost = installment_value * min(12, installments - year * 12)
            with_solar = monthly_bill_with_solar * 12 * multiplier + installment_cost

            total_without += without_solar
            total_with += with_solar

            rows.append(BillComparisonRow(
                year=year,
                annual_cost_without_solar=round_money(without_solar),
                annual_cost_with_solar=round_money(with_solar),
                accumulated_without_solar=round_money(total_without),
                accumulated_with_solar=round_money(total_with),
            ))

        return rows

    @staticmethod
    def crossover_year(rows: List[BillComparisonRow]) -> Optional[int]:
        """First year (> 0) where staying without solar costs 10% more in total."""
        for row in rows:
            if row.year > 0 and row.accumulated_without_solar > row.accumulated_with_solar * CROSSOVER_MARGIN:
                return row.year
        return None
