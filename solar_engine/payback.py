# solar_engine/payback.py

from __future__ import annotations
from typing import Optional
import math

from .economy_model import EconomyModel
from .types import DetailedPaybackResult, PaybackResult, UNREACHABLE_DISPLAY


PAYBACK_HORIZON_MONTHS = 600        # 50 years
DETAILED_HORIZON_MONTHS = 300       # 25 years


def _plural(value: int, singular: str, plural: str) -> str:
    return f"{value} {singular if value == 1 else plural}"


class PaybackProjector:
    """
    Payback = months until accumulated savings cover what was paid.
    Savings grow every month with the tariff increase (compounded).
    """

    # =================================================
    # SIMPLE PAYBACK
    # =================================================
    @staticmethod
    def simple_payback(
        total_cost: float,
        monthly_saving: float,
        annual_tariff_increase_percent: float = 0.0,
    ) -> PaybackResult:

        if not (math.isfinite(total_cost) and math.isfinite(monthly_saving)):
            return PaybackProjector.unreachable()
        if monthly_saving <= 0 or total_cost <= 0:
            return PaybackProjector.unreachable()

        months: Optional[int] = None

        if annual_tariff_increase_percent == 0:
            months = math.ceil(total_cost / monthly_saving)
        else:
            growth = EconomyModel.monthly_growth_rate(annual_tariff_increase_percent)
            accumulated = 0.0
            saving = monthly_saving

            for month in range(1, PAYBACK_HORIZON_MONTHS + 1):
                accumulated += saving
                if accumulated >= total_cost:
                    months = month
                    break
                saving *= (1.0 + growth)

        if months is None or months > PAYBACK_HORIZON_MONTHS:
            return PaybackProjector.unreachable()

        return PaybackProjector.from_months(months)

    @staticmethod
    def from_months(months: int) -> PaybackResult:
        years = months // 12
        return PaybackResult(
            months=months,
            years=years,
            display=PaybackProjector.display_label(months),
        )

    @staticmethod
    def unreachable() -> PaybackResult:
        return PaybackResult(months=None, years=None, display=UNREACHABLE_DISPLAY)

    @staticmethod
    def display_label(months: Optional[int]) -> str:
        """
        0 whole years   → "<m> months"
        whole years     → "<y> years"
        otherwise       → "<y> years and <m> months"
        """
        if months is None:
            return UNREACHABLE_DISPLAY

        years, remainder = divmod(months, 12)

        if years == 0:
            return _plural(months, "month", "months")
        if remainder == 0:
            return _plural(years, "year", "years")
        return (
            f"{_plural(years, 'year', 'years')} and "
            f"{_plural(remainder, 'month', 'months')}"
        )

    # =================================================
    # DETAILED PAYBACK (financing window vs after)
    # =================================================
    @staticmethod
    def detailed_payback(
        system_value: float,
        installment_value: float,
        installments: int,
        monthly_saving: float,
        annual_tariff_increase_percent: float = 0.0,
        horizon_months: int = DETAILED_HORIZON_MONTHS,
        upfront_payment: float = 0.0,
    ) -> DetailedPaybackResult:
        """
        Month by month over 25 years:
        - savings accumulate every month (growing with the tariff)
        - installments accumulate only inside the financing term
        - break-even = first month where savings >= what was paid so far

        The entry (upfront_payment) is paid at month 0. Without financing the
        whole system value is paid at month 0.
        The headline payback is break-even against the total actually paid,
        interest included.
        """
        financed = installments > 0 and installment_value > 0

        if financed:
            accumulated_cost = max(upfront_payment, 0.0)
            total_paid = accumulated_cost + installment_value * installments
        else:
            total_paid = max(system_value, 0.0)
            accumulated_cost = total_paid

        growth = EconomyModel.monthly_growth_rate(annual_tariff_increase_percent)
        saving = max(monthly_saving, 0.0)
        accumulated_savings = 0.0
        break_even: Optional[int] = None

        for month in range(1, horizon_months + 1):
            accumulated_savings += saving
            if financed and month <= installments:
                accumulated_cost += installment_value

            if (
                break_even is None
                and accumulated_cost > 0
                and accumulated_savings >= accumulated_cost
            ):
                break_even = month

            saving *= (1.0 + growth)

        base = PaybackProjector.simple_payback(
            total_paid, monthly_saving, annual_tariff_increase_percent
        )

        return DetailedPaybackResult(
            months=base.months,
            years=base.years,
            display=base.display,
            total_paid=total_paid,
            net_savings_after_horizon=accumulated_savings - total_paid,
            break_even_month=break_even,
        )
