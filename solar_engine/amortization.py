# solar_engine/amortization.py

from __future__ import annotations

from .types import CashflowResult


class AmortizationCalculator:
    """
    Forward Price (annuity) formulas.
    """

    @staticmethod
    def annuity_factor(rate: float, installments: int) -> float:
        """(1 - (1+r)^-n) / r: present value of 1 per month for n months."""
        if rate == 0:
            return float(installments)
        return (1.0 - (1.0 + rate) ** (-installments)) / rate

    @staticmethod
    def installment_for(
        financed_value: float,
        monthly_rate_percent: float,
        installments: int,
    ) -> float:
        """
        PMT = PV * r(1+r)^n / ((1+r)^n - 1)
        Rate 0 reduces to PV / n.
        """
        if installments <= 0:
            return 0.0

        rate = monthly_rate_percent / 100.0

        if rate == 0:
            return financed_value / installments

        power = (1.0 + rate) ** installments
        return financed_value * (rate * power) / (power - 1.0)

    @staticmethod
    def cashflow(monthly_saving: float, installment_value: float) -> CashflowResult:
        cashflow = monthly_saving - installment_value
        return CashflowResult(
            monthly_saving=monthly_saving,
            monthly_cashflow=cashflow,
            is_positive=cashflow >= 0,
        )

    @staticmethod
    def cash_benchmark(system_value: float, total_paid: float) -> float:
        # what paying cash would have saved compared to financing
        return total_paid - system_value
