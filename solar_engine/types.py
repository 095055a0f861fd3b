# solar_engine/types.py

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional


# ============================================================
# Aliases
# ============================================================

RateSemaphore = str          # "excellent" / "average" / "expensive"
Viability = str              # "excellent" / "good" / "tight" / "negative"
SolverMethod = str           # "none" / "newton" / "fallback"

SEMAPHORE_EXCELLENT = "excellent"
SEMAPHORE_AVERAGE = "average"
SEMAPHORE_EXPENSIVE = "expensive"

UNREACHABLE_DISPLAY = "N/A"


# ============================================================
# LoanTerms - one amortized loan as typed in by the seller
# ============================================================

@dataclass(frozen=True)
class LoanTerms:
    financed_value: float        # R$
    installments: int            # number of monthly payments
    installment_value: float     # R$/month

    @property
    def total_paid(self) -> float:
        return self.installment_value * self.installments

    def to_dict(self):
        return {
            "financed_value": self.financed_value,
            "installments": self.installments,
            "installment_value": self.installment_value,
        }


# ============================================================
# RateDetectionResult - output of RateSolver
# ============================================================

@dataclass(frozen=True)
class RateDetectionResult:
    monthly_rate_percent: float
    annual_rate_percent: float   # effective, compounded
    total_interest: float
    semaphore: RateSemaphore
    method: SolverMethod = "none"
    iterations: int = 0

    def to_dict(self):
        return {
            "monthly_rate_percent": self.monthly_rate_percent,
            "annual_rate_percent": self.annual_rate_percent,
            "total_interest": self.total_interest,
            "semaphore": self.semaphore,
            "method": self.method,
            "iterations": self.iterations,
        }


# ============================================================
# Cashflow - saving minus installment
# ============================================================

@dataclass(frozen=True)
class CashflowResult:
    monthly_saving: float
    monthly_cashflow: float
    is_positive: bool

    def to_dict(self):
        return {
            "monthly_saving": self.monthly_saving,
            "monthly_cashflow": self.monthly_cashflow,
            "is_positive": self.is_positive,
        }


# ============================================================
# Payback - None means "unreachable"
# ============================================================

@dataclass(frozen=True)
class PaybackResult:
    months: Optional[int]
    years: Optional[int]
    display: str

    @property
    def reachable(self) -> bool:
        return self.months is not None

    def to_dict(self):
        return {
            "months": self.months,
            "years": self.years,
            "display": self.display,
        }


@dataclass(frozen=True)
class DetailedPaybackResult(PaybackResult):
    total_paid: float = 0.0
    net_savings_after_horizon: float = 0.0
    break_even_month: Optional[int] = None

    def to_dict(self):
        out = super().to_dict()
        out.update({
            "total_paid": self.total_paid,
            "net_savings_after_horizon": self.net_savings_after_horizon,
            "break_even_month": self.break_even_month,
        })
        return out


# ============================================================
# Sizing
# ============================================================

@dataclass(frozen=True)
class SizingResult:
    recommended_power_kwp: float     # kWp
    expected_generation_kwh: float   # kWh/month
    hsp_used: float                  # peak sun hours

    def to_dict(self):
        return {
            "recommended_power_kwp": self.recommended_power_kwp,
            "expected_generation_kwh": self.expected_generation_kwh,
            "hsp_used": self.hsp_used,
        }


@dataclass(frozen=True)
class SystemRecommendation(SizingResult):
    estimated_system_value: float = 0.0     # R$
    monthly_saving: float = 0.0             # R$/month
    affordable_financed_value: float = 0.0  # R$ at the reference term
    reference_installments: int = 0

    def to_dict(self):
        out = super().to_dict()
        out.update({
            "estimated_system_value": self.estimated_system_value,
            "monthly_saving": self.monthly_saving,
            "affordable_financed_value": self.affordable_financed_value,
            "reference_installments": self.reference_installments,
        })
        return out


@dataclass(frozen=True)
class CashflowZeroScenario(SizingResult):
    estimated_system_value: float = 0.0
    monthly_saving: float = 0.0
    max_installment_value: float = 0.0

    def to_dict(self):
        out = super().to_dict()
        out.update({
            "estimated_system_value": self.estimated_system_value,
            "monthly_saving": self.monthly_saving,
            "max_installment_value": self.max_installment_value,
        })
        return out


@dataclass(frozen=True)
class CashflowPositiveScenario(SizingResult):
    estimated_system_value: float = 0.0
    monthly_saving: float = 0.0
    target_cashflow: float = 0.0

    def to_dict(self):
        out = super().to_dict()
        out.update({
            "estimated_system_value": self.estimated_system_value,
            "monthly_saving": self.monthly_saving,
            "target_cashflow": self.target_cashflow,
        })
        return out


# ============================================================
# Financing / cash options
# ============================================================

@dataclass(frozen=True)
class FinancingOption:
    installments: int
    installment_value: float
    estimated_rate: float            # % a.m.
    total_paid: float
    total_interest: float
    net_present_value: float
    payback_years: Optional[float]   # None → unreachable
    monthly_cashflow: float
    viability: Viability
    viability_label: str

    def to_dict(self):
        return {
            "installments": self.installments,
            "installment_value": self.installment_value,
            "estimated_rate": self.estimated_rate,
            "total_paid": self.total_paid,
            "total_interest": self.total_interest,
            "net_present_value": self.net_present_value,
            "payback_years": self.payback_years,
            "monthly_cashflow": self.monthly_cashflow,
            "viability": self.viability,
            "viability_label": self.viability_label,
        }


@dataclass(frozen=True)
class CashOption:
    original_value: float
    discount_percent: float
    discounted_value: float
    discount_savings: float
    net_present_value: float
    payback_years: Optional[float]

    def to_dict(self):
        return {
            "original_value": self.original_value,
            "discount_percent": self.discount_percent,
            "discounted_value": self.discounted_value,
            "discount_savings": self.discount_savings,
            "net_present_value": self.net_present_value,
            "payback_years": self.payback_years,
        }


@dataclass(frozen=True)
class LongTermProjection:
    total_savings: float
    average_annual_savings: float
    roi: float                       # %

    def to_dict(self):
        return {
            "total_savings": self.total_savings,
            "average_annual_savings": self.average_annual_savings,
            "roi": self.roi,
        }


# ============================================================
# ReverseCalcResult - everything the budget calculator returns
# ============================================================

@dataclass(frozen=True)
class ReverseScenarios:
    cashflow_zero: CashflowZeroScenario
    cashflow_positive: CashflowPositiveScenario

    def to_dict(self):
        return {
            "cashflow_zero": self.cashflow_zero.to_dict(),
            "cashflow_positive": self.cashflow_positive.to_dict(),
        }


@dataclass(frozen=True)
class ReverseCalcResult:
    recommendation: SystemRecommendation
    scenarios: ReverseScenarios
    financing_options: List[FinancingOption]
    cash_option: CashOption
    long_term_projection: LongTermProjection

    def to_dict(self):
        return {
            "recommendation": self.recommendation.to_dict(),
            "scenarios": self.scenarios.to_dict(),
            "financing_options": [o.to_dict() for o in self.financing_options],
            "cash_option": self.cash_option.to_dict(),
            "long_term_projection": self.long_term_projection.to_dict(),
        }


# ============================================================
# Projection tables (charts / report collaborators)
# ============================================================

@dataclass(frozen=True)
class YearlyProjectionRow:
    year: int
    generation_kwh: float
    tariff: float            # R$/kWh after inflation
    gross_savings: float
    installment_cost: float
    maintenance_cost: float
    net_cashflow: float
    accumulated: float

    def to_dict(self):
        return {
            "year": self.year,
            "generation_kwh": self.generation_kwh,
            "tariff": self.tariff,
            "gross_savings": self.gross_savings,
            "installment_cost": self.installment_cost,
            "maintenance_cost": self.maintenance_cost,
            "net_cashflow": self.net_cashflow,
            "accumulated": self.accumulated,
        }


@dataclass(frozen=True)
class BillComparisonRow:
    year: int
    annual_cost_without_solar: float
    annual_cost_with_solar: float
    accumulated_without_solar: float
    accumulated_with_solar: float

    def to_dict(self):
        return {
            "year": self.year,
            "annual_cost_without_solar": self.annual_cost_without_solar,
            "annual_cost_with_solar": self.annual_cost_with_solar,
            "accumulated_without_solar": self.accumulated_without_solar,
            "accumulated_with_solar": self.accumulated_with_solar,
        }
