# solar_engine/engine.py

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union
import logging
import math

from .amortization import AmortizationCalculator
from .economy_model import DEFAULT_COMPENSATION_FACTOR, EconomyModel
from .locations import resolve_hsp
from .payback import PaybackProjector
from .projection import ProjectionBuilder
from .rate_solver import RateSolver
from .rounding import round_half_up, round_money
from .solar_sizing import SolarSizingCalculator
from .types import BillComparisonRow, SizingResult

logger = logging.getLogger(__name__)


@dataclass
class ProposalInput:
    """Flat structure, one-to-one with the /proposal request body."""
    system_value: float
    tariff: float

    # Generation: first non-zero source wins (generation → power → consumption)
    monthly_generation_kwh: float = 0.0
    power_kwp: float = 0.0
    monthly_consumption_kwh: float = 0.0
    location: Union[float, str, None] = None

    # Financing (installments = 0 → cash purchase)
    entry_value: float = 0.0
    installments: int = 0
    installment_value: float = 0.0

    # Bill with solar never drops below the utility minimum (availability cost)
    minimum_bill: float = 0.0

    compensation_factor: float = DEFAULT_COMPENSATION_FACTOR
    tariff_increase_percent: float = 8.0
    horizon_years: int = 25


class ProposalEngine:
    """
    Public interface for a single proposal (one system, one payment plan).
    Called by FastAPI in main.py (endpoint /proposal).
    """

    @staticmethod
    def compute(data: ProposalInput) -> Dict[str, Any]:

        # ------------------------------------------------------
        # 1) BASIC VALIDATION
        # ------------------------------------------------------
        if not math.isfinite(data.system_value) or data.system_value <= 0:
            return {"error": "SYSTEM_VALUE_EMPTY"}
        if not math.isfinite(data.tariff) or data.tariff <= 0:
            return {"error": "TARIFF_EMPTY"}

        # ------------------------------------------------------
        # 2) SIZING / GENERATION
        # ------------------------------------------------------
        sizing = ProposalEngine.resolve_sizing(data)
        generation = sizing.expected_generation_kwh

        saving = EconomyModel.monthly_saving(generation, data.tariff, data.compensation_factor)

        # ------------------------------------------------------
        # 3) FINANCING
        # ------------------------------------------------------
        financed = data.installments > 0 and data.installment_value > 0
        financed_value = max(data.system_value - data.entry_value, 0.0)

        if financed:
            rate = RateSolver.detect_rate(financed_value, data.installments, data.installment_value)
            total_paid = data.entry_value + data.installment_value * data.installments
            cashflow = AmortizationCalculator.cashflow(saving, data.installment_value)
        else:
            rate = RateSolver.detect_rate(0, 0, 0)
            total_paid = data.system_value
            cashflow = AmortizationCalculator.cashflow(saving, 0.0)

        # ------------------------------------------------------
        # 4) PAYBACK
        # ------------------------------------------------------
        detailed = PaybackProjector.detailed_payback(
            data.system_value,
            data.installment_value,
            data.installments,
            saving,
            data.tariff_increase_percent,
            upfront_payment=data.entry_value,
        )
        payback = PaybackProjector.simple_payback(
            total_paid, saving, data.tariff_increase_percent
        )

        # ------------------------------------------------------
        # 5) PROJECTIONS
        # ------------------------------------------------------
        rows = ProjectionBuilder.yearly_projection(
            monthly_generation_kwh=generation,
            tariff=data.tariff,
            annual_tariff_increase_percent=data.tariff_increase_percent,
            system_value=data.system_value,
            upfront_payment=data.entry_value if financed else data.system_value,
            installment_value=data.installment_value if financed else 0.0,
            installments=data.installments if financed else 0,
            compensation_factor=data.compensation_factor,
            years=data.horizon_years,
        )
        total_savings = sum(row.gross_savings for row in rows)

        bills = ProposalEngine.bill_comparison(data, generation, saving, financed)

        logger.debug(
            "Proposal value=%.2f gen=%s saving=%.2f rate=%.4f%% payback=%s",
            data.system_value, generation, saving,
            rate.monthly_rate_percent, payback.months,
        )

        return {
            "sizing": sizing.to_dict(),
            "monthly_saving": round_money(saving),
            "rate": rate.to_dict(),
            "cashflow": cashflow.to_dict(),
            "total_paid": round_money(total_paid),
            "cash_benchmark": round_money(
                AmortizationCalculator.cash_benchmark(data.system_value, total_paid)
            ),
            "payback": payback.to_dict(),
            "detailed_payback": detailed.to_dict(),
            "lcoe": round_half_up(
                EconomyModel.lcoe(total_paid, generation, data.horizon_years), 4
            ),
            "roi": round_half_up(EconomyModel.roi(total_savings, total_paid), 1),
            "projection": [row.to_dict() for row in rows],
            "projection_payback_year": ProjectionBuilder.payback_year(rows),
            "bill_comparison": [row.to_dict() for row in bills],
            "crossover_year": ProjectionBuilder.crossover_year(bills),
        }

    @staticmethod
    def resolve_sizing(data: ProposalInput) -> SizingResult:
        hsp = resolve_hsp(data.location)

        if data.monthly_generation_kwh > 0:
            power = SolarSizingCalculator.required_power(data.monthly_generation_kwh, hsp)
            return SizingResult(
                recommended_power_kwp=data.power_kwp or power,
                expected_generation_kwh=data.monthly_generation_kwh,
                hsp_used=hsp,
            )

        if data.power_kwp > 0:
            return SizingResult(
                recommended_power_kwp=data.power_kwp,
                expected_generation_kwh=SolarSizingCalculator.expected_generation(
                    data.power_kwp, hsp
                ),
                hsp_used=hsp,
            )

        return SolarSizingCalculator.size_for_consumption(data.monthly_consumption_kwh, hsp)

    @staticmethod
    def bill_comparison(
        data: ProposalInput,
        generation: float,
        saving: float,
        financed: bool,
    ) -> List[BillComparisonRow]:
        """
        Bill without solar: consumption (or generation when no consumption
        was given) at today's tariff. With solar: that bill minus the saving,
        floored at the minimum bill, plus installments while financing.
        """
        consumption = data.monthly_consumption_kwh if data.monthly_consumption_kwh > 0 else generation
        without_solar = max(consumption, 0.0) * data.tariff
        with_solar = max(without_solar - saving, data.minimum_bill, 0.0)

        return ProjectionBuilder.bill_comparison(
            monthly_bill_without_solar=without_solar,
            monthly_bill_with_solar=with_solar,
            installment_value=data.installment_value if financed else 0.0,
            installments=data.installments if financed else 0,
            annual_tariff_increase_percent=data.tariff_increase_percent,
            years=data.horizon_years,
        )


def quick_rate(financed_value: float, installments: int, installment_value: float,
               monthly_saving: Optional[float] = None) -> Dict[str, Any]:
    """Rate check for the quick-simulation panel: rate + optional cashflow."""
    result = RateSolver.detect_rate(financed_value, installments, installment_value).to_dict()
    if monthly_saving is not None:
        result["cashflow"] = AmortizationCalculator.cashflow(
            monthly_saving, installment_value
        ).to_dict()
    return result
