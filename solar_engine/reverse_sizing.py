# solar_engine/reverse_sizing.py

from __future__ import annotations
from typing import List, Optional, Tuple, Union
import logging
import math

from .amortization import AmortizationCalculator
from .config import ReverseSizingConfig
from .economy_model import DEFAULT_COMPENSATION_FACTOR, EconomyModel
from .locations import resolve_hsp
from .payback import PaybackProjector
from .rate_solver import RateSolver
from .rounding import round_half_up, round_money
from .search import MonotoneSearch
from .solar_sizing import SolarSizingCalculator
from .types import (
    CashflowPositiveScenario,
    CashflowZeroScenario,
    CashOption,
    FinancingOption,
    LongTermProjection,
    ReverseCalcResult,
    ReverseScenarios,
    SystemRecommendation,
    Viability,
)

logger = logging.getLogger(__name__)


VIABILITY_LABELS = {
    "excellent": "Excellent - money left over every month",
    "good": "Good - pays for itself",
    "tight": "Tight - small monthly outlay",
    "negative": "Negative - high monthly outlay",
}


def _finite_non_negative(value: float) -> float:
    if value is None or not math.isfinite(value) or value < 0:
        return 0.0
    return float(value)


def _is_negative_number(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value) and value < 0


class ReverseSizingEngine:
    """
    "Which system fits my pocket?"

    Starts from what the client can pay per month and works back to system
    size, value, financing options and long-term return. Every inversion is a
    bisection over the forward formulas (saving grows with power, installment
    grows with financed value), so the results stay consistent with the
    forward calculators.
    """

    # =================================================
    # MAIN ENTRY
    # =================================================
    @staticmethod
    def reverse_calculate(
        monthly_budget: float,
        tariff: float,
        hsp_or_location: Union[float, str, None] = None,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
        config: Optional[ReverseSizingConfig] = None,
    ) -> ReverseCalcResult:

        cfg = config or ReverseSizingConfig()
        budget = _finite_non_negative(monthly_budget)
        tariff = _finite_non_negative(tariff)
        compensation_factor = _finite_non_negative(compensation_factor)
        hsp = resolve_hsp(hsp_or_location)

        # 0 / None pick the default HSP; a negative irradiation sizes nothing
        if _is_negative_number(hsp_or_location):
            tariff = 0.0

        # -----------------------------------------
        # 1) Cashflow zero: saving == budget
        # -----------------------------------------
        cashflow_zero = ReverseSizingEngine.cashflow_zero_scenario(
            budget, tariff, hsp, compensation_factor, cfg
        )

        # -----------------------------------------
        # 2) Cashflow positive: saving == budget + target
        # -----------------------------------------
        cashflow_positive = ReverseSizingEngine.cashflow_positive_scenario(
            budget, tariff, hsp, compensation_factor, cfg
        )

        # -----------------------------------------
        # 3) Recommendation = cashflow-zero system
        # -----------------------------------------
        power = cashflow_zero.recommended_power_kwp
        system_value = cashflow_zero.estimated_system_value
        saving = cashflow_zero.monthly_saving

        recommendation = SystemRecommendation(
            recommended_power_kwp=cashflow_zero.recommended_power_kwp,
            expected_generation_kwh=cashflow_zero.expected_generation_kwh,
            hsp_used=hsp,
            estimated_system_value=cashflow_zero.estimated_system_value,
            monthly_saving=cashflow_zero.monthly_saving,
            affordable_financed_value=round_money(
                ReverseSizingEngine.affordable_financed_value(
                    budget, cfg.reference_installments, cfg
                )
            ),
            reference_installments=cfg.reference_installments,
        )

        # -----------------------------------------
        # 4) Financing / cash / long term
        # -----------------------------------------
        financing_options = ReverseSizingEngine.financing_options(system_value, saving, cfg)
        cash_option = ReverseSizingEngine.cash_option(system_value, saving, cfg)
        projection = ReverseSizingEngine.long_term_projection(saving, system_value, cfg)

        logger.debug(
            "Reverse sizing budget=%.2f tariff=%.4f hsp=%.2f → %.2f kWp (R$ %.2f)",
            budget, tariff, hsp, power, system_value,
        )

        return ReverseCalcResult(
            recommendation=recommendation,
            scenarios=ReverseScenarios(
                cashflow_zero=cashflow_zero,
                cashflow_positive=cashflow_positive,
            ),
            financing_options=financing_options,
            cash_option=cash_option,
            long_term_projection=projection,
        )

    # =================================================
    # INVERSIONS
    # =================================================
    @staticmethod
    def power_for_saving(
        target_saving: float,
        tariff: float,
        hsp: float,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
        performance_factor: float = 0.80,
    ) -> float:
        """kWp whose monthly saving equals target_saving (0 when unreachable)."""
        inputs = (target_saving, tariff, hsp, compensation_factor)
        if not all(math.isfinite(v) and v > 0 for v in inputs):
            return 0.0

        def saving_for_power(power_kwp: float) -> float:
            generation = SolarSizingCalculator.raw_generation(power_kwp, hsp, performance_factor)
            return EconomyModel.monthly_saving(generation, tariff, compensation_factor)

        return MonotoneSearch.solve(saving_for_power, target_saving)

    @staticmethod
    def affordable_financed_value(
        monthly_budget: float,
        installments: int,
        config: Optional[ReverseSizingConfig] = None,
    ) -> float:
        """Largest financed value whose installment at the market rate fits the budget."""
        cfg = config or ReverseSizingConfig()
        if monthly_budget <= 0 or installments <= 0:
            return 0.0

        rate = cfg.market_rate(installments)
        return MonotoneSearch.solve(
            lambda value: AmortizationCalculator.installment_for(value, rate, installments),
            monthly_budget,
        )

    # =================================================
    # SCENARIOS
    # =================================================
    @staticmethod
    def cashflow_zero_scenario(
        budget: float,
        tariff: float,
        hsp: float,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
        config: Optional[ReverseSizingConfig] = None,
    ) -> CashflowZeroScenario:
        """The budget is the installment; the system's saving pays it entirely."""
        cfg = config or ReverseSizingConfig()
        power, generation, value, saving = ReverseSizingEngine._size_for_saving(
            budget, tariff, hsp, compensation_factor, cfg
        )
        return CashflowZeroScenario(
            recommended_power_kwp=power,
            expected_generation_kwh=generation,
            hsp_used=hsp,
            estimated_system_value=value,
            monthly_saving=saving,
            max_installment_value=round_money(budget),
        )

    @staticmethod
    def cashflow_positive_scenario(
        budget: float,
        tariff: float,
        hsp: float,
        compensation_factor: float = DEFAULT_COMPENSATION_FACTOR,
        config: Optional[ReverseSizingConfig] = None,
    ) -> CashflowPositiveScenario:
        """Sized so the saving leaves a surplus above the budgeted installment."""
        cfg = config or ReverseSizingConfig()
        target = min(cfg.target_cashflow, budget * cfg.target_cashflow_ratio)
        power, generation, value, saving = ReverseSizingEngine._size_for_saving(
            budget + target, tariff, hsp, compensation_factor, cfg
        )
        return CashflowPositiveScenario(
            recommended_power_kwp=power,
            expected_generation_kwh=generation,
            hsp_used=hsp,
            estimated_system_value=value,
            monthly_saving=saving,
            target_cashflow=round_money(target),
        )

    @staticmethod
    def _size_for_saving(
        target_saving: float,
        tariff: float,
        hsp: float,
        compensation_factor: float,
        cfg: ReverseSizingConfig,
    ) -> Tuple[float, int, float, float]:
        """
        Sizes for target_saving, then reports what the rounded system
        actually delivers through the forward formulas.
        """
        power = round_half_up(
            ReverseSizingEngine.power_for_saving(
                target_saving, tariff, hsp, compensation_factor, cfg.performance_factor
            ),
            2,
        )
        generation = SolarSizingCalculator.expected_generation(
            power, hsp, cfg.performance_factor
        )
        saving = EconomyModel.monthly_saving(generation, tariff, compensation_factor)

        return (
            power,
            generation,
            round_money(power * cfg.price_per_kwp),
            round_money(saving),
        )

    # =================================================
    # FINANCING OPTIONS
    # =================================================
    @staticmethod
    def financing_options(
        system_value: float,
        monthly_saving: float,
        config: Optional[ReverseSizingConfig] = None,
    ) -> List[FinancingOption]:
        cfg = config or ReverseSizingConfig()
        return [
            ReverseSizingEngine.financing_option(system_value, monthly_saving, n, cfg)
            for n in sorted(cfg.terms)
        ]

    @staticmethod
    def financing_option(
        system_value: float,
        monthly_saving: float,
        installments: int,
        config: Optional[ReverseSizingConfig] = None,
    ) -> FinancingOption:
        cfg = config or ReverseSizingConfig()

        market_rate = cfg.market_rate(installments)
        installment = AmortizationCalculator.installment_for(system_value, market_rate, installments)
        total_paid = installment * installments
        total_interest = total_paid - system_value
        cashflow = monthly_saving - installment

        # cross-check: the solver must find the rate back from the offer
        detected = RateSolver.detect_rate(system_value, installments, installment)
        estimated_rate = (
            detected.monthly_rate_percent if detected.method != "none" else market_rate
        )

        payback = PaybackProjector.simple_payback(
            total_paid, monthly_saving, cfg.tariff_increase_percent
        )
        viability, label = ReverseSizingEngine.classify_viability(cashflow, monthly_saving, cfg)

        npv = ReverseSizingEngine.net_present_value(
            total_paid,
            monthly_saving,
            cfg.tariff_increase_percent,
            cfg.horizon_years,
            cfg.npv_discount_rate,
        )

        return FinancingOption(
            installments=installments,
            installment_value=round_money(installment),
            estimated_rate=round_half_up(estimated_rate, 2),
            total_paid=round_money(total_paid),
            total_interest=round_money(total_interest),
            net_present_value=round_money(npv),
            payback_years=ReverseSizingEngine._payback_years(payback.months),
            monthly_cashflow=round_money(cashflow),
            viability=viability,
            viability_label=label,
        )

    @staticmethod
    def classify_viability(
        monthly_cashflow: float,
        monthly_saving: float,
        config: Optional[ReverseSizingConfig] = None,
    ) -> Tuple[Viability, str]:
        """
        excellent: surplus >= 100/month or >= 15% of the saving
        good:      break-even or better
        tight:     small outlay (down to -100/month)
        negative:  anything worse
        """
        cfg = config or ReverseSizingConfig()
        ratio = monthly_cashflow / max(monthly_saving, 1.0)

        if (
            monthly_cashflow >= cfg.viability_excellent_cashflow
            or ratio >= cfg.viability_excellent_ratio
        ):
            viability = "excellent"
        elif monthly_cashflow >= 0:
            viability = "good"
        elif monthly_cashflow >= cfg.viability_tight_floor:
            viability = "tight"
        else:
            viability = "negative"

        return viability, VIABILITY_LABELS[viability]

    # =================================================
    # CASH / NPV / LONG TERM
    # =================================================
    @staticmethod
    def cash_option(
        system_value: float,
        monthly_saving: float,
        config: Optional[ReverseSizingConfig] = None,
    ) -> CashOption:
        cfg = config or ReverseSizingConfig()

        discounted = system_value * (1.0 - cfg.cash_discount_percent / 100.0)
        payback = PaybackProjector.simple_payback(
            discounted, monthly_saving, cfg.tariff_increase_percent
        )
        npv = ReverseSizingEngine.net_present_value(
            discounted,
            monthly_saving,
            cfg.tariff_increase_percent,
            cfg.horizon_years,
            cfg.npv_discount_rate,
        )

        return CashOption(
            original_value=round_money(system_value),
            discount_percent=cfg.cash_discount_percent,
            discounted_value=round_money(discounted),
            discount_savings=round_money(system_value - discounted),
            net_present_value=round_money(npv),
            payback_years=ReverseSizingEngine._payback_years(payback.months),
        )

    @staticmethod
    def net_present_value(
        investment: float,
        monthly_saving: float,
        annual_tariff_increase_percent: float,
        years: int = 25,
        monthly_discount_rate: float = 0.01,
    ) -> float:
        """NPV = Σ saving_m / (1+d)^m - investment, saving growing with the tariff."""
        growth = EconomyModel.monthly_growth_rate(annual_tariff_increase_percent)
        npv = -investment
        saving = max(monthly_saving, 0.0)
        discount = 1.0

        for _ in range(years * 12):
            discount *= (1.0 + monthly_discount_rate)
            npv += saving / discount
            saving *= (1.0 + growth)

        return npv

    @staticmethod
    def long_term_projection(
        monthly_saving: float,
        investment: float,
        config: Optional[ReverseSizingConfig] = None,
    ) -> LongTermProjection:
        cfg = config or ReverseSizingConfig()
        growth = EconomyModel.monthly_growth_rate(cfg.tariff_increase_percent)

        total = 0.0
        saving = max(monthly_saving, 0.0)
        for _ in range(cfg.horizon_years * 12):
            total += saving
            saving *= (1.0 + growth)

        years = max(cfg.horizon_years, 1)
        return LongTermProjection(
            total_savings=round_money(total),
            average_annual_savings=round_money(total / years),
            roi=round_half_up(EconomyModel.roi(total, investment), 1),
        )

    @staticmethod
    def _payback_years(months: Optional[int]) -> Optional[float]:
        if months is None:
            return None
        return round_half_up(months / 12.0, 1)
