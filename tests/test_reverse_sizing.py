import math

import pytest

from solar_engine.amortization import AmortizationCalculator
from solar_engine.config import MARKET_RATES, ReverseSizingConfig
from solar_engine.economy_model import EconomyModel
from solar_engine.locations import DEFAULT_HSP
from solar_engine.reverse_sizing import ReverseSizingEngine
from solar_engine.solar_sizing import SolarSizingCalculator


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def make_result(budget=500.0, tariff=0.90, location=5.0, factor=0.85, config=None):
    return ReverseSizingEngine.reverse_calculate(budget, tariff, location, factor, config)


# ---------------------------------------------------------
# Recommendation / scenarios
# ---------------------------------------------------------

def test_cashflow_zero_sizes_for_budget(budget_500_result):
    zero = budget_500_result.scenarios.cashflow_zero

    # 500 / (5.0 * 30 * 0.8 * 0.9 * 0.85) = 5.4466 kWp, rounded to 5.45
    assert zero.recommended_power_kwp == 5.45
    assert zero.expected_generation_kwh == 654
    assert zero.estimated_system_value == pytest.approx(24525.0)
    # what 654 kWh actually saves: 654 * 0.85 * 0.9
    assert zero.monthly_saving == pytest.approx(500.31, abs=0.01)
    assert zero.max_installment_value == 500
    assert zero.hsp_used == 5.0


def test_cashflow_positive_adds_target(budget_500_result):
    positive = budget_500_result.scenarios.cashflow_positive

    # saving 600 → 600 / 91.8 = 6.536 kWp
    assert positive.recommended_power_kwp == 6.54
    assert positive.expected_generation_kwh == 785
    assert positive.monthly_saving == pytest.approx(600.53, abs=0.02)
    assert positive.target_cashflow == 100


def test_positive_target_is_capped_by_budget_share():
    positive = make_result(budget=200.0).scenarios.cashflow_positive
    assert positive.target_cashflow == 40
    assert positive.monthly_saving == pytest.approx(240, abs=1)


def test_positive_scenario_is_larger(budget_500_result):
    zero = budget_500_result.scenarios.cashflow_zero
    positive = budget_500_result.scenarios.cashflow_positive

    assert positive.recommended_power_kwp > zero.recommended_power_kwp
    assert positive.estimated_system_value > zero.estimated_system_value


def test_recommendation_mirrors_cashflow_zero(budget_500_result):
    rec = budget_500_result.recommendation
    zero = budget_500_result.scenarios.cashflow_zero

    assert rec.recommended_power_kwp == zero.recommended_power_kwp
    assert rec.expected_generation_kwh == zero.expected_generation_kwh
    assert rec.estimated_system_value == zero.estimated_system_value
    assert rec.monthly_saving == zero.monthly_saving
    assert rec.reference_installments == 60


def test_affordable_value_pays_exactly_the_budget(budget_500_result):
    value = budget_500_result.recommendation.affordable_financed_value
    installment = AmortizationCalculator.installment_for(value, 1.79, 60)
    assert installment == pytest.approx(500, abs=0.01)


def test_affordable_value_grows_with_budget():
    small = ReverseSizingEngine.affordable_financed_value(300, 60)
    large = ReverseSizingEngine.affordable_financed_value(600, 60)
    assert large > small > 0


def test_location_string_resolves_hsp():
    result = make_result(location="BA")
    assert result.recommendation.hsp_used == 5.5


def test_same_input_same_output():
    assert make_result() == make_result()


# ---------------------------------------------------------
# Financing options
# ---------------------------------------------------------

def test_financing_options_cover_every_term(budget_500_result):
    options = budget_500_result.financing_options

    assert [o.installments for o in options] == [24, 36, 48, 60, 72, 84, 96]
    for option in options:
        assert option.estimated_rate == pytest.approx(MARKET_RATES[option.installments], abs=0.01)


def test_longer_terms_cost_less_per_month_and_more_in_total(budget_500_result):
    options = budget_500_result.financing_options

    for shorter, longer in zip(options, options[1:]):
        assert longer.installment_value < shorter.installment_value
        assert longer.total_paid > shorter.total_paid


def test_viability_of_extreme_terms(budget_500_result):
    options = budget_500_result.financing_options

    # 24x at 2.09% ≈ 1309/month against 500 of saving
    assert options[0].viability == "negative"
    # 96x at 1.49% ≈ 482/month
    assert options[-1].viability == "good"
    assert options[-1].monthly_cashflow > 0


def test_option_fields_are_consistent(budget_500_result):
    for option in budget_500_result.financing_options:
        assert option.total_paid == pytest.approx(
            option.installment_value * option.installments, abs=option.installments * 0.01
        )
        assert option.monthly_cashflow == pytest.approx(
            budget_500_result.recommendation.monthly_saving - option.installment_value, abs=0.01
        )
        assert option.payback_years is not None


@pytest.mark.parametrize("cashflow,saving,expected", [
    (150, 1000, "excellent"),
    (100, 2000, "excellent"),
    (80, 500, "excellent"),
    (50, 1000, "good"),
    (0, 500, "good"),
    (-50, 500, "tight"),
    (-100, 500, "tight"),
    (-100.01, 500, "negative"),
])
def test_classify_viability(cashflow, saving, expected):
    viability, label = ReverseSizingEngine.classify_viability(cashflow, saving)
    assert viability == expected
    assert label


# ---------------------------------------------------------
# Cash / NPV / long term
# ---------------------------------------------------------

def test_cash_option(budget_500_result):
    cash = budget_500_result.cash_option

    assert cash.discount_percent == 5
    assert cash.discounted_value == pytest.approx(24525.0 * 0.95, abs=0.02)
    assert cash.discount_savings == pytest.approx(24525.0 * 0.05, abs=0.02)
    assert cash.payback_years is not None
    for option in budget_500_result.financing_options:
        assert cash.payback_years <= option.payback_years


def test_net_present_value_without_growth_is_annuity():
    npv = ReverseSizingEngine.net_present_value(0, 100, 0, years=1, monthly_discount_rate=0.01)
    assert npv == pytest.approx(100 * AmortizationCalculator.annuity_factor(0.01, 12))


def test_long_term_projection_compounds_monthly(budget_500_result):
    projection = budget_500_result.long_term_projection
    growth = EconomyModel.monthly_growth_rate(8)
    saving = budget_500_result.recommendation.monthly_saving
    expected_total = saving * ((1 + growth) ** 300 - 1) / growth

    assert projection.total_savings == pytest.approx(expected_total, rel=1e-6)
    assert projection.average_annual_savings == pytest.approx(expected_total / 25, rel=1e-6)

    investment = budget_500_result.recommendation.estimated_system_value
    expected_roi = (expected_total - investment) / investment * 100
    assert projection.roi == pytest.approx(expected_roi, abs=0.1)


def test_custom_config_is_honoured():
    config = ReverseSizingConfig(price_per_kwp=5000.0, terms=(36, 60))
    result = make_result(config=config)

    assert [o.installments for o in result.financing_options] == [36, 60]
    assert result.recommendation.estimated_system_value == pytest.approx(5.45 * 5000)


# ---------------------------------------------------------
# Degenerate inputs
# ---------------------------------------------------------

@pytest.mark.parametrize("budget,tariff,location,factor", [
    (0, 0.9, 5.0, 0.85),
    (-100, 0.9, 5.0, 0.85),
    (math.nan, 0.9, 5.0, 0.85),
    (500, 0, 5.0, 0.85),
    (500, -1, 5.0, 0.85),
    (500, 0.9, -5.0, 0.85),
    (500, 0.9, 5.0, 0),
    (500, 0.9, 5.0, -0.5),
    (500, 0.9, 5.0, math.nan),
    (500, 0.9, 5.0, math.inf),
])
def test_degenerate_inputs_give_zero_system(budget, tariff, location, factor):
    result = make_result(budget=budget, tariff=tariff, location=location, factor=factor)

    assert result.recommendation.recommended_power_kwp == 0
    assert result.recommendation.estimated_system_value == 0
    assert result.recommendation.monthly_saving == 0
    assert result.scenarios.cashflow_positive.recommended_power_kwp == 0
    for option in result.financing_options:
        assert option.installment_value == 0
        assert option.payback_years is None
    assert result.cash_option.payback_years is None
    assert result.long_term_projection.total_savings == 0
    assert result.long_term_projection.roi == 0
    assert result.scenarios.cashflow_zero.monthly_saving == 0
    assert result.recommendation.hsp_used > 0


def test_zero_hsp_means_default_location():
    assert make_result(location=0).recommendation.hsp_used == DEFAULT_HSP
    assert make_result(location=0).recommendation.recommended_power_kwp > 0


# ---------------------------------------------------------
# Sized systems reproduce their own generation
# ---------------------------------------------------------

@pytest.mark.parametrize("hsp", [4.5, 5.0, 5.5, 6.0])
def test_scenarios_round_trip_through_forward_formula(hsp):
    for budget in [114, 128] + list(range(100, 3001, 37)):
        result = make_result(budget=float(budget), location=hsp)
        sized = [
            result.recommendation,
            result.scenarios.cashflow_zero,
            result.scenarios.cashflow_positive,
        ]
        for system in sized:
            assert SolarSizingCalculator.expected_generation(
                system.recommended_power_kwp, system.hsp_used
            ) == system.expected_generation_kwh
            assert system.monthly_saving == pytest.approx(
                EconomyModel.monthly_saving(system.expected_generation_kwh, 0.90, 0.85), abs=0.01
            )
            assert system.estimated_system_value == pytest.approx(
                system.recommended_power_kwp * 4500, abs=0.01
            )


def test_saving_stays_within_rounding_of_budget():
    for budget in (114.0, 128.0, 500.0, 1750.0):
        zero = make_result(budget=budget, location=6.0).scenarios.cashflow_zero
        # 0.005 kWp of rounding + half a kWh, at 6.0 HSP, R$ 0.90, 85%
        assert zero.monthly_saving == pytest.approx(budget, abs=1.0)


def test_to_dict_shape(budget_500_result):
    data = budget_500_result.to_dict()
    assert set(data) == {
        "recommendation", "scenarios", "financing_options",
        "cash_option", "long_term_projection",
    }
    assert len(data["financing_options"]) == 7
