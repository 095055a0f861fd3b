import pytest

from solar_engine.config import ReverseSizingConfig
from solar_engine.reverse_sizing import ReverseSizingEngine
from solar_engine.types import LoanTerms


@pytest.fixture
def standard_loan():
    # R$ 30.000 in 48x at 1% a.m.
    return LoanTerms(financed_value=30000.0, installments=48, installment_value=789.91)


@pytest.fixture
def default_config():
    return ReverseSizingConfig()


@pytest.fixture
def budget_500_result(default_config):
    # R$ 500/month, R$ 0.90/kWh, HSP 5.0, 85% compensation
    return ReverseSizingEngine.reverse_calculate(
        monthly_budget=500.0,
        tariff=0.90,
        hsp_or_location=5.0,
        compensation_factor=0.85,
        config=default_config,
    )
