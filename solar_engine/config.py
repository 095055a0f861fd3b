# solar_engine/config.py
"""
Engine settings.

EngineSettings is read from the environment (prefix SOLAR_ENGINE_) or a .env
file at the API boundary. Calculators never read it directly: the boundary
turns it into a ReverseSizingConfig and passes that in explicitly.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict


# ============================================================
# Market defaults (Brazilian solar financing)
# ============================================================

MARKET_RATES: Dict[int, float] = {   # % a.m. per term
    12: 2.19,
    24: 2.09,
    36: 1.99,
    48: 1.89,
    60: 1.79,
    72: 1.69,
    84: 1.59,
    96: 1.49,
}

FINANCING_TERMS: Tuple[int, ...] = (24, 36, 48, 60, 72, 84, 96)

DEFAULT_MARKET_RATE = 1.99
DEFAULT_PRICE_PER_KWP = 4500.0        # R$/kWp installed
DEFAULT_TARIFF_INCREASE = 8.0         # % a.a.
DEFAULT_CASH_DISCOUNT = 5.0           # %
DEFAULT_NPV_DISCOUNT_RATE = 0.01      # per month (~12.68% a.a.)
DEFAULT_REFERENCE_TERM = 60


# ============================================================
# ReverseSizingConfig - explicit per-call configuration
# ============================================================

@dataclass(frozen=True)
class ReverseSizingConfig:
    price_per_kwp: float = DEFAULT_PRICE_PER_KWP
    performance_factor: float = 0.80

    terms: Tuple[int, ...] = FINANCING_TERMS
    market_rates: Tuple[Tuple[int, float], ...] = tuple(sorted(MARKET_RATES.items()))
    default_market_rate: float = DEFAULT_MARKET_RATE
    reference_installments: int = DEFAULT_REFERENCE_TERM

    tariff_increase_percent: float = DEFAULT_TARIFF_INCREASE
    cash_discount_percent: float = DEFAULT_CASH_DISCOUNT
    npv_discount_rate: float = DEFAULT_NPV_DISCOUNT_RATE
    horizon_years: int = 25

    # cashflow-positive scenario: min(target_cashflow, budget * ratio)
    target_cashflow: float = 100.0
    target_cashflow_ratio: float = 0.20

    # viability thresholds (R$/month)
    viability_excellent_cashflow: float = 100.0
    viability_excellent_ratio: float = 0.15
    viability_tight_floor: float = -100.0

    def market_rate(self, installments: int) -> float:
        return dict(self.market_rates).get(installments, self.default_market_rate)


# ============================================================
# EngineSettings - environment / .env
# ============================================================

class EngineSettings(BaseSettings):
    """Engine settings from environment"""

    # ======================
    # Application
    # ======================
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # ======================
    # Regulatory / tariff
    # ======================
    COMPENSATION_FACTOR: float = 0.85
    TARIFF_INCREASE_PERCENT: float = DEFAULT_TARIFF_INCREASE

    # ======================
    # Pricing / financing
    # ======================
    PRICE_PER_KWP: float = DEFAULT_PRICE_PER_KWP
    CASH_DISCOUNT_PERCENT: float = DEFAULT_CASH_DISCOUNT
    NPV_DISCOUNT_RATE: float = DEFAULT_NPV_DISCOUNT_RATE
    REFERENCE_INSTALLMENTS: int = DEFAULT_REFERENCE_TERM
    MARKET_RATES: Dict[int, float] = dict(MARKET_RATES)

    # ======================
    # Viability
    # ======================
    TARGET_CASHFLOW: float = 100.0
    VIABILITY_EXCELLENT_CASHFLOW: float = 100.0
    VIABILITY_EXCELLENT_RATIO: float = 0.15
    VIABILITY_TIGHT_FLOOR: float = -100.0

    model_config = SettingsConfigDict(
        env_prefix="SOLAR_ENGINE_",
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    def reverse_sizing_config(self) -> ReverseSizingConfig:
        return ReverseSizingConfig(
            price_per_kwp=self.PRICE_PER_KWP,
            market_rates=tuple(sorted(self.MARKET_RATES.items())),
            reference_installments=self.REFERENCE_INSTALLMENTS,
            tariff_increase_percent=self.TARIFF_INCREASE_PERCENT,
            cash_discount_percent=self.CASH_DISCOUNT_PERCENT,
            npv_discount_rate=self.NPV_DISCOUNT_RATE,
            target_cashflow=self.TARGET_CASHFLOW,
            viability_excellent_cashflow=self.VIABILITY_EXCELLENT_CASHFLOW,
            viability_excellent_ratio=self.VIABILITY_EXCELLENT_RATIO,
            viability_tight_floor=self.VIABILITY_TIGHT_FLOOR,
        )


settings = EngineSettings()
