# ============================================================
# Solar Engine - Backend API
# JSON adapter over the financial & sizing engine
# ============================================================

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from typing import Optional, Union
import logging

# Engine imports
from solar_engine.amortization import AmortizationCalculator
from solar_engine.config import settings
from solar_engine.engine import ProposalEngine, ProposalInput, quick_rate
from solar_engine.locations import all_cities, all_states
from solar_engine.logs import configure_logging
from solar_engine.payback import PaybackProjector
from solar_engine.reverse_sizing import ReverseSizingEngine
from solar_engine.solar_sizing import SolarSizingCalculator


# ============================================================
# FASTAPI INIT
# ============================================================

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Solar Engine")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)


@app.get("/health")
def health():
    return {"status": "ok"}


# ============================================================
# RATE DETECTION / INSTALLMENT
# ============================================================

class DetectRateRequest(BaseModel):
    financed_value: float
    installments: int
    installment_value: float
    monthly_saving: Optional[float] = None


@app.post("/detect_rate")
def detect_rate(req: DetectRateRequest):
    return quick_rate(
        req.financed_value,
        req.installments,
        req.installment_value,
        req.monthly_saving,
    )


class InstallmentRequest(BaseModel):
    financed_value: float
    monthly_rate_percent: float = Field(ge=0)
    installments: int


@app.post("/installment")
def installment(req: InstallmentRequest):
    value = AmortizationCalculator.installment_for(
        req.financed_value, req.monthly_rate_percent, req.installments
    )
    return {"installment_value": value}


# ============================================================
# PAYBACK
# ============================================================

class PaybackRequest(BaseModel):
    total_cost: float
    monthly_saving: float
    annual_tariff_increase_percent: Optional[float] = None


@app.post("/payback")
def payback(req: PaybackRequest):
    increase = (
        req.annual_tariff_increase_percent
        if req.annual_tariff_increase_percent is not None
        else settings.TARIFF_INCREASE_PERCENT
    )
    return PaybackProjector.simple_payback(
        req.total_cost, req.monthly_saving, increase
    ).to_dict()


class DetailedPaybackRequest(BaseModel):
    system_value: float
    installment_value: float
    installments: int
    monthly_saving: float
    annual_tariff_increase_percent: Optional[float] = None
    upfront_payment: float = 0.0


@app.post("/detailed_payback")
def detailed_payback(req: DetailedPaybackRequest):
    increase = (
        req.annual_tariff_increase_percent
        if req.annual_tariff_increase_percent is not None
        else settings.TARIFF_INCREASE_PERCENT
    )
    return PaybackProjector.detailed_payback(
        req.system_value,
        req.installment_value,
        req.installments,
        req.monthly_saving,
        increase,
        upfront_payment=req.upfront_payment,
    ).to_dict()


# ============================================================
# SIZING
# ============================================================

class SizingRequest(BaseModel):
    monthly_consumption_kwh: float
    location: Optional[Union[float, str]] = None


@app.post("/sizing")
def sizing(req: SizingRequest):
    return SolarSizingCalculator.size_for_consumption(
        req.monthly_consumption_kwh, req.location
    ).to_dict()


@app.get("/locations/states")
def location_states():
    return all_states()


@app.get("/locations/cities")
def location_cities():
    return all_cities()


# ============================================================
# REVERSE CALCULATOR ("which system fits my budget?")
# ============================================================

class ReverseCalcRequest(BaseModel):
    monthly_budget: float
    tariff: float
    location: Optional[Union[float, str]] = None
    compensation_factor: Optional[float] = Field(default=None, gt=0, le=1)


@app.post("/reverse_calculate")
def reverse_calculate(req: ReverseCalcRequest):
    factor = (
        req.compensation_factor
        if req.compensation_factor is not None
        else settings.COMPENSATION_FACTOR
    )
    result = ReverseSizingEngine.reverse_calculate(
        req.monthly_budget,
        req.tariff,
        req.location,
        factor,
        settings.reverse_sizing_config(),
    )
    return result.to_dict()


# ============================================================
# PROPOSAL (one system, one payment plan)
# ============================================================

class ProposalRequest(BaseModel):
    system_value: float
    tariff: float

    monthly_generation_kwh: float = 0.0
    power_kwp: float = 0.0
    monthly_consumption_kwh: float = 0.0
    location: Optional[Union[float, str]] = None

    entry_value: float = 0.0
    installments: int = 0
    installment_value: float = 0.0
    minimum_bill: float = 0.0

    compensation_factor: Optional[float] = Field(default=None, gt=0, le=1)
    tariff_increase_percent: Optional[float] = None


@app.post("/proposal")
def proposal(req: ProposalRequest):
    engine_input = ProposalInput(
        system_value=req.system_value,
        tariff=req.tariff,

        monthly_generation_kwh=req.monthly_generation_kwh,
        power_kwp=req.power_kwp,
        monthly_consumption_kwh=req.monthly_consumption_kwh,
        location=req.location,

        entry_value=req.entry_value,
        installments=req.installments,
        installment_value=req.installment_value,
        minimum_bill=req.minimum_bill,

        compensation_factor=(
            req.compensation_factor
            if req.compensation_factor is not None
            else settings.COMPENSATION_FACTOR
        ),
        tariff_increase_percent=(
            req.tariff_increase_percent
            if req.tariff_increase_percent is not None
            else settings.TARIFF_INCREASE_PERCENT
        ),
    )

    result = ProposalEngine.compute(engine_input)
    if "error" in result:
        logger.info("Proposal rejected: %s", result["error"])
    return result
