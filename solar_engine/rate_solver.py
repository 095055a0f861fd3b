# solar_engine/rate_solver.py

from __future__ import annotations
from dataclasses import dataclass
import logging
import math

from .amortization import AmortizationCalculator
from .types import (
    LoanTerms,
    RateDetectionResult,
    RateSemaphore,
    SEMAPHORE_AVERAGE,
    SEMAPHORE_EXCELLENT,
    SEMAPHORE_EXPENSIVE,
)

logger = logging.getLogger(__name__)


MAX_ITERATIONS = 100
STEP_TOLERANCE = 1e-7
DERIVATIVE_FLOOR = 1e-12
VERIFY_TOLERANCE = 0.01          # 1% relative error on the present value

# total paid within this relative distance of PV counts as "no markup"
NO_MARKUP_TOLERANCE = 1e-9

SEED_FALLBACK_LOW = 0.01
SEED_FALLBACK_HIGH = 0.1
SEED_MAX = 0.5

CLAMP_LOW = 0.001
CLAMP_HIGH = 0.5
RATE_MAX = 1.0

# Stages of the solver
STAGE_SEED = "seed"
STAGE_ITERATE = "iterate"
STAGE_VERIFY = "verify"
STAGE_ACCEPTED = "accepted"
STAGE_FALLBACK = "fallback"


# ============================================================
# SolverState - one pass through seed → iterate → verify
# ============================================================

@dataclass
class SolverState:
    financed_value: float
    installments: int
    installment_value: float

    rate: float = 0.0
    iterations: int = 0
    stage: str = STAGE_SEED

    @property
    def total_paid(self) -> float:
        return self.installment_value * self.installments

    @property
    def total_interest(self) -> float:
        return self.total_paid - self.financed_value


class RateSolver:
    """
    Finds the monthly rate hidden in a financing offer:

        PV = PMT * (1 - (1+r)^-n) / r

    The solver is split in explicit stages so each transition can be
    exercised on its own:

        seed → iterate (Newton-Raphson) → verify → accepted | fallback

    The detected rate grows with the installment while the true rate stays
    below 100% a.m. Above that Newton steps are clamped back to 50% and the
    simple-interest fallback reports a lower rate.
    """

    # =================================================
    # PUBLIC API
    # =================================================
    @staticmethod
    def detect_rate(
        financed_value: float,
        installments: int,
        installment_value: float,
    ) -> RateDetectionResult:

        # Degenerate input → no-op result, not an error
        if not RateSolver.is_valid_loan(financed_value, installments, installment_value):
            return RateSolver._zero_result()

        # No markup (or borrower pays less than principal)
        total = installment_value * installments
        if total <= financed_value * (1.0 + NO_MARKUP_TOLERANCE):
            return RateSolver._zero_result()

        state = RateSolver.solve(financed_value, installments, installment_value)

        rate = state.rate
        monthly_percent = rate * 100.0
        annual_percent = ((1.0 + rate) ** 12 - 1.0) * 100.0

        return RateDetectionResult(
            monthly_rate_percent=monthly_percent,
            annual_rate_percent=annual_percent,
            total_interest=state.total_interest,
            semaphore=RateSolver.rate_semaphore(monthly_percent),
            method="newton" if state.stage == STAGE_ACCEPTED else "fallback",
            iterations=state.iterations,
        )

    @staticmethod
    def detect_loan_rate(loan: LoanTerms) -> RateDetectionResult:
        return RateSolver.detect_rate(
            loan.financed_value, loan.installments, loan.installment_value
        )

    @staticmethod
    def rate_semaphore(monthly_rate_percent: float) -> RateSemaphore:
        if monthly_rate_percent < 1.5:
            return SEMAPHORE_EXCELLENT
        if monthly_rate_percent <= 2.0:
            return SEMAPHORE_AVERAGE
        return SEMAPHORE_EXPENSIVE

    @staticmethod
    def is_valid_loan(financed_value, installments, installment_value) -> bool:
        values = (financed_value, installments, installment_value)
        if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
            return False
        return all(v > 0 for v in values)

    # =================================================
    # STATE MACHINE
    # =================================================
    @staticmethod
    def solve(
        financed_value: float,
        installments: int,
        installment_value: float,
    ) -> SolverState:
        state = SolverState(financed_value, installments, installment_value)

        RateSolver.seed(state)
        RateSolver.iterate(state)
        RateSolver.verify(state)

        if state.stage == STAGE_FALLBACK:
            RateSolver.fallback(state)

        return state

    @staticmethod
    def seed(state: SolverState) -> SolverState:
        """
        Closed-form approximation of the annuity rate:
        r0 = 2n(total - PV) / (PV(n+1)), kept inside (0, 0.5].
        """
        n = state.installments
        pv = state.financed_value

        guess = 2.0 * n * (state.total_paid - pv) / (pv * (n + 1))

        if guess <= 0:
            guess = SEED_FALLBACK_LOW
        elif guess > SEED_MAX:
            guess = SEED_FALLBACK_HIGH

        state.rate = guess
        state.stage = STAGE_ITERATE
        return state

    @staticmethod
    def iterate(state: SolverState, max_iterations: int = MAX_ITERATIONS) -> SolverState:
        for _ in range(max_iterations):
            state.iterations += 1
            if not RateSolver.newton_step(state):
                break

        logger.debug(
            "Newton stopped after %d iterations at r=%.10f",
            state.iterations, state.rate,
        )
        state.stage = STAGE_VERIFY
        return state

    @staticmethod
    def newton_step(state: SolverState) -> bool:
        """
        One guarded Newton-Raphson step.
        Returns False when iteration should stop (converged or derivative unusable).
        """
        r = state.rate
        n = state.installments
        pmt = state.installment_value

        power = (1.0 + r) ** (-n)
        f = state.financed_value - pmt * (1.0 - power) / r

        # d/dr [(1 - (1+r)^-n) / r] = -((1 - p)/r - n*p/(1+r)) / r
        numerator = (1.0 - power) / r - n * power / (1.0 + r)
        f_prime = pmt * numerator / r

        if not math.isfinite(f_prime) or abs(f_prime) < DERIVATIVE_FLOOR:
            return False

        new_rate = r - f / f_prime

        if not math.isfinite(new_rate) or new_rate <= 0:
            new_rate = CLAMP_LOW
        elif new_rate > RATE_MAX:
            new_rate = CLAMP_HIGH

        step = abs(new_rate - r)
        state.rate = new_rate

        return step >= STEP_TOLERANCE

    @staticmethod
    def present_value(rate: float, installments: int, installment_value: float) -> float:
        return installment_value * AmortizationCalculator.annuity_factor(rate, installments)

    @staticmethod
    def verify(state: SolverState) -> SolverState:
        if not math.isfinite(state.rate) or state.rate <= 0:
            state.stage = STAGE_FALLBACK
            return state

        pv_check = RateSolver.present_value(
            state.rate, state.installments, state.installment_value
        )
        error = abs(pv_check - state.financed_value) / state.financed_value

        state.stage = STAGE_ACCEPTED if error <= VERIFY_TOLERANCE else STAGE_FALLBACK
        return state

    @staticmethod
    def fallback(state: SolverState) -> SolverState:
        """Simple-interest approximation: interest / PV / n."""
        logger.warning(
            "Rate solver did not converge (PV=%s, n=%s, PMT=%s, r=%s); "
            "using simple-interest approximation",
            state.financed_value, state.installments,
            state.installment_value, state.rate,
        )
        state.rate = state.total_interest / state.financed_value / state.installments
        state.stage = STAGE_FALLBACK
        return state

    # =================================================
    # HELPERS
    # =================================================
    @staticmethod
    def _zero_result() -> RateDetectionResult:
        return RateDetectionResult(
            monthly_rate_percent=0.0,
            annual_rate_percent=0.0,
            total_interest=0.0,
            semaphore=SEMAPHORE_EXCELLENT,
        )
