from __future__ import annotations

import logging
import math
from typing import List, Optional

from heloc.errors import CalculationError, ErrorCode
from heloc.models import (
    AmortizationSchedule,
    ComparisonMetrics,
    HELOCCalculationResult,
    HELOCInput,
    HELOCMonthlyPayment,
    LTVResult,
    MonthlyPayment,
    MortgageInput,
    PayoffResult,
    StrategyComparison,
)
from heloc.presets import (
    BUDGETING_PMI_REMOVAL_LTV,
    HELOC_NEAR_PAYOFF_SHARE,
    HELOC_PMI_REMOVAL_EQUITY_PCT,
    MAX_PROJECTION_MONTHS,
    MIP_RATE_ABOVE_BANDS,
    MIP_RATE_BANDS,
    MIP_REQUIRED_LTV,
    PAYOFF_TOLERANCE,
)

logger = logging.getLogger(__name__)


def nz(x, default=0.0):
    """Return a float for ``x`` or ``default`` when it is missing or NaN."""

    try:
        if x is None or (isinstance(x, float) and math.isnan(x)):
            return default
        return float(x)
    except (TypeError, ValueError):
        return default


def round_half_up(x: float) -> int:
    """Round to the nearest integer with halves going up, as money displays expect."""

    return int(math.floor(x + 0.5))


def check_finite(*values: float) -> None:
    if not all(math.isfinite(v) for v in values):
        raise CalculationError.from_code(ErrorCode.CALCULATION_OVERFLOW)


def calculate_monthly_payment(principal, annual_rate, term_months):
    """Calculate the fully amortizing monthly payment.

    ``annual_rate`` is a decimal (``0.065`` for 6.5%). A zero rate divides the
    principal evenly across the term; a non-positive term returns ``0.0``.
    """

    L = nz(principal)
    r = nz(annual_rate) / 12
    n = int(nz(term_months))
    if n <= 0:
        return 0.0
    if r == 0:
        return L / n
    try:
        growth = (1 + r) ** n
    except OverflowError:
        raise CalculationError.from_code(ErrorCode.CALCULATION_OVERFLOW) from None
    payment = L * r * growth / (growth - 1)
    check_finite(payment)
    return payment


def _ltv(balance: float, property_value: Optional[float]) -> Optional[float]:
    if not property_value or property_value <= 0:
        return None
    return balance / property_value * 100


def generate_amortization_schedule(input: MortgageInput) -> AmortizationSchedule:
    """Month-by-month schedule for a fixed payment loan.

    Stops once the balance is paid off or the term is exhausted; the final
    payment is clamped so the balance lands on zero. When ``property_value``
    and ``pmi_monthly`` are set each row carries the PMI charge until LTV on
    the beginning balance reaches 78%, after which PMI stays off.
    """

    r = input.annual_interest_rate / 12
    payment = input.monthly_payment
    if payment is None:
        payment = calculate_monthly_payment(input.principal, input.annual_interest_rate, input.term_in_months)
    balance = input.current_balance if input.current_balance is not None else input.principal
    pmi_monthly = nz(input.pmi_monthly)
    pmi_removed = pmi_monthly <= 0

    schedule: List[MonthlyPayment] = []
    cumulative_interest = 0.0
    cumulative_principal = 0.0
    month = 1
    while balance > PAYOFF_TOLERANCE and month <= input.term_in_months:
        beginning = balance
        interest = beginning * r
        principal = min(payment - interest, beginning)
        actual_payment = principal + interest
        balance = beginning - principal
        check_finite(balance, interest)

        ltv = _ltv(beginning, input.property_value)
        if not pmi_removed and ltv is not None and ltv <= BUDGETING_PMI_REMOVAL_LTV:
            pmi_removed = True
            logger.debug("PMI removed in month %s at %.2f%% LTV", month, ltv)
        pmi = 0.0 if pmi_removed or ltv is None else pmi_monthly

        cumulative_interest += interest
        cumulative_principal += principal
        schedule.append(
            MonthlyPayment(
                month=month,
                beginning_balance=beginning,
                payment_amount=actual_payment,
                principal_payment=principal,
                interest_payment=interest,
                ending_balance=balance,
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
                pmi_payment=pmi,
                current_ltv=ltv,
            )
        )
        month += 1

    return AmortizationSchedule(
        monthly_payment=payment,
        total_interest=cumulative_interest,
        total_payments=cumulative_interest + cumulative_principal,
        payoff_months=len(schedule),
        schedule=schedule,
    )


def calculate_remaining_balance(principal, annual_rate, term_months, months_paid):
    """Closed-form balance after ``months_paid`` scheduled payments."""

    P = nz(principal)
    n = int(nz(term_months))
    paid = int(nz(months_paid))
    if paid >= n:
        return 0.0
    if paid <= 0:
        return P
    r = nz(annual_rate) / 12
    remaining = n - paid
    if r == 0:
        return P * remaining / n
    payment = calculate_monthly_payment(P, annual_rate, n)
    growth = (1 + r) ** remaining
    return payment * (growth - 1) / (r * growth)


def calculate_payoff_with_extra_payments(balance, annual_rate, regular_payment, extra_payment=0.0) -> PayoffResult:
    """Payoff month count and interest when ``extra_payment`` goes to principal every month."""

    r = nz(annual_rate) / 12
    payment = nz(regular_payment) + nz(extra_payment)
    bal = nz(balance)

    schedule: List[MonthlyPayment] = []
    total_interest = 0.0
    cumulative_principal = 0.0
    month = 1
    while bal > PAYOFF_TOLERANCE and month <= MAX_PROJECTION_MONTHS:
        beginning = bal
        interest = beginning * r
        principal = min(payment - interest, beginning)
        bal = beginning - principal
        check_finite(bal, interest)
        total_interest += interest
        cumulative_principal += principal
        schedule.append(
            MonthlyPayment(
                month=month,
                beginning_balance=beginning,
                payment_amount=principal + interest,
                principal_payment=principal,
                interest_payment=interest,
                ending_balance=bal,
                cumulative_interest=total_interest,
                cumulative_principal=cumulative_principal,
            )
        )
        month += 1

    if bal > PAYOFF_TOLERANCE:
        logger.warning("Loan not paid off within %s months; balance %.2f remains", MAX_PROJECTION_MONTHS, bal)
    return PayoffResult(months=len(schedule), total_interest=total_interest, schedule=schedule)


def calculate_heloc_acceleration(input: HELOCInput) -> HELOCCalculationResult:
    """Simulate paying the mortgage down with discretionary income and HELOC draws.

    Each month the discretionary income first goes to extra mortgage
    principal; what is left over repays the HELOC. When the HELOC rate is no
    higher than the mortgage rate (or the mortgage is nearly gone) remaining
    credit is drawn against the mortgage as well. ``heloc_balance`` on each row
    is the balance at the start of that month.
    """

    mr = input.mortgage_rate / 12
    hr = input.heloc_rate / 12
    payment = input.mortgage_payment
    disc = input.discretionary_income
    available = input.heloc_available_credit if input.heloc_available_credit is not None else input.heloc_limit
    pmi_monthly = nz(input.pmi_monthly)

    balance = input.mortgage_balance
    heloc_balance = 0.0
    total_mortgage_interest = 0.0
    total_heloc_interest = 0.0
    max_heloc_used = 0.0
    heloc_balance_sum = 0.0
    schedule: List[HELOCMonthlyPayment] = []

    month = 1
    while balance > PAYOFF_TOLERANCE and month <= MAX_PROJECTION_MONTHS:
        beginning = balance
        heloc_beginning = heloc_balance
        mortgage_interest = beginning * mr
        heloc_interest = heloc_beginning * hr

        equity_pct = None
        pmi = pmi_monthly
        if input.property_value and input.property_value > 0:
            equity_pct = (input.property_value - beginning) / input.property_value * 100
            if equity_pct >= HELOC_PMI_REMOVAL_EQUITY_PCT:
                pmi = 0.0

        base_principal = payment - mortgage_interest
        additional = 0.0
        disc_used = disc
        if disc > 0:
            additional = min(disc, beginning - base_principal)
            if disc > additional:
                heloc_paydown = min(disc - additional, heloc_balance)
                heloc_balance -= heloc_paydown
                disc_used = additional + heloc_paydown

        room = available - heloc_balance
        draw_pays = input.mortgage_rate >= input.heloc_rate or beginning < input.heloc_limit * HELOC_NEAR_PAYOFF_SHARE
        if room > 0 and disc > 0 and draw_pays:
            draw = min(room, min(disc, beginning - base_principal - additional))
            if draw > 0:
                heloc_balance += draw
                additional += draw

        total_principal = base_principal + additional
        balance = max(0.0, beginning - total_principal)
        check_finite(balance, heloc_balance, mortgage_interest, heloc_interest)

        total_mortgage_interest += mortgage_interest
        total_heloc_interest += heloc_interest
        max_heloc_used = max(max_heloc_used, heloc_balance)
        heloc_balance_sum += heloc_balance

        schedule.append(
            HELOCMonthlyPayment(
                month=month,
                beginning_balance=beginning,
                payment_amount=mortgage_interest + total_principal,
                principal_payment=total_principal,
                interest_payment=mortgage_interest,
                ending_balance=balance,
                cumulative_interest=total_mortgage_interest + total_heloc_interest,
                cumulative_principal=input.mortgage_balance - balance,
                pmi_payment=pmi,
                current_ltv=None if equity_pct is None else 100 - equity_pct,
                heloc_balance=heloc_beginning,
                heloc_payment=max(0.0, heloc_beginning - heloc_balance),
                heloc_interest=heloc_interest,
                total_monthly_payment=mortgage_interest + total_principal + heloc_interest + pmi,
                discretionary_used=disc_used,
                current_equity_percentage=equity_pct,
            )
        )
        month += 1

    if balance > PAYOFF_TOLERANCE:
        logger.warning("HELOC simulation hit the %s month cap with %.2f outstanding", MAX_PROJECTION_MONTHS, balance)

    return HELOCCalculationResult(
        payoff_months=len(schedule),
        total_interest=total_mortgage_interest + total_heloc_interest,
        total_heloc_interest=total_heloc_interest,
        total_mortgage_interest=total_mortgage_interest,
        schedule=schedule,
        max_heloc_used=max_heloc_used,
        average_heloc_balance=heloc_balance_sum / len(schedule) if schedule else 0.0,
    )


def compare_strategies(mortgage: MortgageInput, heloc: HELOCInput) -> StrategyComparison:
    traditional = generate_amortization_schedule(mortgage)
    accelerated = calculate_heloc_acceleration(heloc)

    interest_saved = traditional.total_interest - accelerated.total_interest
    pct = interest_saved / traditional.total_interest * 100 if traditional.total_interest else 0.0
    if accelerated.schedule:
        avg_payment = sum(row.total_monthly_payment for row in accelerated.schedule) / len(accelerated.schedule)
    else:
        avg_payment = 0.0

    return StrategyComparison(
        traditional=traditional,
        heloc=accelerated,
        comparison=ComparisonMetrics(
            time_saved_months=traditional.payoff_months - accelerated.payoff_months,
            interest_saved=interest_saved,
            percentage_interest_saved=pct,
            monthly_payment_difference=avg_payment - traditional.monthly_payment,
        ),
    )


# LTV / PMI helpers


def _coerce_amount(x) -> float:
    if isinstance(x, str):
        x = x.strip()
        if x == "":
            return 0.0
    try:
        return float(x)
    except (TypeError, ValueError):
        return float("nan")


def calculate_ltv(loan_amount, property_value) -> float:
    """Loan-to-value ratio as a percentage; raises ``CalculationError`` on bad input."""

    if loan_amount is None or property_value is None:
        raise CalculationError.from_code(
            ErrorCode.INVALID_CALCULATION_INPUT,
            field="ltv",
            message="Both loan amount and original purchase price are required",
        )
    loan = _coerce_amount(loan_amount)
    value = _coerce_amount(property_value)
    if not (math.isfinite(loan) and math.isfinite(value)):
        raise CalculationError.from_code(
            ErrorCode.INVALID_CALCULATION_INPUT,
            field="ltv",
            message="Loan amount and property value must be valid numbers",
        )
    if loan <= 0 or value <= 0:
        raise CalculationError.from_code(
            ErrorCode.INVALID_CALCULATION_INPUT,
            field="ltv",
            message="Loan amount and property value must be positive values",
        )
    return loan * 100 / value


def safe_ltv_calculation(loan_amount, property_value) -> LTVResult:
    try:
        ratio = calculate_ltv(loan_amount, property_value)
    except CalculationError as exc:
        return LTVResult(success=False, ltv_ratio=0.0, can_calculate=False, error=str(exc))
    return LTVResult(success=True, ltv_ratio=ratio, can_calculate=True)


def is_mip_required(ltv: float) -> bool:
    return ltv > MIP_REQUIRED_LTV


def calculate_standard_mip_rate(ltv: float) -> float:
    """Annual MIP/PMI rate (decimal) for an LTV percentage."""

    for upper, rate in MIP_RATE_BANDS:
        if ltv <= upper:
            return rate
    return MIP_RATE_ABOVE_BANDS


def calculate_suggested_monthly_pmi(loan_amount: float, ltv: float) -> int:
    return round_half_up(loan_amount * calculate_standard_mip_rate(ltv) / 12)
