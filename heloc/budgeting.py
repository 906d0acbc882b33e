"""Budget-driven acceleration: discretionary income, scenarios and a HELOC together.

:func:`calculate_budgeting_acceleration` walks the mortgage month by month.
Each month the scenarios adjust the base budget, a multiple of the resulting
discretionary income goes to extra principal, and any shortfall is drawn from
the HELOC. The traditional schedule is simulated alongside for comparison.
"""
from __future__ import annotations

import bisect
import logging
from typing import Iterable, List, Optional

from heloc.calculators import calculate_heloc_acceleration, calculate_monthly_payment, check_finite
from heloc.errors import CalculationError, ErrorCode
from heloc.models import (
    BudgetCalculationResult,
    BudgetingResult,
    BudgetScenario,
    CalculationSummary,
    ExpenseScenario,
    HELOCDetails,
    HELOCInput,
    IncomeScenario,
    LiveCalculationRequest,
    LiveCalculationResponse,
    LiveMonthSnapshot,
    MortgageInput,
)
from heloc.presets import (
    BUDGETING_PMI_REMOVAL_LTV,
    DEFAULT_PRINCIPAL_MULTIPLIER,
    DEFAULT_PROJECTION_MONTHS,
    LIVE_BREAKDOWN_MONTHS,
    LIVE_EXPENSE_PRIORITY,
    LIVE_GROSS_FROM_NET,
    LIVE_INCOME_TAX_RATE,
    MAX_PROJECTION_MONTHS,
    PAYOFF_TOLERANCE,
)
from heloc.scenarios import apply_scenarios

logger = logging.getLogger(__name__)


def calculate_discretionary_income(monthly_net_income: float, monthly_expenses: float) -> float:
    return monthly_net_income - monthly_expenses


def calculate_recommended_principal_payment(discretionary_income: float, multiplier: float = DEFAULT_PRINCIPAL_MULTIPLIER) -> float:
    return max(0.0, discretionary_income * multiplier)


def _months_ahead(negated_endings: List[float], ending_balance: float, month: int) -> int:
    """Months the traditional schedule needs beyond ``month`` to reach ``ending_balance``.

    ``negated_endings`` is the traditional ending balance per month, negated so
    a falling balance reads as an ascending sequence. An empty list means the
    baseline never amortizes and nothing is counted as saved.
    """

    if not negated_endings:
        return 0
    k = bisect.bisect_left(negated_endings, -ending_balance)
    traditional_month = k + 1 if k < len(negated_endings) else len(negated_endings)
    return max(0, traditional_month - month)


def calculate_budgeting_acceleration(
    budget_scenario: BudgetScenario,
    mortgage: MortgageInput,
    heloc: Optional[HELOCDetails] = None,
    income_scenarios: Iterable[IncomeScenario] = (),
    expense_scenarios: Iterable[ExpenseScenario] = (),
    months_to_project: int = DEFAULT_PROJECTION_MONTHS,
    log=None,
) -> BudgetingResult:
    income_scenarios = list(income_scenarios)
    expense_scenarios = list(expense_scenarios)
    months_to_project = min(int(months_to_project), MAX_PROJECTION_MONTHS)

    base_payment = mortgage.monthly_payment
    if base_payment is None:
        base_payment = calculate_monthly_payment(mortgage.principal, mortgage.annual_interest_rate, mortgage.term_in_months)
    starting_balance = mortgage.current_balance if mortgage.current_balance is not None else mortgage.principal

    traditional = calculate_heloc_acceleration(
        HELOCInput(
            mortgage_balance=starting_balance,
            mortgage_rate=mortgage.annual_interest_rate,
            mortgage_payment=base_payment,
            heloc_limit=0.0,
            heloc_rate=0.0,
            discretionary_income=0.0,
            property_value=mortgage.property_value,
            pmi_monthly=mortgage.pmi_monthly,
        )
    )

    heloc_limit = heloc.heloc_limit if heloc else 0.0
    heloc_rate = heloc.heloc_rate if heloc else 0.0
    available_credit = heloc_limit
    if heloc and heloc.heloc_available_credit is not None:
        available_credit = heloc.heloc_available_credit
    mr = mortgage.annual_interest_rate / 12
    hr = heloc_rate / 12
    property_value = mortgage.property_value
    pmi_monthly = mortgage.pmi_monthly or 0.0

    if log is not None:
        log.log("info", "budgeting", "Starting budgeting acceleration", {
            "budget_scenario_id": budget_scenario.id,
            "starting_balance": starting_balance,
            "months_to_project": months_to_project,
            "income_scenarios": len(income_scenarios),
            "expense_scenarios": len(expense_scenarios),
        })

    balance = starting_balance
    heloc_balance = 0.0
    interest_saved = 0.0
    base_disc = budget_scenario.base_discretionary_income
    max_disc = base_disc
    min_disc = base_disc
    total_disc = 0.0
    pmi_eliminated = False
    rows: List[BudgetCalculationResult] = []

    month = 1
    while balance > PAYOFF_TOLERANCE and month <= months_to_project:
        adj = apply_scenarios(
            budget_scenario.base_monthly_net_income,
            budget_scenario.base_monthly_expenses,
            month,
            income_scenarios,
            expense_scenarios,
        )
        disc = adj.discretionary_income
        total_disc += disc
        max_disc = max(max_disc, disc)
        min_disc = min(min_disc, disc)

        recommended = calculate_recommended_principal_payment(disc, budget_scenario.principal_multiplier)
        if budget_scenario.custom_principal_payment is not None:
            actual = budget_scenario.custom_principal_payment
        else:
            actual = recommended

        beginning = balance
        mortgage_interest = beginning * mr
        total_principal = min(base_payment - mortgage_interest + actual, beginning)

        heloc_beginning = heloc_balance
        heloc_payment = 0.0
        heloc_interest = 0.0
        if actual > disc and heloc_limit > 0:
            draw = max(0.0, min(actual - disc, available_credit - heloc_balance))
            heloc_balance += draw
        if heloc_balance > 0:
            heloc_interest = heloc_balance * hr
            leftover = max(0.0, disc - actual)
            heloc_payment = min(leftover + heloc_interest, heloc_balance)
            heloc_balance = max(0.0, heloc_balance - heloc_payment + heloc_interest)

        current_ltv = None
        if property_value and property_value > 0:
            current_ltv = beginning / property_value * 100
            if not pmi_eliminated and current_ltv <= BUDGETING_PMI_REMOVAL_LTV:
                pmi_eliminated = True
                if log is not None:
                    log.log("info", "pmi", "PMI eliminated", {"month": month, "ltv": current_ltv})
        pmi = 0.0 if pmi_eliminated else pmi_monthly

        balance = max(0.0, beginning - total_principal)
        check_finite(balance, heloc_balance, mortgage_interest, heloc_interest, disc)

        outflow = base_payment + actual + heloc_payment + pmi
        remaining = adj.adjusted_income - adj.adjusted_expenses - outflow
        stress = outflow / adj.adjusted_income if adj.adjusted_income > 0 else None

        if month <= len(traditional.schedule):
            interest_saved += traditional.schedule[month - 1].interest_payment - mortgage_interest

        rows.append(
            BudgetCalculationResult(
                budget_scenario_id=budget_scenario.id,
                month_number=month,
                monthly_gross_income=budget_scenario.base_monthly_gross_income,
                monthly_net_income=adj.adjusted_income,
                monthly_expenses=adj.adjusted_expenses,
                discretionary_income=disc,
                recommended_principal_payment=recommended,
                actual_principal_payment=actual,
                payment_adjustment_reason=", ".join(adj.scenarios_applied) or None,
                beginning_mortgage_balance=beginning,
                ending_mortgage_balance=balance,
                mortgage_payment=base_payment,
                mortgage_interest=mortgage_interest,
                mortgage_principal=total_principal,
                beginning_heloc_balance=heloc_beginning,
                ending_heloc_balance=heloc_balance,
                heloc_payment=heloc_payment,
                heloc_interest=heloc_interest,
                heloc_principal=heloc_payment - heloc_interest,
                pmi_payment=pmi,
                current_ltv=current_ltv,
                pmi_eliminated=pmi_eliminated,
                cumulative_interest_saved=interest_saved,
                total_monthly_outflow=outflow,
                remaining_cash_flow=remaining,
                cash_flow_stress_ratio=stress,
            )
        )
        month += 1

    # Second pass: running totals span both loans, so they are filled once every month is known.
    # Traditional balances must only fall for the search; a growing baseline saves no time.
    negated_endings = [-row.ending_balance for row in traditional.schedule]
    if any(later < earlier for earlier, later in zip(negated_endings, negated_endings[1:])):
        negated_endings = []
    cumulative_interest = 0.0
    cumulative_principal = 0.0
    for row in rows:
        cumulative_interest += row.mortgage_interest + row.heloc_interest
        cumulative_principal += row.mortgage_principal
        row.cumulative_interest_paid = cumulative_interest
        row.cumulative_principal_paid = cumulative_principal
        row.cumulative_time_saved_months = _months_ahead(negated_endings, row.ending_mortgage_balance, row.month_number)

    if balance > PAYOFF_TOLERANCE:
        logger.info("Projection ended after %s months with %.2f still owed", len(rows), balance)

    pmi_month = next((row.month_number for row in rows if row.pmi_eliminated), 0)
    summary = CalculationSummary(
        total_months=len(rows),
        total_interest_saved=interest_saved,
        pmi_elimination_month=pmi_month,
        max_discretionary_income=max_disc,
        min_discretionary_income=min_disc,
        average_discretionary_income=total_disc / len(rows) if rows else 0.0,
        traditional_payoff_months=traditional.payoff_months,
        budgeting_payoff_months=len(rows),
        months_saved=traditional.payoff_months - len(rows),
    )

    if log is not None:
        log.log("info", "budgeting", "Budgeting acceleration complete", summary.model_dump())
    return BudgetingResult(summary=summary, monthly_results=rows, traditional_comparison=traditional)


def calculate_live(request: LiveCalculationRequest, log=None) -> LiveCalculationResponse:
    """Unsaved preview of the budgeting strategy for interactive editing."""

    if request.mortgage_details is None:
        raise CalculationError.from_code(ErrorCode.INVALID_CALCULATION_INPUT, field="mortgageDetails")

    disc = calculate_discretionary_income(request.base_income, request.base_expenses)
    multiplier = request.principal_multiplier or DEFAULT_PRINCIPAL_MULTIPLIER
    recommended = calculate_recommended_principal_payment(disc, multiplier)
    gross = request.base_gross_income
    if gross is None:
        gross = request.base_income * LIVE_GROSS_FROM_NET

    budget = BudgetScenario(
        id="temp",
        scenario_id="temp",
        name="Live Calculation",
        base_monthly_gross_income=gross,
        base_monthly_net_income=request.base_income,
        base_monthly_expenses=request.base_expenses,
        base_discretionary_income=disc,
        recommended_principal_payment=recommended,
        principal_multiplier=multiplier,
    )

    incomes = [s for s in request.scenarios if s.type == "income"]
    expenses = [s for s in request.scenarios if s.type == "expense"]
    income_scenarios = [
        IncomeScenario(
            id=f"temp-income-{i}",
            budget_scenario_id="temp",
            name=f"Income Scenario {i + 1}",
            scenario_type="other",
            amount=s.amount,
            start_month=s.start_month,
            end_month=s.end_month,
            frequency=s.frequency,
            tax_rate=LIVE_INCOME_TAX_RATE,
        )
        for i, s in enumerate(incomes)
    ]
    expense_scenarios = [
        ExpenseScenario(
            id=f"temp-expense-{i}",
            budget_scenario_id="temp",
            name=f"Expense Scenario {i + 1}",
            category="other",
            amount=s.amount,
            start_month=s.start_month,
            end_month=s.end_month,
            frequency=s.frequency,
            is_essential=True,
            priority_level=LIVE_EXPENSE_PRIORITY,
        )
        for i, s in enumerate(expenses)
    ]

    result = calculate_budgeting_acceleration(
        budget,
        request.mortgage_details,
        request.heloc_details,
        income_scenarios,
        expense_scenarios,
        request.months_to_project,
        log=log,
    )

    return LiveCalculationResponse(
        discretionary_income=disc,
        recommended_principal_payment=recommended,
        projected_payoff_months=result.summary.budgeting_payoff_months,
        projected_interest_saved=result.summary.total_interest_saved,
        pmi_elimination_month=result.summary.pmi_elimination_month,
        monthly_breakdown=[
            LiveMonthSnapshot(
                month_number=r.month_number,
                discretionary_income=r.discretionary_income,
                principal_payment=r.actual_principal_payment,
                mortgage_balance=r.ending_mortgage_balance,
                interest_saved=r.cumulative_interest_saved,
            )
            for r in result.monthly_results[:LIVE_BREAKDOWN_MONTHS]
        ],
    )
