"""Income and expense scenarios layered over a base budget.

Scenarios are the tagged union :data:`heloc.models.Scenario`; every function
here dispatches on the concrete type.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Tuple

from heloc.calculators import round_half_up
from heloc.models import (
    BudgetScenario,
    ExpenseScenario,
    IncomeScenario,
    ScenarioAdjustment,
    ScenarioImpactAnalysis,
    ScenarioSuggestion,
    TimingSuggestion,
)
from heloc.presets import (
    EXPENSE_SCENARIO_TEMPLATES,
    IMPACT_ANALYSIS_MONTHS,
    IMPACT_INTEREST_PER_MONTH,
    IMPACT_MONTHS_PER_1000,
    INCOME_SCENARIO_TEMPLATES,
)

logger = logging.getLogger(__name__)


def calculate_monthly_amount(amount, frequency, current_month, start_month):
    """Amount a scenario contributes in ``current_month``."""

    offset = current_month - start_month
    if frequency == "monthly":
        return amount
    if frequency == "quarterly":
        return amount if offset % 3 == 0 else 0.0
    if frequency == "annually":
        return amount if offset % 12 == 0 else 0.0
    if frequency == "one_time":
        return amount if current_month == start_month else 0.0
    return 0.0


def in_window(scenario, month: int) -> bool:
    return month >= scenario.start_month and (scenario.end_month is None or month <= scenario.end_month)


def _signed_contribution(scenario, month: int) -> float:
    """Net effect on discretionary income: taxed income is positive, expenses negative."""

    amount = calculate_monthly_amount(scenario.amount, scenario.frequency, month, scenario.start_month)
    if isinstance(scenario, IncomeScenario):
        return amount * (1 - scenario.tax_rate)
    if isinstance(scenario, ExpenseScenario):
        return -amount
    raise TypeError(f"Unsupported scenario type: {type(scenario).__name__}")


def apply_scenarios(
    base_income: float,
    base_expenses: float,
    month: int,
    income_scenarios: Iterable = (),
    expense_scenarios: Iterable = (),
) -> ScenarioAdjustment:
    """Adjust the base budget for every active scenario whose window covers ``month``.

    Income contributions are taxed before being added; expenses are added as
    is. A negative income amount (job loss) lowers income. The discretionary
    figure is never clamped.
    """

    income = base_income
    expenses = base_expenses
    applied: List[str] = []

    for scenario in list(income_scenarios) + list(expense_scenarios):
        if not scenario.is_active or not in_window(scenario, month):
            continue
        amount = calculate_monthly_amount(scenario.amount, scenario.frequency, month, scenario.start_month)
        if amount == 0:
            continue
        if isinstance(scenario, IncomeScenario):
            after_tax = amount * (1 - scenario.tax_rate)
            income += after_tax
            applied.append(f"+{scenario.name}: ${after_tax:.2f}")
        elif isinstance(scenario, ExpenseScenario):
            expenses += amount
            applied.append(f"-{scenario.name}: ${amount:.2f}")
        else:
            raise TypeError(f"Unsupported scenario type: {type(scenario).__name__}")

    return ScenarioAdjustment(
        adjusted_income=income,
        adjusted_expenses=expenses,
        discretionary_income=income - expenses,
        scenarios_applied=applied,
    )


def calculate_scenario_impact(
    scenario, budget_scenario: BudgetScenario, months_to_analyze: int = IMPACT_ANALYSIS_MONTHS
) -> ScenarioImpactAnalysis:
    """Rough effect of one scenario for display.

    ``monthly_impact`` is the contribution of the last in-window month. The
    payoff and interest estimates are heuristics (about 1.5 months per $1000
    of extra monthly principal, $1500 per month saved), not simulations.
    """

    total = 0.0
    monthly = 0.0
    for month in range(1, months_to_analyze + 1):
        if in_window(scenario, month):
            monthly = _signed_contribution(scenario, month)
            total += monthly

    extra_principal = monthly * budget_scenario.principal_multiplier
    payoff_impact = round_half_up(extra_principal / 1000 * IMPACT_MONTHS_PER_1000)
    return ScenarioImpactAnalysis(
        scenario_id=scenario.id,
        scenario_name=scenario.name,
        type=scenario.kind,
        monthly_impact=monthly,
        total_impact=total,
        payoff_impact=payoff_impact,
        interest_impact=payoff_impact * IMPACT_INTEREST_PER_MONTH,
    )


def create_income_scenario(budget_scenario_id: str, scenario_type: str, **overrides) -> IncomeScenario:
    template = INCOME_SCENARIO_TEMPLATES[scenario_type]
    fields = {
        "budget_scenario_id": budget_scenario_id,
        "name": template["name"],
        "description": template["description"],
        "scenario_type": scenario_type,
        "amount": template["amount"],
        "frequency": template["frequency"],
        "tax_rate": template["tax_rate"],
    }
    fields.update(overrides)
    return IncomeScenario(**fields)


def create_expense_scenario(budget_scenario_id: str, category: str, **overrides) -> ExpenseScenario:
    template = EXPENSE_SCENARIO_TEMPLATES[category]
    fields = {
        "budget_scenario_id": budget_scenario_id,
        "name": template["name"],
        "description": template["description"],
        "category": category,
        "amount": template["amount"],
        "frequency": template["frequency"],
        "is_essential": template["is_essential"],
        "priority_level": template["priority_level"],
    }
    fields.update(overrides)
    return ExpenseScenario(**fields)


def validate_scenario(scenario) -> Tuple[bool, List[str]]:
    errors: List[str] = []

    if not scenario.name or not scenario.name.strip():
        errors.append("Scenario name is required")
    if not scenario.amount:
        errors.append("Scenario amount must be non-zero")
    if scenario.start_month is None or scenario.start_month < 1:
        errors.append("Start month must be 1 or greater")
    if scenario.end_month is not None and scenario.start_month is not None and scenario.end_month < scenario.start_month:
        errors.append("End month cannot be before start month")
    if scenario.frequency == "one_time" and scenario.end_month is not None and scenario.end_month != scenario.start_month:
        errors.append("One-time scenarios cannot have different start and end months")

    if isinstance(scenario, IncomeScenario) and not 0 <= scenario.tax_rate <= 1:
        errors.append("Tax rate must be between 0 and 1")
    if isinstance(scenario, ExpenseScenario) and not 1 <= scenario.priority_level <= 10:
        errors.append("Priority level must be between 1 and 10")

    return not errors, errors


def generate_scenario_suggestions(budget_scenario: BudgetScenario) -> List[ScenarioSuggestion]:
    disc = budget_scenario.base_discretionary_income
    out: List[ScenarioSuggestion] = []

    if disc > 1000:
        out.append(ScenarioSuggestion(
            kind="income", key="raise",
            reason="Model a potential salary increase to accelerate payoff even further",
        ))
        out.append(ScenarioSuggestion(
            kind="income", key="side_income",
            reason="Consider additional income sources to maximize acceleration",
        ))
    if disc < 500:
        out.append(ScenarioSuggestion(
            kind="income", key="side_income",
            reason="Additional income could significantly improve your payoff timeline",
        ))

    out.append(ScenarioSuggestion(
        kind="expense", key="emergency",
        reason="Plan for unexpected expenses that could impact your strategy",
    ))
    if disc > 2000:
        out.append(ScenarioSuggestion(
            kind="expense", key="discretionary",
            reason="Model lifestyle inflation to ensure sustainable acceleration",
        ))
    return out


def optimize_scenario_timing(scenarios: Iterable, budget_scenario: BudgetScenario) -> List[TimingSuggestion]:
    """Suggest earlier raises and later emergencies."""

    out: List[TimingSuggestion] = []
    for scenario in scenarios:
        if isinstance(scenario, IncomeScenario) and scenario.scenario_type == "raise" and scenario.start_month > 12:
            out.append(TimingSuggestion(
                scenario_id=scenario.id,
                suggested_start_month=1,
                reason="Starting salary increases earlier maximizes compound benefits",
            ))
        elif isinstance(scenario, ExpenseScenario) and scenario.category == "emergency" and scenario.start_month < 12:
            out.append(TimingSuggestion(
                scenario_id=scenario.id,
                suggested_start_month=24,
                reason="Emergency expenses are more likely after initial acceleration period",
            ))
    logger.debug("%d timing suggestions for budget %s", len(out), budget_scenario.id)
    return out
