"""Validation for budgeting requests and scenario sets.

Each validator returns a :class:`core.rules.ValidationResult`; errors block,
warnings and suggestions are advisory.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List

from core.rules import RangeRule, ValidationIssue, ValidationResult
from heloc.models import (
    BudgetScenario,
    BudgetScenarioRequest,
    ExpenseScenario,
    ExpenseScenarioRequest,
    IncomeScenario,
    IncomeScenarioRequest,
    LiveCalculationRequest,
)
from heloc.presets import DEFAULT_PRINCIPAL_MULTIPLIER
from heloc.scenarios import in_window


class BudgetRuleKey(str, Enum):
    INCOME = "income"
    EXPENSES = "expenses"
    AMOUNT = "amount"
    MONTH = "month"
    MULTIPLIER = "multiplier"
    TAX_RATE = "tax_rate"
    PRIORITY = "priority"


BUDGET_RULES: Dict[BudgetRuleKey, RangeRule] = {
    BudgetRuleKey.INCOME: RangeRule(min=0, max=1_000_000, message="must be between $0 and $1000000"),
    BudgetRuleKey.EXPENSES: RangeRule(min=0, max=500_000, message="must be between $0 and $500000"),
    BudgetRuleKey.AMOUNT: RangeRule(min=-100_000, max=100_000, message="must be between $-100000 and $100000"),
    BudgetRuleKey.MONTH: RangeRule(min=1, max=600, message="Start month must be between 1 and 600"),
    BudgetRuleKey.MULTIPLIER: RangeRule(min=0.1, max=10.0, message="Principal multiplier must be between 0.1 and 10.0"),
    BudgetRuleKey.TAX_RATE: RangeRule(min=0, max=0.6, message="Tax rate must be between 0% and 60%"),
    BudgetRuleKey.PRIORITY: RangeRule(min=1, max=10, message="Priority level must be between 1 and 10"),
}

# Scenario windows checked by validate_financial_soundness.
SOUNDNESS_MONTHS = 60


def _outside(value, key: BudgetRuleKey) -> bool:
    rule = BUDGET_RULES[key]
    return value < rule.min or value > rule.max


def _error(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message)


def _warning(field: str, message: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity="warning")


def _suggestion(field: str, message: str, value=None) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, severity="info", suggested_value=value)


def _timing_issues(start_month, end_month, frequency) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    if not start_month or _outside(start_month, BudgetRuleKey.MONTH):
        issues.append(_error("start_month", BUDGET_RULES[BudgetRuleKey.MONTH].message))
    if end_month is not None:
        if start_month and end_month < start_month:
            issues.append(_error("end_month", "End month cannot be before start month"))
        if frequency == "one_time" and end_month != start_month:
            issues.append(_error("end_month", "One-time scenarios cannot have different start and end months"))
    return issues


def validate_budget_scenario_request(request: BudgetScenarioRequest) -> ValidationResult:
    issues: List[ValidationIssue] = []

    if not request.name or not request.name.strip():
        issues.append(_error("name", "Budget scenario name is required"))
    elif len(request.name) > 255:
        issues.append(_error("name", "Budget scenario name must be 255 characters or less"))
    if not request.scenario_id:
        issues.append(_error("scenario_id", "Parent scenario ID is required"))

    income_msg = BUDGET_RULES[BudgetRuleKey.INCOME].message
    if _outside(request.base_monthly_gross_income, BudgetRuleKey.INCOME):
        issues.append(_error("base_monthly_gross_income", f"Gross income {income_msg}"))
    if _outside(request.base_monthly_net_income, BudgetRuleKey.INCOME):
        issues.append(_error("base_monthly_net_income", f"Net income {income_msg}"))
    if _outside(request.base_monthly_expenses, BudgetRuleKey.EXPENSES):
        issues.append(_error("base_monthly_expenses",
                             f"Monthly expenses {BUDGET_RULES[BudgetRuleKey.EXPENSES].message}"))

    if request.base_monthly_net_income > request.base_monthly_gross_income:
        issues.append(_error("base_monthly_net_income", "Net income cannot be greater than gross income"))

    disc = request.base_monthly_net_income - request.base_monthly_expenses
    if disc < 0:
        issues.append(_warning("base_monthly_expenses",
                               "Expenses exceed income, resulting in negative discretionary income"))

    custom = request.custom_principal_payment
    if custom is not None:
        if custom < 0:
            issues.append(_error("custom_principal_payment", "Custom principal payment cannot be negative"))
        if custom > disc * 5:
            issues.append(_warning("custom_principal_payment",
                                   "Custom principal payment is very high relative to discretionary income"))

    if request.principal_multiplier is not None and _outside(request.principal_multiplier, BudgetRuleKey.MULTIPLIER):
        issues.append(_error("principal_multiplier", BUDGET_RULES[BudgetRuleKey.MULTIPLIER].message))

    if disc > 0:
        recommended = disc * DEFAULT_PRINCIPAL_MULTIPLIER
        if not custom or abs(custom - recommended) > 500:
            issues.append(_suggestion(
                "custom_principal_payment",
                f"Consider using the recommended principal payment of ${recommended:.2f}",
                recommended,
            ))
    if request.base_monthly_expenses > request.base_monthly_net_income * 0.8:
        issues.append(_suggestion("base_monthly_expenses",
                                  "Consider reducing expenses to increase discretionary income for faster payoff"))

    return ValidationResult.build(issues)


def validate_income_scenario_request(request: IncomeScenarioRequest) -> ValidationResult:
    issues: List[ValidationIssue] = []

    if not request.name or not request.name.strip():
        issues.append(_error("name", "Income scenario name is required"))
    if not request.amount:
        issues.append(_error("amount", "Income amount is required and cannot be zero"))
    elif _outside(request.amount, BudgetRuleKey.AMOUNT):
        issues.append(_error("amount", f"Income amount {BUDGET_RULES[BudgetRuleKey.AMOUNT].message}"))

    issues += _timing_issues(request.start_month, request.end_month, request.frequency)

    if request.tax_rate is not None and _outside(request.tax_rate, BudgetRuleKey.TAX_RATE):
        issues.append(_error("tax_rate", BUDGET_RULES[BudgetRuleKey.TAX_RATE].message))

    if request.amount is not None and request.amount < 0 and request.scenario_type != "job_loss":
        issues.append(_warning("amount", 'Negative income amount - consider using "job_loss" scenario type'))
    if request.scenario_type == "bonus" and request.frequency == "monthly":
        issues.append(_suggestion("frequency", "Bonuses are typically annual or quarterly", "annually"))
    if request.scenario_type == "raise" and request.start_month == 1:
        issues.append(_suggestion("start_month", "Salary raises often occur mid-year (month 6-12)", 12))

    return ValidationResult.build(issues)


def validate_expense_scenario_request(request: ExpenseScenarioRequest) -> ValidationResult:
    issues: List[ValidationIssue] = []

    if not request.name or not request.name.strip():
        issues.append(_error("name", "Expense scenario name is required"))
    max_amount = BUDGET_RULES[BudgetRuleKey.AMOUNT].max
    if request.amount is None or request.amount <= 0:
        issues.append(_error("amount", "Expense amount is required and must be positive"))
    elif request.amount > max_amount:
        issues.append(_error("amount", f"Expense amount must be less than ${max_amount:.0f}"))

    issues += _timing_issues(request.start_month, request.end_month, request.frequency)

    if request.priority_level is not None and _outside(request.priority_level, BudgetRuleKey.PRIORITY):
        issues.append(_error("priority_level", BUDGET_RULES[BudgetRuleKey.PRIORITY].message))

    if request.category == "emergency" and request.frequency != "one_time":
        issues.append(_warning("frequency", "Emergency expenses are typically one-time events"))
    if request.category == "discretionary" and request.is_essential is True:
        issues.append(_warning("is_essential", "Discretionary expenses are typically not essential"))
    if request.amount is not None and request.amount > 10000 and request.frequency == "monthly":
        issues.append(_warning("amount", "Very high monthly expense - verify this amount is correct"))

    return ValidationResult.build(issues)


def validate_live_calculation_request(request: LiveCalculationRequest) -> ValidationResult:
    issues: List[ValidationIssue] = []

    if request.base_income <= 0:
        issues.append(_error("base_income", "Base income must be positive"))
    if request.base_expenses < 0:
        issues.append(_error("base_expenses", "Base expenses cannot be negative"))
    if request.base_expenses >= request.base_income:
        issues.append(_warning("base_expenses",
                               "Expenses equal or exceed income - no discretionary income available"))

    mortgage = request.mortgage_details
    if mortgage is None:
        issues.append(_error("mortgage_details", "Mortgage details are required for HELOC calculations"))
    else:
        if not mortgage.principal or mortgage.principal <= 0:
            issues.append(_error("mortgage_details.principal", "Mortgage principal must be positive"))
        if mortgage.annual_interest_rate < 0 or mortgage.annual_interest_rate > 0.2:
            issues.append(_error("mortgage_details.annual_interest_rate", "Interest rate must be between 0% and 20%"))
        if mortgage.term_in_months < 12 or mortgage.term_in_months > 600:
            issues.append(_error("mortgage_details.term_in_months", "Mortgage term must be between 1 and 50 years"))

    heloc = request.heloc_details
    if heloc is not None:
        if heloc.heloc_limit < 0:
            issues.append(_error("heloc_details.heloc_limit", "HELOC limit cannot be negative"))
        if heloc.heloc_rate < 0 or heloc.heloc_rate > 0.3:
            issues.append(_error("heloc_details.heloc_rate", "HELOC rate must be between 0% and 30%"))

    for i, scenario in enumerate(request.scenarios):
        if scenario.amount == 0:
            issues.append(_error(f"scenarios[{i}].amount", "Scenario amount cannot be zero"))
        if scenario.start_month < 1:
            issues.append(_error(f"scenarios[{i}].start_month", "Start month must be 1 or greater"))
        if scenario.end_month is not None and scenario.end_month < scenario.start_month:
            issues.append(_error(f"scenarios[{i}].end_month", "End month cannot be before start month"))

    if request.months_to_project and (request.months_to_project < 12 or request.months_to_project > 600):
        issues.append(_error("months_to_project", "Projection period must be between 1 and 50 years"))

    return ValidationResult.build(issues)


def validate_financial_soundness(
    budget_scenario: BudgetScenario,
    income_scenarios: Iterable[IncomeScenario] = (),
    expense_scenarios: Iterable[ExpenseScenario] = (),
) -> ValidationResult:
    """Warn when scenarios push the budget into risky territory.

    Every active scenario counts at its full amount in each month of its
    window over the first five years, whatever its frequency, so the result
    is a worst case rather than a forecast.
    """

    income_scenarios = [s for s in income_scenarios if s.is_active]
    expense_scenarios = [s for s in expense_scenarios if s.is_active]
    base = budget_scenario.base_discretionary_income
    worst = base
    best = base

    for month in range(1, SOUNDNESS_MONTHS + 1):
        income = budget_scenario.base_monthly_net_income
        expenses = budget_scenario.base_monthly_expenses
        income += sum(s.amount * (1 - s.tax_rate) for s in income_scenarios if in_window(s, month))
        expenses += sum(s.amount for s in expense_scenarios if in_window(s, month))
        disc = income - expenses
        worst = min(worst, disc)
        best = max(best, disc)

    issues: List[ValidationIssue] = []
    if worst < 0:
        issues.append(_warning("scenarios",
                               f"Scenarios result in negative discretionary income (worst case: ${worst:.2f})"))
    if worst < base * 0.5:
        issues.append(_warning("scenarios",
                               "Scenarios significantly reduce discretionary income - consider emergency planning"))
    recommended = base * budget_scenario.principal_multiplier
    if recommended > budget_scenario.base_monthly_net_income * 0.5:
        issues.append(_warning("principal_multiplier",
                               "Recommended payment exceeds 50% of net income - may not be sustainable"))

    return ValidationResult.build(issues, data={"worst_case_discretionary": worst, "best_case_discretionary": best})
