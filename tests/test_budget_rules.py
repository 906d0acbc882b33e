from core.budget_rules import (
    BUDGET_RULES,
    BudgetRuleKey,
    validate_budget_scenario_request,
    validate_expense_scenario_request,
    validate_financial_soundness,
    validate_income_scenario_request,
    validate_live_calculation_request,
)
from heloc.models import (
    BudgetScenario,
    BudgetScenarioRequest,
    ExpenseScenario,
    ExpenseScenarioRequest,
    HELOCDetails,
    IncomeScenario,
    IncomeScenarioRequest,
    LiveCalculationRequest,
    LiveScenario,
    MortgageInput,
)


def _msgs(issues):
    return [i.message for i in issues]


def test_every_budget_rule_key_has_a_rule():
    assert set(BUDGET_RULES) == set(BudgetRuleKey)


def _budget_request(**kw):
    base = dict(
        scenario_id="s1",
        name="Baseline",
        base_monthly_gross_income=8000,
        base_monthly_net_income=6000,
        base_monthly_expenses=4000,
        custom_principal_payment=6000,
    )
    base.update(kw)
    return BudgetScenarioRequest(**base)


def test_budget_request_valid():
    res = validate_budget_scenario_request(_budget_request())
    assert res.is_valid
    assert res.warnings == [] and res.suggestions == []


def test_budget_request_errors():
    res = validate_budget_scenario_request(
        _budget_request(name="", scenario_id="", base_monthly_net_income=9000, principal_multiplier=12,
                        custom_principal_payment=-1)
    )
    msgs = _msgs(res.errors)
    assert "Budget scenario name is required" in msgs
    assert "Parent scenario ID is required" in msgs
    assert "Net income cannot be greater than gross income" in msgs
    assert "Custom principal payment cannot be negative" in msgs
    assert "Principal multiplier must be between 0.1 and 10.0" in msgs


def test_budget_request_warnings_and_suggestions():
    res = validate_budget_scenario_request(_budget_request(base_monthly_expenses=5500, custom_principal_payment=4000))
    assert res.is_valid
    assert _msgs(res.warnings) == ["Custom principal payment is very high relative to discretionary income"]
    assert res.suggestions[0].suggested_value == 1500
    assert "Consider reducing expenses" in res.suggestions[1].message

    negative = validate_budget_scenario_request(_budget_request(base_monthly_expenses=7000, custom_principal_payment=None))
    assert "Expenses exceed income, resulting in negative discretionary income" in _msgs(negative.warnings)


def test_income_request():
    ok = validate_income_scenario_request(
        IncomeScenarioRequest(name="Raise", scenario_type="raise", amount=500, start_month=6)
    )
    assert ok.is_valid and ok.warnings == [] and ok.suggestions == []

    bad = validate_income_scenario_request(
        IncomeScenarioRequest(name="", amount=0, start_month=0, end_month=5, tax_rate=0.9)
    )
    msgs = _msgs(bad.errors)
    assert "Income scenario name is required" in msgs
    assert "Income amount is required and cannot be zero" in msgs
    assert "Start month must be between 1 and 600" in msgs
    assert "Tax rate must be between 0% and 60%" in msgs


def test_income_request_hints():
    res = validate_income_scenario_request(
        IncomeScenarioRequest(name="Cut", scenario_type="other", amount=-200, start_month=1)
    )
    assert res.is_valid
    assert 'consider using "job_loss"' in res.warnings[0].message

    bonus = validate_income_scenario_request(
        IncomeScenarioRequest(name="Bonus", scenario_type="bonus", amount=5000, start_month=3)
    )
    assert bonus.suggestions[0].suggested_value == "annually"

    raise_ = validate_income_scenario_request(
        IncomeScenarioRequest(name="Raise", scenario_type="raise", amount=500, start_month=1)
    )
    assert raise_.suggestions[0].suggested_value == 12


def test_income_request_timing():
    res = validate_income_scenario_request(
        IncomeScenarioRequest(name="Bonus", amount=1000, start_month=6, end_month=8, frequency="one_time")
    )
    assert _msgs(res.errors) == ["One-time scenarios cannot have different start and end months"]


def test_expense_request():
    bad = validate_expense_scenario_request(
        ExpenseScenarioRequest(name="Tuition", amount=-5, start_month=3, end_month=1, priority_level=0)
    )
    msgs = _msgs(bad.errors)
    assert "Expense amount is required and must be positive" in msgs
    assert "End month cannot be before start month" in msgs
    assert "Priority level must be between 1 and 10" in msgs

    too_big = validate_expense_scenario_request(ExpenseScenarioRequest(name="x", amount=200000, start_month=1))
    assert _msgs(too_big.errors) == ["Expense amount must be less than $100000"]


def test_expense_request_warnings():
    res = validate_expense_scenario_request(
        ExpenseScenarioRequest(name="Roof", category="emergency", amount=12000, start_month=4)
    )
    assert res.is_valid
    assert _msgs(res.warnings) == [
        "Emergency expenses are typically one-time events",
        "Very high monthly expense - verify this amount is correct",
    ]
    fun = validate_expense_scenario_request(
        ExpenseScenarioRequest(name="Trips", category="discretionary", amount=300, start_month=1, is_essential=True)
    )
    assert _msgs(fun.warnings) == ["Discretionary expenses are typically not essential"]


def test_live_request():
    req = LiveCalculationRequest(
        base_income=5000,
        base_expenses=5000,
        mortgage_details=MortgageInput(principal=0, annual_interest_rate=0.25, term_in_months=6),
        heloc_details=HELOCDetails(heloc_limit=-1, heloc_rate=0.5),
        scenarios=[LiveScenario(type="income", amount=0, start_month=0, end_month=-1)],
        months_to_project=700,
    )
    res = validate_live_calculation_request(req)
    fields = {i.field for i in res.errors}
    assert fields == {
        "mortgage_details.principal",
        "mortgage_details.annual_interest_rate",
        "mortgage_details.term_in_months",
        "heloc_details.heloc_limit",
        "heloc_details.heloc_rate",
        "scenarios[0].amount",
        "scenarios[0].start_month",
        "scenarios[0].end_month",
        "months_to_project",
    }
    assert _msgs(res.warnings) == ["Expenses equal or exceed income - no discretionary income available"]


def test_live_request_needs_mortgage():
    res = validate_live_calculation_request(LiveCalculationRequest(base_income=0, base_expenses=-1))
    assert {i.field for i in res.errors} == {"base_income", "base_expenses", "mortgage_details"}


def test_financial_soundness():
    budget = BudgetScenario.create(6000, 5000, principal_multiplier=2.0)
    loss = IncomeScenario(name="Job Loss", amount=-3000, start_month=10, end_month=15)
    res = validate_financial_soundness(budget, [loss])
    assert res.is_valid
    assert res.data["worst_case_discretionary"] == -2000
    assert res.warnings[0].message == "Scenarios result in negative discretionary income (worst case: $-2000.00)"
    assert len(res.warnings) == 2


def test_financial_soundness_flags_aggressive_multiplier():
    budget = BudgetScenario.create(6000, 2000, principal_multiplier=3.0)
    res = validate_financial_soundness(budget, [], [ExpenseScenario(name="x", amount=100, is_active=False)])
    assert _msgs(res.warnings) == ["Recommended payment exceeds 50% of net income - may not be sustainable"]
