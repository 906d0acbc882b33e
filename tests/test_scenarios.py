import pytest
from pydantic import TypeAdapter

from heloc.models import BudgetScenario, ExpenseScenario, IncomeScenario, Scenario
from heloc.scenarios import (
    apply_scenarios,
    calculate_monthly_amount,
    calculate_scenario_impact,
    create_expense_scenario,
    create_income_scenario,
    generate_scenario_suggestions,
    optimize_scenario_timing,
    validate_scenario,
)


def _raise(**kw):
    base = dict(id="r1", name="Raise", scenario_type="raise", amount=500, start_month=13, tax_rate=0.25)
    base.update(kw)
    return IncomeScenario(**base)


def test_raise_applies_from_start_month():
    raise_ = _raise()
    m1 = apply_scenarios(6000, 4000, 1, [raise_], [])
    assert m1.adjusted_income == 6000
    assert m1.discretionary_income == 2000
    assert m1.scenarios_applied == []
    m13 = apply_scenarios(6000, 4000, 13, [raise_], [])
    assert m13.adjusted_income == 6375
    assert m13.discretionary_income == 2375
    assert m13.scenarios_applied == ["+Raise: $375.00"]


def test_one_time_expense_reverts():
    car = ExpenseScenario(name="Car repair", amount=5000, start_month=6, end_month=6, frequency="one_time")
    assert apply_scenarios(6000, 4000, 5, [], [car]).adjusted_expenses == 4000
    m6 = apply_scenarios(6000, 4000, 6, [], [car])
    assert m6.adjusted_expenses == 9000
    assert m6.scenarios_applied == ["-Car repair: $5000.00"]
    assert apply_scenarios(6000, 4000, 7, [], [car]).adjusted_expenses == 4000


def test_discretionary_identity_can_go_negative():
    loss = IncomeScenario(name="Job Loss", scenario_type="job_loss", amount=-3000)
    rent = ExpenseScenario(name="Rent hike", amount=800)
    res = apply_scenarios(5000, 4000, 1, [loss], [rent])
    assert res.adjusted_income == 2000
    assert res.discretionary_income == res.adjusted_income - res.adjusted_expenses
    assert res.discretionary_income < 0


def test_inactive_and_out_of_window_scenarios_skipped():
    off = _raise(start_month=1, is_active=False)
    ended = _raise(start_month=1, end_month=3)
    res = apply_scenarios(6000, 4000, 4, [off, ended], [])
    assert res.adjusted_income == 6000


def test_monthly_amount_frequencies():
    assert calculate_monthly_amount(300, "monthly", 7, 1) == 300
    assert calculate_monthly_amount(300, "quarterly", 4, 1) == 300
    assert calculate_monthly_amount(300, "quarterly", 5, 1) == 0
    assert calculate_monthly_amount(300, "annually", 13, 1) == 300
    assert calculate_monthly_amount(300, "annually", 12, 1) == 0
    assert calculate_monthly_amount(5000, "one_time", 6, 6) == 5000
    assert calculate_monthly_amount(5000, "one_time", 7, 6) == 0


def test_scenario_union_parses_by_kind():
    adapter = TypeAdapter(Scenario)
    parsed = adapter.validate_python({"kind": "expense", "name": "Tuition", "amount": 900, "category": "education"})
    assert isinstance(parsed, ExpenseScenario)
    parsed = adapter.validate_python({"kind": "income", "name": "Bonus", "amount": 900})
    assert isinstance(parsed, IncomeScenario)


def test_income_impact_estimate():
    budget = BudgetScenario.create(6000, 4000)
    raise_ = _raise(amount=1000, start_month=1)
    impact = calculate_scenario_impact(raise_, budget)
    assert impact.type == "income"
    assert impact.monthly_impact == 750
    assert impact.total_impact == pytest.approx(45000)
    assert impact.payoff_impact == 3
    assert impact.interest_impact == 4500


def test_one_time_expense_impact():
    budget = BudgetScenario.create(6000, 4000)
    emergency = create_expense_scenario("b1", "emergency", id="e1", start_month=6, end_month=6)
    impact = calculate_scenario_impact(emergency, budget)
    assert impact.type == "expense"
    assert impact.total_impact == -2000
    assert impact.monthly_impact == -2000
    assert impact.payoff_impact == -9


def test_create_from_templates():
    bonus = create_income_scenario("b1", "bonus")
    assert bonus.amount == 5000 and bonus.frequency == "annually" and bonus.tax_rate == 0.30
    assert bonus.budget_scenario_id == "b1"
    custom = create_income_scenario("b1", "raise", name="Promotion", start_month=6)
    assert custom.name == "Promotion" and custom.start_month == 6 and custom.amount == 2000
    emergency = create_expense_scenario("b1", "emergency")
    assert emergency.frequency == "one_time"
    assert emergency.priority_level == 10 and emergency.is_essential


def test_validate_scenario_errors():
    ok, errors = validate_scenario(IncomeScenario(name=" ", amount=0, start_month=0))
    assert not ok
    assert "Scenario name is required" in errors
    assert "Scenario amount must be non-zero" in errors
    assert "Start month must be 1 or greater" in errors

    _, errors = validate_scenario(IncomeScenario(name="x", amount=1, tax_rate=1.5))
    assert errors == ["Tax rate must be between 0 and 1"]

    _, errors = validate_scenario(ExpenseScenario(name="x", amount=1, priority_level=11))
    assert errors == ["Priority level must be between 1 and 10"]

    _, errors = validate_scenario(
        ExpenseScenario(name="x", amount=1, start_month=5, end_month=7, frequency="one_time")
    )
    assert errors == ["One-time scenarios cannot have different start and end months"]

    _, errors = validate_scenario(ExpenseScenario(name="x", amount=1, start_month=5, end_month=2))
    assert "End month cannot be before start month" in errors

    assert validate_scenario(_raise()) == (True, [])


def _keys(disc):
    budget = BudgetScenario.create(4000 + disc, 4000)
    return [(s.kind, s.key) for s in generate_scenario_suggestions(budget)]


def test_suggestions_follow_discretionary_income():
    assert _keys(300) == [("income", "side_income"), ("expense", "emergency")]
    assert _keys(700) == [("expense", "emergency")]
    assert _keys(1500) == [("income", "raise"), ("income", "side_income"), ("expense", "emergency")]
    assert ("expense", "discretionary") in _keys(2500)


def test_optimize_scenario_timing():
    budget = BudgetScenario.create(6000, 4000)
    late_raise = _raise(id="late", start_month=18)
    early_raise = _raise(id="early", start_month=6)
    emergency = create_expense_scenario("b1", "emergency", id="em", start_month=3, end_month=3)
    out = optimize_scenario_timing([late_raise, early_raise, emergency], budget)
    assert [(o.scenario_id, o.suggested_start_month) for o in out] == [("late", 1), ("em", 24)]
