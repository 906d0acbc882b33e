import pytest

from heloc.budgeting import calculate_budgeting_acceleration
from heloc.calculators import calculate_monthly_payment, compare_strategies, generate_amortization_schedule
from heloc.models import BudgetScenario, HELOCInput, MortgageInput
from heloc.reports import budgeting_frame, comparison_frame, schedule_frame, yearly_summary

MORTGAGE = MortgageInput(principal=200000, annual_interest_rate=0.06, term_in_months=360)


def test_schedule_frame_indexed_by_month():
    df = schedule_frame(generate_amortization_schedule(MORTGAGE).schedule)
    assert len(df) == 360
    assert df.loc[1, "beginning_balance"] == 200000


def test_yearly_summary_rolls_up_years():
    sched = generate_amortization_schedule(MORTGAGE).schedule
    yearly = yearly_summary(sched)
    assert list(yearly["year"]) == list(range(1, 31))
    assert yearly["principal"].sum() == pytest.approx(200000, abs=1)
    assert yearly.iloc[0]["ending_balance"] == pytest.approx(sched[11].ending_balance, abs=0.01)
    assert (yearly["pmi"] == 0).all()


def test_empty_schedule_gives_empty_frames():
    assert schedule_frame([]).empty
    assert yearly_summary([]).empty


def test_comparison_frame():
    heloc = HELOCInput(
        mortgage_balance=200000,
        mortgage_rate=0.06,
        mortgage_payment=calculate_monthly_payment(200000, 0.06, 360),
        heloc_limit=20000,
        heloc_rate=0.08,
        discretionary_income=1000,
    )
    cmp = compare_strategies(MORTGAGE, heloc)
    df = comparison_frame(cmp)
    assert df.loc["payoff_months", "difference"] == cmp.comparison.time_saved_months
    assert df.loc["total_interest", "difference"] == pytest.approx(cmp.comparison.interest_saved)


def test_budgeting_frame_adds_traditional_balance():
    budget = BudgetScenario.create(5000, 4000)
    res = calculate_budgeting_acceleration(budget, MORTGAGE, months_to_project=24)
    df = budgeting_frame(res)
    assert len(df) == 24
    assert (df["ending_mortgage_balance"] < df["traditional_balance"]).all()
