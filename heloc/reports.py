"""Tabular views of engine results for display and export."""
from __future__ import annotations

from typing import Iterable

import pandas as pd

from heloc.models import BudgetingResult, StrategyComparison

_YEARLY_COLUMNS = ["year", "payment", "principal", "interest", "pmi", "ending_balance"]


def schedule_frame(schedule: Iterable) -> pd.DataFrame:
    """One row per month for any schedule of ``MonthlyPayment`` (or subclass) rows."""

    rows = [row.model_dump() for row in schedule]
    if not rows:
        return pd.DataFrame(columns=["month", "beginning_balance", "payment_amount", "principal_payment",
                                     "interest_payment", "ending_balance"])
    return pd.DataFrame(rows).set_index("month", drop=False)


def yearly_summary(schedule: Iterable) -> pd.DataFrame:
    """Roll a monthly schedule up to loan years.

    Payments, principal, interest and PMI are summed; ``ending_balance`` is the
    balance after the last month of each year.
    """

    df = schedule_frame(schedule)
    if df.empty:
        return pd.DataFrame(columns=_YEARLY_COLUMNS)
    df = df.reset_index(drop=True)
    df["year"] = (df["month"] - 1) // 12 + 1
    if "pmi_payment" not in df.columns:
        df["pmi_payment"] = 0.0
    agg = df.groupby("year").agg(
        payment=("payment_amount", "sum"),
        principal=("principal_payment", "sum"),
        interest=("interest_payment", "sum"),
        pmi=("pmi_payment", "sum"),
        ending_balance=("ending_balance", "last"),
    ).reset_index()
    return agg.round(2)


def comparison_frame(comparison: StrategyComparison) -> pd.DataFrame:
    """Side-by-side traditional vs HELOC totals, indexed by metric."""

    trad = comparison.traditional
    accel = comparison.heloc
    df = pd.DataFrame(
        {
            "traditional": [trad.payoff_months, trad.total_interest, trad.monthly_payment, 0.0],
            "heloc": [
                accel.payoff_months,
                accel.total_interest,
                trad.monthly_payment + comparison.comparison.monthly_payment_difference,
                accel.max_heloc_used,
            ],
        },
        index=["payoff_months", "total_interest", "average_monthly_payment", "max_heloc_used"],
    )
    df["difference"] = df["traditional"] - df["heloc"]
    return df


def budgeting_frame(result: BudgetingResult) -> pd.DataFrame:
    """Monthly budgeting rows with the traditional balance for the same month alongside."""

    df = pd.DataFrame([row.model_dump() for row in result.monthly_results])
    if df.empty:
        return df
    trad = pd.DataFrame(
        {
            "month_number": [row.month for row in result.traditional_comparison.schedule],
            "traditional_balance": [row.ending_balance for row in result.traditional_comparison.schedule],
        }
    )
    df = df.merge(trad, on="month_number", how="left")
    df["traditional_balance"] = df["traditional_balance"].fillna(0.0)
    return df.set_index("month_number", drop=False)
