from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from heloc.presets import DEFAULT_PRINCIPAL_MULTIPLIER, DEFAULT_PROJECTION_MONTHS

ScenarioFrequency = Literal["monthly", "quarterly", "annually", "one_time"]

IncomeScenarioType = Literal[
    "raise",
    "bonus",
    "job_loss",
    "side_income",
    "investment_income",
    "overtime",
    "commission",
    "rental_income",
    "other",
]

ExpenseCategory = Literal[
    "housing",
    "utilities",
    "food",
    "transportation",
    "insurance",
    "debt",
    "discretionary",
    "emergency",
    "healthcare",
    "education",
    "childcare",
    "entertainment",
    "other",
]


class MortgageInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    principal: float
    annual_interest_rate: float
    term_in_months: int
    current_balance: Optional[float] = None
    monthly_payment: Optional[float] = None
    property_value: Optional[float] = None
    pmi_monthly: Optional[float] = None


class MonthlyPayment(BaseModel):
    month: int
    beginning_balance: float
    payment_amount: float
    principal_payment: float
    interest_payment: float
    ending_balance: float
    cumulative_interest: float
    cumulative_principal: float
    pmi_payment: float = 0.0
    current_ltv: Optional[float] = None


class AmortizationSchedule(BaseModel):
    monthly_payment: float
    total_interest: float
    total_payments: float
    payoff_months: int
    schedule: List[MonthlyPayment] = Field(default_factory=list)


class PayoffResult(BaseModel):
    months: int
    total_interest: float
    schedule: List[MonthlyPayment] = Field(default_factory=list)


class HELOCInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    mortgage_balance: float
    mortgage_rate: float
    mortgage_payment: float
    heloc_limit: float = 0.0
    heloc_rate: float = 0.0
    discretionary_income: float = 0.0
    heloc_available_credit: Optional[float] = None
    property_value: Optional[float] = None
    pmi_monthly: Optional[float] = None


class HELOCDetails(BaseModel):
    """HELOC terms without the mortgage side, as supplied to the budgeting engine."""

    model_config = ConfigDict(frozen=True)

    heloc_limit: float = 0.0
    heloc_rate: float = 0.0
    heloc_available_credit: Optional[float] = None


class HELOCMonthlyPayment(MonthlyPayment):
    heloc_balance: float
    heloc_payment: float
    heloc_interest: float
    total_monthly_payment: float
    discretionary_used: float
    current_equity_percentage: Optional[float] = None


class HELOCCalculationResult(BaseModel):
    payoff_months: int
    total_interest: float
    total_heloc_interest: float
    total_mortgage_interest: float
    schedule: List[HELOCMonthlyPayment] = Field(default_factory=list)
    max_heloc_used: float = 0.0
    average_heloc_balance: float = 0.0


class ComparisonMetrics(BaseModel):
    time_saved_months: int
    interest_saved: float
    percentage_interest_saved: float
    monthly_payment_difference: float


class StrategyComparison(BaseModel):
    traditional: AmortizationSchedule
    heloc: HELOCCalculationResult
    comparison: ComparisonMetrics


class LTVResult(BaseModel):
    success: bool
    ltv_ratio: float = 0.0
    can_calculate: bool
    error: Optional[str] = None


class BudgetScenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = ""
    scenario_id: str = ""
    name: str = ""
    base_monthly_gross_income: float
    base_monthly_net_income: float
    base_monthly_expenses: float
    base_discretionary_income: float
    recommended_principal_payment: float
    principal_multiplier: float = DEFAULT_PRINCIPAL_MULTIPLIER
    custom_principal_payment: Optional[float] = None
    auto_adjust_payments: bool = True
    is_active: bool = True

    @classmethod
    def create(
        cls,
        base_monthly_net_income: float,
        base_monthly_expenses: float,
        base_monthly_gross_income: Optional[float] = None,
        principal_multiplier: float = DEFAULT_PRINCIPAL_MULTIPLIER,
        **extra,
    ) -> "BudgetScenario":
        """Build a scenario with the discretionary and recommended payment fields derived."""

        discretionary = base_monthly_net_income - base_monthly_expenses
        return cls(
            base_monthly_gross_income=(
                base_monthly_net_income if base_monthly_gross_income is None else base_monthly_gross_income
            ),
            base_monthly_net_income=base_monthly_net_income,
            base_monthly_expenses=base_monthly_expenses,
            base_discretionary_income=discretionary,
            recommended_principal_payment=max(0.0, discretionary * principal_multiplier),
            principal_multiplier=principal_multiplier,
            **extra,
        )


class IncomeScenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["income"] = "income"
    id: str = ""
    budget_scenario_id: str = ""
    name: str = ""
    description: str = ""
    scenario_type: IncomeScenarioType = "other"
    amount: float = 0.0
    start_month: int = 1
    end_month: Optional[int] = None
    frequency: ScenarioFrequency = "monthly"
    is_active: bool = True
    is_recurring: bool = True
    tax_rate: float = 0.0


class ExpenseScenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["expense"] = "expense"
    id: str = ""
    budget_scenario_id: str = ""
    name: str = ""
    description: str = ""
    category: ExpenseCategory = "other"
    subcategory: Optional[str] = None
    amount: float = 0.0
    start_month: int = 1
    end_month: Optional[int] = None
    frequency: ScenarioFrequency = "monthly"
    is_active: bool = True
    is_recurring: bool = True
    is_essential: bool = False
    priority_level: int = 5


Scenario = Annotated[Union[IncomeScenario, ExpenseScenario], Field(discriminator="kind")]


class ScenarioAdjustment(BaseModel):
    adjusted_income: float
    adjusted_expenses: float
    discretionary_income: float
    scenarios_applied: List[str] = Field(default_factory=list)


class ScenarioImpactAnalysis(BaseModel):
    scenario_id: str
    scenario_name: str
    type: Literal["income", "expense"]
    monthly_impact: float
    total_impact: float
    payoff_impact: int
    interest_impact: float


class ScenarioSuggestion(BaseModel):
    kind: Literal["income", "expense"]
    key: str
    reason: str


class TimingSuggestion(BaseModel):
    scenario_id: str
    suggested_start_month: int
    reason: str


class BudgetCalculationResult(BaseModel):
    budget_scenario_id: str = ""
    month_number: int
    monthly_gross_income: float
    monthly_net_income: float
    monthly_expenses: float
    discretionary_income: float
    recommended_principal_payment: float
    actual_principal_payment: float
    payment_adjustment_reason: Optional[str] = None
    beginning_mortgage_balance: float
    ending_mortgage_balance: float
    mortgage_payment: float
    mortgage_interest: float
    mortgage_principal: float
    beginning_heloc_balance: float
    ending_heloc_balance: float
    heloc_payment: float
    heloc_interest: float
    heloc_principal: float
    pmi_payment: float
    current_ltv: Optional[float] = None
    pmi_eliminated: bool = False
    cumulative_interest_paid: float = 0.0
    cumulative_principal_paid: float = 0.0
    cumulative_interest_saved: float = 0.0
    cumulative_time_saved_months: int = 0
    total_monthly_outflow: float
    remaining_cash_flow: float
    cash_flow_stress_ratio: Optional[float] = None


class CalculationSummary(BaseModel):
    total_months: int
    total_interest_saved: float
    pmi_elimination_month: int = 0
    max_discretionary_income: float
    min_discretionary_income: float
    average_discretionary_income: float
    traditional_payoff_months: int
    budgeting_payoff_months: int
    months_saved: int


class BudgetingResult(BaseModel):
    summary: CalculationSummary
    monthly_results: List[BudgetCalculationResult] = Field(default_factory=list)
    traditional_comparison: HELOCCalculationResult


class LiveScenario(BaseModel):
    type: Literal["income", "expense"]
    amount: float
    start_month: int = 1
    end_month: Optional[int] = None
    frequency: ScenarioFrequency = "monthly"


class LiveCalculationRequest(BaseModel):
    base_income: float
    base_expenses: float
    base_gross_income: Optional[float] = None
    principal_multiplier: Optional[float] = None
    mortgage_details: Optional[MortgageInput] = None
    heloc_details: Optional[HELOCDetails] = None
    scenarios: List[LiveScenario] = Field(default_factory=list)
    months_to_project: int = DEFAULT_PROJECTION_MONTHS


class LiveMonthSnapshot(BaseModel):
    month_number: int
    discretionary_income: float
    principal_payment: float
    mortgage_balance: float
    interest_saved: float


class LiveCalculationResponse(BaseModel):
    discretionary_income: float
    recommended_principal_payment: float
    projected_payoff_months: int
    projected_interest_saved: float
    pmi_elimination_month: int
    monthly_breakdown: List[LiveMonthSnapshot] = Field(default_factory=list)


class BudgetScenarioRequest(BaseModel):
    scenario_id: str = ""
    name: str = ""
    description: str = ""
    base_monthly_gross_income: float = 0.0
    base_monthly_net_income: float = 0.0
    base_monthly_expenses: float = 0.0
    principal_multiplier: Optional[float] = None
    custom_principal_payment: Optional[float] = None


class IncomeScenarioRequest(BaseModel):
    name: str = ""
    description: str = ""
    scenario_type: IncomeScenarioType = "other"
    amount: Optional[float] = None
    start_month: Optional[int] = None
    end_month: Optional[int] = None
    frequency: ScenarioFrequency = "monthly"
    tax_rate: Optional[float] = None


class ExpenseScenarioRequest(BaseModel):
    name: str = ""
    description: str = ""
    category: ExpenseCategory = "other"
    amount: Optional[float] = None
    start_month: Optional[int] = None
    end_month: Optional[int] = None
    frequency: ScenarioFrequency = "monthly"
    is_essential: Optional[bool] = None
    priority_level: Optional[int] = None
