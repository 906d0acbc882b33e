DISCLAIMER = (
    "This tool models common mortgage acceleration strategies (HELOC-assisted principal reduction, "
    "discretionary income budgeting, and PMI/MIP removal). Results are estimates only; lender terms, "
    "variable HELOC rates, and tax treatment will differ. Review any strategy with a qualified advisor."
)

# Balances at or below this are treated as paid off.
PAYOFF_TOLERANCE = 0.01

# Hard ceiling on simulated months for every engine, regardless of the caller's projection length.
MAX_PROJECTION_MONTHS = 600
DEFAULT_PROJECTION_MONTHS = 360

DEFAULT_PRINCIPAL_MULTIPLIER = 3.0

# PMI/MIP thresholds. Each engine keeps its own number; see DESIGN.md.
MIP_REQUIRED_LTV = 80.0  # is_mip_required / validation: required above this LTV
HELOC_PMI_REMOVAL_EQUITY_PCT = 20.0  # HELOC engine: removed at >= 20% equity
BUDGETING_PMI_REMOVAL_LTV = 78.0  # orchestrator and amortization schedule: removed at <= 78% LTV

# Annual MIP rate by upper LTV bound. LTV above the last band uses MIP_RATE_ABOVE_BANDS.
MIP_RATE_BANDS = [(80.0, 0.0), (85.0, 0.005), (90.0, 0.0075), (95.0, 0.01)]
MIP_RATE_ABOVE_BANDS = 0.0125

# A HELOC draw is also worthwhile when the remaining mortgage is under this share of the HELOC limit.
HELOC_NEAR_PAYOFF_SHARE = 0.10

DISCRETIONARY_TOLERANCE = 50.0

# Live preview
LIVE_GROSS_FROM_NET = 1.25
LIVE_INCOME_TAX_RATE = 0.25
LIVE_EXPENSE_PRIORITY = 5
LIVE_BREAKDOWN_MONTHS = 60

# Rule-of-thumb impact estimates used only for UI display.
IMPACT_MONTHS_PER_1000 = 1.5
IMPACT_INTEREST_PER_MONTH = 1500.0
IMPACT_ANALYSIS_MONTHS = 60

DEBUG_ENV_VAR = "HELOC_DEBUG"
DEBUG_LOG_MAX_ENTRIES = 1000

INCOME_SCENARIO_TEMPLATES = {
    "raise": {"name": "Annual Salary Raise", "description": "Regular salary increase, typically applied annually",
              "amount": 2000.0, "frequency": "monthly", "tax_rate": 0.25},
    "bonus": {"name": "Annual Bonus", "description": "One-time or recurring bonus payment",
              "amount": 5000.0, "frequency": "annually", "tax_rate": 0.30},
    "job_loss": {"name": "Job Loss", "description": "Temporary or permanent loss of income",
                 "amount": -3000.0, "frequency": "monthly", "tax_rate": 0.0},
    "side_income": {"name": "Side Income", "description": "Additional income from freelancing or part-time work",
                    "amount": 1000.0, "frequency": "monthly", "tax_rate": 0.25},
    "investment_income": {"name": "Investment Income", "description": "Dividends, interest, or capital gains",
                          "amount": 500.0, "frequency": "quarterly", "tax_rate": 0.15},
    "overtime": {"name": "Overtime Pay", "description": "Additional compensation for extra hours worked",
                 "amount": 800.0, "frequency": "monthly", "tax_rate": 0.28},
    "commission": {"name": "Sales Commission", "description": "Variable compensation based on sales performance",
                   "amount": 1500.0, "frequency": "monthly", "tax_rate": 0.25},
    "rental_income": {"name": "Rental Income", "description": "Income from rental properties",
                      "amount": 1200.0, "frequency": "monthly", "tax_rate": 0.22},
    "other": {"name": "Other Income", "description": "Miscellaneous income source",
              "amount": 500.0, "frequency": "monthly", "tax_rate": 0.25},
}

EXPENSE_SCENARIO_TEMPLATES = {
    "housing": {"name": "Housing Expense", "description": "Rent, mortgage, or housing-related costs",
                "amount": 500.0, "frequency": "monthly", "is_essential": True, "priority_level": 9},
    "utilities": {"name": "Utility Bill", "description": "Electricity, gas, water, internet, phone",
                  "amount": 150.0, "frequency": "monthly", "is_essential": True, "priority_level": 8},
    "food": {"name": "Food Expense", "description": "Groceries and dining expenses",
             "amount": 200.0, "frequency": "monthly", "is_essential": True, "priority_level": 9},
    "transportation": {"name": "Transportation Cost", "description": "Car payment, gas, maintenance, public transit",
                       "amount": 300.0, "frequency": "monthly", "is_essential": True, "priority_level": 7},
    "insurance": {"name": "Insurance Premium", "description": "Health, auto, life, or other insurance",
                  "amount": 250.0, "frequency": "monthly", "is_essential": True, "priority_level": 8},
    "debt": {"name": "Debt Payment", "description": "Credit card, student loan, or other debt payments",
             "amount": 400.0, "frequency": "monthly", "is_essential": True, "priority_level": 9},
    "discretionary": {"name": "Discretionary Spending", "description": "Entertainment, hobbies, non-essential purchases",
                      "amount": 300.0, "frequency": "monthly", "is_essential": False, "priority_level": 3},
    "emergency": {"name": "Emergency Expense", "description": "Unexpected one-time expense",
                  "amount": 2000.0, "frequency": "one_time", "is_essential": True, "priority_level": 10},
    "healthcare": {"name": "Healthcare Expense", "description": "Medical bills, prescriptions, healthcare costs",
                   "amount": 200.0, "frequency": "monthly", "is_essential": True, "priority_level": 9},
    "education": {"name": "Education Expense", "description": "Tuition, books, educational materials",
                  "amount": 500.0, "frequency": "monthly", "is_essential": True, "priority_level": 7},
    "childcare": {"name": "Childcare Expense", "description": "Daycare, babysitting, child-related costs",
                  "amount": 800.0, "frequency": "monthly", "is_essential": True, "priority_level": 9},
    "entertainment": {"name": "Entertainment Expense", "description": "Movies, concerts, recreational activities",
                      "amount": 150.0, "frequency": "monthly", "is_essential": False, "priority_level": 2},
    "other": {"name": "Other Expense", "description": "Miscellaneous expense",
              "amount": 200.0, "frequency": "monthly", "is_essential": False, "priority_level": 5},
}
