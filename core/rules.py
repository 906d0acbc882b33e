"""Pre-flight validation for calculator form input.

Validators accumulate :class:`ValidationIssue` findings and never raise; the
caller decides whether to block on them with :func:`has_blocking`. Inputs are
plain dicts of raw form values keyed by snake_case field name.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from core.utils import is_blank, sanitize_numeric_input
from heloc.calculators import safe_ltv_calculation
from heloc.errors import ERROR_MESSAGES, ErrorCode
from heloc.presets import DISCRETIONARY_TOLERANCE, MIP_REQUIRED_LTV

Severity = Literal["error", "warning", "info"]


class ValidationIssue(BaseModel):
    field: str
    message: str
    severity: Severity = "error"
    suggested_value: Any = None


class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)
    suggestions: List[ValidationIssue] = Field(default_factory=list)
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def build(cls, issues: List[ValidationIssue], data: Optional[Dict[str, Any]] = None) -> "ValidationResult":
        errors = [i for i in issues if i.severity == "error"]
        return cls(
            is_valid=not errors,
            errors=errors,
            warnings=[i for i in issues if i.severity == "warning"],
            suggestions=[i for i in issues if i.severity == "info"],
            data=data,
        )


class RangeRule(BaseModel):
    min: float
    max: float
    message: str


class RuleKey(str, Enum):
    MORTGAGE_BALANCE = "mortgage_balance"
    INTEREST_RATE = "interest_rate"
    TERM_MONTHS = "term_months"
    MONTHLY_PAYMENT = "monthly_payment"
    HELOC_LIMIT = "heloc_limit"
    INCOME = "income"
    EXPENSES = "expenses"
    PROPERTY_VALUE = "property_value"


VALIDATION_RULES: Dict[RuleKey, RangeRule] = {
    RuleKey.MORTGAGE_BALANCE: RangeRule(
        min=1000, max=10_000_000, message="Mortgage balance must be between $1,000 and $10,000,000"),
    RuleKey.INTEREST_RATE: RangeRule(
        min=0.001, max=0.30, message="Interest rate must be between 0.1% and 30%"),
    RuleKey.TERM_MONTHS: RangeRule(
        min=12, max=480, message="Loan term must be between 1 and 40 years"),
    RuleKey.MONTHLY_PAYMENT: RangeRule(
        min=100, max=100_000, message="Monthly payment must be between $100 and $100,000"),
    RuleKey.HELOC_LIMIT: RangeRule(
        min=1000, max=5_000_000, message="HELOC limit must be between $1,000 and $5,000,000"),
    RuleKey.INCOME: RangeRule(
        min=1000, max=1_000_000, message="Monthly income must be between $1,000 and $1,000,000"),
    RuleKey.EXPENSES: RangeRule(
        min=0, max=500_000, message="Monthly expenses must be between $0 and $500,000"),
    RuleKey.PROPERTY_VALUE: RangeRule(
        min=10_000, max=50_000_000, message="Property value must be between $10,000 and $50,000,000"),
}

PROPERTY_TAX_RULE = RangeRule(min=0, max=50_000, message="Property tax must be between $0 and $50,000")
INSURANCE_RULE = RangeRule(min=0, max=10_000, message="Insurance must be between $0 and $10,000")
HOA_RULE = RangeRule(min=0, max=5000, message="HOA fees must be between $0 and $5,000")
DISCRETIONARY_RULE = RangeRule(
    min=0, max=500_000, message="Discretionary income must be between $0 and $500,000")


def validate_number(value, field: str, rule: RangeRule, required: bool = True) -> List[ValidationIssue]:
    if is_blank(value):
        if required:
            return [ValidationIssue(field=field, message=f"{field} is required")]
        return []
    num = sanitize_numeric_input(value)
    if num is None or math.isnan(num):
        return [ValidationIssue(field=field, message=f"{field} must be a valid number")]
    if num < rule.min or num > rule.max:
        return [ValidationIssue(field=field, message=rule.message)]
    return []


def _as_decimal_rate(num: float) -> float:
    """Rates above 1 are taken as percentages."""
    return num / 100 if num > 1 else num


def validate_percentage(value, field: str, required: bool = True) -> List[ValidationIssue]:
    if is_blank(value):
        if required:
            return [ValidationIssue(field=field, message=f"{field} is required")]
        return []
    num = sanitize_numeric_input(value)
    if num is None or math.isnan(num):
        return [ValidationIssue(field=field, message=f"{field} must be a valid percentage")]
    rule = VALIDATION_RULES[RuleKey.INTEREST_RATE]
    decimal = _as_decimal_rate(num)
    if decimal < rule.min or decimal > rule.max:
        return [ValidationIssue(field=field, message=rule.message)]
    return []


def _num(data: dict, key: str) -> Optional[float]:
    return sanitize_numeric_input(data.get(key))


def _valid(x: Optional[float]) -> bool:
    return x is not None and not math.isnan(x)


def validate_mortgage_inputs(data: dict) -> ValidationResult:
    issues: List[ValidationIssue] = []

    balance = _num(data, "current_mortgage_balance")
    if _valid(balance) and balance <= 0:
        issues.append(ValidationIssue(field="current_mortgage_balance",
                                      message="Current mortgage balance must be positive"))
    else:
        issues += validate_number(data.get("current_mortgage_balance"), "current_mortgage_balance",
                                  VALIDATION_RULES[RuleKey.MORTGAGE_BALANCE])

    rate = _num(data, "current_interest_rate")
    if _valid(rate) and (rate < 0 or rate > 30):
        issues.append(ValidationIssue(field="current_interest_rate",
                                      message="Interest rate must be between 0 and 30%"))

    term = _num(data, "remaining_term_months")
    if _valid(term) and (term < 1 or term > 600):
        issues.append(ValidationIssue(field="remaining_term_months",
                                      message="Remaining term must be between 1 and 600 months"))

    issues += validate_number(data.get("monthly_payment"), "monthly_payment",
                              VALIDATION_RULES[RuleKey.MONTHLY_PAYMENT])

    payment = _num(data, "monthly_payment")
    if _valid(balance) and _valid(rate) and _valid(payment) and balance > 0 and rate > 0 and payment > 0:
        first_interest = balance * _as_decimal_rate(rate) / 12
        if payment <= first_interest:
            template = ERROR_MESSAGES[ErrorCode.NEGATIVE_AMORTIZATION]({})
            issues.append(ValidationIssue(
                field="monthly_payment",
                message=template["user_message"],
                suggested_value=round(first_interest, 2),
            ))

    optional = [
        ("property_value", VALIDATION_RULES[RuleKey.PROPERTY_VALUE]),
        ("property_tax_monthly", PROPERTY_TAX_RULE),
        ("insurance_monthly", INSURANCE_RULE),
        ("hoa_fees_monthly", HOA_RULE),
    ]
    for key, rule in optional:
        if data.get(key) is not None:
            issues += validate_number(data.get(key), key, rule, required=False)

    return ValidationResult.build(issues)


def validate_heloc_inputs(data: dict) -> ValidationResult:
    issues: List[ValidationIssue] = []

    limit = _num(data, "heloc_limit")
    if _valid(limit) and limit <= 0:
        issues.append(ValidationIssue(field="heloc_limit", message="HELOC limit must be positive"))
    else:
        issues += validate_number(data.get("heloc_limit"), "heloc_limit", VALIDATION_RULES[RuleKey.HELOC_LIMIT])

    issues += validate_percentage(data.get("heloc_interest_rate"), "heloc_interest_rate")

    if data.get("heloc_available_credit") is not None:
        issues += validate_number(data.get("heloc_available_credit"), "heloc_available_credit",
                                  VALIDATION_RULES[RuleKey.HELOC_LIMIT], required=False)
        available = _num(data, "heloc_available_credit")
        if _valid(available) and _valid(limit) and available > limit:
            issues.append(ValidationIssue(field="heloc_available_credit",
                                          message="Available credit cannot exceed HELOC limit"))

    return ValidationResult.build(issues)


def validate_income_inputs(data: dict) -> ValidationResult:
    issues: List[ValidationIssue] = []

    issues += validate_number(data.get("monthly_gross_income"), "monthly_gross_income",
                              VALIDATION_RULES[RuleKey.INCOME])
    issues += validate_number(data.get("monthly_net_income"), "monthly_net_income",
                              VALIDATION_RULES[RuleKey.INCOME])
    issues += validate_number(data.get("monthly_expenses"), "monthly_expenses",
                              VALIDATION_RULES[RuleKey.EXPENSES])
    issues += validate_number(data.get("monthly_discretionary_income"), "monthly_discretionary_income",
                              DISCRETIONARY_RULE)

    gross = _num(data, "monthly_gross_income")
    net = _num(data, "monthly_net_income")
    expenses = _num(data, "monthly_expenses")
    disc = _num(data, "monthly_discretionary_income")

    if _valid(net) and _valid(gross) and net > gross:
        issues.append(ValidationIssue(field="monthly_net_income",
                                      message="Net income cannot be higher than gross income"))
    if _valid(expenses) and _valid(net) and expenses > net:
        issues.append(ValidationIssue(field="monthly_expenses",
                                      message="Monthly expenses cannot exceed net income"))
    if _valid(disc) and _valid(net) and _valid(expenses):
        expected = net - expenses
        if abs(disc - expected) > DISCRETIONARY_TOLERANCE:
            issues.append(ValidationIssue(
                field="monthly_discretionary_income",
                message=f"Discretionary income should equal net income minus expenses ({expected:.2f})",
                suggested_value=round(expected, 2),
            ))

    return ValidationResult.build(issues)


def validate_pmi_requirement(balance, property_value, pmi_monthly) -> List[ValidationIssue]:
    """PMI is expected above 80% LTV; below it a PMI charge is flagged for review."""

    ltv = safe_ltv_calculation(balance, property_value)
    if not ltv.success:
        return []
    pmi = sanitize_numeric_input(pmi_monthly)
    has_pmi = _valid(pmi) and pmi > 0
    if ltv.ltv_ratio > MIP_REQUIRED_LTV and not has_pmi:
        return [ValidationIssue(
            field="pmi_monthly",
            message=f"MIP/PMI is typically required when LTV exceeds 80% (current LTV: {ltv.ltv_ratio:.1f}%)",
        )]
    if ltv.ltv_ratio <= MIP_REQUIRED_LTV and has_pmi:
        return [ValidationIssue(
            field="pmi_monthly",
            message=f"MIP/PMI may not be required when LTV is {ltv.ltv_ratio:.1f}% (≤80%)",
            severity="info",
            suggested_value=0,
        )]
    return []


def validate_calculator_inputs(data: dict) -> ValidationResult:
    issues: List[ValidationIssue] = []

    issues += validate_mortgage_inputs(data).errors

    if data.get("heloc_limit") is not None or data.get("heloc_interest_rate") is not None:
        heloc = validate_heloc_inputs(data)
        issues += heloc.errors

    issues += validate_income_inputs(data).errors

    balance = _num(data, "current_mortgage_balance")
    value = _num(data, "property_value")
    if _valid(value) and value > 0 and _valid(balance) and balance > value:
        issues.append(ValidationIssue(field="current_mortgage_balance",
                                      message="Mortgage balance cannot exceed property value"))
    if data.get("property_value") is not None:
        issues += validate_pmi_requirement(balance, value, data.get("pmi_monthly"))

    name = data.get("scenario_name")
    if name is not None and not isinstance(name, str):
        name = str(name)
    if name is not None and name.strip() == "":
        issues.append(ValidationIssue(field="scenario_name", message="Scenario name is required"))
    if name and len(name) > 255:
        issues.append(ValidationIssue(field="scenario_name",
                                      message="Scenario name must be less than 255 characters"))

    return ValidationResult.build(issues, data=dict(data))


validate_calculator_input = validate_calculator_inputs

_REQUIRED_FIELDS = [
    "current_mortgage_balance",
    "current_interest_rate",
    "monthly_payment",
    "heloc_limit",
    "heloc_interest_rate",
    "monthly_gross_income",
    "monthly_net_income",
    "monthly_expenses",
    "monthly_discretionary_income",
]
_OPTIONAL_FIELDS = [
    "property_value",
    "property_tax_monthly",
    "insurance_monthly",
    "hoa_fees_monthly",
    "pmi_monthly",
    "heloc_available_credit",
]


def sanitize_calculator_inputs(raw: dict) -> dict:
    """Normalize raw form values: required numbers default to 0, optional ones to ``None``."""

    out: Dict[str, Any] = {}
    for key in _REQUIRED_FIELDS:
        num = sanitize_numeric_input(raw.get(key))
        out[key] = num if _valid(num) else 0.0
    term = sanitize_numeric_input(raw.get("remaining_term_months"))
    out["remaining_term_months"] = int(term) if _valid(term) else 0
    for key in _OPTIONAL_FIELDS:
        num = sanitize_numeric_input(raw.get(key)) if raw.get(key) else None
        out[key] = num if _valid(num) else None
    for key in ("scenario_name", "description"):
        text = raw.get(key)
        out[key] = text.strip() if text else None
    return out


def has_blocking(res) -> bool:
    """True when any finding is an error. Accepts a result or a list of issues."""

    issues = res.errors if isinstance(res, ValidationResult) else res
    return any(i.severity == "error" for i in issues)
