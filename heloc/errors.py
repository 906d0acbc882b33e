"""Domain error taxonomy for the calculation engines.

Every failure a caller can show to a borrower is described by an
:class:`ErrorDetails` record: a stable ``code``, a technical ``message``, a
plain-language ``user_message`` and an optional ``suggestion``. Engines raise
:class:`CalculationError`; front ends turn any exception into details with
:func:`extract_error_details`.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    INVALID_INTEREST_RATE = "INVALID_INTEREST_RATE"
    INVALID_LOAN_TERM = "INVALID_LOAN_TERM"
    INVALID_PAYMENT = "INVALID_PAYMENT"

    NEGATIVE_AMORTIZATION = "NEGATIVE_AMORTIZATION"
    INSUFFICIENT_PAYMENT = "INSUFFICIENT_PAYMENT"
    CALCULATION_OVERFLOW = "CALCULATION_OVERFLOW"
    INVALID_CALCULATION_INPUT = "INVALID_CALCULATION_INPUT"

    HELOC_EXCEEDS_LIMIT = "HELOC_EXCEEDS_LIMIT"
    INSUFFICIENT_DISCRETIONARY = "INSUFFICIENT_DISCRETIONARY"
    UNDERWATER_MORTGAGE = "UNDERWATER_MORTGAGE"

    DATABASE_ERROR = "DATABASE_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetails(BaseModel):
    code: ErrorCode
    message: str
    user_message: str
    suggestion: Optional[str] = None
    field: Optional[str] = None
    value: Any = None


class CalculationError(ValueError):
    """Raised by the engines for structurally impossible input or numeric overflow."""

    def __init__(self, details: ErrorDetails) -> None:
        super().__init__(details.message)
        self.details = details
        self.code = details.code
        self.user_message = details.user_message
        self.suggestion = details.suggestion
        self.field = details.field
        self.value = details.value

    @classmethod
    def from_code(cls, code: ErrorCode, **params) -> "CalculationError":
        return cls(create_error_response(code, **params))


# Keys a caller may pass to replace a template default outright.
_OVERRIDABLE = ("message", "user_message", "suggestion", "field", "value")


def _loan_term_suggestion(value) -> str:
    try:
        short = float(value) < 12
    except (TypeError, ValueError):
        short = False
    if short:
        return (
            "Did you mean to enter years instead of months? "
            "A typical mortgage is 15-30 years (180-360 months)"
        )
    return "Loan terms are typically between 1 and 40 years (12-480 months)"


ERROR_MESSAGES: Dict[ErrorCode, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    ErrorCode.VALIDATION_FAILED: lambda p: {
        "message": "Input validation failed",
        "user_message": "Please check your input values",
        "suggestion": "Review the highlighted fields and ensure all values are within acceptable ranges",
    },
    ErrorCode.INVALID_INTEREST_RATE: lambda p: {
        "message": f"Invalid interest rate: {p.get('value')}",
        "user_message": "The interest rate appears to be invalid",
        "suggestion": "Interest rates should be between 0.1% and 30%. For example, enter 6.5 for 6.5%",
        "field": "interestRate",
    },
    ErrorCode.INVALID_LOAN_TERM: lambda p: {
        "message": f"Invalid loan term: {p.get('value')} months",
        "user_message": "The loan term seems unusually short or long",
        "suggestion": _loan_term_suggestion(p.get("value")),
        "field": "loanTerm",
    },
    ErrorCode.INVALID_PAYMENT: lambda p: {
        "message": f"Invalid payment amount: {p.get('value')}",
        "user_message": "The payment amount appears to be invalid",
        "suggestion": (
            "Please enter a valid monthly payment amount. This should be a positive number "
            "representing your current monthly mortgage payment."
        ),
        "field": "monthlyPayment",
    },
    ErrorCode.NEGATIVE_AMORTIZATION: lambda p: {
        "message": (
            f"Monthly payment (${p.get('payment')}) is less than monthly interest (${p.get('interest')})"
        ),
        "user_message": "Your monthly payment is too low to cover the interest",
        "suggestion": (
            "This would cause your loan balance to increase over time. Please check:\n"
            "• Your monthly payment amount\n• Your interest rate\n• Your remaining loan term"
        ),
        "field": "monthlyPayment",
    },
    ErrorCode.INSUFFICIENT_PAYMENT: lambda p: {
        "message": "Monthly payment insufficient to pay off loan",
        "user_message": "The monthly payment is too low for the loan terms",
        "suggestion": (
            "Based on your balance and interest rate, the minimum payment should be at least "
            f"${p.get('min_payment')}"
        ),
        "field": "monthlyPayment",
    },
    ErrorCode.HELOC_EXCEEDS_LIMIT: lambda p: {
        "message": "HELOC usage would exceed credit limit",
        "user_message": "The HELOC strategy would require more credit than available",
        "suggestion": (
            "Consider:\n• Increasing your HELOC limit\n• Reducing your monthly discretionary income\n"
            "• Using a smaller initial HELOC draw"
        ),
    },
    ErrorCode.INSUFFICIENT_DISCRETIONARY: lambda p: {
        "message": "Insufficient discretionary income for HELOC strategy",
        "user_message": "Your discretionary income is too low for the HELOC acceleration strategy",
        "suggestion": (
            "The HELOC strategy requires positive discretionary income. Try:\n"
            "• Reducing your monthly expenses\n• Increasing your income\n"
            "• Considering a traditional payoff approach"
        ),
        "field": "monthlyDiscretionaryIncome",
    },
    ErrorCode.UNDERWATER_MORTGAGE: lambda p: {
        "message": "Mortgage balance exceeds property value",
        "user_message": "Your mortgage balance is higher than your property value",
        "suggestion": (
            "This is common and doesn't prevent using the calculator. However, you may have "
            "limited HELOC options until you build more equity."
        ),
    },
    ErrorCode.CALCULATION_OVERFLOW: lambda p: {
        "message": "Calculation resulted in overflow",
        "user_message": "The calculation produced numbers too large to process",
        "suggestion": (
            "Please check your input values, particularly:\n"
            "• Loan balance (should be in dollars, not cents)\n"
            "• Interest rates (should be percentages, like 6.5 for 6.5%)"
        ),
    },
    ErrorCode.INVALID_CALCULATION_INPUT: lambda p: {
        "message": f"Invalid calculation input: {p.get('field')}",
        "user_message": "One or more calculation inputs are invalid",
        "suggestion": "Please review your inputs and ensure all required fields are filled correctly.",
        "field": p.get("field"),
    },
    ErrorCode.DATABASE_ERROR: lambda p: {
        "message": "Database operation failed",
        "user_message": "Unable to save or retrieve data",
        "suggestion": "Please try again. If the problem persists, your data is safe in local storage.",
    },
    ErrorCode.AUTHENTICATION_REQUIRED: lambda p: {
        "message": "Authentication required",
        "user_message": "Please sign in to continue",
        "suggestion": 'You need to be logged in to use this feature. Click "Sign In" to continue.',
    },
    ErrorCode.RATE_LIMIT_EXCEEDED: lambda p: {
        "message": "Rate limit exceeded",
        "user_message": "Too many calculations in a short time",
        "suggestion": "Please wait a moment before trying again. The limit resets every minute.",
    },
    ErrorCode.INTERNAL_ERROR: lambda p: {
        "message": "Internal server error",
        "user_message": "Something went wrong on our end",
        "suggestion": "Please try again. If the issue persists, try refreshing the page.",
    },
}

# Codes whose templates take no parameters; caller overrides are ignored.
_FIXED = {
    ErrorCode.DATABASE_ERROR,
    ErrorCode.AUTHENTICATION_REQUIRED,
    ErrorCode.RATE_LIMIT_EXCEEDED,
    ErrorCode.INTERNAL_ERROR,
}


def create_error_response(code, **params) -> ErrorDetails:
    """Build :class:`ErrorDetails` for ``code``.

    ``params`` feed the template text (``value``, ``payment``, ``interest``,
    ``min_payment``, ``field``) and any of ``message``, ``user_message``,
    ``suggestion``, ``field`` or ``value`` replace the template default.
    Unknown codes fall back to ``INTERNAL_ERROR``.
    """

    try:
        code = ErrorCode(code)
    except ValueError:
        code = ErrorCode.INTERNAL_ERROR
    fields = ERROR_MESSAGES[code](params)
    if code not in _FIXED:
        fields.update({k: v for k, v in params.items() if k in _OVERRIDABLE})
    return ErrorDetails(code=code, **fields)


_PAYMENT_RE = re.compile(r"\$(\d+\.?\d*)")
_INTEREST_RE = re.compile(r"interest \(\$(\d+\.?\d*)")


def extract_error_details(error: BaseException) -> ErrorDetails:
    """Map any exception onto the taxonomy."""

    if isinstance(error, CalculationError):
        return error.details

    text = str(error)
    if "Monthly payment" in text and "less than monthly interest" in text:
        payment = _PAYMENT_RE.search(text)
        interest = _INTEREST_RE.search(text)
        return create_error_response(
            ErrorCode.NEGATIVE_AMORTIZATION,
            payment=payment.group(1) if payment else None,
            interest=interest.group(1) if interest else None,
        )
    if "Authentication required" in text:
        return create_error_response(ErrorCode.AUTHENTICATION_REQUIRED)
    if "Rate limit" in text:
        return create_error_response(ErrorCode.RATE_LIMIT_EXCEEDED)
    return create_error_response(ErrorCode.INTERNAL_ERROR)
