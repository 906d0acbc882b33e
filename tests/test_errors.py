import pytest

from heloc.errors import (
    ERROR_MESSAGES,
    CalculationError,
    ErrorCode,
    create_error_response,
    extract_error_details,
)


def test_every_code_has_a_template():
    assert set(ERROR_MESSAGES) == set(ErrorCode)
    assert len(ErrorCode) == 15


def test_template_uses_params():
    details = create_error_response(ErrorCode.NEGATIVE_AMORTIZATION, payment=500, interest=812.5)
    assert details.message == "Monthly payment ($500) is less than monthly interest ($812.5)"
    assert details.user_message == "Your monthly payment is too low to cover the interest"
    assert details.field == "monthlyPayment"


def test_loan_term_suggestion_depends_on_value():
    short = create_error_response(ErrorCode.INVALID_LOAN_TERM, value=5)
    assert "years instead of months" in short.suggestion
    long = create_error_response(ErrorCode.INVALID_LOAN_TERM, value=700)
    assert long.suggestion.startswith("Loan terms are typically")


def test_params_override_defaults():
    details = create_error_response(ErrorCode.INVALID_PAYMENT, value=-3, field="extraPayment")
    assert details.field == "extraPayment"
    assert details.value == -3


def test_unknown_code_falls_back_to_internal_error():
    assert create_error_response("NOT_A_CODE").code == ErrorCode.INTERNAL_ERROR


def test_calculation_error_carries_details():
    exc = CalculationError.from_code(ErrorCode.INVALID_CALCULATION_INPUT, field="propertyValue")
    assert isinstance(exc, ValueError)
    assert str(exc) == "Invalid calculation input: propertyValue"
    assert exc.code == ErrorCode.INVALID_CALCULATION_INPUT
    assert exc.field == "propertyValue"
    assert extract_error_details(exc) == exc.details


def test_extract_negative_amortization_from_message():
    err = RuntimeError("Monthly payment ($900.50) is less than monthly interest ($1083.33)")
    details = extract_error_details(err)
    assert details.code == ErrorCode.NEGATIVE_AMORTIZATION
    assert details.message == "Monthly payment ($900.50) is less than monthly interest ($1083.33)"


@pytest.mark.parametrize(
    "text,code",
    [
        ("Authentication required for this route", ErrorCode.AUTHENTICATION_REQUIRED),
        ("Rate limit hit", ErrorCode.RATE_LIMIT_EXCEEDED),
        ("boom", ErrorCode.INTERNAL_ERROR),
    ],
)
def test_extract_by_message(text, code):
    assert extract_error_details(Exception(text)).code == code
