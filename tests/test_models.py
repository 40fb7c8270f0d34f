"""Test classes CalculationRequest, CalculationResult and CalculationError."""
from pydantic import ValidationError
import pytest

from arithmetic_evaluator.common.models import (
    GENERIC_ERROR_MESSAGE,
    CalculationError,
    CalculationRequest,
    CalculationResult,
)


def test_calculation_request_valid() -> None:
    """Test that a valid CalculationRequest can be created."""
    req = CalculationRequest(expression="2 + 2 * 3")
    assert req.expression == "2 + 2 * 3"


def test_calculation_request_invalid_type() -> None:
    """Test that non-string expressions raise a validation error."""
    with pytest.raises(ValidationError):
        # int instead of str
        CalculationRequest(expression=123)


def test_calculation_request_missing_expression() -> None:
    """Test that a request without expression is rejected."""
    with pytest.raises(ValidationError):
        CalculationRequest.model_validate({"formula": "1+1"})


def test_calculation_result_keeps_int() -> None:
    """Test that integer results are not coerced to float."""
    res = CalculationResult(result=9)
    assert res.model_dump() == {"result": 9}
    assert isinstance(res.result, int)


def test_calculation_result_float() -> None:
    """Test that float results are kept as float."""
    assert CalculationResult(result=3.5).result == 3.5


def test_calculation_result_invalid_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        CalculationResult(result="not a number")


def test_calculation_error_default_message() -> None:
    """Test that the error body defaults to the generic message."""
    assert CalculationError().model_dump() == {"error": GENERIC_ERROR_MESSAGE}
