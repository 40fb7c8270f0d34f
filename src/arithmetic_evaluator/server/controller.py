"""Translate raw calculation requests into results or client-facing errors."""
from typing import Any

from pydantic import ValidationError

from arithmetic_evaluator.common.errors import EvaluationError
from arithmetic_evaluator.common.evaluator import evaluate
from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import (
    GENERIC_ERROR_MESSAGE,
    CalculationError,
    CalculationRequest,
    CalculationResult,
)


class BadRequestError(Exception):
    """
    Request rejected by the calculator.

    The message is the generic client-facing one; the specific failure category
    stays available in ``kind`` for diagnostics.
    """

    def __init__(self, kind: str, message: str = GENERIC_ERROR_MESSAGE) -> None:
        self.kind = kind
        super().__init__(message)

    def to_response(self) -> CalculationError:
        """Build the response body sent back to the client."""
        return CalculationError(error=str(self))


def calculate(payload: str | bytes | dict[str, Any]) -> CalculationResult:
    """
    Validate a request payload and evaluate its expression.

    :param payload: JSON document or already-decoded mapping with an ``expression`` field
    :type payload: str, bytes or dict

    :return: Result model for the evaluated expression
    :rtype: CalculationResult
    :raises BadRequestError: If the payload is invalid or the expression cannot be evaluated
    """
    try:
        if isinstance(payload, dict):
            request = CalculationRequest.model_validate(payload)
        else:
            request = CalculationRequest.model_validate_json(payload)
    except ValidationError as exc:
        logger.warning(f"📨❌ Rejected malformed request: {exc.error_count()} validation error(s)")
        raise BadRequestError("invalid_request") from exc

    try:
        result = evaluate(request.expression)
    except EvaluationError as exc:
        logger.warning(f"🧮❌ [{exc.kind}] {exc} in {request.expression!r}")
        raise BadRequestError(exc.kind) from exc

    return CalculationResult(result=result)
