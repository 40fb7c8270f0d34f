"""Operator table shared by every evaluation."""
import math
import operator
from types import MappingProxyType
from typing import Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from arithmetic_evaluator.common.errors import DivisionByZeroError, NumericOverflowError

# Numeric type produced by the evaluator
Number = int | float

# Largest integer accepted, kept below the interpreter's int/str conversion limit
MAX_INTEGER_DIGITS = 4000
MAX_INTEGER_BITS = 13_287  # floor(MAX_INTEGER_DIGITS * log2(10))

# Type alias for operator functions (taking two numbers, returning a number)
OperatorFn = Callable[[Number, Number], Number]


def _divide(a: Number, b: Number) -> float:
    """True division refusing a zero divisor."""
    if b == 0:
        raise DivisionByZeroError()
    return operator.truediv(a, b)


class Operator(BaseModel):
    """
    Binary infix operator: a precedence level and the pure function applying it.

    Instances are immutable so the shared table cannot be altered by an evaluation.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, max_length=1, description="Single-character operator symbol")
    precedence: int = Field(..., ge=1, description="Binding strength, higher binds tighter")
    function: OperatorFn = Field(..., description="Binary function computing the result")
    fallible: bool = Field(default=False, description="Whether applying the operator may raise")

    def apply(self, left: Number, right: Number) -> Number:
        """
        Apply the operator to two operands.

        :param Number left: Left-hand operand
        :param Number right: Right-hand operand

        :return: Result of the operation
        :rtype: Number
        :raises DivisionByZeroError: If the operator is a division by zero
        :raises NumericOverflowError: If the result cannot be represented
        """
        try:
            result = self.function(left, right)
        except OverflowError as exc:
            raise NumericOverflowError(f"Result of {self.symbol!r} is out of range") from exc
        if isinstance(result, int) and result.bit_length() > MAX_INTEGER_BITS:
            raise NumericOverflowError(f"Result of {self.symbol!r} exceeds {MAX_INTEGER_DIGITS} digits")
        if isinstance(result, float) and math.isinf(result):
            raise NumericOverflowError(f"Result of {self.symbol!r} is out of range")
        return result


# Mapping of operator symbols to Operator, read-only once built
OPERATORS: Mapping[str, Operator] = MappingProxyType(
    {
        op.symbol: op
        for op in (
            Operator(symbol="+", precedence=1, function=operator.add),
            Operator(symbol="-", precedence=1, function=operator.sub),
            Operator(symbol="*", precedence=2, function=operator.mul),
            Operator(symbol="/", precedence=2, function=_divide, fallible=True),
        )
    }
)


def is_operator(token: object) -> bool:
    """Return True if the token is one of the supported operator symbols."""
    return isinstance(token, str) and token in OPERATORS
