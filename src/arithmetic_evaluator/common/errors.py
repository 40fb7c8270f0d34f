"""Errors raised while evaluating arithmetic expressions."""


class EvaluationError(ValueError):
    """
    Base class for every failure of the expression evaluator.

    Subclasses ``ValueError`` so callers catching ``ValueError`` for bad
    expressions keep working.

    :cvar str kind: Machine-readable failure category, used for diagnostics
    """

    kind: str = "evaluation_error"


class UnmatchedParenthesisError(EvaluationError):
    """An opening parenthesis has no matching closing parenthesis."""

    kind = "unmatched_parenthesis"


class InvalidCharacterError(EvaluationError):
    """A flat expression contains a character that is neither a digit nor an operator."""

    kind = "invalid_character"

    def __init__(self, character: str) -> None:
        self.character = character
        super().__init__(f"Invalid character in expression: {character!r}")


class MalformedExpressionError(EvaluationError):
    """Operands and operators do not line up (empty input, dangling or doubled operator...)."""

    kind = "malformed_expression"


class DivisionByZeroError(EvaluationError):
    """A division was attempted with a zero divisor."""

    kind = "division_by_zero"

    def __init__(self, message: str = "Division by zero") -> None:
        super().__init__(message)


class NumericOverflowError(EvaluationError):
    """A literal or an intermediate result is too large to be represented."""

    kind = "numeric_overflow"
