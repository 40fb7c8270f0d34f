"""Parse and evaluate arithmetic expressions safely."""
import math
from typing import List, Sequence

from arithmetic_evaluator.common.errors import (
    InvalidCharacterError,
    MalformedExpressionError,
    NumericOverflowError,
    UnmatchedParenthesisError,
)
from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.operators import MAX_INTEGER_DIGITS, OPERATORS, Number, is_operator

# A token is either a parsed numeric literal or a single-character symbol
Token = Number | str

LITERAL_CHARS = frozenset("0123456789.")
OPEN_PAREN = "("
CLOSE_PAREN = ")"


class ExpressionEvaluator:
    """
    Evaluate arithmetic expressions with +, -, *, / and parentheses.

    Design constraints:
        - No eval(), no dynamic code execution
        - Stateless: every call owns its token list and stacks

    Algorithm:
        1. Normalize: drop all whitespace
        2. Tokenize: group digit runs into numbers, keep any other character as a token
        3. Resolve parentheses: repeatedly evaluate the innermost group (last '(' and
           the first ')' after it) and splice its value back into the token list
        4. Evaluate the remaining flat expression with the Shunting-yard algorithm,
           applying operators directly from an operator stack onto an operand stack

    Examples:
        - 1 + 2 * 3 -> 7
        - (1 + 2) * 3 -> 9
        - 10 - 3 - 2 -> 5 (left-associative)
    """

    @staticmethod
    def normalize(expr: str) -> str:
        """
        Remove every whitespace character from an expression.

        :param str expr: Raw arithmetic expression

        :return: Expression without whitespace
        :rtype: str
        """
        return "".join(expr.split())

    @staticmethod
    def _parse_literal(literal: str) -> Number:
        """
        Convert a run of digits (and decimal points) into a number.

        :param str literal: Numeric literal

        :return: int for plain digit runs, float when a decimal point is present
        :rtype: Number
        :raises MalformedExpressionError: If the literal is not a valid number (e.g. "1.2.3")
        :raises NumericOverflowError: If the literal has more than MAX_INTEGER_DIGITS digits
        """
        if len(literal.lstrip("0").split(".")[0]) > MAX_INTEGER_DIGITS:
            raise NumericOverflowError(f"Number literal exceeds {MAX_INTEGER_DIGITS} digits")
        if "." not in literal:
            return int(literal)
        try:
            value = float(literal)
        except ValueError:
            raise MalformedExpressionError(f"Invalid number literal: {literal!r}") from None
        if math.isinf(value):
            raise NumericOverflowError(f"Number literal out of range: {literal[:20]}...")
        return value

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split a whitespace-free expression into tokens.

        Consecutive digits form one numeric literal. Every other character,
        recognized or not, becomes its own token; unknown ones are rejected later
        by the flat evaluation.

        :param str expr: Normalized arithmetic expression

        :return: List of numbers and single-character symbols
        :rtype: List[Token]
        """
        tokens: List[Token] = []
        literal = ""
        for char in expr:
            if char in LITERAL_CHARS:
                literal += char
                continue
            if literal:
                tokens.append(ExpressionEvaluator._parse_literal(literal))
                literal = ""
            tokens.append(char)

        if literal:
            tokens.append(ExpressionEvaluator._parse_literal(literal))
        return tokens

    @staticmethod
    def _apply_top(operands: List[Number], operators: List[str]) -> None:
        """
        Pop one operator and two operands, push the result.

        The right-hand operand is on top of the stack, so it is popped first.

        :param list operands: Operand stack
        :param list operators: Operator stack (must not be empty)
        :raises MalformedExpressionError: If fewer than two operands are available
        """
        symbol = operators.pop()
        if len(operands) < 2:
            raise MalformedExpressionError(f"Invalid expression (not enough operands for {symbol!r})")
        right: Number = operands.pop()
        left: Number = operands.pop()
        operands.append(OPERATORS[symbol].apply(left, right))

    @staticmethod
    def evaluate_flat(expr: str | Sequence[Token]) -> Number:
        """
        Evaluate an expression without parentheses.

        :param expr: Flat expression, either as a string or as tokens
        :type expr: str or Sequence[Token]

        :return: Computed value
        :rtype: Number
        :raises InvalidCharacterError: If a token is neither a number nor an operator
        :raises MalformedExpressionError: If operands and operators do not line up
        :raises DivisionByZeroError: If a division by zero is attempted
        """
        if isinstance(expr, str):
            expr = ExpressionEvaluator.tokenize(expr)

        operands: List[Number] = []
        operators: List[str] = []

        for token in expr:
            if not isinstance(token, str):
                operands.append(token)
            elif is_operator(token):
                # Apply pending operators binding at least as tightly (left-associativity)
                precedence = OPERATORS[token].precedence
                while operators and OPERATORS[operators[-1]].precedence >= precedence:
                    ExpressionEvaluator._apply_top(operands, operators)
                operators.append(token)
            else:
                raise InvalidCharacterError(token)

        while operators:
            ExpressionEvaluator._apply_top(operands, operators)

        if len(operands) != 1:
            raise MalformedExpressionError(
                f"Invalid expression (expected one result, got {len(operands)} operands)"
            )
        return operands[0]

    @staticmethod
    def resolve_parentheses(tokens: Sequence[Token]) -> Number:
        """
        Evaluate a tokenized expression, innermost parenthesized group first.

        The last '(' always opens an innermost group, so the first ')' after it
        closes that same group. Each pass removes exactly one '(' which bounds the
        number of passes.

        :param Sequence[Token] tokens: Tokenized expression

        :return: Computed value
        :rtype: Number
        :raises UnmatchedParenthesisError: If a '(' has no matching ')'
        """
        working: List[Token] = list(tokens)

        while True:
            opens = [i for i, token in enumerate(working) if token == OPEN_PAREN]
            if not opens:
                return ExpressionEvaluator.evaluate_flat(working)
            start = opens[-1]

            try:
                end = working.index(CLOSE_PAREN, start + 1)
            except ValueError:
                raise UnmatchedParenthesisError("Unmatched parentheses") from None

            value = ExpressionEvaluator.evaluate_flat(working[start + 1:end])
            logger.debug(f"🧮 Resolved group at token {start}: {value}")
            working[start:end + 1] = [value]

    @staticmethod
    def evaluate(expr: str) -> Number:
        """
        Evaluate an arithmetic expression safely.

        :param str expr: Arithmetic expression string

        :return: Computed value (int unless a division or decimal literal is involved)
        :rtype: Number
        :raises EvaluationError: If the expression is invalid or cannot be computed
        """
        tokens: List[Token] = ExpressionEvaluator.tokenize(ExpressionEvaluator.normalize(expr))
        return ExpressionEvaluator.resolve_parentheses(tokens)


def evaluate(expression: str) -> Number:
    """Evaluate an arithmetic expression, see ExpressionEvaluator.evaluate."""
    return ExpressionEvaluator.evaluate(expression)
