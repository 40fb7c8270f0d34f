"""Unit tests for CalculationWorker using real Pipe connections."""
import json
from multiprocessing import Pipe

import pytest

from arithmetic_evaluator.common.models import GENERIC_ERROR_MESSAGE
from arithmetic_evaluator.server.worker import CalculationWorker


def _request(expression: str) -> str:
    return json.dumps({"expression": expression})


@pytest.mark.parametrize(
    "expr,expected",
    [
        ("2 + 3", 5),
        ("10 - 4", 6),
        ("3 * (4 + 1)", 15),
        ("8 / 2", 4.0),
    ],
)
def test_worker_sends_result_for_valid_expression(expr: str, expected: float) -> None:
    """Worker sends computed result through the connection for valid expressions."""
    parent_conn, child_conn = Pipe()
    worker = CalculationWorker(conn=child_conn, request=_request(expr), line_number=1)
    worker.run()

    msg = parent_conn.recv()
    assert msg == {"line": 1, "response": {"result": expected}}


@pytest.mark.parametrize(
    "request_line",
    [
        _request("2 +"),        # Trailing operator
        _request("+ 3 4"),      # Leading operator
        _request("1 / 0"),      # Division by zero
        _request("(1 + 2"),     # Unmatched parenthesis
        '{"expression": 3}',    # Not a string
        "garbage",              # Not JSON
    ],
)
def test_worker_sends_error_for_invalid_request(request_line: str) -> None:
    """Worker sends the generic error for any rejected request."""
    parent_conn, child_conn = Pipe()
    worker = CalculationWorker(conn=child_conn, request=request_line, line_number=2)
    worker.run()

    msg = parent_conn.recv()
    assert msg == {"line": 2, "response": {"error": GENERIC_ERROR_MESSAGE}}


def test_worker_closes_connection() -> None:
    """The child end of the pipe is closed once the response is sent."""
    _, child_conn = Pipe()
    CalculationWorker(conn=child_conn, request=_request("1+1"), line_number=1).run()
    assert child_conn.closed


def test_worker_rejects_empty_request() -> None:
    """Pydantic validation prevents creating CalculationWorker with empty request."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        CalculationWorker(conn=child_conn, request="  ", line_number=1)


def test_worker_rejects_invalid_line_number() -> None:
    """Line numbers start at 1."""
    _, child_conn = Pipe()
    with pytest.raises(ValueError):
        CalculationWorker(conn=child_conn, request=_request("1"), line_number=0)
