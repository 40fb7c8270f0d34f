"""Test class CalculatorClient."""
import json
import socket

from pydantic import ValidationError
import pytest

from arithmetic_evaluator.client.client import CalculatorClient
from arithmetic_evaluator.common.models import GENERIC_ERROR_MESSAGE


class FakeSocket:
    """Fake socket recording what is sent and replaying a canned reply."""

    def __init__(self, reply: bytes):
        self.reply = reply
        self.sent = b""
        self.address = None
        self.shut = False
        self.calls = 0

    def connect(self, addr):
        self.address = addr

    def sendall(self, data):
        self.sent += data

    def shutdown(self, how):
        self.shut = how == socket.SHUT_WR

    def recv(self, size):
        self.calls += 1
        if self.calls == 1:
            return self.reply
        return b""

    def close(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass


@pytest.fixture
def fake_socket(monkeypatch):
    """Patch socket.socket with a FakeSocket answering two responses."""
    reply = (json.dumps({"result": 2}) + "\n" + json.dumps({"error": GENERIC_ERROR_MESSAGE}) + "\n").encode()
    fake = FakeSocket(reply)
    monkeypatch.setattr(socket, "socket", lambda *a, **kw: fake)
    return fake


def test_client_valid_config() -> None:
    """Check that a valid host and port correctly initialize the client."""
    client = CalculatorClient(host="127.0.0.1", port=9000)
    assert str(client.host) == "127.0.0.1"
    assert client.port == 9000


def test_client_invalid_ip() -> None:
    """Ensure invalid IP addresses raise a ValidationError."""
    with pytest.raises(ValidationError):
        CalculatorClient(host="999.999.999.999", port=9000)


def test_client_invalid_port() -> None:
    """Ensure ports outside valid range raise a ValidationError."""
    with pytest.raises(ValidationError):
        CalculatorClient(host="127.0.0.1", port=70000)


def test_client_is_frozen() -> None:
    """The network configuration cannot change after creation."""
    client = CalculatorClient()
    with pytest.raises(ValidationError):
        client.port = 9001


def test_calculate_many_sends_json_lines(fake_socket) -> None:
    """calculate_many sends one JSON request per line and parses the replies."""
    client = CalculatorClient(port=9100)
    responses = client.calculate_many(["1+1", "1/0"])

    assert fake_socket.address == ("127.0.0.1", 9100)
    assert fake_socket.shut
    sent = [json.loads(line) for line in fake_socket.sent.decode().splitlines()]
    assert sent == [{"expression": "1+1"}, {"expression": "1/0"}]
    assert responses == [{"result": 2}, {"error": GENERIC_ERROR_MESSAGE}]


def test_calculate_single(fake_socket) -> None:
    """calculate returns the first response body."""
    assert CalculatorClient().calculate("1+1") == {"result": 2}


def test_send_file_writes_results(tmp_path, fake_socket) -> None:
    """send_file writes one result or error line per expression."""
    input_file = tmp_path / "ops.txt"
    output_file = tmp_path / "results.txt"
    input_file.write_text("1+1\n\n1/0\n")

    CalculatorClient().send_file(input_file, output_file)

    assert output_file.read_text() == f"1+1 = 2\n1/0 -> ERROR: {GENERIC_ERROR_MESSAGE}\n"
