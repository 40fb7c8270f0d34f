"""TCP client."""
import json
from pathlib import Path
import socket
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import CalculationRequest


class CalculatorClient(BaseModel):
    """
    TCP client responsible for sending expressions to the calculator server and receiving results.

    The TCP client:
    - wraps each expression into a JSON calculation request, one per line
    - sends the requests to the server over a TCP socket
    - receives one JSON response per request, in request order
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")

    def _exchange(self, payload: bytes) -> bytes:
        """
        Send a payload, signal end of input and read the whole reply.

        :param bytes payload: Newline-delimited JSON requests

        :return: Raw server reply
        :rtype: bytes
        """
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.connect((str(self.host), self.port))
            s.sendall(payload)
            # Signal that no more data will be sent
            s.shutdown(socket.SHUT_WR)

            chunks: List[bytes] = []
            while True:
                # An empty chunk means the server closed the connection
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)

    def calculate_many(self, expressions: List[str]) -> List[Dict[str, Any]]:
        """
        Evaluate several expressions in a single round trip.

        :param List[str] expressions: Arithmetic expressions

        :return: One response body per expression, ``{"result": ...}`` or ``{"error": ...}``
        :rtype: List[Dict[str, Any]]
        """
        payload = "".join(
            CalculationRequest(expression=expr).model_dump_json() + "\n" for expr in expressions
        )
        reply = self._exchange(payload.encode())
        return [json.loads(line) for line in reply.decode().splitlines() if line.strip()]

    def calculate(self, expression: str) -> Dict[str, Any]:
        """Evaluate a single expression on the server and return its response body."""
        return self.calculate_many([expression])[0]

    def send_file(self, input_file: Path, output_file: Path) -> None:
        """
        Evaluate every non-empty line of a text file and write the results to an output file.

        Each output line is either ``<expression> = <result>`` or
        ``<expression> -> ERROR: <message>``.

        :param Path input_file: Text file with one expression per line
        :param Path output_file: Path where results will be written

        :return: None
        """
        expressions = [line.strip() for line in input_file.read_text().splitlines() if line.strip()]
        logger.info(f"📄 Sending {len(expressions)} expression(s) from {input_file}")
        responses = self.calculate_many(expressions)

        with output_file.open("w", encoding="utf-8") as f_out:
            for expr, response in zip(expressions, responses):
                if "result" in response:
                    f_out.write(f"{expr} = {response['result']}\n")
                else:
                    f_out.write(f"{expr} -> ERROR: {response['error']}\n")
        logger.info(f"📄 Results written to {output_file}")
