"""Worker process for evaluating calculation requests."""
from multiprocessing.connection import Connection
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import CalculationError
from arithmetic_evaluator.server.controller import BadRequestError, calculate


class CalculationWorker(BaseModel):
    """
    Worker responsible for answering a single calculation request.

    Lifecycle:
        - Spawned by the parent server process
        - Receives one raw request line only
        - Sends the response body through a Pipe, tagged with its line number
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending the response back to the server")
    request: str = Field(..., description="Raw JSON request line")
    line_number: int = Field(..., ge=1, description="Position of the request in the client stream")

    @field_validator("request")
    def request_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the request line is not empty."""
        if not v.strip():
            raise ValueError("Request cannot be empty")
        return v

    def build_response(self) -> Dict[str, Any]:
        """
        Compute the response body for the request.

        :return: ``{"result": ...}`` on success, ``{"error": ...}`` otherwise
        :rtype: Dict[str, Any]
        """
        try:
            return calculate(self.request).model_dump()
        except BadRequestError as exc:
            return exc.to_response().model_dump()
        except Exception as exc:
            logger.exception(f"👷❌ Unexpected failure on line {self.line_number}: {exc}")
            return CalculationError().model_dump()

    def run(self) -> None:
        """
        Answer the request and send the response through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.request}")
        response: Dict[str, Any] = {}
        try:
            response = self.build_response()
            self.conn.send({"line": self.line_number, "response": response})
        finally:
            # Always close the connection
            self.conn.close()

        if "result" in response:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {response['result']}")
        else:
            logger.info(f"👷⚠️ Worker rejected line {self.line_number}")
