"""TCP server answering calculation requests using worker processes."""
import json
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
import socket
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, IPvAnyAddress

from arithmetic_evaluator.common.logger import logger
from arithmetic_evaluator.common.models import CalculationError
from arithmetic_evaluator.server.worker import CalculationWorker


class CalculatorServer(BaseModel):
    """
    TCP socket server answering newline-delimited JSON calculation requests.

    Protocol:
        - The client sends one ``{"expression": "..."}`` document per line, then
          shuts down its write side.
        - The server answers with one JSON document per non-empty request line,
          in request order: ``{"result": ...}`` or ``{"error": "..."}``.

    Features:
        - Evaluates each request in its own short-lived worker process.
        - Keeps at most ``max_workers`` workers alive at once.
    """

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Worker limit, defaults to CPU count")

    def _receive_data(self, conn: socket.socket) -> List[str]:
        """
        Receive all data from the client connection and return non-empty lines.

        :param socket.socket conn: Connected client socket

        :return: List of non-empty request lines
        :rtype: List[str]
        """
        # Note: data may arrive split across several TCP packets
        chunks: List[bytes] = []
        while True:
            chunk: bytes = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
        # Undecodable bytes become U+FFFD, so the affected line is answered with an error
        data: List[str] = b"".join(chunks).decode(errors="replace").splitlines()
        return [line.strip() for line in data if line.strip()]

    def _spawn_worker(self, request: str, line_number: int) -> Tuple[Process, Connection]:
        """
        Spawn a CalculationWorker for the given request and return process and pipe.

        :param str request: Raw JSON request line
        :param int line_number: Position of the request in the client stream

        :return: Tuple of (Process, parent_pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe()
        worker = CalculationWorker(conn=child_conn, request=request, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection]], responses: Dict[int, Dict[str, Any]]
    ) -> None:
        """
        Collect responses from all workers that have sent one.

        Finished workers are removed from the active_workers list.

        :param list active_workers: List of tuples (Process, Pipe)
        :param dict responses: Responses collected so far, keyed by line number
        """
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if pipe_conn.poll(0.01):
                try:
                    payload = pipe_conn.recv()
                    responses[payload["line"]] = payload["response"]
                except EOFError:
                    # Worker died before answering, its line is filled in by process_requests
                    logger.error(f"👷❌ Worker {proc.name} exited without a response")
                pipe_conn.close()
                proc.join()
                active_workers.pop(i)

    def process_requests(self, requests: List[str]) -> List[Dict[str, Any]]:
        """
        Evaluate every request in worker processes and return responses in request order.

        :param List[str] requests: Raw JSON request lines

        :return: Response bodies, one per request
        :rtype: List[Dict[str, Any]]
        """
        if not requests:
            return []

        max_workers: int = min(self.max_workers or cpu_count(), len(requests))
        active_workers: List[Tuple[Process, Connection]] = []
        responses: Dict[int, Dict[str, Any]] = {}

        for line_number, request in enumerate(requests, start=1):
            # Wait until a worker slot is available
            while len(active_workers) >= max_workers:
                self._collect_finished_workers(active_workers, responses)

            active_workers.append(self._spawn_worker(request, line_number))

        # Collect remaining active workers
        while active_workers:
            self._collect_finished_workers(active_workers, responses)

        return [
            responses.get(line_number, CalculationError().model_dump())
            for line_number in range(1, len(requests) + 1)
        ]

    def handle_client(self, conn: socket.socket) -> None:
        """
        Read all requests from one client, answer them and send the responses back.

        :param socket.socket conn: Connected client socket
        """
        requests: List[str] = self._receive_data(conn)
        logger.info(f"📨 Received {len(requests)} request(s)")
        responses = self.process_requests(requests)
        body = "".join(json.dumps(response) + "\n" for response in responses)
        try:
            conn.sendall(body.encode())
            logger.info("✉️ Responses sent to client")
        except OSError as exc:
            logger.error(f"🔌❌ Client disconnected before receiving responses: {exc}")

    def start(self, max_clients: Optional[int] = 1) -> None:
        """
        Start the TCP server and answer client connections.

        Steps:
            1. Bind and listen on the specified host and port.
            2. Accept a client connection.
            3. Receive all requests until the client shuts down its write side.
            4. Evaluate each request in a worker process, respecting max_workers.
            5. Send the responses back to the client, in request order.
            6. Repeat until max_clients clients were served (forever if None).

        :param max_clients: Number of clients to serve before returning, None for no limit
        :type max_clients: int or None

        :return: None
        """
        logger.info(f"🖥️ Starting server on {self.host}:{self.port}")

        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((str(self.host), self.port))
            s.listen()
            logger.info("🖥️ Server listening")

            served = 0
            while max_clients is None or served < max_clients:
                conn, address = s.accept()
                logger.info(f"🔌 Client connected from {address[0]}:{address[1]}")
                with conn:
                    self.handle_client(conn)
                served += 1

    def serve_forever(self) -> None:
        """Serve clients until the process is interrupted."""
        try:
            self.start(max_clients=None)
        except KeyboardInterrupt:
            logger.info("🖥️ Server stopped")
