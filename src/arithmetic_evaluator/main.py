"""
Command-line entrypoint.

Commands:
- ``eval EXPRESSION``: evaluate an expression locally and print the result
- ``serve``: run the calculator server until interrupted
- ``run FILE``: start a server process, send a file of expressions through the
  client and write the results next to the input file (used by CI)
"""

import argparse
from multiprocessing import Process
from pathlib import Path
import sys
import time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, FilePath, IPvAnyAddress, ValidationError

from arithmetic_evaluator.client.client import CalculatorClient
from arithmetic_evaluator.common.errors import EvaluationError
from arithmetic_evaluator.common.evaluator import evaluate
from arithmetic_evaluator.common.models import GENERIC_ERROR_MESSAGE
from arithmetic_evaluator.server.server import CalculatorServer


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    command : str
        Sub-command to execute.
    expression : str, optional
        Expression evaluated by the ``eval`` command.
    file_path : FilePath, optional
        Path to the file containing expressions, for the ``run`` command.
    host : IPvAnyAddress
        Server host address.
    port : int
        Server TCP port.
    """

    command: Literal["eval", "serve", "run"]
    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    host: IPvAnyAddress = Field(default="127.0.0.1")
    port: int = Field(default=9000, ge=1, le=65535)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="arithmetic-evaluator",
        description="Evaluate arithmetic expressions locally or over TCP",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    eval_parser = subparsers.add_parser("eval", help="Evaluate one expression and print the result")
    eval_parser.add_argument("expression", help="Arithmetic expression, e.g. '(1 + 2) * 3'")

    for name, help_text in (("serve", "Run the calculator server"), ("run", "Evaluate a file through a server")):
        sub = subparsers.add_parser(name, help=help_text)
        if name == "run":
            sub.add_argument("file_path", help="Path to the file containing one expression per line")
        sub.add_argument("--host", default="127.0.0.1", help="Server host address")
        sub.add_argument("--port", type=int, default=9000, help="Server TCP port")

    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param argv: Arguments to parse, defaults to sys.argv
    :type argv: List[str] or None

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        return CliArgs(**vars(args))
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.txt
    output: resources/operations_txt_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def run_server(host: str, port: int) -> None:
    """
    Start the calculator server for a single client.

    The server runs in its own process and listens
    for incoming socket connections.
    """
    server = CalculatorServer(host=host, port=port)
    server.start()


def run_eval(expression: str) -> int:
    """Evaluate an expression, print the result and return the exit status."""
    try:
        result = evaluate(expression)
    except EvaluationError as exc:
        print(f"{GENERIC_ERROR_MESSAGE} ({exc.kind}: {exc})", file=sys.stderr)
        return 1
    print(result)
    return 0


def run_file(cli_args: CliArgs) -> int:
    """Start a server process, send the input file and write the results."""
    input_path: Path = Path(cli_args.file_path)
    output_path: Path = build_output_path(input_path)

    server_process = Process(target=run_server, args=(str(cli_args.host), cli_args.port))
    server_process.start()

    # Give the server time to start listening
    time.sleep(1)

    try:
        client = CalculatorClient(host=cli_args.host, port=cli_args.port)
        client.send_file(input_path, output_path)
    finally:
        # Ensure the server is always stopped
        server_process.terminate()
        server_process.join()
    print(output_path)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the console script, CI or Docker.
    """
    cli_args = parse_args(argv)

    if cli_args.command == "eval":
        return run_eval(cli_args.expression)
    if cli_args.command == "serve":
        CalculatorServer(host=cli_args.host, port=cli_args.port).serve_forever()
        return 0
    return run_file(cli_args)


if __name__ == "__main__":
    sys.exit(main())
